import functools

import pytest
import fakeredis

from Session_Store.store_shared.settings import Settings
from Session_Store.store_db.connection import dial_policy
from Session_Store.store_db.pool import ConnectionPool
from Session_Store.store_db.store import RedisSessionStore


class ScriptedTransport:
    """Stand-in for a redis-py connection that replays canned replies."""

    def __init__(self, replies=None, connect_error=None, **kwargs):
        self.kwargs = kwargs
        self.replies = list(replies or [])
        self.connect_error = connect_error
        self.sent = []
        self.disconnected = False

    def connect(self):
        if self.connect_error is not None:
            raise self.connect_error

    def send_command(self, *args):
        self.sent.append(args)

    def read_response(self, **kwargs):
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def disconnect(self, *args):
        self.disconnected = True


@pytest.fixture
def server():
    return fakeredis.FakeServer()


@pytest.fixture
def connection_class(server):
    return functools.partial(fakeredis.FakeRedisConnection, server=server)


@pytest.fixture
def redis_client(server):
    r = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield r
    r.flushall()
    r.close()


@pytest.fixture
def settings():
    return Settings(prefix="sess:", max_idle=4, max_active=8, wait_timeout=0.5)


@pytest.fixture
def store(settings, connection_class):
    s = RedisSessionStore(settings, connection_class=connection_class)
    s.init()
    yield s
    s.close()


@pytest.fixture
def make_pool(connection_class):
    pools = []

    def _make(**kwargs):
        dial = dial_policy(Settings().resolve(), connection_class)
        pool = ConnectionPool(dial, **kwargs)
        pools.append(pool)
        return pool

    yield _make
    for pool in pools:
        pool.close()


@pytest.fixture
def scripted():
    """Build a connection_class that hands out one ScriptedTransport."""

    def _make(replies=None, connect_error=None):
        transport = ScriptedTransport(replies, connect_error)

        def factory(**kwargs):
            transport.kwargs = kwargs
            return transport

        return transport, factory

    return _make
