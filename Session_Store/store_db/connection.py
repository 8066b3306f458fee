import logging
import time
from typing import Any, Callable, Optional

import redis
from redis.backoff import NoBackoff
from redis.retry import Retry

from Session_Store.store_shared import config, errors
from Session_Store.store_shared.settings import Settings

logger = logging.getLogger(__name__)

# Commands whose first argument must never end up in an error message.
_SECRET_ARGS = {"AUTH"}

_TRANSPORT_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError, OSError)


def _as_text(reply: Any) -> Any:
    if isinstance(reply, bytes):
        return reply.decode()
    return reply


class Connection:
    """One exclusively-owned link to Redis.

    Wraps a low-level ``redis.connection.Connection`` and exposes a single
    request/response primitive. A connection that hit a transport error or a
    timeout mid-command is marked ``broken``; its protocol state is unknown so
    the pool closes it instead of reusing it. Any failed command sets
    ``needs_probe`` so the pool pings it before handing it out again.
    """

    def __init__(self, transport: redis.connection.AbstractConnection, address: str):
        self._transport = transport
        self.address = address
        self.created_at = time.monotonic()
        self.last_used = self.created_at
        self.broken = False
        self.closed = False
        self.needs_probe = False

    def execute(self, command: str, *args: Any) -> Any:
        key = args[0] if args and command not in _SECRET_ARGS else None
        if self.closed:
            raise errors.CommandError(command, key, "connection is closed")

        try:
            self._transport.send_command(command, *args)
            reply = self._transport.read_response()
        except redis.exceptions.ResponseError as e:
            self.needs_probe = True
            raise errors.CommandError(command, key, e) from e
        except (*_TRANSPORT_ERRORS, UnicodeDecodeError) as e:
            # A reply that failed to decode may be only partly read off the socket.
            self.broken = True
            self.needs_probe = True
            self._transport.disconnect()
            raise errors.CommandError(command, key, e) from e

        self.last_used = time.monotonic()
        return reply

    def ping(self) -> bool:
        """Liveness probe: only the PONG sentinel counts as alive."""
        try:
            reply = self.execute("PING")
        except errors.CommandError as e:
            logger.debug("ping to %s failed: %s", self.address, e)
            return False

        alive = _as_text(reply) == config.PING_REPLY
        if alive:
            self.needs_probe = False
        return alive

    def idle_for(self, now: Optional[float] = None) -> float:
        return (time.monotonic() if now is None else now) - self.last_used

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._transport.disconnect()


def _make_transport(network: str, address: str, socket_timeout: float, connection_class=None):
    common = {
        "socket_timeout": socket_timeout,
        "decode_responses": True,
        "retry": Retry(NoBackoff(), 0),
    }

    if network == "unix":
        cls = connection_class or redis.connection.UnixDomainSocketConnection
        return cls(path=address, **common)

    host, sep, port = address.rpartition(":")
    if not sep:
        host, port = address, "6379"
    try:
        port_num = int(port)
    except ValueError:
        raise errors.DialError(address, f"invalid port {port!r}")

    cls = connection_class or redis.connection.Connection
    return cls(host=host, port=port_num, socket_connect_timeout=socket_timeout, **common)


def dial(
    network: str,
    address: str,
    password: str = "",
    *,
    socket_timeout: float = config.REDIS_SOCKET_TIMEOUT,
    connection_class=None,
) -> Connection:
    network = network or config.DEFAULT_NETWORK
    address = address or config.DEFAULT_ADDRESS

    transport = _make_transport(network, address, socket_timeout, connection_class)
    try:
        transport.connect()
    except (redis.exceptions.RedisError, OSError) as e:
        transport.disconnect()
        raise errors.DialError(address, e) from e

    conn = Connection(transport, address)
    if password:
        try:
            conn.execute("AUTH", password)
        except errors.CommandError as e:
            conn.close()
            raise errors.DialError(address, "authentication failed") from e

    logger.debug("dialed %s://%s", network, address)
    return conn


def dial_policy(settings: Settings, connection_class=None) -> Callable[[], Connection]:
    """Pick the pool's dial function once, based on whether a database is selected."""

    def _dial() -> Connection:
        return dial(
            settings.network,
            settings.address,
            settings.password,
            socket_timeout=settings.socket_timeout,
            connection_class=connection_class,
        )

    if not settings.database:
        return _dial

    def _dial_and_select() -> Connection:
        conn = _dial()
        try:
            conn.execute("SELECT", settings.database)
        except errors.CommandError as e:
            conn.close()
            raise errors.DialError(settings.address, e) from e
        return conn

    return _dial_and_select
