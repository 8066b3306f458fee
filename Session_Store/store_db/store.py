import logging
from typing import Any, Optional

from Session_Store.store_shared import errors
from Session_Store.store_shared.settings import Settings
from Session_Store.store_shared.types import HealthStatus
from Session_Store.store_db.connection import dial_policy
from Session_Store.store_db.pool import ConnectionPool

logger = logging.getLogger(__name__)


def _pairs_to_dict(reply: Any) -> dict[str, str]:
    if isinstance(reply, dict):
        return {str(k): str(v) for k, v in reply.items()}
    if not isinstance(reply, (list, tuple)) or len(reply) % 2:
        raise TypeError(f"unexpected HGETALL reply {type(reply).__name__}")
    it = iter(reply)
    return {str(field): str(value) for field, value in zip(it, it)}


class RedisSessionStore:
    """Session persistence over a pooled Redis client.

    Every operation borrows one connection, issues one command and returns
    the connection to the pool, whether the command succeeded or not. Read
    paths (``exists``, ``read``) never raise: a session that cannot be
    confirmed is treated as absent. Write paths raise ``CommandError``.
    """

    def __init__(self, settings: Optional[Settings] = None, connection_class=None):
        self.settings: Settings = (settings or Settings()).resolve()
        self._connection_class = connection_class
        self._pool: Optional[ConnectionPool] = None
        self.connected = False

    def init(self) -> None:
        """Build the pool and fail fast if Redis cannot be reached."""
        s = self.settings
        pool = ConnectionPool(
            dial_policy(s, self._connection_class),
            max_idle=s.max_idle,
            max_active=s.max_active,
            idle_timeout=s.idle_timeout,
            wait_timeout=s.wait_timeout,
            test_on_borrow_interval=s.test_on_borrow_interval,
        )

        try:
            with pool.connection() as conn:
                alive = conn.ping()
        except errors.SessionStoreError as e:
            pool.close()
            self.connected = False
            raise errors.ConnectionError(s.address, e) from e

        if not alive:
            pool.close()
            self.connected = False
            raise errors.ConnectionError(s.address, "PING did not answer PONG")

        if self._pool is not None:
            self._pool.close()
        self._pool = pool
        self.connected = True
        logger.info("session store connected to %s://%s", s.network, s.address)

    @property
    def pool(self) -> ConnectionPool:
        if self._pool is None or not self.connected:
            raise errors.ConnectionError(self.settings.address, "store is not connected")
        return self._pool

    def key(self, session_id: str) -> str:
        return f"{self.settings.prefix}{session_id}"

    def exists(self, session_id: str) -> bool:
        try:
            with self.pool.connection() as conn:
                reply = conn.execute("EXISTS", self.key(session_id))
        except errors.SessionStoreError as e:
            logger.error("session: redis store - exists error: %s", e)
            return False

        try:
            return int(reply) > 0
        except (TypeError, ValueError):
            return False

    def read(self, session_id: str) -> str:
        try:
            with self.pool.connection() as conn:
                reply = conn.execute("GET", self.key(session_id))
        except errors.SessionStoreError as e:
            logger.error("session: redis store - read error: %s", e)
            return ""

        if reply is None:
            logger.debug("session: redis store - key '%s' doesn't exist", session_id)
            return ""
        if not isinstance(reply, str):
            logger.error("session: redis store - value of '%s' is not a string", session_id)
            return ""
        return reply

    def save(self, session_id: str, value: str) -> None:
        with self.pool.connection() as conn:
            conn.execute("SETEX", self.key(session_id), self.settings.max_age_seconds, value)

    def delete(self, session_id: str) -> None:
        # DEL of a missing key answers 0, which is still a successful delete.
        with self.pool.connection() as conn:
            conn.execute("DEL", self.key(session_id))

    def enumerate_by_prefix(self, namespace: str) -> dict[str, str]:
        full_key = self.key(namespace)
        with self.pool.connection() as conn:
            reply = conn.execute("HGETALL", full_key)

        if not reply:
            raise errors.NamespaceNotFoundError(full_key)
        try:
            return _pairs_to_dict(reply)
        except TypeError as e:
            raise errors.CommandError("HGETALL", full_key, e) from e

    def health_check(self) -> HealthStatus:
        if self._pool is None or not self.connected:
            return HealthStatus(connected=False, reachable=False, pool=None)

        try:
            with self._pool.connection() as conn:
                reachable = conn.ping()
        except errors.SessionStoreError:
            reachable = False

        return HealthStatus(connected=True, reachable=reachable, pool=self._pool.stats())

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
        self._pool = None
        self.connected = False
