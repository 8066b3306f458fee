"""
Bounded, health-checked pool of Redis connections.

Policy:
    borrow at MaxActive       -> block up to wait_timeout, then PoolExhaustedError
                                 (wait_timeout == 0 fails fast)
    idle older than timeout   -> closed lazily on borrow, or by prune_idle()
    reuse after idle interval -> PING first (interval 0: every reuse)
    reuse after a failure     -> always PING first
    release of broken conn    -> closed, never reused
    release over MaxIdle      -> closed

All counters and the idle stack live under one condition variable. Dialing and
probing happen outside the lock with the active slot already reserved.
"""

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Iterator

from Session_Store.store_shared import config, errors
from Session_Store.store_shared.types import PoolStats
from Session_Store.store_db.connection import Connection

logger = logging.getLogger(__name__)


class ConnectionPool:
    def __init__(
        self,
        dial: Callable[[], Connection],
        max_idle: int = config.POOL_MAX_IDLE,
        max_active: int = config.POOL_MAX_ACTIVE,
        idle_timeout: float = config.POOL_IDLE_TIMEOUT_SECONDS,
        wait_timeout: float = config.POOL_WAIT_TIMEOUT_SECONDS,
        test_on_borrow_interval: float = config.POOL_TEST_ON_BORROW_SECONDS,
    ):
        self._dial = dial
        self.max_idle = max_idle
        self.max_active = max_active
        self.idle_timeout = idle_timeout
        self.wait_timeout = wait_timeout
        self.test_on_borrow_interval = test_on_borrow_interval

        self._cond = threading.Condition()
        self._idle: deque[Connection] = deque()
        self._borrowed: set[Connection] = set()
        self._active = 0  # borrowed plus slots reserved for an in-flight dial
        self._dialed = 0
        self._closed_count = 0
        self._closed = False

    def _has_capacity(self) -> bool:
        return self.max_active <= 0 or self._active < self.max_active

    def _take_expired(self, now: float) -> list[Connection]:
        expired = [c for c in self._idle if c.idle_for(now) >= self.idle_timeout]
        for conn in expired:
            self._idle.remove(conn)
        self._closed_count += len(expired)
        return expired

    def _free_slot(self) -> None:
        with self._cond:
            self._active -= 1
            self._cond.notify()

    def _needs_probe(self, conn: Connection) -> bool:
        return conn.needs_probe or conn.idle_for() >= self.test_on_borrow_interval

    def _reserve(self) -> Connection | None:
        """Reserve an active slot; return an idle connection to reuse, if any."""
        stale: list[Connection] = []
        deadline = None
        try:
            with self._cond:
                while True:
                    if self._closed:
                        raise errors.PoolClosedError()

                    stale.extend(self._take_expired(time.monotonic()))
                    if self._idle or self._has_capacity():
                        break

                    if self.wait_timeout <= 0:
                        raise errors.PoolExhaustedError(self.max_active, 0.0)
                    now = time.monotonic()
                    if deadline is None:
                        deadline = now + self.wait_timeout
                    remaining = deadline - now
                    if remaining <= 0:
                        raise errors.PoolExhaustedError(self.max_active, self.wait_timeout)
                    self._cond.wait(remaining)

                self._active += 1
                return self._idle.pop() if self._idle else None
        finally:
            for conn in stale:
                logger.debug("evicting idle connection to %s", conn.address)
                conn.close()

    def borrow(self) -> Connection:
        while True:
            conn = self._reserve()

            if conn is None:
                try:
                    conn = self._dial()
                except BaseException:
                    self._free_slot()
                    raise
                with self._cond:
                    self._dialed += 1
                    self._borrowed.add(conn)
                return conn

            try:
                alive = not self._needs_probe(conn) or conn.ping()
            except BaseException:
                conn.close()
                with self._cond:
                    self._closed_count += 1
                self._free_slot()
                raise

            if alive:
                with self._cond:
                    self._borrowed.add(conn)
                return conn

            logger.info("discarding dead connection to %s", conn.address)
            conn.close()
            with self._cond:
                self._closed_count += 1
                self._active -= 1
                self._cond.notify()

    def release(self, conn: Connection) -> None:
        discard = False
        with self._cond:
            if conn not in self._borrowed:
                logger.warning("ignoring release of a connection the pool did not lend")
                return
            self._borrowed.remove(conn)
            self._active -= 1

            full = self.max_idle > 0 and len(self._idle) >= self.max_idle
            if self._closed or conn.broken or conn.closed or full:
                discard = True
                self._closed_count += 1
            else:
                conn.last_used = time.monotonic()
                self._idle.append(conn)
            self._cond.notify()

        if discard:
            conn.close()

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        conn = self.borrow()
        try:
            yield conn
        finally:
            self.release(conn)

    def prune_idle(self) -> int:
        with self._cond:
            expired = self._take_expired(time.monotonic())
        for conn in expired:
            conn.close()
        return len(expired)

    def stats(self) -> PoolStats:
        with self._cond:
            return PoolStats(
                active=self._active,
                idle=len(self._idle),
                max_active=self.max_active,
                max_idle=self.max_idle,
                dialed=self._dialed,
                closed=self._closed_count,
            )

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._cond:
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
            self._closed_count += len(idle)
            self._cond.notify_all()
        for conn in idle:
            conn.close()
