import logging
from typing import Any, Callable

from Session_Store.store_shared import config, errors
from Session_Store.store_shared.types import SweepResult
from Session_Store.store_db.store import RedisSessionStore

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Deletes session records that the codec reports as expired.

    ``decode`` takes a serialized record and either returns the decoded
    session or raises ``ExpiredError`` / ``DecodeError``. Only ``ExpiredError``
    leads to a delete; records that fail to decode for any other reason are
    left alone.
    """

    def __init__(
        self,
        store: RedisSessionStore,
        decode: Callable[[str], Any],
        namespace: str = config.SESSION_NAMESPACE,
    ):
        self.store = store
        self.decode = decode
        self.namespace = namespace

    def _is_expired(self, session_id: str, serialized: str) -> bool:
        try:
            self.decode(serialized)
        except errors.ExpiredError:
            return True
        except errors.DecodeError as e:
            logger.debug("session %s kept, not decodable: %s", session_id, e)
            return False
        return False

    def _records(self) -> dict[str, str] | None:
        try:
            return self.store.enumerate_by_prefix(self.namespace)
        except errors.NamespaceNotFoundError:
            logger.info("no sessions under '%s' to sweep", self.namespace)
        except errors.SessionStoreError as e:
            logger.error("session sweep could not enumerate '%s': %s", self.namespace, e)
        return None

    def sweep(self) -> SweepResult:
        result = SweepResult()
        records = self._records()
        if records is None:
            return result

        for session_id, serialized in records.items():
            result.scanned += 1
            if not self._is_expired(session_id, serialized):
                result.skipped += 1
                continue

            try:
                self.store.delete(session_id)
            except errors.SessionStoreError as e:
                logger.error("session sweep could not delete %s: %s", session_id, e)
                result.failed += 1
                continue
            result.deleted += 1

        logger.info("%d expired session redis cleaned up", result.deleted)
        return result

    def dry_run(self) -> SweepResult:
        result = SweepResult()
        records = self._records()
        if records is None:
            return result

        for session_id, serialized in records.items():
            result.scanned += 1
            if self._is_expired(session_id, serialized):
                result.deleted += 1
            else:
                result.skipped += 1
        return result
