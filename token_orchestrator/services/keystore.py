"""
In-memory key store.

Holds every issued key and enforces its lifecycle: a key is valid while it
is not blocked and its lease (if one was engaged by a keep-alive) has not
lapsed. Every public method is a single critical section under one lock, so
operations on the same id are linearizable and the reaper never sees a
half-updated record.
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from .. import config
from ..errors import InvalidArgument, KeyForbidden, KeyNotFound
from ..models import KeyInfo, KeyRecord
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger("token_orchestrator.keystore")

Clock = Callable[[], float]


def new_token() -> str:
    return str(uuid.uuid4())


class KeyStore:
    """Thread-safe mapping of key id to KeyRecord"""

    def __init__(self, lease_duration: Optional[float] = None, clock: Clock = time.time,
                 id_factory: Callable[[], str] = new_token):
        self.lease_duration = config.LEASE_DURATION_SECONDS if lease_duration is None else lease_duration
        self.clock = clock
        self._new_token = id_factory
        self._keys: Dict[str, KeyRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __contains__(self, key_id: str) -> bool:
        with self._lock:
            return key_id in self._keys

    def _get(self, key_id: str, operation: str) -> KeyRecord:
        # Caller holds the lock
        rec = self._keys.get(key_id)
        if rec is None:
            prometheus_metrics.increment_rejection(operation, KeyNotFound.reason)
            raise KeyNotFound(key_id)
        return rec

    def _valid(self, rec: KeyRecord, now: float) -> bool:
        return not rec.blocked and not rec.lapsed(now)

    def issue(self) -> Tuple[str, str]:
        """Create a fresh key with no lease engaged. Returns ``(id, secret)``."""
        now = self.clock()
        with self._lock:
            key_id = self._new_token()
            while key_id in self._keys:
                key_id = self._new_token()
            rec = KeyRecord(
                id=key_id,
                secret=self._new_token(),
                created_at=now,
                last_activity=now,
            )
            self._keys[key_id] = rec
            count = len(self._keys)

        prometheus_metrics.increment_keys_issued()
        prometheus_metrics.set_keys_active(count)
        logger.info("Key issued", extra={"component": "keystore", "key_id": key_id})
        return rec.id, rec.secret

    def fetch(self, key_id: str) -> str:
        """Return the secret of a valid key. Does not touch the lease."""
        with self._lock:
            rec = self._get(key_id, "fetch")
            if not self._valid(rec, self.clock()):
                prometheus_metrics.increment_rejection("fetch", KeyForbidden.reason)
                raise KeyForbidden(key_id)
            return rec.secret

    def describe(self, key_id: str) -> KeyInfo:
        """Snapshot of a key's state, whether or not it is currently valid."""
        with self._lock:
            return self._get(key_id, "describe").snapshot()

    def delete(self, key_id: str) -> None:
        with self._lock:
            self._get(key_id, "delete")
            del self._keys[key_id]
            count = len(self._keys)

        prometheus_metrics.increment_keys_deleted()
        prometheus_metrics.set_keys_active(count)
        logger.info("Key deleted", extra={"component": "keystore", "key_id": key_id})

    def set_blocked(self, key_id: str, blocked: Any) -> bool:
        """Set the administrative hold on a key.

        ``blocked`` must be a real bool: strings, numbers and None are
        rejected with InvalidArgument and the record is left unchanged.
        """
        with self._lock:
            rec = self._get(key_id, "set_blocked")
            if not isinstance(blocked, bool):
                prometheus_metrics.increment_rejection("set_blocked", InvalidArgument.reason)
                raise InvalidArgument(key_id)
            rec.blocked = blocked

        prometheus_metrics.increment_block_change(blocked)
        logger.info("Key %s", "blocked" if blocked else "unblocked",
                    extra={"component": "keystore", "key_id": key_id})
        return blocked

    def keep_alive(self, key_id: str) -> float:
        """Engage or renew the lease of a valid key.

        The deadline is reset to ``now + lease_duration``, not extended from
        the previous deadline. Blocked or lapsed keys cannot be revived.
        Returns the new deadline.
        """
        with self._lock:
            rec = self._get(key_id, "keep_alive")
            now = self.clock()
            if not self._valid(rec, now):
                prometheus_metrics.increment_rejection("keep_alive", KeyForbidden.reason)
                raise KeyForbidden(key_id)
            rec.last_activity = now
            # reap() relies on expires_at == last_activity + lease_duration
            rec.expires_at = now + self.lease_duration
            expires_at = rec.expires_at

        prometheus_metrics.increment_keepalives()
        logger.debug("Key keep-alive", extra={
            "component": "keystore", "key_id": key_id, "expires_at": expires_at
        })
        return expires_at

    def is_valid(self, key_id: str) -> bool:
        with self._lock:
            rec = self._keys.get(key_id)
            return rec is not None and self._valid(rec, self.clock())

    def reap(self) -> List[str]:
        """Remove every leased key idle for longer than the lease duration.

        Keys that never received a keep-alive are left alone regardless of
        age. Returns the ids removed.
        """
        with self._lock:
            now = self.clock()
            expired = [
                key_id for key_id, rec in self._keys.items()
                if rec.leased and now - rec.last_activity > self.lease_duration
            ]
            for key_id in expired:
                del self._keys[key_id]
            count = len(self._keys)

        prometheus_metrics.set_keys_active(count)
        return expired

    def stats(self) -> Dict[str, int]:
        with self._lock:
            now = self.clock()
            records = list(self._keys.values())
            return {
                "total": len(records),
                "blocked": sum(1 for r in records if r.blocked),
                "leased": sum(1 for r in records if r.leased),
                "lapsed": sum(1 for r in records if r.lapsed(now)),
            }
