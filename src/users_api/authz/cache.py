"""
users_api.authz.cache

Process-wide, read-mostly cache of role snapshots.

Responsibilities:
- Keep immutable `RoleRecord` snapshots keyed by role id and role name.
- Expire entries after a TTL so out-of-band permission changes are picked up.
- Allow explicit invalidation (e.g., after provisioning).
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from users_api.authz.store import RoleRecord


class RoleCache:
    def __init__(
        self,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._by_id: dict[int, tuple[float, RoleRecord]] = {}
        self._by_name: dict[str, tuple[float, RoleRecord]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def get_by_id(self, role_id: int) -> RoleRecord | None:
        return self._lookup(self._by_id, role_id)

    def get_by_name(self, name: str) -> RoleRecord | None:
        return self._lookup(self._by_name, name)

    def put(self, record: RoleRecord) -> None:
        if not self.enabled:
            return
        expires_at = self._clock() + self._ttl
        self._by_id[record.id] = (expires_at, record)
        self._by_name[record.name] = (expires_at, record)

    def invalidate(self) -> None:
        self._by_id.clear()
        self._by_name.clear()

    def _lookup(self, table: dict, key: int | str) -> RoleRecord | None:
        entry = table.get(key)
        if entry is None:
            return None
        expires_at, record = entry
        if self._clock() >= expires_at:
            # Stale: drop it and let the caller reload from the store.
            table.pop(key, None)
            return None
        return record


# --- Module Notes -----------------------------------------------------------
# Entries are immutable snapshots and all access happens on the event loop thread,
# so no locking is needed. Misses are never cached.
