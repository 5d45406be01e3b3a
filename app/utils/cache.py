"""인메모리 TTL 캐시 — 짧은 시간 동안 재조회를 피하기 위한 키-값 캐시.

In-process TTL cache used to avoid refetching per-company settings on every
validation call. Values should be immutable snapshots (pydantic models,
tuples), never ORM instances bound to a session.

Usage:
    cache = MemoryCache(default_ttl=300)
    cache.set("company_settings:<uuid>", snapshot)
    cache.get("company_settings:<uuid>")
    cache.delete("company_settings:<uuid>")
"""

import time
from typing import Any, Callable


class MemoryCache:
    """키별 만료 시각을 가진 단순 딕셔너리 캐시.

    Dict-backed cache with a per-entry expiry. Expired entries are evicted
    lazily on read and in bulk by ``purge_expired``.

    Args:
        default_ttl: 기본 유효 시간(초) (Default time-to-live in seconds)
        clock: 단조 시계 함수, 테스트에서 교체 가능 (Monotonic clock, swappable in tests)
    """

    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl: float = default_ttl
        self._clock: Callable[[], float] = clock
        self._entries: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            # 만료 항목 제거 — Evict expired entry
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        lifetime = self.default_ttl if ttl is None else ttl
        self._entries[key] = (value, self._clock() + lifetime)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """만료 항목 일괄 정리 — Drop every expired entry, return how many."""
        now = self._clock()
        expired = [k for k, (_, exp) in self._entries.items() if now >= exp]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
