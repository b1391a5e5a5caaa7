# app/cache.py
"""In-memory session cache.

Maps `cache_key(email)` to the account's current access token. Entries live
for SESSION_TTL_SECONDS after their last `set` and are purged by `sweep()`,
which the background scheduler runs every SESSION_CHECK_PERIOD seconds.
The cache only lives as long as the process; it is not persistent.
"""
import os
import hashlib
import threading
import time
from dotenv import load_dotenv
from .utils import logger

load_dotenv()
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "7200"))
SESSION_CHECK_PERIOD = int(os.getenv("SESSION_CHECK_PERIOD", "30"))
# 0 means unlimited
SESSION_MAX_KEYS = int(os.getenv("SESSION_MAX_KEYS", "0"))


def cache_key(email: str) -> str:
    return "jwt:" + hashlib.sha256(str(email).encode("utf-8")).hexdigest()


class SessionCache:
    def __init__(self, ttl: float = SESSION_TTL_SECONDS, max_keys: int = SESSION_MAX_KEYS, clock=time.monotonic):
        self.ttl = ttl
        self.max_keys = max_keys
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def _live(self, key, now):
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= now:
            return None
        return value

    def _purge(self, now):
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def _full(self, key):
        return bool(self.max_keys) and key not in self._entries and len(self._entries) >= self.max_keys

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            now = self._clock()
            if self._full(key):
                self._purge(now)
            if self._full(key):
                logger.error("Session cache full (%d keys), could not store %s", self.max_keys, key)
                return False
            self._entries[key] = (value, now + self.ttl)
            return True

    def get(self, key: str):
        with self._lock:
            return self._live(key, self._clock())

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> int:
        with self._lock:
            return 1 if self._entries.pop(key, None) is not None else 0

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""
        with self._lock:
            removed = self._purge(self._clock())
        if removed:
            logger.info("Session cache sweep removed %d expired entries", removed)
        return removed

    def flush(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


session_cache = SessionCache()

def get_session_cache() -> SessionCache:
    return session_cache
