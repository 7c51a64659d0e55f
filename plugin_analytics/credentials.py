"""
Holder for the per-server secret key.
"""

import threading
from typing import Optional


class Credentials:
    """Thread-safe holder for the secret key.

    The key can be replaced at any time. Requests already in flight keep
    whatever value they read when they were dispatched.
    """

    def __init__(self, secret_key: Optional[str] = None):
        self._lock = threading.Lock()
        self._secret_key = secret_key

    @property
    def secret_key(self) -> Optional[str]:
        with self._lock:
            return self._secret_key

    @secret_key.setter
    def secret_key(self, value: Optional[str]):
        with self._lock:
            self._secret_key = value

    def is_set(self) -> bool:
        """True when a non-empty key is present."""
        return bool(self.secret_key)

    def snapshot(self) -> Optional[str]:
        """Return the current key, or None when not configured."""
        key = self.secret_key
        return key if key else None
