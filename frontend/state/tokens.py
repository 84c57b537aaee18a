"""
Durable storage for the bearer token.

The token is the only piece of client state that survives a restart. All
reads and writes go through a ``TokenStore`` so that no other module touches
the file directly.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Interface: load / save / clear, plus scoped restore"""

    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, token: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    @contextmanager
    def restore(self) -> Iterator[Optional[str]]:
        """
        Yield the persisted token for verification.

        If the body raises, the token is removed before the exception
        propagates, so a token that failed verification is never reused.
        """
        token = self.load()
        try:
            yield token
        except Exception:
            if token is not None:
                logger.info("Discarding persisted token after failed verification")
                self.clear()
            raise


class MemoryTokenStore(TokenStore):
    """Non-durable store (tests, or running without a writable home)"""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Keeps the token in a single user-only file"""

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
