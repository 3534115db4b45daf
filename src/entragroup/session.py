"""Directory session lifecycle.

A DirectorySession owns the authenticated connection for one run. It is
used as a context manager so the connection is released exactly once,
whether the run completes, fails with a handled error or aborts.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from entragroup.directory import Directory
from entragroup.utils.auth import REQUIRED_SCOPES

logger = logging.getLogger(__name__)


class DirectorySession:
    """Authenticated, scoped access to a Directory."""

    def __init__(self, directory: Directory, scopes: Iterable[str] = REQUIRED_SCOPES):
        self._directory = directory
        self.scopes = tuple(scopes)
        self.is_open = False
        self.is_closed = False

    @property
    def directory(self) -> Directory:
        """The underlying directory. Only available while the session is open."""
        if not self.is_open:
            raise RuntimeError("Directory session is not open")
        return self._directory

    def open(self) -> "DirectorySession":
        """Authenticate against the directory.

        Raises:
            AuthenticationError: If credentials or consent are rejected
            RuntimeError: If the session was already closed
        """
        if self.is_closed:
            raise RuntimeError("Directory session has been closed")
        if self.is_open:
            return self
        self._directory.open_session(self.scopes)
        self.is_open = True
        logger.info(f"Directory session opened ({', '.join(self.scopes)})")
        return self

    def close(self) -> None:
        """Release the session. Safe to call more than once."""
        if self.is_closed:
            return
        self.is_closed = True
        self.is_open = False
        self._directory.close_session()
        logger.info("Directory session closed")

    def __enter__(self) -> "DirectorySession":
        try:
            return self.open()
        except BaseException:
            self.close()
            raise

    def __exit__(self, *args: Any) -> None:
        self.close()
