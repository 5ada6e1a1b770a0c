"""Transient actor-facing notices that clear themselves."""

from __future__ import annotations

import asyncio
from typing import Optional


class TransientNotice:
    """Holds one message and clears it after ``clear_after`` seconds.

    Without a running event loop the message stays until ``clear()``.
    """

    def __init__(self, clear_after: float = 3.0):
        self.clear_after = clear_after
        self._message: Optional[str] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def message(self) -> Optional[str]:
        return self._message

    def show(self, message: str) -> None:
        self._cancel()
        self._message = message
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self.clear_after, self.clear)

    def clear(self) -> None:
        self._cancel()
        self._message = None

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
