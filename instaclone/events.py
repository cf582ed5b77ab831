"""One-shot notification envelope."""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class Event(Generic[T]):
    """Wrap content that must be delivered to its consumer at most once.

    The presentation layer may re-read state many times (every render or
    poll). Reading through ``get_content_or_none`` hands the content out once
    and drops it, so a toast is never shown twice for the same message.
    """

    def __init__(self, content: T) -> None:
        """Initialize the event."""
        self._content: T | None = content
        self.has_been_handled = False

    def get_content_or_none(self) -> T | None:
        """Return the content on first read, then None."""
        if self.has_been_handled:
            return None
        self.has_been_handled = True
        content, self._content = self._content, None
        return content

    def __repr__(self) -> str:
        return f"Event({self._content!r}, handled={self.has_been_handled})"
