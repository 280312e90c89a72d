"""
Holding area for transport handles replaced by a newer connection.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..transport import TransportHandle


class RetirementList:
    """Insertion-ordered handles waiting for a best-effort close."""

    def __init__(self) -> None:
        self._handles: list[TransportHandle] = []

    def retire(self, handle: TransportHandle) -> None:
        if any(existing is handle for existing in self._handles):
            return
        self._handles.append(handle)

    def snapshot(self) -> list[TransportHandle]:
        return list(self._handles)

    def discard(self, count: int) -> None:
        """Forget the ``count`` oldest handles after their close was attempted."""
        if count < 0 or count > len(self._handles):
            raise ValueError(f"cannot discard {count} of {len(self._handles)} retired handles")
        del self._handles[:count]

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, handle: object) -> bool:
        return any(existing is handle for existing in self._handles)

    def __iter__(self) -> Iterator[TransportHandle]:
        return iter(self._handles)
