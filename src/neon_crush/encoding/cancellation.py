"""Cooperative cancellation for long-running encodes."""

from ..errors import EncodingCancelled


class CancellationToken:
    """Flag checked by the encoder at every frame and attempt boundary."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise EncodingCancelled("Encoding was cancelled")
