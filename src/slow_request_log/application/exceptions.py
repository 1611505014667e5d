from __future__ import annotations


class TimingError(Exception):
    """Base request-timing error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class UnknownSegmentError(TimingError):
    pass


class SinkFailureError(TimingError):
    pass


class NoActiveRequestError(TimingError):
    pass
