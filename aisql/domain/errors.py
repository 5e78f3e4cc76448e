"""Domain errors raised or carried by the call-and-classify layer."""

from __future__ import annotations


class AISQLError(Exception):
    """Base class for all errors of this package."""


class InvalidCallError(AISQLError, ValueError):
    """The call itself is malformed (caller bug): wrong payload, options or model."""


class ExternalServiceError(AISQLError):
    """The remote AI function call failed (service error, timeout, lost connection).

    ``original`` keeps the exception that was actually raised so it can be
    logged; it is also chained as ``__cause__``.
    """

    def __init__(self, message: str, original: BaseException | None = None):
        super().__init__(message)
        self.original = original
        if original is not None:
            self.__cause__ = original


class UnexpectedResponseError(AISQLError):
    """A result came back but does not match the pinned response contract."""

    def __init__(self, message: str, raw: object = None):
        super().__init__(message)
        self.raw = raw
