"""Error types and request rejections."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


class Error(Exception):
    """An error raised while serving a request, wrapping its cause."""

    def __init__(self, inner: Any) -> None:
        super().__init__(inner)
        self.inner = inner

    def __str__(self) -> str:
        return str(self.inner)

    def __repr__(self) -> str:
        return repr(self.inner)


class UnitError(Exception):
    """An error with no data, shown as a fixed description."""

    description = ""

    def __init__(self) -> None:
        super().__init__(self.description)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return type(self).__name__


class BodyConsumedMultipleTimes(UnitError):
    """The request body was taken by more than one filter."""

    description = "Request body consumed multiple times"
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class _LengthRequired(UnitError):
    description = "A content-length header is required"
    status = HTTPStatus.LENGTH_REQUIRED


class _PayloadTooLarge(UnitError):
    description = "The request payload is too large"
    status = HTTPStatus.REQUEST_ENTITY_TOO_LARGE


class _UnsupportedMediaType(UnitError):
    description = "The request's content-type is not supported"
    status = HTTPStatus.UNSUPPORTED_MEDIA_TYPE


class _MissingCookie(Exception):
    status = HTTPStatus.BAD_REQUEST

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f'Missing request cookie "{self.name}"'

    def __repr__(self) -> str:
        return f"MissingCookie({self.name!r})"


@dataclass(frozen=True)
class _Reason:
    cause: Any
    known: bool

    @property
    def status(self) -> HTTPStatus:
        if not self.known:
            return HTTPStatus.INTERNAL_SERVER_ERROR
        return HTTPStatus(int(getattr(self.cause, "status", HTTPStatus.INTERNAL_SERVER_ERROR)))

    @property
    def message(self) -> str:
        if self.known:
            return str(self.cause)
        return f"Unhandled rejection: {self.cause!r}"


class Rejection(Exception):
    """Raised by a filter that does not match; another filter may still match.

    A rejection with no reasons means "not found".
    """

    def __init__(self, reasons: tuple[_Reason, ...] = ()) -> None:
        super().__init__()
        self._reasons = tuple(reasons)

    def is_not_found(self) -> bool:
        """True when this rejection carries no reason beyond "not found"."""
        return not self._reasons

    def find(self, kind: type) -> Any:
        """Return the first cause that is an instance of ``kind``, or None."""
        for reason in self._reasons:
            if isinstance(reason.cause, kind):
                return reason.cause
        return None

    def combine(self, other: Rejection) -> Rejection:
        """Merge two rejections; "not found" gives way to anything else."""
        if self.is_not_found():
            return other
        if other.is_not_found():
            return self
        return Rejection(self._reasons + other._reasons)

    def _preferred(self) -> _Reason | None:
        best: _Reason | None = None
        for reason in self._reasons:
            if best is None:
                best = reason
                continue
            current, candidate = best.status, reason.status
            if current == candidate:
                continue
            if current == HTTPStatus.METHOD_NOT_ALLOWED:
                best = reason
            elif candidate == HTTPStatus.METHOD_NOT_ALLOWED:
                continue
            elif current < candidate:
                best = reason
        return best

    def status(self) -> HTTPStatus:
        """The HTTP status this rejection answers with."""
        reason = self._preferred()
        return HTTPStatus.NOT_FOUND if reason is None else reason.status

    def message(self) -> str:
        """The body text this rejection answers with."""
        reason = self._preferred()
        return "" if reason is None else reason.message

    def __str__(self) -> str:
        return self.message() or self.status().phrase

    def __repr__(self) -> str:
        causes = [reason.cause for reason in self._reasons]
        return f"Rejection({causes!r})"


def not_found() -> Rejection:
    """A rejection meaning that nothing matched."""
    return Rejection()


def custom(cause: Any) -> Rejection:
    """A rejection with a user-defined cause, answered as a server error."""
    return Rejection((_Reason(cause, known=False),))


def known(cause: Any) -> Rejection:
    """A rejection with a cause whose ``status`` and text form the reply."""
    return Rejection((_Reason(cause, known=True),))


def length_required() -> Rejection:
    """Rejects a request that lacks a content-length header."""
    return known(_LengthRequired())


def payload_too_large() -> Rejection:
    """Rejects a request whose body is larger than allowed."""
    return known(_PayloadTooLarge())


def unsupported_media_type() -> Rejection:
    """Rejects a request whose content-type is not accepted."""
    return known(_UnsupportedMediaType())


def missing_cookie(name: str) -> Rejection:
    """Rejects a request that lacks the named cookie."""
    return known(_MissingCookie(name))