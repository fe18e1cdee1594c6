"""Errors reported by restwrap."""

from __future__ import annotations

from typing import Mapping


class RestwrapError(Exception):
    """Base exception for all restwrap failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.cause = cause

    def __str__(self) -> str:
        if self.status_code is None:
            return str(self.args[0])
        parts = [f"{self.status_code}"]
        if self.error_code:
            parts.append(self.error_code)
        return " ".join(parts) + f": {self.args[0]}"


class InvalidRequestError(RestwrapError):
    """Raised for calls rejected before any I/O (empty method/url, unknown method)."""


class FileReadError(RestwrapError):
    """Raised when an upload file cannot be read."""


class ResponseError(RestwrapError):
    """Raised for HTTP non-success responses."""


class EmptyResponseError(RestwrapError):
    """Raised when the client produced neither a response nor an error."""


class RedirectPolicyError(RestwrapError):
    """Raised when a redirect policy refuses to follow a redirect."""


class ResponseDecodeError(RestwrapError):
    """Raised when a reply body cannot be decoded into the requested shape."""
