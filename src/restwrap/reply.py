"""Uniform request result and the normalizer that produces it."""

from __future__ import annotations

import json as _json
from dataclasses import dataclass, field
from typing import Any, Mapping, TypeVar, overload

import httpx
from pydantic import TypeAdapter, ValidationError

from .exceptions import EmptyResponseError, ResponseDecodeError, ResponseError

T = TypeVar("T")


@dataclass(frozen=True)
class Reply:
    """Status code, body and error of one request.

    ``error`` is ``None`` on success. ``body`` may be populated even when
    ``error`` is set, e.g. for a non-2xx response.
    """

    status_code: int = 0
    error: Exception | None = None
    body: bytes = b""
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    @property
    def ok(self) -> bool:
        return self.error is None

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @overload
    def json(self) -> Any: ...

    @overload
    def json(self, into: type[T]) -> T | None: ...

    def json(self, into: Any = None) -> Any:
        """Decode the body as JSON, optionally validated into ``into``.

        An empty body decodes to ``None``.
        """
        if not self.body:
            return None
        try:
            if into is None:
                return _json.loads(self.body)
            return TypeAdapter(into).validate_json(self.body)
        except (ValueError, ValidationError) as exc:
            raise ResponseDecodeError(
                f"decode response body: {exc}",
                status_code=self.status_code or None,
                body=self.body,
                cause=exc,
            ) from exc

    def raise_for_error(self) -> "Reply":
        if self.error is not None:
            raise self.error
        return self


def _error_detail(response: httpx.Response) -> tuple[str, str | None, object]:
    raw_body = None
    parsed_body = None
    content_type = response.headers.get("content-type", "")
    try:
        raw_body = response.text
        if "json" in content_type.lower() and response.content:
            parsed_body = response.json()
    except ValueError:
        parsed_body = None

    message = str(parsed_body if parsed_body is not None else raw_body or "")
    error_code = None
    if isinstance(parsed_body, Mapping):
        if isinstance(parsed_body.get("error"), str):
            message = parsed_body["error"]
        elif isinstance(parsed_body.get("message"), str):
            message = parsed_body["message"]
        if isinstance(parsed_body.get("error_code"), str):
            error_code = parsed_body["error_code"]
    return message, error_code, parsed_body if parsed_body is not None else raw_body


def get_result(response: httpx.Response | None, error: Exception | None) -> Reply:
    """Reduce a response/error pair to a :class:`Reply`."""
    if error is not None:
        if response is None:
            return Reply(error=error)
        return Reply(
            status_code=response.status_code,
            error=error,
            body=response.content,
            headers=response.headers,
        )

    if response is None:
        return Reply(
            status_code=int(httpx.codes.SERVICE_UNAVAILABLE),
            error=EmptyResponseError("resp is empty"),
        )

    if not response.is_success or response.is_error:
        message, error_code, body = _error_detail(response)
        return Reply(
            status_code=response.status_code,
            error=ResponseError(
                f"resp error: {message}",
                status_code=response.status_code,
                error_code=error_code,
                body=body,
                headers=response.headers,
            ),
            body=response.content,
            headers=response.headers,
        )

    return Reply(
        status_code=response.status_code,
        body=response.content,
        headers=response.headers,
    )
