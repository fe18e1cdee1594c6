"""Declarative per-request options over an httpx client."""

from __future__ import annotations

from .client import Service, retry_on_transport_error
from .exceptions import (
    EmptyResponseError,
    FileReadError,
    InvalidRequestError,
    RedirectPolicyError,
    ResponseDecodeError,
    ResponseError,
    RestwrapError,
)
from .models import ApiStdRes
from .params import parse_data
from .redirects import DomainCheckRedirectPolicy, FlexibleRedirectPolicy, NoRedirectPolicy
from .reply import Reply, get_result
from .request_options import RequestOptions

__version__ = "0.1.0"

__all__ = [
    "ApiStdRes",
    "DomainCheckRedirectPolicy",
    "EmptyResponseError",
    "FileReadError",
    "FlexibleRedirectPolicy",
    "InvalidRequestError",
    "NoRedirectPolicy",
    "RedirectPolicyError",
    "Reply",
    "RequestOptions",
    "ResponseDecodeError",
    "ResponseError",
    "RestwrapError",
    "Service",
    "get_result",
    "parse_data",
    "retry_on_transport_error",
]
