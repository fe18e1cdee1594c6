from __future__ import annotations

import datetime as _dt
from email.utils import format_datetime

from restwrap.security import parse_retry_after, sanitize_headers


def test_sanitize_headers_redacts_credentials() -> None:
    headers = sanitize_headers(
        {"Authorization": "Basic dTpw", "Cookie": "sid=1", "Accept": "application/json"}
    )

    assert headers == {
        "Authorization": "[REDACTED]",
        "Cookie": "[REDACTED]",
        "Accept": "application/json",
    }


def test_parse_retry_after_seconds() -> None:
    assert parse_retry_after("5") == 5.0
    assert parse_retry_after("-3") == 0.0
    assert parse_retry_after("") is None
    assert parse_retry_after(None) is None
    assert parse_retry_after("soon") is None


def test_parse_retry_after_http_date() -> None:
    future = _dt.datetime.now(_dt.timezone.utc) + _dt.timedelta(seconds=120)
    delay = parse_retry_after(format_datetime(future, usegmt=True))

    assert delay is not None
    assert 100 < delay <= 120


def test_parse_retry_after_naive_date_is_utc() -> None:
    assert parse_retry_after("Mon, 01 Jan 2001 00:00:00 -0000") == 0.0
