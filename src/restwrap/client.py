"""Service: translates RequestOptions onto a fresh httpx client per call."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

import httpx

from .exceptions import FileReadError, InvalidRequestError, RedirectPolicyError
from .params import parse_data
from .redirects import FlexibleRedirectPolicy, RedirectPolicy, apply_policies
from .reply import Reply, get_result
from .request_options import RequestOptions, RetryCondition
from .security import parse_retry_after, sanitize_headers

logger = logging.getLogger(__name__)

QUERY_METHODS = frozenset({"get", "delete", "head"})
BODY_METHODS = frozenset({"post", "put", "patch"})
SUPPORTED_METHODS = QUERY_METHODS | BODY_METHODS | {"file"}


def retry_on_transport_error(response: httpx.Response | None, error: Exception | None) -> bool:
    return isinstance(error, httpx.TransportError)


def _needs_retry(
    conditions: Sequence[RetryCondition],
    response: httpx.Response | None,
    error: Exception | None,
) -> bool:
    return any(condition(response, error) for condition in conditions)


def _describe(response: httpx.Response | None, error: Exception | None) -> str:
    if error is not None:
        return f"{type(error).__name__}: {error}"
    if response is not None:
        return f"status {response.status_code}"
    return "no response"


def _request_cookies(options: RequestOptions) -> httpx.Cookies | None:
    if not options.cookies:
        return None
    cookies = httpx.Cookies()
    if isinstance(options.cookies, Mapping):
        for name, value in options.cookies.items():
            cookies.set(name, value)
    else:
        for cookie in options.cookies:
            cookies.jar.set_cookie(cookie)
    return cookies


class Service:
    """Cross-request defaults plus the options-to-httpx translation.

    A fresh ``httpx.Client`` is built for every request, so one service can
    be shared between threads.
    """

    default_timeout = 3.0
    default_max_retries = 3
    default_max_redirects = 10
    default_retry_wait_time = 0.1
    default_retry_max_wait_time = 2.0

    def __init__(
        self,
        *,
        base_uri: str = "",
        timeout: float | None = default_timeout,
        enable_keep_alive: bool = False,
        max_retries: int = default_max_retries,
        max_redirects: int = default_max_redirects,
    ) -> None:
        self.base_uri = base_uri or ""
        self.timeout = float(timeout) if timeout and timeout > 0 else self.default_timeout
        self.enable_keep_alive = enable_keep_alive
        self.max_retries = max(0, int(max_retries))
        self.max_redirects = max_redirects

    def __repr__(self) -> str:
        return (
            f"Service(base_uri={self.base_uri!r}, timeout={self.timeout}, "
            f"enable_keep_alive={self.enable_keep_alive})"
        )

    def resolve_url(self, url: str) -> str:
        if not self.base_uri:
            return url
        return self.base_uri.rstrip("/") + "/" + url.lstrip("/")

    def resolve_options(self, options: RequestOptions) -> RequestOptions:
        """Return ``options`` with the retry count clamped and redirect defaults filled in."""
        changes: dict[str, Any] = {}
        if options.retry_count < 0:
            changes["retry_count"] = 0
        elif options.retry_count > self.max_retries:
            changes["retry_count"] = self.max_retries
        if options.enable_redirect_policy and not options.redirect_policies:
            changes["redirect_policies"] = (FlexibleRedirectPolicy(self.max_redirects),)
        if not changes:
            return options
        return replace(options, **changes)

    def new_client(self, options: RequestOptions | None = None) -> httpx.Client:
        """Build an ``httpx.Client`` configured from ``options``. The caller closes it."""
        options = options or RequestOptions()
        headers = httpx.Headers()
        if not self.enable_keep_alive:
            headers["Connection"] = "close"
        for key, value in (parse_data(options.headers) or {}).items():
            headers[key] = value

        kwargs: dict[str, Any] = {
            "timeout": self.timeout,
            "headers": headers,
            "follow_redirects": not options.enable_redirect_policy,
            "max_redirects": self.max_redirects,
            "trust_env": False,
        }
        if options.proxy:
            kwargs["proxy"] = options.proxy
        if options.basic_auth_user and options.basic_auth_password:
            kwargs["auth"] = httpx.BasicAuth(options.basic_auth_user, options.basic_auth_password)
        if options.cookie_jar is not None:
            kwargs["cookies"] = options.cookie_jar

        if options.insecure_skip_verify:
            kwargs["verify"] = False
        elif options.transport is not None:
            kwargs["transport"] = options.transport

        return httpx.Client(**kwargs)

    def do(self, method: str, url: str, options: RequestOptions | None = None) -> Reply:
        """Perform ``method`` against ``url``.

        ``url`` is relative to ``base_uri`` when one is configured. Errors are
        reported in ``Reply.error``, never raised.
        """
        options = options or RequestOptions()
        return self.request(replace(options, method=method, url=url))

    def request(self, options: RequestOptions) -> Reply:
        if not options.method or not options.url:
            return Reply(error=InvalidRequestError("request method or request url is empty"))

        options = self.resolve_options(options)
        method = options.method.lower()
        url = self.resolve_url(options.url)
        if method not in SUPPORTED_METHODS:
            return Reply(
                status_code=int(httpx.codes.SERVICE_UNAVAILABLE),
                error=InvalidRequestError(
                    "request method not support",
                    status_code=int(httpx.codes.SERVICE_UNAVAILABLE),
                ),
            )

        files = None
        if method == "file":
            try:
                files = self._read_upload(options)
            except FileReadError as exc:
                return Reply(error=exc)

        try:
            client = self.new_client(options)
        except (httpx.InvalidURL, ValueError) as exc:
            return Reply(error=InvalidRequestError(f"configure client: {exc}", cause=exc))

        with client:

            def build() -> httpx.Request:
                return self._build_request(client, method, url, options, files)

            try:
                first = build()
            except (httpx.InvalidURL, TypeError, ValueError) as exc:
                return Reply(error=InvalidRequestError(f"build request: {exc}", cause=exc))

            logger.debug(
                "%s %s headers=%s",
                first.method,
                first.url,
                sanitize_headers(dict(first.headers)),
            )
            response, error = self._send_with_retries(client, first, build, options)
            return get_result(response, error)

    def get(self, url: str, options: RequestOptions | None = None) -> Reply:
        return self.do("get", url, options)

    def delete(self, url: str, options: RequestOptions | None = None) -> Reply:
        return self.do("delete", url, options)

    def head(self, url: str, options: RequestOptions | None = None) -> Reply:
        return self.do("head", url, options)

    def post(self, url: str, options: RequestOptions | None = None) -> Reply:
        return self.do("post", url, options)

    def put(self, url: str, options: RequestOptions | None = None) -> Reply:
        return self.do("put", url, options)

    def patch(self, url: str, options: RequestOptions | None = None) -> Reply:
        return self.do("patch", url, options)

    def upload(
        self,
        url: str,
        file_name: str,
        file_param_name: str = "file",
        options: RequestOptions | None = None,
    ) -> Reply:
        options = replace(
            options or RequestOptions(),
            file_name=file_name,
            file_param_name=file_param_name,
        )
        return self.do("file", url, options)

    @staticmethod
    def _read_upload(options: RequestOptions) -> dict[str, tuple[str, bytes]]:
        if not options.file_name:
            raise FileReadError("read file error: no file name given")
        path = Path(options.file_name)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"read file error: {exc}", cause=exc) from exc
        return {options.file_param_name or "file": (path.name, content)}

    @staticmethod
    def _build_request(
        client: httpx.Client,
        method: str,
        url: str,
        options: RequestOptions,
        files: dict[str, tuple[str, bytes]] | None,
    ) -> httpx.Request:
        cookies = _request_cookies(options)
        if method in QUERY_METHODS:
            return client.build_request(
                method.upper(),
                url,
                params=parse_data(options.params),
                cookies=cookies,
            )

        data = parse_data(options.data)
        if method == "file":
            return client.build_request("POST", url, data=data, files=files, cookies=cookies)

        if options.json is not None:
            if data:
                logger.warning("both form data and json body set for %s %s; sending json body", method.upper(), url)
            return client.build_request(method.upper(), url, json=options.json, cookies=cookies)
        return client.build_request(method.upper(), url, data=data, cookies=cookies)

    def _send_with_retries(
        self,
        client: httpx.Client,
        first: httpx.Request,
        build: Callable[[], httpx.Request],
        options: RequestOptions,
    ) -> tuple[httpx.Response | None, Exception | None]:
        retries = options.retry_count
        conditions = options.retry_conditions or (retry_on_transport_error,)
        request = first
        attempt = 0
        while True:
            response, error = self._send(client, request, options.redirect_policies)
            if attempt >= retries or not _needs_retry(conditions, response, error):
                return response, error

            attempt += 1
            wait = self._retry_delay(attempt, options, response)
            logger.info(
                "retrying %s %s in %.2fs (attempt %d of %d): %s",
                request.method,
                request.url,
                wait,
                attempt,
                retries,
                _describe(response, error),
            )
            time.sleep(wait)
            request = build()

    @staticmethod
    def _send(
        client: httpx.Client,
        request: httpx.Request,
        policies: Sequence[RedirectPolicy],
    ) -> tuple[httpx.Response | None, Exception | None]:
        response: httpx.Response | None = None
        try:
            if not policies:
                return client.send(request), None

            response = client.send(request, follow_redirects=False)
            via = [request]
            while response.next_request is not None:
                next_request = response.next_request
                try:
                    apply_policies(policies, next_request, via)
                except RedirectPolicyError as exc:
                    return response, exc
                response = client.send(next_request, follow_redirects=False)
                via.append(next_request)
            return response, None
        except httpx.HTTPError as exc:
            return response, exc

    def _retry_delay(
        self,
        attempt: int,
        options: RequestOptions,
        response: httpx.Response | None,
    ) -> float:
        wait = options.retry_wait_time if options.retry_wait_time > 0 else self.default_retry_wait_time
        max_wait = (
            options.retry_max_wait_time
            if options.retry_max_wait_time > 0
            else self.default_retry_max_wait_time
        )
        if response is not None:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is not None:
                return max(0.0, min(retry_after, max_wait))
        ceiling = min(max_wait, wait * (2 ** attempt))
        return max(0.0, min(max_wait, ceiling / 2 + random.uniform(0, ceiling / 2)))
