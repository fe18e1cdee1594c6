"""Command-line front end: ``restwrap METHOD URL [options]``."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .client import Service
from .request_options import RequestOptions


def _pairs(values: list[str] | None, sep: str, flag: str) -> dict[str, str] | None:
    if not values:
        return None
    result: dict[str, str] = {}
    for item in values:
        key, found, value = item.partition(sep)
        if not found or not key.strip():
            raise ValueError(f"{flag} expects KEY{sep}VALUE, got {item!r}")
        result[key.strip()] = value.strip()
    return result


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="restwrap", description="Send one HTTP request.")
    parser.add_argument("method", help="get, delete, head, post, put, patch or file")
    parser.add_argument("url")
    parser.add_argument("--base-uri", default="")
    parser.add_argument("--timeout", type=float, default=Service.default_timeout)
    parser.add_argument("--keep-alive", action="store_true")
    parser.add_argument("-p", "--param", action="append", metavar="KEY=VALUE")
    parser.add_argument("-d", "--data", action="append", metavar="KEY=VALUE")
    parser.add_argument("-H", "--header", action="append", metavar="KEY:VALUE")
    parser.add_argument("--json", dest="json_body", metavar="JSON")
    parser.add_argument("--file", dest="file_name")
    parser.add_argument("--field", dest="file_param_name", default="file")
    parser.add_argument("--retry", type=int, default=0)
    parser.add_argument("--retry-wait", type=float, default=0)
    parser.add_argument("--retry-max-wait", type=float, default=0)
    parser.add_argument("--proxy")
    parser.add_argument("--user", metavar="USER:PASSWORD")
    parser.add_argument("--insecure", action="store_true")
    parser.add_argument("--redirect-policy", action="store_true")
    parser.add_argument("--max-redirects", type=int, default=Service.default_max_redirects)
    parser.add_argument("-i", "--include", action="store_true", help="print the status line first")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def _options(parser: argparse.ArgumentParser, args: argparse.Namespace) -> RequestOptions:
    try:
        params = _pairs(args.param, "=", "--param")
        data = _pairs(args.data, "=", "--data")
        headers = _pairs(args.header, ":", "--header")
        json_body = json.loads(args.json_body) if args.json_body is not None else None
    except ValueError as exc:
        parser.error(str(exc))

    user, password = None, None
    if args.user:
        user, found, password = args.user.partition(":")
        if not found or not user or not password:
            parser.error("--user expects USER:PASSWORD")

    return RequestOptions(
        insecure_skip_verify=args.insecure,
        proxy=args.proxy,
        basic_auth_user=user,
        basic_auth_password=password,
        retry_count=args.retry,
        retry_wait_time=args.retry_wait,
        retry_max_wait_time=args.retry_max_wait,
        params=params,
        data=data,
        headers=headers,
        enable_redirect_policy=args.redirect_policy,
        json=json_body,
        file_name=args.file_name,
        file_param_name=args.file_param_name,
    )


def _main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    service = Service(
        base_uri=args.base_uri,
        timeout=args.timeout,
        enable_keep_alive=args.keep_alive,
        max_redirects=args.max_redirects,
    )
    reply = service.do(args.method, args.url, _options(parser, args))

    if args.include and reply.status_code:
        print(f"HTTP {reply.status_code}")
    if reply.body:
        sys.stdout.write(reply.text())
        if not reply.text().endswith("\n"):
            sys.stdout.write("\n")

    if reply.error is not None:
        print(f"error: {reply.error}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    raise SystemExit(_main())
