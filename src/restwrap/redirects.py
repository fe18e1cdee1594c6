"""Redirect policies.

A policy is any callable ``policy(request, via)`` where ``request`` is the
redirect about to be sent and ``via`` holds the requests already sent, oldest
first. A policy refuses the hop by raising :class:`RedirectPolicyError`.
"""

from __future__ import annotations

from typing import Callable, Sequence

import httpx

from .exceptions import RedirectPolicyError

RedirectPolicy = Callable[[httpx.Request, Sequence[httpx.Request]], None]


class FlexibleRedirectPolicy:
    """Follow at most ``max_redirects`` redirects."""

    def __init__(self, max_redirects: int = 10) -> None:
        self.max_redirects = max_redirects

    def __call__(self, request: httpx.Request, via: Sequence[httpx.Request]) -> None:
        if len(via) >= self.max_redirects:
            raise RedirectPolicyError(f"stopped after {self.max_redirects} redirects")

    def __repr__(self) -> str:
        return f"FlexibleRedirectPolicy({self.max_redirects})"


class NoRedirectPolicy:
    """Refuse every redirect."""

    def __call__(self, request: httpx.Request, via: Sequence[httpx.Request]) -> None:
        raise RedirectPolicyError("auto redirect is disabled")

    def __repr__(self) -> str:
        return "NoRedirectPolicy()"


class DomainCheckRedirectPolicy:
    """Only follow redirects whose target host is in ``hostnames``."""

    def __init__(self, *hostnames: str) -> None:
        self.hostnames = frozenset(host.lower() for host in hostnames)

    def __call__(self, request: httpx.Request, via: Sequence[httpx.Request]) -> None:
        if request.url.host.lower() not in self.hostnames:
            raise RedirectPolicyError(f"redirect to {request.url.host} is not allowed")

    def __repr__(self) -> str:
        return f"DomainCheckRedirectPolicy({', '.join(sorted(self.hostnames))})"


def apply_policies(
    policies: Sequence[RedirectPolicy],
    request: httpx.Request,
    via: Sequence[httpx.Request],
) -> None:
    for policy in policies:
        policy(request, via)
