"""Safe navigation helpers.

Drill-down navigation targets are built from a browser-supplied location, so
they are security-sensitive. This module centralizes target validation using
Django's `url_has_allowed_host_and_scheme`.
"""

from __future__ import annotations

from collections.abc import Iterable

from django.conf import settings
from django.core.exceptions import DisallowedHost
from django.http import HttpRequest, HttpResponseRedirect
from django.shortcuts import redirect
from django.utils.http import url_has_allowed_host_and_scheme


def is_safe_target(request: HttpRequest, url: str | None) -> bool:
    """Return whether `url` stays on an allowed host and scheme.

    Args:
        request: Incoming request used for host + scheme validation.
        url: Candidate navigation target.

    Returns:
        True when the target is relative or points at an allowed host.
    """

    value = (url or "").strip()
    if not value:
        return False

    allowed_hosts = set(settings.ALLOWED_HOSTS)
    try:
        allowed_hosts.add(request.get_host())
    except DisallowedHost:
        pass

    return url_has_allowed_host_and_scheme(
        url=value,
        allowed_hosts=allowed_hosts,
        require_https=request.is_secure(),
    )


def safe_redirect(
    request: HttpRequest,
    *,
    candidates: Iterable[str | None],
    fallback: str,
) -> HttpResponseRedirect:
    """Redirect to the first safe URL from a candidate list.

    Args:
        request: Incoming request used for host + scheme validation.
        candidates: Candidate redirect URLs. The first safe value is used.
        fallback: Safe default URL to use when no candidates are safe.

    Returns:
        An HttpResponseRedirect to a safe URL.
    """

    for candidate in candidates:
        if is_safe_target(request, candidate):
            return redirect((candidate or "").strip())
    return redirect(fallback)
