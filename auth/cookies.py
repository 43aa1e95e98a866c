"""Cookie access seam between the HTTP framework and the session provider.

The session provider only ever sees a CookieStore. The middleware builds a
RequestCookieStore from the incoming request, lets the provider read and
write through it, then copies the recorded writes onto whatever response
goes back to the browser (forward or redirect alike).
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Protocol

from starlette.responses import Response

from auth.types import CookieOptions

logger = logging.getLogger(__name__)


class CookieStore(Protocol):
    """Minimal cookie interface handed to the session provider."""

    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str, options: CookieOptions) -> None: ...

    def remove(self, name: str, options: CookieOptions) -> None: ...


@dataclass(frozen=True)
class CookieMutation:
    """A pending Set-Cookie. value None means removal."""

    name: str
    value: str | None
    options: CookieOptions


class RequestCookieStore:
    """CookieStore over a request's cookies that records writes for the response.

    Reads see earlier writes from the same request, so a provider that
    rotates a token and then reads it back gets the new value.
    """

    def __init__(self, cookies: Mapping[str, str]):
        self._cookies = dict(cookies)
        self._mutations: dict[str, CookieMutation] = {}

    def get(self, name: str) -> str | None:
        if name in self._mutations:
            return self._mutations[name].value
        value = self._cookies.get(name)
        return value if value else None

    def set(self, name: str, value: str, options: CookieOptions) -> None:
        logger.debug(f"Cookie set: {name}")
        self._mutations[name] = CookieMutation(name, value, options)

    def remove(self, name: str, options: CookieOptions) -> None:
        logger.debug(f"Cookie remove: {name}")
        self._mutations[name] = CookieMutation(name, None, options)

    @property
    def mutations(self) -> list[CookieMutation]:
        """Pending writes in the order the names were first touched."""
        return list(self._mutations.values())

    def apply(self, response: Response) -> Response:
        """Write pending mutations onto the response as Set-Cookie headers.

        Cookies the response already sets (a route that logged the user in or
        out) take precedence and are left untouched.
        """
        already_set = {
            header.split("=", 1)[0].strip()
            for header in response.headers.getlist("set-cookie")
        }
        for mutation in self._mutations.values():
            if mutation.name in already_set:
                continue
            opts = mutation.options
            if mutation.value is None:
                response.delete_cookie(
                    key=mutation.name,
                    path=opts.path,
                    domain=opts.domain,
                    secure=opts.secure,
                    httponly=opts.httponly,
                    samesite=opts.samesite,
                )
            else:
                response.set_cookie(
                    key=mutation.name,
                    value=mutation.value,
                    max_age=opts.max_age,
                    path=opts.path,
                    domain=opts.domain,
                    secure=opts.secure,
                    httponly=opts.httponly,
                    samesite=opts.samesite,
                )
        return response
