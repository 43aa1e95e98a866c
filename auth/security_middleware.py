"""Security middleware for FastAPI - session sync and route protection."""

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from auth.cookies import RequestCookieStore
from auth.guard import SessionGuard


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """Middleware that runs the session guard on every non-static request.

    For guarded paths:
    1. Builds a cookie store from the request cookies
    2. Evaluates the guard (provider round-trip runs in the threadpool)
    3. Exposes the resolved session as request.state.session
    4. Redirects (302) or forwards, copying refreshed cookies onto the response

    Static assets bypass the guard entirely.
    """

    def __init__(self, app, guard: SessionGuard):
        super().__init__(app)
        self._guard = guard

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        path = request.url.path

        if not self._guard.applies_to(path):
            return await call_next(request)

        cookies = RequestCookieStore(request.cookies)
        decision = await run_in_threadpool(
            self._guard.evaluate, path, request.url.fragment, cookies
        )

        request.state.session = decision.session

        if decision.is_redirect:
            target = request.url.replace(path=decision.location, query="", fragment="")
            response = RedirectResponse(url=str(target), status_code=302)
            return cookies.apply(response)

        response = await call_next(request)
        return cookies.apply(response)
