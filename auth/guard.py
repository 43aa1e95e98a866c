"""Session guard - per-request authentication state and redirect decisions.

Pure decision logic with no HTTP framework types: the middleware supplies
the path, the URL fragment and a CookieStore, and acts on the returned
GuardDecision. Nothing is cached between calls; every evaluation performs
its own session lookup.
"""

import logging
import re

from auth.config import GuardConfig
from auth.cookies import CookieStore
from auth.provider import SessionProvider
from auth.types import GuardAction, GuardDecision, PathClass, Session

logger = logging.getLogger(__name__)


class SessionGuard:
    """Decides whether a request proceeds or is redirected.

    Order of evaluation:
    1. Session lookup through the provider (fail closed on any error)
    2. Callback path: token-in-fragment / session truth table
    3. Protected path without session -> login
    4. Auth path with session -> landing page
    5. Everything else -> forward
    """

    def __init__(self, provider: SessionProvider, config: GuardConfig):
        self._provider = provider
        self._config = config
        self._excluded = re.compile(config.excluded_path_pattern)

    @property
    def config(self) -> GuardConfig:
        return self._config

    def applies_to(self, path: str) -> bool:
        """False for static assets the guard never runs on."""
        return self._excluded.match(path) is None

    def classify_path(self, path: str) -> PathClass:
        if any(path.startswith(prefix) for prefix in self._config.protected_prefixes):
            return PathClass.PROTECTED
        if any(path.startswith(prefix) for prefix in self._config.auth_prefixes):
            return PathClass.AUTH
        return PathClass.UNCLASSIFIED

    def lookup_session(self, cookies: CookieStore) -> Session | None:
        """Ask the provider for the current session. Errors mean no session."""
        try:
            return self._provider.lookup_session(cookies)
        except Exception as e:
            logger.warning(f"Session lookup failed, treating request as unauthenticated: {e}")
            return None

    def evaluate(self, path: str, fragment: str, cookies: CookieStore) -> GuardDecision:
        """Run the session lookup and decide what happens to the request."""
        session = self.lookup_session(cookies)
        path_class = self.classify_path(path)

        if path == self._config.callback_path:
            decision = self._decide_callback(path_class, fragment, session)
        else:
            decision = self._decide(path_class, session)

        logger.debug(
            f"Guard {decision.action.value} {path} "
            f"(class={path_class.value}, session={session is not None}): {decision.reason}"
        )
        if decision.is_redirect:
            logger.info(f"Redirecting {path} to {decision.location}: {decision.reason}")
        return decision

    def _decide_callback(
        self,
        path_class: PathClass,
        fragment: str,
        session: Session | None,
    ) -> GuardDecision:
        has_token = self._config.token_fragment_marker in (fragment or "")

        if session is not None:
            reason = "callback with session" + (" and token" if has_token else "")
            return self._redirect(self._config.landing_path, path_class, session, reason)

        if has_token:
            return GuardDecision(
                action=GuardAction.FORWARD,
                path_class=path_class,
                session=None,
                reason="callback token awaiting client-side session setup",
            )

        return self._redirect(self._config.login_path, path_class, None, "callback without token or session")

    def _decide(self, path_class: PathClass, session: Session | None) -> GuardDecision:
        if path_class is PathClass.PROTECTED and session is None:
            return self._redirect(self._config.login_path, path_class, None, "protected path without session")

        if path_class is PathClass.AUTH and session is not None:
            return self._redirect(self._config.landing_path, path_class, session, "auth path with active session")

        return GuardDecision(
            action=GuardAction.FORWARD,
            path_class=path_class,
            session=session,
            reason="allowed",
        )

    @staticmethod
    def _redirect(
        location: str,
        path_class: PathClass,
        session: Session | None,
        reason: str,
    ) -> GuardDecision:
        return GuardDecision(
            action=GuardAction.REDIRECT,
            path_class=path_class,
            session=session,
            reason=reason,
            location=location,
        )
