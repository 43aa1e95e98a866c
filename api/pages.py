"""Minimal pages for the sign-in flow and the landing page.

Layout and styling live in the frontend; these exist so the guard's
redirect targets resolve and the token callback can complete.
"""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from auth.config import GuardConfig

LOGIN_PAGE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Sign in</title></head>
<body>
  <h1>Sign in</h1>
  <form id="login">
    <input name="email" type="email" placeholder="Email" required>
    <input name="password" type="password" placeholder="Password" required>
    <button type="submit">Sign in</button>
  </form>
  <p id="error" role="alert"></p>
  <script>
    document.getElementById("login").addEventListener("submit", async (event) => {
      event.preventDefault();
      const form = new FormData(event.target);
      const response = await fetch("/auth/login", {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        body: JSON.stringify({email: form.get("email"), password: form.get("password")}),
      });
      const body = await response.json();
      if (response.ok) {
        window.location.replace(body.redirect_to);
      } else {
        document.getElementById("error").textContent = body.message;
      }
    });
  </script>
</body>
</html>
"""

# The fragment never reaches the server, so the page hands tokens over itself.
CALLBACK_PAGE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Signing in...</title></head>
<body>
  <h1>Redirecting...</h1>
  <p>If you're not automatically redirected, <a href="__LOGIN__">go to login</a>.</p>
  <script>
    (async () => {
      const params = new URLSearchParams(window.location.hash.slice(1));
      if (!params.get("access_token")) {
        window.location.replace("__LOGIN__");
        return;
      }
      const response = await fetch("/auth/session", {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        body: JSON.stringify({
          access_token: params.get("access_token"),
          refresh_token: params.get("refresh_token"),
          expires_in: Number(params.get("expires_in")) || null,
          expires_at: Number(params.get("expires_at")) || null,
        }),
      });
      window.location.replace(response.ok ? "__LANDING__" : "__LOGIN__");
    })();
  </script>
</body>
</html>
"""


def create_pages_router(guard_config: GuardConfig) -> APIRouter:
    router = APIRouter(include_in_schema=False)

    callback_html = (
        CALLBACK_PAGE
        .replace("__LOGIN__", guard_config.login_path)
        .replace("__LANDING__", guard_config.landing_path)
    )

    @router.get(guard_config.login_path, response_class=HTMLResponse)
    async def login_page():
        return LOGIN_PAGE

    @router.get(guard_config.callback_path, response_class=HTMLResponse)
    async def callback_page():
        return callback_html

    @router.get(guard_config.landing_path)
    async def dashboard(request: Request):
        session = getattr(request.state, "session", None)
        email = session.user.email if session else None
        return {
            "message": "Welcome to your CRM dashboard",
            "user": {"email": email} if session else None,
        }

    return router
