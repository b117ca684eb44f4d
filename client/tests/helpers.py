"""Test doubles and helpers shared by the test modules."""

import asyncio
import json
from typing import Optional

import httpx

from shared.config import SessionTimings
from shared.models import User, UserRole
from modules.auth.models import ProfileUpdate, RegistrationRequest
from modules.auth_dialog.models import ToastVariant


# Short delays so timer-driven behaviour settles quickly in tests
FAST_TIMINGS = SessionTimings(
    profile_timeout=1.0,
    logout_timeout=1.0,
    admin_check_timeout=1.0,
    reset_token_timeout=1.0,
    request_timeout=1.0,
    storage_debounce=0.02,
    state_event_debounce=0.01,
    login_sync_delay=0.03,
    redirect_delay=0.01,
    signup_login_delay=0.02,
    reset_error_delay=0.03,
)

TEST_BASE_URL = "http://api.test"


def user_payload(email: str = "test@example.com", role: str = "ATTENDEE", **extra) -> dict:
    """Profile payload as the backend sends it."""
    payload = {"id": 7, "full_name": "Test User", "email": email, "role": role}
    payload.update(extra)
    return payload


def json_response(status_code: int = 200, body=None) -> httpx.Response:
    return httpx.Response(status_code, json=body if body is not None else {})


def undecodable_response(request: httpx.Request) -> httpx.Response:
    """A 200 whose body claims gzip but is not; httpx fails while reading it."""
    return httpx.Response(
        200,
        headers={"Content-Encoding": "gzip"},
        stream=httpx.ByteStream(b"definitely not gzip"),
    )


class RecordingTransport:
    """
    Routes requests to canned responses and records what was sent.

    Routes are keyed by (method, path); a route value may be a Response or
    a callable taking the request.
    """

    def __init__(self, routes: Optional[dict] = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        return route

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [r.url.path for r in self.requests if method is None or r.method == method]

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content or b"{}")


class RecordingNotifier:
    """INotifier that keeps every toast."""

    def __init__(self):
        self.toasts: list[tuple[str, Optional[str], ToastVariant]] = []

    def notify(
        self,
        title: str,
        description: Optional[str] = None,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> None:
        self.toasts.append((title, description, variant))

    @property
    def titles(self) -> list[str]:
        return [title for title, _, _ in self.toasts]


class RecordingNavigator:
    """INavigator that records navigations."""

    def __init__(self, path: str = "/"):
        self.current_path = path
        self.history: list[tuple[str, bool]] = []

    def navigate(self, path: str, replace: bool = False) -> None:
        self.current_path = path
        self.history.append((path, replace))


async def settle(seconds: float = 0.1) -> None:
    """Let scheduled timers and callbacks run."""
    await asyncio.sleep(seconds)


class FakeAuthApi:
    """
    In-memory IAuthApi.

    `profile` is what fetch_profile returns; `fetch_delay` keeps a fetch in
    flight for a while. Calls are counted per method name.
    """

    def __init__(self, profile: Optional[User] = None):
        self.profile = profile
        self.fetch_delay = 0.0
        self.calls: dict[str, int] = {}
        self.admin_exists = True
        self.login_body: dict = {}
        self.errors: dict[str, Exception] = {}
        self.registrations: list[tuple[str, RegistrationRequest]] = []
        self._in_flight = False

    def _record(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        if name in self.errors:
            raise self.errors[name]

    @property
    def profile_fetch_in_flight(self) -> bool:
        return self._in_flight

    async def fetch_profile(self) -> Optional[User]:
        if self._in_flight:
            return None
        self.calls["fetch_profile"] = self.calls.get("fetch_profile", 0) + 1
        self._in_flight = True
        try:
            if self.fetch_delay:
                await asyncio.sleep(self.fetch_delay)
            return self.profile
        finally:
            self._in_flight = False

    async def check_admin_exists(self) -> bool:
        self._record("check_admin_exists")
        return self.admin_exists

    async def login(self, email: str, password: str) -> dict:
        self._record("login")
        return self.login_body

    async def register(self, request: RegistrationRequest) -> dict:
        self._record("register")
        self.registrations.append(("attendee", request))
        return {"message": "Registered"}

    async def register_first_admin(self, request: RegistrationRequest) -> dict:
        self._record("register_first_admin")
        self.registrations.append(("admin", request))
        return {"message": "Registered"}

    async def forgot_password(self, email: str) -> str:
        self._record("forgot_password")
        return "Reset link sent"

    async def validate_reset_token(self, token: str) -> None:
        self._record("validate_reset_token")

    async def reset_password(self, token: str, password: str) -> str:
        self._record("reset_password")
        return "Password reset successfully"

    async def logout(self) -> None:
        self._record("logout")

    def google_login_url(self) -> str:
        return f"{TEST_BASE_URL}/auth/login/google"

    async def update_profile(self, update: ProfileUpdate) -> dict:
        self._record("update_profile")
        return {}

    async def register_staff(self, role: UserRole, request: RegistrationRequest) -> str:
        self._record("register_staff")
        self.registrations.append((UserRole(role).value.lower(), request))
        return "Registered"

    async def list_users(self) -> list[User]:
        self._record("list_users")
        return [self.profile] if self.profile else []


def make_user(email: str = "test@example.com", role: UserRole = UserRole.ATTENDEE, name: str = "Test User") -> User:
    return User(id="7", name=name, email=email, role=role)
