"""
Auth dialog controller.

Drives the sign-in, sign-up, admin bootstrap, forgot-password and
reset-password forms. Rendering is left to the caller: the controller
exposes the current view and messages, and reports outcomes through the
notifier, the session store and the auth-state-changed event bus.
"""

import asyncio
import logging
from typing import Callable, Optional

from shared.config import SessionTimings, get_settings
from shared.exceptions import ApiUnavailableError, PulseError
from shared.models import User
from shared.scheduling import call_later

from modules.auth.exceptions import (
    AdminAlreadyExistsError,
    InvalidResetTokenError,
    InvalidUserPayloadError,
)
from modules.auth.interfaces import IAuthApi
from modules.auth.models import RegistrationRequest, normalize_user
from modules.auth.validation import (
    require_fields,
    validate_email,
    validate_new_password,
    validate_password_confirmation,
)
from modules.session.events import EventBus
from modules.session.interfaces import ISessionService
from modules.session.models import AuthAction, AuthStateChanged

from .interfaces import IKeyValueStorage, INotifier
from .models import DIALOG_SOURCE, PRE_AUTH_URL_KEY, AuthView, ToastVariant
from .storage import MemoryStorage
from .urls import extract_reset_token, is_google_auth_return, strip_query_params

logger = logging.getLogger(__name__)


class AuthDialog:
    """
    View-state controller for the auth dialog.

    Every handler catches PulseError and settles into `error`; network
    failures also raise a destructive toast. `is_loading` is always cleared.
    """

    def __init__(
        self,
        session: ISessionService,
        auth_api: IAuthApi,
        notifier: INotifier,
        *,
        event_bus: Optional[EventBus] = None,
        on_close: Optional[Callable[[], None]] = None,
        storage: Optional[IKeyValueStorage] = None,
        timings: Optional[SessionTimings] = None,
        initial_view: AuthView = AuthView.SIGNIN,
    ):
        self._session = session
        self._auth = auth_api
        self._notifier = notifier
        self._event_bus = event_bus or getattr(session, "event_bus", None) or EventBus()
        self._on_close = on_close
        self._storage = storage if storage is not None else MemoryStorage()
        self._timings = timings or get_settings().timings()

        self.view = initial_view
        self.is_open = False
        self.is_loading = False
        self.error: Optional[str] = None
        self.success_message: Optional[str] = None
        self.prefill_email: Optional[str] = None

        self.admin_exists: Optional[bool] = None

        self.reset_token: Optional[str] = None
        self.reset_token_valid = False
        self.is_validating_token = False

        self._reset_fallback: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Opening, closing and view changes
    # -------------------------------------------------------------------------

    async def open(self, url: Optional[str] = None) -> Optional[str]:
        """
        Open the dialog.

        Checks whether an admin exists, then applies any reset token or
        Google return marker found in `url`.

        Returns:
            The URL with consumed query parameters removed, or None
        """
        self.is_open = True
        await self.check_admin()
        if url:
            return await self.handle_url(url)
        return None

    def close(self) -> None:
        self.is_open = False
        if self._on_close:
            self._on_close()

    def switch_view(self, view: AuthView) -> None:
        self._cancel_reset_fallback()
        self.view = view
        self.error = None
        self.success_message = None

    async def check_admin(self) -> bool:
        """
        Ask whether a bootstrap admin exists.

        On any failure an admin is assumed to exist, so admin registration
        is never offered on an ambiguous answer.
        """
        try:
            exists = await self._auth.check_admin_exists()
        except PulseError as e:
            logger.warning(f"Admin check failed, assuming an admin exists: {e.message}")
            exists = True

        self.admin_exists = exists
        if not exists and self.view == AuthView.SIGNIN:
            logger.info("No admin account yet, showing admin registration")
            self.view = AuthView.ADMIN_REGISTRATION
        return exists

    async def handle_url(self, url: str) -> str:
        """
        Apply a reset token or a Google sign-in return found in the URL.

        Returns the URL without the consumed parameter, so a reload does not
        replay it.
        """
        token = extract_reset_token(url)
        if token:
            await self.begin_password_reset(token)
            return strip_query_params(url, "token")
        if is_google_auth_return(url):
            return await self.complete_google_login(url)
        return url

    # -------------------------------------------------------------------------
    # Sign in / sign up
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> bool:
        self._begin()
        try:
            require_fields(email=email, password=password)
            body = await self._auth.login(email.strip(), password)
            user = normalize_user(body) or await self._auth.fetch_profile()
            if user is None:
                raise InvalidUserPayloadError(
                    "Signed in, but your profile could not be loaded"
                )
            self._complete_login(user)
            return True
        except PulseError as e:
            self._fail(e)
            return False
        finally:
            self.is_loading = False

    async def sign_up(self, request: RegistrationRequest) -> Optional[asyncio.Task]:
        """
        Register an attendee account, then sign in automatically.

        Returns:
            The scheduled sign-in task, or None if registration failed
        """
        return await self._register(request, admin=False)

    async def register_admin(self, request: RegistrationRequest) -> Optional[asyncio.Task]:
        """Register the first admin account, then sign in automatically."""
        return await self._register(request, admin=True)

    async def _register(
        self, request: RegistrationRequest, admin: bool
    ) -> Optional[asyncio.Task]:
        self._begin()
        try:
            self._validate_registration(request)
            if admin:
                await self._auth.register_first_admin(request)
            else:
                await self._auth.register(request)
        except AdminAlreadyExistsError as e:
            self.admin_exists = True
            self._fail(e)
            self.view = AuthView.SIGNIN
            return None
        except PulseError as e:
            self._fail(e)
            return None
        finally:
            self.is_loading = False

        if admin:
            self.admin_exists = True
        self.success_message = "Account created successfully! Signing you in..."
        self._notifier.notify("Registration Successful", self.success_message)
        logger.info(f"Registered {'admin' if admin else 'account'} {request.email}")

        task = call_later(
            self._timings.signup_login_delay,
            self._sign_in_after_registration,
            request.email,
            request.password,
        )
        self._track(task)
        return task

    async def _sign_in_after_registration(self, email: str, password: str) -> bool:
        if await self.sign_in(email, password):
            return True
        logger.info("Automatic sign-in after registration failed, showing sign-in form")
        self.view = AuthView.SIGNIN
        self.prefill_email = email
        return False

    @staticmethod
    def _validate_registration(request: RegistrationRequest) -> None:
        require_fields(
            full_name=request.full_name,
            email=request.email,
            password=request.password,
        )
        validate_email(request.email)
        validate_new_password(request.password)
        if request.confirm_password is not None:
            validate_password_confirmation(request.password, request.confirm_password)

    # -------------------------------------------------------------------------
    # Password reset
    # -------------------------------------------------------------------------

    async def request_password_reset(self, email: str) -> bool:
        self._begin()
        try:
            require_fields(email=email)
            validate_email(email)
            message = await self._auth.forgot_password(email.strip())
            self.success_message = message
            self._notifier.notify("Reset Email Sent", message)
            return True
        except PulseError as e:
            self._fail(e)
            return False
        finally:
            self.is_loading = False

    async def begin_password_reset(self, token: str) -> bool:
        """
        Show the reset form for a token and validate it with the server.

        An invalid token shows the error, then falls back to the
        forgot-password view after the reset error delay.
        """
        self._cancel_reset_fallback()
        self.view = AuthView.RESET_PASSWORD
        self.reset_token = token
        self.reset_token_valid = False
        self.error = None
        self.success_message = None
        self.is_validating_token = True
        try:
            await self._auth.validate_reset_token(token)
            self.reset_token_valid = True
            return True
        except PulseError as e:
            logger.info(f"Reset token rejected: {e.message}")
            self.error = e.message
            self._reset_fallback = call_later(
                self._timings.reset_error_delay, self._expire_reset_view
            )
            return False
        finally:
            self.is_validating_token = False

    def _expire_reset_view(self) -> None:
        self._reset_fallback = None
        if self.view != AuthView.RESET_PASSWORD:
            return
        self.view = AuthView.FORGOT_PASSWORD
        self.reset_token = None
        self.reset_token_valid = False

    async def reset_password(self, password: str, confirm_password: str) -> bool:
        self._begin()
        try:
            if not self.reset_token or not self.reset_token_valid:
                raise InvalidResetTokenError()
            require_fields(password=password, confirm_password=confirm_password)
            validate_new_password(password)
            validate_password_confirmation(password, confirm_password)

            message = await self._auth.reset_password(self.reset_token, password)
            self.reset_token = None
            self.reset_token_valid = False
            self.switch_view(AuthView.SIGNIN)
            self.success_message = message
            self._notifier.notify("Password Reset", message)
            return True
        except PulseError as e:
            self._fail(e)
            return False
        finally:
            self.is_loading = False

    # -------------------------------------------------------------------------
    # Google sign-in
    # -------------------------------------------------------------------------

    def start_google_login(self, return_url: Optional[str] = None) -> str:
        """
        Begin Google sign-in.

        Returns:
            The backend URL the browser must be redirected to
        """
        if return_url:
            self._storage.set(PRE_AUTH_URL_KEY, return_url)
        return self._auth.google_login_url()

    async def complete_google_login(self, url: str) -> str:
        """
        Finish Google sign-in after the backend redirected back.

        Returns:
            The URL with the google_auth marker removed
        """
        cleaned = strip_query_params(url, "google_auth")
        self._begin()
        try:
            user = await self._auth.fetch_profile()
            if user is None:
                self.error = "Google sign-in could not be completed"
                self._notifier.notify("Login Failed", self.error, ToastVariant.DESTRUCTIVE)
            else:
                self._complete_login(user)
        finally:
            self.is_loading = False
        return cleaned

    def google_callback_target(self, default: str = "/") -> str:
        """Where to send the user after Google sign-in; forgets the stored URL."""
        target = self._storage.get(PRE_AUTH_URL_KEY)
        self._storage.remove(PRE_AUTH_URL_KEY)
        return target or default

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def cancel_pending(self) -> None:
        """Cancel scheduled sign-ins and view fallbacks."""
        self._cancel_reset_fallback()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def _complete_login(self, user: User) -> None:
        self._session.login(user)
        self.close()
        self._notifier.notify("Login Successful", f"Welcome, {user.name or user.email}!")
        self._event_bus.dispatch(
            AuthStateChanged(
                action=AuthAction.LOGIN,
                user=user.model_dump(mode="json"),
                source=DIALOG_SOURCE,
            )
        )

    def _begin(self) -> None:
        self.error = None
        self.success_message = None
        self.is_loading = True

    def _fail(self, error: PulseError) -> None:
        self.error = error.message
        if isinstance(error, ApiUnavailableError):
            self._notifier.notify("Error", error.message, ToastVariant.DESTRUCTIVE)

    def _cancel_reset_fallback(self) -> None:
        if self._reset_fallback is not None and not self._reset_fallback.done():
            self._reset_fallback.cancel()
        self._reset_fallback = None

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
