"""
Pulse - terminal client for the Pulse event platform.

Signs in, registers, resets passwords and browses events against the Pulse
API. Each invocation is one session: it starts unauthenticated, like a
fresh page load, and the server cookie lives only as long as the process.
"""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table

from shared.config import get_settings
from shared.exceptions import ApiError, PulseError
from shared.http import ApiClient
from shared.models import User
from modules.auth.models import RegistrationRequest
from modules.auth.service import STAFF_REGISTRATION_PATHS, AuthApiService
from modules.auth.validation import (
    require_fields,
    validate_email,
    validate_new_password,
    validate_password_confirmation,
)
from modules.auth_dialog.models import AuthView, ToastVariant
from modules.auth_dialog.service import AuthDialog
from modules.events.service import EventsService
from modules.navigation.models import RedirectOptions
from modules.navigation.service import AuthRedirectGuard
from modules.session.broadcast import BroadcastHub
from modules.session.service import SessionService

console = Console()


class ConsoleNotifier:
    """Prints toasts to the terminal."""

    def notify(
        self,
        title: str,
        description: Optional[str] = None,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> None:
        style = "red" if variant == ToastVariant.DESTRUCTIVE else "green"
        line = f"[{style}]{title}[/{style}]"
        if description:
            line += f" {description}"
        console.print(line)


class ConsoleNavigator:
    """Records the route the redirect guard picks."""

    def __init__(self, path: str = "/"):
        self._path = path

    @property
    def current_path(self) -> str:
        return self._path

    def navigate(self, path: str, replace: bool = False) -> None:
        self._path = path
        console.print(f"[dim]Landing route: {path}[/dim]")


def print_user(user: User) -> None:
    table = Table(show_header=False, box=None)
    table.add_row("[bold]Name[/bold]", user.name or "-")
    table.add_row("[bold]Email[/bold]", user.email)
    table.add_row("[bold]Role[/bold]", user.role.value)
    table.add_row("[bold]Phone[/bold]", user.phone_number or "-")
    console.print(table)


def prompt_new_password() -> tuple[str, str]:
    password = getpass.getpass("New password: ")
    confirm = getpass.getpass("Confirm password: ")
    return password, confirm


async def sign_in_as_admin(app: "ClientApp", args: argparse.Namespace) -> bool:
    """Sign in with the --as credentials before an admin-only command."""
    password = args.password or getpass.getpass("Admin password: ")
    if not await app.dialog.sign_in(args.admin_email, password):
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return False
    await app.settle()
    return True


class ClientApp:
    """Wires one tab's worth of services around a single API client."""

    def __init__(self, api: ApiClient):
        settings = get_settings()
        self.timings = settings.timings()
        self.auth = AuthApiService(api, self.timings)
        self.hub = BroadcastHub()
        self.session = SessionService(self.auth, self.hub.channel("cli"), timings=self.timings)
        self.navigator = ConsoleNavigator()
        self.guard = AuthRedirectGuard(
            self.session,
            self.navigator,
            RedirectOptions.from_settings(settings, redirect_delay=0),
        )
        self.dialog = AuthDialog(
            self.session,
            self.auth,
            ConsoleNotifier(),
            event_bus=self.session.event_bus,
            timings=self.timings,
        )
        self.events = EventsService(api)

    async def start(self) -> None:
        self.session.start()
        await self.session.initialize()
        self.guard.start()

    async def settle(self) -> None:
        """Let a scheduled redirect run before the process exits."""
        pending = self.guard.pending_redirect
        if pending is not None:
            await pending

    def close(self) -> None:
        self.guard.close()
        self.dialog.cancel_pending()
        self.session.close()


async def check_admin(app: ClientApp, args: argparse.Namespace) -> int:
    exists = await app.dialog.check_admin()
    if exists:
        console.print("An admin account exists.")
    else:
        console.print("[yellow]No admin account yet.[/yellow] Run `signup --admin` to create one.")
    return 0


async def login(app: ClientApp, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    if not await app.dialog.sign_in(args.email, password):
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return 1
    await app.settle()
    print_user(app.session.user)
    return 0


async def logout(app: ClientApp, args: argparse.Namespace) -> int:
    await app.session.logout_user()
    console.print("Signed out.")
    return 0


async def signup(app: ClientApp, args: argparse.Namespace) -> int:
    password, confirm = prompt_new_password()
    request = RegistrationRequest(
        full_name=args.full_name,
        email=args.email,
        phone_number=args.phone or "",
        password=password,
        confirm_password=confirm,
    )
    if args.admin:
        task = await app.dialog.register_admin(request)
    else:
        task = await app.dialog.sign_up(request)

    if task is None:
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return 1
    if not await task:
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return 1
    await app.settle()
    print_user(app.session.user)
    return 0


async def forgot_password(app: ClientApp, args: argparse.Namespace) -> int:
    app.dialog.switch_view(AuthView.FORGOT_PASSWORD)
    if not await app.dialog.request_password_reset(args.email):
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return 1
    return 0


async def reset_password(app: ClientApp, args: argparse.Namespace) -> int:
    if not await app.dialog.begin_password_reset(args.token):
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return 1
    password, confirm = prompt_new_password()
    if not await app.dialog.reset_password(password, confirm):
        console.print(f"[red]Error:[/red] {app.dialog.error}")
        return 1
    return 0


async def list_events(app: ClientApp, args: argparse.Namespace) -> int:
    page = await app.events.list_events(page=args.page, per_page=args.per_page, search=args.search)
    if not page.events:
        console.print("[dim]No events found.[/dim]")
        return 0

    table = Table(title=f"Events (page {page.pagination.current_page} of {max(page.pagination.pages, 1)})")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Date")
    table.add_column("Location")
    table.add_column("Likes", justify="right")
    for event in page.events:
        table.add_row(
            str(event.id),
            event.name,
            event.date or "-",
            event.location or "-",
            str(event.likes_count),
        )
    console.print(table)
    return 0


async def list_users(app: ClientApp, args: argparse.Namespace) -> int:
    if not await sign_in_as_admin(app, args):
        return 1
    users = await app.auth.list_users()

    table = Table(title=f"Users ({len(users)})")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Role")
    for user in users:
        table.add_row(user.id or "-", user.name or "-", user.email, user.role.value)
    console.print(table)
    return 0


async def add_staff(app: ClientApp, args: argparse.Namespace) -> int:
    require_fields(full_name=args.full_name, email=args.email)
    validate_email(args.email)
    password, confirm = prompt_new_password()
    validate_new_password(password)
    validate_password_confirmation(password, confirm)

    if not await sign_in_as_admin(app, args):
        return 1
    message = await app.auth.register_staff(
        args.role,
        RegistrationRequest(
            full_name=args.full_name,
            email=args.email,
            phone_number=args.phone or "",
            password=password,
        ),
    )
    console.print(f"[green]{message}[/green]")
    return 0


COMMANDS = {
    "check-admin": check_admin,
    "login": login,
    "logout": logout,
    "signup": signup,
    "forgot-password": forgot_password,
    "reset-password": reset_password,
    "events": list_events,
    "users": list_users,
    "add-staff": add_staff,
}


def add_admin_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--as", dest="admin_email", required=True, metavar="EMAIL", help="Admin account to sign in with"
    )
    parser.add_argument("--password", help="Admin password (prompted if omitted)")


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="pulse",
        description=f"{settings.app_name}: terminal client for the Pulse event platform",
    )
    parser.add_argument(
        "--version", action="version", version=f"{settings.app_name} {settings.app_version}"
    )
    parser.add_argument("--api-url", help="Pulse API base URL (default: API_URL setting)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check-admin", help="Check whether an admin account exists")

    login_parser = subparsers.add_parser("login", help="Sign in and show your profile")
    login_parser.add_argument("email")
    login_parser.add_argument("--password", help="Password (prompted if omitted)")

    subparsers.add_parser("logout", help="End the server session")

    signup_parser = subparsers.add_parser("signup", help="Create an account and sign in")
    signup_parser.add_argument("email")
    signup_parser.add_argument("--full-name", required=True)
    signup_parser.add_argument("--phone")
    signup_parser.add_argument(
        "--admin", action="store_true", help="Register the first admin account"
    )

    forgot_parser = subparsers.add_parser("forgot-password", help="Email a reset link")
    forgot_parser.add_argument("email")

    reset_parser = subparsers.add_parser("reset-password", help="Set a new password with a reset token")
    reset_parser.add_argument("token")

    events_parser = subparsers.add_parser("events", help="List events")
    events_parser.add_argument("--page", "-p", type=int, default=1)
    events_parser.add_argument("--per-page", type=int, default=20)
    events_parser.add_argument("--search", "-s")

    users_parser = subparsers.add_parser("users", help="List user accounts (admin only)")
    add_admin_options(users_parser)

    staff_parser = subparsers.add_parser(
        "add-staff", help="Create an admin, organizer or security account (admin only)"
    )
    staff_parser.add_argument(
        "role", type=str.upper, choices=[role.value for role in STAFF_REGISTRATION_PATHS]
    )
    staff_parser.add_argument("email")
    staff_parser.add_argument("--full-name", required=True)
    staff_parser.add_argument("--phone")
    add_admin_options(staff_parser)

    return parser


async def run(args: argparse.Namespace) -> int:
    async with ApiClient(args.api_url) as api:
        app = ClientApp(api)
        try:
            await app.start()
            return await COMMANDS[args.command](app, args)
        except PulseError as e:
            console.print(f"[red]Error:[/red] {e.message}")
            if isinstance(e, ApiError) and e.is_server_error:
                console.print("[dim]The server had a problem, try again later.[/dim]")
            if get_settings().debug:
                console.print(e.to_dict())
            return 1
        finally:
            app.close()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level="DEBUG" if settings.debug else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
