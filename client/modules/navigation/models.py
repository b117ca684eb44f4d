"""Navigation module models and the role landing routes."""

from dataclasses import dataclass, field
from typing import Callable, Optional

from shared.config import Settings, get_settings
from shared.models import UserRole

# Landing route per role after sign-in
ROLE_LANDING_PATHS: dict[UserRole, str] = {
    UserRole.ADMIN: "/dashboard?tab=admin",
    UserRole.ORGANIZER: "/dashboard?tab=events",
    UserRole.SECURITY: "/dashboard?tab=scanner",
    UserRole.ATTENDEE: "/dashboard?tab=overview",
}

# Paths belonging to the sign-in flows themselves
AUTH_PATH_PREFIXES = (
    "/login",
    "/reset-password",
    "/forgot-password",
    "/google-callback",
)

RedirectCallback = Callable[[str, Optional[str]], None]


@dataclass
class RedirectOptions:
    """Behaviour of the redirect guard."""

    redirect_on_login: bool = True
    redirect_on_logout: bool = True
    logout_redirect_path: str = "/"
    redirect_delay: float = 0.1
    public_paths: list[str] = field(default_factory=lambda: ["/"])
    on_redirect: Optional[RedirectCallback] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "RedirectOptions":
        settings = settings or get_settings()
        values = {
            "logout_redirect_path": settings.logout_redirect_path,
            "redirect_delay": settings.redirect_delay,
            "public_paths": list(settings.public_paths),
        }
        values.update(overrides)
        return cls(**values)
