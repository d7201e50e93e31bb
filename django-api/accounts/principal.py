"""Request-scoped identity passed explicitly into every service call."""

from dataclasses import dataclass

from core.errors import UnauthorizedError

ROLE_ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as seen by the services."""

    id: str
    role: str
    department: str = ""
    name: str = ""
    email: str = ""
    is_superuser: bool = False

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == ROLE_ADMIN


def principal_from_user(user) -> Principal:
    """Build a Principal from a Django user.

    Raises:
        UnauthorizedError: If the user is missing or anonymous.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise UnauthorizedError()

    full_name = user.get_full_name() if hasattr(user, "get_full_name") else ""
    return Principal(
        id=str(user.pk),
        role=getattr(user, "role", "") or "",
        department=getattr(user, "department", "") or "",
        name=full_name or user.get_username(),
        email=getattr(user, "email", "") or "",
        is_superuser=bool(getattr(user, "is_superuser", False)),
    )
