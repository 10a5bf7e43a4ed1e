"""Principal descriptor and ownership/role rules."""
from dataclasses import dataclass

from models import User, UserRole
from exceptions import ForbiddenError
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, as resolved by the auth service for each request."""

    id: int
    role: UserRole
    is_active: bool = True

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, role=UserRole(user.role), is_active=bool(user.is_active))


def ensure_active(principal: Principal) -> None:
    """Reject principals whose account is disabled."""
    if not principal.is_active:
        logger.warning("Inactive principal rejected", principal_id=principal.id)
        raise ForbiddenError("User account is inactive")


def ensure_manager(principal: Principal, action: str) -> None:
    """
    Require the manager role.

    Args:
        principal: Caller
        action: What the caller attempted, for the error message

    Raises:
        ForbiddenError: If the caller is not a manager
    """
    ensure_active(principal)
    if not principal.is_manager:
        logger.warning("Manager-only action rejected", principal_id=principal.id, action=action)
        raise ForbiddenError(f"Only managers can {action}")


def ensure_owner_or_manager(principal: Principal, owner_id: int, resource: str, action: str) -> None:
    """
    Require the caller to own the resource or be a manager.

    Raises:
        ForbiddenError: If neither holds
    """
    ensure_active(principal)
    if principal.is_manager or principal.id == owner_id:
        return
    logger.warning(
        "Ownership check failed",
        principal_id=principal.id,
        owner_id=owner_id,
        resource=resource,
        action=action,
    )
    raise ForbiddenError(f"Not allowed to {action} this {resource}")
