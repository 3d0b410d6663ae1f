"""Organization-scoped access checks called by the attribution service."""

from abc import ABC, abstractmethod
from collections.abc import Iterable


class OrganizationAccessError(PermissionError):
    """Raised when the caller may not read an organization's data."""

    pass


class OrganizationAccessPolicy(ABC):
    """Abstract base class for organization access policies."""

    @abstractmethod
    def ensure_access(self, organization_id: str) -> None:
        """
        Verify the caller may access an organization.

        Args:
            organization_id: Organization being read

        Raises:
            OrganizationAccessError: If access is denied
        """
        pass


class AllowAllAccessPolicy(OrganizationAccessPolicy):
    """Trusted callers (scheduled jobs, admin scripts)."""

    def ensure_access(self, organization_id: str) -> None:
        return None


class AllowListAccessPolicy(OrganizationAccessPolicy):
    """Grants access to a fixed set of organizations."""

    def __init__(self, organization_ids: Iterable[str]):
        self.organization_ids = frozenset(organization_ids)

    def ensure_access(self, organization_id: str) -> None:
        if organization_id not in self.organization_ids:
            raise OrganizationAccessError(
                f"Access to organization {organization_id} is not permitted"
            )
