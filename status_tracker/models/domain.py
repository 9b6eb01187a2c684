# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Roles and the authenticated actor.
"""

from pydantic import BaseModel, Field

ROLE_EMPLOYEE = "employee"
ROLE_MANAGER = "manager"
ROLE_ADMIN = "admin"
VALID_ROLES = (ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN)
PRIVILEGED_ROLES = frozenset({ROLE_MANAGER, ROLE_ADMIN})


class Actor(BaseModel):
    """The authenticated caller of a request."""
    id: str = Field(..., min_length=1)
    name: str = ""
    role: str = Field(..., pattern="^(employee|manager|admin)$")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES
