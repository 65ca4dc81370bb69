from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["customer", "admin", "superadmin"]
ADMIN_ROLES = ("admin", "superadmin")


class AuthUser(BaseModel):
    """
    Represents an authenticated user, built from the claims of a verified JWT.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="sub")
    email: Optional[str] = None
    role: Role = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
