"""Session payload schema."""
from pydantic import BaseModel, ConfigDict

from helpdesk.models.user import User, UserRole


class SessionPayload(BaseModel):
    """What the session store keeps for a logged-in account."""

    account_id: int
    username: str
    email: str
    role: UserRole
    department: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user: User) -> "SessionPayload":
        return cls(
            account_id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            department=user.department,
        )
