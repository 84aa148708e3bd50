"""Account and session schemas."""
from typing import Literal, Optional
from pydantic import BaseModel

Role = Literal["viewer", "creator", "admin"]
Tier = Literal["free", "premium"]


class UserProfile(BaseModel):
    """Row of the profiles table."""
    id: str
    role: Role = "viewer"
    tier: Tier = "free"
    username: Optional[str] = None


class ViewerSession(BaseModel):
    """The signed-in caller as seen by the routes."""
    user_id: str
    access_token: str
    email: Optional[str] = None
    role: Role = "viewer"
    tier: Tier = "free"
    username: Optional[str] = None

    @property
    def is_premium(self) -> bool:
        return self.tier == "premium"


class AccountResponse(BaseModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    role: Role
    tier: Tier


class MessageResponse(BaseModel):
    message: str
