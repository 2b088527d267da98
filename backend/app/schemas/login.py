"""Login request schema for agent and admin sign-in."""

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    """Payload for login attempts."""

    email: EmailStr
    password: str
