"""Response models for the auth API."""

from typing import Optional

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Public view of the signed-in user."""
    
    id: str = Field(..., description="Identity id")
    email: Optional[str] = Field(None, description="Email address")


class SessionResponse(BaseModel):
    """Session state of the current request."""
    
    authenticated: bool = Field(..., description="Whether a valid session exists")
    user: Optional[UserResponse] = Field(None, description="Signed-in user")
