"""User-related Pydantic schemas.

Field rules are enforced by ``postline.services.validation`` so that every
violation is reported together; these models only describe shape.
"""

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    email: str = Field(..., description="Unique, case-insensitive login email")
    name: str = Field(..., description="Display name")
    password: str = Field(..., description="At least five letters or digits")


class SignupResponse(BaseModel):
    message: str = "User created"
    user_id: int


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    token: str = Field(..., description="JWT bearer token")
    user_id: int


class StatusResponse(BaseModel):
    status: str


class StatusUpdateRequest(BaseModel):
    status: str


class StatusUpdateResponse(BaseModel):
    message: str = "Status updated"
    status: str
