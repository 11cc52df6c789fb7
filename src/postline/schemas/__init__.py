"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import FeedPage, MessageResponse, OwnerSummary, PostEnvelope, PostResponse
from .user import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    StatusResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)

__all__ = [
    "FeedPage", "MessageResponse", "OwnerSummary", "PostEnvelope", "PostResponse",
    "LoginRequest", "LoginResponse", "SignupRequest", "SignupResponse",
    "StatusResponse", "StatusUpdateRequest", "StatusUpdateResponse",
]
