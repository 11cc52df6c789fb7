# src/postline/api/v1/endpoints/users.py
"""Endpoints for the caller's own account status."""

from __future__ import annotations

from fastapi import APIRouter

from postline.api.v1.dependencies import AccountServiceDep, IdentityDep
from postline.schemas.user import StatusResponse, StatusUpdateRequest, StatusUpdateResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me/status", response_model=StatusResponse)
def get_status(identity: IdentityDep, accounts: AccountServiceDep) -> StatusResponse:
    """Return the free-text status of the authenticated user."""
    return StatusResponse(status=accounts.get_status(identity))


@router.patch("/me/status", response_model=StatusUpdateResponse)
def update_status(
    payload: StatusUpdateRequest,
    identity: IdentityDep,
    accounts: AccountServiceDep,
) -> StatusUpdateResponse:
    return StatusUpdateResponse(status=accounts.update_status(identity, payload.status))
