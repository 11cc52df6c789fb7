# src/postline/api/v1/endpoints/auth.py
"""Authentication endpoints for the Postline API."""

from __future__ import annotations

from fastapi import APIRouter, status

from postline.api.v1.dependencies import AccountServiceDep
from postline.schemas.user import LoginRequest, LoginResponse, SignupRequest, SignupResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/signup",
    summary="Register a new account",
    status_code=status.HTTP_201_CREATED,
    response_model=SignupResponse,
)
def signup(payload: SignupRequest, accounts: AccountServiceDep) -> SignupResponse:
    """Create an account; every invalid field is reported in one response."""
    user = accounts.signup(payload.email, payload.name, payload.password)
    return SignupResponse(user_id=user.id)


@router.post(
    "/login",
    summary="Exchange email and password for a bearer token",
    response_model=LoginResponse,
)
def login(payload: LoginRequest, accounts: AccountServiceDep) -> LoginResponse:
    return accounts.login(payload.email, payload.password)
