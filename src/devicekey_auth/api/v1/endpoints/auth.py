# src/devicekey_auth/api/v1/endpoints/auth.py
"""Authentication endpoints: password login and device-key renewal."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from devicekey_auth.api.v1.dependencies import AuthServiceDep, CurrentEmailDep
from devicekey_auth.schemas.auth import (
    AuthResponse,
    InitRenewRequest,
    InitRenewResponse,
    LoginRequest,
    RenewTokenRequest,
    UserKeyResponse,
)

router = APIRouter(prefix="/auth", tags=["authentication"])

_FORBIDDEN = {status.HTTP_403_FORBIDDEN: {"description": "Credentials rejected"}}


@router.post(
    "/login",
    summary="Authenticate with a password and register a device key",
    response_model=AuthResponse,
    responses=_FORBIDDEN,
)
def login(payload: LoginRequest, service: AuthServiceDep) -> AuthResponse:
    """Check the password, store the device public key and issue a token."""
    return service.login(payload)


@router.post(
    "/init_renew",
    summary="Issue a renewal challenge for a device key",
    response_model=InitRenewResponse,
    responses=_FORBIDDEN,
)
def init_renew(payload: InitRenewRequest, service: AuthServiceDep) -> InitRenewResponse:
    """Return a single-use challenge the device must sign within the TTL."""
    return service.init_renew(payload)


@router.post(
    "/renew",
    summary="Renew a session with a signed challenge",
    response_model=AuthResponse,
    responses=_FORBIDDEN,
)
def renew(payload: RenewTokenRequest, service: AuthServiceDep) -> AuthResponse:
    """Verify the signature over email + challenge and issue a new token."""
    return service.renew(payload)


@router.get(
    "/mykeys",
    summary="List the caller's device keys",
    response_model=list[UserKeyResponse],
    response_model_exclude_none=True,
)
def list_my_keys(email: CurrentEmailDep, service: AuthServiceDep) -> list[UserKeyResponse]:
    return service.list_keys(email)


@router.delete(
    "/mykeys/{key_id}",
    summary="Revoke one of the caller's device keys",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_my_key(key_id: str, email: CurrentEmailDep, service: AuthServiceDep) -> Response:
    service.delete_key(email, key_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
