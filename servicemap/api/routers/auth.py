# This file defines registration, login and profile endpoints.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from servicemap.api.api_config import ApiConfig
from servicemap.api.dependencies import get_auth_service, get_config, get_current_user_id
from servicemap.api.response_envelope import envelope
from servicemap.api.schemas.auth_schemas import AuthResponseV1, UserResponseV1
from servicemap.api.services.auth_service import AuthService
from servicemap.api.validation import validate_login, validate_registration

router = APIRouter(prefix="/auth", tags=["auth"])
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
CurrentUserDep = Annotated[int, Depends(get_current_user_id)]


@router.post("/register", response_model=AuthResponseV1, status_code=201)
def register(
    request: Request,
    service: AuthServiceDep,
    config: ConfigDep,
    body: Annotated[dict[str, Any] | None, Body()] = None,
) -> dict[str, object]:
    result = service.register(validate_registration(body))
    return envelope(config, request.state.request_id, result, message="User registered successfully")


@router.post("/login", response_model=AuthResponseV1)
def login(
    request: Request,
    service: AuthServiceDep,
    config: ConfigDep,
    body: Annotated[dict[str, Any] | None, Body()] = None,
) -> dict[str, object]:
    result = service.login(validate_login(body))
    return envelope(config, request.state.request_id, result, message="Login successful")


@router.get("/me", response_model=UserResponseV1)
def me(
    request: Request,
    service: AuthServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
) -> dict[str, object]:
    return envelope(config, request.state.request_id, service.get_user(user_id))
