# This file defines the signed-in user's favorites endpoints.
# Every route requires a bearer token; the user id comes from the token, never from the request body.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request

from servicemap.api.api_config import ApiConfig
from servicemap.api.dependencies import get_config, get_current_user_id, get_favorite_service
from servicemap.api.response_envelope import envelope
from servicemap.api.schemas.common import MessageResponse
from servicemap.api.schemas.favorite_schemas import (
    FavoriteListResponseV1,
    FavoriteResponseV1,
    FavoriteStatusResponseV1,
)
from servicemap.api.services.favorite_service import FavoriteService
from servicemap.api.validation import parse_limit, parse_page, validate_favorite_request, validate_service_id

router = APIRouter(prefix="/favorites", tags=["favorites"])
FavoriteServiceDep = Annotated[FavoriteService, Depends(get_favorite_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
CurrentUserDep = Annotated[int, Depends(get_current_user_id)]


@router.get("", response_model=FavoriteListResponseV1)
def list_favorites(
    request: Request,
    service: FavoriteServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> dict[str, object]:
    result = service.list_favorites(
        user_id,
        page=parse_page(page),
        limit=parse_limit(limit, default=config.default_page_size, maximum=config.max_page_size),
    )
    return envelope(config, request.state.request_id, result)


@router.post("", response_model=FavoriteResponseV1, status_code=201)
def add_favorite(
    request: Request,
    service: FavoriteServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
    body: Annotated[dict[str, Any] | None, Body()] = None,
) -> dict[str, object]:
    favorite = service.add_favorite(user_id, validate_favorite_request(body))
    return envelope(config, request.state.request_id, favorite, message="Service added to favorites")


@router.delete("", response_model=MessageResponse)
def clear_favorites(
    request: Request,
    service: FavoriteServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
) -> dict[str, object]:
    service.clear_favorites(user_id)
    return envelope(config, request.state.request_id, None, message="All favorites cleared")


@router.delete("/{service_id}", response_model=MessageResponse)
def remove_favorite(
    request: Request,
    service_id: str,
    service: FavoriteServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
) -> dict[str, object]:
    service.remove_favorite(user_id, validate_service_id(service_id))
    return envelope(config, request.state.request_id, None, message="Service removed from favorites")


@router.get("/{service_id}/status", response_model=FavoriteStatusResponseV1)
def favorite_status(
    request: Request,
    service_id: str,
    service: FavoriteServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
) -> dict[str, object]:
    return envelope(config, request.state.request_id, service.check_status(user_id, validate_service_id(service_id)))


@router.put("/{service_id}/toggle", response_model=FavoriteStatusResponseV1)
def toggle_favorite(
    request: Request,
    service_id: str,
    service: FavoriteServiceDep,
    config: ConfigDep,
    user_id: CurrentUserDep,
) -> dict[str, object]:
    result = service.toggle_favorite(user_id, validate_service_id(service_id))
    return envelope(
        config,
        request.state.request_id,
        {"is_favorite": result["is_favorite"]},
        message=result["message"],
    )
