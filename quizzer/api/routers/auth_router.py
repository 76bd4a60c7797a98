"""
Login router.

Mock authentication: any username/password pair that passes validation
receives a signed token for that username.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from loguru import logger

from quizzer.api.dependencies import get_container
from quizzer.schemas import LoginRequest, LoginResponse
from quizzer.services.container import ServiceContainer

router = APIRouter()


@router.post("", response_model=LoginResponse, summary="Obtain a bearer token")
def login(
    payload: LoginRequest,
    container: ServiceContainer = Depends(get_container),
) -> LoginResponse:
    """
    Issue a token carrying the username claim.

    Use the returned token as `Authorization: Bearer <token>` on every `/quiz` route.
    """
    token = container.token_service.issue(payload.username)
    logger.info(f"Issued token for {payload.username}")
    return LoginResponse(token=token, expires_in=container.token_service.expires_in)
