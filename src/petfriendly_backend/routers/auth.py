from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_user_service
from ..models import JwtAuthenticationResponse, LoginRequest, MessageResponse, RegisterRequest, Role
from ..security import create_access_token
from ..user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=JwtAuthenticationResponse)
def login(payload: LoginRequest, users: UserService = Depends(get_user_service)) -> JwtAuthenticationResponse:
    user = users.authenticate(str(payload.email), payload.password)
    if user is None:
        logger.warning(f"Failed login for {payload.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    logger.info(f"User {user.email} logged in")
    return JwtAuthenticationResponse(access_token=create_access_token(user))


@router.post("/register", response_model=MessageResponse)
def register(payload: RegisterRequest, users: UserService = Depends(get_user_service)) -> MessageResponse:
    users.create(payload, role=Role.USER)
    return MessageResponse(message="User registered successfully!")


@router.post("/register/foundation", response_model=MessageResponse)
@router.post("/register-foundation", response_model=MessageResponse, include_in_schema=False)
def register_foundation(payload: RegisterRequest, users: UserService = Depends(get_user_service)) -> MessageResponse:
    users.create(payload, role=Role.FOUNDATION_ADMIN)
    return MessageResponse(message="Foundation registered successfully!")
