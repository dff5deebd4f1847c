from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import get_user_service
from ..entities import User
from ..models import (
    PageResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    Role,
    UserCreateRequest,
    UserResponse,
    UserStatistics,
    UserUpdateRequest,
)
from ..pagination import PageRequest, page_params
from ..security import get_current_user, require_roles
from ..user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _exists(found: bool) -> Response:
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(Role.SUPER_ADMIN))],
)
def create_user(payload: UserCreateRequest, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.create(payload).to_response()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(payload: RegisterRequest, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.create(payload, role=Role.USER).to_response()


# Profile of the authenticated user


@router.get("/profile", response_model=UserResponse)
def get_profile(current: User = Depends(get_current_user)) -> UserResponse:
    return current.to_response()


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    current: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    return users.update_profile(current.id, payload).to_response()


@router.delete("/profile", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(current: User = Depends(get_current_user), users: UserService = Depends(get_user_service)) -> None:
    logger.info(f"User {current.email} deleted their account")
    users.delete(current.id)


# Listings


@router.get("", response_model=List[UserResponse])
def list_users(users: UserService = Depends(get_user_service)) -> List[UserResponse]:
    return [user.to_response() for user in users.find_all().content]


@router.get("/page", response_model=PageResponse[UserResponse])
def page_users(pageable: PageRequest = Depends(page_params), users: UserService = Depends(get_user_service)):
    return users.find_all(pageable).map(User.to_response).to_response()


@router.get("/email/{email}", response_model=UserResponse)
def get_user_by_email(email: str, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.get_by_email(email).to_response()


@router.get("/role/{role}", response_model=List[UserResponse])
def list_users_by_role(role: Role, users: UserService = Depends(get_user_service)) -> List[UserResponse]:
    return [user.to_response() for user in users.find_by_role(role).content]


@router.get("/role/{role}/page", response_model=PageResponse[UserResponse])
def page_users_by_role(
    role: Role, pageable: PageRequest = Depends(page_params), users: UserService = Depends(get_user_service)
):
    return users.find_by_role(role, pageable).map(User.to_response).to_response()


@router.get("/active", response_model=List[UserResponse])
def list_active_users(users: UserService = Depends(get_user_service)) -> List[UserResponse]:
    return [user.to_response() for user in users.find_active().content]


@router.get("/active/page", response_model=PageResponse[UserResponse])
def page_active_users(pageable: PageRequest = Depends(page_params), users: UserService = Depends(get_user_service)):
    return users.find_active(pageable).map(User.to_response).to_response()


@router.get("/search/{name}", response_model=List[UserResponse])
def search_users(name: str, users: UserService = Depends(get_user_service)) -> List[UserResponse]:
    return [user.to_response() for user in users.search_by_name(name).content]


@router.get("/search/{name}/page", response_model=PageResponse[UserResponse])
def page_search_users(
    name: str, pageable: PageRequest = Depends(page_params), users: UserService = Depends(get_user_service)
):
    return users.search_by_name(name, pageable).map(User.to_response).to_response()


@router.get("/exists/email/{email}")
def user_email_exists(email: str, users: UserService = Depends(get_user_service)) -> Response:
    return _exists(users.exists_by_email(email))


@router.head("/email/{email}")
def check_email_exists(email: str, users: UserService = Depends(get_user_service)) -> Response:
    return _exists(users.exists_by_email(email))


# Counts and statistics


@router.get("/count", response_model=int)
def count_users(users: UserService = Depends(get_user_service)) -> int:
    return users.count()


@router.get("/count/active", response_model=int)
def count_active_users(users: UserService = Depends(get_user_service)) -> int:
    return users.count_active()


@router.get("/count/role/{role}", response_model=int)
def count_users_by_role(role: Role, users: UserService = Depends(get_user_service)) -> int:
    return users.count_by_role(role)


@router.get("/statistics", response_model=UserStatistics)
def user_statistics(users: UserService = Depends(get_user_service)) -> UserStatistics:
    return users.statistics()


# Single user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.get(user_id).to_response()


@router.head("/{user_id}")
def check_user_exists(user_id: int, users: UserService = Depends(get_user_service)) -> Response:
    return _exists(users.exists_by_id(user_id))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, payload: UserUpdateRequest, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.update(user_id, payload).to_response()


@router.put("/{user_id}/activate", response_model=UserResponse)
def activate_user(user_id: int, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.activate(user_id).to_response()


@router.put("/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user(user_id: int, users: UserService = Depends(get_user_service)) -> UserResponse:
    return users.deactivate(user_id).to_response()


@router.put("/{user_id}/password", response_model=UserResponse)
def change_password(
    user_id: int, payload: PasswordChangeRequest, users: UserService = Depends(get_user_service)
) -> UserResponse:
    return users.change_password(user_id, payload.password).to_response()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, users: UserService = Depends(get_user_service)) -> None:
    users.delete(user_id)
