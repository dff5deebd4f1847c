"""Demo accounts created at start-up so the API can be tried without registering."""

from __future__ import annotations

import logging
from typing import List

from .entities import User
from .models import Role, UserCreateRequest
from .user_service import UserService

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = (
    UserCreateRequest(
        first_name="Demo",
        last_name="User",
        email="demo.user@petfriendly.dev",
        password="DemoPa55!",
        phone="+573000000000",
        city="Bogota",
        role=Role.USER,
    ),
    UserCreateRequest(
        first_name="Demo",
        last_name="Admin",
        email="demo.admin@petfriendly.dev",
        password="AdminPa55!",
        phone="+573000000000",
        city="Bogota",
        role=Role.SUPER_ADMIN,
    ),
)


def seed_demo_accounts(user_service: UserService) -> List[User]:
    """Create any missing demo account; existing accounts are left untouched."""
    created = []
    for account in DEMO_ACCOUNTS:
        if user_service.exists_by_email(str(account.email)):
            logger.debug(f"Demo account {account.email} already present")
            continue
        created.append(user_service.create(account))
        logger.info(f"Seeded demo account {account.email}")
    return created
