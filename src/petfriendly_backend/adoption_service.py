"""
Adoption requests and their review lifecycle.

A request starts PENDING and is closed by approve, reject or cancel. Each
user may hold at most one request per pet; the existence check gives the
friendly error and the ``uq_adoption_requests_user_pet`` index catches two
submissions that race past it.

With ``adoption.strict_transitions`` disabled (the default) a closed request
can still be moved to another status, which is how the platform has always
behaved. Enabling it makes approve/reject/cancel on a closed request fail
with ``InvalidStateError``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from .configuration import get_settings
from .database import Database
from .entities import AdoptionRequest
from .errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .models import (
    AdoptionRequestCreateRequest,
    AdoptionRequestStatistics,
    AdoptionRequestStatus,
    AdoptionRequestUpdateRequest,
)
from .pagination import Page, PageRequest
from .repositories import AdoptionRequestRepository, PetRepository, UserRepository
from .utils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

DUPLICATE_REQUEST = "User has already submitted a request for this pet"
CANCELLED_BY_USER = "Cancelled by user"


class AdoptionRequestService:
    def __init__(self, db: Database, strict_transitions: Optional[bool] = None):
        self.db = db
        self.requests = AdoptionRequestRepository(db)
        self.pets = PetRepository(db)
        self.users = UserRepository(db)
        if strict_transitions is None:
            strict_transitions = bool(get_settings().adoption.strict_transitions)
        self.strict_transitions = strict_transitions

    def create(self, user_id: int, payload: AdoptionRequestCreateRequest) -> AdoptionRequest:
        pet_id = str(payload.pet_id)
        if not self.users.exists_by_id(user_id):
            raise NotFoundError(f"User not found with id: {user_id}")
        if not self.pets.exists_by_id(pet_id):
            raise NotFoundError(f"Pet not found with id: {pet_id}")
        if self.exists_by_user_and_pet(user_id, pet_id):
            raise ConflictError(DUPLICATE_REQUEST)

        now = utcnow()
        request = AdoptionRequest(
            user_id=user_id,
            pet_id=pet_id,
            message=payload.message,
            experience=payload.experience,
            living_situation=payload.living_situation,
            created_at=now,
            updated_at=now,
        )
        try:
            self.requests.insert(request)
        except sqlite3.IntegrityError as exc:
            logger.warning(f"Concurrent duplicate adoption request for user {user_id}, pet {pet_id}")
            raise ConflictError(DUPLICATE_REQUEST) from exc
        logger.info(f"User {user_id} requested adoption of pet {pet_id} (request {request.id})")
        return request

    def get(self, request_id: str) -> AdoptionRequest:
        request = self.requests.find_by_id(str(request_id))
        if request is None:
            raise NotFoundError(f"Adoption request not found with id: {request_id}")
        return request

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[AdoptionRequest]:
        return self.requests.find_all(pageable)

    def find_by_user(self, user_id: int, pageable: Optional[PageRequest] = None) -> Page[AdoptionRequest]:
        return self.requests.find_by(pageable, user_id=user_id)

    def find_by_pet(self, pet_id: str, pageable: Optional[PageRequest] = None) -> Page[AdoptionRequest]:
        return self.requests.find_by(pageable, pet_id=str(pet_id))

    def find_by_status(
        self, status: AdoptionRequestStatus, pageable: Optional[PageRequest] = None
    ) -> Page[AdoptionRequest]:
        return self.requests.find_by(pageable, status=status)

    def find_by_user_and_status(
        self, user_id: int, status: AdoptionRequestStatus, pageable: Optional[PageRequest] = None
    ) -> Page[AdoptionRequest]:
        return self.requests.find_by(pageable, user_id=user_id, status=status)

    def find_by_pet_and_status(
        self, pet_id: str, status: AdoptionRequestStatus, pageable: Optional[PageRequest] = None
    ) -> Page[AdoptionRequest]:
        return self.requests.find_by(pageable, pet_id=str(pet_id), status=status)

    def find_pending_by_foundation(
        self, foundation_id: str, pageable: Optional[PageRequest] = None
    ) -> Page[AdoptionRequest]:
        return self.requests.find_by_foundation(str(foundation_id), AdoptionRequestStatus.PENDING, pageable)

    def find_by_created_between(
        self, start: datetime, end: datetime, pageable: Optional[PageRequest] = None
    ) -> Page[AdoptionRequest]:
        """Requests created in ``[start, end]``; offset-aware bounds are converted to UTC."""
        start, end = to_naive_utc(start), to_naive_utc(end)
        if start > end:
            raise ValidationError("start must not be after end")
        return self.requests.find_by_created_between(start, end, pageable)

    def update(self, request_id: str, payload: AdoptionRequestUpdateRequest) -> AdoptionRequest:
        request = self.get(request_id)
        request.message = payload.message
        request.experience = payload.experience
        request.living_situation = payload.living_situation
        request.updated_at = utcnow()
        self.requests.update(request)
        logger.info(f"Updated adoption request {request.id}")
        return request

    def update_status(
        self, request_id: str, status: AdoptionRequestStatus, notes: Optional[str] = None
    ) -> AdoptionRequest:
        with self.db.connect() as conn:
            request = self.requests.find_by_id(str(request_id), conn=conn)
            if request is None:
                raise NotFoundError(f"Adoption request not found with id: {request_id}")
            if self.strict_transitions and request.status.is_terminal:
                raise InvalidStateError(
                    f"Adoption request {request.id} is already {request.status.value} "
                    f"and cannot become {status.value}"
                )
            previous = request.status
            now = utcnow()
            request.status = status
            request.review_notes = notes
            request.reviewed_at = now
            request.updated_at = now
            self.requests.update(request, conn=conn)
        logger.info(f"Adoption request {request.id} status changed {previous.value} -> {status.value}")
        return request

    def approve(self, request_id: str, notes: Optional[str] = None) -> AdoptionRequest:
        return self.update_status(request_id, AdoptionRequestStatus.APPROVED, notes)

    def reject(self, request_id: str, notes: Optional[str] = None) -> AdoptionRequest:
        return self.update_status(request_id, AdoptionRequestStatus.REJECTED, notes)

    def cancel(self, request_id: str) -> AdoptionRequest:
        return self.update_status(request_id, AdoptionRequestStatus.CANCELLED, CANCELLED_BY_USER)

    def delete(self, request_id: str) -> None:
        if not self.requests.delete_by_id(str(request_id)):
            raise NotFoundError(f"Adoption request not found with id: {request_id}")
        logger.info(f"Deleted adoption request {request_id}")

    def exists_by_id(self, request_id: str) -> bool:
        return self.requests.exists_by_id(str(request_id))

    def exists_by_user_and_pet(self, user_id: int, pet_id: str) -> bool:
        return self.requests.exists_by(user_id=user_id, pet_id=str(pet_id))

    def count(self) -> int:
        return self.requests.count()

    def count_by_status(self, status: AdoptionRequestStatus) -> int:
        return self.requests.count_by(status=status)

    def count_by_user(self, user_id: int) -> int:
        return self.requests.count_by(user_id=user_id)

    def count_by_pet(self, pet_id: str) -> int:
        return self.requests.count_by(pet_id=str(pet_id))

    def count_pending_by_foundation(self, foundation_id: str) -> int:
        return self.requests.count_by_foundation(str(foundation_id), AdoptionRequestStatus.PENDING)

    def statistics(
        self,
        user_id: Optional[int] = None,
        pet_id: Optional[str] = None,
        foundation_id: Optional[str] = None,
    ) -> AdoptionRequestStatistics:
        """Request totals per status, optionally scoped to a user, a pet or a foundation."""
        if foundation_id is not None:
            def count(status=None):
                return self.requests.count_by_foundation(str(foundation_id), status)
        else:
            criteria = {}
            if user_id is not None:
                criteria["user_id"] = user_id
            if pet_id is not None:
                criteria["pet_id"] = str(pet_id)

            def count(status=None):
                if status is None:
                    return self.requests.count_by(**criteria)
                return self.requests.count_by(status=status, **criteria)

        return AdoptionRequestStatistics(
            total_requests=count(),
            pending_requests=count(AdoptionRequestStatus.PENDING),
            approved_requests=count(AdoptionRequestStatus.APPROVED),
            rejected_requests=count(AdoptionRequestStatus.REJECTED),
            cancelled_requests=count(AdoptionRequestStatus.CANCELLED),
        )
