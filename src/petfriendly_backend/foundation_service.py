from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from .database import Database
from .entities import Foundation
from .errors import NotFoundError, ValidationError
from .models import (
    AdoptionRequestStatus,
    FoundationCreateRequest,
    FoundationStatistics,
    FoundationUpdateRequest,
    PetStatus,
)
from .pagination import Page, PageRequest
from .repositories import AdoptionRequestRepository, FoundationRepository, PetRepository
from .utils import utcnow

logger = logging.getLogger(__name__)


class FoundationService:
    def __init__(self, db: Database):
        self.foundations = FoundationRepository(db)
        self.pets = PetRepository(db)
        self.adoption_requests = AdoptionRequestRepository(db)

    def create(self, payload: FoundationCreateRequest) -> Foundation:
        contact_email = str(payload.contact_email).lower()
        if self.foundations.find_by_contact_email(contact_email) is not None:
            raise ValidationError(f"Foundation with contact email {contact_email} already exists")

        now = utcnow()
        data = payload.model_dump(exclude={"contact_email", "verified"})
        foundation = Foundation(
            contact_email=contact_email,
            verified=bool(payload.verified),
            created_at=now,
            updated_at=now,
            **data,
        )
        try:
            self.foundations.insert(foundation)
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"Foundation with contact email {contact_email} already exists") from exc
        logger.info(f"Created foundation {foundation.id} ({foundation.name})")
        return foundation

    def get(self, foundation_id: str) -> Foundation:
        foundation = self.foundations.find_by_id(str(foundation_id))
        if foundation is None:
            raise NotFoundError(f"Foundation not found with id: {foundation_id}")
        return foundation

    def get_by_name(self, name: str) -> Foundation:
        foundation = self.foundations.find_by_name(name)
        if foundation is None:
            raise NotFoundError(f"Foundation not found with name: {name}")
        return foundation

    def get_by_contact_email(self, email: str) -> Foundation:
        foundation = self.foundations.find_by_contact_email(email)
        if foundation is None:
            raise NotFoundError(f"Foundation not found with email: {email}")
        return foundation

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self.foundations.find_all(pageable)

    def find_by_city(self, city: str, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self.foundations.find_by_city(city, pageable)

    def find_by_state(self, state: str, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self.foundations.find_by_state(state, pageable)

    def find_active(self, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        """Verified foundations; "active" in the public API."""
        return self.foundations.find_by(pageable, verified=True)

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self.foundations.search_by_name(name, pageable)

    def find_with_available_pets(self, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self.foundations.find_with_available_pets(pageable)

    def update(self, foundation_id: str, payload: FoundationUpdateRequest) -> Foundation:
        foundation = self.get(foundation_id)
        for field_name, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(foundation, field_name, value)
        foundation.updated_at = utcnow()
        self.foundations.update(foundation)
        logger.info(f"Updated foundation {foundation.id}")
        return foundation

    def _set_verified(self, foundation_id: str, verified: bool) -> Foundation:
        foundation = self.get(foundation_id)
        foundation.verified = verified
        foundation.updated_at = utcnow()
        self.foundations.update(foundation)
        logger.info(f"{'Activated' if verified else 'Deactivated'} foundation {foundation.id}")
        return foundation

    def activate(self, foundation_id: str) -> Foundation:
        return self._set_verified(foundation_id, True)

    def deactivate(self, foundation_id: str) -> Foundation:
        return self._set_verified(foundation_id, False)

    def delete(self, foundation_id: str) -> None:
        if not self.foundations.delete_by_id(str(foundation_id)):
            raise NotFoundError(f"Foundation not found with id: {foundation_id}")
        logger.info(f"Deleted foundation {foundation_id} with its pets and messages")

    def exists_by_id(self, foundation_id: str) -> bool:
        return self.foundations.exists_by_id(str(foundation_id))

    def exists_by_name(self, name: str) -> bool:
        return self.foundations.find_by_name(name) is not None

    def exists_by_contact_email(self, email: str) -> bool:
        return self.foundations.find_by_contact_email(email) is not None

    def count(self) -> int:
        return self.foundations.count()

    def count_active(self) -> int:
        return self.foundations.count_by(verified=True)

    def count_by_city(self, city: str) -> int:
        return self.foundations.count_by_city(city)

    def count_by_state(self, state: str) -> int:
        return self.foundations.count_by_state(state)

    def statistics(self, foundation_id: Optional[str] = None) -> FoundationStatistics:
        """Pet and pending-adoption totals, platform-wide or for one foundation."""
        if foundation_id is None:
            return FoundationStatistics(
                total_pets=self.pets.count(),
                available_pets=self.pets.count_by(status=PetStatus.AVAILABLE),
                adopted_pets=self.pets.count_by(status=PetStatus.ADOPTED),
                pending_adoptions=self.adoption_requests.count_by(status=AdoptionRequestStatus.PENDING),
            )

        foundation_id = self.get(foundation_id).id
        return FoundationStatistics(
            total_pets=self.pets.count_by(foundation_id=foundation_id),
            available_pets=self.pets.count_by(foundation_id=foundation_id, status=PetStatus.AVAILABLE),
            adopted_pets=self.pets.count_by(foundation_id=foundation_id, status=PetStatus.ADOPTED),
            pending_adoptions=self.adoption_requests.count_by_foundation(
                foundation_id, AdoptionRequestStatus.PENDING
            ),
        )
