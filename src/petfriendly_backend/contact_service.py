from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from .database import Database
from .entities import ContactMessage
from .errors import NotFoundError
from .models import ContactMessageCreateRequest, ContactMessageStatistics, ContactMessageUpdateRequest
from .pagination import Page, PageRequest
from .repositories import ContactMessageRepository, FoundationRepository
from .utils import utcnow

logger = logging.getLogger(__name__)


class ContactMessageService:
    """Messages sent by visitors to a foundation, with read tracking."""

    def __init__(self, db: Database):
        self.messages = ContactMessageRepository(db)
        self.foundations = FoundationRepository(db)

    def create(self, payload: ContactMessageCreateRequest) -> ContactMessage:
        foundation_id = str(payload.foundation_id)
        if not self.foundations.exists_by_id(foundation_id):
            raise NotFoundError(f"Foundation not found with id: {foundation_id}")

        message = ContactMessage(
            sender_name=payload.sender_name,
            sender_email=str(payload.sender_email),
            subject=payload.subject,
            message=payload.message,
            foundation_id=foundation_id,
            created_at=utcnow(),
        )
        self.messages.insert(message)
        logger.info(f"Contact message {message.id} received for foundation {foundation_id}")
        return message

    def get(self, message_id: str) -> ContactMessage:
        message = self.messages.find_by_id(str(message_id))
        if message is None:
            raise NotFoundError(f"Contact message not found with id: {message_id}")
        return message

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.find_all(pageable)

    def find_by_foundation(self, foundation_id: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.find_by(pageable, foundation_id=str(foundation_id))

    def find_by_sender_email(self, email: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.find_by_sender_email(email, pageable)

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.search("sender_name", name, pageable)

    def search_by_subject(self, subject: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.search("subject", subject, pageable)

    def search_by_message(self, text: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.search("message", text, pageable)

    def find_by_read(self, is_read: bool, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self.messages.find_by(pageable, is_read=is_read)

    def find_by_foundation_and_read(
        self, foundation_id: str, is_read: bool, pageable: Optional[PageRequest] = None
    ) -> Page[ContactMessage]:
        return self.messages.find_by(pageable, foundation_id=str(foundation_id), is_read=is_read)

    def update(self, message_id: str, payload: ContactMessageUpdateRequest) -> ContactMessage:
        message = self.get(message_id)
        message.sender_name = payload.sender_name
        message.sender_email = str(payload.sender_email)
        message.subject = payload.subject
        message.message = payload.message
        self.messages.update(message)
        logger.info(f"Updated contact message {message.id}")
        return message

    def mark_read(self, message_id: str) -> ContactMessage:
        message = self.get(message_id)
        message.is_read = True
        message.read_at = utcnow()
        self.messages.update(message)
        logger.info(f"Contact message {message.id} marked read")
        return message

    def mark_unread(self, message_id: str) -> ContactMessage:
        message = self.get(message_id)
        message.is_read = False
        message.read_at = None
        self.messages.update(message)
        logger.info(f"Contact message {message.id} marked unread")
        return message

    def delete(self, message_id: str) -> None:
        if not self.messages.delete_by_id(str(message_id)):
            raise NotFoundError(f"Contact message not found with id: {message_id}")
        logger.info(f"Deleted contact message {message_id}")

    def exists_by_id(self, message_id: str) -> bool:
        return self.messages.exists_by_id(str(message_id))

    def count(self) -> int:
        return self.messages.count()

    def count_by_foundation(self, foundation_id: str) -> int:
        return self.messages.count_by(foundation_id=str(foundation_id))

    def count_by_read(self, is_read: bool) -> int:
        return self.messages.count_by(is_read=is_read)

    def count_by_foundation_and_read(self, foundation_id: str, is_read: bool) -> int:
        return self.messages.count_by(foundation_id=str(foundation_id), is_read=is_read)

    def statistics(self, foundation_id: Optional[str] = None) -> ContactMessageStatistics:
        """
        Message totals plus activity windows.

        "Today" starts at midnight UTC, "week" and "month" are the trailing
        7 and 30 days.
        """
        now = utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        scope = {} if foundation_id is None else {"foundation_id": str(foundation_id)}
        fid = scope.get("foundation_id")
        return ContactMessageStatistics(
            total_messages=self.messages.count_by(**scope),
            unread_messages=self.messages.count_by(is_read=False, **scope),
            read_messages=self.messages.count_by(is_read=True, **scope),
            today_messages=self.messages.count_created_after(start_of_day, fid),
            week_messages=self.messages.count_created_after(now - timedelta(days=7), fid),
            month_messages=self.messages.count_created_after(now - timedelta(days=30), fid),
        )
