from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..contact_service import ContactMessageService
from ..dependencies import get_contact_service
from ..entities import ContactMessage
from ..models import (
    ContactMessageCreateRequest,
    ContactMessageResponse,
    ContactMessageStatistics,
    ContactMessageUpdateRequest,
    PageResponse,
)
from ..pagination import PageRequest, page_params

logger = logging.getLogger(__name__)

router = APIRouter()


def _exists(found: bool) -> Response:
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


def _listing(page) -> List[ContactMessageResponse]:
    return [message.to_response() for message in page.content]


@router.post("", response_model=ContactMessageResponse, status_code=status.HTTP_201_CREATED)
def create_contact_message(
    payload: ContactMessageCreateRequest, messages: ContactMessageService = Depends(get_contact_service)
) -> ContactMessageResponse:
    return messages.create(payload).to_response()


@router.get("", response_model=List[ContactMessageResponse])
def list_contact_messages(messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.find_all())


@router.get("/page", response_model=PageResponse[ContactMessageResponse])
def page_contact_messages(
    pageable: PageRequest = Depends(page_params), messages: ContactMessageService = Depends(get_contact_service)
):
    return messages.find_all(pageable).map(ContactMessage.to_response).to_response()


@router.get("/foundation/{foundation_id}", response_model=List[ContactMessageResponse])
def list_messages_by_foundation(foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.find_by_foundation(str(foundation_id)))


@router.get("/foundation/{foundation_id}/page", response_model=PageResponse[ContactMessageResponse])
def page_messages_by_foundation(
    foundation_id: UUID,
    pageable: PageRequest = Depends(page_params),
    messages: ContactMessageService = Depends(get_contact_service),
):
    return messages.find_by_foundation(str(foundation_id), pageable).map(ContactMessage.to_response).to_response()


@router.get("/foundation/{foundation_id}/read", response_model=List[ContactMessageResponse])
def list_read_messages_by_foundation(
    foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
):
    return _listing(messages.find_by_foundation_and_read(str(foundation_id), True))


@router.get("/foundation/{foundation_id}/read/page", response_model=PageResponse[ContactMessageResponse])
def page_read_messages_by_foundation(
    foundation_id: UUID,
    pageable: PageRequest = Depends(page_params),
    messages: ContactMessageService = Depends(get_contact_service),
):
    page = messages.find_by_foundation_and_read(str(foundation_id), True, pageable)
    return page.map(ContactMessage.to_response).to_response()


@router.get("/foundation/{foundation_id}/unread", response_model=List[ContactMessageResponse])
def list_unread_messages_by_foundation(
    foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
):
    return _listing(messages.find_by_foundation_and_read(str(foundation_id), False))


@router.get("/foundation/{foundation_id}/unread/page", response_model=PageResponse[ContactMessageResponse])
def page_unread_messages_by_foundation(
    foundation_id: UUID,
    pageable: PageRequest = Depends(page_params),
    messages: ContactMessageService = Depends(get_contact_service),
):
    page = messages.find_by_foundation_and_read(str(foundation_id), False, pageable)
    return page.map(ContactMessage.to_response).to_response()


@router.get("/email/{email}", response_model=List[ContactMessageResponse])
def list_messages_by_email(email: str, messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.find_by_sender_email(email))


@router.get("/email/{email}/page", response_model=PageResponse[ContactMessageResponse])
def page_messages_by_email(
    email: str, pageable: PageRequest = Depends(page_params), messages: ContactMessageService = Depends(get_contact_service)
):
    return messages.find_by_sender_email(email, pageable).map(ContactMessage.to_response).to_response()


@router.get("/search/name", response_model=List[ContactMessageResponse])
def search_messages_by_name(name: str = Query(...), messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.search_by_name(name))


@router.get("/search/name/page", response_model=PageResponse[ContactMessageResponse])
def page_search_messages_by_name(
    name: str = Query(...),
    pageable: PageRequest = Depends(page_params),
    messages: ContactMessageService = Depends(get_contact_service),
):
    return messages.search_by_name(name, pageable).map(ContactMessage.to_response).to_response()


@router.get("/search/subject", response_model=List[ContactMessageResponse])
def search_messages_by_subject(
    subject: str = Query(...), messages: ContactMessageService = Depends(get_contact_service)
):
    return _listing(messages.search_by_subject(subject))


@router.get("/search/subject/page", response_model=PageResponse[ContactMessageResponse])
def page_search_messages_by_subject(
    subject: str = Query(...),
    pageable: PageRequest = Depends(page_params),
    messages: ContactMessageService = Depends(get_contact_service),
):
    return messages.search_by_subject(subject, pageable).map(ContactMessage.to_response).to_response()


@router.get("/search/message", response_model=List[ContactMessageResponse])
def search_messages_by_text(message: str = Query(...), messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.search_by_message(message))


@router.get("/search/message/page", response_model=PageResponse[ContactMessageResponse])
def page_search_messages_by_text(
    message: str = Query(...),
    pageable: PageRequest = Depends(page_params),
    messages: ContactMessageService = Depends(get_contact_service),
):
    return messages.search_by_message(message, pageable).map(ContactMessage.to_response).to_response()


@router.get("/read", response_model=List[ContactMessageResponse])
def list_read_messages(messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.find_by_read(True))


@router.get("/read/page", response_model=PageResponse[ContactMessageResponse])
def page_read_messages(
    pageable: PageRequest = Depends(page_params), messages: ContactMessageService = Depends(get_contact_service)
):
    return messages.find_by_read(True, pageable).map(ContactMessage.to_response).to_response()


@router.get("/unread", response_model=List[ContactMessageResponse])
def list_unread_messages(messages: ContactMessageService = Depends(get_contact_service)):
    return _listing(messages.find_by_read(False))


@router.get("/unread/page", response_model=PageResponse[ContactMessageResponse])
def page_unread_messages(
    pageable: PageRequest = Depends(page_params), messages: ContactMessageService = Depends(get_contact_service)
):
    return messages.find_by_read(False, pageable).map(ContactMessage.to_response).to_response()


@router.get("/count", response_model=int)
def count_messages(messages: ContactMessageService = Depends(get_contact_service)) -> int:
    return messages.count()


@router.get("/count/read", response_model=int)
def count_read_messages(messages: ContactMessageService = Depends(get_contact_service)) -> int:
    return messages.count_by_read(True)


@router.get("/count/unread", response_model=int)
def count_unread_messages(messages: ContactMessageService = Depends(get_contact_service)) -> int:
    return messages.count_by_read(False)


@router.get("/count/foundation/{foundation_id}", response_model=int)
def count_messages_by_foundation(
    foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
) -> int:
    return messages.count_by_foundation(str(foundation_id))


@router.get("/count/foundation/{foundation_id}/read", response_model=int)
def count_read_messages_by_foundation(
    foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
) -> int:
    return messages.count_by_foundation_and_read(str(foundation_id), True)


@router.get("/count/foundation/{foundation_id}/unread", response_model=int)
def count_unread_messages_by_foundation(
    foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
) -> int:
    return messages.count_by_foundation_and_read(str(foundation_id), False)


@router.get("/statistics", response_model=ContactMessageStatistics)
def contact_message_statistics(messages: ContactMessageService = Depends(get_contact_service)):
    return messages.statistics()


@router.get("/statistics/foundation/{foundation_id}", response_model=ContactMessageStatistics)
def contact_message_statistics_by_foundation(
    foundation_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
):
    return messages.statistics(str(foundation_id))


@router.get("/{message_id}", response_model=ContactMessageResponse)
def get_contact_message(message_id: UUID, messages: ContactMessageService = Depends(get_contact_service)):
    return messages.get(str(message_id)).to_response()


@router.head("/{message_id}")
def check_contact_message_exists(
    message_id: UUID, messages: ContactMessageService = Depends(get_contact_service)
) -> Response:
    return _exists(messages.exists_by_id(str(message_id)))


@router.put("/{message_id}", response_model=ContactMessageResponse)
def update_contact_message(
    message_id: UUID,
    payload: ContactMessageUpdateRequest,
    messages: ContactMessageService = Depends(get_contact_service),
):
    return messages.update(str(message_id), payload).to_response()


@router.put("/{message_id}/mark-read", response_model=ContactMessageResponse)
def mark_contact_message_read(message_id: UUID, messages: ContactMessageService = Depends(get_contact_service)):
    return messages.mark_read(str(message_id)).to_response()


@router.put("/{message_id}/mark-unread", response_model=ContactMessageResponse)
def mark_contact_message_unread(message_id: UUID, messages: ContactMessageService = Depends(get_contact_service)):
    return messages.mark_unread(str(message_id)).to_response()


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact_message(message_id: UUID, messages: ContactMessageService = Depends(get_contact_service)):
    messages.delete(str(message_id))
