from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from ..adoption_service import AdoptionRequestService
from ..dependencies import get_adoption_service
from ..entities import AdoptionRequest, User
from ..models import (
    AdoptionRequestCreateRequest,
    AdoptionRequestResponse,
    AdoptionRequestStatistics,
    AdoptionRequestStatus,
    AdoptionRequestUpdateRequest,
    PageResponse,
    ReviewRequest,
)
from ..pagination import PageRequest, page_params
from ..security import get_current_user, is_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def _exists(found: bool) -> Response:
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


def _notes(review: Optional[ReviewRequest]) -> Optional[str]:
    return review.notes if review else None


@router.post("", response_model=AdoptionRequestResponse, status_code=status.HTTP_201_CREATED)
def create_adoption_request(
    payload: AdoptionRequestCreateRequest,
    current: User = Depends(get_current_user),
    requests: AdoptionRequestService = Depends(get_adoption_service),
) -> AdoptionRequestResponse:
    return requests.create(current.id, payload).to_response()


@router.get("", response_model=List[AdoptionRequestResponse])
def list_adoption_requests(requests: AdoptionRequestService = Depends(get_adoption_service)):
    return [request.to_response() for request in requests.find_all().content]


@router.get("/page", response_model=PageResponse[AdoptionRequestResponse])
def page_adoption_requests(
    pageable: PageRequest = Depends(page_params), requests: AdoptionRequestService = Depends(get_adoption_service)
):
    return requests.find_all(pageable).map(AdoptionRequest.to_response).to_response()


@router.get("/created-between", response_model=PageResponse[AdoptionRequestResponse])
def page_adoption_requests_created_between(
    start: datetime = Query(...),
    end: datetime = Query(...),
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.find_by_created_between(start, end, pageable).map(AdoptionRequest.to_response).to_response()


# By user


@router.get("/user/{user_id}", response_model=List[AdoptionRequestResponse])
def list_requests_by_user(user_id: int, requests: AdoptionRequestService = Depends(get_adoption_service)):
    return [request.to_response() for request in requests.find_by_user(user_id).content]


@router.get("/user/{user_id}/page", response_model=PageResponse[AdoptionRequestResponse])
def page_requests_by_user(
    user_id: int,
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.find_by_user(user_id, pageable).map(AdoptionRequest.to_response).to_response()


@router.get("/user/{user_id}/status/{request_status}", response_model=List[AdoptionRequestResponse])
def list_requests_by_user_and_status(
    user_id: int,
    request_status: AdoptionRequestStatus,
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return [request.to_response() for request in requests.find_by_user_and_status(user_id, request_status).content]


@router.get("/user/{user_id}/status/{request_status}/page", response_model=PageResponse[AdoptionRequestResponse])
def page_requests_by_user_and_status(
    user_id: int,
    request_status: AdoptionRequestStatus,
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    page = requests.find_by_user_and_status(user_id, request_status, pageable)
    return page.map(AdoptionRequest.to_response).to_response()


@router.head("/user/{user_id}/pet/{pet_id}")
def check_user_requested_pet(
    user_id: int, pet_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)
) -> Response:
    return _exists(requests.exists_by_user_and_pet(user_id, str(pet_id)))


# By pet


@router.get("/pet/{pet_id}", response_model=List[AdoptionRequestResponse])
def list_requests_by_pet(pet_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)):
    return [request.to_response() for request in requests.find_by_pet(str(pet_id)).content]


@router.get("/pet/{pet_id}/page", response_model=PageResponse[AdoptionRequestResponse])
def page_requests_by_pet(
    pet_id: UUID,
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.find_by_pet(str(pet_id), pageable).map(AdoptionRequest.to_response).to_response()


@router.get("/pet/{pet_id}/status/{request_status}", response_model=List[AdoptionRequestResponse])
def list_requests_by_pet_and_status(
    pet_id: UUID,
    request_status: AdoptionRequestStatus,
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return [request.to_response() for request in requests.find_by_pet_and_status(str(pet_id), request_status).content]


@router.get("/pet/{pet_id}/status/{request_status}/page", response_model=PageResponse[AdoptionRequestResponse])
def page_requests_by_pet_and_status(
    pet_id: UUID,
    request_status: AdoptionRequestStatus,
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    page = requests.find_by_pet_and_status(str(pet_id), request_status, pageable)
    return page.map(AdoptionRequest.to_response).to_response()


# By status and foundation


@router.get("/status/{request_status}", response_model=List[AdoptionRequestResponse])
def list_requests_by_status(
    request_status: AdoptionRequestStatus, requests: AdoptionRequestService = Depends(get_adoption_service)
):
    return [request.to_response() for request in requests.find_by_status(request_status).content]


@router.get("/status/{request_status}/page", response_model=PageResponse[AdoptionRequestResponse])
def page_requests_by_status(
    request_status: AdoptionRequestStatus,
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.find_by_status(request_status, pageable).map(AdoptionRequest.to_response).to_response()


@router.get("/foundation/{foundation_id}/pending", response_model=List[AdoptionRequestResponse])
def list_pending_requests_by_foundation(
    foundation_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)
):
    return [request.to_response() for request in requests.find_pending_by_foundation(str(foundation_id)).content]


@router.get("/foundation/{foundation_id}/pending/page", response_model=PageResponse[AdoptionRequestResponse])
def page_pending_requests_by_foundation(
    foundation_id: UUID,
    pageable: PageRequest = Depends(page_params),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    page = requests.find_pending_by_foundation(str(foundation_id), pageable)
    return page.map(AdoptionRequest.to_response).to_response()


# Counts and statistics


@router.get("/count", response_model=int)
def count_requests(requests: AdoptionRequestService = Depends(get_adoption_service)) -> int:
    return requests.count()


@router.get("/count/status/{request_status}", response_model=int)
def count_requests_by_status(
    request_status: AdoptionRequestStatus, requests: AdoptionRequestService = Depends(get_adoption_service)
) -> int:
    return requests.count_by_status(request_status)


@router.get("/count/user/{user_id}", response_model=int)
def count_requests_by_user(user_id: int, requests: AdoptionRequestService = Depends(get_adoption_service)) -> int:
    return requests.count_by_user(user_id)


@router.get("/count/pet/{pet_id}", response_model=int)
def count_requests_by_pet(pet_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)) -> int:
    return requests.count_by_pet(str(pet_id))


@router.get("/count/foundation/{foundation_id}/pending", response_model=int)
def count_pending_requests_by_foundation(
    foundation_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)
) -> int:
    return requests.count_pending_by_foundation(str(foundation_id))


@router.get("/statistics", response_model=AdoptionRequestStatistics)
def adoption_statistics(requests: AdoptionRequestService = Depends(get_adoption_service)):
    return requests.statistics()


@router.get("/statistics/user/{user_id}", response_model=AdoptionRequestStatistics)
def adoption_statistics_by_user(user_id: int, requests: AdoptionRequestService = Depends(get_adoption_service)):
    return requests.statistics(user_id=user_id)


@router.get("/statistics/pet/{pet_id}", response_model=AdoptionRequestStatistics)
def adoption_statistics_by_pet(pet_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)):
    return requests.statistics(pet_id=str(pet_id))


@router.get("/statistics/foundation/{foundation_id}", response_model=AdoptionRequestStatistics)
def adoption_statistics_by_foundation(
    foundation_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)
):
    return requests.statistics(foundation_id=str(foundation_id))


# Single request


@router.get("/{request_id}", response_model=AdoptionRequestResponse)
def get_adoption_request(request_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)):
    return requests.get(str(request_id)).to_response()


@router.head("/{request_id}")
def check_adoption_request_exists(
    request_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)
) -> Response:
    return _exists(requests.exists_by_id(str(request_id)))


@router.put("/{request_id}", response_model=AdoptionRequestResponse)
def update_adoption_request(
    request_id: UUID,
    payload: AdoptionRequestUpdateRequest,
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.update(str(request_id), payload).to_response()


@router.put("/{request_id}/status", response_model=AdoptionRequestResponse)
def update_adoption_request_status(
    request_id: UUID,
    request_status: AdoptionRequestStatus = Query(..., alias="status"),
    review: Optional[ReviewRequest] = Body(None),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.update_status(str(request_id), request_status, _notes(review)).to_response()


@router.put("/{request_id}/approve", response_model=AdoptionRequestResponse)
def approve_adoption_request(
    request_id: UUID,
    review: Optional[ReviewRequest] = Body(None),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.approve(str(request_id), _notes(review)).to_response()


@router.put("/{request_id}/reject", response_model=AdoptionRequestResponse)
def reject_adoption_request(
    request_id: UUID,
    review: Optional[ReviewRequest] = Body(None),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    return requests.reject(str(request_id), _notes(review)).to_response()


@router.put("/{request_id}/cancel", response_model=AdoptionRequestResponse)
def cancel_adoption_request(
    request_id: UUID,
    current: User = Depends(get_current_user),
    requests: AdoptionRequestService = Depends(get_adoption_service),
):
    request = requests.get(str(request_id))
    if request.user_id != current.id and not is_admin(current):
        logger.warning(f"User {current.email} tried to cancel request {request.id} owned by user {request.user_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the requester can cancel this request")
    return requests.cancel(request.id).to_response()


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_adoption_request(request_id: UUID, requests: AdoptionRequestService = Depends(get_adoption_service)):
    requests.delete(str(request_id))
