from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_foundation_service
from ..entities import Foundation
from ..foundation_service import FoundationService
from ..models import (
    FoundationCreateRequest,
    FoundationResponse,
    FoundationStatistics,
    FoundationUpdateRequest,
    PageResponse,
)
from ..pagination import PageRequest, page_params

logger = logging.getLogger(__name__)

router = APIRouter()


def _exists(found: bool) -> Response:
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


@router.post("", response_model=FoundationResponse, status_code=status.HTTP_201_CREATED)
def create_foundation(
    payload: FoundationCreateRequest, foundations: FoundationService = Depends(get_foundation_service)
) -> FoundationResponse:
    return foundations.create(payload).to_response()


@router.get("", response_model=List[FoundationResponse])
def list_foundations(foundations: FoundationService = Depends(get_foundation_service)) -> List[FoundationResponse]:
    return [foundation.to_response() for foundation in foundations.find_all().content]


@router.get("/page", response_model=PageResponse[FoundationResponse])
def page_foundations(
    pageable: PageRequest = Depends(page_params), foundations: FoundationService = Depends(get_foundation_service)
):
    return foundations.find_all(pageable).map(Foundation.to_response).to_response()


@router.get("/name/{name}", response_model=FoundationResponse)
def get_foundation_by_name(name: str, foundations: FoundationService = Depends(get_foundation_service)):
    return foundations.get_by_name(name).to_response()


@router.head("/name/{name}")
def check_foundation_name(name: str, foundations: FoundationService = Depends(get_foundation_service)) -> Response:
    return _exists(foundations.exists_by_name(name))


@router.get("/email/{email}", response_model=FoundationResponse)
def get_foundation_by_email(email: str, foundations: FoundationService = Depends(get_foundation_service)):
    return foundations.get_by_contact_email(email).to_response()


@router.head("/email/{email}")
def check_foundation_email(email: str, foundations: FoundationService = Depends(get_foundation_service)) -> Response:
    return _exists(foundations.exists_by_contact_email(email))


@router.get("/city/{city}", response_model=List[FoundationResponse])
def list_foundations_by_city(city: str, foundations: FoundationService = Depends(get_foundation_service)):
    return [foundation.to_response() for foundation in foundations.find_by_city(city).content]


@router.get("/city/{city}/page", response_model=PageResponse[FoundationResponse])
def page_foundations_by_city(
    city: str,
    pageable: PageRequest = Depends(page_params),
    foundations: FoundationService = Depends(get_foundation_service),
):
    return foundations.find_by_city(city, pageable).map(Foundation.to_response).to_response()


@router.get("/state/{state}", response_model=List[FoundationResponse])
def list_foundations_by_state(state: str, foundations: FoundationService = Depends(get_foundation_service)):
    return [foundation.to_response() for foundation in foundations.find_by_state(state).content]


@router.get("/state/{state}/page", response_model=PageResponse[FoundationResponse])
def page_foundations_by_state(
    state: str,
    pageable: PageRequest = Depends(page_params),
    foundations: FoundationService = Depends(get_foundation_service),
):
    return foundations.find_by_state(state, pageable).map(Foundation.to_response).to_response()


@router.get("/active", response_model=List[FoundationResponse])
def list_active_foundations(foundations: FoundationService = Depends(get_foundation_service)):
    return [foundation.to_response() for foundation in foundations.find_active().content]


@router.get("/active/page", response_model=PageResponse[FoundationResponse])
def page_active_foundations(
    pageable: PageRequest = Depends(page_params), foundations: FoundationService = Depends(get_foundation_service)
):
    return foundations.find_active(pageable).map(Foundation.to_response).to_response()


@router.get("/with-available-pets", response_model=List[FoundationResponse])
def list_foundations_with_available_pets(foundations: FoundationService = Depends(get_foundation_service)):
    return [foundation.to_response() for foundation in foundations.find_with_available_pets().content]


@router.get("/search", response_model=List[FoundationResponse])
def search_foundations(name: str = Query(...), foundations: FoundationService = Depends(get_foundation_service)):
    return [foundation.to_response() for foundation in foundations.search_by_name(name).content]


@router.get("/search/page", response_model=PageResponse[FoundationResponse])
def page_search_foundations(
    name: str = Query(...),
    pageable: PageRequest = Depends(page_params),
    foundations: FoundationService = Depends(get_foundation_service),
):
    return foundations.search_by_name(name, pageable).map(Foundation.to_response).to_response()


@router.get("/count", response_model=int)
def count_foundations(foundations: FoundationService = Depends(get_foundation_service)) -> int:
    return foundations.count()


@router.get("/count/active", response_model=int)
def count_active_foundations(foundations: FoundationService = Depends(get_foundation_service)) -> int:
    return foundations.count_active()


@router.get("/count/city/{city}", response_model=int)
def count_foundations_by_city(city: str, foundations: FoundationService = Depends(get_foundation_service)) -> int:
    return foundations.count_by_city(city)


@router.get("/count/state/{state}", response_model=int)
def count_foundations_by_state(state: str, foundations: FoundationService = Depends(get_foundation_service)) -> int:
    return foundations.count_by_state(state)


@router.get("/statistics", response_model=FoundationStatistics)
def foundation_statistics(foundations: FoundationService = Depends(get_foundation_service)) -> FoundationStatistics:
    return foundations.statistics()


@router.get("/statistics/{foundation_id}", response_model=FoundationStatistics)
def foundation_statistics_for(
    foundation_id: UUID, foundations: FoundationService = Depends(get_foundation_service)
) -> FoundationStatistics:
    return foundations.statistics(str(foundation_id))


@router.get("/{foundation_id}", response_model=FoundationResponse)
def get_foundation(foundation_id: UUID, foundations: FoundationService = Depends(get_foundation_service)):
    return foundations.get(str(foundation_id)).to_response()


@router.head("/{foundation_id}")
def check_foundation_exists(
    foundation_id: UUID, foundations: FoundationService = Depends(get_foundation_service)
) -> Response:
    return _exists(foundations.exists_by_id(str(foundation_id)))


@router.put("/{foundation_id}", response_model=FoundationResponse)
def update_foundation(
    foundation_id: UUID,
    payload: FoundationUpdateRequest,
    foundations: FoundationService = Depends(get_foundation_service),
):
    return foundations.update(str(foundation_id), payload).to_response()


@router.put("/{foundation_id}/activate", response_model=FoundationResponse)
def activate_foundation(foundation_id: UUID, foundations: FoundationService = Depends(get_foundation_service)):
    return foundations.activate(str(foundation_id)).to_response()


@router.put("/{foundation_id}/deactivate", response_model=FoundationResponse)
def deactivate_foundation(foundation_id: UUID, foundations: FoundationService = Depends(get_foundation_service)):
    return foundations.deactivate(str(foundation_id)).to_response()


@router.delete("/{foundation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_foundation(foundation_id: UUID, foundations: FoundationService = Depends(get_foundation_service)) -> None:
    foundations.delete(str(foundation_id))
