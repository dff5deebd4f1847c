from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_pet_service
from ..entities import Pet
from ..models import (
    PageResponse,
    PetCreateRequest,
    PetGender,
    PetResponse,
    PetSize,
    PetSpecies,
    PetStatistics,
    PetStatus,
    PetStatusUpdateRequest,
    PetUpdateRequest,
)
from ..pagination import PageRequest, page_params
from ..pet_service import PetService

logger = logging.getLogger(__name__)

router = APIRouter()


def _exists(found: bool) -> Response:
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


@router.post("", response_model=PetResponse, status_code=status.HTTP_201_CREATED)
def create_pet(payload: PetCreateRequest, pets: PetService = Depends(get_pet_service)) -> PetResponse:
    return pets.create(payload).to_response()


@router.get("", response_model=List[PetResponse])
def list_pets(pets: PetService = Depends(get_pet_service)) -> List[PetResponse]:
    return [pet.to_response() for pet in pets.find_all().content]


@router.get("/page", response_model=PageResponse[PetResponse])
def page_pets(pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)):
    return pets.find_all(pageable).map(Pet.to_response).to_response()


@router.get("/foundation/{foundation_id}", response_model=List[PetResponse])
def list_pets_by_foundation(foundation_id: UUID, pets: PetService = Depends(get_pet_service)):
    return [pet.to_response() for pet in pets.find_by_foundation(str(foundation_id)).content]


@router.get("/foundation/{foundation_id}/page", response_model=PageResponse[PetResponse])
def page_pets_by_foundation(
    foundation_id: UUID, pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)
):
    return pets.find_by_foundation(str(foundation_id), pageable).map(Pet.to_response).to_response()


@router.get("/foundation/{foundation_id}/status/{pet_status}", response_model=List[PetResponse])
def list_pets_by_foundation_and_status(
    foundation_id: UUID, pet_status: PetStatus, pets: PetService = Depends(get_pet_service)
):
    return [pet.to_response() for pet in pets.find_by_foundation_and_status(str(foundation_id), pet_status).content]


@router.get("/foundation/{foundation_id}/status/{pet_status}/page", response_model=PageResponse[PetResponse])
def page_pets_by_foundation_and_status(
    foundation_id: UUID,
    pet_status: PetStatus,
    pageable: PageRequest = Depends(page_params),
    pets: PetService = Depends(get_pet_service),
):
    page = pets.find_by_foundation_and_status(str(foundation_id), pet_status, pageable)
    return page.map(Pet.to_response).to_response()


@router.get("/status/{pet_status}", response_model=List[PetResponse])
def list_pets_by_status(pet_status: PetStatus, pets: PetService = Depends(get_pet_service)):
    return [pet.to_response() for pet in pets.find_by_status(pet_status).content]


@router.get("/status/{pet_status}/page", response_model=PageResponse[PetResponse])
def page_pets_by_status(
    pet_status: PetStatus, pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)
):
    return pets.find_by_status(pet_status, pageable).map(Pet.to_response).to_response()


@router.get("/species/{species}", response_model=List[PetResponse])
def list_pets_by_species(species: PetSpecies, pets: PetService = Depends(get_pet_service)):
    return [pet.to_response() for pet in pets.find_by_species(species).content]


@router.get("/species/{species}/page", response_model=PageResponse[PetResponse])
def page_pets_by_species(
    species: PetSpecies, pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)
):
    return pets.find_by_species(species, pageable).map(Pet.to_response).to_response()


@router.get("/breed/{breed}", response_model=List[PetResponse])
def list_pets_by_breed(breed: str, pets: PetService = Depends(get_pet_service)):
    return [pet.to_response() for pet in pets.find_by_breed(breed).content]


@router.get("/breed/{breed}/page", response_model=PageResponse[PetResponse])
def page_pets_by_breed(
    breed: str, pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)
):
    return pets.find_by_breed(breed, pageable).map(Pet.to_response).to_response()


@router.get("/age", response_model=List[PetResponse])
def list_pets_by_age(
    min_age: int = Query(..., ge=0), max_age: int = Query(..., ge=0), pets: PetService = Depends(get_pet_service)
):
    return [pet.to_response() for pet in pets.find_by_age_range(min_age, max_age).content]


@router.get("/age/page", response_model=PageResponse[PetResponse])
def page_pets_by_age(
    min_age: int = Query(..., ge=0),
    max_age: int = Query(..., ge=0),
    pageable: PageRequest = Depends(page_params),
    pets: PetService = Depends(get_pet_service),
):
    return pets.find_by_age_range(min_age, max_age, pageable).map(Pet.to_response).to_response()


@router.get("/available", response_model=List[PetResponse])
def list_available_pets(pets: PetService = Depends(get_pet_service)):
    return [pet.to_response() for pet in pets.find_available().content]


@router.get("/available/page", response_model=PageResponse[PetResponse])
def page_available_pets(pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)):
    return pets.find_available(pageable).map(Pet.to_response).to_response()


@router.get("/available/filter", response_model=PageResponse[PetResponse])
def filter_available_pets(
    species: Optional[PetSpecies] = None,
    size: Optional[PetSize] = None,
    gender: Optional[PetGender] = None,
    city: Optional[str] = None,
    pageable: PageRequest = Depends(page_params),
    pets: PetService = Depends(get_pet_service),
):
    page = pets.find_available_with_filters(species, size, gender, city, pageable)
    return page.map(Pet.to_response).to_response()


@router.get("/search", response_model=List[PetResponse])
def search_pets(name: str = Query(...), pets: PetService = Depends(get_pet_service)):
    return [pet.to_response() for pet in pets.search_by_name(name).content]


@router.get("/search/page", response_model=PageResponse[PetResponse])
def page_search_pets(
    name: str = Query(...), pageable: PageRequest = Depends(page_params), pets: PetService = Depends(get_pet_service)
):
    return pets.search_by_name(name, pageable).map(Pet.to_response).to_response()


@router.get("/count", response_model=int)
def count_pets(pets: PetService = Depends(get_pet_service)) -> int:
    return pets.count()


@router.get("/count/foundation/{foundation_id}", response_model=int)
def count_pets_by_foundation(foundation_id: UUID, pets: PetService = Depends(get_pet_service)) -> int:
    return pets.count_by_foundation(str(foundation_id))


@router.get("/count/foundation/{foundation_id}/status/{pet_status}", response_model=int)
def count_pets_by_foundation_and_status(
    foundation_id: UUID, pet_status: PetStatus, pets: PetService = Depends(get_pet_service)
) -> int:
    return pets.count_by_foundation_and_status(str(foundation_id), pet_status)


@router.get("/count/status/{pet_status}", response_model=int)
def count_pets_by_status(pet_status: PetStatus, pets: PetService = Depends(get_pet_service)) -> int:
    return pets.count_by_status(pet_status)


@router.get("/count/species/{species}", response_model=int)
def count_pets_by_species(species: PetSpecies, pets: PetService = Depends(get_pet_service)) -> int:
    return pets.count_by_species(species)


@router.get("/statistics", response_model=PetStatistics)
def pet_statistics(pets: PetService = Depends(get_pet_service)) -> PetStatistics:
    return pets.statistics()


@router.get("/statistics/foundation/{foundation_id}", response_model=PetStatistics)
def pet_statistics_by_foundation(foundation_id: UUID, pets: PetService = Depends(get_pet_service)) -> PetStatistics:
    return pets.statistics(str(foundation_id))


@router.get("/{pet_id}", response_model=PetResponse)
def get_pet(pet_id: UUID, pets: PetService = Depends(get_pet_service)) -> PetResponse:
    return pets.get(str(pet_id)).to_response()


@router.head("/{pet_id}")
def check_pet_exists(pet_id: UUID, pets: PetService = Depends(get_pet_service)) -> Response:
    return _exists(pets.exists_by_id(str(pet_id)))


@router.put("/{pet_id}", response_model=PetResponse)
def update_pet(pet_id: UUID, payload: PetUpdateRequest, pets: PetService = Depends(get_pet_service)) -> PetResponse:
    return pets.update(str(pet_id), payload).to_response()


@router.put("/{pet_id}/status", response_model=PetResponse)
def update_pet_status(
    pet_id: UUID, payload: PetStatusUpdateRequest, pets: PetService = Depends(get_pet_service)
) -> PetResponse:
    return pets.update_status(str(pet_id), payload.status).to_response()


@router.put("/{pet_id}/adopt", response_model=PetResponse)
def adopt_pet(pet_id: UUID, pets: PetService = Depends(get_pet_service)) -> PetResponse:
    return pets.mark_adopted(str(pet_id)).to_response()


@router.put("/{pet_id}/available", response_model=PetResponse)
def mark_pet_available(pet_id: UUID, pets: PetService = Depends(get_pet_service)) -> PetResponse:
    return pets.mark_available(str(pet_id)).to_response()


@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pet(pet_id: UUID, pets: PetService = Depends(get_pet_service)) -> None:
    pets.delete(str(pet_id))
