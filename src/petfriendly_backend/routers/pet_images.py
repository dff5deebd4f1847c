from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from starlette.concurrency import run_in_threadpool

from ..dependencies import get_pet_image_service
from ..entities import PetImage
from ..errors import ValidationError
from ..models import (
    PageResponse,
    PetImageCreateRequest,
    PetImageResponse,
    PetImageStatistics,
    PetImageUpdateRequest,
)
from ..pagination import PageRequest, page_params
from ..pet_image_service import PetImageService

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_CHUNK_SIZE = 1024 * 1024


def _exists(found: bool) -> Response:
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


async def _read_upload(file: UploadFile, limit: int) -> bytes:
    data = bytearray()
    try:
        while chunk := await file.read(UPLOAD_CHUNK_SIZE):
            data.extend(chunk)
            if len(data) > limit:
                raise ValidationError(f"Uploaded file exceeds {limit} bytes")
    finally:
        await file.close()
    return bytes(data)


@router.post("", response_model=PetImageResponse, status_code=status.HTTP_201_CREATED)
def create_pet_image(
    payload: PetImageCreateRequest, images: PetImageService = Depends(get_pet_image_service)
) -> PetImageResponse:
    return images.create(payload).to_response()


@router.post("/upload", response_model=PetImageResponse, status_code=status.HTTP_201_CREATED)
async def upload_pet_image(
    file: UploadFile = File(...),
    pet_id: UUID = Form(...),
    is_primary: bool = Form(False),
    alt_text: Optional[str] = Form(None),
    images: PetImageService = Depends(get_pet_image_service),
) -> PetImageResponse:
    data = await _read_upload(file, images.storage.max_upload_bytes)
    image = await run_in_threadpool(
        images.upload,
        str(pet_id),
        file.filename,
        data,
        content_type=file.content_type,
        is_primary=is_primary,
        alt_text=alt_text,
    )
    return image.to_response()


@router.get("", response_model=List[PetImageResponse])
def list_pet_images(images: PetImageService = Depends(get_pet_image_service)) -> List[PetImageResponse]:
    return [image.to_response() for image in images.find_all().content]


@router.get("/page", response_model=PageResponse[PetImageResponse])
def page_pet_images(
    pageable: PageRequest = Depends(page_params), images: PetImageService = Depends(get_pet_image_service)
):
    return images.find_all(pageable).map(PetImage.to_response).to_response()


@router.get("/pet/{pet_id}", response_model=List[PetImageResponse])
def list_images_of_pet(pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)):
    return [image.to_response() for image in images.find_by_pet(str(pet_id)).content]


@router.get("/pet/{pet_id}/page", response_model=PageResponse[PetImageResponse])
def page_images_of_pet(
    pet_id: UUID, pageable: PageRequest = Depends(page_params), images: PetImageService = Depends(get_pet_image_service)
):
    return images.find_by_pet(str(pet_id), pageable).map(PetImage.to_response).to_response()


@router.get("/pet/{pet_id}/primary", response_model=PetImageResponse)
def get_primary_image(pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> PetImageResponse:
    return images.get_primary(str(pet_id)).to_response()


@router.head("/pet/{pet_id}/has-primary")
def check_pet_has_primary(pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> Response:
    return _exists(images.has_primary(str(pet_id)))


@router.get("/pet/{pet_id}/secondary", response_model=List[PetImageResponse])
def list_secondary_images(pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)):
    return [image.to_response() for image in images.find_secondary(str(pet_id)).content]


@router.get("/pet/{pet_id}/secondary/page", response_model=PageResponse[PetImageResponse])
def page_secondary_images(
    pet_id: UUID, pageable: PageRequest = Depends(page_params), images: PetImageService = Depends(get_pet_image_service)
):
    return images.find_secondary(str(pet_id), pageable).map(PetImage.to_response).to_response()


@router.delete("/pet/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_images_of_pet(pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> None:
    images.delete_by_pet(str(pet_id))


@router.get("/search", response_model=List[PetImageResponse])
def search_pet_images(url: str = Query(...), images: PetImageService = Depends(get_pet_image_service)):
    return [image.to_response() for image in images.search_by_url(url).content]


@router.get("/search/page", response_model=PageResponse[PetImageResponse])
def page_search_pet_images(
    url: str = Query(...),
    pageable: PageRequest = Depends(page_params),
    images: PetImageService = Depends(get_pet_image_service),
):
    return images.search_by_url(url, pageable).map(PetImage.to_response).to_response()


@router.get("/count", response_model=int)
def count_pet_images(images: PetImageService = Depends(get_pet_image_service)) -> int:
    return images.count()


@router.get("/count/pet/{pet_id}", response_model=int)
def count_images_of_pet(pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> int:
    return images.count_by_pet(str(pet_id))


@router.get("/statistics", response_model=PetImageStatistics)
def pet_image_statistics(images: PetImageService = Depends(get_pet_image_service)) -> PetImageStatistics:
    return images.statistics()


@router.get("/statistics/pet/{pet_id}", response_model=PetImageStatistics)
def pet_image_statistics_by_pet(
    pet_id: UUID, images: PetImageService = Depends(get_pet_image_service)
) -> PetImageStatistics:
    return images.statistics(str(pet_id))


@router.get("/{image_id}", response_model=PetImageResponse)
def get_pet_image(image_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> PetImageResponse:
    return images.get(str(image_id)).to_response()


@router.head("/{image_id}")
def check_pet_image_exists(image_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> Response:
    return _exists(images.exists_by_id(str(image_id)))


@router.put("/{image_id}", response_model=PetImageResponse)
def update_pet_image(
    image_id: UUID, payload: PetImageUpdateRequest, images: PetImageService = Depends(get_pet_image_service)
) -> PetImageResponse:
    return images.update(str(image_id), payload).to_response()


@router.put("/{image_id}/set-primary", response_model=PetImageResponse)
def set_primary_image(image_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> PetImageResponse:
    return images.set_primary(str(image_id)).to_response()


@router.put("/{image_id}/remove-primary", response_model=PetImageResponse)
def remove_primary_image(image_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> PetImageResponse:
    return images.remove_primary(str(image_id)).to_response()


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pet_image(image_id: UUID, images: PetImageService = Depends(get_pet_image_service)) -> None:
    images.delete(str(image_id))
