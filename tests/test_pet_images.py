"""
Tests for pet images and the single primary image per pet.
"""

import pytest

from petfriendly_backend.dependencies import get_storage
from petfriendly_backend.errors import NotFoundError, ValidationError
from petfriendly_backend.models import PetCreateRequest, PetImageCreateRequest, PetImageUpdateRequest, PetSpecies
from petfriendly_backend.pet_image_service import PetImageService
from petfriendly_backend.storage import ImageStorage


def _image(pet, url, primary=False):
    return PetImageCreateRequest(image_url=url, is_primary=primary, pet_id=pet.id)


def _primary_ids(service, pet):
    return [image.id for image in service.find_by_pet(pet.id).content if image.is_primary]


class TestPrimaryImage:
    """Exactly one image per pet may be primary."""

    def test_creating_primary_replaces_previous(self, pet_image_service, pet):
        first = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/max-1.jpg", primary=True))
        second = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/max-2.jpg", primary=True))

        assert _primary_ids(pet_image_service, pet) == [second.id]
        assert not pet_image_service.get(first.id).is_primary

    def test_set_primary_leaves_exactly_one(self, pet_image_service, pet):
        images = [
            pet_image_service.create(_image(pet, f"https://cdn.petfriendly.dev/max-{i}.jpg", primary=i == 0))
            for i in range(3)
        ]
        pet_image_service.set_primary(images[2].id)

        assert _primary_ids(pet_image_service, pet) == [images[2].id]
        assert pet_image_service.get_primary(pet.id).id == images[2].id

    def test_primary_is_per_pet(self, pet_image_service, pet_service, pet, foundation):
        other_pet = pet_service.create(PetCreateRequest(name="Nala", species=PetSpecies.CAT, foundation_id=foundation.id))
        mine = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/max.jpg", primary=True))
        theirs = pet_image_service.create(_image(other_pet, "https://cdn.petfriendly.dev/nala.jpg", primary=True))

        assert _primary_ids(pet_image_service, pet) == [mine.id]
        assert _primary_ids(pet_image_service, other_pet) == [theirs.id]

    def test_update_to_primary_clears_others(self, pet_image_service, pet):
        first = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/a.jpg", primary=True))
        second = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/b.jpg"))

        pet_image_service.update(
            second.id, PetImageUpdateRequest(image_url="https://cdn.petfriendly.dev/b2.jpg", is_primary=True)
        )

        assert _primary_ids(pet_image_service, pet) == [second.id]
        assert pet_image_service.get(second.id).image_url == "https://cdn.petfriendly.dev/b2.jpg"
        assert not pet_image_service.get(first.id).is_primary

    def test_remove_primary(self, pet_image_service, pet):
        image = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/a.jpg", primary=True))
        pet_image_service.remove_primary(image.id)

        assert not pet_image_service.has_primary(pet.id)
        with pytest.raises(NotFoundError):
            pet_image_service.get_primary(pet.id)

    def test_secondary_images(self, pet_image_service, pet):
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/a.jpg", primary=True))
        secondary = pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/b.jpg"))
        assert [image.id for image in pet_image_service.find_secondary(pet.id).content] == [secondary.id]


class TestPetImageService:
    def test_create_for_missing_pet(self, pet_image_service):
        payload = PetImageCreateRequest(image_url="https://x.dev/a.jpg", pet_id="00000000-0000-0000-0000-000000000000")
        with pytest.raises(NotFoundError):
            pet_image_service.create(payload)

    def test_upload_stores_file_locally(self, pet_image_service, pet, tmp_path):
        image = pet_image_service.upload(pet.id, "Max at the Park!.PNG", b"\x89PNG fake", "image/png", is_primary=True)

        assert image.image_url.startswith(f"/uploads/pets/{pet.id}/")
        assert image.image_url.endswith("-max-at-the-park.png")
        stored = tmp_path / "uploads" / image.image_url.removeprefix("/uploads/")
        assert stored.read_bytes() == b"\x89PNG fake"
        assert image.is_primary

    def test_upload_rejects_non_images(self, pet_image_service, pet):
        with pytest.raises(ValidationError):
            pet_image_service.upload(pet.id, "notes.txt", b"hello")

    def test_upload_rejects_oversized_files(self, db, pet, tmp_path):
        service = PetImageService(db, ImageStorage(tmp_path / "small", max_upload_bytes=4))
        with pytest.raises(ValidationError):
            service.upload(pet.id, "max.jpg", b"12345")
        assert service.count_by_pet(pet.id) == 0

    def test_statistics(self, pet_image_service, pet_service, pet, foundation):
        other_pet = pet_service.create(PetCreateRequest(name="Nala", species=PetSpecies.CAT, foundation_id=foundation.id))
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/a.jpg", primary=True))
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/b.jpg"))
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/c.jpg"))
        pet_image_service.create(_image(other_pet, "https://cdn.petfriendly.dev/d.jpg"))

        stats = pet_image_service.statistics()
        assert stats.total_images == 4
        assert stats.primary_images == 1
        assert stats.images_without_pet == 0
        assert stats.average_images_per_pet == 2

        per_pet = pet_image_service.statistics(pet.id)
        assert per_pet.total_images == 3
        assert per_pet.primary_images == 1

    def test_delete_by_pet(self, pet_image_service, pet):
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/a.jpg"))
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/b.jpg"))
        assert pet_image_service.delete_by_pet(pet.id) == 2
        assert pet_image_service.count_by_pet(pet.id) == 0

    def test_images_removed_with_pet(self, pet_image_service, pet_service, pet):
        pet_image_service.create(_image(pet, "https://cdn.petfriendly.dev/a.jpg"))
        pet_service.delete(pet.id)
        assert pet_image_service.count() == 0


class TestPetImageEndpoints:
    def test_public_read_admin_write(self, client, user_headers, admin_headers, api_pet):
        payload = {"image_url": "https://cdn.petfriendly.dev/luna.jpg", "is_primary": True, "pet_id": api_pet["id"]}

        assert client.post("/api/v1/pet-images", json=payload, headers=user_headers).status_code == 403
        created = client.post("/api/v1/pet-images", json=payload, headers=admin_headers)
        assert created.status_code == 201

        primary = client.get(f"/api/v1/pet-images/pet/{api_pet['id']}/primary")
        assert primary.status_code == 200
        assert primary.json()["id"] == created.json()["id"]
        assert client.head(f"/api/v1/pet-images/pet/{api_pet['id']}/has-primary").status_code == 200

    def test_set_primary_endpoint(self, client, admin_headers, api_pet):
        ids = []
        for index in range(2):
            response = client.post(
                "/api/v1/pet-images",
                json={"image_url": f"https://cdn.petfriendly.dev/{index}.jpg", "is_primary": True, "pet_id": api_pet["id"]},
                headers=admin_headers,
            )
            ids.append(response.json()["id"])

        response = client.put(f"/api/v1/pet-images/{ids[0]}/set-primary", headers=admin_headers)
        assert response.status_code == 200

        images = client.get(f"/api/v1/pet-images/pet/{api_pet['id']}").json()
        assert [image["id"] for image in images if image["is_primary"]] == [ids[0]]

    def test_upload_endpoint(self, client, admin_headers, api_pet):
        response = client.post(
            "/api/v1/pet-images/upload",
            data={"pet_id": api_pet["id"], "is_primary": "true", "alt_text": "Luna sleeping"},
            files={"file": ("luna.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["alt_text"] == "Luna sleeping"

        served = client.get(data["image_url"])
        assert served.status_code == 200
        assert served.content == b"\xff\xd8\xff fake jpeg"

    def test_missing_primary_returns_404(self, client, api_pet):
        assert client.get(f"/api/v1/pet-images/pet/{api_pet['id']}/primary").status_code == 404
        assert client.head(f"/api/v1/pet-images/pet/{api_pet['id']}/has-primary").status_code == 404

    def test_oversized_upload_returns_400(self, client, admin_headers, api_pet, monkeypatch):
        monkeypatch.setattr(get_storage(), "max_upload_bytes", 8)
        response = client.post(
            "/api/v1/pet-images/upload",
            data={"pet_id": api_pet["id"]},
            files={"file": ("luna.jpg", b"\xff\xd8\xff" + b"0" * 64, "image/jpeg")},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Uploaded file exceeds 8 bytes"
        assert client.get(f"/api/v1/pet-images/pet/{api_pet['id']}").json() == []
