"""
Tests for the PetFriendly REST endpoints and their services.

Tests cover:
- Actuator and API documentation routes
- Users (profile, administration, statistics)
- Foundations, pets and contact messages CRUD
- Pagination and sorting
- Demo account seeding
"""

import pytest

from petfriendly_backend.errors import NotFoundError, ValidationError
from petfriendly_backend.models import (
    ContactMessageCreateRequest,
    FoundationCreateRequest,
    PetCreateRequest,
    PetSize,
    PetSpecies,
    PetStatus,
    Role,
)
from petfriendly_backend.pagination import PageRequest, parse_sort
from petfriendly_backend.seed import DEMO_ACCOUNTS, seed_demo_accounts


class TestActuator:
    """Tests for /actuator."""

    def test_health(self, client):
        response = client.get("/actuator/health")
        assert response.status_code == 200
        assert response.json() == {"status": "UP", "database": "UP"}

    def test_info(self, client):
        response = client.get("/actuator/info")
        assert response.status_code == 200
        assert response.json()["name"] == "PetFriendly API"

    def test_openapi_document(self, client):
        response = client.get("/v3/api-docs")
        assert response.status_code == 200
        assert "/api/v1/pets" in response.json()["paths"]


class TestPagination:
    def test_parse_sort(self):
        assert parse_sort("name") == (("name", "asc"),)
        assert parse_sort("name,desc;age,asc") == (("name", "desc"), ("age", "asc"))
        assert parse_sort(None) == ()

    def test_invalid_direction(self):
        with pytest.raises(ValidationError):
            parse_sort("name,sideways")

    def test_page_fields(self, client, admin_headers, api_foundation):
        for name in ("Bruno", "Coco", "Toby"):
            client.post(
                "/api/v1/pets",
                json={"name": name, "species": "DOG", "foundation_id": api_foundation["id"]},
                headers=admin_headers,
            )

        response = client.get("/api/v1/pets/page", params={"page": 1, "size": 2, "sort": "name,asc"})
        assert response.status_code == 200
        data = response.json()
        assert [pet["name"] for pet in data["content"]] == ["Toby"]
        assert data["total_elements"] == 3
        assert data["total_pages"] == 2
        assert data["number"] == 1
        assert data["size"] == 2
        assert not data["first"]
        assert data["last"]
        assert data["number_of_elements"] == 1
        assert not data["empty"]

    def test_unknown_sort_column_is_400(self, client):
        response = client.get("/api/v1/pets/page", params={"sort": "password,asc"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot sort by 'password'"

    def test_negative_page_is_422(self, client):
        assert client.get("/api/v1/pets/page", params={"page": -1}).status_code == 422


class TestUserService:
    def test_emails_are_case_insensitive(self, user_service, applicant):
        assert user_service.get_by_email("ANA@petfriendly.dev").id == applicant.id
        assert user_service.exists_by_email("Ana@PetFriendly.dev")

    def test_authenticate(self, user_service, applicant):
        assert user_service.authenticate("ana@petfriendly.dev", "secret123").id == applicant.id
        assert user_service.authenticate("ana@petfriendly.dev", "wrong-pass") is None
        user_service.deactivate(applicant.id)
        assert user_service.authenticate("ana@petfriendly.dev", "secret123") is None

    def test_change_password(self, user_service, applicant):
        user_service.change_password(applicant.id, "brand-new")
        assert user_service.authenticate("ana@petfriendly.dev", "brand-new") is not None
        with pytest.raises(ValidationError):
            user_service.change_password(applicant.id, "123")

    def test_statistics(self, user_service, applicant):
        stats = user_service.statistics()
        assert stats.total_users == 1
        assert stats.active_users == 1
        assert stats.standard_users == 1
        assert stats.super_admins == 0

    def test_name_search_treats_wildcards_literally(self, user_service, applicant):
        assert user_service.search_by_name("%").content == []
        assert user_service.search_by_name("_").content == []
        assert [user.id for user in user_service.search_by_name("roj").content] == [applicant.id]

    def test_seed_is_idempotent(self, user_service):
        assert len(seed_demo_accounts(user_service)) == len(DEMO_ACCOUNTS)
        assert seed_demo_accounts(user_service) == []
        assert user_service.count_by_role(Role.SUPER_ADMIN) == 1


class TestUserEndpoints:
    """Tests for /api/v1/users."""

    def test_profile_update_ignores_blank_values(self, client, user_account):
        _, headers = user_account
        response = client.put(
            "/api/v1/users/profile", json={"first_name": "  ", "city": "Pereira"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["first_name"] == "Test"
        assert response.json()["city"] == "Pereira"

    @pytest.mark.parametrize(
        "payload",
        [{"first_name": "A"}, {"last_name": "B"}, {"phone": "not-a-phone"}, {"phone": "+0123"}],
    )
    def test_profile_update_applies_registration_rules(self, client, user_headers, payload):
        response = client.put("/api/v1/users/profile", json=payload, headers=user_headers)
        assert response.status_code == 422

    def test_users_cannot_be_sorted_by_password(self, client, super_admin_headers):
        response = client.get("/api/v1/users/page", params={"sort": "password,asc"}, headers=super_admin_headers)
        assert response.status_code == 400
        assert client.get("/api/v1/users/page", params={"sort": "email"}, headers=super_admin_headers).status_code == 200

    def test_profile_delete(self, client, user_account, super_admin_headers):
        user, headers = user_account
        assert client.delete("/api/v1/users/profile", headers=headers).status_code == 204
        assert client.get(f"/api/v1/users/{user.id}", headers=super_admin_headers).status_code == 404

    def test_register_endpoint(self, client):
        response = client.post(
            "/api/v1/users/register",
            json={"first_name": "Sofia", "last_name": "Gomez", "email": "sofia@petfriendly.dev", "password": "secret123"},
        )
        assert response.status_code == 201
        assert response.json()["role"] == "USER"
        assert "password" not in response.json()

    def test_admin_listing_and_lookup(self, client, user_account, super_admin_headers):
        user, _ = user_account
        users = client.get("/api/v1/users", headers=super_admin_headers)
        assert users.status_code == 200
        assert {item["email"] for item in users.json()} == {"user@petfriendly.dev", "root@petfriendly.dev"}

        by_email = client.get(f"/api/v1/users/email/{user.email}", headers=super_admin_headers)
        assert by_email.json()["id"] == user.id
        assert client.head(f"/api/v1/users/{user.id}", headers=super_admin_headers).status_code == 200
        assert client.get("/api/v1/users/count/role/USER", headers=super_admin_headers).json() == 1

    def test_foundation_admin_cannot_manage_users(self, client, user_account, admin_headers):
        user, _ = user_account
        assert client.get(f"/api/v1/users/{user.id}", headers=admin_headers).status_code == 403

    def test_deactivate_and_activate(self, client, user_account, super_admin_headers):
        user, _ = user_account
        response = client.put(f"/api/v1/users/{user.id}/deactivate", headers=super_admin_headers)
        assert response.json()["active"] is False
        assert client.get("/api/v1/users/count/active", headers=super_admin_headers).json() == 1

        response = client.put(f"/api/v1/users/{user.id}/activate", headers=super_admin_headers)
        assert response.json()["active"] is True

    def test_update_to_taken_email(self, client, user_account, other_user_account, super_admin_headers):
        user, _ = user_account
        other, _ = other_user_account
        response = client.put(f"/api/v1/users/{user.id}", json={"email": other.email}, headers=super_admin_headers)
        assert response.status_code == 400

    def test_statistics(self, client, user_account, super_admin_headers):
        stats = client.get("/api/v1/users/statistics", headers=super_admin_headers).json()
        assert stats["total_users"] == 2
        assert stats["standard_users"] == 1
        assert stats["super_admins"] == 1


class TestFoundationService:
    def test_duplicate_contact_email(self, foundation_service, foundation):
        with pytest.raises(ValidationError):
            foundation_service.create(
                FoundationCreateRequest(name="Otra", city="Cali", contact_email="HOLA@huellitas.org")
            )

    def test_new_foundations_are_unverified(self, foundation_service, foundation):
        assert not foundation.verified
        assert foundation_service.count_active() == 0
        foundation_service.activate(foundation.id)
        assert [item.id for item in foundation_service.find_active().content] == [foundation.id]

    def test_with_available_pets(self, foundation_service, pet_service, foundation, pet):
        assert [item.id for item in foundation_service.find_with_available_pets().content] == [foundation.id]
        pet_service.mark_adopted(pet.id)
        assert foundation_service.find_with_available_pets().content == []

    def test_statistics(self, foundation_service, pet_service, foundation, pet):
        pet_service.create(
            PetCreateRequest(name="Kira", species=PetSpecies.DOG, status=PetStatus.ADOPTED, foundation_id=foundation.id)
        )
        stats = foundation_service.statistics(foundation.id)
        assert stats.total_pets == 2
        assert stats.available_pets == 1
        assert stats.adopted_pets == 1
        assert stats.pending_adoptions == 0

    def test_missing_foundation(self, foundation_service):
        with pytest.raises(NotFoundError):
            foundation_service.get("00000000-0000-0000-0000-000000000000")


class TestFoundationEndpoints:
    """Tests for /api/v1/foundations."""

    def test_public_read_admin_write(self, client, user_headers, api_foundation):
        assert client.get(f"/api/v1/foundations/{api_foundation['id']}").status_code == 200
        assert client.get("/api/v1/foundations/city/medellin").json()[0]["id"] == api_foundation["id"]
        assert client.head("/api/v1/foundations/name/Patitas").status_code == 200

        payload = {"name": "Nueva", "city": "Cali", "contact_email": "nueva@org.co"}
        assert client.post("/api/v1/foundations", json=payload).status_code == 401
        assert client.post("/api/v1/foundations", json=payload, headers=user_headers).status_code == 403

    def test_update_and_delete(self, client, admin_headers, api_foundation):
        url = f"/api/v1/foundations/{api_foundation['id']}"
        response = client.put(url, json={"description": "Rescatamos gatos"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["description"] == "Rescatamos gatos"
        assert response.json()["name"] == "Patitas"

        assert client.delete(url, headers=admin_headers).status_code == 204
        assert client.get(url).status_code == 404
        assert client.head(url).status_code == 404

    def test_search_and_counts(self, client, api_foundation):
        assert len(client.get("/api/v1/foundations/search", params={"name": "pati"}).json()) == 1
        assert client.get("/api/v1/foundations/count").json() == 1
        assert client.get("/api/v1/foundations/count/state/Antioquia").json() == 1

    def test_malformed_id_is_422(self, client):
        assert client.get("/api/v1/foundations/not-a-uuid").status_code == 422


class TestPetService:
    def test_missing_foundation_is_validation_error(self, pet_service):
        with pytest.raises(ValidationError):
            pet_service.create(
                PetCreateRequest(name="Max", species=PetSpecies.DOG, foundation_id="00000000-0000-0000-0000-000000000000")
            )

    def test_age_range(self, pet_service, pet):
        assert [item.id for item in pet_service.find_by_age_range(1, 5).content] == [pet.id]
        assert pet_service.find_by_age_range(4, 10).content == []
        with pytest.raises(ValidationError):
            pet_service.find_by_age_range(5, 1)

    def test_filters(self, pet_service, foundation, pet):
        pet_service.create(
            PetCreateRequest(name="Mia", species=PetSpecies.CAT, size=PetSize.SMALL, foundation_id=foundation.id)
        )
        cats = pet_service.find_available_with_filters(species=PetSpecies.CAT)
        assert [item.name for item in cats.content] == ["Mia"]
        assert pet_service.find_available_with_filters(city="BOGOTA").total_elements == 2
        assert pet_service.find_available_with_filters(city="Cali").total_elements == 0

    def test_status_changes(self, pet_service, pet):
        assert pet_service.mark_adopted(pet.id).status is PetStatus.ADOPTED
        assert pet_service.find_available().content == []
        assert pet_service.mark_available(pet.id).status is PetStatus.AVAILABLE
        assert pet_service.update_status(pet.id, PetStatus.PENDING).status is PetStatus.PENDING

    def test_statistics(self, pet_service, pet):
        pet_service.mark_adopted(pet.id)
        stats = pet_service.statistics()
        assert stats.total_pets == 1
        assert stats.adopted_pets == 1
        assert stats.available_pets == 0


class TestPetEndpoints:
    """Tests for /api/v1/pets."""

    def test_create_defaults_to_available(self, api_pet):
        assert api_pet["status"] == "AVAILABLE"
        assert api_pet["gender"] == "FEMALE"

    def test_unknown_foundation_is_400(self, client, admin_headers):
        response = client.post(
            "/api/v1/pets",
            json={"name": "Max", "species": "DOG", "foundation_id": "00000000-0000-0000-0000-000000000000"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_invalid_age_is_422(self, client, admin_headers, api_foundation):
        response = client.post(
            "/api/v1/pets",
            json={"name": "Max", "species": "DOG", "age": 0, "foundation_id": api_foundation["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_status_endpoints(self, client, admin_headers, user_headers, api_pet):
        url = f"/api/v1/pets/{api_pet['id']}"
        assert client.put(f"{url}/adopt", headers=user_headers).status_code == 403

        assert client.put(f"{url}/adopt", headers=admin_headers).json()["status"] == "ADOPTED"
        assert client.get("/api/v1/pets/count/status/ADOPTED").json() == 1
        response = client.put(f"{url}/status", json={"status": "PENDING"}, headers=admin_headers)
        assert response.json()["status"] == "PENDING"
        assert client.put(f"{url}/available", headers=admin_headers).json()["status"] == "AVAILABLE"

    def test_listings(self, client, api_foundation, api_pet):
        assert [pet["id"] for pet in client.get("/api/v1/pets/available").json()] == [api_pet["id"]]
        assert len(client.get("/api/v1/pets/species/CAT").json()) == 1
        assert client.get("/api/v1/pets/species/DOG").json() == []
        assert len(client.get(f"/api/v1/pets/foundation/{api_foundation['id']}").json()) == 1
        assert len(client.get("/api/v1/pets/search", params={"name": "lu"}).json()) == 1
        assert len(client.get("/api/v1/pets/age", params={"min_age": 1, "max_age": 3}).json()) == 1

        filtered = client.get("/api/v1/pets/available/filter", params={"species": "CAT", "city": "medellin"})
        assert filtered.json()["total_elements"] == 1

    def test_statistics_by_foundation(self, client, api_foundation, api_pet):
        stats = client.get(f"/api/v1/pets/statistics/foundation/{api_foundation['id']}").json()
        assert stats["total_pets"] == 1
        assert stats["available_pets"] == 1

        foundation_stats = client.get(f"/api/v1/foundations/statistics/{api_foundation['id']}").json()
        assert foundation_stats["total_pets"] == 1
        assert foundation_stats["pending_adoptions"] == 0

    def test_update_partial(self, client, admin_headers, api_pet):
        response = client.put(
            f"/api/v1/pets/{api_pet['id']}", json={"breed": "Siames", "size": "SMALL"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["breed"] == "Siames"
        assert response.json()["name"] == "Luna"


class TestContactMessageService:
    def _message(self, foundation, **overrides):
        fields = dict(
            sender_name="Carlos Perez",
            sender_email="carlos@mail.com",
            subject="Visita",
            message="Quiero conocer a Max",
            foundation_id=foundation.id,
        )
        fields.update(overrides)
        return ContactMessageCreateRequest(**fields)

    def test_new_messages_are_unread(self, contact_service, foundation):
        message = contact_service.create(self._message(foundation))
        assert not message.is_read
        assert message.read_at is None

    def test_missing_foundation(self, contact_service):
        payload = ContactMessageCreateRequest(
            sender_name="Carlos",
            sender_email="carlos@mail.com",
            message="Hola",
            foundation_id="00000000-0000-0000-0000-000000000000",
        )
        with pytest.raises(NotFoundError):
            contact_service.create(payload)

    def test_mark_read_and_unread(self, contact_service, foundation):
        message = contact_service.create(self._message(foundation))
        read = contact_service.mark_read(message.id)
        assert read.is_read
        assert read.read_at is not None

        unread = contact_service.mark_unread(message.id)
        assert not unread.is_read
        assert unread.read_at is None

    def test_search(self, contact_service, foundation):
        contact_service.create(self._message(foundation))
        contact_service.create(self._message(foundation, sender_name="Laura", subject="Donacion", message="Comida"))

        assert contact_service.search_by_name("carl").total_elements == 1
        assert contact_service.search_by_subject("donac").total_elements == 1
        assert contact_service.search_by_message("MAX").total_elements == 1

    def test_search_treats_wildcards_literally(self, contact_service, foundation):
        contact_service.create(self._message(foundation, subject="50% off vet visits"))
        contact_service.create(self._message(foundation, subject="Visita"))

        assert contact_service.search_by_subject("%").total_elements == 1
        assert contact_service.search_by_name("_").total_elements == 0

    def test_statistics(self, contact_service, foundation):
        first = contact_service.create(self._message(foundation))
        contact_service.create(self._message(foundation, sender_name="Laura"))
        contact_service.mark_read(first.id)

        stats = contact_service.statistics(foundation.id)
        assert stats.total_messages == 2
        assert stats.read_messages == 1
        assert stats.unread_messages == 1
        assert stats.today_messages == 2
        assert stats.week_messages == 2
        assert stats.month_messages == 2

    def test_paging(self, contact_service, foundation):
        for index in range(3):
            contact_service.create(self._message(foundation, sender_name=f"Sender {index}"))
        page = contact_service.find_by_foundation(foundation.id, PageRequest.of(0, 2, "sender_name,desc"))
        assert [message.sender_name for message in page.content] == ["Sender 2", "Sender 1"]
        assert page.total_pages == 2


class TestContactMessageEndpoints:
    """Tests for /api/v1/contact-messages."""

    def _send(self, client, foundation_id):
        return client.post(
            "/api/v1/contact-messages",
            json={
                "sender_name": "Carlos Perez",
                "sender_email": "carlos@mail.com",
                "subject": "Adopcion",
                "message": "Hola, quiero adoptar a Luna",
                "foundation_id": foundation_id,
            },
        )

    def test_anyone_can_send(self, client, api_foundation):
        response = self._send(client, api_foundation["id"])
        assert response.status_code == 201
        assert response.json()["is_read"] is False

    def test_reading_requires_admin(self, client, user_headers, admin_headers, api_foundation):
        message_id = self._send(client, api_foundation["id"]).json()["id"]
        assert client.get(f"/api/v1/contact-messages/{message_id}").status_code == 401
        assert client.get(f"/api/v1/contact-messages/{message_id}", headers=user_headers).status_code == 403
        assert client.get(f"/api/v1/contact-messages/{message_id}", headers=admin_headers).status_code == 200

    def test_mark_read_and_counts(self, client, admin_headers, api_foundation):
        message_id = self._send(client, api_foundation["id"]).json()["id"]
        response = client.put(f"/api/v1/contact-messages/{message_id}/mark-read", headers=admin_headers)
        assert response.json()["is_read"] is True

        foundation_id = api_foundation["id"]
        assert client.get(f"/api/v1/contact-messages/count/foundation/{foundation_id}/read", headers=admin_headers).json() == 1
        assert client.get("/api/v1/contact-messages/unread", headers=admin_headers).json() == []

    def test_unknown_foundation_is_404(self, client):
        assert self._send(client, "00000000-0000-0000-0000-000000000000").status_code == 404

    def test_statistics(self, client, admin_headers, api_foundation):
        self._send(client, api_foundation["id"])
        stats = client.get("/api/v1/contact-messages/statistics", headers=admin_headers).json()
        assert stats["total_messages"] == 1
        assert stats["unread_messages"] == 1
        assert stats["today_messages"] == 1

    def test_delete(self, client, admin_headers, api_foundation):
        message_id = self._send(client, api_foundation["id"]).json()["id"]
        assert client.delete(f"/api/v1/contact-messages/{message_id}", headers=admin_headers).status_code == 204
        assert client.head(f"/api/v1/contact-messages/{message_id}", headers=admin_headers).status_code == 404
