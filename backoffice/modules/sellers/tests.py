"""
Tests para el módulo de Vendedores

- Generación de slugs (acentos, colisiones, idempotencia)
- Alta, edición y baja de vendedores
- Resolución por slug, nombre o id
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from backoffice.core.exceptions import DuplicateSeller, SellerHasNotes, SellerNotFound
from backoffice.modules.sellers.crud import SellerDirectory
from backoffice.modules.sellers.schemas import SellerCreate, SellerUpdate
from backoffice.modules.sellers.service import SellerService
from backoffice.modules.sellers.utils import base_slug, slug_matches_name, unique_slug_from


# ===== SLUGS =====

class TestSlugUtils:

    @pytest.mark.parametrize("name, expected", [
        ("Ana Pérez", "ana"),
        ("María José Andrade", "maria"),
        ("  José  ", "jose"),
        ("Ñusta Q.", "nusta"),
        ("O'Brien Smith", "obrien"),
        ("", "vendedor"),
        ("!!!", "vendedor"),
    ])
    def test_base_slug(self, name, expected):
        assert base_slug(name) == expected

    def test_collisions_get_incrementing_suffix(self):
        assert unique_slug_from("Ana Pérez", []) == "ana"
        assert unique_slug_from("Ana Pérez", ["ana"]) == "ana2"
        assert unique_slug_from("Ana Pérez", ["ana", "ana2", "ana3"]) == "ana4"
        assert unique_slug_from("Ana Pérez", ["ana", "ana3"]) == "ana2"

    def test_slug_matches_name(self):
        assert slug_matches_name("ana", "Ana López")
        assert slug_matches_name("ana3", "Ana López")
        assert not slug_matches_name("ana1", "Ana López")
        assert not slug_matches_name("anabel", "Ana López")
        assert not slug_matches_name(None, "Ana López")


# ===== SERVICIO =====

class TestSellerService:

    async def test_create_assigns_slug(self, db_session):
        service = SellerService(db_session)

        first = await service.create_seller(SellerCreate(name="Ana Pérez", email="ana@example.com"))
        second = await service.create_seller(SellerCreate(name="Ana López"))

        assert first.slug == "ana"
        assert second.slug == "ana2"
        assert first.is_active

    async def test_duplicate_email(self, db_session):
        service = SellerService(db_session)
        await service.create_seller(SellerCreate(name="Ana", email="ana@example.com"))

        with pytest.raises(DuplicateSeller):
            await service.create_seller(SellerCreate(name="Otra Ana", email="ana@example.com"))

    async def test_slug_conflict_is_reported_as_slug(self, db_session, make_seller, monkeypatch):
        await make_seller("Ana Pérez")

        # Otro alta tomó el slug entre la consulta y el commit
        async def taken_slug(self, name, seller_id=None):
            return "ana"

        monkeypatch.setattr(SellerService, "_free_slug", taken_slug)

        with pytest.raises(DuplicateSeller) as exc:
            await SellerService(db_session).create_seller(SellerCreate(name="Ana López"))
        assert exc.value.field == "slug"
        assert exc.value.detail == "Ya existe un vendedor con este slug"

    async def test_email_conflict_at_commit(self, db_session, make_seller, monkeypatch):
        await make_seller("Ana Pérez", email="ana@example.com")

        async def no_match(self, email):
            return None

        monkeypatch.setattr(SellerDirectory, "get_by_email", no_match)

        with pytest.raises(DuplicateSeller) as exc:
            await SellerService(db_session).create_seller(SellerCreate(name="Bruno Díaz", email="ana@example.com"))
        assert exc.value.field == "email"

    async def test_update_keeps_slug_if_name_unchanged(self, db_session):
        service = SellerService(db_session)
        seller = await service.create_seller(SellerCreate(name="Ana Pérez"))

        updated = await service.update_seller(seller.id, SellerUpdate(city="Quito", commission=Decimal("10")))

        assert updated.slug == "ana"
        assert updated.city == "Quito"

    async def test_update_keeps_slug_if_first_word_unchanged(self, db_session):
        service = SellerService(db_session)
        seller = await service.create_seller(SellerCreate(name="Ana Pérez"))

        updated = await service.update_seller(seller.id, SellerUpdate(name="Ana Pérez Ruiz"))

        assert updated.slug == "ana"

    async def test_rename_regenerates_slug(self, db_session):
        service = SellerService(db_session)
        await service.create_seller(SellerCreate(name="Lucía Mora"))
        seller = await service.create_seller(SellerCreate(name="Ana Pérez"))

        updated = await service.update_seller(seller.id, SellerUpdate(name="Lucía Pérez"))

        assert updated.slug == "lucia2"

    async def test_ensure_slug_is_idempotent(self, db_session, make_seller):
        legacy = await make_seller("Carla Ortiz", slug="")
        await make_seller("Carla Vega")
        service = SellerService(db_session)

        first = await service.ensure_slug(legacy.id)
        second = await service.ensure_slug(legacy.id)

        assert first.slug == "carla2"
        assert second.slug == "carla2"

    async def test_resolve_order(self, db_session, make_seller):
        seller = await make_seller("Ana Pérez")
        service = SellerService(db_session)

        assert (await service.resolve("ana")).id == seller.id
        assert (await service.resolve("ana pérez")).id == seller.id
        assert (await service.resolve(str(seller.id))).id == seller.id

        with pytest.raises(SellerNotFound):
            await service.resolve("nadie")

    async def test_resolve_assigns_missing_slug(self, db_session, make_seller):
        seller = await make_seller("Diana Ríos", slug="")

        resolved = await SellerService(db_session).resolve("Diana Ríos")

        assert resolved.id == seller.id
        assert resolved.slug == "diana"

    async def test_delete_refused_with_notes(self, db_session, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 50, datetime(2025, 1, 1, tzinfo=timezone.utc))

        with pytest.raises(SellerHasNotes) as exc:
            await SellerService(db_session).delete_seller(seller.id)
        assert exc.value.notes_count == 1

    async def test_delete(self, db_session, make_seller):
        seller = await make_seller()

        await SellerService(db_session).delete_seller(seller.id)

        assert await SellerDirectory(db_session).get_by_id(seller.id) is None

    async def test_list_with_search(self, db_session, make_seller):
        await make_seller("Ana Pérez", email="ana@example.com")
        await make_seller("Bruno Díaz", email="bruno@example.com")

        found = await SellerService(db_session).list_sellers(search="BRUNO")

        assert [s.name for s in found] == ["Bruno Díaz"]

    async def test_slug_available(self, db_session, make_seller):
        seller = await make_seller("Ana Pérez")
        service = SellerService(db_session)

        assert not await service.slug_available("ana")
        assert await service.slug_available("ana", seller.id)
        assert await service.slug_available("bruno")


# ===== API =====

class TestSellersAPI:

    async def test_create_and_get_by_slug(self, client):
        created = await client.post("/sellers/", json={"name": "Sofía Núñez", "email": "sofia@example.com"})
        assert created.status_code == 201
        assert created.json()["slug"] == "sofia"

        response = await client.get("/sellers/by-slug/sofia")
        assert response.status_code == 200
        assert response.json()["email"] == "sofia@example.com"

    async def test_invalid_email(self, client):
        response = await client.post("/sellers/", json={"name": "Sofía", "email": "no-es-email"})
        assert response.status_code == 422

    async def test_unknown_seller_is_404(self, client):
        response = await client.get(f"/sellers/{uuid4()}")
        assert response.status_code == 404

    async def test_delete_with_notes_is_409(self, client, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 10, datetime(2025, 1, 1, tzinfo=timezone.utc))

        response = await client.delete(f"/sellers/{seller.id}")

        assert response.status_code == 409

    async def test_resolve_endpoint(self, client, make_seller):
        seller = await make_seller("Ana Pérez")

        response = await client.get("/sellers/resolve/ana")

        assert response.status_code == 200
        assert response.json()["id"] == str(seller.id)
