"""
Servicio de Vendedores

Alta, edición y baja de vendedores, más las consultas del directorio que
usan el resto de módulos (por id, por slug, resolución para la tienda
pública).
"""

from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import List, Optional
from uuid import UUID
import logging

from backoffice.core.exceptions import (
    DuplicateSeller, SellerHasNotes, SellerNotFound, StoreWriteFailure
)
from backoffice.modules.exit_notes.crud import NoteStore
from backoffice.modules.sellers.crud import SellerDirectory
from backoffice.modules.sellers.models import Seller
from backoffice.modules.sellers.schemas import SellerCreate, SellerUpdate
from backoffice.modules.sellers.utils import base_slug, slug_matches_name, unique_slug_from

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("slug", "email")


def conflicting_field(error: IntegrityError) -> Optional[str]:
    """Campo único que causó el IntegrityError, según el mensaje del driver"""
    message = str(error.orig).lower()
    for field in UNIQUE_FIELDS:
        if field in message:
            return field
    return None


class SellerService:
    """Servicio para gestión de vendedores"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.directory = SellerDirectory(db)

    @asynccontextmanager
    async def _writing(self, operation: str):
        """Confirma lo escrito dentro del bloque; revierte ante errores de base de datos"""
        try:
            yield
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            field = conflicting_field(e)
            if field is None:
                logger.error(f"Error saving {operation}: {e}", exc_info=True)
                raise StoreWriteFailure(operation, e)
            logger.warning(f"Duplicate seller {field} while saving {operation}")
            raise DuplicateSeller(field)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving {operation}: {e}", exc_info=True)
            raise StoreWriteFailure(operation, e)

    async def _free_slug(self, name: str, seller_id: Optional[UUID] = None) -> str:
        taken = await self.directory.slugs_starting_with(base_slug(name), exclude_id=seller_id)
        return unique_slug_from(name, taken)

    async def create_seller(self, seller_data: SellerCreate) -> Seller:
        """Crear vendedor con su slug"""
        if seller_data.email and await self.directory.get_by_email(seller_data.email):
            raise DuplicateSeller()

        fields = seller_data.model_dump()
        fields["price_type"] = seller_data.price_type.value
        fields["slug"] = await self._free_slug(seller_data.name)

        async with self._writing("vendedor"):
            seller = await self.directory.create(is_active=True, **fields)

        logger.info(f"Seller created: {seller.name} (slug={seller.slug})")
        return seller

    async def get_seller(self, seller_id: UUID) -> Seller:
        seller = await self.directory.get_by_id(seller_id)
        if not seller:
            raise SellerNotFound(seller_id)
        return seller

    async def get_by_slug(self, slug: str) -> Seller:
        seller = await self.directory.get_by_slug(slug)
        if not seller:
            raise SellerNotFound(slug)
        return seller

    async def list_sellers(self, active_only: bool = False, search: Optional[str] = None) -> List[Seller]:
        sellers = await self.directory.get_all()
        if active_only:
            sellers = [s for s in sellers if s.is_active]
        if search:
            term = search.strip().lower()
            sellers = [
                s for s in sellers
                if term in s.name.lower() or term in (s.email or "").lower()
            ]
        return sellers

    async def update_seller(self, seller_id: UUID, seller_data: SellerUpdate) -> Seller:
        """Actualizar vendedor; el slug solo cambia si cambia el nombre"""
        seller = await self.get_seller(seller_id)

        update_data = seller_data.model_dump(exclude_unset=True)
        if "price_type" in update_data and update_data["price_type"] is not None:
            update_data["price_type"] = update_data["price_type"].value
        if update_data.get("email") and update_data["email"] != seller.email:
            if await self.directory.get_by_email(update_data["email"]):
                raise DuplicateSeller()

        new_name = update_data.get("name")
        if new_name and new_name != seller.name and not slug_matches_name(seller.slug, new_name):
            update_data["slug"] = await self._free_slug(new_name, seller.id)

        async with self._writing("vendedor"):
            await self.directory.update(seller, **update_data)
        return seller

    async def ensure_slug(self, seller_id: UUID) -> Seller:
        """
        Asigna slug a vendedores antiguos que no lo tienen.

        Idempotente: un vendedor que ya tiene slug no se modifica.
        """
        seller = await self.get_seller(seller_id)
        if seller.slug:
            return seller

        slug = await self._free_slug(seller.name, seller.id)
        async with self._writing("slug del vendedor"):
            await self.directory.update(seller, slug=slug)
        logger.info(f"Slug generated for seller {seller.name}: {slug}")
        return seller

    async def resolve(self, identifier: str) -> Seller:
        """Busca por slug, luego por nombre exacto y por último por id"""
        seller = await self.directory.get_by_slug(identifier)
        if not seller:
            seller = await self.directory.get_by_name(identifier)
        if not seller:
            try:
                seller = await self.directory.get_by_id(UUID(identifier))
            except ValueError:
                seller = None
        if not seller:
            raise SellerNotFound(identifier)
        if not seller.slug:
            seller = await self.ensure_slug(seller.id)
        return seller

    async def delete_seller(self, seller_id: UUID) -> None:
        """Eliminar vendedor (solo si no tiene notas de salida)"""
        seller = await self.get_seller(seller_id)
        notes_count = await NoteStore(self.db).count_by_seller(seller_id)
        if notes_count:
            raise SellerHasNotes(notes_count)

        async with self._writing("vendedor"):
            await self.directory.delete(seller)
        logger.info(f"Seller deleted: {seller.name}")

    async def slug_available(self, slug: str, seller_id: Optional[UUID] = None) -> bool:
        return not await self.directory.slug_exists(slug, exclude_id=seller_id)
