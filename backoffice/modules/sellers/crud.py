"""
Directorio de vendedores (acceso a datos)
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from uuid import UUID

from backoffice.modules.sellers.models import Seller


class SellerDirectory:
    """Consultas y escrituras de vendedores. No hace commit."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, seller_id: UUID) -> Optional[Seller]:
        return await self.db.get(Seller, seller_id)

    async def get_all(self) -> List[Seller]:
        result = await self.db.execute(select(Seller).order_by(Seller.created_at.desc(), Seller.name))
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[Seller]:
        result = await self.db.execute(select(Seller).where(Seller.slug == slug))
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[Seller]:
        """Búsqueda exacta sin distinguir mayúsculas"""
        result = await self.db.execute(
            select(Seller).where(func.lower(Seller.name) == name.strip().lower()).limit(1)
        )
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[Seller]:
        result = await self.db.execute(select(Seller).where(Seller.email == email))
        return result.scalar_one_or_none()

    async def slugs_starting_with(self, prefix: str, exclude_id: Optional[UUID] = None) -> List[str]:
        query = select(Seller.slug).where(Seller.slug.like(f"{prefix}%"))
        if exclude_id is not None:
            query = query.where(Seller.id != exclude_id)
        result = await self.db.execute(query)
        return [slug for slug in result.scalars().all() if slug]

    async def create(self, **fields) -> Seller:
        seller = Seller(**fields)
        self.db.add(seller)
        await self.db.flush()
        return seller

    async def update(self, seller: Seller, **fields) -> Seller:
        for field, value in fields.items():
            setattr(seller, field, value)
        await self.db.flush()
        return seller

    async def delete(self, seller: Seller) -> None:
        await self.db.delete(seller)
        await self.db.flush()

    async def slug_exists(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        query = select(func.count(Seller.id)).where(Seller.slug == slug)
        if exclude_id is not None:
            query = query.where(Seller.id != exclude_id)
        return bool((await self.db.execute(query)).scalar())
