"""
Routers FastAPI para Vendedores
"""

from fastapi import APIRouter, Path, Query, status
from typing import Optional
from uuid import UUID

from backoffice.dependencies.dbDependencies import async_db_dependency
from backoffice.modules.sellers.schemas import SellerCreate, SellerList, SellerOut, SellerUpdate
from backoffice.modules.sellers.service import SellerService

sellers_router = APIRouter(prefix="/sellers", tags=["Sellers"])


@sellers_router.post("/", response_model=SellerOut, status_code=status.HTTP_201_CREATED)
async def create_seller(seller_data: SellerCreate, db: async_db_dependency):
    """
    Crear nuevo vendedor.

    - **name**: Nombre del vendedor (la primera palabra genera el slug)
    - **email**: Email (opcional, debe ser único)
    - **commission**: Comisión en porcentaje (0-100)
    - **price_type**: Lista de precios (price1 | price2)
    """
    return await SellerService(db).create_seller(seller_data)


@sellers_router.get("/", response_model=SellerList)
async def get_sellers(
    db: async_db_dependency,
    active_only: bool = Query(False, description="Solo vendedores activos"),
    search: Optional[str] = Query(None, description="Buscar por nombre o email")
):
    sellers = await SellerService(db).list_sellers(active_only=active_only, search=search)
    return SellerList(sellers=[SellerOut.model_validate(s) for s in sellers], total=len(sellers))


@sellers_router.get("/by-slug/{slug}", response_model=SellerOut)
async def get_seller_by_slug(slug: str, db: async_db_dependency):
    return await SellerService(db).get_by_slug(slug)


@sellers_router.get("/resolve/{identifier}", response_model=SellerOut)
async def resolve_seller(identifier: str, db: async_db_dependency):
    """
    Buscar vendedor para la tienda pública.

    Prueba por slug, luego por nombre exacto y por último por id. Si el
    vendedor no tiene slug se le asigna uno.
    """
    return await SellerService(db).resolve(identifier)


@sellers_router.get("/slug-available/{slug}")
async def check_slug_available(
    slug: str,
    db: async_db_dependency,
    seller_id: Optional[UUID] = Query(None, description="Vendedor a excluir de la verificación")
):
    available = await SellerService(db).slug_available(slug, seller_id)
    return {"slug": slug, "available": available}


@sellers_router.get("/{seller_id}", response_model=SellerOut)
async def get_seller(db: async_db_dependency, seller_id: UUID = Path(..., description="ID del vendedor")):
    return await SellerService(db).get_seller(seller_id)


@sellers_router.patch("/{seller_id}", response_model=SellerOut)
async def update_seller(seller_id: UUID, seller_data: SellerUpdate, db: async_db_dependency):
    """
    Actualizar vendedor existente.

    Solo se actualizan los campos enviados. El slug se regenera únicamente
    cuando cambia el nombre.
    """
    return await SellerService(db).update_seller(seller_id, seller_data)


@sellers_router.post("/{seller_id}/ensure-slug", response_model=SellerOut)
async def ensure_seller_slug(seller_id: UUID, db: async_db_dependency):
    """Asignar slug a un vendedor que no lo tiene"""
    return await SellerService(db).ensure_slug(seller_id)


@sellers_router.delete("/{seller_id}")
async def delete_seller(seller_id: UUID, db: async_db_dependency):
    """
    Eliminar vendedor.

    Vendedores con notas de salida no pueden ser eliminados.
    """
    await SellerService(db).delete_seller(seller_id)
    return {"message": "Vendedor eliminado exitosamente"}
