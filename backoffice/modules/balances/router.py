"""
Routers FastAPI para Saldos y Estados de Cuenta
"""

from fastapi import APIRouter, Query
from typing import Optional
from uuid import UUID

from backoffice.dependencies.dbDependencies import async_db_dependency, clock_dependency
from backoffice.modules.balances.schemas import BalanceList, SellerBalance, Statement
from backoffice.modules.balances.service import BalanceCalculator, StatementService
from backoffice.modules.balances.utils import statement_csv

balances_router = APIRouter(prefix="/balances", tags=["Balances"])
seller_balances_router = APIRouter(prefix="/sellers", tags=["Balances"])


@balances_router.get("/", response_model=BalanceList)
async def list_balances(
    db: async_db_dependency,
    search: Optional[str] = Query(None, description="Buscar por nombre o email")
):
    """Saldo de todos los vendedores"""
    balances = await BalanceCalculator(db).list_balances(search)
    return BalanceList(balances=balances, total=len(balances))


@seller_balances_router.get("/{seller_id}/balance", response_model=SellerBalance)
async def get_seller_balance(seller_id: UUID, db: async_db_dependency):
    """
    Saldo actual del vendedor

    `current_debt` negativo significa crédito a favor del vendedor.
    """
    return await BalanceCalculator(db).compute_balance(seller_id)


@seller_balances_router.get("/{seller_id}/statement", response_model=Statement)
async def get_seller_statement(
    seller_id: UUID,
    db: async_db_dependency,
    clock: clock_dependency,
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv")
):
    """Estado de cuenta del vendedor (JSON o CSV con saldo acumulado)"""
    statement = await StatementService(db, clock).build_statement(seller_id)
    if export == "csv":
        return statement_csv(statement)
    return statement
