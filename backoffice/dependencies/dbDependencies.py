from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from backoffice.core.clock import Clock, get_clock
from backoffice.database.database import get_async_db

# Asynchronous database dependency
async_db_dependency = Annotated[AsyncSession, Depends(get_async_db)]

# Reloj inyectable (las pruebas lo congelan)
clock_dependency = Annotated[Clock, Depends(get_clock)]
