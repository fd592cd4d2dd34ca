"""
Proveedor de fecha/hora para los servicios.

Los servicios nunca llaman a datetime.now() directamente: reciben un Clock,
lo que permite congelar el tiempo en las pruebas.
"""
from datetime import date, datetime, timezone


class Clock:
    """Reloj del sistema (UTC)"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FrozenClock(Clock):
    """Reloj fijo para pruebas; `advance` mueve el instante actual."""

    def __init__(self, current: datetime):
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, delta) -> None:
        self.current = self.current + delta


system_clock = Clock()


def get_clock() -> Clock:
    """Dependencia FastAPI; las pruebas la reemplazan con dependency_overrides."""
    return system_clock
