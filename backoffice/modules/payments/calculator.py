"""
Cálculos puros de pagos: validación de montos, estado de pago por nota y
reparto de un pago global entre notas pendientes (la más antigua primero).

No accede a la base de datos; el asignador (service.py) aplica el plan.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Sequence, Tuple

from backoffice.core.exceptions import InvalidAmount
from backoffice.modules.exit_notes.models import ExitNote, NotePaymentStatus

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_amount(value) -> Decimal:
    """
    Convierte un monto de entrada a Decimal redondeado a centavos.

    Los montos se guardan como Numeric(15, 2); un monto que redondea a 0.00
    no es un pago.

    Raises:
        InvalidAmount: si no es numérico, no es finito o es <= 0 tras redondear
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(value)
    if not amount.is_finite():
        raise InvalidAmount(value)
    try:
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(value)
    if amount <= ZERO:
        raise InvalidAmount(value)
    return amount


def derive_payment_status(amount_paid: Decimal, total_price: Decimal, epsilon: Decimal) -> NotePaymentStatus:
    """paid si amount_paid >= total - epsilon; partial si hay algo pagado; si no unpaid"""
    if amount_paid >= total_price - epsilon:
        return NotePaymentStatus.PAID
    if amount_paid > ZERO:
        return NotePaymentStatus.PARTIAL
    return NotePaymentStatus.UNPAID


def is_outstanding(note: ExitNote) -> bool:
    return (note.total_price or ZERO) > (note.amount_paid or ZERO)


@dataclass
class AllocationPlan:
    """Resultado de repartir un pago global"""
    amount: Decimal
    allocations: List[Tuple[ExitNote, Decimal]] = field(default_factory=list)
    remainder: Decimal = ZERO

    @property
    def notes_paid_count(self) -> int:
        return len(self.allocations)

    @property
    def applied(self) -> Decimal:
        return sum((to_pay for _, to_pay in self.allocations), ZERO)


def plan_allocation(notes: Sequence[ExitNote], amount: Decimal, epsilon: Decimal) -> AllocationPlan:
    """
    Reparte `amount` entre `notes` en el orden recibido.

    Las notas deben llegar ordenadas de la más antigua a la más nueva. Cada
    nota recibe min(pendiente, restante); el reparto se detiene cuando el
    restante cae a `epsilon` o menos. Lo que sobra queda en `remainder`
    (crédito a favor del vendedor).
    """
    plan = AllocationPlan(amount=amount)
    remaining = amount

    for note in notes:
        if remaining <= epsilon:
            break
        pending = (note.total_price or ZERO) - (note.amount_paid or ZERO)
        to_pay = min(pending, remaining)
        if to_pay > ZERO:
            plan.allocations.append((note, to_pay))
            remaining -= to_pay

    plan.remainder = remaining
    return plan
