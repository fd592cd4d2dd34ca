"""
Módulo de Pagos

- PaymentAllocator: pago a una nota y pago global (nota más antigua primero)
- PaymentRecord: nota de pago; solo las aprobadas cuentan en el saldo
- PaymentRecordService: notas de pago manuales con aprobación/rechazo

La deuda autoritativa es amount_paid de cada nota de salida. La nota de
pago que deja cada pago es un registro de auditoría: si no se puede
guardar, el pago igual queda aplicado.
"""

from .models import PaymentKind, PaymentMethod, PaymentRecord, PaymentSourceType, PaymentStatus

__all__ = ["PaymentKind", "PaymentMethod", "PaymentRecord", "PaymentSourceType", "PaymentStatus"]
