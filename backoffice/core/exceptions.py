"""
Errores de negocio del back-office.

Todos heredan de HTTPException: los servicios los lanzan directamente y
FastAPI los convierte en la respuesta con el código y el detalle correctos.
"""
from fastapi import HTTPException, status


class InvalidAmount(HTTPException):
    """El monto del pago no es un número positivo"""

    def __init__(self, amount=None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Monto inválido: {amount}. Debe ser un número mayor que cero"
        )
        self.amount = amount


class NoteNotFound(HTTPException):
    def __init__(self, note_id=None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Nota de salida no encontrada"
        )
        self.note_id = note_id


class SellerNotFound(HTTPException):
    def __init__(self, seller_id=None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vendedor no encontrado"
        )
        self.seller_id = seller_id


class PaymentRecordNotFound(HTTPException):
    def __init__(self, payment_id=None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Nota de pago no encontrada"
        )
        self.payment_id = payment_id


class InvalidStatusTransition(HTTPException):
    def __init__(self, current, requested):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"No se puede pasar de '{current}' a '{requested}'"
        )
        self.current = current
        self.requested = requested


class DuplicateSeller(HTTPException):
    def __init__(self, field: str = "email"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ya existe un vendedor con este {field}"
        )
        self.field = field


class SellerHasNotes(HTTPException):
    def __init__(self, notes_count: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"El vendedor tiene {notes_count} notas de salida y no puede eliminarse"
        )
        self.notes_count = notes_count


class StoreWriteFailure(HTTPException):
    """Falla de persistencia en una escritura autoritativa. No se reintenta."""

    def __init__(self, operation: str, error: Exception = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error guardando {operation}: {str(error)}" if error else f"Error guardando {operation}"
        )
        self.operation = operation
        self.error = error


class PaymentRecordWriteFailure(Exception):
    """
    Falla al escribir la nota de pago de auditoría.

    Nunca llega al usuario: la mutación de la nota de salida ya quedó
    guardada y es la fuente autoritativa de la deuda.
    """

    def __init__(self, error: Exception):
        super().__init__(f"Error registrando nota de pago: {error}")
        self.error = error
