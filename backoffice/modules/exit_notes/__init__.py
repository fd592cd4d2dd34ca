"""
Módulo de Notas de Salida

Registra la mercadería enviada en consignación a cada vendedor.

ESTADOS DE ENTREGA:
- pending: registrada en bodega
- in-transit: en camino
- delivered / received: entregada; su total cuenta como deuda del vendedor
- cancelled: anulada antes de la entrega

ESTADOS DE PAGO (derivados, solo los cambia el asignador de pagos):
- unpaid -> partial -> paid
"""

from .models import ExitNote, ExitNoteItem, ExitNoteStatus, NotePaymentStatus

__all__ = ["ExitNote", "ExitNoteItem", "ExitNoteStatus", "NotePaymentStatus"]
