"""
Utilidades de exportación del estado de cuenta

Movimientos del vendedor (notas recibidas como cargo, pagos aprobados como
abono) ordenados por fecha, con saldo acumulado, y su exportación a CSV.
"""

import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from fastapi import Response

from backoffice.modules.balances.schemas import Statement

STATEMENT_CSV_HEADERS = {
    "date": "Fecha",
    "type": "Tipo",
    "number": "Número",
    "description": "Descripción",
    "debit": "Cargo",
    "credit": "Abono",
    "balance": "Saldo",
}


def _as_utc(value: datetime) -> datetime:
    # SQLite devuelve fechas sin zona horaria
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def statement_movements(statement: Statement) -> List[Dict[str, Any]]:
    """
    Movimientos del estado de cuenta con saldo acumulado.

    A igual fecha el cargo va antes que el abono. El saldo final coincide
    con current_debt.
    """
    movements = []
    for note in statement.received_notes:
        movements.append((_as_utc(note.date), 0, {
            "type": "Nota de salida",
            "number": note.number,
            "description": f"{len(note.items)} líneas - {note.status.value}",
            "debit": note.total_price,
            "credit": Decimal("0"),
        }))
    for payment in statement.payments:
        movements.append((_as_utc(payment.approved_at or payment.created_at), 1, {
            "type": "Pago",
            "number": payment.number,
            "description": payment.notes or payment.method.value,
            "debit": Decimal("0"),
            "credit": payment.amount,
        }))

    rows = []
    balance = Decimal("0")
    for moment, _, row in sorted(movements, key=lambda m: (m[0], m[1])):
        balance += row["debit"] - row["credit"]
        rows.append({"date": moment.date(), **row, "balance": balance})
    return rows


def create_csv_response(data: List[Dict[str, Any]], filename: str, headers: Dict[str, str] = None) -> Response:
    """
    Respuesta CSV a partir de una lista de diccionarios.

    Args:
        data: Filas del reporte
        filename: Nombre del archivo descargado
        headers: Mapeo opcional de campo -> encabezado
    """
    output = io.StringIO()
    fieldnames = list(headers.keys()) if headers else (list(data[0].keys()) if data else [])
    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")

    if fieldnames:
        writer.writerow(dict(zip(fieldnames, headers.values() if headers else fieldnames)))
    for row in data:
        writer.writerow({key: format_csv_value(value) for key, value in row.items()})

    csv_content = output.getvalue()
    output.close()

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


def format_csv_value(value: Any) -> str:
    if value is None:
        return ""
    elif isinstance(value, bool):
        return "Sí" if value else "No"
    elif isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def statement_csv(statement: Statement) -> Response:
    slug = statement.seller.slug or str(statement.seller.id)
    filename = f"estado_cuenta_{slug}_{statement.generated_at.date().isoformat()}.csv"
    return create_csv_response(statement_movements(statement), filename, STATEMENT_CSV_HEADERS)
