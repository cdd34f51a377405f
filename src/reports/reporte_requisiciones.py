"""Reporte Excel de requisiciones.

Genera un Excel con 2 hojas:
- Requisiciones: una fila por requisicion, coloreada por estatus
- Resumen: conteo y total por estatus y moneda
"""

import io
from collections import defaultdict
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Tuple

from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from src.models import EstatusRequisicion, Requisicion


# ---------------------------------------------------------------------------
# Estilos
# ---------------------------------------------------------------------------

_FILL_HEADER = PatternFill('solid', fgColor='1F4E79')

_FILL_PENDING = PatternFill('solid', fgColor='FFF2CC')     # Amarillo
_FILL_APPROVED = PatternFill('solid', fgColor='C6EFCE')    # Verde
_FILL_REJECTED = PatternFill('solid', fgColor='FFC7CE')    # Rojo
_FILL_COMPLETED = PatternFill('solid', fgColor='BDD7EE')   # Azul claro

_FONT_HEADER = Font(bold=True, color='FFFFFF', size=11)
_FONT_NORMAL = Font(size=10)
_FONT_TOTAL = Font(bold=True, size=10)

_BORDER_THIN = Border(
    left=Side(style='thin', color='BFBFBF'),
    right=Side(style='thin', color='BFBFBF'),
    top=Side(style='thin', color='BFBFBF'),
    bottom=Side(style='thin', color='BFBFBF'),
)

_ALIGN_CENTER = Alignment(horizontal='center', vertical='center')
_ALIGN_LEFT = Alignment(horizontal='left', vertical='center', wrap_text=True)

_FMT_MONEY = '#,##0.00'
_FMT_DATE = 'DD/MM/YYYY'

_ESTATUS_FILL = {
    EstatusRequisicion.PENDING: _FILL_PENDING,
    EstatusRequisicion.APPROVED: _FILL_APPROVED,
    EstatusRequisicion.REJECTED: _FILL_REJECTED,
    EstatusRequisicion.COMPLETED: _FILL_COMPLETED,
}

_ESTATUS_ETIQUETA = {
    EstatusRequisicion.PENDING: 'Pendiente',
    EstatusRequisicion.APPROVED: 'Aprobada',
    EstatusRequisicion.REJECTED: 'Rechazada',
    EstatusRequisicion.COMPLETED: 'Completada',
}

# (encabezado, ancho)
_COLUMNAS_DETALLE = [
    ('Codigo', 18),
    ('Fecha', 12),
    ('Tipo', 15),
    ('A favor de', 30),
    ('Concepto', 40),
    ('Monto', 15),
    ('Moneda', 8),
    ('Monto en letras', 60),
    ('Estatus', 12),
    ('Solicito', 18),
    ('Aprobo', 18),
    ('Notas', 30),
]


def _escribir_encabezados(ws, columnas: List[Tuple[str, int]]):
    for col, (titulo, ancho) in enumerate(columnas, start=1):
        celda = ws.cell(row=1, column=col, value=titulo)
        celda.fill = _FILL_HEADER
        celda.font = _FONT_HEADER
        celda.alignment = _ALIGN_CENTER
        celda.border = _BORDER_THIN
        ws.column_dimensions[get_column_letter(col)].width = ancho
    ws.freeze_panes = 'A2'


def _hoja_detalle(ws, requisiciones: List[Requisicion]):
    ws.title = 'Requisiciones'
    _escribir_encabezados(ws, _COLUMNAS_DETALLE)

    for fila, req in enumerate(requisiciones, start=2):
        valores = [
            req.requisition_code,
            req.request_date,
            req.request_type.value,
            req.payable_to,
            req.concept,
            float(req.amount),
            req.currency.value,
            req.amount_in_words,
            _ESTATUS_ETIQUETA[req.status],
            req.requested_by,
            req.approved_by or '',
            req.notes,
        ]
        for col, valor in enumerate(valores, start=1):
            celda = ws.cell(row=fila, column=col, value=valor)
            celda.font = _FONT_NORMAL
            celda.border = _BORDER_THIN
            celda.alignment = _ALIGN_LEFT

        ws.cell(row=fila, column=2).number_format = _FMT_DATE
        ws.cell(row=fila, column=6).number_format = _FMT_MONEY
        ws.cell(row=fila, column=9).fill = _ESTATUS_FILL[req.status]

    if requisiciones:
        ws.auto_filter.ref = f"A1:{get_column_letter(len(_COLUMNAS_DETALLE))}{len(requisiciones) + 1}"


def calcular_resumen(
    requisiciones: List[Requisicion],
) -> Dict[Tuple[EstatusRequisicion, str], Tuple[int, Decimal]]:
    """Conteo y total por (estatus, moneda)."""
    conteo: Dict[Tuple[EstatusRequisicion, str], int] = defaultdict(int)
    totales: Dict[Tuple[EstatusRequisicion, str], Decimal] = defaultdict(Decimal)
    for req in requisiciones:
        clave = (req.status, req.currency.value)
        conteo[clave] += 1
        totales[clave] += req.amount
    return {clave: (conteo[clave], totales[clave]) for clave in conteo}


def _hoja_resumen(ws, requisiciones: List[Requisicion]):
    ws.title = 'Resumen'
    _escribir_encabezados(ws, [('Estatus', 15), ('Moneda', 10), ('Cantidad', 12), ('Total', 18)])

    resumen = calcular_resumen(requisiciones)
    fila = 2
    for estatus in EstatusRequisicion:
        for moneda in sorted(m for (e, m) in resumen if e == estatus):
            cantidad, total = resumen[(estatus, moneda)]
            ws.cell(row=fila, column=1, value=_ESTATUS_ETIQUETA[estatus]).fill = _ESTATUS_FILL[estatus]
            ws.cell(row=fila, column=2, value=moneda)
            ws.cell(row=fila, column=3, value=cantidad)
            ws.cell(row=fila, column=4, value=float(total)).number_format = _FMT_MONEY
            for col in range(1, 5):
                ws.cell(row=fila, column=col).border = _BORDER_THIN
            fila += 1

    ws.cell(row=fila, column=1, value='TOTAL').font = _FONT_TOTAL
    ws.cell(row=fila, column=3, value=len(requisiciones)).font = _FONT_TOTAL


def _construir_libro(requisiciones: List[Requisicion]) -> Workbook:
    wb = Workbook()
    _hoja_detalle(wb.active, requisiciones)
    _hoja_resumen(wb.create_sheet(), requisiciones)
    return wb


def generar_reporte_requisiciones(requisiciones: List[Requisicion], ruta: Path) -> Path:
    """Escribe el Excel de requisiciones y regresa la ruta."""
    ruta = Path(ruta)
    ruta.parent.mkdir(parents=True, exist_ok=True)
    _construir_libro(requisiciones).save(ruta)

    logger.info("Reporte generado: {} ({} requisiciones)", ruta, len(requisiciones))
    return ruta


def reporte_requisiciones_bytes(requisiciones: List[Requisicion]) -> bytes:
    """Mismo reporte en memoria (descargas desde el dashboard)."""
    buffer = io.BytesIO()
    _construir_libro(requisiciones).save(buffer)
    return buffer.getvalue()
