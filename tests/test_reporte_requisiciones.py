"""Tests para el reporte Excel de requisiciones."""

import io
from decimal import Decimal

from openpyxl import load_workbook

from conftest import crear_requisicion
from src.models import EstatusRequisicion, Moneda
from src.reports.reporte_requisiciones import (
    calcular_resumen,
    generar_reporte_requisiciones,
    reporte_requisiciones_bytes,
)


def _requisiciones():
    return [
        crear_requisicion(),
        crear_requisicion(id=16, requisition_code='REQ-261016-123', amount=Decimal('100.00'),
                          amount_in_words='CIEN 00/100 MN'),
        crear_requisicion(id=17, requisition_code='REQ-261017-001', amount=Decimal('50.25'),
                          currency=Moneda.USD, status=EstatusRequisicion.APPROVED,
                          approved_by='gerente', amount_in_words='CINCUENTA 25/100 MN'),
    ]


class TestResumen:

    def test_agrupa_por_estatus_y_moneda(self):
        resumen = calcular_resumen(_requisiciones())
        assert resumen[(EstatusRequisicion.PENDING, 'MXN')] == (2, Decimal('2600.50'))
        assert resumen[(EstatusRequisicion.APPROVED, 'USD')] == (1, Decimal('50.25'))
        assert len(resumen) == 2

    def test_vacio(self):
        assert calcular_resumen([]) == {}


class TestReporteExcel:

    def test_hojas_y_filas(self, tmp_path):
        ruta = generar_reporte_requisiciones(_requisiciones(), tmp_path / 'sub' / 'req.xlsx')

        assert ruta.exists()
        wb = load_workbook(ruta)
        assert wb.sheetnames == ['Requisiciones', 'Resumen']

        ws = wb['Requisiciones']
        assert ws['A1'].value == 'Codigo'
        assert ws['H1'].value == 'Monto en letras'
        assert ws.max_row == 4
        assert ws['A2'].value == 'REQ-261016-007'
        assert ws['F2'].value == 2500.50
        assert ws['H2'].value == 'DOS MIL QUINIENTOS 50/100 MN'
        assert ws['I4'].value == 'Aprobada'
        assert ws['K4'].value == 'gerente'

    def test_hoja_resumen(self, tmp_path):
        ruta = generar_reporte_requisiciones(_requisiciones(), tmp_path / 'req.xlsx')
        ws = load_workbook(ruta)['Resumen']

        filas = [tuple(c.value for c in fila) for fila in ws.iter_rows(min_row=2)]
        assert filas[0] == ('Pendiente', 'MXN', 2, 2600.50)
        assert filas[1] == ('Aprobada', 'USD', 1, 50.25)
        assert filas[2][0] == 'TOTAL'
        assert filas[2][2] == 3

    def test_reporte_vacio(self, tmp_path):
        ruta = generar_reporte_requisiciones([], tmp_path / 'vacio.xlsx')
        assert load_workbook(ruta)['Requisiciones'].max_row == 1

    def test_bytes(self):
        contenido = reporte_requisiciones_bytes(_requisiciones())
        assert contenido[:2] == b'PK'
        assert load_workbook(io.BytesIO(contenido))['Requisiciones']['A3'].value == 'REQ-261016-123'
