"""Fixtures compartidas para tests del back-office."""

import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Agregar raiz del proyecto al path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))


def crear_requisicion(**cambios):
    """Helper para crear una requisicion de prueba."""
    from src.models import EstatusRequisicion, Moneda, Requisicion, TipoSolicitud

    datos = dict(
        id=15,
        requisition_code='REQ-261016-007',
        request_type=TipoSolicitud.TRANSFERENCIA,
        amount=Decimal('2500.50'),
        currency=Moneda.MXN,
        amount_in_words='DOS MIL QUINIENTOS 50/100 MN',
        payable_to='COMISION FEDERAL DE ELECTRICIDAD',
        concept='Pago de luz octubre',
        requested_by='jperez',
        request_date=date(2026, 10, 16),
        department='SISTEMAS',
        status=EstatusRequisicion.PENDING,
        created_at=datetime(2026, 10, 16, 9, 30),
        updated_at=datetime(2026, 10, 16, 9, 30),
    )
    datos.update(cambios)
    return Requisicion(**datos)


@pytest.fixture
def settings():
    """Settings sin leer .env."""
    from config.settings import Settings

    return Settings(nombre_hotel='HOTEL DE PRUEBA', departamento='SISTEMAS')


@pytest.fixture
def cursor() -> MagicMock:
    return MagicMock()


@pytest.fixture
def connector(cursor) -> MagicMock:
    """Connector cuyo get_cursor() entrega el cursor mock (sin tragar excepciones)."""
    connector = MagicMock()
    connector.get_cursor.return_value.__enter__ = MagicMock(return_value=cursor)
    connector.get_cursor.return_value.__exit__ = MagicMock(return_value=False)
    return connector
