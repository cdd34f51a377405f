"""Modelos de datos del back-office de requisiciones.

Requisiciones de efectivo/pago, su paginacion y estadisticas.
Compatible con Python 3.9 (usa typing.List, typing.Optional).
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


# --- Enumeraciones ---

class TipoSolicitud(str, Enum):
    """Forma de pago solicitada."""
    TRANSFERENCIA = 'transferencia'
    PAGO_TARJETA = 'pago_tarjeta'
    EFECTIVO = 'efectivo'
    PAGO_LINEA = 'pago_linea'


class Moneda(str, Enum):
    """Moneda del monto solicitado."""
    MXN = 'MXN'
    USD = 'USD'


class EstatusRequisicion(str, Enum):
    """Ciclo de vida: pending -> approved/rejected -> completed."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    COMPLETED = 'completed'


# --- Excepciones del flujo ---

class RequisicionInvalida(ValueError):
    """Datos de captura rechazados por validacion."""

    def __init__(self, errores: List[str]):
        self.errores = list(errores)
        super().__init__('; '.join(self.errores))


class RequisicionNoEncontrada(LookupError):
    """No existe la requisicion (o ya fue procesada)."""


class RequisicionNoEditable(ValueError):
    """Solo se pueden editar requisiciones pendientes."""


# --- Modelos ---

@dataclass
class Requisicion:
    """Solicitud de pago con su monto en letras para impresion."""
    requisition_code: str           # REQ-YYMMDD-NNN
    request_type: TipoSolicitud
    amount: Decimal
    currency: Moneda
    amount_in_words: str            # "DOS MIL QUINIENTOS 50/100 MN"
    payable_to: str
    concept: str
    requested_by: str
    request_date: date
    department: str = 'SISTEMAS'
    status: EstatusRequisicion = EstatusRequisicion.PENDING
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    notes: str = ''

    # Asignados por la BD
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def es_editable(self) -> bool:
        """True mientras siga pendiente."""
        return self.status == EstatusRequisicion.PENDING

    def to_dict(self) -> dict:
        """Representacion plana (valores de enum como texto)."""
        return {
            'id': self.id,
            'requisition_code': self.requisition_code,
            'request_type': self.request_type.value,
            'request_date': self.request_date.isoformat(),
            'amount': f"{self.amount:.2f}",
            'currency': self.currency.value,
            'amount_in_words': self.amount_in_words,
            'payable_to': self.payable_to,
            'concept': self.concept,
            'department': self.department,
            'requested_by': self.requested_by,
            'approved_by': self.approved_by,
            'status': self.status.value,
            'approval_date': self.approval_date.isoformat() if self.approval_date else None,
            'notes': self.notes,
        }


@dataclass
class PaginaRequisiciones:
    """Una pagina del listado de requisiciones."""
    requisiciones: List[Requisicion] = field(default_factory=list)
    pagina: int = 1
    limite: int = 10
    total: int = 0

    @property
    def total_paginas(self) -> int:
        if self.limite <= 0:
            return 0
        return math.ceil(self.total / self.limite)


@dataclass
class EstadisticasRequisiciones:
    """Panorama general de requisiciones."""
    total: int = 0
    por_estatus: Dict[str, int] = field(default_factory=dict)
    por_tipo: Dict[str, int] = field(default_factory=dict)
    este_mes: int = 0
    # Aprobadas + completadas, por moneda
    monto_autorizado: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def pendientes(self) -> int:
        return self.por_estatus.get(EstatusRequisicion.PENDING.value, 0)

    @property
    def aprobadas(self) -> int:
        return self.por_estatus.get(EstatusRequisicion.APPROVED.value, 0)
