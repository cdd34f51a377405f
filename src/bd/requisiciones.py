"""Operaciones sobre la tabla Requisiciones.

SQL parametrizado (pyodbc, T-SQL). Todas las funciones reciben un
cursor activo; el manejo de transaccion es del llamador.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from src.models import (
    EstadisticasRequisiciones,
    EstatusRequisicion,
    Moneda,
    Requisicion,
    TipoSolicitud,
)


COLUMNAS = (
    'Id', 'Codigo', 'TipoSolicitud', 'FechaSolicitud', 'Monto', 'Moneda',
    'MontoLetra', 'PagarA', 'Concepto', 'Departamento', 'SolicitadoPor',
    'AprobadoPor', 'Estatus', 'FechaAprobacion', 'Notas',
    'FechaAlta', 'UltimoCambio',
)

_SELECT = f"SELECT {', '.join(COLUMNAS)} FROM Requisiciones"

# Campos editables: atributo de Requisicion -> columna
_CAMPOS_EDITABLES = {
    'request_type': 'TipoSolicitud',
    'request_date': 'FechaSolicitud',
    'amount': 'Monto',
    'currency': 'Moneda',
    'amount_in_words': 'MontoLetra',
    'payable_to': 'PagarA',
    'concept': 'Concepto',
}


def asegurar_tabla(cursor):
    """Crea la tabla Requisiciones si no existe."""
    cursor.execute("""
        IF OBJECT_ID('dbo.Requisiciones', 'U') IS NULL
        BEGIN
            CREATE TABLE dbo.Requisiciones (
                Id              INT IDENTITY(1,1) PRIMARY KEY,
                Codigo          VARCHAR(20)     NOT NULL UNIQUE,
                TipoSolicitud   VARCHAR(20)     NOT NULL,
                FechaSolicitud  DATE            NOT NULL,
                Monto           DECIMAL(18, 2)  NOT NULL CHECK (Monto >= 0),
                Moneda          CHAR(3)         NOT NULL DEFAULT 'MXN',
                MontoLetra      NVARCHAR(400)   NOT NULL,
                PagarA          NVARCHAR(200)   NOT NULL,
                Concepto        NVARCHAR(1000)  NOT NULL,
                Departamento    NVARCHAR(100)   NOT NULL DEFAULT 'SISTEMAS',
                SolicitadoPor   NVARCHAR(100)   NOT NULL,
                AprobadoPor     NVARCHAR(100)   NULL,
                Estatus         VARCHAR(10)     NOT NULL DEFAULT 'pending',
                FechaAprobacion DATETIME        NULL,
                Notas           NVARCHAR(1000)  NOT NULL DEFAULT '',
                FechaAlta       DATETIME        NOT NULL DEFAULT GETDATE(),
                UltimoCambio    DATETIME        NOT NULL DEFAULT GETDATE()
            );
            CREATE INDEX IX_Requisiciones_Estatus ON dbo.Requisiciones (Estatus);
            CREATE INDEX IX_Requisiciones_SolicitadoPor ON dbo.Requisiciones (SolicitadoPor);
        END
    """)
    logger.debug("Tabla Requisiciones verificada")


def fila_a_requisicion(row: Sequence[Any]) -> Requisicion:
    """Convierte una fila (en el orden de COLUMNAS) a Requisicion."""
    r = dict(zip(COLUMNAS, row))
    fecha = r['FechaSolicitud']
    if isinstance(fecha, datetime):
        fecha = fecha.date()
    return Requisicion(
        id=r['Id'],
        requisition_code=r['Codigo'].strip(),
        request_type=TipoSolicitud(r['TipoSolicitud'].strip()),
        request_date=fecha,
        amount=Decimal(str(r['Monto'])),
        currency=Moneda(r['Moneda'].strip()),
        amount_in_words=r['MontoLetra'],
        payable_to=r['PagarA'],
        concept=r['Concepto'],
        department=r['Departamento'],
        requested_by=r['SolicitadoPor'],
        approved_by=r['AprobadoPor'],
        status=EstatusRequisicion(r['Estatus'].strip()),
        approval_date=r['FechaAprobacion'],
        notes=r['Notas'] or '',
        created_at=r['FechaAlta'],
        updated_at=r['UltimoCambio'],
    )


def existe_codigo(cursor, codigo: str) -> bool:
    """True si el codigo ya esta asignado."""
    cursor.execute("SELECT COUNT(*) FROM Requisiciones WHERE Codigo = ?", (codigo,))
    return cursor.fetchone()[0] > 0


def insertar_requisicion(cursor, req: Requisicion) -> int:
    """Inserta la requisicion y regresa el Id asignado."""
    ahora = datetime.now()
    cursor.execute("""
        INSERT INTO Requisiciones (
            Codigo, TipoSolicitud, FechaSolicitud, Monto, Moneda,
            MontoLetra, PagarA, Concepto, Departamento, SolicitadoPor,
            Estatus, Notas, FechaAlta, UltimoCambio
        )
        OUTPUT INSERTED.Id
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        req.requisition_code,
        req.request_type.value,
        req.request_date,
        req.amount,
        req.currency.value,
        req.amount_in_words,
        req.payable_to,
        req.concept,
        req.department,
        req.requested_by,
        req.status.value,
        req.notes,
        ahora,
        ahora,
    ))
    nuevo_id = cursor.fetchone()[0]

    logger.debug(
        "INSERT Requisiciones: Id={}, Codigo={}, {} ${:,.2f}",
        nuevo_id, req.requisition_code, req.currency.value, req.amount,
    )
    return nuevo_id


def obtener_requisicion(cursor, id_requisicion: int) -> Optional[Requisicion]:
    """Lee una requisicion por Id, None si no existe."""
    cursor.execute(f"{_SELECT} WHERE Id = ?", (id_requisicion,))
    row = cursor.fetchone()
    return fila_a_requisicion(row) if row else None


def contar_requisiciones(cursor, estatus: Optional[EstatusRequisicion] = None) -> int:
    """Total de requisiciones, opcionalmente filtrado por estatus."""
    if estatus is None:
        cursor.execute("SELECT COUNT(*) FROM Requisiciones")
    else:
        cursor.execute(
            "SELECT COUNT(*) FROM Requisiciones WHERE Estatus = ?", (estatus.value,),
        )
    return cursor.fetchone()[0]


def listar_requisiciones(
    cursor,
    desplazamiento: int = 0,
    limite: Optional[int] = 10,
    estatus: Optional[EstatusRequisicion] = None,
) -> List[Requisicion]:
    """Lista requisiciones, mas recientes primero.

    Args:
        desplazamiento: Filas a saltar (paginacion).
        limite: Maximo de filas; None = todas.
        estatus: Filtro opcional.
    """
    sql = _SELECT
    params: list = []
    if estatus is not None:
        sql += " WHERE Estatus = ?"
        params.append(estatus.value)
    sql += " ORDER BY FechaAlta DESC, Id DESC"
    if limite is not None:
        sql += " OFFSET ? ROWS FETCH NEXT ? ROWS ONLY"
        params.extend([desplazamiento, limite])

    cursor.execute(sql, tuple(params))
    return [fila_a_requisicion(row) for row in cursor.fetchall()]


def actualizar_requisicion(cursor, id_requisicion: int, cambios: Dict[str, Any]) -> bool:
    """Actualiza campos editables de una requisicion pendiente.

    Returns:
        False si no existe o ya no esta pendiente.
    """
    desconocidos = set(cambios) - set(_CAMPOS_EDITABLES)
    if desconocidos:
        raise ValueError(f"Campos no editables: {sorted(desconocidos)}")
    if not cambios:
        return True

    asignaciones = []
    params = []
    for campo, valor in cambios.items():
        asignaciones.append(f"{_CAMPOS_EDITABLES[campo]} = ?")
        if isinstance(valor, (TipoSolicitud, Moneda)):
            valor = valor.value
        params.append(valor)

    asignaciones.append("UltimoCambio = ?")
    params.extend([datetime.now(), id_requisicion, EstatusRequisicion.PENDING.value])

    cursor.execute(
        f"UPDATE Requisiciones SET {', '.join(asignaciones)} "
        f"WHERE Id = ? AND Estatus = ?",
        tuple(params),
    )
    actualizada = cursor.rowcount > 0
    logger.debug("UPDATE Requisiciones: Id={}, campos={}, ok={}", id_requisicion, list(cambios), actualizada)
    return actualizada


def resolver_requisicion(
    cursor,
    id_requisicion: int,
    estatus: EstatusRequisicion,
    aprobado_por: str,
    notas: str = '',
    fecha: Optional[datetime] = None,
) -> bool:
    """Aprueba o rechaza en una sola sentencia (solo si sigue pendiente).

    Returns:
        False si no existe o ya fue procesada.
    """
    fecha = fecha or datetime.now()
    cursor.execute("""
        UPDATE Requisiciones
        SET Estatus = ?, AprobadoPor = ?, FechaAprobacion = ?,
            Notas = ?, UltimoCambio = ?
        WHERE Id = ? AND Estatus = ?
    """, (
        estatus.value, aprobado_por, fecha, notas, fecha,
        id_requisicion, EstatusRequisicion.PENDING.value,
    ))
    resuelta = cursor.rowcount > 0
    if resuelta:
        logger.info("Requisicion Id={} -> {} por {}", id_requisicion, estatus.value, aprobado_por)
    return resuelta


def eliminar_requisicion(cursor, id_requisicion: int) -> bool:
    """Borra una requisicion.

    Returns:
        False si no existe.
    """
    cursor.execute("DELETE FROM Requisiciones WHERE Id = ?", (id_requisicion,))
    eliminada = cursor.rowcount > 0
    logger.debug("DELETE Requisiciones: Id={}, ok={}", id_requisicion, eliminada)
    return eliminada


def estadisticas_requisiciones(cursor, desde: datetime) -> EstadisticasRequisiciones:
    """Conteos por estatus y tipo, altas desde `desde` y monto autorizado.

    El monto autorizado suma aprobadas y completadas, separado por moneda.
    """
    cursor.execute("""
        SELECT Estatus, COUNT(*) FROM Requisiciones GROUP BY Estatus
    """)
    por_estatus = {estatus.strip(): cantidad for estatus, cantidad in cursor.fetchall()}

    cursor.execute("""
        SELECT TipoSolicitud, COUNT(*) FROM Requisiciones GROUP BY TipoSolicitud
    """)
    por_tipo = {tipo.strip(): cantidad for tipo, cantidad in cursor.fetchall()}

    cursor.execute("SELECT COUNT(*) FROM Requisiciones WHERE FechaAlta >= ?", (desde,))
    este_mes = cursor.fetchone()[0]

    cursor.execute("""
        SELECT Moneda, ISNULL(SUM(Monto), 0)
        FROM Requisiciones
        WHERE Estatus IN (?, ?)
        GROUP BY Moneda
    """, (EstatusRequisicion.APPROVED.value, EstatusRequisicion.COMPLETED.value))
    monto_autorizado = {
        moneda.strip(): Decimal(str(total)) for moneda, total in cursor.fetchall()
    }

    return EstadisticasRequisiciones(
        total=sum(por_estatus.values()),
        por_estatus=por_estatus,
        por_tipo=por_tipo,
        este_mes=este_mes,
        monto_autorizado=monto_autorizado,
    )
