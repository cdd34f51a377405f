"""Tests para el SQL de la tabla Requisiciones (cursor mock)."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.bd.requisiciones import (
    COLUMNAS,
    actualizar_requisicion,
    asegurar_tabla,
    contar_requisiciones,
    existe_codigo,
    fila_a_requisicion,
    insertar_requisicion,
    listar_requisiciones,
    obtener_requisicion,
    resolver_requisicion,
    eliminar_requisicion,
    estadisticas_requisiciones,
)
from src.models import EstatusRequisicion, Moneda, TipoSolicitud
from conftest import crear_requisicion


def _fila(**cambios) -> tuple:
    """Fila en el orden de COLUMNAS, como la regresa pyodbc."""
    valores = {
        'Id': 15,
        'Codigo': 'REQ-261016-007      ',
        'TipoSolicitud': 'transferencia',
        'FechaSolicitud': date(2026, 10, 16),
        'Monto': Decimal('2500.50'),
        'Moneda': 'MXN',
        'MontoLetra': 'DOS MIL QUINIENTOS 50/100 MN',
        'PagarA': 'CFE',
        'Concepto': 'Pago de luz',
        'Departamento': 'SISTEMAS',
        'SolicitadoPor': 'jperez',
        'AprobadoPor': None,
        'Estatus': 'pending',
        'FechaAprobacion': None,
        'Notas': None,
        'FechaAlta': datetime(2026, 10, 16, 9, 30),
        'UltimoCambio': datetime(2026, 10, 16, 9, 30),
    }
    valores.update(cambios)
    return tuple(valores[c] for c in COLUMNAS)


class TestMapeo:

    def test_fila_a_requisicion(self):
        req = fila_a_requisicion(_fila())
        assert req.id == 15
        assert req.requisition_code == 'REQ-261016-007'
        assert req.request_type == TipoSolicitud.TRANSFERENCIA
        assert req.currency == Moneda.MXN
        assert req.status == EstatusRequisicion.PENDING
        assert req.amount == Decimal('2500.50')
        assert req.notes == ''

    def test_fecha_como_datetime(self):
        req = fila_a_requisicion(_fila(FechaSolicitud=datetime(2026, 10, 16, 0, 0)))
        assert req.request_date == date(2026, 10, 16)

    def test_monto_float(self):
        req = fila_a_requisicion(_fila(Monto=2500.5))
        assert req.amount == Decimal('2500.5')


class TestConsultas:

    def test_asegurar_tabla(self, cursor):
        asegurar_tabla(cursor)
        sql = cursor.execute.call_args[0][0]
        assert "OBJECT_ID('dbo.Requisiciones'" in sql
        assert 'MontoLetra' in sql

    def test_existe_codigo(self, cursor):
        cursor.fetchone.return_value = (1,)
        assert existe_codigo(cursor, 'REQ-261016-007')
        cursor.fetchone.return_value = (0,)
        assert not existe_codigo(cursor, 'REQ-261016-008')

    def test_obtener_inexistente(self, cursor):
        cursor.fetchone.return_value = None
        assert obtener_requisicion(cursor, 99) is None

    def test_obtener(self, cursor):
        cursor.fetchone.return_value = _fila()
        assert obtener_requisicion(cursor, 15).payable_to == 'CFE'
        assert cursor.execute.call_args[0][1] == (15,)

    def test_contar_con_filtro(self, cursor):
        cursor.fetchone.return_value = (7,)
        assert contar_requisiciones(cursor, EstatusRequisicion.APPROVED) == 7
        assert cursor.execute.call_args[0][1] == ('approved',)

    def test_listar_paginado(self, cursor):
        cursor.fetchall.return_value = [_fila(), _fila(Id=16)]
        reqs = listar_requisiciones(cursor, desplazamiento=20, limite=10,
                                    estatus=EstatusRequisicion.PENDING)
        sql, params = cursor.execute.call_args[0]
        assert 'WHERE Estatus = ?' in sql
        assert 'OFFSET ? ROWS FETCH NEXT ? ROWS ONLY' in sql
        assert params == ('pending', 20, 10)
        assert [r.id for r in reqs] == [15, 16]

    def test_listar_todas(self, cursor):
        cursor.fetchall.return_value = []
        listar_requisiciones(cursor, limite=None)
        sql, params = cursor.execute.call_args[0]
        assert 'OFFSET' not in sql
        assert params == ()

    def test_estadisticas(self, cursor):
        cursor.fetchall.side_effect = [
            [('pending   ', 3), ('approved  ', 2), ('completed ', 1)],
            [('transferencia', 4), ('efectivo', 2)],
            [('MXN', Decimal('1500.00')), ('USD', 99.99)],
        ]
        cursor.fetchone.return_value = (4,)

        stats = estadisticas_requisiciones(cursor, datetime(2026, 10, 1))

        assert stats.total == 6
        assert stats.pendientes == 3
        assert stats.aprobadas == 2
        assert stats.por_tipo == {'transferencia': 4, 'efectivo': 2}
        assert stats.este_mes == 4
        assert stats.monto_autorizado == {'MXN': Decimal('1500.00'), 'USD': Decimal('99.99')}

        sql_mes, params_mes = cursor.execute.call_args_list[2][0]
        assert 'FechaAlta >= ?' in sql_mes
        assert params_mes == (datetime(2026, 10, 1),)
        sql_monto, params_monto = cursor.execute.call_args_list[3][0]
        assert 'SUM(Monto)' in sql_monto
        assert params_monto == ('approved', 'completed')

    def test_estadisticas_vacias(self, cursor):
        cursor.fetchall.side_effect = [[], [], []]
        cursor.fetchone.return_value = (0,)

        stats = estadisticas_requisiciones(cursor, datetime(2026, 10, 1))
        assert stats.total == 0
        assert stats.pendientes == 0
        assert stats.monto_autorizado == {}


class TestEscritura:

    def test_insertar_regresa_id(self, cursor):
        cursor.fetchone.return_value = (42,)
        nuevo_id = insertar_requisicion(cursor, crear_requisicion(id=None))

        sql, params = cursor.execute.call_args[0]
        assert nuevo_id == 42
        assert 'OUTPUT INSERTED.Id' in sql
        assert params[0] == 'REQ-261016-007'
        assert params[1] == 'transferencia'
        assert params[5] == 'DOS MIL QUINIENTOS 50/100 MN'
        assert params[10] == 'pending'

    def test_actualizar_solo_pendientes(self, cursor):
        cursor.rowcount = 1
        ok = actualizar_requisicion(cursor, 15, {
            'amount': Decimal('3000.00'),
            'amount_in_words': 'TRES MIL 00/100 MN',
            'currency': Moneda.USD,
        })
        sql, params = cursor.execute.call_args[0]
        assert ok
        assert 'Monto = ?' in sql and 'MontoLetra = ?' in sql and 'Moneda = ?' in sql
        assert sql.rstrip().endswith('WHERE Id = ? AND Estatus = ?')
        assert params[:3] == (Decimal('3000.00'), 'TRES MIL 00/100 MN', 'USD')
        assert params[-2:] == (15, 'pending')

    def test_actualizar_no_pendiente(self, cursor):
        cursor.rowcount = 0
        assert not actualizar_requisicion(cursor, 15, {'concept': 'otro'})

    def test_actualizar_campo_no_editable(self, cursor):
        with pytest.raises(ValueError):
            actualizar_requisicion(cursor, 15, {'status': 'approved'})
        cursor.execute.assert_not_called()

    def test_actualizar_sin_cambios(self, cursor):
        assert actualizar_requisicion(cursor, 15, {})
        cursor.execute.assert_not_called()

    def test_resolver(self, cursor):
        cursor.rowcount = 1
        fecha = datetime(2026, 10, 17, 10, 0)
        assert resolver_requisicion(cursor, 15, EstatusRequisicion.APPROVED, 'gerente', 'OK', fecha)
        params = cursor.execute.call_args[0][1]
        assert params == ('approved', 'gerente', fecha, 'OK', fecha, 15, 'pending')

    def test_resolver_ya_procesada(self, cursor):
        cursor.rowcount = 0
        assert not resolver_requisicion(cursor, 15, EstatusRequisicion.REJECTED, 'gerente')

    def test_eliminar(self, cursor):
        cursor.rowcount = 1
        assert eliminar_requisicion(cursor, 15) is True
        sql, params = cursor.execute.call_args[0]
        assert sql.startswith('DELETE FROM Requisiciones')
        assert params == (15,)

    def test_eliminar_inexistente(self, cursor):
        cursor.rowcount = 0
        assert eliminar_requisicion(cursor, 999) is False
