"""Tests para la validacion de captura de requisiciones."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.letras import InvalidAmount
from src.validacion import (
    normalizar_monto,
    parsear_fecha,
    validar_creacion,
    validar_edicion,
    validar_resolucion,
)


def _datos_validos(**cambios) -> dict:
    datos = {
        'request_type': 'transferencia',
        'amount': 2500.50,
        'currency': 'MXN',
        'payable_to': 'CFE',
        'concept': 'Pago de luz',
    }
    datos.update(cambios)
    return datos


class TestValidarCreacion:

    def test_datos_validos(self):
        assert validar_creacion(_datos_validos()) == []

    def test_moneda_opcional(self):
        datos = _datos_validos()
        del datos['currency']
        assert validar_creacion(datos) == []

    def test_tipo_invalido(self):
        assert validar_creacion(_datos_validos(request_type='cheque')) == ['Tipo de solicitud inválido']

    def test_monto_faltante(self):
        datos = _datos_validos()
        del datos['amount']
        assert validar_creacion(datos) == ['Monto es requerido']

    def test_monto_negativo_es_error_de_validacion(self):
        errores = validar_creacion(_datos_validos(amount=-10))
        assert len(errores) == 1
        assert errores[0].startswith('Monto inválido')

    def test_monto_no_numerico(self):
        errores = validar_creacion(_datos_validos(amount='mil pesos'))
        assert errores[0].startswith('Monto inválido')

    def test_monto_sobre_maximo_configurado(self):
        errores = validar_creacion(_datos_validos(amount=5000), monto_maximo=1000)
        assert errores[0].startswith('Monto inválido')

    def test_monto_enorme_es_error_de_validacion(self):
        for monto in (1e300, 10**30, '9' * 40):
            errores = validar_creacion(_datos_validos(amount=monto))
            assert len(errores) == 1
            assert errores[0].startswith('Monto inválido')

    def test_moneda_invalida(self):
        assert validar_creacion(_datos_validos(currency='EUR')) == ['Moneda inválida']

    def test_textos_vacios(self):
        errores = validar_creacion(_datos_validos(payable_to='  ', concept=''))
        assert errores == ['A favor de es requerido', 'Concepto es requerido']

    def test_fecha_iso(self):
        assert validar_creacion(_datos_validos(request_date='2026-10-16')) == []
        assert validar_creacion(_datos_validos(request_date=date(2026, 10, 16))) == []

    def test_fecha_invalida(self):
        errores = validar_creacion(_datos_validos(request_date='16/10/2026'))
        assert errores == ['Fecha de solicitud inválida (use YYYY-MM-DD)']

    def test_acumula_errores(self):
        assert len(validar_creacion({})) == 4


class TestValidarEdicion:

    def test_todo_opcional(self):
        assert validar_edicion({}) == []

    def test_solo_monto(self):
        assert validar_edicion({'amount': '3000'}) == []

    def test_monto_invalido(self):
        assert validar_edicion({'amount': -1})[0].startswith('Monto inválido')

    def test_concepto_vacio(self):
        assert validar_edicion({'concept': ''}) == ['Concepto es requerido']


class TestValidarResolucion:

    @pytest.mark.parametrize('aprobado', [True, False])
    def test_booleano(self, aprobado):
        assert validar_resolucion({'approved': aprobado}) == []

    @pytest.mark.parametrize('aprobado', [None, 'true', 1])
    def test_no_booleano(self, aprobado):
        assert validar_resolucion({'approved': aprobado}) == ['Estado de aprobación requerido']

    def test_notas_no_texto(self):
        assert validar_resolucion({'approved': True, 'notes': 5}) == ['Notas deben ser texto']


class TestUtilidades:

    def test_normalizar_monto_trunca(self):
        assert normalizar_monto(10.999) == Decimal('10.99')
        assert normalizar_monto('2500.5') == Decimal('2500.50')

    @pytest.mark.parametrize('cero', [-0.0, '-0', Decimal('-0.001')])
    def test_normalizar_cero_negativo(self, cero):
        assert str(normalizar_monto(cero)) == '0.00'

    def test_normalizar_monto_enorme(self):
        with pytest.raises(InvalidAmount):
            normalizar_monto('1' * 40)

    def test_parsear_fecha(self):
        assert parsear_fecha('2026-10-16') == date(2026, 10, 16)
        assert parsear_fecha('2026-10-16T08:00:00') == date(2026, 10, 16)
        assert parsear_fecha(datetime(2026, 10, 16, 8)) == date(2026, 10, 16)

    def test_parsear_fecha_invalida(self):
        with pytest.raises(ValueError):
            parsear_fecha(20261016)
