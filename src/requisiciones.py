"""Flujo de requisiciones de pago.

Alta con codigo consecutivo-aleatorio y monto en letras, edicion
mientras esta pendiente, aprobacion/rechazo, listado paginado y datos
para impresion, baja y estadisticas. Cada operacion que escribe corre en
una transaccion.
"""

import random
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from config.settings import Settings
from src.bd.requisiciones import (
    actualizar_requisicion,
    contar_requisiciones,
    eliminar_requisicion,
    estadisticas_requisiciones,
    existe_codigo,
    insertar_requisicion,
    listar_requisiciones,
    obtener_requisicion,
    resolver_requisicion,
)
from src.letras import amount_to_words
from src.models import (
    EstadisticasRequisiciones,
    EstatusRequisicion,
    Moneda,
    PaginaRequisiciones,
    Requisicion,
    RequisicionInvalida,
    RequisicionNoEditable,
    RequisicionNoEncontrada,
    TipoSolicitud,
)
from src.validacion import (
    normalizar_monto,
    parsear_fecha,
    validar_creacion,
    validar_edicion,
    validar_resolucion,
)

INTENTOS_CODIGO = 10

MESES = (
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio', 'julio',
    'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre',
)


def generar_codigo(fecha: date, rng: Optional[random.Random] = None) -> str:
    """Codigo REQ-YYMMDD-NNN (NNN aleatorio 000-999)."""
    rng = rng or random
    return f"REQ-{fecha:%y%m%d}-{rng.randint(0, 999):03d}"


def fecha_larga(fecha: date) -> str:
    """16 de octubre de 2026"""
    return f"{fecha.day} de {MESES[fecha.month - 1]} de {fecha.year}"


def _parsear_estatus(estatus: Union[None, str, EstatusRequisicion]) -> Optional[EstatusRequisicion]:
    if estatus is None or isinstance(estatus, EstatusRequisicion):
        return estatus
    try:
        return EstatusRequisicion(estatus)
    except ValueError:
        raise RequisicionInvalida([f"Estatus inválido: {estatus}"]) from None


class ServicioRequisiciones:
    """Operaciones de requisiciones sobre la BD del back-office."""

    def __init__(self, connector, settings: Optional[Settings] = None,
                 rng: Optional[random.Random] = None):
        self.connector = connector
        self.settings = settings or Settings()
        self._rng = rng or random.Random()

    # --- Escritura ---

    def _codigo_unico(self, cursor, fecha: date) -> str:
        for _ in range(INTENTOS_CODIGO):
            codigo = generar_codigo(fecha, self._rng)
            if not existe_codigo(cursor, codigo):
                return codigo
            logger.debug("Codigo {} ocupado, generando otro", codigo)
        raise RuntimeError(
            f"No se encontro codigo libre para {fecha} en {INTENTOS_CODIGO} intentos"
        )

    def crear(self, datos: Dict[str, Any], usuario: str,
              hoy: Optional[date] = None) -> Requisicion:
        """Da de alta una requisicion pendiente.

        Raises:
            RequisicionInvalida: Datos de captura rechazados (incluye montos
                que no se pueden escribir en letras).
        """
        errores = validar_creacion(datos, monto_maximo=self.settings.monto_maximo)
        if errores:
            raise RequisicionInvalida(errores)

        hoy = hoy or date.today()
        monto = normalizar_monto(datos['amount'])
        fecha = parsear_fecha(datos['request_date']) if datos.get('request_date') else hoy

        with self.connector.get_cursor(transaccion=True) as cursor:
            req = Requisicion(
                requisition_code=self._codigo_unico(cursor, hoy),
                request_type=TipoSolicitud(datos['request_type']),
                amount=monto,
                currency=Moneda(datos.get('currency') or Moneda.MXN.value),
                amount_in_words=amount_to_words(monto, limite=self.settings.monto_maximo),
                payable_to=datos['payable_to'].strip(),
                concept=datos['concept'].strip(),
                requested_by=usuario,
                request_date=fecha,
                department=self.settings.departamento,
            )
            req.id = insertar_requisicion(cursor, req)

        logger.info(
            "Requisicion {} creada por {}: {} ${:,.2f} ({})",
            req.requisition_code, usuario, req.currency.value, req.amount,
            req.amount_in_words,
        )
        return req

    def editar(self, id_requisicion: int, datos: Dict[str, Any], usuario: str) -> Requisicion:
        """Edita una requisicion pendiente; recalcula el monto en letras.

        Raises:
            RequisicionInvalida, RequisicionNoEncontrada, RequisicionNoEditable
        """
        errores = validar_edicion(datos, monto_maximo=self.settings.monto_maximo)
        if errores:
            raise RequisicionInvalida(errores)

        cambios: Dict[str, Any] = {}
        if datos.get('request_type') is not None:
            cambios['request_type'] = TipoSolicitud(datos['request_type'])
        if datos.get('amount') is not None:
            cambios['amount'] = normalizar_monto(datos['amount'])
            cambios['amount_in_words'] = amount_to_words(
                cambios['amount'], limite=self.settings.monto_maximo,
            )
        if datos.get('currency') is not None:
            cambios['currency'] = Moneda(datos['currency'])
        if datos.get('payable_to') is not None:
            cambios['payable_to'] = datos['payable_to'].strip()
        if datos.get('concept') is not None:
            cambios['concept'] = datos['concept'].strip()
        if datos.get('request_date') is not None:
            cambios['request_date'] = parsear_fecha(datos['request_date'])

        with self.connector.get_cursor(transaccion=True) as cursor:
            actual = obtener_requisicion(cursor, id_requisicion)
            if actual is None:
                raise RequisicionNoEncontrada(f"Requisición {id_requisicion} no encontrada")
            if not actual.es_editable:
                raise RequisicionNoEditable('Solo se pueden editar requisiciones pendientes')
            if not actualizar_requisicion(cursor, id_requisicion, cambios):
                raise RequisicionNoEditable('Solo se pueden editar requisiciones pendientes')
            req = obtener_requisicion(cursor, id_requisicion)

        logger.info(
            "Requisicion {} editada por {}: {}",
            req.requisition_code, usuario, ', '.join(cambios) or 'sin cambios',
        )
        return req

    def resolver(self, id_requisicion: int, aprobado: bool, usuario: str,
                 notas: str = '') -> Requisicion:
        """Aprueba (True) o rechaza (False) una requisicion pendiente.

        Raises:
            RequisicionInvalida: 'aprobado' no es booleano.
            RequisicionNoEncontrada: No existe o ya fue procesada.
        """
        errores = validar_resolucion({'approved': aprobado, 'notes': notas})
        if errores:
            raise RequisicionInvalida(errores)

        estatus = EstatusRequisicion.APPROVED if aprobado else EstatusRequisicion.REJECTED
        with self.connector.get_cursor(transaccion=True) as cursor:
            if not resolver_requisicion(cursor, id_requisicion, estatus, usuario, notas or ''):
                raise RequisicionNoEncontrada(
                    f"Requisición {id_requisicion} no encontrada o ya procesada"
                )
            return obtener_requisicion(cursor, id_requisicion)

    def eliminar(self, id_requisicion: int, usuario: str):
        """Borra una requisicion en cualquier estatus.

        Raises:
            RequisicionNoEncontrada: No existe.
        """
        with self.connector.get_cursor(transaccion=True) as cursor:
            if not eliminar_requisicion(cursor, id_requisicion):
                raise RequisicionNoEncontrada(f"Requisición {id_requisicion} no encontrada")
        logger.info("Requisicion Id={} eliminada por {}", id_requisicion, usuario)

    # --- Lectura ---

    def obtener(self, id_requisicion: int) -> Requisicion:
        with self.connector.get_cursor() as cursor:
            req = obtener_requisicion(cursor, id_requisicion)
        if req is None:
            raise RequisicionNoEncontrada(f"Requisición {id_requisicion} no encontrada")
        return req

    def listar(self, pagina: int = 1, limite: Optional[int] = None,
               estatus: Union[None, str, EstatusRequisicion] = None) -> PaginaRequisiciones:
        """Pagina de requisiciones, mas recientes primero."""
        pagina = max(1, int(pagina))
        limite = max(1, int(limite or self.settings.registros_por_pagina))
        filtro = _parsear_estatus(estatus)

        with self.connector.get_cursor() as cursor:
            requisiciones = listar_requisiciones(
                cursor, desplazamiento=(pagina - 1) * limite, limite=limite, estatus=filtro,
            )
            total = contar_requisiciones(cursor, filtro)

        return PaginaRequisiciones(
            requisiciones=requisiciones, pagina=pagina, limite=limite, total=total,
        )

    def todas(self, estatus: Union[None, str, EstatusRequisicion] = None) -> List[Requisicion]:
        """Todas las requisiciones (para reportes)."""
        with self.connector.get_cursor() as cursor:
            return listar_requisiciones(cursor, limite=None, estatus=_parsear_estatus(estatus))

    def estadisticas(self, hoy: Optional[date] = None) -> EstadisticasRequisiciones:
        """Totales generales; "este mes" cuenta altas desde el dia 1 de `hoy`."""
        hoy = hoy or date.today()
        with self.connector.get_cursor() as cursor:
            return estadisticas_requisiciones(cursor, datetime(hoy.year, hoy.month, 1))

    def datos_impresion(self, id_requisicion: int, hoy: Optional[date] = None) -> Dict[str, Any]:
        """Datos para imprimir el formato de la requisicion."""
        req = self.obtener(id_requisicion)
        return {
            'requisicion': req,
            'titulo': f"Solicitud de {req.request_type.value.upper()}",
            'hotel': self.settings.nombre_hotel,
            'fecha': fecha_larga(hoy or date.today()),
        }
