"""Validacion de datos de captura de requisiciones.

Cada validador regresa la lista de mensajes de error para el usuario.
Lista vacia = todo OK.
"""

from datetime import date, datetime
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from loguru import logger

from src.letras import LIMITE_MONTO, InvalidAmount, a_decimal, amount_to_words
from src.models import Moneda, TipoSolicitud

_TIPOS = {t.value for t in TipoSolicitud}
_MONEDAS = {m.value for m in Moneda}


def parsear_fecha(valor: Any) -> date:
    """Acepta date, datetime o texto ISO-8601 (YYYY-MM-DD[THH:MM:SS])."""
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if isinstance(valor, str):
        return datetime.fromisoformat(valor.strip()).date()
    raise ValueError(f"Fecha no reconocida: {valor!r}")


def normalizar_monto(valor: Any) -> Decimal:
    """Monto a 2 decimales, truncando igual que el monto en letras.

    Raises:
        InvalidAmount: No numerico o demasiado grande para 2 decimales.
    """
    try:
        monto = a_decimal(valor).quantize(Decimal('0.01'), rounding=ROUND_DOWN)
    except InvalidOperation:
        raise InvalidAmount(f"Monto fuera de rango: {valor!r}") from None
    # -0.00 -> 0.00
    return monto.copy_abs() if monto.is_zero() else monto


def _texto_vacio(valor: Any) -> bool:
    return not isinstance(valor, str) or not valor.strip()


def _validar_campos(
    datos: Dict[str, Any],
    parcial: bool,
    monto_maximo: int,
) -> List[str]:
    errores = []

    def presente(campo: str) -> bool:
        return not parcial or datos.get(campo) is not None

    if presente('request_type') and datos.get('request_type') not in _TIPOS:
        errores.append('Tipo de solicitud inválido')

    if presente('amount'):
        if datos.get('amount') is None:
            errores.append('Monto es requerido')
        else:
            try:
                amount_to_words(datos['amount'], limite=monto_maximo)
            except InvalidAmount as e:
                errores.append(f"Monto inválido: {e}")

    # Moneda opcional en alta (default MXN)
    moneda = datos.get('currency')
    if moneda is not None and moneda not in _MONEDAS:
        errores.append('Moneda inválida')

    if presente('payable_to') and _texto_vacio(datos.get('payable_to')):
        errores.append('A favor de es requerido')

    if presente('concept') and _texto_vacio(datos.get('concept')):
        errores.append('Concepto es requerido')

    if datos.get('request_date') is not None:
        try:
            parsear_fecha(datos['request_date'])
        except ValueError:
            errores.append('Fecha de solicitud inválida (use YYYY-MM-DD)')

    return errores


def validar_creacion(
    datos: Dict[str, Any],
    monto_maximo: int = LIMITE_MONTO,
) -> List[str]:
    """Valida los datos para dar de alta una requisicion.

    Requeridos: request_type, amount, payable_to, concept.
    Opcionales: currency (MXN/USD), request_date (ISO-8601).
    """
    errores = _validar_campos(datos, parcial=False, monto_maximo=monto_maximo)
    if errores:
        logger.debug("Alta de requisicion rechazada: {}", errores)
    return errores


def validar_edicion(
    datos: Dict[str, Any],
    monto_maximo: int = LIMITE_MONTO,
) -> List[str]:
    """Valida una edicion: mismas reglas que el alta, todo opcional."""
    errores = _validar_campos(datos, parcial=True, monto_maximo=monto_maximo)
    if errores:
        logger.debug("Edicion de requisicion rechazada: {}", errores)
    return errores


def validar_resolucion(datos: Dict[str, Any]) -> List[str]:
    """Valida la aprobacion/rechazo: 'approved' debe ser booleano."""
    errores = []
    if not isinstance(datos.get('approved'), bool):
        errores.append('Estado de aprobación requerido')
    notas: Optional[Any] = datos.get('notes')
    if notas is not None and not isinstance(notas, str):
        errores.append('Notas deben ser texto')
    return errores
