"""Conversion de montos a letras (convencion de pesos mexicanos).

Formato: "<MONTO EN LETRAS> NN/100 MN"
Ejemplo: 2500.50 -> "DOS MIL QUINIENTOS 50/100 MN"

Reglas de escritura:
- Grupos iguales a 100 se escriben CIEN (100, 1100 -> MIL CIEN, 100000 -> CIEN MIL).
- 21-29 son palabras fusionadas (VEINTIUNO, VEINTIDÓS, ...).
- Antes de MIL / MILLONES / BILLONES, UNO se apocopa a UN (VEINTIÚN MIL).
- 1000-1999 es MIL (no UN MIL), 1,000,000 es UN MILLÓN.
- Los centavos se truncan a 2 digitos (10.999 -> 99/100).
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

# Techo practico de una requisicion (configurable con MONTO_MAXIMO)
LIMITE_MONTO = 10 ** 9

# Techo de la gramatica: mil billones
LIMITE_ABSOLUTO = 10 ** 15

SUFIJO_MONEDA = 'MN'

UNIDADES = ('', 'UNO', 'DOS', 'TRES', 'CUATRO', 'CINCO', 'SEIS', 'SIETE', 'OCHO', 'NUEVE')

ESPECIALES = (
    'DIEZ', 'ONCE', 'DOCE', 'TRECE', 'CATORCE', 'QUINCE',
    'DIECISÉIS', 'DIECISIETE', 'DIECIOCHO', 'DIECINUEVE',
)

VEINTES = (
    'VEINTE', 'VEINTIUNO', 'VEINTIDÓS', 'VEINTITRÉS', 'VEINTICUATRO',
    'VEINTICINCO', 'VEINTISÉIS', 'VEINTISIETE', 'VEINTIOCHO', 'VEINTINUEVE',
)

# Indices 0-2 no se usan: 10-29 salen de ESPECIALES y VEINTES
DECENAS = (
    '', '', '', 'TREINTA', 'CUARENTA', 'CINCUENTA',
    'SESENTA', 'SETENTA', 'OCHENTA', 'NOVENTA',
)

CENTENAS = (
    '', 'CIENTO', 'DOSCIENTOS', 'TRESCIENTOS', 'CUATROCIENTOS', 'QUINIENTOS',
    'SEISCIENTOS', 'SETECIENTOS', 'OCHOCIENTOS', 'NOVECIENTOS',
)

# (divisor, singular, plural), de mayor a menor
ESCALAS = (
    (10 ** 12, 'BILLÓN', 'BILLONES'),
    (10 ** 6, 'MILLÓN', 'MILLONES'),
)

_APOCOPE = {
    'UNO': 'UN',
    'VEINTIUNO': 'VEINTIÚN',
}


class InvalidAmount(ValueError):
    """El monto no se puede escribir en letras.

    Negativo, no finito, no numerico o mayor al limite configurado.
    """


def decenas_a_letras(n: int) -> str:
    """Escribe un numero de 1 a 99."""
    if n < 10:
        return UNIDADES[n]
    if n < 20:
        return ESPECIALES[n - 10]
    if n < 30:
        return VEINTES[n - 20]

    decena, unidad = divmod(n, 10)
    if unidad == 0:
        return DECENAS[decena]
    return f"{DECENAS[decena]} Y {UNIDADES[unidad]}"


def centenas_a_letras(n: int) -> str:
    """Escribe un numero de 1 a 999."""
    if n == 100:
        return 'CIEN'

    centena, resto = divmod(n, 100)
    partes = []
    if centena:
        partes.append(CENTENAS[centena])
    if resto:
        partes.append(decenas_a_letras(resto))
    return ' '.join(partes)


def _apocopar(letras: str) -> str:
    """UNO -> UN en la ultima palabra (para multiplicar MIL, MILLONES...)."""
    previas, _, ultima = letras.rpartition(' ')
    ultima = _APOCOPE.get(ultima, ultima)
    return f"{previas} {ultima}" if previas else ultima


def _miles_a_letras(n: int) -> str:
    """Escribe un numero de 1 a 999,999."""
    miles, resto = divmod(n, 1000)
    partes = []
    if miles == 1:
        partes.append('MIL')
    elif miles:
        partes.append(f"{_apocopar(centenas_a_letras(miles))} MIL")
    if resto:
        partes.append(centenas_a_letras(resto))
    return ' '.join(partes)


def entero_a_letras(n: int) -> str:
    """Escribe un entero positivo, recursivo por escala (billones, millones)."""
    for divisor, singular, plural in ESCALAS:
        if n >= divisor:
            cociente, resto = divmod(n, divisor)
            if cociente == 1:
                cabeza = f"UN {singular}"
            else:
                cabeza = f"{_apocopar(entero_a_letras(cociente))} {plural}"
            if resto:
                return f"{cabeza} {entero_a_letras(resto)}"
            return cabeza
    return _miles_a_letras(n)


def a_decimal(amount) -> Decimal:
    """Normaliza la entrada a Decimal finito.

    Los float se leen via str() para no arrastrar el error binario
    (2500.50 -> Decimal('2500.5')).
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, str, Decimal)):
        raise InvalidAmount(f"Monto no numerico: {amount!r}")

    if isinstance(amount, Decimal):
        monto = amount
    else:
        try:
            monto = Decimal(str(amount).strip())
        except InvalidOperation:
            raise InvalidAmount(f"Monto no numerico: {amount!r}") from None

    if not monto.is_finite():
        raise InvalidAmount(f"Monto no finito: {amount!r}")
    return monto


def amount_to_words(amount, limite: int = LIMITE_MONTO, redondeo: str = ROUND_DOWN) -> str:
    """Convierte un monto a su representacion en letras.

    Args:
        amount: int, float, Decimal o str numerico, no negativo.
        limite: Monto maximo exclusivo (default 10^9, maximo 10^15).
        redondeo: Modo de redondeo de centavos (default truncar).

    Returns:
        Ej: 11236.83 -> "ONCE MIL DOSCIENTOS TREINTA Y SEIS 83/100 MN"

    Raises:
        InvalidAmount: Monto negativo, no finito, no numerico o >= limite.
        ValueError: limite fuera de la gramatica (> 10^15).
    """
    if limite > LIMITE_ABSOLUTO:
        raise ValueError(
            f"Limite {limite:,} excede la escala soportada ({LIMITE_ABSOLUTO:,})"
        )

    monto = a_decimal(amount)
    if monto < 0:
        raise InvalidAmount(f"Monto negativo: {monto}")

    # Con montos enormes quantize desborda la precision del contexto
    if monto >= limite:
        raise InvalidAmount(f"Monto {monto:,} excede el limite de {limite:,}")

    monto = monto.quantize(Decimal('0.01'), rounding=redondeo)
    if monto >= limite:
        raise InvalidAmount(f"Monto {monto:,} excede el limite de {limite:,}")

    entero = int(monto)
    centavos = int((monto - entero) * 100)

    letras = 'CERO' if entero == 0 else entero_a_letras(entero)
    return f"{letras} {centavos:02d}/100 {SUFIJO_MONEDA}"
