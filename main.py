"""Back-office de requisiciones — CLI.

Convierte montos a letras y administra requisiciones de pago en la BD.

Uso:
    python main.py letras 2500.50
    python main.py test-conexion
    python main.py inicializar-bd
    python main.py crear --tipo transferencia --monto 2500.50 --a-favor "CFE" --concepto "Luz" --usuario jperez
    python main.py listar --estatus pending --pagina 2
    python main.py ver 15
    python main.py editar 15 --monto 3000 --usuario jperez
    python main.py aprobar 15 --usuario gerente --notas "OK"
    python main.py rechazar 15 --usuario gerente
    python main.py imprimir 15
    python main.py eliminar 15 --usuario gerente
    python main.py estadisticas
    python main.py reporte --salida data/reportes/requisiciones.xlsx
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from src.letras import InvalidAmount
from src.models import RequisicionInvalida, RequisicionNoEditable, RequisicionNoEncontrada


def configurar_logger(nivel: str = 'INFO'):
    """Configura loguru con formato legible."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=nivel,
        format="<green>{time:HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
               "<level>{message}</level>",
    )


def _servicio():
    from config.settings import Settings
    from src.bd.conector import BackofficeConnector
    from src.requisiciones import ServicioRequisiciones

    settings = Settings.from_env()
    return ServicioRequisiciones(BackofficeConnector(settings), settings)


def _imprimir_requisicion(req):
    print(f"\n{'='*60}")
    print(f"REQUISICION {req.requisition_code} (Id={req.id})")
    print(f"{'='*60}")
    print(f"  Fecha:      {req.request_date}")
    print(f"  Tipo:       {req.request_type.value}")
    print(f"  A favor de: {req.payable_to}")
    print(f"  Concepto:   {req.concept}")
    print(f"  Monto:      ${req.amount:,.2f} {req.currency.value}")
    print(f"  En letras:  {req.amount_in_words}")
    print(f"  Estatus:    {req.status.value}")
    print(f"  Solicito:   {req.requested_by} ({req.department})")
    if req.approved_by:
        print(f"  Resolvio:   {req.approved_by} el {req.approval_date:%Y-%m-%d %H:%M}")
    if req.notes:
        print(f"  Notas:      {req.notes}")


def cmd_letras(args):
    """Muestra un monto en letras."""
    from config.settings import Settings
    from src.letras import amount_to_words

    settings = Settings.from_env()
    print(amount_to_words(args.monto, limite=settings.monto_maximo))


def cmd_test_conexion(args):
    """Prueba la conexion a la base de datos."""
    from config.settings import Settings
    from src.bd.conector import BackofficeConnector

    if BackofficeConnector(Settings.from_env()).test_conexion():
        print("Conexion exitosa.")
    else:
        print("Error de conexion.")
        sys.exit(1)


def cmd_inicializar_bd(args):
    """Crea la tabla de requisiciones si no existe."""
    from config.settings import Settings
    from src.bd.conector import BackofficeConnector
    from src.bd.requisiciones import asegurar_tabla

    connector = BackofficeConnector(Settings.from_env())
    with connector.get_cursor(transaccion=True) as cursor:
        asegurar_tabla(cursor)
    print("Tabla Requisiciones lista.")


def _datos_desde_args(args) -> dict:
    campos = {
        'request_type': args.tipo,
        'amount': args.monto,
        'currency': args.moneda,
        'payable_to': args.a_favor,
        'concept': args.concepto,
        'request_date': args.fecha,
    }
    return {k: v for k, v in campos.items() if v is not None}


def cmd_crear(args):
    req = _servicio().crear(_datos_desde_args(args), args.usuario)
    _imprimir_requisicion(req)


def cmd_editar(args):
    req = _servicio().editar(args.id, _datos_desde_args(args), args.usuario)
    _imprimir_requisicion(req)


def cmd_resolver(args):
    aprobado = args.comando == 'aprobar'
    req = _servicio().resolver(args.id, aprobado, args.usuario, args.notas)
    _imprimir_requisicion(req)


def cmd_ver(args):
    _imprimir_requisicion(_servicio().obtener(args.id))


def cmd_eliminar(args):
    _servicio().eliminar(args.id, args.usuario)
    print(f"Requisicion {args.id} eliminada.")


def cmd_estadisticas(args):
    """Muestra el panorama general de requisiciones."""
    stats = _servicio().estadisticas()

    print(f"\n{'='*60}")
    print("ESTADISTICAS DE REQUISICIONES")
    print(f"{'='*60}")
    print(f"  Total:       {stats.total}")
    print(f"  Este mes:    {stats.este_mes}")
    print(f"  Pendientes:  {stats.pendientes}")
    print(f"  Aprobadas:   {stats.aprobadas}")
    print("\n  Por estatus:")
    for estatus, cantidad in sorted(stats.por_estatus.items()):
        print(f"    {estatus:<12} {cantidad:>6}")
    print("\n  Por tipo:")
    for tipo, cantidad in sorted(stats.por_tipo.items()):
        print(f"    {tipo:<14} {cantidad:>6}")
    print("\n  Monto autorizado (aprobadas + completadas):")
    for moneda, total in sorted(stats.monto_autorizado.items()):
        print(f"    ${total:>14,.2f} {moneda}")


def cmd_listar(args):
    """Lista requisiciones paginadas."""
    pagina = _servicio().listar(args.pagina, args.limite, args.estatus)

    print(f"\n{'='*60}")
    print(f"REQUISICIONES — pagina {pagina.pagina}/{max(pagina.total_paginas, 1)} "
          f"({pagina.total} en total)")
    print(f"{'='*60}")
    for req in pagina.requisiciones:
        print(f"  {req.id:>5} {req.requisition_code} {req.request_date} "
              f"{req.status.value:<9} ${req.amount:>14,.2f} {req.currency.value} "
              f"| {req.payable_to[:30]}")


def cmd_imprimir(args):
    """Muestra el formato de impresion de una requisicion."""
    datos = _servicio().datos_impresion(args.id)
    req = datos['requisicion']

    print(f"\n{datos['hotel']}")
    print(datos['titulo'])
    print(f"Fecha: {datos['fecha']}")
    print(f"\nA favor de: {req.payable_to}")
    print(f"Cantidad:   ${req.amount:,.2f} {req.currency.value}")
    print(f"            ({req.amount_in_words})")
    print(f"Concepto:   {req.concept}")
    print(f"Departamento: {req.department}")
    print(f"\nSolicita: {req.requested_by}    Autoriza: {req.approved_by or '________'}")


def cmd_reporte(args):
    """Exporta requisiciones a Excel."""
    from src.reports.reporte_requisiciones import generar_reporte_requisiciones

    servicio = _servicio()
    salida = Path(args.salida) if args.salida else (
        servicio.settings.reportes_dir / 'requisiciones.xlsx'
    )
    ruta = generar_reporte_requisiciones(servicio.todas(args.estatus), salida)
    print(f"Reporte: {ruta}")


def _agregar_campos(sub, alta: bool):
    sub.add_argument('--tipo', required=alta,
                     choices=['transferencia', 'pago_tarjeta', 'efectivo', 'pago_linea'])
    sub.add_argument('--monto', required=alta, help='Monto (ej: 2500.50)')
    sub.add_argument('--moneda', choices=['MXN', 'USD'], default=None)
    sub.add_argument('--a-favor', dest='a_favor', required=alta, help='Beneficiario')
    sub.add_argument('--concepto', required=alta)
    sub.add_argument('--fecha', default=None, help='Fecha de solicitud (YYYY-MM-DD)')
    sub.add_argument('--usuario', required=True, help='Usuario que captura')


def main():
    """Punto de entrada principal."""
    parser = argparse.ArgumentParser(
        description='Back-office — Requisiciones de pago y montos en letras',
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Nivel de logging (default: INFO)',
    )

    subparsers = parser.add_subparsers(dest='comando', help='Comando a ejecutar')

    parser_letras = subparsers.add_parser('letras', help='Convertir un monto a letras')
    parser_letras.add_argument('monto', help='Monto (ej: 2500.50)')

    subparsers.add_parser('test-conexion', help='Probar conexion a BD')
    subparsers.add_parser('inicializar-bd', help='Crear tabla de requisiciones')

    _agregar_campos(subparsers.add_parser('crear', help='Alta de requisicion'), alta=True)

    parser_editar = subparsers.add_parser('editar', help='Editar requisicion pendiente')
    parser_editar.add_argument('id', type=int)
    _agregar_campos(parser_editar, alta=False)

    for nombre in ('aprobar', 'rechazar'):
        sub = subparsers.add_parser(nombre, help=f"{nombre.capitalize()} requisicion pendiente")
        sub.add_argument('id', type=int)
        sub.add_argument('--usuario', required=True)
        sub.add_argument('--notas', default='')

    parser_ver = subparsers.add_parser('ver', help='Ver una requisicion')
    parser_ver.add_argument('id', type=int)

    parser_imprimir = subparsers.add_parser('imprimir', help='Formato de impresion')
    parser_imprimir.add_argument('id', type=int)

    parser_eliminar = subparsers.add_parser('eliminar', help='Eliminar una requisicion')
    parser_eliminar.add_argument('id', type=int)
    parser_eliminar.add_argument('--usuario', required=True)

    subparsers.add_parser('estadisticas', help='Panorama general de requisiciones')

    parser_listar = subparsers.add_parser('listar', help='Listar requisiciones')
    parser_listar.add_argument('--pagina', type=int, default=1)
    parser_listar.add_argument('--limite', type=int, default=None)
    parser_listar.add_argument(
        '--estatus', choices=['pending', 'approved', 'rejected', 'completed'], default=None,
    )

    parser_reporte = subparsers.add_parser('reporte', help='Exportar requisiciones a Excel')
    parser_reporte.add_argument('--salida', default=None, help='Ruta del .xlsx')
    parser_reporte.add_argument(
        '--estatus', choices=['pending', 'approved', 'rejected', 'completed'], default=None,
    )

    args = parser.parse_args()
    configurar_logger(args.log_level)

    if args.comando is None:
        parser.print_help()
        sys.exit(0)

    comandos = {
        'letras': cmd_letras,
        'test-conexion': cmd_test_conexion,
        'inicializar-bd': cmd_inicializar_bd,
        'crear': cmd_crear,
        'editar': cmd_editar,
        'aprobar': cmd_resolver,
        'rechazar': cmd_resolver,
        'ver': cmd_ver,
        'listar': cmd_listar,
        'imprimir': cmd_imprimir,
        'eliminar': cmd_eliminar,
        'estadisticas': cmd_estadisticas,
        'reporte': cmd_reporte,
    }

    try:
        comandos[args.comando](args)
    except RequisicionInvalida as e:
        for error in e.errores:
            logger.error(error)
        sys.exit(1)
    except (InvalidAmount, RequisicionNoEncontrada, RequisicionNoEditable) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
