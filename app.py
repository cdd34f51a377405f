"""Dashboard Streamlit para Requisiciones — Back-office.

Captura de requisiciones con su monto en letras, listado con filtro por
estatus, aprobacion/rechazo, baja, estadisticas y descarga del reporte
Excel. Solo consume ServicioRequisiciones; no tiene logica propia de negocio.

Uso:
    streamlit run app.py
"""

from datetime import date, datetime
from pathlib import Path
from typing import List

import pandas as pd
import streamlit as st
from dotenv import load_dotenv
from loguru import logger

from config.settings import Settings
from src.bd.conector import BackofficeConnector
from src.letras import InvalidAmount, amount_to_words
from src.models import (
    EstatusRequisicion,
    Requisicion,
    RequisicionInvalida,
    RequisicionNoEncontrada,
)
from src.reports.reporte_requisiciones import reporte_requisiciones_bytes
from src.requisiciones import ServicioRequisiciones

load_dotenv(Path(__file__).resolve().parent / '.env')

# ---------------------------------------------------------------------------
# Configuracion de pagina
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Requisiciones — Back-office",
    page_icon="🏨",
    layout="wide",
    initial_sidebar_state="expanded",
)

_TIPOS = {
    'transferencia': 'Transferencia',
    'pago_tarjeta': 'Pago con tarjeta',
    'efectivo': 'Efectivo',
    'pago_linea': 'Pago en linea',
}

_COLORES_ESTATUS = {
    'pending': 'background-color: #fff3cd',     # amarillo claro
    'approved': 'background-color: #d4edda',    # verde claro
    'rejected': 'background-color: #f8d7da',    # rojo claro
    'completed': 'background-color: #cce5ff',   # azul claro
}


# ---------------------------------------------------------------------------
# Conexion a BD (cached)
# ---------------------------------------------------------------------------

@st.cache_resource
def obtener_servicio() -> ServicioRequisiciones:
    """Crea y cachea el servicio (una conexion por proceso)."""
    settings = Settings.from_env()
    return ServicioRequisiciones(BackofficeConnector(settings), settings)


def verificar_conexion() -> bool:
    """Verifica si la conexion a BD esta activa."""
    try:
        return obtener_servicio().connector.test_conexion()
    except ConnectionError as e:
        logger.warning("Sin conexion a BD: {}", e)
        return False


# ---------------------------------------------------------------------------
# UI: Sidebar
# ---------------------------------------------------------------------------

def render_sidebar():
    """Usuario actual, estado de conexion y convertidor rapido."""
    with st.sidebar:
        usuario = st.text_input("Usuario", value=st.session_state.get('usuario', ''))
        st.session_state['usuario'] = usuario.strip()

        st.divider()

        st.subheader("Base de datos")
        if verificar_conexion():
            st.success("Conectado")
        else:
            st.error("Sin conexion")
            if st.button("Reintentar conexion"):
                st.cache_resource.clear()
                st.rerun()

        st.divider()

        st.subheader("Monto en letras")
        monto = st.text_input("Monto", value='', key='monto_rapido')
        if monto:
            try:
                st.code(amount_to_words(monto, limite=obtener_servicio().settings.monto_maximo))
            except InvalidAmount as e:
                st.error(str(e))


# ---------------------------------------------------------------------------
# UI: Tab Nueva
# ---------------------------------------------------------------------------

def render_tab_nueva():
    """Formulario de alta."""
    usuario = st.session_state.get('usuario', '')
    if not usuario:
        st.info("Capture su usuario en el sidebar.")
        return

    with st.form('nueva_requisicion', clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        tipo = col1.selectbox("Tipo", list(_TIPOS), format_func=_TIPOS.get)
        monto = col2.text_input("Monto", placeholder="2500.50")
        moneda = col3.selectbox("Moneda", ['MXN', 'USD'])
        a_favor = st.text_input("A favor de")
        concepto = st.text_area("Concepto")
        fecha = st.date_input("Fecha de solicitud", value=date.today())
        enviado = st.form_submit_button("Crear requisicion")

    if not enviado:
        return

    datos = {
        'request_type': tipo,
        'amount': monto,
        'currency': moneda,
        'payable_to': a_favor,
        'concept': concepto,
        'request_date': fecha,
    }
    try:
        req = obtener_servicio().crear(datos, usuario)
    except RequisicionInvalida as e:
        for error in e.errores:
            st.error(error)
        return

    st.success(f"Requisicion {req.requisition_code} creada")
    st.code(req.amount_in_words)


# ---------------------------------------------------------------------------
# UI: Tab Listado
# ---------------------------------------------------------------------------

def _tabla_requisiciones(requisiciones: List[Requisicion]) -> pd.DataFrame:
    filas = [{
        'Id': r.id,
        'Codigo': r.requisition_code,
        'Fecha': r.request_date.strftime('%d/%m/%Y'),
        'Tipo': _TIPOS[r.request_type.value],
        'A favor de': r.payable_to,
        'Monto': float(r.amount),
        'Moneda': r.currency.value,
        'En letras': r.amount_in_words,
        'Estatus': r.status.value,
        'Solicito': r.requested_by,
    } for r in requisiciones]
    return pd.DataFrame(filas)


def render_tab_listado():
    """Listado paginado con filtro y descarga Excel."""
    servicio = obtener_servicio()

    col1, col2 = st.columns([2, 1])
    estatus = col1.selectbox(
        "Estatus", ['(todos)'] + [e.value for e in EstatusRequisicion],
    )
    pagina = col2.number_input("Pagina", min_value=1, value=1)
    filtro = None if estatus == '(todos)' else estatus

    resultado = servicio.listar(pagina=pagina, estatus=filtro)
    st.caption(
        f"Pagina {resultado.pagina} de {max(resultado.total_paginas, 1)} "
        f"— {resultado.total} requisiciones"
    )

    if not resultado.requisiciones:
        st.warning("No hay requisiciones para mostrar.")
        return

    df = _tabla_requisiciones(resultado.requisiciones)

    def _colorear_fila(row):
        return [_COLORES_ESTATUS.get(row['Estatus'], '')] * len(row)

    st.dataframe(df.style.apply(_colorear_fila, axis=1), use_container_width=True)

    st.download_button(
        "Descargar Excel",
        data=reporte_requisiciones_bytes(servicio.todas(filtro)),
        file_name=f"requisiciones_{datetime.now():%Y%m%d_%H%M%S}.xlsx",
        mime='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    )

    usuario = st.session_state.get('usuario', '')
    if usuario:
        with st.expander("Eliminar requisicion"):
            opciones = {f"{r.requisition_code} (Id={r.id})": r for r in resultado.requisiciones}
            req = opciones[st.selectbox("Requisicion a eliminar", list(opciones))]
            if st.button("Eliminar", type='secondary'):
                try:
                    servicio.eliminar(req.id, usuario)
                except RequisicionNoEncontrada as e:
                    st.error(str(e))
                    return
                st.success(f"Requisicion {req.requisition_code} eliminada")
                st.rerun()


# ---------------------------------------------------------------------------
# UI: Tab Estadisticas
# ---------------------------------------------------------------------------

def render_tab_estadisticas():
    """Panorama general: conteos y monto autorizado."""
    stats = obtener_servicio().estadisticas()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total", stats.total)
    col2.metric("Este mes", stats.este_mes)
    col3.metric("Pendientes", stats.pendientes)
    col4.metric("Aprobadas", stats.aprobadas)

    col_estatus, col_tipo = st.columns(2)
    with col_estatus:
        st.subheader("Por estatus")
        st.dataframe(
            pd.DataFrame(sorted(stats.por_estatus.items()), columns=['Estatus', 'Cantidad']),
            hide_index=True,
        )
    with col_tipo:
        st.subheader("Por tipo")
        st.dataframe(
            pd.DataFrame(
                [(_TIPOS.get(t, t), n) for t, n in sorted(stats.por_tipo.items())],
                columns=['Tipo', 'Cantidad'],
            ),
            hide_index=True,
        )

    st.subheader("Monto autorizado (aprobadas + completadas)")
    if not stats.monto_autorizado:
        st.info("Sin montos autorizados.")
    for moneda, total in sorted(stats.monto_autorizado.items()):
        st.metric(moneda, f"${total:,.2f}")


# ---------------------------------------------------------------------------
# UI: Tab Autorizar
# ---------------------------------------------------------------------------

def render_tab_autorizar():
    """Aprobacion / rechazo de pendientes."""
    usuario = st.session_state.get('usuario', '')
    if not usuario:
        st.info("Capture su usuario en el sidebar.")
        return

    servicio = obtener_servicio()
    pendientes = servicio.todas(EstatusRequisicion.PENDING)
    if not pendientes:
        st.info("No hay requisiciones pendientes.")
        return

    opciones = {f"{r.requisition_code} — {r.payable_to} (${r.amount:,.2f})": r for r in pendientes}
    req = opciones[st.selectbox("Requisicion", list(opciones))]

    datos = servicio.datos_impresion(req.id)
    st.markdown(f"**{datos['hotel']}** — {datos['titulo']} — {datos['fecha']}")
    st.write(f"Concepto: {req.concept}")
    st.code(req.amount_in_words)

    notas = st.text_input("Notas")
    col1, col2 = st.columns(2)
    aprobar = col1.button("Aprobar", type='primary')
    rechazar = col2.button("Rechazar")

    if aprobar or rechazar:
        try:
            servicio.resolver(req.id, aprobar, usuario, notas)
        except RequisicionNoEncontrada as e:
            st.error(str(e))
            return
        st.success(f"Requisicion {req.requisition_code} {'aprobada' if aprobar else 'rechazada'}")
        st.rerun()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    render_sidebar()

    tab_nueva, tab_listado, tab_autorizar, tab_estadisticas = st.tabs([
        "📝 Nueva",
        "📋 Requisiciones",
        "✅ Autorizar",
        "📊 Estadisticas",
    ])

    with tab_nueva:
        render_tab_nueva()

    with tab_listado:
        render_tab_listado()

    with tab_autorizar:
        render_tab_autorizar()

    with tab_estadisticas:
        render_tab_estadisticas()


if __name__ == '__main__':
    main()
