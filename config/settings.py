"""Configuracion central del back-office de requisiciones.

Conexion a la BD, datos del hotel para impresion y limites de captura.
Todo se carga desde variables de entorno (.env).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from src.letras import LIMITE_ABSOLUTO, LIMITE_MONTO


@dataclass
class Settings:
    """Configuracion principal del back-office."""

    # --- Base de datos ---
    db_server: str = 'localhost'
    db_database: str = 'HOTEL_BACKOFFICE'
    db_username: str = ''
    db_password: str = ''
    db_driver: str = '{ODBC Driver 17 for SQL Server}'
    db_port: int = 1433

    # --- Directorios ---
    proyecto_dir: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    reportes_dir: Path = field(default=None)

    # --- Requisiciones ---
    nombre_hotel: str = 'BEACHSCAPE KIN HA VILLAS & SUITES'
    departamento: str = 'SISTEMAS'
    monto_maximo: int = LIMITE_MONTO
    registros_por_pagina: int = 10

    # --- Logging ---
    log_level: str = 'INFO'

    def __post_init__(self):
        """Inicializa directorios derivados y valida limites."""
        if self.reportes_dir is None:
            self.reportes_dir = self.proyecto_dir / 'data' / 'reportes'
        if not 0 < self.monto_maximo <= LIMITE_ABSOLUTO:
            raise ValueError(
                f"MONTO_MAXIMO debe estar entre 1 y {LIMITE_ABSOLUTO:,} "
                f"(recibido {self.monto_maximo:,})"
            )

    @classmethod
    def from_env(cls, env_path: str = None) -> 'Settings':
        """Carga configuracion desde variables de entorno (.env)."""
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        return cls(
            db_server=os.getenv('DB_SERVER', 'localhost'),
            db_database=os.getenv('DB_DATABASE', 'HOTEL_BACKOFFICE'),
            db_username=os.getenv('DB_USERNAME', ''),
            db_password=os.getenv('DB_PASSWORD', ''),
            db_driver=os.getenv('DB_DRIVER', '{ODBC Driver 17 for SQL Server}'),
            db_port=int(os.getenv('DB_PORT', '1433')),
            nombre_hotel=os.getenv('NOMBRE_HOTEL', 'BEACHSCAPE KIN HA VILLAS & SUITES'),
            departamento=os.getenv('DEPARTAMENTO', 'SISTEMAS'),
            monto_maximo=int(os.getenv('MONTO_MAXIMO', str(LIMITE_MONTO))),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
        )
