"""Conector a la BD del back-office.

Wrapper sobre DatabaseConnection con la configuracion del proyecto.
"""

from typing import Optional

from config.database import DatabaseConfig, DatabaseConnection
from config.settings import Settings


class BackofficeConnector:
    """Acceso centralizado a la base de datos del back-office."""

    def __init__(self, settings: Optional[Settings] = None):
        if settings is None:
            settings = Settings.from_env()
        self.settings = settings
        self._db = DatabaseConnection(DatabaseConfig.from_settings(settings))

    @property
    def db(self) -> DatabaseConnection:
        return self._db

    def test_conexion(self) -> bool:
        """Prueba la conexion a la BD."""
        return self._db.test_conexion()

    def get_cursor(self, transaccion: bool = False):
        """Context manager para obtener un cursor (commit/rollback si transaccion)."""
        return self._db.get_cursor(transaccion=transaccion)

    def desconectar(self):
        self._db.desconectar()
