"""Conexion a SQL Server para el back-office.

DatabaseConnection reutiliza una sola conexion, entrega cursores con
commit/rollback automatico y prueba varios drivers ODBC en orden.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

import pyodbc
from loguru import logger


# Drivers en orden de preferencia
DRIVERS_DISPONIBLES = [
    "ODBC Driver 18 for SQL Server",
    "ODBC Driver 17 for SQL Server",
    "SQL Server Native Client 11.0",
]


@dataclass
class DatabaseConfig:
    """Parametros de conexion a SQL Server."""
    server: str = 'localhost'
    database: str = 'HOTEL_BACKOFFICE'
    username: str = ''
    password: str = ''
    driver: str = '{ODBC Driver 17 for SQL Server}'
    port: int = 1433

    @classmethod
    def from_settings(cls, settings) -> 'DatabaseConfig':
        """Toma los campos db_* de un Settings."""
        return cls(
            server=settings.db_server,
            database=settings.db_database,
            username=settings.db_username,
            password=settings.db_password,
            driver=settings.db_driver,
            port=settings.db_port,
        )

    def get_connection_string(self, driver_override: str = None) -> str:
        """Cadena de conexion para pyodbc."""
        driver = (driver_override or self.driver).strip('{}')
        return (
            f"DRIVER={{{driver}}};"
            f"SERVER={self.server},{self.port};"
            f"DATABASE={self.database};"
            f"UID={self.username};"
            f"PWD={self.password};"
            f"TrustServerCertificate=yes;"
        )


class DatabaseConnection:
    """Administrador de la conexion a SQL Server.

    Con transaccion:
        with db.get_cursor(transaccion=True) as cursor:
            cursor.execute("INSERT ...")
        # commit al salir sin error, rollback si hay excepcion
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection: Optional[pyodbc.Connection] = None

    def _drivers_a_probar(self):
        drivers = [self.config.driver.strip('{}')]
        drivers.extend(d for d in DRIVERS_DISPONIBLES if d not in drivers)
        return drivers

    def conectar(self) -> pyodbc.Connection:
        """Devuelve la conexion viva o abre una nueva."""
        if self._connection is not None:
            try:
                self._connection.cursor().execute("SELECT 1")
                return self._connection
            except pyodbc.Error:
                logger.debug("Conexion caida, reconectando")
                self._connection = None

        last_error = None
        for driver in self._drivers_a_probar():
            try:
                conn = pyodbc.connect(
                    self.config.get_connection_string(driver), timeout=10,
                )
            except pyodbc.Error as e:
                last_error = e
                logger.debug("Driver '{}' fallo: {}", driver, e)
                continue
            # NVARCHAR para conservar acentos (MILLÓN, DIECISÉIS)
            conn.setdecoding(pyodbc.SQL_WCHAR, encoding='utf-16-le')
            self._connection = conn
            logger.info("Conectado a {} con driver '{}'", self.config.database, driver)
            return conn

        raise ConnectionError(
            f"No se pudo conectar a {self.config.server}. "
            f"Ultimo error: {last_error}"
        )

    def desconectar(self):
        """Cierra la conexion si esta abierta."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        except pyodbc.Error as e:
            logger.warning("Error al cerrar conexion: {}", e)
        self._connection = None
        logger.debug("Conexion cerrada")

    @contextmanager
    def get_cursor(self, transaccion: bool = False):
        """Context manager para obtener un cursor.

        Args:
            transaccion: Si True, desactiva autocommit y hace commit al
                salir sin error o rollback si hay excepcion.
        """
        conn = self.conectar()
        if transaccion:
            conn.autocommit = False
        cursor = conn.cursor()

        try:
            yield cursor
            if transaccion:
                conn.commit()
                logger.debug("Transaccion committed")
        except Exception:
            if transaccion:
                conn.rollback()
                logger.warning("Transaccion rolled back por excepcion")
            raise
        finally:
            cursor.close()
            if transaccion:
                conn.autocommit = True

    def test_conexion(self) -> bool:
        """Prueba la conexion y retorna True si es exitosa."""
        try:
            with self.get_cursor() as cursor:
                cursor.execute("SELECT DB_NAME() AS db, @@SERVERNAME AS server")
                row = cursor.fetchone()
        except (pyodbc.Error, ConnectionError) as e:
            logger.error("Error de conexion: {}", e)
            return False
        logger.info("Conexion OK: BD={}, Servidor={}", row.db, row.server)
        return True
