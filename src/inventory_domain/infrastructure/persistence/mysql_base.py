# src/inventory_domain/infrastructure/persistence/mysql_base.py
"""Shared MySQL connection handling for the inventory repositories."""

import logging
from threading import Lock
from typing import Any, Callable

import anyio
import mysql.connector
from mysql.connector import Error
from mysql.connector.constants import ClientFlag

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import ApplicationError, PersistenceError
from src.common.result import Result, err, ok

logger = logging.getLogger(__name__)

# Stock columns are DECIMAL(14, 3); values are rounded the same way before they are compared.
STOCK_DECIMALS = 3


def to_stock(value: Any) -> float:
    return round(float(value), STOCK_DECIMALS)


class MySQLRepositoryBase:
    """
    Blocking mysql-connector access, exposed to the async repositories through
    ``_run``, which moves the call off the event loop and turns raised
    ApplicationErrors into failed Results.
    """

    def __init__(self) -> None:
        """Initializes the repository."""
        self._connection = None
        # One connection per repository; worker threads take turns using it.
        self._lock = Lock()

    def _get_connection(self):
        """Establishes or returns an active MySQL database connection."""
        if not self._connection or not self._connection.is_connected():
            try:
                self._connection = mysql.connector.connect(
                    host=settings.DB_HOST,
                    database=settings.DB_DATABASE,
                    user=settings.DB_USER,
                    password=settings.DB_PASSWORD,
                    autocommit=False,  # Better control over transactions
                    charset="utf8mb4",
                    use_unicode=True,
                    client_flags=[ClientFlag.FOUND_ROWS],  # rowcount = matched rows, needed for stock CAS
                )
            except Error as e:
                raise PersistenceError(f"Failed to connect to MySQL: {e}", original_exception=e)
        return self._connection

    def _execute_ddl(self, statements: list[str], label: str) -> None:
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                for statement in statements:
                    cursor.execute(statement)
                conn.commit()
                logger.info(f"{label} table(s) checked/created.")
            except Error as e:
                conn.rollback()
                raise PersistenceError(f"Error creating {label} table(s): {e}", original_exception=e)
            finally:
                cursor.close()

    async def _run(self, func: Callable[..., Any], *args: Any) -> Result:
        def locked_call() -> Any:
            with self._lock:
                return func(*args)

        try:
            return ok(await anyio.to_thread.run_sync(locked_call))
        except ApplicationError as e:
            logger.error(str(e))
            return err(e)
        except Error as e:
            logger.error(f"Unhandled MySQL error: {e}")
            return err(PersistenceError(str(e), original_exception=e))

    def close(self) -> None:
        if self._connection and self._connection.is_connected():
            self._connection.close()
        self._connection = None

    def __del__(self) -> None:
        """Closes the database connection when the object is destroyed."""
        try:
            self.close()
        except Error:
            pass
