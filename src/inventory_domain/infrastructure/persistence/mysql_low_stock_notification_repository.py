# src/inventory_domain/infrastructure/persistence/mysql_low_stock_notification_repository.py
"""MySQL implementation of the low-stock notification repository."""

import logging
from typing import Optional

from mysql.connector import Error

from src.common.exceptions.custom_exceptions import NotFoundError, PersistenceError
from src.common.result import Result
from src.common.utils.date_utils import format_datetime_for_db, parse_datetime_from_db, utc_now
from src.inventory_domain.domain.entities.low_stock_notification import LowStockNotification
from src.inventory_domain.domain.repositories.low_stock_notification_repository import (
    ILowStockNotificationRepository,
)
from src.inventory_domain.infrastructure.persistence.mysql_base import MySQLRepositoryBase, to_stock

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, ingredient_id, ingredient_name, current_stock, min_stock, notified_at, "
    "acknowledged, acknowledged_by, acknowledged_at"
)


class MySQLLowStockNotificationRepository(MySQLRepositoryBase, ILowStockNotificationRepository):

    def create_tables(self) -> None:
        create_notifications_table_query = """
        CREATE TABLE IF NOT EXISTS rms_low_stock_notifications (
            id VARCHAR(64) PRIMARY KEY,
            ingredient_id VARCHAR(64) NOT NULL,
            ingredient_name VARCHAR(255) NOT NULL,
            current_stock DECIMAL(14, 3) NOT NULL,
            min_stock DECIMAL(14, 3) NOT NULL,
            notified_at DATETIME NOT NULL,
            acknowledged TINYINT(1) NOT NULL DEFAULT 0,
            acknowledged_by VARCHAR(64),
            acknowledged_at DATETIME,
            INDEX idx_ingredient_ack (ingredient_id, acknowledged),
            INDEX idx_acknowledged (acknowledged)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        self._execute_ddl([create_notifications_table_query], "RMS low stock notification")

    @staticmethod
    def _row_to_notification(row: dict) -> LowStockNotification:
        return LowStockNotification(
            id=row["id"],
            ingredient_id=row["ingredient_id"],
            ingredient_name=row["ingredient_name"],
            current_stock=to_stock(row["current_stock"]),
            min_stock=to_stock(row["min_stock"]),
            notified_at=parse_datetime_from_db(row["notified_at"]),
            acknowledged=bool(row["acknowledged"]),
            acknowledged_by=row["acknowledged_by"],
            acknowledged_at=parse_datetime_from_db(row["acknowledged_at"]),
        )

    def _select(self, where: str, params: tuple) -> list[LowStockNotification]:
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                f"SELECT {_COLUMNS} FROM rms_low_stock_notifications WHERE {where} ORDER BY notified_at", params
            )
            rows = cursor.fetchall()
            conn.commit()
        except Error as e:
            raise PersistenceError(f"Error fetching low stock notifications: {e}", original_exception=e)
        finally:
            cursor.close()
        return [self._row_to_notification(row) for row in rows]

    def _create(self, notification: LowStockNotification) -> LowStockNotification:
        conn = self._get_connection()
        cursor = conn.cursor()
        insert_query = f"""
        INSERT INTO rms_low_stock_notifications ({_COLUMNS})
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        params = (
            notification.id,
            notification.ingredient_id,
            notification.ingredient_name,
            to_stock(notification.current_stock),
            to_stock(notification.min_stock),
            format_datetime_for_db(notification.notified_at),
            int(notification.acknowledged),
            notification.acknowledged_by,
            format_datetime_for_db(notification.acknowledged_at),
        )
        try:
            cursor.execute(insert_query, params)
            conn.commit()
        except Error as e:
            conn.rollback()
            raise PersistenceError(
                f"Error creating notification for ingredient {notification.ingredient_id}: {e}", original_exception=e
            )
        finally:
            cursor.close()
        return notification

    def _find_by_ingredient_id(self, ingredient_id: str) -> Optional[LowStockNotification]:
        found = self._select("ingredient_id = %s AND acknowledged = 0", (ingredient_id,))
        return found[0] if found else None

    def _acknowledge(self, notification_id: str, user_id: str) -> LowStockNotification:
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(
                "UPDATE rms_low_stock_notifications SET acknowledged = 1, acknowledged_by = %s, acknowledged_at = %s "
                "WHERE id = %s",
                (user_id, format_datetime_for_db(utc_now()), notification_id),
            )
            matched = cursor.rowcount
            conn.commit()
        except Error as e:
            conn.rollback()
            raise PersistenceError(f"Error acknowledging notification {notification_id}: {e}", original_exception=e)
        finally:
            cursor.close()

        if matched == 0:
            raise NotFoundError("Notification not found")
        return self._select("id = %s", (notification_id,))[0]

    async def create(self, notification: LowStockNotification) -> Result[LowStockNotification]:
        return await self._run(self._create, notification)

    async def find_unacknowledged(self) -> Result[list[LowStockNotification]]:
        return await self._run(self._select, "acknowledged = 0", ())

    async def find_by_ingredient_id(self, ingredient_id: str) -> Result[Optional[LowStockNotification]]:
        return await self._run(self._find_by_ingredient_id, ingredient_id)

    async def acknowledge(self, notification_id: str, user_id: str) -> Result[LowStockNotification]:
        return await self._run(self._acknowledge, notification_id, user_id)
