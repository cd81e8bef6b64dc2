"""
Order Repository - Data Access Layer for Orders and Customers

Handles all database queries for orders and the customers that place them.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from storefront.core.database import get_db_connection_dict
from storefront.domain.order import Customer, Order

logger = logging.getLogger(__name__)


class OrderRepository:
    """
    Repository for Order data access

    Returns Order / Customer domain models.
    """

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def find_customer(self, store_id: str, phone: str) -> Optional[Customer]:
        """Customers are unique per store and phone number"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM customers
                WHERE store_id = %s AND phone = %s
            """, (store_id, phone))

            row = cursor.fetchone()
            return Customer.from_row(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create_customer(
        self,
        store_id: str,
        name: str,
        phone: str,
        address: Optional[str] = None
    ) -> Customer:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO customers (store_id, name, phone, address)
                VALUES (%s, %s, %s, %s)
                RETURNING *
            """, (store_id, name, phone, address))

            row = cursor.fetchone()
            conn.commit()
            return Customer.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def create(
        self,
        store_id: str,
        customer_id: str,
        customer_name: str,
        customer_phone: str,
        customer_address: Optional[str],
        items: List[Dict[str, Any]],
        total: float,
        source: Optional[str],
        notes: str,
        status: str,
        created_at: Optional[datetime] = None
    ) -> Order:
        """
        Insert an order

        created_at is only sent for back-dated manual orders; otherwise the
        database default applies.
        """
        columns = {
            'store_id': store_id,
            'customer_id': customer_id,
            'customer_name': customer_name,
            'customer_phone': customer_phone,
            'customer_address': customer_address,
            'delivery_address': customer_address,
            'items': Json(items),
            'total': total,
            'source': source,
            'notes': notes,
            'status': status,
        }
        if created_at is not None:
            columns['created_at'] = created_at

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            names = ", ".join(columns.keys())
            placeholders = ", ".join(["%s"] * len(columns))
            cursor.execute(f"""
                INSERT INTO orders ({names})
                VALUES ({placeholders})
                RETURNING *
            """, list(columns.values()))

            row = cursor.fetchone()
            conn.commit()
            return Order.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, order_id: str) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM orders WHERE id = %s", (order_id,))
            row = cursor.fetchone()
            return Order.from_row(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_store(self, store_id: str, customer_phone: Optional[str] = None) -> List[Order]:
        """
        Orders of a store, newest first

        Args:
            store_id: Store id
            customer_phone: Restrict to one customer (order history page)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = ["store_id = %s"]
            params: List[Any] = [store_id]

            if customer_phone:
                conditions.append("customer_phone = %s")
                params.append(customer_phone)

            where_clause = " AND ".join(conditions)

            cursor.execute(f"""
                SELECT *
                FROM orders
                WHERE {where_clause}
                ORDER BY created_at DESC
            """, params)

            return [Order.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def update_status(self, order_id: str, status: str) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE orders
                SET status = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING *
            """, (status, order_id))

            row = cursor.fetchone()
            conn.commit()
            logger.info(f"Order {order_id} -> {status}")
            return Order.from_row(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
