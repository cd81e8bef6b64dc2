"""
Store Attribute Repository - color and size catalogs for product variants

Rows with store_id NULL are platform defaults visible to every store.
"""
from typing import List, Optional

from storefront.core.database import get_db_connection_dict


class AttributeRepository:

    def find_for_store(self, store_id: str, attribute_type: str) -> List[dict]:
        """Store specific plus global attributes of a type, by sort_order"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM store_attributes
                WHERE attribute_type = %s
                  AND (store_id = %s OR store_id IS NULL)
                ORDER BY sort_order ASC
            """, (attribute_type, store_id))

            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, store_id: str, attribute_id) -> Optional[dict]:
        """One of the store's own attributes; globals are not returned"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT * FROM store_attributes WHERE id = %s AND store_id = %s",
                (attribute_id, store_id)
            )
            row = cursor.fetchone()
            return dict(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def exists(self, store_id: str, attribute_type: str, name: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id
                FROM store_attributes
                WHERE store_id = %s AND attribute_type = %s AND name = %s
            """, (store_id, attribute_type, name))
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        store_id: str,
        attribute_type: str,
        name: str,
        value: Optional[str],
        hex_code: Optional[str]
    ) -> dict:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT COALESCE(MAX(sort_order), 0) + 1 AS next_sort_order
                FROM store_attributes
                WHERE attribute_type = %s AND (store_id = %s OR store_id IS NULL)
            """, (attribute_type, store_id))
            next_sort_order = cursor.fetchone()['next_sort_order']

            cursor.execute("""
                INSERT INTO store_attributes (store_id, attribute_type, name, value, hex_code, sort_order)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING *
            """, (store_id, attribute_type, name, value, hex_code, next_sort_order))

            row = cursor.fetchone()
            conn.commit()
            return dict(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(
        self,
        store_id: str,
        attribute_id,
        name: str,
        value: Optional[str],
        hex_code: Optional[str]
    ) -> Optional[dict]:
        """Only the store's own attributes can change; globals are read-only"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE store_attributes
                SET name = %s, value = %s, hex_code = %s
                WHERE id = %s AND store_id = %s
                RETURNING *
            """, (name, value, hex_code, attribute_id, store_id))

            row = cursor.fetchone()
            conn.commit()
            return dict(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, store_id: str, attribute_id) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM store_attributes WHERE id = %s AND store_id = %s",
                (attribute_id, store_id)
            )
            deleted = cursor.rowcount
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
