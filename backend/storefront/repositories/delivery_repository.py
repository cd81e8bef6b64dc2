"""
Delivery Settings Repository - one settings row per store
"""
import logging
from typing import Any, Dict, Optional

from storefront.core.database import get_db_connection_dict
from storefront.domain.delivery import DEFAULT_DELIVERY_SETTINGS, DeliverySettings

logger = logging.getLogger(__name__)


class DeliveryRepository:

    def find_by_store(self, store_id: str) -> Optional[DeliverySettings]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM delivery_settings WHERE store_id = %s", (store_id,))
            row = cursor.fetchone()
            return DeliverySettings.from_row(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create_default(self, store_id: str) -> DeliverySettings:
        """Insert DEFAULT_DELIVERY_SETTINGS for a store seen for the first time"""
        values = dict(DEFAULT_DELIVERY_SETTINGS)
        values['store_id'] = store_id

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            names = ", ".join(values.keys())
            placeholders = ", ".join(["%s"] * len(values))
            cursor.execute(f"""
                INSERT INTO delivery_settings ({names})
                VALUES ({placeholders})
                RETURNING *
            """, list(values.values()))

            row = cursor.fetchone()
            conn.commit()
            logger.info(f"Default delivery settings created for store {store_id}")
            return DeliverySettings.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def upsert(self, store_id: str, values: Dict[str, Any]) -> DeliverySettings:
        """Insert or update on the store_id unique key"""
        columns = dict(values)
        columns['store_id'] = store_id

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            names = ", ".join(columns.keys())
            placeholders = ", ".join(["%s"] * len(columns))
            updates = ", ".join(f"{key} = EXCLUDED.{key}" for key in columns if key != 'store_id')
            cursor.execute(f"""
                INSERT INTO delivery_settings ({names}, updated_at)
                VALUES ({placeholders}, NOW())
                ON CONFLICT (store_id) DO UPDATE
                SET {updates}, updated_at = NOW()
                RETURNING *
            """, list(columns.values()))

            row = cursor.fetchone()
            conn.commit()
            return DeliverySettings.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
