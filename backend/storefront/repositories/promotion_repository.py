"""
Promotion Repository - Data Access Layer for promotions and coupons

Coupon validation and discount math are database functions
(validate_coupon, calculate_discount); this repository only calls them.
"""
import logging
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from storefront.core.database import get_db_connection_dict

logger = logging.getLogger(__name__)


class PromotionRepository:
    """
    Repository for Promotion, Coupon and CouponUsage data access
    """

    def find_by_store(self, store_id: str) -> List[Dict[str, Any]]:
        """
        Promotions of a store, newest first, each with its coupons (and their
        usage), promotion_products and promotion_categories embedded.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    p.*,
                    (
                        SELECT COALESCE(jsonb_agg(
                            to_jsonb(c) || jsonb_build_object('coupon_usage', (
                                SELECT COALESCE(jsonb_agg(jsonb_build_object('id', u.id, 'order_id', u.order_id)), '[]'::jsonb)
                                FROM coupon_usage u
                                WHERE u.coupon_id = c.id
                            ))
                        ), '[]'::jsonb)
                        FROM coupons c
                        WHERE c.promotion_id = p.id
                    ) AS coupons,
                    (
                        SELECT COALESCE(jsonb_agg(to_jsonb(pp)), '[]'::jsonb)
                        FROM promotion_products pp
                        WHERE pp.promotion_id = p.id
                    ) AS promotion_products,
                    (
                        SELECT COALESCE(jsonb_agg(to_jsonb(pc)), '[]'::jsonb)
                        FROM promotion_categories pc
                        WHERE pc.promotion_id = p.id
                    ) AS promotion_categories
                FROM promotions p
                WHERE p.store_id = %s
                ORDER BY p.created_at DESC
            """, (store_id,))

            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def exists_in_store(self, promotion_id: str, store_id: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT id FROM promotions WHERE id = %s AND store_id = %s",
                (promotion_id, store_id)
            )
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def create(self, store_id: str, columns: Dict[str, Any]) -> Dict[str, Any]:
        values = dict(columns)
        values['store_id'] = store_id
        if values.get('days_of_week') is not None:
            values['days_of_week'] = Json(values['days_of_week'])

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            names = ", ".join(values.keys())
            placeholders = ", ".join(["%s"] * len(values))
            cursor.execute(f"""
                INSERT INTO promotions ({names})
                VALUES ({placeholders})
                RETURNING *
            """, list(values.values()))

            row = cursor.fetchone()
            conn.commit()
            logger.info(f"Promotion created for store {store_id}: {values.get('name')}")
            return dict(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, promotion_id: str, columns: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        values = dict(columns)
        if values.get('days_of_week') is not None:
            values['days_of_week'] = Json(values['days_of_week'])

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = ", ".join([f"{key} = %s" for key in values] + ["updated_at = NOW()"])
            cursor.execute(f"""
                UPDATE promotions
                SET {assignments}
                WHERE id = %s
                RETURNING *
            """, list(values.values()) + [promotion_id])

            row = cursor.fetchone()
            conn.commit()
            return dict(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, promotion_id: str) -> int:
        """Coupons, usage and links cascade in the database"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM promotions WHERE id = %s", (promotion_id,))
            deleted = cursor.rowcount
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def clear_links(self, promotion_id: str) -> None:
        """Remove product, category and coupon links before re-adding them"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM promotion_products WHERE promotion_id = %s", (promotion_id,))
            cursor.execute("DELETE FROM promotion_categories WHERE promotion_id = %s", (promotion_id,))
            cursor.execute("DELETE FROM coupons WHERE promotion_id = %s", (promotion_id,))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def _insert_links(self, sql: str, rows: List[tuple]) -> None:
        if not rows:
            return

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.executemany(sql, rows)
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def add_coupons(self, promotion_id: str, codes: List[str]) -> None:
        self._insert_links(
            "INSERT INTO coupons (promotion_id, code, is_active) VALUES (%s, %s, true)",
            [(promotion_id, code) for code in codes]
        )

    def add_products(self, promotion_id: str, product_ids: List[Any]) -> None:
        self._insert_links(
            "INSERT INTO promotion_products (promotion_id, product_id) VALUES (%s, %s)",
            [(promotion_id, product_id) for product_id in product_ids]
        )

    def add_categories(self, promotion_id: str, category_ids: List[Any]) -> None:
        self._insert_links(
            "INSERT INTO promotion_categories (promotion_id, category_id) VALUES (%s, %s)",
            [(promotion_id, category_id) for category_id in category_ids]
        )

    # ------------------------------------------------------------------
    # Coupons (database functions)
    # ------------------------------------------------------------------

    def validate_coupon(self, code: str, store_id: str, order_value: float) -> Optional[Dict[str, Any]]:
        """
        Call validate_coupon(p_coupon_code, p_store_id, p_order_value)

        Returns:
            First result row (is_valid, promotion_id, discount_type,
            discount_value, max_discount, message) or None when empty
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT * FROM validate_coupon(%s, %s, %s)",
                (code, store_id, order_value)
            )
            row = cursor.fetchone()
            return dict(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def calculate_discount(self, promotion_id: str, order_value: float) -> float:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT calculate_discount(%s, %s) AS discount",
                (promotion_id, order_value)
            )
            row = cursor.fetchone()
            return float(row['discount'] or 0) if row else 0.0

        finally:
            cursor.close()
            conn.close()

    def find_coupon(self, code: str, store_id: str) -> Optional[Dict[str, Any]]:
        """Coupon by code among the store's promotions"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT c.id, c.code, c.used_count, c.usage_limit, c.promotion_id
                FROM coupons c
                JOIN promotions p ON p.id = c.promotion_id
                WHERE c.code = %s AND p.store_id = %s
                LIMIT 1
            """, (code, store_id))

            row = cursor.fetchone()
            return dict(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def record_usage(
        self,
        coupon_id: str,
        order_id: Optional[str],
        user_ip: str,
        user_agent: str
    ) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO coupon_usage (coupon_id, order_id, user_ip, user_agent)
                VALUES (%s, %s, %s, %s)
            """, (coupon_id, order_id, user_ip, user_agent))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def increment_used_count(self, coupon_id: str) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE coupons
                SET used_count = COALESCE(used_count, 0) + 1
                WHERE id = %s
            """, (coupon_id,))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
