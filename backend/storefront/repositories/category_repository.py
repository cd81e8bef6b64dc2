"""
Product Category Repository - Data Access Layer for product categories

Categories are global rows shared by every store. Categories created by
merchants start at USER_CATEGORY_MIN_ID and carry their owner in the
description column.
"""
import logging
from typing import Iterable, List, Optional, Set

from storefront.core.database import get_db_connection_dict
from storefront.domain.product import ProductCategory

logger = logging.getLogger(__name__)

# Ids below this are the platform's seeded categories
USER_CATEGORY_MIN_ID = 21

DEFAULT_ICON = "package"


class CategoryRepository:
    """
    Repository for ProductCategory data access
    """

    def find_owned_by(self, user_id: str) -> List[ProductCategory]:
        """Active merchant-created categories whose metadata names the user"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM product_categories
                WHERE is_active = true
                  AND id >= %s
                  AND description LIKE %s
                ORDER BY created_at DESC
            """, (USER_CATEGORY_MIN_ID, f"%user:{user_id}%"))

            return [ProductCategory.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_active(self) -> List[ProductCategory]:
        """Every active category, by sort_order then Portuguese name"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM product_categories
                WHERE is_active = true
                ORDER BY sort_order, name_pt
            """)

            return [ProductCategory.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_active_by_ids(self, category_ids: Iterable[int]) -> List[ProductCategory]:
        ids = list(category_ids)
        if not ids:
            return []

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM product_categories
                WHERE id = ANY(%s) AND is_active = true
            """, (ids,))

            return [ProductCategory.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_active_ids(self, category_ids: Iterable[int]) -> Set[int]:
        return {category.id for category in self.find_active_by_ids(category_ids)}

    def next_sort_order(self) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT MAX(sort_order) AS max_sort_order FROM product_categories")
            row = cursor.fetchone()
            current = row['max_sort_order'] if row else None
            return current + 1 if current is not None else 1

        finally:
            cursor.close()
            conn.close()

    def slug_exists(self, slug: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id FROM product_categories WHERE slug = %s", (slug,))
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        name: str,
        slug: str,
        description: str,
        color: str,
        sort_order: int,
        name_pt: Optional[str] = None,
        icon: Optional[str] = None
    ) -> ProductCategory:
        """name_pt defaults to name and icon to the generic package icon"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO product_categories
                    (name, name_pt, slug, description, icon, color, is_active, sort_order)
                VALUES (%s, %s, %s, %s, %s, %s, true, %s)
                RETURNING *
            """, (name, name_pt or name, slug, description, icon or DEFAULT_ICON, color, sort_order))

            row = cursor.fetchone()
            conn.commit()
            logger.info(f"Product category created: {slug}")
            return ProductCategory.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, category_id: int, name: str, description: str, color: str) -> Optional[ProductCategory]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE product_categories
                SET name = %s, name_pt = %s, description = %s, color = %s
                WHERE id = %s
                RETURNING *
            """, (name, name, description, color, category_id))

            row = cursor.fetchone()
            conn.commit()
            return ProductCategory.from_row(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, category_id: int) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM product_categories WHERE id = %s", (category_id,))
            deleted = cursor.rowcount
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_sort_order(self, category_id: int, sort_order: int) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE product_categories
                SET sort_order = %s
                WHERE id = %s AND is_active = true
            """, (sort_order, category_id))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
