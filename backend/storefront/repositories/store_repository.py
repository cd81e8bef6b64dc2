"""
Store Repository - Data Access Layer for Stores

Handles all database queries for stores and returns Store domain models.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from psycopg2.extras import Json

from storefront.core.database import get_db_connection_dict
from storefront.domain.store import Store, StoreCategory, StoreLayout

logger = logging.getLogger(__name__)

STORE_CATEGORY_JSON = """
    CASE WHEN sc.id IS NULL THEN NULL ELSE json_build_object(
        'id', sc.id, 'name', sc.name, 'slug', sc.slug,
        'description', sc.description, 'icon', sc.icon, 'color', sc.color
    ) END AS category
"""


class StoreRepository:
    """
    Repository for Store data access

    All SQL queries for stores are centralized here.
    """

    def find_by_slug(self, slug: str) -> Optional[Store]:
        """
        Find store by slug, with its directory category embedded

        Returns:
            Store or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT s.*, {STORE_CATEGORY_JSON}
                FROM stores s
                LEFT JOIN store_categories sc ON sc.id = s.category_id
                WHERE s.slug = %s
            """, (slug,))

            row = cursor.fetchone()
            if not row:
                return None

            return Store.from_row(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, store_id: str) -> Optional[Store]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM stores WHERE id = %s", (store_id,))
            row = cursor.fetchone()
            return Store.from_row(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def slug_exists(self, slug: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id FROM stores WHERE slug = %s", (slug,))
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def find_by_user(self, user_id: str) -> List[Store]:
        """All stores owned by a user, newest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM stores
                WHERE user_id = %s
                ORDER BY created_at DESC
            """, (user_id,))

            return [Store.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        user_id: str,
        name: str,
        slug: str,
        logo: str,
        colors: Dict[str, Any],
        description: str
    ) -> Store:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO stores (name, slug, logo, colors, description, user_id)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING *
            """, (name, slug, logo, Json(colors), description, user_id))

            row = cursor.fetchone()
            conn.commit()
            logger.info(f"Store created: {slug} (owner {user_id})")
            return Store.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_profile(
        self,
        slug: str,
        name: str,
        description: str,
        logo: str,
        category_id: Any,
        colors: Dict[str, Any],
        social_networks: Dict[str, Any]
    ) -> Optional[Store]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE stores
                SET name = %s,
                    description = %s,
                    logo = %s,
                    category_id = %s,
                    colors = %s,
                    social_networks = %s,
                    updated_at = NOW()
                WHERE slug = %s
                RETURNING *
            """, (name, description, logo, category_id, Json(colors), Json(social_networks), slug))

            row = cursor.fetchone()
            conn.commit()
            return Store.from_row(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def get_print_settings(self, slug: str) -> Tuple[bool, Optional[dict]]:
        """
        Returns:
            (store_found, print_settings or None)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id, print_settings FROM stores WHERE slug = %s", (slug,))
            row = cursor.fetchone()
            if not row:
                return False, None
            return True, row.get('print_settings')

        finally:
            cursor.close()
            conn.close()

    def update_print_settings(self, store_id: str, print_settings: dict) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE stores
                SET print_settings = %s
                WHERE id = %s
            """, (Json(print_settings), store_id))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def list_store_categories(self) -> List[StoreCategory]:
        """Directory categories, alphabetical"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM store_categories ORDER BY name")
            return [StoreCategory.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def list_layouts(self) -> List[StoreLayout]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM store_layouts WHERE is_active = true ORDER BY id")
            return [StoreLayout.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()
