"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from psycopg2.extras import Json

from storefront.core.database import get_db_connection_dict
from storefront.domain.product import Product

logger = logging.getLogger(__name__)

# Columns a merchant may write; anything else in the payload is ignored
WRITABLE_COLUMNS = (
    'name', 'description', 'price', 'image', 'category_id', 'available',
    'display_order', 'stock', 'colors', 'sizes', 'attributes',
)


def _writable(columns: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known columns and adapt dict/list values for jsonb"""
    values = {}
    for key, value in columns.items():
        if key not in WRITABLE_COLUMNS:
            logger.debug(f"Ignoring unknown product column: {key}")
            continue
        values[key] = Json(value) if isinstance(value, (dict, list)) else value
    return values


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    def find_by_store(self, store_id: str) -> List[Product]:
        """
        Products of a store, newest first, with their category embedded

        Returns:
            List of products (category is a dict or None)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    p.*,
                    CASE WHEN pc.id IS NULL THEN NULL ELSE json_build_object(
                        'id', pc.id, 'name', pc.name,
                        'description', pc.description, 'color', pc.color
                    ) END AS category
                FROM products p
                LEFT JOIN product_categories pc ON pc.id = p.category_id
                WHERE p.store_id = %s
                ORDER BY p.created_at DESC
            """, (store_id,))

            return [Product.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_available(self, store_id: str) -> List[Product]:
        """Products customers can order, alphabetical"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM products
                WHERE store_id = %s AND available = true
                ORDER BY name
            """, (store_id,))

            return [Product.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, product_id: str) -> Optional[Product]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM products WHERE id = %s", (product_id,))
            row = cursor.fetchone()
            return Product.from_row(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, store_id: str, columns: Dict[str, Any]) -> Product:
        """
        Insert a single product

        Raises:
            psycopg2.errors.UniqueViolation: duplicate name in the store
            psycopg2.errors.ForeignKeyViolation: unknown category
        """
        values = _writable(columns)
        values['store_id'] = store_id

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            names = ", ".join(values.keys())
            placeholders = ", ".join(["%s"] * len(values))
            cursor.execute(f"""
                INSERT INTO products ({names})
                VALUES ({placeholders})
                RETURNING *
            """, list(values.values()))

            row = cursor.fetchone()
            conn.commit()
            return Product.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, store_id: str, product_id: str, columns: Dict[str, Any]) -> Optional[Product]:
        """Update a product scoped to its store; None when it is not in the store"""
        values = _writable(columns)
        if not values:
            product = self.find_by_id(product_id)
            return product if product and product.store_id == store_id else None

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = ", ".join(f"{key} = %s" for key in values)
            cursor.execute(f"""
                UPDATE products
                SET {assignments}
                WHERE id = %s AND store_id = %s
                RETURNING *
            """, list(values.values()) + [product_id, store_id])

            row = cursor.fetchone()
            conn.commit()
            return Product.from_row(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, store_id: str, product_id: str) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM products WHERE id = %s AND store_id = %s",
                (product_id, store_id)
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

    def find_ids_in_store(self, store_id: str, product_ids: Iterable[str]) -> Set[str]:
        """Subset of product_ids that belong to the store"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id
                FROM products
                WHERE store_id = %s AND id = ANY(%s)
            """, (store_id, list(product_ids)))

            return {str(row['id']) for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    def update_display_order(self, store_id: str, product_id: str, display_order: int) -> None:
        """One product per call; reorder sequences are not atomic"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE products
                SET display_order = %s
                WHERE id = %s AND store_id = %s
            """, (display_order, product_id, store_id))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def replace_all(self, store_id: str, products: List[Dict[str, Any]]) -> int:
        """
        Delete every product of the store and insert the given list

        Both statements share one transaction, so a failed insert leaves the
        previous catalog in place.

        Returns:
            Number of products inserted
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE store_id = %s", (store_id,))
            removed = cursor.rowcount

            for product in products:
                values = _writable(product)
                values['store_id'] = store_id
                names = ", ".join(values.keys())
                placeholders = ", ".join(["%s"] * len(values))
                cursor.execute(
                    f"INSERT INTO products ({names}) VALUES ({placeholders})",
                    list(values.values())
                )

            conn.commit()
            logger.info(f"Store {store_id}: replaced {removed} products with {len(products)}")
            return len(products)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_used_category_ids(self, store_id: str) -> List[int]:
        """Categories referenced by the store's products"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT DISTINCT category_id
                FROM products
                WHERE store_id = %s AND category_id IS NOT NULL
            """, (store_id,))

            return [row['category_id'] for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def count_by_category(self, store_id: str, category_id: int) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT COUNT(*) AS total
                FROM products
                WHERE store_id = %s AND category_id = %s
            """, (store_id, category_id))

            return cursor.fetchone()['total']

        finally:
            cursor.close()
            conn.close()
