"""
Product Image Repository - gallery images attached to a product

The product's own `image` column mirrors the primary gallery image and is
kept in step inside the same transaction as every gallery change.
"""
import logging
from typing import Any, Dict, List, Optional

from storefront.core.database import get_db_connection_dict
from storefront.domain.product import ProductImage

logger = logging.getLogger(__name__)

IMAGE_UPDATE_COLUMNS = ('alt_text', 'is_primary', 'sort_order')


def _set_product_image(cursor, product_id: str, image_url: str) -> None:
    cursor.execute("UPDATE products SET image = %s WHERE id = %s", (image_url, product_id))


class ProductImageRepository:

    def find_by_product(self, product_id: str) -> List[ProductImage]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT *
                FROM product_images
                WHERE product_id = %s
                ORDER BY sort_order ASC
            """, (product_id,))

            return [ProductImage.from_row(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def add(
        self,
        product_id: str,
        image_url: str,
        alt_text: Optional[str] = None,
        is_primary: bool = False
    ) -> ProductImage:
        """
        Append an image after the existing ones

        A new primary image demotes the previous primary. The product image
        becomes the new URL when it is primary or the product's first image.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT COUNT(*) AS total, COALESCE(MAX(sort_order) + 1, 0) AS next_sort_order
                FROM product_images
                WHERE product_id = %s
            """, (product_id,))
            existing = cursor.fetchone()

            if is_primary:
                cursor.execute(
                    "UPDATE product_images SET is_primary = false WHERE product_id = %s",
                    (product_id,)
                )

            cursor.execute("""
                INSERT INTO product_images (product_id, image_url, alt_text, is_primary, sort_order)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
            """, (product_id, image_url, alt_text, is_primary, existing['next_sort_order']))
            row = cursor.fetchone()

            if is_primary or existing['total'] == 0:
                _set_product_image(cursor, product_id, image_url)

            conn.commit()
            return ProductImage.from_row(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_many(self, product_id: str, images: List[Dict[str, Any]]) -> int:
        """
        Write alt_text, is_primary and sort_order of several images

        Each entry is {"id": ..., <columns to write>}; entries without an id
        or without columns are skipped. Images of other products are never
        touched. When an entry is marked primary, the other images lose the
        flag and the product image follows it.

        Returns:
            Number of images updated
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            updated = 0
            primary_url = None

            for image in images:
                image_id = image.get('id')
                values = {key: image[key] for key in IMAGE_UPDATE_COLUMNS if key in image}
                if not image_id or not values:
                    continue

                assignments = ", ".join(f"{key} = %s" for key in values)
                cursor.execute(f"""
                    UPDATE product_images
                    SET {assignments}, updated_at = NOW()
                    WHERE id = %s AND product_id = %s
                    RETURNING image_url, is_primary
                """, list(values.values()) + [image_id, product_id])

                row = cursor.fetchone()
                if row is None:
                    continue
                updated += 1

                if values.get('is_primary'):
                    cursor.execute("""
                        UPDATE product_images
                        SET is_primary = false
                        WHERE product_id = %s AND id <> %s
                    """, (product_id, image_id))
                if row['is_primary']:
                    primary_url = row['image_url']

            if primary_url is not None:
                _set_product_image(cursor, product_id, primary_url)

            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, product_id: str, image_id) -> int:
        """
        Remove an image of the product

        Deleting the primary promotes the first remaining image (by
        sort_order) and points the product image at it, or clears the product
        image when the gallery is empty.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM product_images WHERE id = %s AND product_id = %s RETURNING is_primary",
                (image_id, product_id)
            )
            removed = cursor.fetchone()
            if removed is None:
                conn.commit()
                return 0

            if removed['is_primary']:
                cursor.execute("""
                    SELECT id, image_url
                    FROM product_images
                    WHERE product_id = %s
                    ORDER BY sort_order ASC
                    LIMIT 1
                """, (product_id,))
                successor = cursor.fetchone()

                if successor is not None:
                    cursor.execute(
                        "UPDATE product_images SET is_primary = true WHERE id = %s",
                        (successor['id'],)
                    )
                    _set_product_image(cursor, product_id, successor['image_url'])
                    logger.info(f"Image {successor['id']} is now the primary image of product {product_id}")
                else:
                    _set_product_image(cursor, product_id, "")

            conn.commit()
            return 1

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
