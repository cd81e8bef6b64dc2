"""
Analytics Repository - storefront event log and dashboard aggregates
"""
from typing import Any, Dict, Optional

from storefront.core.database import get_db_connection_dict


class AnalyticsRepository:

    def insert_event(self, event: Dict[str, Any]) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            names = ", ".join(event.keys())
            placeholders = ", ".join(["%s"] * len(event))
            cursor.execute(f"""
                INSERT INTO analytics_events ({names}, created_at)
                VALUES ({placeholders}, NOW())
            """, list(event.values()))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def get_store_analytics(self, slug: str, days: int) -> Optional[Dict[str, Any]]:
        """Call get_store_analytics(p_store_slug, p_days); first row or None"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT * FROM get_store_analytics(%s, %s)", (slug, days))
            row = cursor.fetchone()
            return dict(row) if row else None

        finally:
            cursor.close()
            conn.close()
