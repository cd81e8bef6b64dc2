"""
Connections to the managed Postgres backend (Supabase)

Repositories open one psycopg2 connection per call with get_db_connection_dict().
The Supabase client is only used for Storage (product images).
"""
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor
from supabase import create_client, Client

from .config import settings

logger = logging.getLogger(__name__)


class DatabaseNotConfigured(RuntimeError):
    """DATABASE_URL or the Supabase credentials are missing"""


def _database_url() -> str:
    if not settings.DATABASE_URL:
        raise DatabaseNotConfigured("DATABASE_URL not configured")
    return settings.DATABASE_URL


# ============================================================================
# psycopg2
# ============================================================================

def get_db_connection_dict():
    """
    New connection whose cursors return rows as dicts

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM stores WHERE slug = %s", (slug,))
        store = cursor.fetchone()
    """
    return psycopg2.connect(_database_url(), cursor_factory=RealDictCursor)


def get_db_connection_dict_with_retry(max_retries=3, retry_delay=1.0):
    """
    Like get_db_connection_dict(), retrying the connect with exponential backoff

    The Supabase pooler drops idle SSL connections now and then; only the
    connect is retried, never a query.

    Raises:
        psycopg2.OperationalError: the last failure once every attempt failed
    """
    database_url = _database_url()

    attempt = 1
    while True:
        try:
            return psycopg2.connect(database_url, cursor_factory=RealDictCursor)
        except psycopg2.OperationalError as e:
            logger.warning(f"Database connect failed ({attempt}/{max_retries}): {e}")
            if attempt >= max_retries:
                logger.error("Giving up on database connection")
                raise

        delay = retry_delay * 2 ** (attempt - 1)
        logger.info(f"Reconnecting in {delay:.1f}s")
        time.sleep(delay)
        attempt += 1


# ============================================================================
# Supabase Storage
# ============================================================================

_supabase: Client = None


def get_supabase() -> Client:
    """FastAPI dependency: the shared Supabase client, created on first use"""
    global _supabase
    if _supabase is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise DatabaseNotConfigured("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase


def ping_database() -> float:
    """Round trip of `SELECT 1` in milliseconds; connection errors propagate"""
    conn = get_db_connection_dict_with_retry(max_retries=1)
    try:
        cursor = conn.cursor()
        started = time.perf_counter()
        cursor.execute("SELECT 1")
        cursor.fetchone()
        return round((time.perf_counter() - started) * 1000, 2)
    finally:
        conn.close()
