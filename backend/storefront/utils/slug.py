"""
Category slugs and the owner metadata kept in category descriptions
"""
import re
import time

# Product categories keep their owner in the description column:
# "user:{user_id}|desc:{description}"
_OWNER_PREFIX = re.compile(r"^user:[^|]+\|desc:")


def slugify(name: str) -> str:
    """Lowercase, drop anything but [a-z0-9 -], spaces to dashes, collapse dashes"""
    slug = name.strip().lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip()


def unique_slug(base_slug: str) -> str:
    """Suffix a slug with the current epoch milliseconds"""
    return f"{base_slug}-{int(time.time() * 1000)}"


def encode_owner_description(user_id: str, description: str = None) -> str:
    return f"user:{user_id}|desc:{(description or '').strip()}"


def clean_description(description: str = None) -> str:
    """Strip the owner metadata prefix from a category description"""
    if not description:
        return ""
    return _OWNER_PREFIX.sub("", description)
