"""
Category Service - product categories of a store

Categories are global rows. A store sees the categories its owner created
(owner kept in the description metadata) plus any category its products use.
The category picker also lists and creates platform wide categories.
"""
import logging
from typing import List

from psycopg2 import errors as pg_errors

from storefront.domain.product import (
    DEFAULT_CATEGORY_COLOR,
    CategoryReorderItem,
    GlobalCategoryCreate,
    ProductCategory,
    ProductCategoryCreate,
    ProductCategoryUpdate,
)
from storefront.domain.store import Store
from storefront.repositories.category_repository import CategoryRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.utils.slug import clean_description, encode_owner_description, slugify, unique_slug

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50


class CategoryInUse(Exception):
    pass


class CategoryNotFound(Exception):
    pass


def validate_name(name: str) -> str:
    """
    Raises:
        ValueError: missing, shorter than 2 or longer than 50 characters
    """
    if not name or not name.strip():
        raise ValueError("Category name is required")
    name = name.strip()
    if len(name) < MIN_NAME_LENGTH:
        raise ValueError(f"Category name must have at least {MIN_NAME_LENGTH} characters")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"Category name must have at most {MAX_NAME_LENGTH} characters")
    return name


def merge_categories(owned: List[ProductCategory], used: List[ProductCategory]) -> List[ProductCategory]:
    """Owned first, duplicates by id dropped, then sorted by sort_order"""
    seen = set()
    merged = []
    for category in owned + used:
        if category.id in seen:
            continue
        seen.add(category.id)
        merged.append(category)
    return sorted(merged, key=lambda category: category.sort_order or 0)


class CategoryService:

    def __init__(self, repository: CategoryRepository = None, products: ProductRepository = None):
        self.repository = repository or CategoryRepository()
        self.products = products or ProductRepository()

    def list_for_store(self, store: Store, user_id: str = None) -> List[dict]:
        owner_id = user_id or store.user_id
        owned = self.repository.find_owned_by(owner_id)
        used = self.repository.find_active_by_ids(self.products.find_used_category_ids(store.id))
        return [category.to_store_dict(store.id) for category in merge_categories(owned, used)]

    def create(self, store: Store, user_id: str, payload: ProductCategoryCreate) -> dict:
        """
        Raises:
            ValueError: invalid name or duplicate category
        """
        name = validate_name(payload.name)

        slug = slugify(name)
        if self.repository.slug_exists(slug):
            slug = unique_slug(slug)

        try:
            category = self.repository.create(
                name=name,
                slug=slug,
                description=encode_owner_description(user_id, payload.description),
                color=payload.color or DEFAULT_CATEGORY_COLOR,
                sort_order=self.repository.next_sort_order()
            )
        except pg_errors.UniqueViolation:
            raise ValueError("This category already exists. Try a different name")

        return category.to_store_dict(store.id)

    def update(self, store: Store, user_id: str, payload: ProductCategoryUpdate) -> dict:
        """
        Raises:
            ValueError: missing id or invalid name
            CategoryNotFound: no category with that id
        """
        if not payload.id:
            raise ValueError("Category id is required")
        name = validate_name(payload.name)

        category = self.repository.update(
            payload.id,
            name,
            encode_owner_description(user_id, payload.description),
            payload.color or DEFAULT_CATEGORY_COLOR
        )
        if category is None:
            raise CategoryNotFound(payload.id)

        return category.to_store_dict(store.id)

    def delete(self, store: Store, category_id: int) -> None:
        """
        Raises:
            CategoryInUse: products of the store still reference the category
            CategoryNotFound: nothing deleted
        """
        in_use = self.products.count_by_category(store.id, category_id)
        if in_use:
            raise CategoryInUse(in_use)

        if not self.repository.delete(category_id):
            raise CategoryNotFound(category_id)

        logger.info(f"Product category {category_id} deleted by store {store.slug}")

    def reorder(self, items: List[CategoryReorderItem]) -> int:
        """
        One update per item, no atomicity across the sequence

        Raises:
            CategoryNotFound: an id is not an active category
        """
        ids = {item.id for item in items}
        missing = ids - self.repository.find_active_ids(ids)
        if missing:
            raise CategoryNotFound(sorted(missing))

        for item in items:
            self.repository.update_sort_order(item.id, item.sort_order)

        return len(items)

    def list_active(self) -> List[dict]:
        """Platform wide listing for the category picker, owner metadata stripped"""
        categories = []
        for category in self.repository.find_active():
            data = category.to_dict()
            data["description"] = clean_description(category.description)
            categories.append(data)
        return categories

    def create_global(self, payload: GlobalCategoryCreate) -> dict:
        """
        Create a category visible to every store, with an explicit slug

        Raises:
            ValueError: name, name_pt or slug missing, or the slug is taken
        """
        if not all(value and value.strip() for value in (payload.name, payload.name_pt, payload.slug)):
            raise ValueError("name, name_pt and slug are required")

        slug = payload.slug.strip().lower()
        if self.repository.slug_exists(slug):
            raise ValueError("A category with this slug already exists")

        try:
            category = self.repository.create(
                name=payload.name.strip(),
                name_pt=payload.name_pt.strip(),
                slug=slug,
                description=(payload.description or "").strip(),
                icon=payload.icon,
                color=payload.color or DEFAULT_CATEGORY_COLOR,
                sort_order=0
            )
        except pg_errors.UniqueViolation:
            raise ValueError("A category with this slug already exists")

        return category.to_dict()
