"""
Unit tests for CategoryService
"""
import pytest
from unittest.mock import MagicMock
from psycopg2 import errors as pg_errors

from storefront.domain.product import (
    CategoryReorderItem,
    GlobalCategoryCreate,
    ProductCategory,
    ProductCategoryCreate,
    ProductCategoryUpdate,
)
from storefront.domain.store import Store
from storefront.services.category_service import (
    CategoryInUse,
    CategoryNotFound,
    CategoryService,
    merge_categories,
    validate_name,
)

STORE = Store(id='store-1', name='Loja', slug='loja', user_id='user-1')


def category(category_id, sort_order, description=None):
    return ProductCategory(id=category_id, name=f"Cat {category_id}", sort_order=sort_order,
                           description=description)


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.slug_exists.return_value = False
    repo.next_sort_order.return_value = 4
    repo.create.side_effect = lambda **kwargs: ProductCategory(id=30, **kwargs)
    return repo


@pytest.fixture
def products():
    return MagicMock()


class TestHelpers:

    @pytest.mark.parametrize("name", [None, "", "   ", "a", "x" * 51])
    def test_invalid_names(self, name):
        with pytest.raises(ValueError):
            validate_name(name)

    def test_valid_name_is_trimmed(self):
        assert validate_name("  Bolos ") == "Bolos"

    def test_merge_dedupes_and_sorts(self):
        owned = [category(25, 3), category(22, 1)]
        used = [category(22, 1), category(5, 2)]

        merged = merge_categories(owned, used)

        assert [c.id for c in merged] == [22, 5, 25]


class TestCategoryService:

    def test_list_defaults_to_store_owner(self, repository, products):
        repository.find_owned_by.return_value = [category(25, 2, 'user:user-1|desc:Mine')]
        repository.find_active_by_ids.return_value = [category(3, 1)]
        products.find_used_category_ids.return_value = [3]

        result = CategoryService(repository, products).list_for_store(STORE)

        repository.find_owned_by.assert_called_once_with('user-1')
        assert [c['id'] for c in result] == [3, 25]
        assert result[1]['description'] == 'Mine'
        assert result[0]['store_id'] == 'store-1'

    def test_create_generates_slug_and_metadata(self, repository, products):
        created = CategoryService(repository, products).create(
            STORE, 'user-1', ProductCategoryCreate(name='Bolos Caseiros', description='Fresh')
        )

        kwargs = repository.create.call_args.kwargs
        assert kwargs['slug'] == 'bolos-caseiros'
        assert kwargs['description'] == 'user:user-1|desc:Fresh'
        assert kwargs['color'] == '#8B5CF6'
        assert kwargs['sort_order'] == 4
        assert created['description'] == 'Fresh'

    def test_create_suffixes_taken_slug(self, repository, products):
        repository.slug_exists.return_value = True

        CategoryService(repository, products).create(STORE, 'user-1', ProductCategoryCreate(name='Bolos'))

        slug = repository.create.call_args.kwargs['slug']
        assert slug.startswith('bolos-')
        assert slug[len('bolos-'):].isdigit()

    def test_create_duplicate(self, repository, products):
        repository.create.side_effect = pg_errors.UniqueViolation()

        with pytest.raises(ValueError, match="already exists"):
            CategoryService(repository, products).create(STORE, 'user-1', ProductCategoryCreate(name='Bolos'))

    def test_update_requires_id(self, repository, products):
        with pytest.raises(ValueError):
            CategoryService(repository, products).update(STORE, 'user-1', ProductCategoryUpdate(name='Bolos'))

    def test_update_unknown_category(self, repository, products):
        repository.update.return_value = None

        with pytest.raises(CategoryNotFound):
            CategoryService(repository, products).update(
                STORE, 'user-1', ProductCategoryUpdate(id=99, name='Bolos')
            )

    def test_delete_refused_when_in_use(self, repository, products):
        products.count_by_category.return_value = 2

        with pytest.raises(CategoryInUse):
            CategoryService(repository, products).delete(STORE, 25)

        repository.delete.assert_not_called()

    def test_delete_unknown(self, repository, products):
        products.count_by_category.return_value = 0
        repository.delete.return_value = 0

        with pytest.raises(CategoryNotFound):
            CategoryService(repository, products).delete(STORE, 25)

    def test_reorder_updates_each_item(self, repository, products):
        repository.find_active_ids.return_value = {22, 25}
        items = [CategoryReorderItem(id=22, sort_order=2), CategoryReorderItem(id=25, sort_order=1)]

        assert CategoryService(repository, products).reorder(items) == 2
        assert repository.update_sort_order.call_count == 2
        repository.update_sort_order.assert_any_call(25, 1)

    def test_reorder_with_unknown_ids(self, repository, products):
        repository.find_active_ids.return_value = {22}
        items = [CategoryReorderItem(id=22, sort_order=1), CategoryReorderItem(id=99, sort_order=2)]

        with pytest.raises(CategoryNotFound):
            CategoryService(repository, products).reorder(items)

        repository.update_sort_order.assert_not_called()


class TestGlobalCategories:

    def test_list_active_strips_owner_metadata(self, repository, products):
        repository.find_active.return_value = [category(3, 1), category(25, 2, 'user:user-1|desc:Mine')]

        result = CategoryService(repository, products).list_active()

        assert [c['id'] for c in result] == [3, 25]
        assert result[1]['description'] == 'Mine'
        assert 'store_id' not in result[0]

    def test_create_global_lowercases_slug(self, repository, products):
        created = CategoryService(repository, products).create_global(
            GlobalCategoryCreate(name='Cakes', name_pt='Bolos', slug=' Bolos ', icon='🎂')
        )

        kwargs = repository.create.call_args.kwargs
        assert kwargs['slug'] == 'bolos'
        assert kwargs['name_pt'] == 'Bolos'
        assert kwargs['icon'] == '🎂'
        assert kwargs['color'] == '#8B5CF6'
        assert kwargs['sort_order'] == 0
        assert created['id'] == 30

    @pytest.mark.parametrize("payload", [
        GlobalCategoryCreate(name_pt='Bolos', slug='bolos'),
        GlobalCategoryCreate(name='Cakes', slug='bolos'),
        GlobalCategoryCreate(name='Cakes', name_pt='Bolos', slug='  '),
    ])
    def test_create_global_requires_names_and_slug(self, repository, products, payload):
        with pytest.raises(ValueError, match="name, name_pt and slug are required"):
            CategoryService(repository, products).create_global(payload)

        repository.create.assert_not_called()

    def test_create_global_with_taken_slug(self, repository, products):
        repository.slug_exists.return_value = True

        with pytest.raises(ValueError, match="already exists"):
            CategoryService(repository, products).create_global(
                GlobalCategoryCreate(name='Cakes', name_pt='Bolos', slug='bolos')
            )

        repository.create.assert_not_called()

    def test_create_global_race_on_slug(self, repository, products):
        repository.create.side_effect = pg_errors.UniqueViolation()

        with pytest.raises(ValueError, match="already exists"):
            CategoryService(repository, products).create_global(
                GlobalCategoryCreate(name='Cakes', name_pt='Bolos', slug='bolos')
            )
