"""
Unit tests for ProductRepository

These tests validate repository logic without requiring a database connection.
"""
import pytest
from decimal import Decimal
from psycopg2.extras import Json

from storefront.domain.product import FALLBACK_PUBLIC_PRICE, Product
from storefront.repositories.product_repository import ProductRepository, _writable

MODULE = "storefront.repositories.product_repository"


def product_row(**overrides):
    row = {
        'id': 'prod-1',
        'store_id': 'store-1',
        'name': 'Brigadeiro',
        'description': None,
        'price': Decimal('3.50'),
        'image': None,
        'category_id': 22,
        'available': True,
        'display_order': 1,
        'created_at': None,
        'updated_at': None,
    }
    row.update(overrides)
    return row


class TestWritableColumns:

    def test_unknown_columns_are_dropped(self):
        values = _writable({'name': 'Bolo', 'store_id': 'other', 'hacker': 1})
        assert values == {'name': 'Bolo'}

    def test_json_columns_are_wrapped(self):
        values = _writable({'colors': ['red'], 'attributes': {'size': 'M'}})
        assert isinstance(values['colors'], Json)
        assert isinstance(values['attributes'], Json)


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_store_flattens_category(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchall.return_value = [
            product_row(category={'id': 22, 'name': 'Doces', 'description': None, 'color': '#fff'}),
            product_row(id='prod-2', category_id=None, category=None),
        ]

        products = ProductRepository().find_by_store('store-1')

        assert all(isinstance(product, Product) for product in products)
        first, second = [product.to_listing_dict() for product in products]
        assert first['category'] == 'Doces'
        assert first['category_data']['id'] == 22
        assert first['price'] == 3.5
        assert second['category'] == 'Geral'
        assert second['category_data'] is None

    def test_public_listing_replaces_zero_price(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchall.return_value = [
            product_row(price=Decimal('0')),
            product_row(id='prod-2', price=None),
            product_row(id='prod-3', price=Decimal('12.90')),
        ]

        products = [p.to_public_dict() for p in ProductRepository().find_available('store-1')]

        assert [p['price'] for p in products] == [FALLBACK_PUBLIC_PRICE, FALLBACK_PUBLIC_PRICE, 12.9]

    def test_create_scopes_to_store(self, mock_db):
        conn, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = product_row()

        product = ProductRepository().create('store-1', {'name': 'Brigadeiro', 'price': 3.5, 'store_id': 'evil'})

        sql, params = cursor.execute.call_args[0]
        assert 'INSERT INTO products' in sql
        assert params.count('store-1') == 1
        assert 'evil' not in params
        assert product.id == 'prod-1'
        conn.commit.assert_called_once()

    def test_update_returns_none_when_product_not_in_store(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = None

        assert ProductRepository().update('store-1', 'prod-9', {'name': 'X'}) is None

    def test_find_ids_in_store(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchall.return_value = [{'id': 'prod-1'}]

        owned = ProductRepository().find_ids_in_store('store-1', {'prod-1', 'prod-2'})

        assert owned == {'prod-1'}

    def test_replace_all_runs_in_one_transaction(self, mock_db):
        conn, cursor = mock_db(MODULE)
        cursor.rowcount = 3

        inserted = ProductRepository().replace_all('store-1', [
            {'name': 'A', 'price': 1.0},
            {'name': 'B', 'price': 2.0},
        ])

        assert inserted == 2
        statements = [call[0][0] for call in cursor.execute.call_args_list]
        assert statements[0].startswith('DELETE FROM products')
        assert sum('INSERT INTO products' in sql for sql in statements) == 2
        conn.commit.assert_called_once()

    def test_replace_all_rolls_back_when_an_insert_fails(self, mock_db):
        conn, cursor = mock_db(MODULE)
        cursor.execute.side_effect = [None, RuntimeError("bad row")]

        with pytest.raises(RuntimeError):
            ProductRepository().replace_all('store-1', [{'name': 'A'}])

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_count_by_category(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = {'total': 4}

        assert ProductRepository().count_by_category('store-1', 22) == 4
