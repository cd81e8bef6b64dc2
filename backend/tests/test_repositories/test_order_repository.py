"""
Unit tests for OrderRepository
"""
from datetime import datetime, timezone
from decimal import Decimal
from psycopg2.extras import Json

from storefront.domain.order import Customer, Order
from storefront.repositories.order_repository import OrderRepository

MODULE = "storefront.repositories.order_repository"


def order_row(**overrides):
    row = {
        'id': 'a1b2c3d4-0000-0000-0000-000000000000',
        'store_id': 'store-1',
        'customer_id': 'cust-1',
        'customer_name': 'Maria',
        'customer_phone': '11988887777',
        'customer_address': 'Rua A, 10',
        'delivery_address': 'Rua A, 10',
        'items': [{'id': 'prod-1', 'name': 'Brigadeiro', 'price': 3.5, 'quantity': 2}],
        'total': Decimal('7.00'),
        'source': 'storefront',
        'status': 'pending',
        'notes': '',
        'created_at': datetime(2024, 5, 1, tzinfo=timezone.utc),
        'updated_at': None,
    }
    row.update(overrides)
    return row


class TestOrderRepository:

    def test_find_customer_by_store_and_phone(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = {
            'id': 'cust-1', 'store_id': 'store-1', 'name': 'Maria',
            'phone': '11988887777', 'address': None,
        }

        customer = OrderRepository().find_customer('store-1', '11988887777')

        assert isinstance(customer, Customer)
        assert cursor.execute.call_args[0][1] == ('store-1', '11988887777')

    def test_create_stores_items_as_json(self, mock_db):
        conn, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = order_row()

        order = OrderRepository().create(
            store_id='store-1',
            customer_id='cust-1',
            customer_name='Maria',
            customer_phone='11988887777',
            customer_address='Rua A, 10',
            items=[{'id': 'prod-1', 'name': 'Brigadeiro', 'price': 3.5, 'quantity': 2}],
            total=7.0,
            source='storefront',
            notes='',
            status='pending'
        )

        sql, params = cursor.execute.call_args[0]
        assert 'created_at' not in sql
        assert any(isinstance(value, Json) for value in params)
        assert isinstance(order, Order)
        assert order.short_id == 'a1b2c3d4'
        conn.commit.assert_called_once()

    def test_create_backdates_manual_orders(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = order_row(status='delivered')
        created_at = datetime(2024, 4, 30, tzinfo=timezone.utc)

        OrderRepository().create(
            store_id='store-1', customer_id='cust-1', customer_name='Maria',
            customer_phone='11988887777', customer_address=None, items=[],
            total=7.0, source='manual', notes='', status='delivered',
            created_at=created_at
        )

        sql, params = cursor.execute.call_args[0]
        assert 'created_at' in sql
        assert created_at in params

    def test_find_by_store_filters_by_phone(self, mock_db):
        _, cursor = mock_db(MODULE)
        cursor.fetchall.return_value = [order_row()]

        orders = OrderRepository().find_by_store('store-1', customer_phone='11988887777')

        sql, params = cursor.execute.call_args[0]
        assert 'customer_phone = %s' in sql
        assert 'ORDER BY created_at DESC' in sql
        assert params == ['store-1', '11988887777']
        assert orders[0].to_dict()['total'] == 7.0

    def test_update_status_sets_updated_at(self, mock_db):
        conn, cursor = mock_db(MODULE)
        cursor.fetchone.return_value = order_row(status='accepted')

        order = OrderRepository().update_status('order-1', 'accepted')

        sql, params = cursor.execute.call_args[0]
        assert 'updated_at = NOW()' in sql
        assert params == ('accepted', 'order-1')
        assert order.status == 'accepted'
        conn.commit.assert_called_once()
