"""initial_schema

Revision ID: 5c1f2a9d7b3e
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '5c1f2a9d7b3e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(200), nullable=False, server_default=''),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='STAFF'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_is_active'), 'users', ['is_active'], unique=False)

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), nullable=False, server_default='#000000'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('image_path', sa.String(500), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('quantity >= 0', name='product_quantity_non_negative'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_products_name'), 'products', ['name'], unique=False)
    op.create_index(op.f('ix_products_category_id'), 'products', ['category_id'], unique=False)

    op.create_table(
        'inventory_materials',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('image_path', sa.String(500), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('quantity >= 0', name='material_quantity_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_inventory_materials_name'), 'inventory_materials', ['name'], unique=False
    )

    op.create_table(
        'product_sold',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('beginning_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sold_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('delivered_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ending_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('ending_qty >= 0', name='product_sold_ending_non_negative'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_id', 'date', name='uq_product_sold_product_date'),
    )
    op.create_index(op.f('ix_product_sold_product_id'), 'product_sold', ['product_id'], unique=False)
    op.create_index(op.f('ix_product_sold_date'), 'product_sold', ['date'], unique=False)

    op.create_table(
        'inventory_used',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('beginning_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('used_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ending_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('ending_qty >= 0', name='inventory_used_ending_non_negative'),
        sa.ForeignKeyConstraint(
            ['inventory_id'], ['inventory_materials.id'], ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('inventory_id', 'date', name='uq_inventory_used_inventory_date'),
    )
    op.create_index(
        op.f('ix_inventory_used_inventory_id'), 'inventory_used', ['inventory_id'], unique=False
    )
    op.create_index(op.f('ix_inventory_used_date'), 'inventory_used', ['date'], unique=False)

    op.create_table(
        'deliveries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('beginning_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('delivered_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ending_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('confirmed_by', sa.Uuid(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('beginning_qty >= 0', name='delivery_beginning_non_negative'),
        sa.CheckConstraint('delivered_qty >= 0', name='delivery_qty_non_negative'),
        sa.CheckConstraint('ending_qty >= 0', name='delivery_ending_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['confirmed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('date', 'kind', 'item_id', name='uq_delivery_date_kind_item'),
    )
    op.create_index(op.f('ix_deliveries_date'), 'deliveries', ['date'], unique=False)
    op.create_index(op.f('ix_deliveries_item_id'), 'deliveries', ['item_id'], unique=False)
    op.create_index(op.f('ix_deliveries_status'), 'deliveries', ['status'], unique=False)
    op.create_index(op.f('ix_deliveries_user_id'), 'deliveries', ['user_id'], unique=False)

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('change', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('payment_method', sa.String(20), nullable=False, server_default='cash'),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('quantity >= 1', name='order_quantity_positive'),
        sa.CheckConstraint('total >= 0', name='order_total_non_negative'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_orders_order_id'), 'orders', ['order_id'], unique=False)
    op.create_index(op.f('ix_orders_product_id'), 'orders', ['product_id'], unique=False)
    op.create_index(op.f('ix_orders_payment_method'), 'orders', ['payment_method'], unique=False)
    op.create_index(op.f('ix_orders_order_date'), 'orders', ['order_date'], unique=False)

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount >= 0', name='expense_amount_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_expenses_user_id'), 'expenses', ['user_id'], unique=False)
    op.create_index(op.f('ix_expenses_date'), 'expenses', ['date'], unique=False)

    op.create_table(
        'summaries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('total_gross_sales', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_expenses', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_net_sales', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_cash', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_gcash', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_grabfood', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_foodpanda', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('total_deposited', sa.Numeric(12, 2), nullable=False, server_default='0.00'),
        sa.Column('order_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_dirty', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('recomputed_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_summaries_date'), 'summaries', ['date'], unique=True)
    op.create_index(op.f('ix_summaries_is_dirty'), 'summaries', ['is_dirty'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_summaries_is_dirty'), table_name='summaries')
    op.drop_index(op.f('ix_summaries_date'), table_name='summaries')
    op.drop_table('summaries')

    op.drop_index(op.f('ix_expenses_date'), table_name='expenses')
    op.drop_index(op.f('ix_expenses_user_id'), table_name='expenses')
    op.drop_table('expenses')

    op.drop_index(op.f('ix_orders_order_date'), table_name='orders')
    op.drop_index(op.f('ix_orders_payment_method'), table_name='orders')
    op.drop_index(op.f('ix_orders_product_id'), table_name='orders')
    op.drop_index(op.f('ix_orders_order_id'), table_name='orders')
    op.drop_table('orders')

    op.drop_index(op.f('ix_deliveries_user_id'), table_name='deliveries')
    op.drop_index(op.f('ix_deliveries_status'), table_name='deliveries')
    op.drop_index(op.f('ix_deliveries_item_id'), table_name='deliveries')
    op.drop_index(op.f('ix_deliveries_date'), table_name='deliveries')
    op.drop_table('deliveries')

    op.drop_index(op.f('ix_inventory_used_date'), table_name='inventory_used')
    op.drop_index(op.f('ix_inventory_used_inventory_id'), table_name='inventory_used')
    op.drop_table('inventory_used')

    op.drop_index(op.f('ix_product_sold_date'), table_name='product_sold')
    op.drop_index(op.f('ix_product_sold_product_id'), table_name='product_sold')
    op.drop_table('product_sold')

    op.drop_index(op.f('ix_inventory_materials_name'), table_name='inventory_materials')
    op.drop_table('inventory_materials')

    op.drop_index(op.f('ix_products_category_id'), table_name='products')
    op.drop_index(op.f('ix_products_name'), table_name='products')
    op.drop_table('products')

    op.drop_table('categories')

    op.drop_index(op.f('ix_users_is_active'), table_name='users')
    op.drop_index(op.f('ix_users_role'), table_name='users')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
