"""initial_store_schema

Revision ID: 0001_initial_store
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_store'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('customer', 'admin', 'superadmin', name='user_role_enum')
order_status = sa.Enum(
    'pending', 'processing', 'shipped', 'delivered', 'cancelled',
    name='order_status_enum',
)
payment_status = sa.Enum('pending', 'paid', 'failed', name='payment_status_enum')
customization_type = sa.Enum(
    'bouquet', 'flower', 'arrangement', 'other', name='customization_type_enum'
)
customization_status = sa.Enum(
    'pending', 'reviewing', 'quoted', 'accepted', 'rejected', 'completed',
    name='customization_status_enum',
)
content_platform = sa.Enum('tiktok', 'other', name='content_platform_enum')


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema - Create store tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('role', user_role, server_default='customer', nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('profile_image_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sa.UniqueConstraint('name', name='uq_categories_name'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('stock', sa.Integer(), server_default='0', nullable=False),
        sa.Column('image_url', sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sa.ForeignKeyConstraint(
            ['category_id'], ['categories.id'],
            name='fk_products_category_id_categories', ondelete='RESTRICT',
        ),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
    )
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', order_status, server_default='pending', nullable=False),
        sa.Column(
            'payment_status', payment_status, server_default='pending', nullable=False
        ),
        sa.Column('shipping_address', sa.Text(), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('latitude', sa.Numeric(10, 8), nullable=True),
        sa.Column('longitude', sa.Numeric(11, 8), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_orders_user_id_users', ondelete='RESTRICT',
        ),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name='fk_order_items_order_id_orders', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_order_items_product_id_products', ondelete='RESTRICT',
        ),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_positive_quantity'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'wishlist',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_wishlist'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_wishlist_user_id_users', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_wishlist_product_id_products', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('user_id', 'product_id', name='unique_user_product'),
    )

    op.create_table(
        'customizations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', customization_type, server_default='bouquet', nullable=False),
        sa.Column('occasion', sa.String(100), nullable=True),
        sa.Column('preferred_colors', sa.String(255), nullable=True),
        sa.Column('budget', sa.Numeric(10, 2), nullable=True),
        sa.Column('delivery_date', sa.Date(), nullable=True),
        sa.Column('special_requirements', sa.Text(), nullable=True),
        sa.Column(
            'status', customization_status, server_default='pending', nullable=False
        ),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('quoted_price', sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_customizations'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_customizations_user_id_users', ondelete='CASCADE',
        ),
    )
    op.create_index('ix_customizations_user_id', 'customizations', ['user_id'])
    op.create_index('ix_customizations_status', 'customizations', ['status'])

    op.create_table(
        'contents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column(
            'platform', content_platform, server_default='tiktok', nullable=False
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_contents'),
    )


def downgrade() -> None:
    """Downgrade schema - Drop store tables."""
    op.drop_table('contents')
    op.drop_index('ix_customizations_status', table_name='customizations')
    op.drop_index('ix_customizations_user_id', table_name='customizations')
    op.drop_table('customizations')
    op.drop_table('wishlist')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_products_category_id', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        content_platform,
        customization_status,
        customization_type,
        payment_status,
        order_status,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
