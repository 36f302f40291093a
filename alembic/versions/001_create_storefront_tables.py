"""create storefront tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _id_column():
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        _id_column(),
        sa.Column('email', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'categories',
        _id_column(),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # References between tables are plain UUID columns without foreign keys
    op.create_table(
        'products',
        _id_column(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('category_id', postgresql.UUID(as_uuid=True)),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('total_purchases', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_reviews', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint('price > 0', name='positive_price'),
        sa.CheckConstraint('total_purchases >= 0', name='non_negative_purchases'),
        sa.CheckConstraint('average_rating >= 0 AND average_rating <= 5', name='rating_range'),
    )
    op.create_index('idx_products_category', 'products', ['category_id'])
    op.create_index('idx_products_active', 'products', ['is_active'])

    op.create_table(
        'purchases',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('purchase_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('completed', 'cancelled', 'pending')", name='purchase_status_valid'),
    )
    op.create_index('idx_purchases_user', 'purchases', ['user_id'])
    op.create_index('idx_purchases_product', 'purchases', ['product_id'])
    op.create_index('idx_purchases_created', 'purchases', ['created_at'])

    op.create_table(
        'reviews',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='rating_valid'),
    )
    op.create_unique_constraint('uq_review_user_product', 'reviews', ['user_id', 'product_id'])
    op.create_index('idx_reviews_product_rating', 'reviews', ['product_id', 'rating'])
    op.create_index('idx_reviews_user_created', 'reviews', ['user_id', 'created_at'])

    op.create_table(
        'wishlist_items',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('priority', sa.String(10), nullable=False, server_default='medium'),
        sa.Column('is_notified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('added_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name='wishlist_priority_valid'),
    )
    op.create_unique_constraint('uq_wishlist_user_product', 'wishlist_items', ['user_id', 'product_id'])
    op.create_index('idx_wishlist_product', 'wishlist_items', ['product_id'])


def downgrade() -> None:
    op.drop_table('wishlist_items')
    op.drop_table('reviews')
    op.drop_table('purchases')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('users')
