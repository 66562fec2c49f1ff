"""initial catalog schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(250), nullable=False),
        sa.Column('image', sa.String(250), nullable=False, server_default=''),
        sa.Column('custom_image', sa.String(250), nullable=True),
        sa.Column('state', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_categories_title', 'categories', ['title'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('remote_id', sa.String(64), nullable=True),
        sa.Column('title', sa.String(250), nullable=False),
        sa.Column('slug', sa.String(1000), nullable=False),
        sa.Column('sku', sa.String(100), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('price_eur', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('price_usd', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('cover_image', sa.String(255), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('tags', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('inventory_type', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('state', sa.Enum('ACTIVE', 'DRAFT', 'DISCONTINUED', name='product_state_enum'),
                  nullable=False, server_default='ACTIVE'),
        sa.Column('printful_ignored', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_products_remote_id', 'products', ['remote_id'], unique=True)
    op.create_index('ix_products_slug', 'products', ['slug'])
    op.create_index('ix_products_sku', 'products', ['sku'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_state', 'products', ['state'])

    op.create_table(
        'variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('remote_id', sa.String(64), nullable=True),
        sa.Column('catalog_variant_id', sa.Integer(), nullable=True),
        sa.Column('value', sa.String(100), nullable=False, server_default=''),
        sa.Column('color', sa.String(100), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('retail_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(10), nullable=True),
        sa.Column('sku', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('product_id', 'sku', name='uq_variant_product_sku'),
    )
    op.create_index('ix_variants_product_id', 'variants', ['product_id'])
    op.create_index('ix_variants_remote_id', 'variants', ['remote_id'])
    op.create_index('ix_variants_catalog_variant_id', 'variants', ['catalog_variant_id'])

    op.create_table(
        'product_variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('variants.id'), nullable=False),
        sa.Column('catalog_variant_id', sa.Integer(), nullable=True),
        sa.Column('catalog_product_id', sa.Integer(), nullable=True),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('name', sa.String(255), nullable=True),
    )
    op.create_index('ix_product_variants_variant_id', 'product_variants', ['variant_id'], unique=True)

    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('variants.id'), nullable=False),
        sa.Column('remote_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(50), nullable=False, server_default='default'),
        sa.Column('hash', sa.String(100), nullable=True),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('filename', sa.String(255), nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('dpi', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('preview_url', sa.Text(), nullable=True),
        sa.Column('visible', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_temporary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_files_variant_id', 'files', ['variant_id'])

    op.create_table(
        'options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('variants.id'), nullable=False),
        sa.Column('option_key', sa.String(100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False, server_default=''),
    )
    op.create_index('ix_options_variant_id', 'options', ['variant_id'])

    op.create_table(
        'galleries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('image', sa.String(250), nullable=False),
        sa.Column('color', sa.String(100), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_galleries_product_id', 'galleries', ['product_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('CUSTOMER', 'ADMIN', name='user_role_enum'),
                  nullable=False, server_default='CUSTOMER'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)


def downgrade() -> None:
    op.drop_table('users')
    op.drop_table('galleries')
    op.drop_table('options')
    op.drop_table('files')
    op.drop_table('product_variants')
    op.drop_table('variants')
    op.drop_table('products')
    op.drop_table('categories')
    sa.Enum(name='product_state_enum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='user_role_enum').drop(op.get_bind(), checkfirst=True)
