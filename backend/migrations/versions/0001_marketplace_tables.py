"""Create marketplace tables: users, groups, join requests, order requests, chat

Revision ID: 0001_marketplace_tables
Revises:
Create Date: 2025-07-27

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001_marketplace_tables'
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_JOIN_WHERE = sa.text("status IN ('Pending', 'Accepted')")


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False, server_default='Unknown'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint("role IN ('vendor', 'supplier')", name='users_role_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('users_role_idx', 'users', ['role'])

    op.create_table('groups',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('creator_id', sa.String(length=100), nullable=False),
        sa.Column('product', sa.String(length=200), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('total_quantity', sa.Integer(), nullable=False),
        sa.Column('min_join_quantity', sa.Integer(), nullable=False),
        sa.Column('joined_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pickup_point', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Open'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('price > 0', name='groups_price_check'),
        sa.CheckConstraint('total_quantity >= 1', name='groups_total_quantity_check'),
        sa.CheckConstraint('min_join_quantity >= 1', name='groups_min_join_quantity_check'),
        sa.CheckConstraint(
            'joined_quantity >= 0 AND joined_quantity <= total_quantity',
            name='groups_capacity_check'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('groups_creator_id_idx', 'groups', ['creator_id'])

    op.create_table('join_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('group_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='join_requests_quantity_check'),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'join_requests_active_uq',
        'join_requests',
        ['group_id', 'user_id'],
        unique=True,
        postgresql_where=ACTIVE_JOIN_WHERE,
        sqlite_where=ACTIVE_JOIN_WHERE
    )

    op.create_table('order_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.String(length=100), nullable=False),
        sa.Column('supplier_id', sa.String(length=100), nullable=False),
        sa.Column('product_id', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='order_requests_quantity_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('order_requests_supplier_id_idx', 'order_requests', ['supplier_id', 'created_at'])
    op.create_index('order_requests_vendor_id_idx', 'order_requests', ['vendor_id', 'created_at'])

    op.create_table('chat_messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('group_id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.String(length=100), nullable=False),
        sa.Column('sender_name', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('chat_messages_group_id_idx', 'chat_messages', ['group_id', 'id'])


def downgrade():
    op.drop_index('chat_messages_group_id_idx', table_name='chat_messages')
    op.drop_table('chat_messages')

    op.drop_index('order_requests_vendor_id_idx', table_name='order_requests')
    op.drop_index('order_requests_supplier_id_idx', table_name='order_requests')
    op.drop_table('order_requests')

    op.drop_index('join_requests_active_uq', table_name='join_requests')
    op.drop_table('join_requests')

    op.drop_index('groups_creator_id_idx', table_name='groups')
    op.drop_table('groups')

    op.drop_index('users_role_idx', table_name='users')
    op.drop_table('users')
