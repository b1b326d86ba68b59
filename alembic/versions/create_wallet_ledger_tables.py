"""create wallet ledger tables

Revision ID: create_wallet_ledger_tables
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_wallet_ledger_tables'
down_revision = None
branch_labels = None
depends_on = None

OWNED_TABLES = ['wallets', 'sub_wallets', 'income_entries', 'expense_entries', 'udaar_entries', 'payment_history', 'goals']


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    ]


def _owner():
    return sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('hashed_password', sa.String, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('is_superuser', sa.Boolean, nullable=False),
        sa.Column('is_verified', sa.Boolean, nullable=False),
        sa.Column('full_name', sa.String, nullable=True),
        sa.Column('saving_percentage', sa.Integer, nullable=False, server_default='50'),
        sa.Column('needs_percentage', sa.Integer, nullable=False, server_default='30'),
        sa.Column('wants_percentage', sa.Integer, nullable=False, server_default='20'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'wallets',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('color', sa.String(length=30), nullable=False),
        sa.Column('balance', sa.Float, nullable=False, server_default='0'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'category', name='uq_wallets_user_category'),
    )

    op.create_table(
        'sub_wallets',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('parent_category', sa.String(length=20), nullable=False),
        sa.Column('parent_wallet_id', sa.Uuid(as_uuid=True), sa.ForeignKey('wallets.id', ondelete='SET NULL'), nullable=True),
        sa.Column('allocation_percentage', sa.Float, nullable=False),
        sa.Column('color', sa.String(length=30), nullable=False),
        sa.Column('balance', sa.Float, nullable=False, server_default='0'),
        sa.Column('order_position', sa.Integer, nullable=False, server_default='0'),
        sa.Column('goal_enabled', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('goal_target_amount', sa.Float, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'income_entries',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('source', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('allocations', sa.JSON, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'expense_entries',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('deductions', sa.JSON, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'udaar_entries',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('person_name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('original_amount', sa.Float, nullable=True),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('date', sa.DateTime, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('parent_transaction_id', sa.Uuid(as_uuid=True), sa.ForeignKey('udaar_entries.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'payment_history',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('transaction_id', sa.Uuid(as_uuid=True), nullable=True),
        sa.Column('person_name', sa.String(length=150), nullable=False),
        sa.Column('action', sa.String(length=30), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Float, nullable=True),
        sa.Column('date', sa.DateTime, nullable=False),
        sa.Column('details', sa.JSON, nullable=True),
    )

    op.create_table(
        'goals',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        _owner(),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('target_amount', sa.Float, nullable=False),
        sa.Column('saved_amount', sa.Float, nullable=False, server_default='0'),
        sa.Column('target_date', sa.Date, nullable=True),
        sa.Column('wallet_category', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        *_timestamps(),
    )

    for table in OWNED_TABLES:
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])
    op.create_index('ix_udaar_entries_person_name', 'udaar_entries', ['person_name'])
    op.create_index('ix_payment_history_transaction_id', 'payment_history', ['transaction_id'])


def downgrade():
    op.drop_index('ix_payment_history_transaction_id', table_name='payment_history')
    op.drop_index('ix_udaar_entries_person_name', table_name='udaar_entries')
    for table in OWNED_TABLES:
        op.drop_index(f'ix_{table}_user_id', table_name=table)
    op.drop_table('goals')
    op.drop_table('payment_history')
    op.drop_table('udaar_entries')
    op.drop_table('expense_entries')
    op.drop_table('income_entries')
    op.drop_table('sub_wallets')
    op.drop_table('wallets')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
