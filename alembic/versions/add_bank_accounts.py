"""add bank accounts

Revision ID: add_bank_accounts
Revises: create_wallet_ledger_tables
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'add_bank_accounts'
down_revision = 'create_wallet_ledger_tables'
branch_labels = None
depends_on = None

SCOPED_TABLES = ['wallets', 'sub_wallets', 'income_entries', 'expense_entries']


def upgrade():
    op.create_table(
        'bank_accounts',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('bank_name', sa.String(length=100), nullable=False),
        sa.Column('account_type', sa.String(length=30), nullable=False, server_default='savings'),
        sa.Column('balance', sa.Float, nullable=False, server_default='0'),
        sa.Column('is_primary', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_bank_accounts_user_id', 'bank_accounts', ['user_id'])

    op.create_table(
        'bank_transfers',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_account_id', sa.Uuid(as_uuid=True), sa.ForeignKey('bank_accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('to_account_id', sa.Uuid(as_uuid=True), sa.ForeignKey('bank_accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('transfer_date', sa.Date, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    for column in ('user_id', 'from_account_id', 'to_account_id'):
        op.create_index(f'ix_bank_transfers_{column}', 'bank_transfers', [column])

    for table in SCOPED_TABLES:
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column('bank_account_id', sa.Uuid(as_uuid=True), nullable=True))
            batch_op.create_foreign_key(
                f'fk_{table}_bank_account_id', 'bank_accounts', ['bank_account_id'], ['id'], ondelete='CASCADE'
            )
            batch_op.create_index(f'ix_{table}_bank_account_id', ['bank_account_id'])

    # One wallet per category per account; the account-less set keeps one per category
    with op.batch_alter_table('wallets') as batch_op:
        batch_op.drop_constraint('uq_wallets_user_category', type_='unique')
        batch_op.create_unique_constraint('uq_wallets_user_account_category', ['user_id', 'bank_account_id', 'category'])
    op.create_index(
        'uq_wallets_user_category_default',
        'wallets',
        ['user_id', 'category'],
        unique=True,
        sqlite_where=sa.text('bank_account_id IS NULL'),
        postgresql_where=sa.text('bank_account_id IS NULL'),
    )


def downgrade():
    op.drop_index('uq_wallets_user_category_default', table_name='wallets')
    op.execute('DELETE FROM sub_wallets WHERE bank_account_id IS NOT NULL')
    op.execute('DELETE FROM wallets WHERE bank_account_id IS NOT NULL')
    with op.batch_alter_table('wallets') as batch_op:
        batch_op.drop_constraint('uq_wallets_user_account_category', type_='unique')
        batch_op.create_unique_constraint('uq_wallets_user_category', ['user_id', 'category'])

    for table in reversed(SCOPED_TABLES):
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_index(f'ix_{table}_bank_account_id')
            batch_op.drop_constraint(f'fk_{table}_bank_account_id', type_='foreignkey')
            batch_op.drop_column('bank_account_id')

    for column in ('user_id', 'from_account_id', 'to_account_id'):
        op.drop_index(f'ix_bank_transfers_{column}', table_name='bank_transfers')
    op.drop_table('bank_transfers')
    op.drop_index('ix_bank_accounts_user_id', table_name='bank_accounts')
    op.drop_table('bank_accounts')
