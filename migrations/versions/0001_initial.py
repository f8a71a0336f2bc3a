"""initial schema: company, employee, shift, ccss_rate, payroll_record

Revision ID: 0001_initial
Revises:
Create Date: 2025-06-01 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'company',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=120), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )
    op.create_table(
        'employee',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_key', sa.String(length=120), nullable=False),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('ccss_type', sa.String(length=2), nullable=True),
        sa.Column('hours_per_shift', sa.Numeric(6, 2), nullable=True),
        sa.Column('extra_amount', sa.Numeric(12, 2), nullable=True),
        sa.ForeignKeyConstraint(['company_key'], ['company.key']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('company_key', 'name', name='uq_employee_company'),
    )
    op.create_index('ix_employee_company_key', 'employee', ['company_key'])
    op.create_table(
        'shift',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_key', sa.String(length=120), nullable=False),
        sa.Column('employee_name', sa.String(length=160), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('day', sa.Integer(), nullable=False),
        sa.Column('shift_code', sa.String(length=1), nullable=False),
        sa.Column('hours_per_day', sa.Numeric(6, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('company_key', 'employee_name', 'year', 'month', 'day', name='uq_shift_cell'),
    )
    op.create_index('ix_shift_company_key', 'shift', ['company_key'])
    op.create_index('ix_shift_employee_name', 'shift', ['employee_name'])
    op.create_index('ix_shift_period', 'shift', ['year', 'month'])
    op.create_table(
        'ccss_rate',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=True),
        sa.Column('company_name', sa.String(length=120), nullable=False),
        sa.Column('tc', sa.Numeric(12, 2), nullable=True),
        sa.Column('mt', sa.Numeric(12, 2), nullable=True),
        sa.Column('horabruta', sa.Numeric(12, 2), nullable=True),
        sa.Column('valorhora', sa.Numeric(12, 2), nullable=True),
        sa.Column('overtime', sa.Numeric(12, 2), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ccss_rate_company_name', 'ccss_rate', ['company_name'])
    op.create_table(
        'payroll_record',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_key', sa.String(length=120), nullable=False),
        sa.Column('employee_name', sa.String(length=160), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('half', sa.String(length=8), nullable=False),
        sa.Column('worked_days', sa.Integer(), nullable=True),
        sa.Column('hours_per_day', sa.Numeric(6, 2), nullable=True),
        sa.Column('total_hours', sa.Numeric(8, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('company_key', 'employee_name', 'year', 'month', 'half', name='uq_payroll_period'),
    )
    op.create_index('ix_payroll_record_company_key', 'payroll_record', ['company_key'])
    op.create_index('ix_payroll_record_employee_name', 'payroll_record', ['employee_name'])


def downgrade():
    op.drop_table('payroll_record')
    op.drop_table('ccss_rate')
    op.drop_table('shift')
    op.drop_table('employee')
    op.drop_table('company')
