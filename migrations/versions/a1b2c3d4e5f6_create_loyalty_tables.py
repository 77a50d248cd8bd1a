"""Create loyalty tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create businesses, customers, visits, rewards and sms_notifications."""
    op.create_table(
        'businesses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('visits_required', sa.Integer(), nullable=False),
        sa.Column('reward_description', sa.String(255), nullable=False),
        sa.Column('reward_expiry_days', sa.Integer(), nullable=False),
        sa.Column('sms_enabled', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('visits_required > 0', name='ck_business_visits_required_positive'),
        sa.CheckConstraint('reward_expiry_days >= 0', name='ck_business_reward_expiry_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(10), nullable=True),
        sa.Column('preferred_services', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('sms_opt_in', sa.Boolean(), nullable=False),
        sa.Column('email_opt_in', sa.Boolean(), nullable=False),
        sa.Column('visits', sa.Integer(), nullable=False),
        sa.Column('rewards_earned', sa.Integer(), nullable=False),
        sa.Column('rewards_redeemed', sa.Integer(), nullable=False),
        sa.Column('total_spent', sa.Integer(), nullable=False),
        sa.Column('last_visit', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
        sa.UniqueConstraint('business_id', 'phone', name='uq_business_customer_phone'),
        sa.CheckConstraint('rewards_redeemed <= rewards_earned', name='ck_customer_redeemed_le_earned'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'visits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('visit_date', sa.DateTime(), nullable=False),
        sa.Column('reward_earned', sa.Boolean(), nullable=False),
        sa.Column('service_type', sa.String(100), nullable=True),
        sa.Column('amount_spent', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
        sa.CheckConstraint('amount_spent >= 0', name='ck_visit_amount_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_visits_business_date', 'visits', ['business_id', 'visit_date'])

    op.create_table(
        'rewards',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('earned', sa.Boolean(), nullable=False),
        sa.Column('redeemed', sa.Boolean(), nullable=False),
        sa.Column('earned_at', sa.DateTime(), nullable=False),
        sa.Column('redeemed_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rewards_customer_available', 'rewards', ['customer_id', 'earned', 'redeemed'])

    op.create_table(
        'sms_notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=True),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    """Drop all loyalty tables."""
    op.drop_table('sms_notifications')
    op.drop_index('ix_rewards_customer_available', table_name='rewards')
    op.drop_table('rewards')
    op.drop_index('ix_visits_business_date', table_name='visits')
    op.drop_table('visits')
    op.drop_table('customers')
    op.drop_table('businesses')
