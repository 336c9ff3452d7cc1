
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

LOYALTY_LEVEL = sa.Enum('BRONZE', 'SILVER', 'GOLD', 'PLATINUM', 'VIP', name='loyalty_level')

def upgrade():
    op.create_table(
        'salons',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('loyalty_silver_min_visits', sa.Integer(), nullable=True),
        sa.Column('loyalty_gold_min_visits', sa.Integer(), nullable=True),
        sa.Column('loyalty_platinum_min_visits', sa.Integer(), nullable=True),
        sa.Column('loyalty_vip_min_visits', sa.Integer(), nullable=True),
        sa.Column('loyalty_bronze_discount', sa.Integer(), nullable=True),
        sa.Column('loyalty_silver_discount', sa.Integer(), nullable=True),
        sa.Column('loyalty_gold_discount', sa.Integer(), nullable=True),
        sa.Column('loyalty_platinum_discount', sa.Integer(), nullable=True),
        sa.Column('loyalty_vip_discount', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'staff',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('salon_id', sa.Integer(), sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_staff_salon_id', 'staff', ['salon_id'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('salon_id', sa.Integer(), sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('last_visit_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('loyalty_level', LOYALTY_LEVEL, nullable=False, server_default='BRONZE'),
        sa.Column('has_loyalty_discount', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('loyalty_discount_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('referred_by', sa.Integer(), sa.ForeignKey('customers.id', ondelete='SET NULL'), nullable=True),
        sa.Column('referral_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('has_referral_discount', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_customers_salon_id', 'customers', ['salon_id'])
    op.create_index('ix_customers_referred_by', 'customers', ['referred_by'])

    op.create_table(
        'visit_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('salon_id', sa.Integer(), sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('staff.id', ondelete='SET NULL'), nullable=True),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_visit_tokens_token', 'visit_tokens', ['token'], unique=True)
    op.create_index('ix_visit_tokens_salon_id', 'visit_tokens', ['salon_id'])
    op.create_index('ix_visit_tokens_customer_id', 'visit_tokens', ['customer_id'])

    op.create_table(
        'visits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('salon_id', sa.Integer(), sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('staff.id', ondelete='SET NULL'), nullable=True),
        sa.Column('visited_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('services', sa.JSON(), nullable=True),
    )
    op.create_index('ix_visits_salon_id', 'visits', ['salon_id'])
    op.create_index('ix_visits_customer_id', 'visits', ['customer_id'])

    op.create_table(
        'referral_rewards',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('salon_id', sa.Integer(), sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('referrer_id', sa.Integer(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('referred_id', sa.Integer(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_referral_rewards_salon_id', 'referral_rewards', ['salon_id'])
    op.create_index('ix_referral_rewards_referrer_id', 'referral_rewards', ['referrer_id'])
    op.create_index('ix_referral_rewards_referred_id', 'referral_rewards', ['referred_id'])

def downgrade():
    op.drop_table('referral_rewards')
    op.drop_table('visits')
    op.drop_index('ix_visit_tokens_token', table_name='visit_tokens')
    op.drop_table('visit_tokens')
    op.drop_table('customers')
    op.drop_table('staff')
    op.drop_table('salons')
    LOYALTY_LEVEL.drop(op.get_bind(), checkfirst=True)
