"""create_attribution_tables

Revision ID: 3d7a91c4e2b0
Revises:
Create Date: 2026-09-14 10:22:41.518203

Creates the tables read and written by the attribution waterfall:
actblue_transactions (with attribution metadata columns), refcode_mappings,
attribution_rules and meta_campaign_spend_daily.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3d7a91c4e2b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Create attribution tables."""
    op.create_table(
        'actblue_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False, comment='Owning client organization (UUID)'),
        sa.Column('transaction_id', sa.String(length=100), nullable=False, comment='ActBlue receipt/line-item identifier'),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('net_amount', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('fee', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('transaction_type', sa.String(length=20), nullable=False, comment='donation, refund'),
        sa.Column('donor_email_hash', sa.String(length=64), nullable=True),
        sa.Column('donor_phone_hash', sa.String(length=64), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('recurring_state', sa.String(length=20), nullable=True),
        sa.Column('refcode', sa.String(length=255), nullable=True),
        sa.Column('click_id', sa.String(length=255), nullable=True),
        sa.Column('fbclid', sa.String(length=512), nullable=True),
        sa.Column('contribution_form', sa.String(length=255), nullable=True),
        sa.Column('attributed_platform', sa.String(length=50), nullable=True),
        sa.Column('attribution_confidence', sa.Numeric(precision=3, scale=2), nullable=True),
        sa.Column('attribution_level', sa.String(length=20), nullable=True, comment='deterministic, high, medium, low, none'),
        sa.Column('attribution_method', sa.String(length=50), nullable=True),
        sa.Column('attribution_tier', sa.Integer(), nullable=True),
        sa.Column('attributed_campaign_id', sa.String(length=100), nullable=True),
        sa.Column('attributed_ad_id', sa.String(length=100), nullable=True),
        sa.Column('attributed_creative_id', sa.String(length=100), nullable=True),
        sa.Column('attribution_rule_name', sa.String(length=255), nullable=True),
        sa.Column('attribution_channel_hint', sa.String(length=30), nullable=True, comment='Informational SMS channel detection'),
        sa.Column('attributed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'transaction_id', name='uq_actblue_transaction'),
    )
    op.create_index('ix_actblue_transactions_org_date', 'actblue_transactions', ['organization_id', 'transaction_date'], unique=False)
    op.create_index('ix_actblue_transactions_unattributed', 'actblue_transactions', ['organization_id', 'attributed_at'], unique=False)

    op.create_table(
        'refcode_mappings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('refcode', sa.String(length=255), nullable=False),
        sa.Column('platform', sa.String(length=50), nullable=False, comment='meta, sms, email'),
        sa.Column('campaign_id', sa.String(length=100), nullable=True),
        sa.Column('ad_id', sa.String(length=100), nullable=True),
        sa.Column('creative_id', sa.String(length=100), nullable=True),
        sa.Column('first_seen', sa.Date(), nullable=True, comment='First day the refcode was observed on this ad'),
        sa.Column('last_seen', sa.Date(), nullable=True, comment='Last day the refcode was observed on this ad'),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'refcode', 'ad_id', name='uq_refcode_mapping_org_refcode_ad'),
    )
    op.create_index('ix_refcode_mappings_org_refcode', 'refcode_mappings', ['organization_id', 'refcode'], unique=False)

    # Case-insensitive refcode lookups
    op.execute("""
        CREATE INDEX ix_refcode_mappings_org_refcode_lower
        ON refcode_mappings (organization_id, lower(refcode))
    """)

    op.create_table(
        'attribution_rules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=True, comment='NULL for rules shared by every organization'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('rule_type', sa.String(length=20), nullable=False, comment='prefix, suffix, contains, exact, regex'),
        sa.Column('pattern', sa.String(length=500), nullable=False),
        sa.Column('platform', sa.String(length=50), nullable=False),
        sa.Column('campaign_id', sa.String(length=100), nullable=True),
        sa.Column('confidence_score', sa.Numeric(precision=3, scale=2), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False, comment='Lower values are evaluated first'),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "rule_type IN ('prefix', 'suffix', 'contains', 'exact', 'regex')",
            name='ck_attribution_rules_rule_type',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_attribution_rules_org_priority', 'attribution_rules', ['organization_id', 'priority'], unique=False)

    op.create_table(
        'meta_campaign_spend_daily',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('campaign_id', sa.String(length=100), nullable=False),
        sa.Column('campaign_name', sa.String(length=255), nullable=True),
        sa.Column('ad_id', sa.String(length=100), nullable=True),
        sa.Column('spend_date', sa.Date(), nullable=False),
        sa.Column('spend', sa.Numeric(precision=12, scale=2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'campaign_id', 'spend_date', name='uq_meta_campaign_spend_daily'),
    )
    op.create_index('ix_meta_campaign_spend_org_date', 'meta_campaign_spend_daily', ['organization_id', 'spend_date'], unique=False)


def downgrade() -> None:
    """Drop attribution tables."""
    op.drop_index('ix_meta_campaign_spend_org_date', table_name='meta_campaign_spend_daily')
    op.drop_table('meta_campaign_spend_daily')
    op.drop_index('ix_attribution_rules_org_priority', table_name='attribution_rules')
    op.drop_table('attribution_rules')
    op.execute("DROP INDEX IF EXISTS ix_refcode_mappings_org_refcode_lower")
    op.drop_index('ix_refcode_mappings_org_refcode', table_name='refcode_mappings')
    op.drop_table('refcode_mappings')
    op.drop_index('ix_actblue_transactions_unattributed', table_name='actblue_transactions')
    op.drop_index('ix_actblue_transactions_org_date', table_name='actblue_transactions')
    op.drop_table('actblue_transactions')
