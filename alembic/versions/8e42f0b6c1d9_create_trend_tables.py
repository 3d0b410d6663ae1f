"""create_trend_tables

Revision ID: 8e42f0b6c1d9
Revises: 3d7a91c4e2b0
Create Date: 2026-09-21 16:05:12.907344

Creates the append-only trend_evidence table and the trend_events table that
the trend recompute job upserts one row per topic into.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e42f0b6c1d9'
down_revision: Union[str, Sequence[str], None] = '3d7a91c4e2b0'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _count(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default='0')


def _metric(name: str) -> sa.Column:
    return sa.Column(name, sa.Float(), nullable=False, server_default='0')


def _flag(name: str) -> sa.Column:
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false())


def upgrade() -> None:
    """Create trend tables."""
    op.create_table(
        'trend_evidence',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('topic_key', sa.String(length=255), nullable=False, comment='Canonical lower-case topic key'),
        sa.Column('document_id', sa.String(length=255), nullable=False, comment='Article/post id (or content hash)'),
        sa.Column('source', sa.String(length=255), nullable=True, comment='Publication or account, e.g. apnews.com'),
        sa.Column('source_type', sa.String(length=30), nullable=False, comment='rss, google_news, bluesky'),
        sa.Column('source_tier', sa.String(length=10), nullable=True, comment='tier1, tier2, tier3 or NULL when unclassified'),
        sa.Column('observed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sentiment', sa.Float(), nullable=True),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('label', sa.String(length=255), nullable=True, comment='Display label proposed by topic extraction'),
        sa.Column('is_event_phrase', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('label_quality_hint', sa.String(length=30), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('topic_key', 'document_id', name='uq_trend_evidence_topic_document'),
    )
    op.create_index('ix_trend_evidence_observed_at', 'trend_evidence', ['observed_at'], unique=False)
    op.create_index('ix_trend_evidence_topic_observed', 'trend_evidence', ['topic_key', 'observed_at'], unique=False)

    op.create_table(
        'trend_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_key', sa.String(length=255), nullable=False),
        sa.Column('event_title', sa.String(length=255), nullable=False),
        sa.Column('label_quality', sa.String(length=30), nullable=False, server_default='entity_only', comment='event_phrase, entity_only, fallback_generated'),
        sa.Column('label_source', sa.String(length=50), nullable=True),
        _count('current_1h'),
        _count('current_6h'),
        _count('current_24h'),
        _count('current_7d'),
        _metric('baseline_7d'),
        _metric('baseline_stddev'),
        _metric('velocity'),
        _metric('momentum'),
        _metric('acceleration'),
        _metric('z_score'),
        _count('evidence_count'),
        _count('source_count'),
        _count('news_source_count'),
        _count('social_source_count'),
        _count('tier1_count'),
        _count('tier2_count'),
        _count('tier3_count'),
        _flag('has_tier12_corroboration'),
        _flag('is_tier3_only'),
        _metric('weighted_evidence_score'),
        _flag('is_trending'),
        _flag('is_breaking'),
        sa.Column('breaking_path', sa.String(length=20), nullable=True),
        sa.Column('trend_stage', sa.String(length=20), nullable=False, server_default='stable'),
        sa.Column('freshness', sa.String(length=20), nullable=False, server_default='stale'),
        _metric('confidence_score'),
        _metric('quality_score'),
        _metric('rank_score'),
        sa.Column('sentiment_avg', sa.Float(), nullable=True),
        sa.Column('sentiment_label', sa.String(length=20), nullable=True),
        sa.Column('top_headline', sa.Text(), nullable=True),
        sa.Column('first_seen_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('calculated_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_key'),
    )
    op.create_index('ix_trend_events_trending', 'trend_events', ['is_trending', 'last_seen_at'], unique=False)
    op.create_index('ix_trend_events_breaking', 'trend_events', ['is_breaking', 'rank_score'], unique=False)


def downgrade() -> None:
    """Drop trend tables."""
    op.drop_index('ix_trend_events_breaking', table_name='trend_events')
    op.drop_index('ix_trend_events_trending', table_name='trend_events')
    op.drop_table('trend_events')
    op.drop_index('ix_trend_evidence_topic_observed', table_name='trend_evidence')
    op.drop_index('ix_trend_evidence_observed_at', table_name='trend_evidence')
    op.drop_table('trend_evidence')
