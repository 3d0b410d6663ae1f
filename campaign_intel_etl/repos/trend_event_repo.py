"""Repository for trend event operations."""

import logging
from datetime import UTC, datetime

from sqlalchemy import or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from campaign_intel_etl.models.trend_event import TrendEvent
from campaign_intel_etl.trends.types import TrendEventResult
from campaign_intel_etl.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def _dialect_insert(session: Session):
    """INSERT construct supporting ON CONFLICT for the session's database."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


# noinspection PyMethodMayBeStatic
class TrendEventRepo:
    """Repository for upserting and reading trend events."""

    def get_by_key(
        self, session: Session, event_key: str, for_update: bool = False
    ) -> TrendEvent | None:
        """
        Get a trend event by topic key.

        Args:
            session: Database session
            event_key: Topic key
            for_update: Lock the row until the transaction ends

        Returns:
            TrendEvent if found, None otherwise
        """
        stmt = select(TrendEvent).where(TrendEvent.event_key == event_key)
        if for_update:
            stmt = stmt.with_for_update()
        return session.execute(stmt).scalar_one_or_none()

    def upsert_event(self, session: Session, result: TrendEventResult) -> TrendEvent | None:
        """
        Create or overwrite a topic's trend event.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE so the first write of
        a new topic cannot race another worker into a duplicate key. The
        update only applies when the stored row was calculated at or before
        this result, so a slow recompute never overwrites a newer one.

        Args:
            session: Database session
            result: Recomputed trend state

        Returns:
            Updated or created TrendEvent, or None if the stored row is newer
        """
        values = result.to_row()
        insert = _dialect_insert(session)

        stmt = insert(TrendEvent).values(**values)
        update_values = {
            column: stmt.excluded[column] for column in values if column != "event_key"
        }
        update_values["updated_at"] = datetime.now(UTC)
        stmt = stmt.on_conflict_do_update(
            index_elements=["event_key"],
            set_=update_values,
            where=or_(
                TrendEvent.calculated_at.is_(None),
                TrendEvent.calculated_at <= stmt.excluded.calculated_at,
            ),
        ).returning(TrendEvent.id)

        event_id = session.execute(stmt).scalar_one_or_none()
        if event_id is None:
            logger.info(
                f"Skipping stale trend result for {result.event_key} "
                f"calculated at {result.calculated_at}"
            )
            return None

        # Core statements bypass the identity map, reload whatever it holds
        reload = (
            select(TrendEvent)
            .where(TrendEvent.id == event_id)
            .execution_options(populate_existing=True)
        )
        return session.execute(reload).scalar_one()

    def mark_inactive(
        self, session: Session, event_key: str, calculated_at: datetime
    ) -> TrendEvent | None:
        """
        Clear trending state of an event whose evidence has aged out.

        Args:
            session: Database session
            event_key: Topic key
            calculated_at: Recompute time

        Returns:
            Updated TrendEvent, or None if it does not exist
        """
        event = self.get_by_key(session, event_key, for_update=True)
        if event is None:
            return None
        if event.calculated_at and ensure_utc(event.calculated_at) > ensure_utc(calculated_at):
            logger.info(
                f"Skipping stale decay of {event_key}, row calculated at {event.calculated_at}"
            )
            return event

        event.is_trending = False
        event.is_breaking = False
        event.breaking_path = None
        event.current_1h = 0
        event.current_6h = 0
        event.current_24h = 0
        event.current_7d = 0
        event.velocity = 0.0
        event.momentum = 0.0
        event.acceleration = 0.0
        event.z_score = 0.0
        event.evidence_count = 0
        event.source_count = 0
        event.news_source_count = 0
        event.social_source_count = 0
        event.tier1_count = 0
        event.tier2_count = 0
        event.tier3_count = 0
        event.has_tier12_corroboration = False
        event.is_tier3_only = False
        event.weighted_evidence_score = 0.0
        event.confidence_score = 0.0
        event.quality_score = 0.0
        event.rank_score = 0.0
        event.trend_stage = "stable"
        event.freshness = "stale"
        event.calculated_at = calculated_at
        event.updated_at = datetime.now(UTC)

        session.flush()
        return event

    def get_flagged_keys(self, session: Session) -> list[str]:
        """
        Keys of events currently flagged trending or breaking.

        Args:
            session: Database session

        Returns:
            List of topic keys
        """
        stmt = (
            select(TrendEvent.event_key)
            .where(or_(TrendEvent.is_trending.is_(True), TrendEvent.is_breaking.is_(True)))
            .order_by(TrendEvent.event_key)
        )
        return list(session.execute(stmt).scalars().all())

    def get_active(
        self, session: Session, since: datetime, limit: int = 50, breaking_only: bool = False
    ) -> list[TrendEvent]:
        """
        Trending events seen since a cutoff, best ranked first.

        Args:
            session: Database session
            since: Minimum last_seen_at
            limit: Maximum rows
            breaking_only: Only return breaking events

        Returns:
            List of TrendEvent
        """
        stmt = select(TrendEvent).where(
            TrendEvent.is_trending.is_(True),
            TrendEvent.last_seen_at >= since,
        )
        if breaking_only:
            stmt = stmt.where(TrendEvent.is_breaking.is_(True))

        stmt = stmt.order_by(TrendEvent.rank_score.desc(), TrendEvent.event_key).limit(limit)
        return list(session.execute(stmt).scalars().all())
