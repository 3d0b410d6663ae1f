"""Repository for attribution rule operations."""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from campaign_intel_etl.attribution.types import RuleRecord
from campaign_intel_etl.models.attribution_rule import AttributionRule


# noinspection PyMethodMayBeStatic
class AttributionRuleRepo:
    """Repository for reading attribution rules."""

    def get_active_rules(self, session: Session, organization_id: str) -> list[AttributionRule]:
        """
        Get active rules for an organization plus the global rules.

        Args:
            session: Database session
            organization_id: Organization ID

        Returns:
            List of AttributionRule rows, organization rules first then by priority
        """
        stmt = (
            select(AttributionRule)
            .where(
                or_(
                    AttributionRule.organization_id == organization_id,
                    AttributionRule.organization_id.is_(None),
                ),
                AttributionRule.is_active.is_(True),
            )
            .order_by(
                AttributionRule.organization_id.is_(None),
                AttributionRule.priority,
                AttributionRule.confidence_score.desc(),
                AttributionRule.name,
            )
        )
        return list(session.execute(stmt).scalars().all())

    def get_active_records(self, session: Session, organization_id: str) -> list[RuleRecord]:
        """
        Load active organization and global rules as plain records.

        Args:
            session: Database session
            organization_id: Organization ID

        Returns:
            List of RuleRecord
        """
        return [
            RuleRecord(
                name=row.name,
                rule_type=row.rule_type,
                pattern=row.pattern,
                platform=row.platform,
                confidence_score=float(row.confidence_score),
                priority=row.priority,
                organization_id=row.organization_id,
                campaign_id=row.campaign_id,
                is_active=row.is_active,
            )
            for row in self.get_active_rules(session, organization_id)
        ]
