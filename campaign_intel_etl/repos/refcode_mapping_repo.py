"""Repository for refcode mapping operations."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_intel_etl.attribution.types import MappingRecord
from campaign_intel_etl.models.refcode_mapping import RefcodeMapping


# noinspection PyMethodMayBeStatic
class RefcodeMappingRepo:
    """Repository for reading refcode mappings."""

    def get_active_records(self, session: Session, organization_id: str) -> list[MappingRecord]:
        """
        Load every active mapping of an organization as plain records.

        Args:
            session: Database session
            organization_id: Organization ID

        Returns:
            List of MappingRecord
        """
        stmt = (
            select(RefcodeMapping)
            .where(
                RefcodeMapping.organization_id == organization_id,
                RefcodeMapping.is_active.is_(True),
            )
            .order_by(RefcodeMapping.refcode, RefcodeMapping.id)
        )
        return [self.to_record(row) for row in session.execute(stmt).scalars().all()]

    def upsert_mapping(
        self,
        session: Session,
        organization_id: str,
        refcode: str,
        platform: str,
        campaign_id: str | None = None,
        ad_id: str | None = None,
        creative_id: str | None = None,
        seen_on: date | None = None,
    ) -> RefcodeMapping:
        """
        Create or refresh a mapping, widening its seen window.

        Args:
            session: Database session
            organization_id: Organization ID
            refcode: Refcode as it appears in the ad URL
            platform: Platform name
            campaign_id: Campaign ID
            ad_id: Ad ID (present when read from a live ad URL)
            creative_id: Creative ID
            seen_on: Day the refcode was observed

        Returns:
            Updated or created RefcodeMapping
        """
        stmt = select(RefcodeMapping).where(
            RefcodeMapping.organization_id == organization_id,
            RefcodeMapping.refcode == refcode,
            RefcodeMapping.ad_id.is_(None) if ad_id is None else RefcodeMapping.ad_id == ad_id,
        )
        mapping = session.execute(stmt).scalar_one_or_none()

        if mapping:
            mapping.platform = platform
            mapping.campaign_id = campaign_id
            mapping.creative_id = creative_id
            mapping.is_active = True
            if seen_on is not None:
                if mapping.first_seen is None or seen_on < mapping.first_seen:
                    mapping.first_seen = seen_on
                if mapping.last_seen is None or seen_on > mapping.last_seen:
                    mapping.last_seen = seen_on
        else:
            mapping = RefcodeMapping(
                organization_id=organization_id,
                refcode=refcode,
                platform=platform,
                campaign_id=campaign_id,
                ad_id=ad_id,
                creative_id=creative_id,
                first_seen=seen_on,
                last_seen=seen_on,
                is_active=True,
            )
            session.add(mapping)

        session.flush()
        return mapping

    def to_record(self, row: RefcodeMapping) -> MappingRecord:
        """Copy a row into an immutable record."""
        return MappingRecord(
            refcode=row.refcode,
            platform=row.platform,
            campaign_id=row.campaign_id,
            ad_id=row.ad_id,
            creative_id=row.creative_id,
            first_seen=row.first_seen,
            last_seen=row.last_seen,
            is_active=row.is_active,
        )
