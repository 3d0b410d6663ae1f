"""Repository for Meta campaign daily spend."""

from collections.abc import Iterable
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_intel_etl.attribution.types import SpendRecord
from campaign_intel_etl.models.campaign_spend import MetaCampaignSpendDaily


# noinspection PyMethodMayBeStatic
class CampaignSpendRepo:
    """Repository for reading daily campaign spend."""

    def get_spend_records(
        self, session: Session, organization_id: str, spend_dates: Iterable[date]
    ) -> list[SpendRecord]:
        """
        Load spend rows with positive spend for the given days.

        Args:
            session: Database session
            organization_id: Organization ID
            spend_dates: Calendar days to load

        Returns:
            List of SpendRecord
        """
        days = sorted(set(spend_dates))
        if not days:
            return []

        stmt = (
            select(MetaCampaignSpendDaily)
            .where(
                MetaCampaignSpendDaily.organization_id == organization_id,
                MetaCampaignSpendDaily.spend_date.in_(days),
                MetaCampaignSpendDaily.spend > 0,
            )
            .order_by(MetaCampaignSpendDaily.spend_date, MetaCampaignSpendDaily.campaign_id)
        )
        return [
            SpendRecord(
                campaign_id=row.campaign_id,
                spend_date=row.spend_date,
                spend=float(row.spend),
                campaign_name=row.campaign_name,
                ad_id=row.ad_id,
            )
            for row in session.execute(stmt).scalars().all()
        ]
