"""Meta campaign daily spend model."""

from datetime import date

from sqlalchemy import Date, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.base import TimestampMixin


class MetaCampaignSpendDaily(TimestampMixin, Base):
    """Daily spend per Meta campaign, used only for temporal-correlation attribution."""

    __tablename__ = "meta_campaign_spend_daily"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)
    campaign_id: Mapped[str] = mapped_column(String(100), nullable=False)
    campaign_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ad_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    spend_date: Mapped[date] = mapped_column(Date, nullable=False)
    spend: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "campaign_id", "spend_date", name="uq_meta_campaign_spend_daily"
        ),
        Index("ix_meta_campaign_spend_org_date", "organization_id", "spend_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<MetaCampaignSpendDaily(campaign_id={self.campaign_id}, "
            f"spend_date={self.spend_date}, spend={self.spend})>"
        )
