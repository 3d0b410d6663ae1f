"""Refcode mapping model."""

from datetime import date

from sqlalchemy import Boolean, Date, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.base import TimestampMixin


class RefcodeMapping(TimestampMixin, Base):
    """
    Maps a refcode to the platform, campaign, ad and creative that used it.

    Maintained by the ad-platform sync. A mapping with an ``ad_id`` was read off
    a live ad's destination URL, so it is treated as verified.
    """

    __tablename__ = "refcode_mappings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)
    refcode: Mapped[str] = mapped_column(String(255), nullable=False)
    platform: Mapped[str] = mapped_column(String(50), nullable=False, comment="meta, sms, email")
    campaign_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ad_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    creative_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    first_seen: Mapped[date | None] = mapped_column(
        Date, nullable=True, comment="First day the refcode was observed on this ad"
    )
    last_seen: Mapped[date | None] = mapped_column(
        Date, nullable=True, comment="Last day the refcode was observed on this ad"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "refcode", "ad_id", name="uq_refcode_mapping_org_refcode_ad"
        ),
        Index("ix_refcode_mappings_org_refcode", "organization_id", "refcode"),
    )

    def __repr__(self) -> str:
        return (
            f"<RefcodeMapping(refcode={self.refcode}, platform={self.platform}, "
            f"ad_id={self.ad_id}, campaign_id={self.campaign_id})>"
        )
