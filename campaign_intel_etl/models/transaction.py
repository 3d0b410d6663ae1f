"""ActBlue transaction model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.base import TimestampMixin


class ActBlueTransaction(TimestampMixin, Base):
    """
    A donation or refund received through ActBlue.

    Rows are written by the ingestion webhook and never change afterwards,
    except for the attribution columns which the attribution backfill fills in.
    """

    __tablename__ = "actblue_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(
        String(36), nullable=False, comment="Owning client organization (UUID)"
    )
    transaction_id: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="ActBlue receipt/line-item identifier"
    )
    amount: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    net_amount: Mapped[float | None] = mapped_column(Numeric(12, 2), nullable=True)
    fee: Mapped[float | None] = mapped_column(Numeric(12, 2), nullable=True)
    transaction_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    transaction_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="donation", comment="donation, refund"
    )
    donor_email_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    donor_phone_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurring_state: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Marketing signals
    refcode: Mapped[str | None] = mapped_column(String(255), nullable=True)
    click_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    fbclid: Mapped[str | None] = mapped_column(String(512), nullable=True)
    contribution_form: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Attribution metadata (the only mutable fields)
    attributed_platform: Mapped[str | None] = mapped_column(String(50), nullable=True)
    attribution_confidence: Mapped[float | None] = mapped_column(Numeric(3, 2), nullable=True)
    attribution_level: Mapped[str | None] = mapped_column(
        String(20), nullable=True, comment="deterministic, high, medium, low, none"
    )
    attribution_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    attribution_tier: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attributed_campaign_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attributed_ad_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attributed_creative_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attribution_rule_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attribution_channel_hint: Mapped[str | None] = mapped_column(
        String(30), nullable=True, comment="Informational SMS channel detection"
    )
    attributed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "transaction_id", name="uq_actblue_transaction"),
        Index("ix_actblue_transactions_org_date", "organization_id", "transaction_date"),
        Index("ix_actblue_transactions_unattributed", "organization_id", "attributed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ActBlueTransaction(id={self.id}, transaction_id={self.transaction_id}, "
            f"amount={self.amount}, refcode={self.refcode})>"
        )
