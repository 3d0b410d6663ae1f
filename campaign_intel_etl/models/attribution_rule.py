"""Attribution rule model."""

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.base import TimestampMixin


class AttributionRule(TimestampMixin, Base):
    """Administrator-defined refcode pattern rule (tier 2 of the waterfall)."""

    __tablename__ = "attribution_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, comment="NULL for rules shared by every organization"
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    rule_type: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="prefix, suffix, contains, exact, regex"
    )
    pattern: Mapped[str] = mapped_column(String(500), nullable=False)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    campaign_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    confidence_score: Mapped[float] = mapped_column(Numeric(3, 2), nullable=False, default=0.90)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=100, comment="Lower values are evaluated first"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "rule_type IN ('prefix', 'suffix', 'contains', 'exact', 'regex')",
            name="ck_attribution_rules_rule_type",
        ),
        Index("ix_attribution_rules_org_priority", "organization_id", "priority"),
    )

    def __repr__(self) -> str:
        return (
            f"<AttributionRule(name={self.name}, rule_type={self.rule_type}, "
            f"pattern={self.pattern}, priority={self.priority})>"
        )
