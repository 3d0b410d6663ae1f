"""Repository for ActBlue transaction operations."""

from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_intel_etl.attribution.types import AttributionResult, TransactionInput
from campaign_intel_etl.models.transaction import ActBlueTransaction


def _range_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Half-open [start, end + 1 day) bounds in UTC."""
    if start_date > end_date:
        raise ValueError(f"start_date {start_date} is after end_date {end_date}")
    start = datetime.combine(start_date, time.min, tzinfo=UTC)
    end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)
    return start, end


# noinspection PyMethodMayBeStatic
class TransactionRepo:
    """Repository for reading transactions and writing their attribution."""

    def get_unattributed(
        self,
        session: Session,
        organization_id: str,
        batch_size: int = 1000,
        after_id: int = 0,
        start_date: date | None = None,
        end_date: date | None = None,
        include_attributed: bool = False,
    ) -> list[ActBlueTransaction]:
        """
        Get the next page of transactions to attribute (keyset pagination on id).

        Args:
            session: Database session
            organization_id: Organization ID
            batch_size: Maximum rows to return
            after_id: Return rows with id greater than this
            start_date: Optional first transaction day
            end_date: Optional last transaction day
            include_attributed: Also return rows that already have attribution

        Returns:
            List of ActBlueTransaction
        """
        stmt = select(ActBlueTransaction).where(
            ActBlueTransaction.organization_id == organization_id,
            ActBlueTransaction.id > after_id,
        )

        if not include_attributed:
            stmt = stmt.where(ActBlueTransaction.attributed_at.is_(None))

        if start_date and end_date:
            start, end = _range_bounds(start_date, end_date)
            stmt = stmt.where(
                ActBlueTransaction.transaction_date >= start,
                ActBlueTransaction.transaction_date < end,
            )

        stmt = stmt.order_by(ActBlueTransaction.id).limit(batch_size)
        return list(session.execute(stmt).scalars().all())

    def get_by_ids(
        self, session: Session, organization_id: str, ids: list[int]
    ) -> list[ActBlueTransaction]:
        """
        Get an organization's transactions by primary key.

        Args:
            session: Database session
            organization_id: Organization ID
            ids: Primary keys

        Returns:
            List of ActBlueTransaction ordered by id
        """
        if not ids:
            return []
        stmt = (
            select(ActBlueTransaction)
            .where(
                ActBlueTransaction.organization_id == organization_id,
                ActBlueTransaction.id.in_(ids),
            )
            .order_by(ActBlueTransaction.id)
        )
        return list(session.execute(stmt).scalars().all())

    def get_donations_in_range(
        self, session: Session, organization_id: str, start_date: date, end_date: date
    ) -> list[ActBlueTransaction]:
        """
        Get donations (refunds excluded) in [start_date, end_date].

        Args:
            session: Database session
            organization_id: Organization ID
            start_date: First day (inclusive)
            end_date: Last day (inclusive)

        Returns:
            List of ActBlueTransaction

        Raises:
            ValueError: If start_date is after end_date
        """
        start, end = _range_bounds(start_date, end_date)
        stmt = (
            select(ActBlueTransaction)
            .where(
                ActBlueTransaction.organization_id == organization_id,
                ActBlueTransaction.transaction_type == "donation",
                ActBlueTransaction.transaction_date >= start,
                ActBlueTransaction.transaction_date < end,
            )
            .order_by(ActBlueTransaction.transaction_date, ActBlueTransaction.id)
        )
        return list(session.execute(stmt).scalars().all())

    def attach_attribution(
        self, session: Session, transaction: ActBlueTransaction, result: AttributionResult
    ) -> ActBlueTransaction:
        """
        Write attribution metadata onto a transaction.

        Only the attribution columns are touched.

        Args:
            session: Database session
            transaction: Transaction row
            result: Attribution result to store

        Returns:
            Updated ActBlueTransaction
        """
        transaction.attributed_platform = result.platform
        transaction.attribution_confidence = result.confidence_score
        transaction.attribution_level = result.confidence_level
        transaction.attribution_method = result.method
        transaction.attribution_tier = result.tier
        transaction.attributed_campaign_id = result.matched_campaign_id
        transaction.attributed_ad_id = result.matched_ad_id
        transaction.attributed_creative_id = result.matched_creative_id
        transaction.attribution_rule_name = result.rule_name
        transaction.attribution_channel_hint = result.channel_hint
        transaction.attributed_at = datetime.now(UTC)

        session.flush()
        return transaction

    def to_input(self, transaction: ActBlueTransaction) -> TransactionInput:
        """Copy the attribution-relevant fields of a row."""
        return TransactionInput(
            organization_id=transaction.organization_id,
            transaction_date=transaction.transaction_date,
            refcode=transaction.refcode,
            click_id=transaction.click_id,
            fbclid=transaction.fbclid,
            contribution_form=transaction.contribution_form,
            transaction_id=transaction.transaction_id,
        )
