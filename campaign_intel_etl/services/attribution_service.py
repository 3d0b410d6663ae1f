"""Database-backed attribution service."""

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy.orm import Session

from campaign_intel_etl.attribution.access import AllowAllAccessPolicy, OrganizationAccessPolicy
from campaign_intel_etl.attribution.snapshot import AttributionSnapshot
from campaign_intel_etl.attribution.summary import AttributionSummary, summarize_attribution
from campaign_intel_etl.attribution.types import AttributionResult, TransactionInput
from campaign_intel_etl.attribution.waterfall import batch_attribute, resolve_attribution
from campaign_intel_etl.config import get_settings
from campaign_intel_etl.models.transaction import ActBlueTransaction
from campaign_intel_etl.repos.attribution_rule_repo import AttributionRuleRepo
from campaign_intel_etl.repos.campaign_spend_repo import CampaignSpendRepo
from campaign_intel_etl.repos.refcode_mapping_repo import RefcodeMappingRepo
from campaign_intel_etl.repos.transaction_repo import TransactionRepo

logger = logging.getLogger(__name__)


class AttributionService:
    """
    Loads attribution state through the repositories and runs the waterfall.

    Reads never write: results are only persisted when ``attach`` is called.
    """

    def __init__(
        self,
        session: Session,
        access_policy: OrganizationAccessPolicy | None = None,
        fuzzy_threshold: float | None = None,
        fuzzy_confidence_cap: float | None = None,
    ):
        """
        Initialize service.

        Args:
            session: SQLAlchemy session (the caller owns the transaction)
            access_policy: Organization access policy, allow-all by default
            fuzzy_threshold: Override for the fuzzy similarity threshold
            fuzzy_confidence_cap: Override for the fuzzy confidence cap
        """
        self.session = session
        self.access_policy = access_policy or AllowAllAccessPolicy()
        self.fuzzy_threshold = fuzzy_threshold
        self.fuzzy_confidence_cap = fuzzy_confidence_cap
        self.mapping_repo = RefcodeMappingRepo()
        self.rule_repo = AttributionRuleRepo()
        self.spend_repo = CampaignSpendRepo()
        self.transaction_repo = TransactionRepo()

    def _fuzzy_settings(self) -> tuple[float, float]:
        if self.fuzzy_threshold is not None and self.fuzzy_confidence_cap is not None:
            return self.fuzzy_threshold, self.fuzzy_confidence_cap
        settings = get_settings()
        return (
            self.fuzzy_threshold
            if self.fuzzy_threshold is not None
            else settings.attribution_fuzzy_threshold,
            self.fuzzy_confidence_cap
            if self.fuzzy_confidence_cap is not None
            else settings.attribution_fuzzy_confidence_cap,
        )

    def load_snapshot(self, organization_id: str, spend_dates: Iterable[date]) -> AttributionSnapshot:
        """
        Load mappings, rules and spend for an organization.

        Args:
            organization_id: Organization ID
            spend_dates: Calendar days whose campaign spend is needed

        Returns:
            AttributionSnapshot

        Raises:
            OrganizationAccessError: If the policy denies access
        """
        self.access_policy.ensure_access(organization_id)
        fuzzy_threshold, fuzzy_cap = self._fuzzy_settings()

        snapshot = AttributionSnapshot.build(
            organization_id=organization_id,
            mappings=self.mapping_repo.get_active_records(self.session, organization_id),
            rules=self.rule_repo.get_active_records(self.session, organization_id),
            spend=self.spend_repo.get_spend_records(self.session, organization_id, spend_dates),
            fuzzy_threshold=fuzzy_threshold,
            fuzzy_confidence_cap=fuzzy_cap,
        )
        logger.debug(
            f"Loaded attribution snapshot for {organization_id}: "
            f"{len(snapshot.mappings_by_refcode)} refcodes, {len(snapshot.rules)} rules, "
            f"{len(snapshot.spend_by_date)} spend days"
        )
        return snapshot

    def attribute(self, transaction: TransactionInput) -> AttributionResult:
        """
        Attribute a single transaction.

        Args:
            transaction: Transaction to attribute

        Returns:
            AttributionResult
        """
        snapshot = self.load_snapshot(transaction.organization_id, [transaction.calendar_date])
        return resolve_attribution(snapshot, transaction)

    def attribute_transactions(
        self, organization_id: str, transactions: Sequence[TransactionInput]
    ) -> list[AttributionResult]:
        """
        Attribute many transactions of one organization.

        Args:
            organization_id: Organization ID
            transactions: Transactions to attribute

        Returns:
            One result per transaction, in input order

        Raises:
            ValueError: If a transaction belongs to another organization
        """
        foreign = [t for t in transactions if t.organization_id != organization_id]
        if foreign:
            raise ValueError(
                f"{len(foreign)} transactions do not belong to organization {organization_id}"
            )

        snapshot = self.load_snapshot(organization_id, {t.calendar_date for t in transactions})
        return batch_attribute(snapshot, transactions)

    def attach(
        self, transaction: ActBlueTransaction, result: AttributionResult
    ) -> ActBlueTransaction:
        """
        Persist an attribution result onto its transaction.

        Args:
            transaction: Transaction row
            result: Result to store

        Returns:
            Updated ActBlueTransaction
        """
        return self.transaction_repo.attach_attribution(self.session, transaction, result)

    def summarize(self, organization_id: str, start_date: date, end_date: date) -> AttributionSummary:
        """
        Summarize attribution of donations in a date range.

        Results are recomputed from the current mapping and rule state rather
        than read back from stored columns.

        Args:
            organization_id: Organization ID
            start_date: First day (inclusive)
            end_date: Last day (inclusive)

        Returns:
            AttributionSummary

        Raises:
            ValueError: If start_date is after end_date
            OrganizationAccessError: If the policy denies access
        """
        self.access_policy.ensure_access(organization_id)
        rows = self.transaction_repo.get_donations_in_range(
            self.session, organization_id, start_date, end_date
        )
        inputs = [self.transaction_repo.to_input(row) for row in rows]

        snapshot = self.load_snapshot(organization_id, {t.calendar_date for t in inputs})
        results = batch_attribute(snapshot, inputs)

        summary = summarize_attribution(
            results,
            spend_available=snapshot.has_spend_data,
            rule_errors=snapshot.rule_errors,
        )
        logger.info(
            f"Attribution summary for {organization_id} {start_date}..{end_date}: "
            f"{summary.total} donations, {len(summary.warnings)} warnings"
        )
        return summary
