"""Point-in-time view of the mapping, rule and spend state for one organization."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from campaign_intel_etl.attribution.rules import CompiledRule, compile_rules
from campaign_intel_etl.attribution.types import MappingRecord, RuleRecord, SpendRecord

DEFAULT_FUZZY_THRESHOLD = 0.6
DEFAULT_FUZZY_CONFIDENCE_CAP = 0.80


@dataclass
class AttributionSnapshot:
    """
    Everything the waterfall reads, loaded once and never mutated while resolving.

    Resolving against the same snapshot is deterministic, which is what makes
    single and batch attribution interchangeable.
    """

    organization_id: str
    mappings_by_refcode: dict[str, list[MappingRecord]] = field(default_factory=dict)
    rules: list[CompiledRule] = field(default_factory=list)
    spend_by_date: dict[date, list[SpendRecord]] = field(default_factory=dict)
    rule_errors: list[str] = field(default_factory=list)
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    fuzzy_confidence_cap: float = DEFAULT_FUZZY_CONFIDENCE_CAP

    @classmethod
    def build(
        cls,
        organization_id: str,
        mappings: Iterable[MappingRecord] = (),
        rules: Iterable[RuleRecord] = (),
        spend: Iterable[SpendRecord] = (),
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
        fuzzy_confidence_cap: float = DEFAULT_FUZZY_CONFIDENCE_CAP,
    ) -> "AttributionSnapshot":
        """
        Index raw records for resolution.

        Inactive mappings and rules are dropped; broken rules are recorded in
        ``rule_errors`` instead of raising.

        Args:
            organization_id: Organization the records belong to
            mappings: Refcode mappings of the organization
            rules: Organization rules plus global rules
            spend: Daily campaign spend rows
            fuzzy_threshold: Minimum trigram similarity for a fuzzy match
            fuzzy_confidence_cap: Upper bound for fuzzy match confidence

        Returns:
            Ready-to-use snapshot
        """
        by_refcode: dict[str, list[MappingRecord]] = defaultdict(list)
        for mapping in mappings:
            key = (mapping.refcode or "").strip().lower()
            if mapping.is_active and key:
                by_refcode[key].append(mapping)

        by_date: dict[date, list[SpendRecord]] = defaultdict(list)
        for row in spend:
            by_date[row.spend_date].append(row)

        compiled, errors = compile_rules(rules)

        return cls(
            organization_id=organization_id,
            mappings_by_refcode=dict(by_refcode),
            rules=compiled,
            spend_by_date=dict(by_date),
            rule_errors=errors,
            fuzzy_threshold=fuzzy_threshold,
            fuzzy_confidence_cap=fuzzy_confidence_cap,
        )

    @property
    def has_spend_data(self) -> bool:
        return any(row.spend > 0 for rows in self.spend_by_date.values() for row in rows)

    def mappings_for(self, refcode_key: str) -> list[MappingRecord]:
        return self.mappings_by_refcode.get(refcode_key, [])
