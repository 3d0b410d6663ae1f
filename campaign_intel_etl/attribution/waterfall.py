"""
Attribution Waterfall

Resolves a donation's marketing source by evaluating tiers in strict order and
returning the first match:

- Tier 1 (deterministic, 1.00): click identifier, then verified refcode mapping (with ad)
- Tier 2 (high, 0.85-0.95): administrator pattern rules, organization before global
- Tier 3 (medium, 0.60-0.80): refcode mapping without ad, then trigram fuzzy match
- Tier 4 (low, 0.40): highest-spend Meta campaign active on the transaction date
- Tier 0: unattributed
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date

from campaign_intel_etl.attribution.channel import detect_sms_channel
from campaign_intel_etl.attribution.similarity import trigram_similarity
from campaign_intel_etl.attribution.snapshot import AttributionSnapshot
from campaign_intel_etl.attribution.types import (
    NO_MATCH,
    AttributionMethod,
    AttributionResult,
    MappingRecord,
    TransactionInput,
)

logger = logging.getLogger(__name__)

META_PLATFORM = "meta"
UNVERIFIED_MAPPING_CONFIDENCE = 0.75
TEMPORAL_CORRELATION_CONFIDENCE = 0.40

TierStrategy = Callable[[AttributionSnapshot, TransactionInput], AttributionResult | None]


def select_mapping(candidates: list[MappingRecord], day: date) -> MappingRecord | None:
    """
    Pick one mapping when a refcode has several (e.g. reassigned between campaigns).

    Mappings whose seen window covers the transaction day win, then the most
    recently seen; campaign and ad ids break remaining ties.

    Args:
        candidates: Active mappings sharing a refcode
        day: Transaction calendar date

    Returns:
        Chosen mapping, or None if there are no candidates
    """
    if not candidates:
        return None

    return min(
        candidates,
        key=lambda m: (
            not m.covers(day),
            -(m.last_seen or date.min).toordinal(),
            m.campaign_id or "",
            m.ad_id or "",
        ),
    )


def _mapping_result(
    mapping: MappingRecord,
    confidence: float,
    method: AttributionMethod,
    tier: int,
    rule_name: str,
) -> AttributionResult:
    return AttributionResult.create(
        platform=mapping.platform,
        confidence_score=confidence,
        method=method,
        tier=tier,
        matched_ad_id=mapping.ad_id,
        matched_campaign_id=mapping.campaign_id,
        matched_creative_id=mapping.creative_id,
        rule_name=rule_name,
    )


def match_click_id(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult | None:
    """Tier 1a: any click identifier is unambiguous Meta attribution."""
    if not transaction.has_click_identifier:
        return None

    return AttributionResult.create(
        platform=META_PLATFORM,
        confidence_score=1.0,
        method=AttributionMethod.CLICK_ID,
        tier=1,
        rule_name="Click ID Match",
    )


def match_verified_refcode(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult | None:
    """Tier 1b: exact refcode match against a mapping that carries an ad id."""
    refcode_key = transaction.refcode_key
    if not refcode_key:
        return None

    candidates = [m for m in snapshot.mappings_for(refcode_key) if m.has_ad]
    mapping = select_mapping(candidates, transaction.calendar_date)
    if mapping is None:
        return None

    return _mapping_result(
        mapping, 1.0, AttributionMethod.REFCODE_EXACT_WITH_AD, 1, "Exact Refcode Mapping"
    )


def match_pattern_rule(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult | None:
    """Tier 2: first matching pattern rule in evaluation order."""
    refcode_key = transaction.refcode_key
    if not refcode_key:
        return None

    for compiled in snapshot.rules:
        try:
            matched = compiled.matches(refcode_key)
        except Exception as e:
            # A single broken rule must not abort resolution
            logger.warning(f"Attribution rule '{compiled.rule.name}' failed to evaluate: {e}")
            continue

        if matched:
            return AttributionResult.create(
                platform=compiled.rule.platform,
                confidence_score=compiled.confidence,
                method=AttributionMethod.PATTERN_RULE,
                tier=2,
                matched_campaign_id=compiled.rule.campaign_id,
                rule_name=compiled.rule.name,
                is_global_rule=compiled.is_global,
            )

    return None


def match_unverified_refcode(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult | None:
    """Tier 3a: exact refcode match against a mapping without an ad id."""
    refcode_key = transaction.refcode_key
    if not refcode_key:
        return None

    candidates = [m for m in snapshot.mappings_for(refcode_key) if not m.has_ad]
    mapping = select_mapping(candidates, transaction.calendar_date)
    if mapping is None:
        return None

    return _mapping_result(
        mapping,
        UNVERIFIED_MAPPING_CONFIDENCE,
        AttributionMethod.REFCODE_MAPPING_NO_AD,
        3,
        "Refcode Mapping (No Ad ID)",
    )


def match_fuzzy_refcode(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult | None:
    """Tier 3b: best trigram similarity above the threshold (typo tolerance)."""
    refcode_key = transaction.refcode_key
    if not refcode_key:
        return None

    best_key = None
    best_similarity = 0.0
    for known_key in sorted(snapshot.mappings_by_refcode):
        similarity = trigram_similarity(known_key, refcode_key)
        if similarity > snapshot.fuzzy_threshold and similarity > best_similarity:
            best_key = known_key
            best_similarity = similarity

    if best_key is None:
        return None

    mapping = select_mapping(snapshot.mappings_for(best_key), transaction.calendar_date)
    if mapping is None:
        return None

    return _mapping_result(
        mapping,
        min(best_similarity, snapshot.fuzzy_confidence_cap),
        AttributionMethod.FUZZY_MATCH,
        3,
        f"Fuzzy Match: {mapping.refcode}",
    )


def match_active_campaign(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult | None:
    """Tier 4: highest-spend Meta campaign with spend on the transaction date."""
    spending = [
        row
        for row in snapshot.spend_by_date.get(transaction.calendar_date, [])
        if row.spend > 0
    ]
    if not spending:
        return None

    top = min(spending, key=lambda row: (-row.spend, row.campaign_id))
    return AttributionResult.create(
        platform=META_PLATFORM,
        confidence_score=TEMPORAL_CORRELATION_CONFIDENCE,
        method=AttributionMethod.TEMPORAL_CORRELATION,
        tier=4,
        matched_ad_id=top.ad_id,
        matched_campaign_id=top.campaign_id,
        rule_name=f"Active Campaign: {top.campaign_name or 'Unknown'}",
    )


# Order is the contract: earlier strategies preempt later ones
WATERFALL: tuple[TierStrategy, ...] = (
    match_click_id,
    match_verified_refcode,
    match_pattern_rule,
    match_unverified_refcode,
    match_fuzzy_refcode,
    match_active_campaign,
)


def resolve_attribution(
    snapshot: AttributionSnapshot, transaction: TransactionInput
) -> AttributionResult:
    """
    Resolve one transaction's marketing source.

    Never raises for missing or malformed signals: a transaction with nothing
    to go on resolves to the unattributed result.

    Args:
        snapshot: Mapping/rule/spend state of the transaction's organization
        transaction: Transaction to attribute

    Returns:
        Exactly one attribution result
    """
    result = NO_MATCH
    for strategy in WATERFALL:
        matched = strategy(snapshot, transaction)
        if matched is not None:
            result = matched
            break

    channel_hint = detect_sms_channel(transaction.refcode, transaction.contribution_form)
    if channel_hint is not None:
        result = replace(result, channel_hint=channel_hint)
    return result


def batch_attribute(
    snapshot: AttributionSnapshot, transactions: Iterable[TransactionInput]
) -> list[AttributionResult]:
    """
    Resolve many transactions independently against the same snapshot.

    Args:
        snapshot: Mapping/rule/spend state
        transactions: Transactions to attribute

    Returns:
        One result per transaction, in input order
    """
    return [resolve_attribution(snapshot, transaction) for transaction in transactions]
