"""Compilation and matching of administrator pattern rules."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from campaign_intel_etl.attribution.types import RuleRecord

logger = logging.getLogger(__name__)

RULE_TYPES = ("prefix", "suffix", "contains", "exact", "regex")

# Pattern rules sit in the "high" confidence bracket
RULE_CONFIDENCE_MIN = 0.85
RULE_CONFIDENCE_MAX = 0.95


@dataclass(frozen=True)
class CompiledRule:
    """A validated rule ready for matching."""

    rule: RuleRecord
    confidence: float
    regex: re.Pattern[str] | None = None

    @property
    def is_global(self) -> bool:
        return self.rule.is_global

    def matches(self, refcode_key: str) -> bool:
        """
        Check a lower-cased refcode against the rule.

        Args:
            refcode_key: Trimmed, lower-cased refcode

        Returns:
            True if the rule's pattern matches
        """
        if not refcode_key:
            return False

        pattern = self.rule.pattern.strip().lower()
        rule_type = self.rule.rule_type
        if rule_type == "prefix":
            return refcode_key.startswith(pattern)
        if rule_type == "suffix":
            return refcode_key.endswith(pattern)
        if rule_type == "contains":
            return pattern in refcode_key
        if rule_type == "exact":
            return refcode_key == pattern
        return self.regex is not None and self.regex.search(refcode_key) is not None


def compile_rule(rule: RuleRecord) -> CompiledRule:
    """
    Validate a rule and precompile its pattern.

    Args:
        rule: Rule to compile

    Returns:
        Compiled rule with confidence clamped into the high bracket

    Raises:
        ValueError: If the rule type is unknown, the pattern is empty
            or a regex pattern does not compile
    """
    if rule.rule_type not in RULE_TYPES:
        raise ValueError(f"Rule '{rule.name}' has unknown rule_type '{rule.rule_type}'")

    if not rule.pattern or not rule.pattern.strip():
        raise ValueError(f"Rule '{rule.name}' has an empty pattern")

    regex = None
    if rule.rule_type == "regex":
        try:
            regex = re.compile(rule.pattern, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Rule '{rule.name}' has an invalid regex pattern: {e}") from e

    confidence = float(rule.confidence_score)
    clamped = min(max(confidence, RULE_CONFIDENCE_MIN), RULE_CONFIDENCE_MAX)
    if clamped != confidence:
        logger.warning(
            f"Rule '{rule.name}' confidence {confidence} outside "
            f"[{RULE_CONFIDENCE_MIN}, {RULE_CONFIDENCE_MAX}], using {clamped}"
        )

    return CompiledRule(rule=rule, confidence=clamped, regex=regex)


def compile_rules(rules: Iterable[RuleRecord]) -> tuple[list[CompiledRule], list[str]]:
    """
    Compile active rules into evaluation order, isolating broken rules.

    Organization rules are evaluated before global rules; within each group by
    ascending priority, then descending confidence, then name.

    Args:
        rules: Rules for one organization plus the global rules

    Returns:
        Tuple of (ordered compiled rules, error messages for skipped rules)
    """
    compiled: list[CompiledRule] = []
    errors: list[str] = []

    for rule in rules:
        if not rule.is_active:
            continue
        try:
            compiled.append(compile_rule(rule))
        except ValueError as e:
            logger.warning(f"Skipping attribution rule: {e}")
            errors.append(str(e))

    compiled.sort(
        key=lambda c: (c.is_global, c.rule.priority, -c.confidence, c.rule.name)
    )
    return compiled, errors


def rule_matches(rule: RuleRecord, refcode: str | None) -> bool:
    """
    Check a single rule against a raw refcode.

    Invalid rules never match.

    Args:
        rule: Rule to evaluate
        refcode: Raw refcode (any case, may be None)

    Returns:
        True if the rule matches the refcode
    """
    try:
        compiled = compile_rule(rule)
    except ValueError:
        return False
    return compiled.matches((refcode or "").strip().lower())
