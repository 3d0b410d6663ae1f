"""Tests for attribution pattern rules."""

import pytest

from campaign_intel_etl.attribution.rules import compile_rule, compile_rules, rule_matches
from campaign_intel_etl.attribution.types import RuleRecord


def make_rule(**overrides) -> RuleRecord:
    values = {
        "name": "Facebook Ads",
        "rule_type": "prefix",
        "pattern": "fb_",
        "platform": "meta",
        "confidence_score": 0.90,
        "priority": 100,
        "organization_id": "org-1",
    }
    values.update(overrides)
    return RuleRecord(**values)


class TestRuleMatches:
    """Tests for rule_matches()."""

    @pytest.mark.parametrize(
        "rule_type,pattern,refcode,expected",
        [
            ("prefix", "fb_", "fb_spring", True),
            ("prefix", "fb_", "spring_fb_", False),
            ("suffix", "_sms", "gotv_sms", True),
            ("suffix", "_sms", "sms_gotv", False),
            ("contains", "gotv", "ad_gotv_01", True),
            ("contains", "gotv", "ad_01", False),
            ("exact", "email2024", "email2024", True),
            ("exact", "email2024", "email2024b", False),
            ("regex", r"^em_\d+$", "em_123", True),
            ("regex", r"^em_\d+$", "em_abc", False),
        ],
    )
    def test_rule_types(self, rule_type, pattern, refcode, expected):
        """Each rule type matches as its name says."""
        rule = make_rule(rule_type=rule_type, pattern=pattern)
        assert rule_matches(rule, refcode) is expected

    def test_case_insensitive(self):
        """Refcodes and patterns are compared case-insensitively."""
        assert rule_matches(make_rule(pattern="FB_"), "fb_Spring")
        assert rule_matches(make_rule(rule_type="regex", pattern="^FB"), "fb_spring")

    def test_surrounding_whitespace_ignored(self):
        """Refcodes are trimmed before matching."""
        assert rule_matches(make_rule(rule_type="exact", pattern="abc"), "  ABC ")

    def test_missing_refcode_never_matches(self):
        """Empty and missing refcodes never match."""
        assert not rule_matches(make_rule(rule_type="contains", pattern="a"), None)
        assert not rule_matches(make_rule(rule_type="contains", pattern="a"), "")

    def test_invalid_regex_never_matches(self):
        """A rule that does not compile is treated as non-matching."""
        assert not rule_matches(make_rule(rule_type="regex", pattern="(["), "anything")


class TestCompileRule:
    """Tests for compile_rule()."""

    def test_unknown_type(self):
        """Unknown rule types are rejected."""
        with pytest.raises(ValueError, match="unknown rule_type"):
            compile_rule(make_rule(rule_type="glob"))

    def test_empty_pattern(self):
        """Blank patterns are rejected."""
        with pytest.raises(ValueError, match="empty pattern"):
            compile_rule(make_rule(pattern="   "))

    def test_invalid_regex(self):
        """Bad regexes are rejected."""
        with pytest.raises(ValueError, match="invalid regex"):
            compile_rule(make_rule(rule_type="regex", pattern="(["))

    @pytest.mark.parametrize(
        "configured,expected",
        [(0.99, 0.95), (0.5, 0.85), (0.9, 0.9)],
    )
    def test_confidence_clamped_to_high_bracket(self, configured, expected):
        """Rule confidence always lands in [0.85, 0.95]."""
        assert compile_rule(make_rule(confidence_score=configured)).confidence == expected


class TestCompileRules:
    """Tests for compile_rules()."""

    def test_organization_rules_before_global(self):
        """Organization rules are evaluated before global ones, regardless of priority."""
        global_rule = make_rule(name="Global", organization_id=None, priority=1)
        org_rule = make_rule(name="Org", priority=500)

        compiled, errors = compile_rules([global_rule, org_rule])

        assert [c.rule.name for c in compiled] == ["Org", "Global"]
        assert errors == []

    def test_priority_then_confidence_then_name(self):
        """Ties on priority go to the higher confidence, then the name."""
        rules = [
            make_rule(name="C", priority=10, confidence_score=0.88),
            make_rule(name="B", priority=10, confidence_score=0.92),
            make_rule(name="A", priority=10, confidence_score=0.88),
            make_rule(name="D", priority=5),
        ]

        compiled, _ = compile_rules(rules)

        assert [c.rule.name for c in compiled] == ["D", "B", "A", "C"]

    def test_invalid_rules_isolated(self):
        """A broken rule is reported and skipped; valid rules still compile."""
        rules = [
            make_rule(name="Broken", rule_type="regex", pattern="(["),
            make_rule(name="Good"),
        ]

        compiled, errors = compile_rules(rules)

        assert [c.rule.name for c in compiled] == ["Good"]
        assert len(errors) == 1
        assert "Broken" in errors[0]

    def test_inactive_rules_skipped(self):
        """Inactive rules are never compiled."""
        compiled, errors = compile_rules([make_rule(is_active=False)])
        assert compiled == []
        assert errors == []
