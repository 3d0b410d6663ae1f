"""Display label validation for trend events."""

import re
from dataclasses import dataclass

from campaign_intel_etl.trends.types import LabelQuality

# Action verbs that turn an entity into an event ("Senate Passes Bill")
ACTION_VERBS = frozenset(
    """
    vote votes voted voting pass passes passed passing block blocks blocked blocking
    reject rejects rejected approve approves approved sign signs signed signing
    veto vetoes vetoed filibuster filibusters filibustered
    fire fires fired firing resign resigns resigned nominate nominates nominated
    appoint appoints appointed order orders ordered ordering pardon pardons pardoned
    commute commutes commuted revoke revokes revoked
    rule rules ruled ruling overturn overturns overturned uphold upholds upheld
    strike strikes struck striking dismiss dismisses dismissed grant grants granted
    deny denies denied affirm affirms affirmed
    arrest arrests arrested arresting indict indicts indicted sue sues sued suing
    charge charges charged charging convict convicts convicted acquit acquits acquitted
    sentence sentences sentenced raid raids raided seize seizes seized
    deport deports deported detain detains detained
    announce announces announced announcing launch launches launched
    ban bans banned banning sanction sanctions sanctioned threaten threatens threatened
    warn warns warned demand demands demanded propose proposes proposed
    withdraw withdraws withdrew withdrawn suspend suspends suspended
    expand expands expanded cut cuts cutting
    attack attacks attacked attacking invade invades invaded bomb bombs bombed bombing
    collapse collapses collapsed halt halts halted halting escalate escalates escalated
    cease ceases ceased freeze freezes froze frozen
    raise raises raised raising lower lowers lowered surge surges surged drop drops dropped
    face faces faced facing win wins won winning lose loses lost losing
    defeat defeats defeated confirm confirms confirmed confirming
    release releases released reveal reveals revealed expose exposes exposed
    target targets targeted targeting kill kills killed end ends ended ending
    begin begins began beginning start starts started starting stop stops stopped
    """.split()
)

# Nouns that name something happening ("Impeachment Hearing")
EVENT_NOUNS = frozenset(
    """
    ruling trial hearing verdict indictment conviction acquittal lawsuit injunction
    subpoena testimony deposition sentencing vote bill election impeachment nomination
    confirmation veto filibuster shutdown debate speech summit rally resignation
    shooting protest crisis scandal attack bombing strike raid ceasefire invasion
    collapse evacuation explosion assassination sanctions tariffs investigation probe
    audit deportation pardon ban order mandate regulation reform
    """.split()
)

ENTITY_ONLY_PATTERNS = (
    re.compile(r"^[A-Z][a-z]*$"),  # single capitalized word
    re.compile(r"^[A-Z][a-z]+\s+[A-Z][a-z]+$"),  # two capitalized words (person name)
    re.compile(
        r"^(?:President|Senator|Rep\.?|Governor|Mayor|Secretary|Director|Chief|Justice)"
        r"\s+[A-Z][a-z]+$",
        re.IGNORECASE,
    ),
    re.compile(r"^[A-Z]{2,5}$"),  # acronym
    re.compile(r"^The\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?$"),  # The + organization
)

_HEADLINE_EVENT_NOUN = re.compile(
    r"\b(vote|bill|ruling|crisis|ban|tariff|policy|probe|investigation|hearing|trial|"
    r"arrest|firing|resignation|indictment|verdict|conviction|acquittal|sanction|"
    r"ceasefire|attack|bombing|strike|raid|protest|scandal|impeachment|shutdown|veto|"
    r"deportation|pardon|order|mandate|summit|election|debate)\b",
    re.IGNORECASE,
)

MIN_EVENT_WORDS = 2
MAX_EVENT_WORDS = 6
FALLBACK_MAX_WORDS = 5


@dataclass(frozen=True)
class LabelAssessment:
    """Result of validating a topic's display label."""

    label_quality: str
    display_label: str
    label_source: str
    downgraded: bool = False


def contains_verb_or_event_noun(text: str) -> bool:
    words = set(re.findall(r"[a-z]+", text.lower()))
    return bool(words & ACTION_VERBS or words & EVENT_NOUNS)


def matches_entity_only_pattern(text: str) -> bool:
    stripped = text.strip()
    return any(pattern.match(stripped) for pattern in ENTITY_ONLY_PATTERNS)


def is_event_phrase(text: str | None) -> bool:
    """
    Check whether a label describes an event rather than naming an entity.

    An event phrase has 2-6 words and at least one action verb or event noun.

    Args:
        text: Candidate label

    Returns:
        True for a valid event phrase
    """
    if not text:
        return False
    words = text.split()
    if not MIN_EVENT_WORDS <= len(words) <= MAX_EVENT_WORDS:
        return False
    return contains_verb_or_event_noun(text)


def _title_case(words: list[str]) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def fallback_label_from_headline(headline: str | None, entity: str) -> str | None:
    """
    Derive an event-style label from a headline mentioning the entity.

    Tries, in order: the entity followed by an action verb, an event noun in
    the headline appended to the entity, then the headline's first words.

    Args:
        headline: Top headline for the topic
        entity: Entity name (the topic label)

    Returns:
        Generated label or None
    """
    if not headline or len(headline) < 10 or not entity:
        return None

    words = headline.split()
    entity_lower = entity.lower()
    lowered = [re.sub(r"[^\w'-]", "", w).lower() for w in words]

    entity_words = entity_lower.split()
    for i in range(len(lowered) - len(entity_words) + 1):
        if lowered[i : i + len(entity_words)] == entity_words:
            follow = i + len(entity_words)
            if follow < len(lowered) and lowered[follow] in ACTION_VERBS:
                phrase = words[i : i + FALLBACK_MAX_WORDS]
                candidate = _title_case([re.sub(r"[^\w'-]", "", w) for w in phrase])
                if len(phrase) >= 3 and is_event_phrase(candidate):
                    return candidate

    noun_match = _HEADLINE_EVENT_NOUN.search(headline)
    if noun_match:
        return f"{entity} {noun_match.group(1).capitalize()}"

    if entity_words[0] in headline.lower():
        truncated = [w for w in words if len(w) > 1][:FALLBACK_MAX_WORDS]
        if len(truncated) >= 3:
            return _title_case(truncated)

    return None


def classify_label(
    label: str,
    claimed_event_phrase: bool = False,
    label_quality_hint: str | None = None,
    top_headline: str | None = None,
) -> LabelAssessment:
    """
    Validate a label's claimed quality and pick the label to display.

    Claims from upstream extraction are re-checked: a label claimed as an
    event phrase without a verb or event noun is downgraded to entity_only
    (or replaced with a headline-derived fallback when one can be built).

    Args:
        label: Label proposed by extraction (or the topic key)
        claimed_event_phrase: Whether extraction claimed an event phrase
        label_quality_hint: Quality hint stored with the evidence
        top_headline: Best headline for fallback generation

    Returns:
        LabelAssessment
    """
    if label_quality_hint == LabelQuality.FALLBACK_GENERATED.value:
        if not claimed_event_phrase:
            return LabelAssessment(LabelQuality.ENTITY_ONLY.value, label, "entity_from_fallback")
        if is_event_phrase(label):
            return LabelAssessment(
                LabelQuality.FALLBACK_GENERATED.value, label, "fallback_generated"
            )
        return LabelAssessment(
            LabelQuality.ENTITY_ONLY.value, label, "fallback_downgraded", downgraded=True
        )

    if label_quality_hint == LabelQuality.EVENT_PHRASE.value or claimed_event_phrase:
        if is_event_phrase(label):
            return LabelAssessment(LabelQuality.EVENT_PHRASE.value, label, "event_phrase")
        fallback = fallback_label_from_headline(top_headline, label)
        if fallback:
            return LabelAssessment(
                LabelQuality.FALLBACK_GENERATED.value,
                fallback,
                "fallback_after_downgrade",
                downgraded=True,
            )
        return LabelAssessment(
            LabelQuality.ENTITY_ONLY.value, label, "event_phrase_downgraded", downgraded=True
        )

    # Unflagged labels that still read as events (e.g. older extraction runs)
    if is_event_phrase(label) and not matches_entity_only_pattern(label):
        return LabelAssessment(LabelQuality.EVENT_PHRASE.value, label, "validated_phrase")

    fallback = fallback_label_from_headline(top_headline, label)
    if fallback:
        return LabelAssessment(LabelQuality.FALLBACK_GENERATED.value, fallback, "headline_fallback")
    return LabelAssessment(LabelQuality.ENTITY_ONLY.value, label, "entity_only")
