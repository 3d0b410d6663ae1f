"""Candidate trending terms extracted from free text."""

import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

# Single capitalized words are only trusted when they name a known figure
KNOWN_POLITICAL_FIGURES = frozenset(
    {
        "trump", "biden", "harris", "vance", "walz", "obama", "pelosi", "schumer",
        "mcconnell", "johnson", "jeffries", "thune", "sanders", "warren", "ocasio-cortez",
        "aoc", "desantis", "newsom", "haley", "pence", "musk", "rfk", "kennedy",
        "netanyahu", "zelensky", "putin", "xi", "hegseth", "rubio", "gabbard", "bondi",
        "patel", "noem", "homan", "miller", "vought", "leavitt", "garland", "roberts",
        "alito", "thomas", "gorsuch", "kavanaugh", "barrett", "sotomayor", "kagan",
        "jackson", "manchin", "sinema", "fetterman", "cruz", "hawley", "graham", "mace",
        "greene", "boebert", "gaetz", "santos", "abbott", "whitmer", "shapiro", "pritzker",
    }
)

# Capitalized bigrams/trigrams that are too generic to be a trend on their own
STOP_PHRASES = frozenset(
    {
        "new york", "white house", "united states", "last week", "next week", "this week",
        "last year", "next year", "this year", "the president", "the house", "the senate",
        "supreme court", "associated press", "breaking news", "read more", "click here",
        "sign up", "getty images", "fox news", "new york times", "washington post",
        "the associated press", "los angeles", "san francisco", "north carolina",
        "south carolina", "new jersey", "new hampshire", "new mexico", "north dakota",
        "south dakota", "west virginia", "rhode island", "puerto rico", "wall street",
        "capitol hill", "east coast", "west coast", "middle east", "good morning",
        "happy new year", "prime minister", "press secretary", "executive order",
        "monday morning", "tuesday morning", "wednesday morning", "thursday morning",
        "friday morning", "saturday morning", "sunday morning", "share this", "live updates",
        "the new", "the first", "in the", "of the",
    }
)

# Capitalized words that start sentences or dates rather than names
SKIP_WORDS = frozenset(
    {
        "the", "this", "that", "these", "those", "a", "an", "and", "but", "or", "in",
        "on", "at", "for", "with", "from", "after", "before", "why", "how", "what",
        "when", "where", "who", "breaking", "watch", "live", "update", "opinion",
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
        "january", "february", "march", "april", "may", "june", "july", "august",
        "september", "october", "november", "december",
    }
)

# Aliases folded into one canonical topic
TOPIC_NORMALIZATIONS = {
    "donald trump": "Donald Trump",
    "trump": "Donald Trump",
    "president trump": "Donald Trump",
    "joe biden": "Joe Biden",
    "biden": "Joe Biden",
    "kamala harris": "Kamala Harris",
    "harris": "Kamala Harris",
    "aoc": "Alexandria Ocasio-Cortez",
    "ocasio-cortez": "Alexandria Ocasio-Cortez",
    "netanyahu": "Benjamin Netanyahu",
    "benjamin netanyahu": "Benjamin Netanyahu",
    "un": "United Nations",
    "united nations": "United Nations",
    "gop": "Republican Party",
    "republican party": "Republican Party",
    "democratic party": "Democratic Party",
    "nyc": "New York City",
    "new york city": "New York City",
    "dc": "Washington DC",
    "washington dc": "Washington DC",
    "climate crisis": "Climate Change",
    "climate change": "Climate Change",
    "scotus": "Supreme Court",
    "ice": "ICE",
}

_WORD = r"[A-Z][a-zA-Z'\-]+"
_PHRASE_PATTERNS = {
    3: re.compile(rf"\b({_WORD})\s+({_WORD})\s+({_WORD})\b"),
    2: re.compile(rf"\b({_WORD})\s+({_WORD})\b"),
}
_SINGLE_WORD = re.compile(rf"\b({_WORD})\b")


@dataclass(frozen=True)
class KeywordCandidate:
    """A term found in text, with how it was found."""

    term: str
    kind: str  # 'phrase' or 'known_entity'
    count: int = 1


def normalize_topic(term: str) -> str:
    """
    Fold aliases and spacing into a canonical topic name.

    Args:
        term: Raw term

    Returns:
        Canonical name (unchanged when no alias is known)
    """
    cleaned = " ".join(term.split())
    return TOPIC_NORMALIZATIONS.get(cleaned.lower(), cleaned)


def topic_key(term: str) -> str:
    """Lower-case key used to group evidence for the same topic."""
    return normalize_topic(term).lower()


def _overlapping_phrases(text: str, size: int) -> list[str]:
    """All capitalized n-grams, including overlapping ones."""
    pattern = _PHRASE_PATTERNS[size]
    found = []
    pos = 0
    while True:
        match = pattern.search(text, pos)
        if match is None:
            break
        found.append(" ".join(match.groups()))
        pos = match.start() + len(match.group(1)) + 1
    return found


def _is_candidate_phrase(phrase: str) -> bool:
    words = phrase.lower().split()
    if phrase.lower() in STOP_PHRASES:
        return False
    if words[0] in SKIP_WORDS or words[-1] in SKIP_WORDS:
        return False
    return True


def discover_keywords(text: str | None) -> list[KeywordCandidate]:
    """
    Extract candidate trending terms from one document.

    Two- and three-word capitalized phrases are kept unless they are generic
    stop phrases; single words are kept only for known political figures.
    A single word already covered by a kept phrase is not repeated.

    Args:
        text: Headline or body text

    Returns:
        Candidates with per-document counts, phrases first
    """
    if not text:
        return []

    phrases: Counter[str] = Counter()
    for size in (3, 2):
        for phrase in _overlapping_phrases(text, size):
            if _is_candidate_phrase(phrase):
                phrases[normalize_topic(phrase)] += 1

    # Drop bigrams that only occur inside a kept trigram
    trigram_text = " | ".join(p.lower() for p in phrases if len(p.split()) == 3)
    for phrase in list(phrases):
        if len(phrase.split()) == 2 and phrase.lower() in trigram_text:
            trigram_hits = sum(
                count
                for other, count in phrases.items()
                if len(other.split()) == 3 and phrase.lower() in other.lower()
            )
            if phrases[phrase] <= trigram_hits:
                del phrases[phrase]

    covered = {word for phrase in phrases for word in phrase.lower().split()}
    entities: Counter[str] = Counter()
    for word in _SINGLE_WORD.findall(text):
        lowered = word.lower()
        if lowered in KNOWN_POLITICAL_FIGURES and lowered not in covered:
            entities[normalize_topic(word)] += 1

    candidates = [KeywordCandidate(term, "phrase", count) for term, count in phrases.items()]
    candidates += [KeywordCandidate(term, "known_entity", count) for term, count in entities.items()]
    return sorted(candidates, key=lambda c: (c.kind != "phrase", -c.count, c.term))


def rank_keywords(texts: Iterable[str], limit: int = 20) -> list[KeywordCandidate]:
    """
    Rank candidate terms across many documents.

    Every phrase ranks above every single entity, then by frequency; ties
    fall back to alphabetical order.

    Args:
        texts: Documents to scan
        limit: Maximum candidates to return

    Returns:
        Top candidates with counts summed across documents
    """
    totals: Counter[tuple[str, str]] = Counter()
    for text in texts:
        for candidate in discover_keywords(text):
            totals[(candidate.term, candidate.kind)] += candidate.count

    ranked = [KeywordCandidate(term, kind, count) for (term, kind), count in totals.items()]
    ranked.sort(key=lambda c: (c.kind != "phrase", -c.count, c.term))
    return ranked[:limit]
