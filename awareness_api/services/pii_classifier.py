"""
PII Classifier
Heuristic detection of personal data in free-text incident descriptions.

Detection is a registry of independent rules, each mapping a category tag to
one or more regular expressions. A rule fires when any of its patterns
matches at least once; the aggregate confidence is decided in one place
(``score_confidence``) so the policy can be tested apart from the patterns.

The classifier holds no mutable state and is safe to call concurrently.
"""
import enum
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Pattern, Sequence, Tuple


class PIIConfidence(str, enum.Enum):
    """How likely a text is to contain personal data"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class PIIDetectionResult:
    """Outcome of classifying one text"""
    has_pii: bool
    detected_types: Tuple[str, ...]
    confidence: PIIConfidence
    match_count: int = 0


@dataclass(frozen=True)
class PIIRule:
    """A category tag and the patterns that evidence it"""
    tag: str
    patterns: Tuple[Pattern, ...] = field(default_factory=tuple)

    def count(self, text: str) -> int:
        return sum(1 for pattern in self.patterns for _ in pattern.finditer(text))


def rule(tag: str, *expressions: str, flags: int = 0) -> PIIRule:
    """Build a rule, compiling its expressions with ASCII semantics."""
    return PIIRule(
        tag=tag,
        patterns=tuple(re.compile(expression, re.ASCII | flags) for expression in expressions),
    )


# Evaluation order is the order of ``detected_types``
DEFAULT_RULES: Tuple[PIIRule, ...] = (
    rule("email", r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
    rule("phone", r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{2,4}\)?[-.\s]?\d{3,4}[-.\s]?\d{3,4}\b"),
    # German tax id and similar 11-digit national numbers
    rule("national_id", r"\b\d{11}\b"),
    rule(
        "payment_card",
        r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b",
        r"\b\d{13,15}\b",
    ),
    rule("iban", r"\b[A-Z]{2}\d{2}[A-Z0-9]{10,30}\b"),
    rule("postal_code", r"\b\d{5}(?:[-\s]\d{4})?\b"),
    rule("date_of_birth", r"\b(?:0?[1-9]|[12][0-9]|3[01])[./-](?:0?[1-9]|1[0-2])[./-](?:19|20)\d{2}\b"),
    rule("social_security", r"\b\d{3}[-\s]?\d{2}[-\s]?\d{4}\b"),
    rule(
        "potential_name",
        r"\b(?:herr|frau|mr|mrs|ms|miss|dr|prof)\s+[A-Z][a-z]+",
        flags=re.IGNORECASE,
    ),
    rule("potential_name", r"\b[A-Z][a-z]+\s+[A-Z][a-z]+\b"),
    rule(
        "potential_address",
        r"\b\d+\s+[A-Z][a-z]+\s+(?:str|strasse|street|avenue|road|st|ave|rd)\b",
        r"\b(?:wohnhaft|wohnt|adresse|address|living at)\b",
        flags=re.IGNORECASE,
    ),
)

# A single hit in any of these is enough for high confidence
HIGH_RISK_TAGS = frozenset({"email", "phone"})
HIGH_CONFIDENCE_MATCHES = 3


def score_confidence(match_count: int, detected_types: Iterable[str]) -> PIIConfidence:
    """Aggregate confidence policy shared by every rule set."""
    if match_count >= HIGH_CONFIDENCE_MATCHES or HIGH_RISK_TAGS.intersection(detected_types):
        return PIIConfidence.HIGH
    if match_count >= 1:
        return PIIConfidence.MEDIUM
    return PIIConfidence.LOW


class PIIClassifier:
    """Scores text against an ordered rule registry"""

    def __init__(self, rules: Sequence[PIIRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    @property
    def tags(self) -> List[str]:
        """Distinct tags in evaluation order"""
        return list(dict.fromkeys(r.tag for r in self.rules))

    def classify(self, text: str) -> PIIDetectionResult:
        detected: List[str] = []
        total = 0

        for pii_rule in self.rules:
            matches = pii_rule.count(text or "")
            if not matches:
                continue
            total += matches
            if pii_rule.tag not in detected:
                detected.append(pii_rule.tag)

        return PIIDetectionResult(
            has_pii=bool(detected),
            detected_types=tuple(detected),
            confidence=score_confidence(total, detected),
            match_count=total,
        )


def warning_message(result: PIIDetectionResult) -> str:
    """User-facing notice shown before a report containing PII is sent."""
    if not result.has_pii:
        return ""

    types_list = ", ".join(tag.replace("_", " ") for tag in result.detected_types)
    return (
        f"Potential personal data detected ({types_list}). "
        "Please ensure you only include necessary information for incident reporting. "
        "Avoid names, addresses, contact details, or identification numbers unless absolutely required."
    )


default_classifier = PIIClassifier()


def classify(text: str) -> PIIDetectionResult:
    """Classify ``text`` with the default rule registry."""
    return default_classifier.classify(text)
