"""Spam and abuse heuristics for free text.

Every predicate is a pure function of its input. The same classifier serves
two call sites: contact messages are hard-rejected on any issue, while review
submissions turn individual predicates into trust flags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

SPAM_PHRASES: tuple[str, ...] = (
    "buy now",
    "click here",
    "free money",
    "make money fast",
    "work from home",
    "earn money",
    "get rich",
    "investment opportunity",
    "lottery winner",
    "viagra",
    "cialis",
    "weight loss",
    "diet pills",
    "casino",
    "poker",
    "crypto",
    "bitcoin",
    "forex",
    "trading",
    "investment",
    "loan",
    "credit repair",
    "debt consolidation",
    "payday loan",
    "refinance",
    "seo services",
    "marketing services",
    "social media marketing",
    "increase followers",
    "buy followers",
    "buy likes",
)

INAPPROPRIATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(fuck|shit|bitch|asshole|dick|pussy)\b", re.IGNORECASE),
    re.compile(r"\b(kill|murder|suicide|bomb|terrorist)\b", re.IGNORECASE),
    re.compile(r"\b(nazi|hitler|genocide)\b", re.IGNORECASE),
    re.compile(r"\b(rape|molest|abuse)\b", re.IGNORECASE),
)

DISPOSABLE_EMAIL_DOMAINS: frozenset[str] = frozenset(
    {
        "10minutemail.com",
        "tempmail.org",
        "guerrillamail.com",
        "mailinator.com",
        "yopmail.com",
        "temp-mail.org",
        "throwaway.email",
        "getnada.com",
        "maildrop.cc",
        "sharklasers.com",
        "trashmail.com",
        "mohmal.com",
    }
)

_REPEATED_CHAR = re.compile(r"(.)\1{4,}", re.DOTALL)
_UPPER = re.compile(r"[A-Z]")
_LETTER = re.compile(r"[A-Za-z]")

SHOUTING_MIN_LETTERS = 10
SHOUTING_UPPER_RATIO = 0.7


class ContentIssue(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    EXCESSIVE_CAPS = "excessive_caps"
    REPETITIVE = "repetitive"

    @property
    def message(self) -> str:
        return _ISSUE_MESSAGES[self]

    @property
    def is_style_only(self) -> bool:
        """Style issues describe how text is written, not what it says."""
        return self in (ContentIssue.EXCESSIVE_CAPS, ContentIssue.REPETITIVE)


_ISSUE_MESSAGES = {
    ContentIssue.SPAM: "contains spam content",
    ContentIssue.INAPPROPRIATE: "contains inappropriate content",
    ContentIssue.EXCESSIVE_CAPS: "contains excessive capitalization",
    ContentIssue.REPETITIVE: "contains repetitive characters",
}


@dataclass(frozen=True, slots=True)
class ContentCheck:
    """Composite verdict returned by :meth:`ContentFilter.check`."""

    issues: tuple[ContentIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def substantive_issues(self) -> tuple[ContentIssue, ...]:
        return tuple(issue for issue in self.issues if not issue.is_style_only)

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


class ContentFilter:
    """Stateless text classifier."""

    def __init__(
        self,
        *,
        spam_phrases: tuple[str, ...] = SPAM_PHRASES,
        inappropriate_patterns: tuple[re.Pattern[str], ...] = INAPPROPRIATE_PATTERNS,
        disposable_domains: frozenset[str] = DISPOSABLE_EMAIL_DOMAINS,
    ) -> None:
        self._spam_phrases = tuple(phrase.lower() for phrase in spam_phrases)
        self._inappropriate = inappropriate_patterns
        self._disposable = frozenset(domain.lower() for domain in disposable_domains)

    def is_spam(self, text: str | None) -> bool:
        if not text:
            return False
        lowered = text.lower()
        return any(phrase in lowered for phrase in self._spam_phrases)

    def is_inappropriate(self, text: str | None) -> bool:
        if not text:
            return False
        return any(pattern.search(text) for pattern in self._inappropriate)

    def is_shouting(self, text: str | None) -> bool:
        if not text:
            return False
        letters = len(_LETTER.findall(text))
        if letters <= SHOUTING_MIN_LETTERS:
            return False
        return len(_UPPER.findall(text)) / letters > SHOUTING_UPPER_RATIO

    def is_repetitive(self, text: str | None) -> bool:
        if not text:
            return False
        return _REPEATED_CHAR.search(text) is not None

    def is_disposable_email(self, address: str | None) -> bool:
        if not address or "@" not in address:
            return False
        domain = address.rsplit("@", 1)[1].strip().lower()
        return domain in self._disposable

    def check(self, text: str | None) -> ContentCheck:
        if not text:
            return ContentCheck()
        issues: list[ContentIssue] = []
        if self.is_spam(text):
            issues.append(ContentIssue.SPAM)
        if self.is_inappropriate(text):
            issues.append(ContentIssue.INAPPROPRIATE)
        if self.is_shouting(text):
            issues.append(ContentIssue.EXCESSIVE_CAPS)
        if self.is_repetitive(text):
            issues.append(ContentIssue.REPETITIVE)
        return ContentCheck(issues=tuple(issues))
