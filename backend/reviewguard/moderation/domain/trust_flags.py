"""Trust flag vocabulary and the pure function that assigns flags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from reviewguard.moderation.domain.content_filter import ContentCheck, ContentFilter
from reviewguard.moderation.domain.reviews import ReviewSubmission

NEW_ACCOUNT_DAYS = 1.0


class TrustFlag(str, Enum):
    """Closed flag vocabulary. Declaration order is the canonical output order."""

    SPAM_TITLE = "SPAM_TITLE"
    SPAM_COMMENT = "SPAM_COMMENT"
    INAPPROPRIATE_CONTENT = "INAPPROPRIATE_CONTENT"
    EXCESSIVE_CAPS = "EXCESSIVE_CAPS"
    REPETITIVE_CONTENT = "REPETITIVE_CONTENT"
    SUSPICIOUS_RATING = "SUSPICIOUS_RATING"
    NEW_ACCOUNT = "NEW_ACCOUNT"

    @property
    def blocking(self) -> bool:
        return self not in _ADVISORY


_ADVISORY = frozenset({TrustFlag.EXCESSIVE_CAPS, TrustFlag.REPETITIVE_CONTENT})
BLOCKING_FLAGS = frozenset(flag for flag in TrustFlag if flag.blocking)
_ORDER = {flag: idx for idx, flag in enumerate(TrustFlag)}


@dataclass(frozen=True, slots=True)
class TrustFlagSet:
    flags: frozenset[TrustFlag] = frozenset()

    @classmethod
    def of(cls, flags: Iterable[TrustFlag]) -> "TrustFlagSet":
        return cls(frozenset(flags))

    def __iter__(self) -> Iterator[TrustFlag]:
        return iter(sorted(self.flags, key=_ORDER.__getitem__))

    def __contains__(self, flag: object) -> bool:
        return flag in self.flags

    def __len__(self) -> int:
        return len(self.flags)

    @property
    def requires_moderation(self) -> bool:
        return not self.flags.isdisjoint(BLOCKING_FLAGS)

    @property
    def blocking(self) -> tuple[TrustFlag, ...]:
        return tuple(flag for flag in self if flag.blocking)

    @property
    def advisory(self) -> tuple[TrustFlag, ...]:
        return tuple(flag for flag in self if not flag.blocking)

    def names(self) -> tuple[str, ...]:
        return tuple(flag.value for flag in self)


@dataclass(frozen=True, slots=True)
class FieldScreening:
    """Content signals for a single text field."""

    check: ContentCheck
    inappropriate: bool
    shouting: bool
    repetitive: bool

    @property
    def spam(self) -> bool:
        return bool(self.check.substantive_issues)

    @classmethod
    def clean(cls) -> "FieldScreening":
        return cls(check=ContentCheck(), inappropriate=False, shouting=False, repetitive=False)


@dataclass(frozen=True, slots=True)
class ContentSignals:
    title: FieldScreening
    comment: FieldScreening


def screen(content_filter: ContentFilter, text: str | None) -> FieldScreening:
    if not text:
        return FieldScreening.clean()
    return FieldScreening(
        check=content_filter.check(text),
        inappropriate=content_filter.is_inappropriate(text),
        shouting=content_filter.is_shouting(text),
        repetitive=content_filter.is_repetitive(text),
    )


def screen_submission(content_filter: ContentFilter, submission: ReviewSubmission) -> ContentSignals:
    return ContentSignals(
        title=screen(content_filter, submission.title),
        comment=screen(content_filter, submission.comment),
    )


def compute(
    submission: ReviewSubmission,
    account_age_days: float,
    anomaly_result: bool,
    content: ContentSignals,
    *,
    new_account_days: float = NEW_ACCOUNT_DAYS,
) -> TrustFlagSet:
    flags: set[TrustFlag] = set()
    if submission.title and content.title.spam:
        flags.add(TrustFlag.SPAM_TITLE)
    if submission.comment and content.comment.spam:
        flags.add(TrustFlag.SPAM_COMMENT)
    if content.title.inappropriate or content.comment.inappropriate:
        flags.add(TrustFlag.INAPPROPRIATE_CONTENT)
    if content.title.shouting or content.comment.shouting:
        flags.add(TrustFlag.EXCESSIVE_CAPS)
    if content.title.repetitive or content.comment.repetitive:
        flags.add(TrustFlag.REPETITIVE_CONTENT)
    if anomaly_result:
        flags.add(TrustFlag.SUSPICIOUS_RATING)
    if account_age_days < new_account_days:
        flags.add(TrustFlag.NEW_ACCOUNT)
    return TrustFlagSet.of(flags)
