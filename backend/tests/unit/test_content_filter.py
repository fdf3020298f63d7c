import pytest

from reviewguard.moderation.domain.content_filter import ContentFilter, ContentIssue


@pytest.fixture
def content_filter() -> ContentFilter:
    return ContentFilter()


@pytest.mark.parametrize(
    "text",
    ["Click HERE for a deal", "Best way to get rich", "I love Bitcoin", "buy followers today"],
)
def test_spam_phrases_match_case_insensitively(content_filter: ContentFilter, text: str) -> None:
    assert content_filter.is_spam(text)


def test_clean_text_passes_every_check(content_filter: ContentFilter) -> None:
    verdict = content_filter.check("Lovely session, the portraits came out beautifully.")

    assert verdict.is_valid
    assert verdict.messages == []


def test_inappropriate_words_need_word_boundaries(content_filter: ContentFilter) -> None:
    assert content_filter.is_inappropriate("what the shit")
    assert not content_filter.is_inappropriate("great skills on display")


def test_shouting_needs_more_than_ten_letters(content_filter: ContentFilter) -> None:
    assert not content_filter.is_shouting("GREAT WORK")
    assert content_filter.is_shouting("AMAZING PHOTOS")
    assert not content_filter.is_shouting("Amazing Photos From The Wedding")


def test_repetition_needs_five_identical_characters(content_filter: ContentFilter) -> None:
    assert not content_filter.is_repetitive("soooo good")
    assert content_filter.is_repetitive("sooooo good")


def test_check_reports_every_issue_in_order(content_filter: ContentFilter) -> None:
    verdict = content_filter.check("FREE MONEY CLICK HERE!!!!!")

    assert verdict.issues == (ContentIssue.SPAM, ContentIssue.EXCESSIVE_CAPS, ContentIssue.REPETITIVE)
    assert verdict.substantive_issues == (ContentIssue.SPAM,)
    assert "contains spam content" in verdict.messages


def test_style_issues_are_not_substantive(content_filter: ContentFilter) -> None:
    verdict = content_filter.check("WHAT A WONDERFUL EVENING")

    assert not verdict.is_valid
    assert verdict.substantive_issues == ()


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        ("someone@mailinator.com", True),
        ("someone@YOPMAIL.com", True),
        ("someone@example.com", False),
        ("not-an-email", False),
        (None, False),
    ],
)
def test_disposable_email_domains(content_filter: ContentFilter, address, expected) -> None:
    assert content_filter.is_disposable_email(address) is expected


def test_empty_text_is_clean(content_filter: ContentFilter) -> None:
    assert content_filter.check(None).is_valid
    assert content_filter.check("").is_valid
