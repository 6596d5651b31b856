"""Small text helpers."""

from typing import Optional

from git_cleanup.constants import FILTER_DESCRIPTIONS


def pluralize(word: str, count: int, plural_form: Optional[str] = None) -> str:
    """Return ``"<count> <word>"`` with the word pluralized for counts other than one.

    Args:
        word: Singular form
        count: Number of items
        plural_form: Irregular plural to use instead of the English rules
    """
    if count == 1:
        return f"{count} {word}"

    if plural_form:
        return f"{count} {plural_form}"

    if word.endswith(("ch", "sh", "s", "x", "z")):
        plural = f"{word}es"
    elif word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        plural = f"{word[:-1]}ies"
    else:
        plural = f"{word}s"

    return f"{count} {plural}"


def get_filter_description(my_branches_only: bool, merged_only: bool, stale_days: int) -> str:
    """Describe what the analysis is about to look for."""
    if my_branches_only and merged_only:
        key = "my_merged_branches"
    elif my_branches_only:
        key = "my_branches_only"
    elif merged_only:
        key = "merged_only"
    else:
        key = "all_branches"

    return f"\n🔍 Analyzing {FILTER_DESCRIPTIONS[key]} that have been stale for {pluralize('day', stale_days)}...\n"
