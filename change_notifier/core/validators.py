"""Shared validators for tag values and configuration."""

import re

# local-part "@" domain-labels "." TLD, with an optional two-letter
# second-level suffix (e.g. ".co.uk")
EMAIL_PATTERN = re.compile(
    r"[\w\-+.]+(?:\.[\w-]+)*@(?:[\w-]+\.)*\w[\w-]{0,66}\.[a-z]{2,6}(?:\.[a-z]{2})?",
    re.IGNORECASE | re.ASCII,
)


def is_valid_email(value: str | None) -> bool:
    """
    Check whether a string is a syntactically valid email address.

    The whole value must match; surrounding text or whitespace is rejected.

    Args:
        value: Candidate address (None is accepted and reported invalid)

    Returns:
        True if the value matches the email grammar
    """
    if not value or not isinstance(value, str):
        return False

    return EMAIL_PATTERN.fullmatch(value) is not None
