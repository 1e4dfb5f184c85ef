"""Sanitisation helpers.

Every string answer, free text and choice values alike, is stored
without HTML tags or surrounding whitespace, so values rendered later in
a page or packet cannot carry markup. Numbers and booleans pass through
untouched.
"""
import re

TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(text: str) -> str:
    """Remove HTML tags from the given string and trim whitespace."""
    if not text:
        return ""
    no_tags = TAG_RE.sub("", text)
    return no_tags.strip()


def sanitize_answers(answers: dict) -> dict:
    """Return a copy of ``answers`` with tags stripped from string values.

    List values are cleaned item by item; other values are copied as-is.
    """
    cleaned = {}
    for key, value in answers.items():
        if isinstance(value, str):
            cleaned[key] = strip_tags(value)
        elif isinstance(value, list):
            cleaned[key] = [strip_tags(item) if isinstance(item, str) else item for item in value]
        else:
            cleaned[key] = value
    return cleaned
