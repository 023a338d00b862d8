"""
Catalog text clean-up for requirement trees.

Scraped group names and annotations carry footnote glyphs, trailing credit
annotations, bullet dashes and stale-data disclaimers. clean_text() strips
them in a fixed order; extract_credits() reads the credit figure out of the
raw name separately so a badge can still show it.
"""

import re

_GLYPHS          = re.compile(r"[△*^†‡§#◆◇♦◎]")
_TRAILING_CREDIT = re.compile(r"\s*\((?:[^)]*?\s+)?\d+(?:-\d+)?\s*credits?\)\s*$", re.IGNORECASE)
_BULLET          = re.compile(r"^- ")
_STALE_YEARS     = re.compile(r"20\d{2}-20\d{2} data", re.IGNORECASE)
_CREDITS         = re.compile(r"\((?:[^)]*?\s+)?(\d+(?:-\d+)?)\s*credits?\)", re.IGNORECASE)

# 2-4 capitals, optional space, 2-3 digits, optional letter suffix: "CS 234", "MATH212L"
_LEADING_CODE = re.compile(r"^([A-Z]{2,4}\s*\d{2,3}[A-Z]?)(?!\d)\s*[-:–]?\s*(.*)$")
_LOOSE_CODE   = re.compile(r"[A-Z]+\s+\d+")

PROGRAM_REQUIREMENTS = "Program Requirements"


def clean_text(text: str | None) -> str:
    """Return display text, or "" when the text should not be shown at all."""
    if not text:
        return ""

    cleaned = _GLYPHS.sub("", text).strip()
    cleaned = _TRAILING_CREDIT.sub("", cleaned).strip()
    cleaned = _BULLET.sub("", cleaned).strip()

    if cleaned.lower() == "major requirements":
        return PROGRAM_REQUIREMENTS

    if "data may be outdated" in cleaned.lower() or _STALE_YEARS.search(cleaned):
        return ""

    return cleaned


def extract_credits(name: str | None) -> str | None:
    """'Core Courses (3-4 credits)' → '3-4'."""
    if not name:
        return None
    match = _CREDITS.search(name)
    return match.group(1) if match else None


def split_course_line(title: str, code: str | None) -> tuple[str | None, str]:
    """
    Split a combined "CODE - Title" string into (code, title).

    Only attempted when there is no explicit code or the title still carries
    it. Titles that fit neither pattern come back whole with the given
    code, which may be None.
    """
    if code and code not in title:
        return code, title

    match = _LEADING_CODE.match(title)
    if match:
        return match.group(1), match.group(2)

    if " - " in title:
        head, rest = title.split(" - ", 1)
        if _LOOSE_CODE.search(head):
            return head.strip(), rest.strip()

    return code, title


def credit_label(credits: str | None) -> str | None:
    """'3 credits' → '3 CR'."""
    if not credits:
        return None
    digits = re.sub(r"[a-z]", "", credits, flags=re.IGNORECASE).strip()
    return f"{digits} CR"
