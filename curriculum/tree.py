"""
Requirement tree renderer.

Turns the recursive CourseGroup structure into a cleaned display tree:
group headers (omitted when their cleaned name is empty) with a credit
badge, notes, course/text lines in source order, then subgroups one level
deeper. Header weight drops with depth: depth 0 is "top", depth 1 is
"section", everything deeper is "minor".

The catalog year shown above the tree is the first plausible academic-year
range ("2024-2025" or "2024-25") found in a free-text leaf, scanning
depth-first; stale-data disclaimers are skipped since they clean to "".

Public API:
    render_tree(groups) → RenderedTree
    catalog_year(groups) → str
    iter_rows(tree) → Iterator[Row]
    to_markdown(tree) → str
"""

import re
from collections.abc import Iterator, Sequence
from typing import Literal, Union

from pydantic import BaseModel

from catalog.models import Course, CourseGroup, CourseText
from curriculum.text import clean_text, credit_label, extract_credits, split_course_line

DEFAULT_CATALOG_YEAR = "2024-2025"

_YEAR_RANGE = re.compile(r"(20\d{2})-(20\d{2}|\d{2})")

Tier = Literal["top", "section", "minor"]


class CourseLine(BaseModel):
    kind: Literal["course"] = "course"
    code: str | None = None
    title: str
    credits: str | None = None


class TextLine(BaseModel):
    kind: Literal["text"] = "text"
    text: str


Line = Union[CourseLine, TextLine]


class RenderedGroup(BaseModel):
    name: str
    badge: str | None = None
    depth: int
    tier: Tier
    notes: list[str] = []
    lines: list[Line] = []
    subgroups: list["RenderedGroup"] = []


class RenderedTree(BaseModel):
    catalog_year: str
    groups: list[RenderedGroup]


class Row(BaseModel):
    """One flattened display row; kind is header, note, course or text."""
    kind: Literal["header", "note", "course", "text"]
    depth: int
    text: str
    code: str | None = None
    badge: str | None = None
    tier: Tier | None = None


# ---------------------------------------------------------------------------
# Catalog year
# ---------------------------------------------------------------------------

def _year_range(text: str) -> str | None:
    match = _YEAR_RANGE.search(text)
    if not match:
        return None
    first = int(match.group(1))
    second = match.group(2)
    second = int(f"20{second}") if len(second) == 2 else int(second)
    if second == first + 1:
        return f"{first}-{second}"
    return None


def _find_year(groups: Sequence[CourseGroup]) -> str | None:
    for group in groups:
        for item in group.items:
            if isinstance(item, CourseText) and clean_text(item.content):
                year = _year_range(item.content)
                if year:
                    return year
        year = _find_year(group.subgroups)
        if year:
            return year
    return None


def catalog_year(groups: Sequence[CourseGroup] | None) -> str:
    return _find_year(groups or []) or DEFAULT_CATALOG_YEAR


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def header_tier(depth: int) -> Tier:
    if depth == 0:
        return "top"
    if depth == 1:
        return "section"
    return "minor"


def render_line(item: Course | CourseText) -> Line | None:
    if isinstance(item, CourseText):
        text = clean_text(item.content)
        return TextLine(text=text) if text else None

    code, title = split_course_line(clean_text(item.course_title), item.course_id)
    return CourseLine(code=code or None, title=title, credits=credit_label(item.credits))


def render_group(group: CourseGroup, depth: int = 0) -> RenderedGroup:
    credits = group.credits_required or extract_credits(group.group_name)
    badge = None
    if credits:
        badge = f"CHOOSE {credits} CR" if depth > 0 else f"{credits} CR"

    lines = [line for line in (render_line(item) for item in group.items) if line is not None]

    return RenderedGroup(
        name=clean_text(group.group_name),
        badge=badge,
        depth=depth,
        tier=header_tier(depth),
        notes=[n for n in group.notes if n],
        lines=lines,
        subgroups=[render_group(sub, depth + 1) for sub in group.subgroups],
    )


def render_tree(groups: Sequence[CourseGroup] | None) -> RenderedTree:
    groups = groups or []
    return RenderedTree(
        catalog_year=catalog_year(groups),
        groups=[render_group(g) for g in groups],
    )


# ---------------------------------------------------------------------------
# Flattened views
# ---------------------------------------------------------------------------

def _group_rows(group: RenderedGroup) -> Iterator[Row]:
    if group.name:
        yield Row(kind="header", depth=group.depth, text=group.name,
                  badge=group.badge, tier=group.tier)
    for note in group.notes:
        yield Row(kind="note", depth=group.depth, text=note)
    for line in group.lines:
        if isinstance(line, CourseLine):
            yield Row(kind="course", depth=group.depth, text=line.title,
                      code=line.code, badge=line.credits)
        else:
            yield Row(kind="text", depth=group.depth, text=line.text)
    for sub in group.subgroups:
        yield from _group_rows(sub)


def iter_rows(tree: RenderedTree) -> Iterator[Row]:
    """Depth-first display rows in source order."""
    for group in tree.groups:
        yield from _group_rows(group)


_HEADING = {"top": "####", "section": "#####", "minor": "######"}


def to_markdown(tree: RenderedTree) -> str:
    if not tree.groups:
        return ""

    out = [f"**Academic Year:** {tree.catalog_year} Catalog", ""]
    for row in iter_rows(tree):
        indent = "  " * row.depth
        if row.kind == "header":
            badge = f" `{row.badge}`" if row.badge else ""
            out.append(f"{_HEADING[row.tier]} {row.text}{badge}")
        elif row.kind == "note":
            out.append(f"{indent}> _{row.text}_")
        elif row.kind == "course":
            code = f"**{row.code}** " if row.code else ""
            badge = f" `{row.badge}`" if row.badge else ""
            out.append(f"{indent}- {code}{row.text}{badge}")
        else:
            out.append(f"{indent}- _{row.text}_")
    return "\n".join(out)
