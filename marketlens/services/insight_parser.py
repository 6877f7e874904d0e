"""Parse the insight model's free-text answer into sections and citations.

The answer is read line by line. Header lines switch the active section,
``참고:`` lines attach bracketed document numbers to it, and numbered or
bulleted lines become section content. Anything else is dropped.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

SECTIONS = ("insights", "success_cases", "failure_cases", "market_outlook")

SECTION_REFS = {
    "insights": "insights_refs",
    "success_cases": "success_refs",
    "failure_cases": "failure_refs",
    "market_outlook": "outlook_refs",
}

# Checked in order; the first section with a matching substring wins.
SECTION_HEADERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("insights", ("핵심 인사이트", "Key Insights")),
    ("success_cases", ("성공 사례", "성공사례", "Success")),
    ("failure_cases", ("실패 사례", "실패사례", "Failure")),
    ("market_outlook", ("향후 시장 전망", "시장 전망", "Market Outlook")),
)

REFERENCE_PREFIXES = ("참고:", "참고 :")
REFERENCE_LIST = re.compile(r"\[([\d,\s]+)\]")
# `.-•` is a character range (U+002E..U+2022): Latin letters directly after
# the marker are consumed as well, while a leading `-` (U+002D) is not.
BULLET_PREFIX = re.compile(r"^[0-9.-•*)\s]+")
_LEADING_INT = re.compile(r"\d+")


@dataclass
class ParsedInsights:
    insights: list[str] = field(default_factory=list)
    success_cases: list[str] = field(default_factory=list)
    failure_cases: list[str] = field(default_factory=list)
    market_outlook: list[str] = field(default_factory=list)
    insights_refs: list[int] = field(default_factory=list)
    success_refs: list[int] = field(default_factory=list)
    failure_refs: list[int] = field(default_factory=list)
    outlook_refs: list[int] = field(default_factory=list)


def match_section_header(line: str) -> str | None:
    for section, needles in SECTION_HEADERS:
        if any(needle in line for needle in needles):
            return section
    return None


def parse_reference_list(line: str) -> list[int] | None:
    """Document numbers from a ``참고: [1, 3]`` line, or None if there is no bracket list."""
    match = REFERENCE_LIST.search(line)
    if match is None:
        return None
    numbers: list[int] = []
    for piece in match.group(1).split(","):
        leading = _LEADING_INT.match(piece.strip())
        if leading:
            numbers.append(int(leading.group(0)))
    return numbers


def clean_bullet(line: str) -> str:
    return BULLET_PREFIX.sub("", line, count=1).strip()


def _is_content_line(line: str) -> bool:
    return line[0] in "0123456789" or line.startswith("-") or line.startswith("•")


def parse_insight_response(content: str) -> ParsedInsights:
    parsed = ParsedInsights()
    current: str | None = None

    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        section = match_section_header(line)
        if section is not None:
            current = section
        elif line.startswith(REFERENCE_PREFIXES):
            numbers = parse_reference_list(line)
            if numbers is not None and current is not None:
                setattr(parsed, SECTION_REFS[current], numbers)
        elif current is not None and _is_content_line(line):
            cleaned = clean_bullet(line)
            if cleaned:
                getattr(parsed, current).append(cleaned)

    return parsed
