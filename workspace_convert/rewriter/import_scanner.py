"""Find relative and legacy absolute import specifiers in one pass."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class SpecifierMatch:
    specifier: str
    start: int
    end: int
    legacy: bool


def compile_import_pattern(legacy_url_prefix: str) -> re.Pattern[str]:
    """Build one alternation matching both specifier families.

    Package-qualified specifiers (``@scope/pkg``) match neither branch. A
    legacy URL stops before a query, a fragment, an autolink ``>`` and any
    trailing ``.`` or ``,`` of the surrounding sentence.
    """
    return re.compile(
        r"""from\s+["'](?P<relative>\.\.?/[^"'\n]+)["']"""
        rf"""|(?P<legacy>{re.escape(legacy_url_prefix)}"""
        r"""[^"'\s)`?#<>]*[^"'\s)`?#<>.,])"""
    )


def find_specifiers(text: str, pattern: re.Pattern[str]) -> list[SpecifierMatch]:
    matches: list[SpecifierMatch] = []
    for m in pattern.finditer(text):
        group = "legacy" if m.group("legacy") is not None else "relative"
        matches.append(SpecifierMatch(
            specifier=m.group(group),
            start=m.start(group),
            end=m.end(group),
            legacy=group == "legacy",
        ))
    return matches
