"""Split composite raw values into dictionary-routed tokens."""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from feedcleanse.domain.cleansing.outcome import ResolvedValue
from feedcleanse.domain.model import TokenSummary

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedcleanse.domain.cleansing.context import MatchScope
    from feedcleanse.domain.model import TokenRoute

log = logging.getLogger(__name__)

SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[/,、，・･|+&]+")
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class TokenExpansion:
    outputs: tuple[ResolvedValue, ...]
    summary: TokenSummary


def normalize_token(value: str) -> str:
    """NFKC, upper-case and collapse whitespace."""

    folded = unicodedata.normalize("NFKC", value).upper()
    return _WHITESPACE.sub(" ", folded).strip()


def expand_tokens(
    raw: str | None,
    routes: Iterable[TokenRoute],
    *,
    attr_cd: str,
    scope: MatchScope,
) -> TokenExpansion:
    """Route every recognisable token of ``raw`` to its normalized value.

    Each separator-delimited chunk is scanned word by word, greedily taking the
    longest route label starting at the current word. Words no label covers are
    reported as unmatched. Outputs are de-duplicated on (target attribute, value).
    """

    table = _route_table(routes, scope)
    max_words = max((label.count(" ") + 1 for label in table), default=0)

    matched: list[str] = []
    unmatched: list[str] = []
    for chunk in SEPARATORS.split(normalize_token(raw or "")):
        words = chunk.split()
        index = 0
        while index < len(words):
            for width in range(min(max_words, len(words) - index), 0, -1):
                label = " ".join(words[index : index + width])
                if label in table:
                    matched.append(label)
                    index += width
                    break
            else:
                unmatched.append(words[index])
                index += 1

    outputs: list[ResolvedValue] = []
    seen: set[tuple[str, str]] = set()
    for label in matched:
        route = table[label]
        target = (route.target_attr_cd or attr_cd).upper()
        if (target, route.normalize_to) in seen:
            continue
        seen.add((target, route.normalize_to))
        outputs.append(
            ResolvedValue(
                attr_cd=target,
                value_cd=route.normalize_to,
                value_text=route.normalize_to,
            )
        )

    summary = TokenSummary(
        token_count=len(matched) + len(unmatched),
        matched_tokens=tuple(matched),
        unmatched_tokens=tuple(unmatched),
    )
    log.debug("Expanded %r into %d outputs (%d unmatched)", raw, len(outputs), len(unmatched))
    return TokenExpansion(outputs=tuple(outputs), summary=summary)


def _route_table(routes: Iterable[TokenRoute], scope: MatchScope) -> dict[str, TokenRoute]:
    """Best route per normalized label: scoped before common, then priority."""

    table: dict[str, TokenRoute] = {}
    applicable = [route for route in routes if _in_scope(route, scope)]
    applicable.sort(key=lambda route: (not route.is_scoped, route.priority, route.token_id))
    for route in applicable:
        label = normalize_token(route.token_label_norm or route.token_label)
        if label:
            table.setdefault(label, route)
    return table


def _in_scope(route: TokenRoute, scope: MatchScope) -> bool:
    if route.brand_scope and (
        scope.brand is None or route.brand_scope.casefold() != scope.brand.casefold()
    ):
        return False
    return not (
        route.category_scope
        and (
            scope.category is None
            or route.category_scope.casefold() != scope.category.casefold()
        )
    )
