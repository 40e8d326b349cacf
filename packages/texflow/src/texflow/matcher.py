"""
Trigger matcher.

Finds the best rule whose trigger ends at the caret. Eligible rules are
ranked once per call (priority, then literal trigger length, then
declaration order, last declared first) and tried in that order; the first
one that matches fires.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from .template import compile_template
from .types import LiteralTrigger, MatchResult, PatternTrigger, Rule, TabStop, TextTemplate

logger = logging.getLogger(__name__)


def is_inside_math(text: str, caret: int) -> bool:
    """True when an odd number of unescaped ``$`` precede ``caret``."""
    count = 0
    escaped = False
    for ch in text[:caret]:
        if ch == "\\":
            escaped = not escaped
            continue
        if ch == "$" and not escaped:
            count += 1
        escaped = False
    return count % 2 == 1


@dataclass(frozen=True)
class RankedRule:
    rule: Rule
    index: int


def _eligible(rule: Rule, in_math: bool, auto_only: bool, manual_only: bool) -> bool:
    flags = rule.flags
    if auto_only and not flags.auto_fire:
        return False
    if manual_only and flags.auto_fire:
        return False
    if not flags.allows_mode(in_math):
        return False
    # surround rules only fire on a selection
    return not rule.uses_visual


def rank_rules(
    rules: Sequence[Rule],
    in_math: bool,
    auto_only: bool = False,
    manual_only: bool = False,
) -> list[RankedRule]:
    """Filter ``rules`` for the current mode and order them best-first."""
    ranked = [RankedRule(rule, i) for i, rule in enumerate(rules) if _eligible(rule, in_math, auto_only, manual_only)]
    ranked.sort(key=lambda r: (r.rule.priority, r.rule.trigger.length, r.index), reverse=True)
    return ranked


def _match_span(rule: Rule, before: str) -> tuple[int, list[str | None]] | None:
    """Return (span start, captures) when ``rule`` fires at the end of ``before``."""
    trigger = rule.trigger

    if isinstance(trigger, PatternTrigger):
        m = trigger.compile().search(before)
        if m is None or m.start() == m.end():
            return None
        if isinstance(rule.template, TextTemplate):
            captures: list[str | None] = list(m.groups())
        else:
            captures = [m.group(0), *m.groups()]
        return m.start(), captures

    if isinstance(trigger, LiteralTrigger):
        if not trigger.text or not before.endswith(trigger.text):
            return None
        start = len(before) - len(trigger.text)
        if rule.flags.word_boundary and start > 0 and before[start - 1].isalnum():
            return None
        return start, []

    raise TypeError(f"unsupported trigger type: {type(trigger).__name__}")


def match_trigger(
    text: str,
    caret: int,
    rules: Sequence[Rule],
    force_math: bool = False,
    auto_only: bool = False,
    manual_only: bool = False,
) -> MatchResult | None:
    """
    Expand the best rule firing at ``caret``.

    ``auto_only`` restricts matching to auto-fire rules (plain typing) and
    ``manual_only`` to the rules that wait for an explicit expand.
    Returns the rewritten text with absolute field positions, or ``None``.
    """
    before = text[:caret]
    after = text[caret:]
    in_math = force_math or is_inside_math(text, caret)

    for ranked in rank_rules(rules, in_math, auto_only, manual_only):
        rule = ranked.rule
        try:
            hit = _match_span(rule, before)
        except (re.error, RecursionError) as exc:
            logger.warning("Skipping rule #%d (%r): %s", ranked.index, rule.trigger, exc)
            continue
        if hit is None:
            continue

        start, captures = hit
        expansion = compile_template(rule.template, captures)
        logger.debug("Rule #%d fired on %r", ranked.index, before[start:])
        return MatchResult(
            text=before[:start] + expansion.text + after,
            selection=expansion.entry.offset(start),
            fields=[stop.offset(start) for stop in expansion.remaining],
            rule=rule,
            start=start,
            end=caret,
        )

    return None


def find_surround_rule(key: str, rules: Sequence[Rule], in_math: bool) -> Rule | None:
    """Best surround-selection rule bound to the single character ``key``."""
    candidates = [
        RankedRule(rule, i)
        for i, rule in enumerate(rules)
        if rule.uses_visual
        and isinstance(rule.trigger, LiteralTrigger)
        and rule.trigger.text == key
        and rule.flags.allows_mode(in_math)
    ]
    if not candidates:
        return None
    best = max(candidates, key=lambda r: (r.rule.priority, r.index))
    return best.rule
