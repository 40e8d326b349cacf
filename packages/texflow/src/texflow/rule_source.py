"""
Declarative rule and keybinding source.

Rules persist as a JSON list. Nothing in the source is executed: patterns
are stored as (source, flags) pairs and computed templates as expression
templates (see ``texflow.expressions``).

A rule record::

    {
      "trigger": "sq" | {"type": "literal", "text": "sq"}
                      | {"type": "pattern", "source": "([A-Za-z])(\\\\d)", "flags": ""},
      "template": "\\\\sqrt{ $1 }$0" | {"type": "text", "text": "..."}
                                    | {"type": "expression", "source": "..."},
      "options": "mA",
      "priority": 0,
      "description": ""
    }

Plain strings are shorthand for a literal trigger (a pattern when the
options contain ``r``) and for a text template.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .expressions import ExpressionError, compile_expression_template
from .keybindings import EditorAction, KeybindingsManager
from .rules import expand_snippet_variables
from .types import FunctionTemplate, LiteralTrigger, PatternTrigger, Rule, Template, TextTemplate, Trigger

logger = logging.getLogger(__name__)


class RuleSourceError(ValueError):
    """Raised when a rule or keybinding source cannot be loaded or written."""


# ─── Records ──────────────────────────────────────────────────────────────────

class LiteralTriggerSpec(BaseModel):
    type: Literal["literal"] = "literal"
    text: str


class PatternTriggerSpec(BaseModel):
    type: Literal["pattern"] = "pattern"
    source: str
    flags: str = ""


class TextTemplateSpec(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ExpressionTemplateSpec(BaseModel):
    type: Literal["expression"] = "expression"
    source: str


TriggerSpec = Annotated[Union[LiteralTriggerSpec, PatternTriggerSpec], Field(discriminator="type")]
TemplateSpec = Annotated[Union[TextTemplateSpec, ExpressionTemplateSpec], Field(discriminator="type")]


class RuleSpec(BaseModel):
    trigger: Union[str, TriggerSpec]
    template: Union[str, TemplateSpec]
    options: str = ""
    priority: int = 0
    description: str = ""


class KeybindingSpec(BaseModel):
    combination: str
    action: EditorAction


_RULES_ADAPTER = TypeAdapter(list[RuleSpec])
_KEYBINDINGS_ADAPTER = TypeAdapter(list[KeybindingSpec])


# ─── Rules ────────────────────────────────────────────────────────────────────

def _build_trigger(record: RuleSpec) -> Trigger:
    trigger = record.trigger
    if isinstance(trigger, str):
        if "r" in record.options:
            trigger = PatternTriggerSpec(source=trigger)
        else:
            return LiteralTrigger(trigger)
    if isinstance(trigger, LiteralTriggerSpec):
        return LiteralTrigger(trigger.text)

    pattern = PatternTrigger(expand_snippet_variables(trigger.source), trigger.flags)
    pattern.compile()
    return pattern


def _build_template(record: RuleSpec) -> Template:
    template = record.template
    if isinstance(template, str):
        return TextTemplate(template)
    if isinstance(template, TextTemplateSpec):
        return TextTemplate(template.text)
    return compile_expression_template(template.source)


def _describe(record: RuleSpec) -> str:
    trigger = record.trigger
    if isinstance(trigger, LiteralTriggerSpec):
        return repr(trigger.text)
    if isinstance(trigger, PatternTriggerSpec):
        return f"/{trigger.source}/"
    return repr(trigger)


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{where}: {first['msg']} ({exc.error_count()} error(s))"


def parse_rules(source: str) -> list[Rule]:
    """
    Load rules from JSON source.

    Every pattern and expression is compiled here so a broken entry is
    reported at load time with its position instead of being skipped later.
    """
    try:
        records = _RULES_ADAPTER.validate_json(source)
    except ValidationError as exc:
        raise RuleSourceError(f"invalid rule source: {_format_validation_error(exc)}") from exc

    rules: list[Rule] = []
    for index, record in enumerate(records):
        try:
            trigger = _build_trigger(record)
            template = _build_template(record)
        except re.error as exc:
            raise RuleSourceError(f"rule #{index} {_describe(record)}: bad pattern: {exc}") from exc
        except ExpressionError as exc:
            raise RuleSourceError(f"rule #{index} {_describe(record)}: bad expression: {exc}") from exc
        rules.append(Rule(trigger, template, record.options, record.priority, record.description))

    logger.debug("Parsed %d rules", len(rules))
    return rules


def _trigger_record(rule: Rule) -> Any:
    trigger = rule.trigger
    if isinstance(trigger, PatternTrigger):
        return PatternTriggerSpec(source=trigger.source, flags=trigger.flags).model_dump()
    if "r" in rule.options:
        return LiteralTriggerSpec(text=trigger.text).model_dump()
    return trigger.text


def _template_record(rule: Rule, index: int) -> Any:
    template = rule.template
    if isinstance(template, TextTemplate):
        return template.text
    if isinstance(template, FunctionTemplate) and template.source is not None:
        return ExpressionTemplateSpec(source=template.source).model_dump()
    raise RuleSourceError(
        f"rule #{index} ({rule.trigger!r}) uses a Python function template and cannot be serialized"
    )


def serialize_rules(rules: list[Rule]) -> str:
    records: list[dict[str, Any]] = []
    for index, rule in enumerate(rules):
        record: dict[str, Any] = {
            "trigger": _trigger_record(rule),
            "template": _template_record(rule, index),
            "options": rule.options,
        }
        if rule.priority:
            record["priority"] = rule.priority
        if rule.description:
            record["description"] = rule.description
        records.append(record)
    return json.dumps(records, indent=2, ensure_ascii=False)


# ─── Keybindings ──────────────────────────────────────────────────────────────

def parse_keybindings(source: str) -> KeybindingsManager:
    try:
        specs = _KEYBINDINGS_ADAPTER.validate_json(source)
        return KeybindingsManager.from_list(record.model_dump() for record in specs)
    except ValidationError as exc:
        raise RuleSourceError(f"invalid keybindings: {_format_validation_error(exc)}") from exc
    except ValueError as exc:
        raise RuleSourceError(f"invalid keybindings: {exc}") from exc


def serialize_keybindings(manager: KeybindingsManager) -> str:
    return json.dumps(manager.to_list(), indent=2)
