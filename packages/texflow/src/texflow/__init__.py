"""
texflow — LaTeX snippet expansion engine.

Trigger matching, template compilation, tab-stop tracking and undo history
for a LaTeX editing surface.
"""
from .config import APP_NAME, VERSION
from .coordinator import EditCoordinator, EditorConfig
from .expressions import ExpressionError, compile_expression_template
from .fields import AdvanceSignal, FieldTracker
from .history import HistoryEntry, HistoryStack
from .keybindings import DEFAULT_KEYBINDINGS, EditorAction, KeybindingsManager
from .keys import KeyEvent, KeyId, key_id_for, normalize_key_id, parse_key_sequence
from .matcher import find_surround_rule, is_inside_math, match_trigger, rank_rules
from .renderer import HtmlRenderer, Renderer
from .rule_source import RuleSourceError, parse_rules, serialize_rules
from .rules import DEFAULT_RULES, SNIPPET_VARIABLES, expand_snippet_variables
from .storage import JsonFileStore, KeyValueStore, MemoryStore, Storage
from .template import compile_template, escape_field_syntax
from .types import (
    ExpansionResult,
    FunctionTemplate,
    LiteralTrigger,
    MatchResult,
    PatternTrigger,
    Rule,
    RuleFlags,
    TabStop,
    TextTemplate,
)

__version__ = VERSION

__all__ = [
    "APP_NAME",
    "VERSION",
    # Engine
    "EditCoordinator",
    "EditorConfig",
    "FieldTracker",
    "AdvanceSignal",
    "HistoryStack",
    "HistoryEntry",
    "compile_template",
    "escape_field_syntax",
    "match_trigger",
    "rank_rules",
    "is_inside_math",
    "find_surround_rule",
    # Types
    "Rule",
    "RuleFlags",
    "TabStop",
    "LiteralTrigger",
    "PatternTrigger",
    "TextTemplate",
    "FunctionTemplate",
    "ExpansionResult",
    "MatchResult",
    # Rules
    "DEFAULT_RULES",
    "SNIPPET_VARIABLES",
    "expand_snippet_variables",
    "compile_expression_template",
    "ExpressionError",
    "parse_rules",
    "serialize_rules",
    "RuleSourceError",
    # Keys
    "KeyEvent",
    "KeyId",
    "key_id_for",
    "normalize_key_id",
    "parse_key_sequence",
    "EditorAction",
    "DEFAULT_KEYBINDINGS",
    "KeybindingsManager",
    # Persistence / rendering
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "Storage",
    "Renderer",
    "HtmlRenderer",
]
