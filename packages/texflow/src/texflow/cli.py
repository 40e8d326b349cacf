"""
CLI entry point.

``texflow type`` replays a key sequence through an editor and prints the
result, which makes the snippet table easy to try out from a shell.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import VERSION, get_store_path
from .coordinator import EditCoordinator, EditorConfig
from .keybindings import EDITOR_ACTIONS
from .matcher import rank_rules
from .renderer import HtmlRenderer
from .rule_source import RuleSourceError, parse_rules, serialize_rules
from .rules import DEFAULT_RULES
from .storage import Storage
from .types import FunctionTemplate, PatternTrigger, Rule

app = typer.Typer(
    name="texflow",
    help="texflow — LaTeX snippet expansion engine",
    no_args_is_help=True,
)
rules_app = typer.Typer(help="Inspect and manage snippet rules", no_args_is_help=True)
keys_app = typer.Typer(help="Inspect and manage keybindings", no_args_is_help=True)
app.add_typer(rules_app, name="rules")
app.add_typer(keys_app, name="keys")

console = Console()
err_console = Console(stderr=True)

CARET_MARK = "│"


def _open_storage(store: Optional[Path]) -> Storage:
    return Storage.open(str(store) if store else None)


def _load_rules_or_exit(storage: Storage) -> list[Rule]:
    try:
        return storage.load_rules()
    except RuleSourceError as e:
        err_console.print(f"[red]Stored rules are invalid:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _show_buffer(editor: EditCoordinator) -> str:
    start, end = editor.selection.start, editor.selection.end
    text = editor.text
    if start == end:
        return text[:start] + CARET_MARK + text[start:]
    return text[:start] + "[" + text[start:end] + "]" + text[end:]


def _trigger_label(rule: Rule) -> str:
    if isinstance(rule.trigger, PatternTrigger):
        source = rule.trigger.source
        if len(source) > 48:
            source = source[:45] + "..."
        return f"/{source}/"
    return rule.trigger.text


def _template_label(rule: Rule) -> str:
    template = rule.template
    if isinstance(template, FunctionTemplate):
        return template.source or "<python function>"
    return template.text


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions to stderr"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version() -> None:
    """Show the version."""
    console.print(f"texflow {VERSION}")


@app.command("type")
def type_cmd(
    keys: str = typer.Argument(..., help='Key sequence, e.g. "x//<tab>2" (<tab>, <cr>, <bs>, <esc>, <c-z>, <a-/>, <lt>)'),
    text: str = typer.Option("", "--text", "-t", help="Initial buffer contents"),
    caret: Optional[int] = typer.Option(None, "--caret", help="Initial caret offset (default: end)"),
    math: bool = typer.Option(False, "--math", "-m", help="Treat the whole buffer as math"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store file (default: ~/.texflow/store.json)"),
    raw: bool = typer.Option(False, "--raw", help="Print only the resulting text"),
) -> None:
    """Replay a key sequence through the editor and print the buffer."""
    storage = _open_storage(store)
    config = EditorConfig(
        rules=_load_rules_or_exit(storage),
        keybindings=storage.load_keybindings(),
        force_math=math,
    )
    editor = EditCoordinator(config, text=text, caret=caret)
    try:
        editor.feed_keys(keys)
    except ValueError as e:
        err_console.print(f"[red]Bad key sequence:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    if raw:
        typer.echo(editor.text)
        return

    console.print(escape(_show_buffer(editor)), highlight=False)
    pending = ", ".join(f"{s.start}-{s.end}" if not s.is_empty else str(s.start) for s in editor.fields.stops)
    console.print(
        f"[dim]selection {editor.selection.start}-{editor.selection.end}"
        f"  pending fields: {pending or 'none'}"
        f"  history: {editor.history.length}[/dim]"
    )


@app.command()
def render(
    source: str = typer.Argument(..., help="LaTeX or markdown with $...$ math"),
    math: bool = typer.Option(False, "--math", "-m", help="Render the source as one display formula"),
) -> None:
    """Render source to HTML."""
    typer.echo(HtmlRenderer().render(source, "math" if math else "text"), nl=False)


# ─── rules ────────────────────────────────────────────────────────────────────

@rules_app.command("list")
def rules_list(
    mode: str = typer.Option("all", "--mode", help="all | math | text: show rules eligible in that mode, best first"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store file"),
) -> None:
    """List the active rules."""
    rules = _load_rules_or_exit(_open_storage(store))
    if mode == "all":
        indexed = list(enumerate(rules))
    elif mode in ("math", "text"):
        indexed = [(r.index, r.rule) for r in rank_rules(rules, in_math=mode == "math")]
    else:
        err_console.print(f"[red]Unknown mode:[/red] {escape(mode)}")
        raise typer.Exit(2)

    table = Table(title=f"Rules ({len(indexed)})")
    table.add_column("#", justify="right")
    table.add_column("Trigger")
    table.add_column("Template")
    table.add_column("Options")
    table.add_column("Priority", justify="right")
    table.add_column("Description")

    for index, rule in indexed:
        table.add_row(
            str(index),
            escape(_trigger_label(rule)),
            escape(_template_label(rule).replace("\n", "⏎")),
            rule.options,
            str(rule.priority) if rule.priority else "",
            escape(rule.description),
        )

    console.print(table)


@rules_app.command("export")
def rules_export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout"),
    defaults: bool = typer.Option(False, "--defaults", help="Export the built-in table instead of the stored one"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store file"),
) -> None:
    """Export rules as JSON."""
    rules = list(DEFAULT_RULES) if defaults else _load_rules_or_exit(_open_storage(store))
    source = serialize_rules(rules)
    if output is None:
        typer.echo(source)
        return
    output.write_text(source + "\n", encoding="utf-8")
    console.print(f"[green]Wrote {len(rules)} rules to[/green] {escape(str(output))}")


@rules_app.command("check")
def rules_check(path: Path = typer.Argument(..., help="Rule source JSON file")) -> None:
    """Validate a rule source file without storing it."""
    try:
        rules = parse_rules(path.read_text(encoding="utf-8"))
    except RuleSourceError as e:
        err_console.print(f"[red]Invalid:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] {len(rules)} rules")


@rules_app.command("import")
def rules_import(
    path: Path = typer.Argument(..., help="Rule source JSON file"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store file"),
) -> None:
    """Validate a rule source file and make it the active rule set."""
    storage = _open_storage(store)
    try:
        rules = storage.save_rules_source(path.read_text(encoding="utf-8"))
    except RuleSourceError as e:
        err_console.print(f"[red]Not imported:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"[green]Imported {len(rules)} rules[/green]")


@rules_app.command("reset")
def rules_reset(store: Optional[Path] = typer.Option(None, "--store", help="Store file")) -> None:
    """Forget stored rules and go back to the built-in table."""
    _open_storage(store).reset_rules()
    console.print("[green]Rules reset to defaults[/green]")


# ─── keys ─────────────────────────────────────────────────────────────────────

@keys_app.command("list")
def keys_list(store: Optional[Path] = typer.Option(None, "--store", help="Store file")) -> None:
    """List keybindings."""
    manager = _open_storage(store).load_keybindings()
    table = Table(title="Keybindings")
    table.add_column("Keys")
    table.add_column("Action")
    for record in sorted(manager.to_list(), key=lambda r: (r["action"], r["combination"])):
        table.add_row(record["combination"], record["action"])
    console.print(table)


@keys_app.command("bind")
def keys_bind(
    combination: str = typer.Argument(..., help='Key combination, e.g. "ctrl+shift+f"'),
    action: str = typer.Argument(..., help=f"One of: {', '.join(EDITOR_ACTIONS)}"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store file"),
) -> None:
    """Bind a key combination to an editor action (replaces any previous binding)."""
    storage = _open_storage(store)
    manager = storage.load_keybindings()
    try:
        key_id = manager.bind(combination, action)
    except ValueError as e:
        err_console.print(f"[red]Cannot bind:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    storage.save_keybindings(manager)
    console.print(f"[green]{key_id}[/green] → {action}")


@keys_app.command("unbind")
def keys_unbind(
    combination: str = typer.Argument(..., help="Key combination"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store file"),
) -> None:
    """Remove a keybinding."""
    storage = _open_storage(store)
    manager = storage.load_keybindings()
    try:
        removed = manager.unbind(combination)
    except ValueError as e:
        err_console.print(f"[red]Cannot unbind:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    if not removed:
        console.print(f"[yellow]Nothing bound to {escape(combination)}[/yellow]")
        return
    storage.save_keybindings(manager)
    console.print(f"[green]Unbound {escape(combination)}[/green]")


@keys_app.command("reset")
def keys_reset(store: Optional[Path] = typer.Option(None, "--store", help="Store file")) -> None:
    """Restore the default keybindings."""
    _open_storage(store).reset_keybindings()
    console.print("[green]Keybindings reset to defaults[/green]")


@app.command()
def where() -> None:
    """Show where configuration is stored."""
    console.print(get_store_path())


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
