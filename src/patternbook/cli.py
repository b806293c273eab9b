#!/usr/bin/env python3
"""
pb: CLI for the patternbook catalogue

Usage:
    pb list patterns                     # List documents in a category
    pb show patterns active-partner      # Show a document (or where it redirects)
    pb related patterns active-partner   # Merged cross-references
    pb paths                             # Every URL segment the site answers
    pb check                             # Report links to missing documents
"""

from __future__ import annotations

import difflib
import json
import sys
from collections.abc import Sequence
from typing import Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as PATTERNBOOK_VERSION
from .config import CATEGORIES, SITE_NAME, category_label

CATEGORY_CHOICE = click.Choice(list(CATEGORIES))


# ─────────────────────────────────────────────────────────────────────────────
# Output Formatting
# ─────────────────────────────────────────────────────────────────────────────


def format_table(rows: list[dict], columns: list[str], max_widths: dict | None = None) -> str:
    """Format rows as a simple table."""
    if not rows:
        return ""

    max_widths = max_widths or {}
    widths = {col: len(col) for col in columns}

    def cell(row: dict, col: str) -> str:
        val = str(row.get(col) or "")
        limit = max_widths.get(col, 50)
        if len(val) > limit:
            val = val[: limit - 3] + "..."
        return val

    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(cell(row, col)))

    header = "  ".join(col.upper().ljust(widths[col]) for col in columns)
    separator = "  ".join("-" * widths[col] for col in columns)

    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(cell(row, col).ljust(widths[col]) for col in columns).rstrip())

    return "\n".join(lines)


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    else:
        click.echo(data)


def _handle_error(ctx: click.Context, error: Exception, exit_code: int = 1) -> NoReturn:
    """Report an error as text, or as JSON when --json-errors is set."""
    from .errors import PatternbookError, format_error_json

    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, PatternbookError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
    else:
        if json_errors:
            click.echo(format_error_json("INTERNAL_ERROR", str(error)), err=True)
        else:
            click.echo(f"Error: {error}", err=True)

    sys.exit(exit_code)


def _load_catalog(ctx: click.Context):
    from .core import Catalog
    from .errors import PatternbookError

    try:
        return Catalog.from_config()
    except PatternbookError as e:
        _handle_error(ctx, e)


def format_json_error(code: str, message: str) -> str:
    from .errors import format_error_json

    return format_error_json(code, message)


def get_error_code_for_exception(exc: Exception) -> str:
    """Map Click exceptions to error codes."""
    if isinstance(exc, click.BadParameter):
        return "INVALID_ARGUMENT"
    elif isinstance(exc, click.MissingParameter):
        return "MISSING_ARGUMENT"
    elif isinstance(exc, click.NoSuchOption):
        return "UNKNOWN_OPTION"
    elif isinstance(exc, UsageError):
        return "USAGE_ERROR"
    elif isinstance(exc, ClickException):
        return "CLI_ERROR"
    return "UNKNOWN_ERROR"


# ─────────────────────────────────────────────────────────────────────────────
# JSON Error Handling
# ─────────────────────────────────────────────────────────────────────────────


class JsonErrorGroup(click.Group):
    """Click group that formats errors as JSON when --json-errors is set.

    Also suggests the closest command name for typos.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(
                    cmd_name, self.list_commands(ctx), n=1, cutoff=0.6
                )
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        """Catch argument parsing errors and report them as JSON when requested."""
        argv = list(args) if args is not None else list(sys.argv[1:])

        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        # Accept --json-errors anywhere by moving it in front of the subcommand
        argv = [a for a in argv if a != "--json-errors"]
        argv.insert(0, "--json-errors")

        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except ClickException as e:
            code = get_error_code_for_exception(e)
            click.echo(format_json_error(code, e.format_message()), err=True)
            raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=PATTERNBOOK_VERSION, prog_name="pb")
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="PATTERNBOOK_QUIET",
    help="Suppress warnings, show only errors and essential output",
)
@click.pass_context
def cli(ctx: click.Context, json_errors: bool, quiet: bool):
    """pb: browse the patterns, anti-patterns and obstacles catalogue.

    \b
    Documents are read from PATTERNBOOK_DOCUMENTS_ROOT (or ./documents),
    one directory per category, and cross-references from
    relationships.yaml in that directory (or PATTERNBOOK_REGISTRY).

    \b
    Examples:
      pb list anti-patterns
      pb show patterns active-partner
      pb show patterns "show-me-ill-repeat"   # alternative title slug
      pb paths --json
    """
    from ._logging import set_quiet_mode

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet

    if quiet:
        set_quiet_mode(True)


@cli.command("list")
@click.argument("category", type=CATEGORY_CHOICE)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_documents(ctx: click.Context, category: str, as_json: bool):
    """List the documents in a category."""
    catalog = _load_catalog(ctx)
    records = catalog.get_all_documents(category)

    if as_json:
        output(
            [
                {
                    "slug": record.slug,
                    "title": record.title,
                    "emoji": record.emoji_indicator,
                    "alternative_titles": record.alternative_titles or [],
                }
                for record in records
            ],
            as_json=True,
        )
        return

    if not records:
        click.echo(f"No {category_label(category, plural=True).lower()} found.")
        return

    rows = [
        {"slug": record.slug, "title": record.title, "emoji": record.emoji_indicator}
        for record in records
    ]
    click.echo(format_table(rows, ["slug", "title", "emoji"], {"title": 60}))


def _format_related_sections(record) -> list[str]:
    lines: list[str] = []
    for target in CATEGORIES:
        links = record.related(target)
        if not links:
            continue
        lines.append("")
        lines.append(f"Related {category_label(target, plural=True)}")
        lines.append("-" * 40)
        for link in links:
            arrow = "->" if link.direction == "outgoing" else "<-"
            lines.append(f"  {arrow} {link.slug} ({link.type})")
    return lines


@cli.command()
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--raw", is_flag=True, help="Print the unmodified file contents")
@click.pass_context
def show(ctx: click.Context, category: str, slug: str, as_json: bool, raw: bool):
    """Show a document by canonical slug or alternative title slug.

    An alternative title slug prints the canonical URL to redirect to.
    """
    from .errors import PatternbookError

    catalog = _load_catalog(ctx)
    try:
        resolution = catalog.resolve(category, slug)
    except PatternbookError as e:
        _handle_error(ctx, e)

    record = resolution.content

    if as_json:
        payload = {
            "outcome": resolution.outcome,
            "canonical_slug": resolution.canonical_slug,
            "canonical_url": resolution.canonical_url,
            "is_alternative_title": resolution.is_alternative_title,
            "document": record.model_dump(mode="json", exclude_none=True, exclude={"raw_content"}),
        }
        output(payload, as_json=True)
        return

    if resolution.is_alternative_title:
        click.echo(f"Redirect: {resolution.canonical_url} ({record.title})")
        return

    if raw:
        click.echo(record.raw_content)
        return

    heading = f"{record.emoji_indicator} {record.title}" if record.emoji_indicator else record.title
    lines = [f"{heading}  [{category_label(category)}]"]
    if record.alternative_titles:
        lines.append(f"Also known as: {', '.join(record.alternative_titles)}")
    lines.append("=" * 60)
    lines.append(record.content.strip("\n"))
    lines.extend(_format_related_sections(record))
    if record.authors:
        lines.append("")
        lines.append(f"Authors: {', '.join(record.authors)}")

    click.echo("\n".join(lines))


@cli.command()
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def related(ctx: click.Context, category: str, slug: str, as_json: bool):
    """Show merged cross-references of a document (frontmatter + registry)."""
    from .errors import PatternbookError

    catalog = _load_catalog(ctx)
    try:
        resolution = catalog.resolve(category, slug)
    except PatternbookError as e:
        _handle_error(ctx, e)

    record = resolution.content

    if as_json:
        output(
            {
                target: [link.model_dump() for link in record.related(target)]
                for target in CATEGORIES
                if record.related(target)
            },
            as_json=True,
        )
        return

    lines = _format_related_sections(record)
    if not lines:
        click.echo(f"No relationships for {record.full_id}.")
        return
    click.echo("\n".join(lines).lstrip("\n"))


@cli.command()
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="Limit to one category")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def paths(ctx: click.Context, category: str | None, as_json: bool):
    """List every URL segment the site answers (canonical and alternative)."""
    catalog = _load_catalog(ctx)
    categories = [category] if category else list(CATEGORIES)
    static_paths = catalog.static_paths(categories)

    if as_json:
        output([path.model_dump() for path in static_paths], as_json=True)
        return

    for path in static_paths:
        suffix = "  (alternative title)" if path.is_alternative_title else ""
        click.echo(f"/{path.category}/{path.slug}/{suffix}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check(ctx: click.Context, as_json: bool):
    """Report cross-references that point at missing documents.

    Exits with status 1 when problems are found.
    """
    catalog = _load_catalog(ctx)
    problems = catalog.check_links()

    if as_json:
        output(
            {"problems": [problem.model_dump() for problem in problems], "count": len(problems)},
            as_json=True,
        )
    elif not problems:
        click.echo(f"{SITE_NAME}: all links resolve.")
    else:
        rows = [problem.model_dump() for problem in problems]
        click.echo(format_table(rows, ["origin", "source", "target", "reason"]))

    if problems:
        sys.exit(1)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def types(as_json: bool):
    """List the relationship types the registry accepts."""
    from .relation_types import RELATIONSHIP_TYPE_DESCRIPTIONS

    if as_json:
        output(RELATIONSHIP_TYPE_DESCRIPTIONS, as_json=True)
        return

    width = max(len(name) for name in RELATIONSHIP_TYPE_DESCRIPTIONS)
    for name, description in RELATIONSHIP_TYPE_DESCRIPTIONS.items():
        click.echo(f"{name.ljust(width)}  {description}")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def main():
    """Entry point for pb CLI."""
    from ._logging import configure_logging

    configure_logging()
    cli()


if __name__ == "__main__":
    main()
