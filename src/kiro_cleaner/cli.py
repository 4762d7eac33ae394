"""CLI interface for kiro-cleaner."""

from __future__ import annotations

import json
import logging
import sys

import click

from kiro_cleaner.core.chat_scanner import ConversationScanner
from kiro_cleaner.core.file_scanner import FileScanner, summarize
from kiro_cleaner.core.planner import CleanupOptions, CleanupPlanner
from kiro_cleaner.core.process import ProcessError, is_ide_running, stop_ide, wait_for_exit
from kiro_cleaner.core.safety import SafetyPolicy
from kiro_cleaner.models.file_entry import FileCategory
from kiro_cleaner.models.progress import ScanProgress
from kiro_cleaner.settings import Settings
from kiro_cleaner.utils import bytes_to_human, format_relative_time

_PROGRESS_EVERY = 500

_REASON_COLORS = {
    "log": "yellow",
    "cache": "blue",
    "index": "green",
    "chat": "cyan",
    "history": "magenta",
    "temp": "red",
}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _progress_printer(enabled: bool):
    """Return a progress callback that prints a status line now and then."""

    def on_progress(progress: ScanProgress) -> None:
        if not enabled:
            return
        if progress.is_complete:
            click.echo("\r" + " " * 60 + "\r", nl=False)
        elif progress.scanned_files and progress.scanned_files % _PROGRESS_EVERY == 0:
            click.echo(
                f"\r  {progress.phase}: {progress.scanned_files:,} files, "
                f"{bytes_to_human(progress.total_size)}",
                nl=False,
            )

    return on_progress


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """kiro-cleaner: reclaim disk space used by the Kiro IDE."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(as_json: bool) -> None:
    """Show storage usage by category (never deletes)."""
    file_scanner = FileScanner()
    if not file_scanner.roots and not as_json:
        click.echo("No Kiro storage found.")
        return

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning Kiro storage...\n")

    printer = _progress_printer(not as_json)
    summary = summarize(file_scanner.scan(on_progress=printer))
    conv_stats = ConversationScanner().get_conversation_stats(on_progress=printer)

    if as_json:
        data = {
            "roots": [str(r) for r in file_scanner.roots],
            "total_bytes": summary.total_bytes,
            "categories": {
                c.value: {"bytes": summary.size_of(c), "files": summary.count_of(c)}
                for c in FileCategory
                if summary.count_of(c)
            },
            "recommendations": summary.recommendations,
            "conversations": {
                "total": conv_stats.total_conversations,
                "messages": conv_stats.total_messages,
                "bytes": conv_stats.total_size,
                "human_messages": conv_stats.human_messages,
                "bot_messages": conv_stats.bot_messages,
                "tool_messages": conv_stats.tool_messages,
                "avg_messages_per_conversation": conv_stats.avg_messages_per_conversation,
                "workspaces": [
                    {
                        "workspace_id": ws.workspace_id,
                        "conversations": ws.conversation_count,
                        "messages": ws.total_messages,
                        "bytes": ws.total_size,
                        "last_activity": ws.last_activity.isoformat() if ws.last_activity else None,
                    }
                    for ws in conv_stats.workspace_breakdown
                ],
            },
        }
        click.echo(json.dumps(data, indent=2))
        return

    for category in FileCategory:
        count = summary.count_of(category)
        if not count:
            continue
        click.echo(
            f"  {category.value.capitalize():12s} "
            f"{click.style(bytes_to_human(summary.size_of(category)), fg='green', bold=True):>20s}"
            f"  ({count:,} files)"
        )
    click.echo(f"\nTotal: {click.style(bytes_to_human(summary.total_bytes), fg='green', bold=True)}")

    if conv_stats.total_conversations:
        click.echo(f"\n{click.style('💬', bold=True)} Conversations\n")
        click.echo(f"  Conversations:  {conv_stats.total_conversations:,}")
        click.echo(
            f"  Messages:       {conv_stats.total_messages:,} "
            f"(human {conv_stats.human_messages:,}, bot {conv_stats.bot_messages:,}, "
            f"tool {conv_stats.tool_messages:,})"
        )
        click.echo(f"  Avg per chat:   {conv_stats.avg_messages_per_conversation:.1f}")
        click.echo(f"  Size:           {bytes_to_human(conv_stats.total_size)}")
        click.echo(f"  Workspaces:     {len(conv_stats.workspace_breakdown)}")
        click.echo(f"  Last activity:  {format_relative_time(conv_stats.last_activity)}")

    for rec in summary.recommendations:
        click.echo(f"\n  {click.style('→', fg='cyan')} {rec}")
    click.echo()


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--kill-ide", is_flag=True, help="Stop Kiro before cleaning")
@click.option("--keep-logs/--no-keep-logs", default=None, help="Keep log files")
@click.option("--keep-cache/--no-keep-cache", default=None, help="Keep cache files")
@click.option("--keep-chats/--no-keep-chats", default=None, help="Keep chat conversations")
@click.option("--keep-index/--no-keep-index", default=None, help="Keep code index")
@click.option("--keep-recent", type=click.IntRange(min=0), default=None,
              help="Keep files modified within N days (0 = keep none)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(
    dry_run: bool,
    yes: bool,
    kill_ide: bool,
    keep_logs: bool | None,
    keep_cache: bool | None,
    keep_chats: bool | None,
    keep_index: bool | None,
    keep_recent: int | None,
    as_json: bool,
) -> None:
    """Scan and clean redundant data (temp, logs, cache, chats, index, history)."""
    stored = Settings.instance().cleanup_options()
    options = CleanupOptions(
        keep_logs=stored.keep_logs if keep_logs is None else keep_logs,
        keep_cache=stored.keep_cache if keep_cache is None else keep_cache,
        keep_chats=stored.keep_chats if keep_chats is None else keep_chats,
        keep_index=stored.keep_index if keep_index is None else keep_index,
        keep_recent=stored.keep_recent if keep_recent is None else keep_recent,
    )

    running = False
    if not dry_run:
        running = is_ide_running()
        if running and kill_ide:
            try:
                stop_ide()
                running = not wait_for_exit()
            except ProcessError as exc:
                click.echo(f"{click.style('!', fg='yellow')} Could not stop Kiro: {exc}", err=True)
        if running and not as_json:
            click.echo(f"{click.style('!', fg='yellow')} Kiro is running, some files may be locked.")
            if not yes and not click.confirm("Continue anyway?", default=False):
                click.echo("Aborted.")
                return

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning for cleanable files...\n")

    printer = _progress_printer(not as_json)
    file_scanner = FileScanner()
    entries = file_scanner.scan(on_progress=printer)
    conversations = [] if options.keep_chats else ConversationScanner().find_cleanable_conversations(0, 0)

    planner = CleanupPlanner(options, SafetyPolicy(roots=tuple(file_scanner.roots)))
    plan = planner.build_plan(entries, conversations)

    if not plan.candidates:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "results": []}))
        else:
            click.echo("Nothing to clean.")
        return

    groups = plan.by_reason()
    if not as_json:
        for reason, count, size in groups:
            noun = "conversations" if reason == "chat" else "files"
            click.echo(
                f"  {click.style('✓', fg=_REASON_COLORS.get(reason, 'white'))} {reason:12s} "
                f"{click.style(bytes_to_human(size), fg='green', bold=True)} ({count:,} {noun})"
            )
        click.echo(f"\nTotal: {click.style(bytes_to_human(plan.total_bytes), fg='green', bold=True)}\n")
        for warning in plan.warnings[:5]:
            click.echo(f"  {click.style('!', fg='yellow')} {warning}")
        if len(plan.warnings) > 5:
            click.echo(f"  {click.style('!', fg='yellow')} ... and {len(plan.warnings) - 5} more")

    if dry_run:
        if as_json:
            data = [{"reason": r, "file_count": c, "would_free_bytes": s} for r, c, s in groups]
            click.echo(json.dumps(
                {"status": "dry_run", "safe_to_delete": plan.safe_to_delete, "results": data},
                indent=2,
            ))
        else:
            click.echo("(dry run, no files were deleted)")
        return

    if not yes and not as_json:
        if not click.confirm("Delete these files?", default=False):
            click.echo("Aborted.")
            return

    result = planner.execute(plan)

    if as_json:
        data = {
            "status": "cleaned",
            "freed_bytes": result.freed_bytes,
            "files_removed": result.files_removed,
            "skipped": result.skipped,
            "errors": [{"path": str(e.path), "message": e.message} for e in result.errors],
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(
        f"Cleaned {result.files_removed:,} files, freed "
        f"{click.style(bytes_to_human(result.freed_bytes), fg='green', bold=True)}"
    )
    if result.skipped:
        click.echo(f"  {result.skipped:,} already gone")
    if result.errors:
        click.echo(f"  {click.style('!', fg='yellow')} {len(result.errors)} error(s):")
        for error in result.errors[:10]:
            click.echo(f"    {error.path}: {error.message}")
    click.echo()


# ── chats ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--older-than", "older_than", type=click.IntRange(min=0), default=30, show_default=True,
              help="Age in days (0 lists every conversation)")
@click.option("--larger-than", "larger_than", type=click.IntRange(min=0), default=0,
              help="Size in MB (0 disables the size check)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def chats(older_than: int, larger_than: int, as_json: bool) -> None:
    """List conversations that are old or large enough to clean."""
    scanner = ConversationScanner()
    cleanable = scanner.find_cleanable_conversations(older_than, larger_than * 1024 * 1024)
    savings = scanner.calculate_space_savings(cleanable)

    if as_json:
        data = {
            "total_bytes": savings,
            "conversations": [
                {
                    "path": str(c.path),
                    "size_bytes": c.size,
                    "modified": c.modified.isoformat(),
                    "reason": c.reason,
                }
                for c in cleanable
            ],
        }
        click.echo(json.dumps(data, indent=2))
        return

    if not cleanable:
        click.echo("No cleanable conversations.")
        return

    for c in cleanable:
        click.echo(
            f"  {c.reason:6s} {bytes_to_human(c.size):>10s}  "
            f"{format_relative_time(c.modified):16s} {c.path.parent.name}/{c.path.name}"
        )
    click.echo(
        f"\n{len(cleanable):,} conversations, "
        f"{click.style(bytes_to_human(savings), fg='green', bold=True)} reclaimable\n"
    )


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Show or edit persistent cleanup settings."""


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Show the effective settings."""
    settings = Settings.instance()
    if as_json:
        click.echo(json.dumps(dict(settings.items()), indent=2))
        return
    click.echo(f"\n  {click.style('Config file:', bold=True)} {settings.path}\n")
    for key, value in settings.items():
        click.echo(f"  {key:25s} {value}")
    click.echo()


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set KEY to VALUE, e.g. `config set cleanup.keep_recent 7`."""
    settings = Settings.instance()
    try:
        stored = settings.set_from_string(key, value)
    except KeyError:
        click.echo(f"Unknown setting '{key}'.", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"Invalid value: {exc}", err=True)
        sys.exit(1)
    click.echo(f"{key} = {stored}")
