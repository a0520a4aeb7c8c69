"""CMod CLI — administrative entry point for the moderation pipeline."""

import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cmod import __version__
from cmod.config import configure_logging, load_config
from cmod.errors import CModError, ContentRejectedError, NotFoundError

console = Console()


def _service(ctx: click.Context):
    """Build the moderation service lazily from the group's settings."""
    if "service" not in ctx.obj:
        from cmod.moderation.service import ModerationService
        from cmod.store.json_store import JsonFileStore

        config = ctx.obj["config"]
        ctx.obj["service"] = ModerationService(JsonFileStore(config.store_dir), config)
    return ctx.obj["service"]


def _print_classification(title: str, result) -> None:
    verdict = "[green]appropriate[/]" if result.is_appropriate else "[red]inappropriate[/]"
    lines = [
        f"Verdict:    {verdict}",
        f"Category:   {result.category.value}",
        f"Confidence: {result.confidence:.2f}",
    ]
    if result.flagged_terms:
        lines.append(f"Flagged:    {', '.join(result.flagged_terms)}")
    for reason in result.reasons:
        lines.append(f"  - {reason}")
    console.print(Panel("\n".join(lines), title=title))


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--store-dir", default=None, help="Override the document store directory")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, store_dir: str | None, log_level: str | None):
    """CMod — content moderation pipeline.

    Classify content, file reports, and run threshold-based moderation
    (warn at 3 reports, delete at 5 by default) with an audit trail.
    """
    try:
        config = load_config(config_path)
    except CModError as e:
        raise click.ClickException(str(e))
    if store_dir:
        config.store_dir = store_dir
    if log_level:
        config.log_level = log_level
    configure_logging(config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── Classification ───────────────────────────────────────────────────


@main.command()
@click.argument("value")
@click.option("--media", is_flag=True, help="Treat VALUE as a media file name or URL")
@click.pass_context
def classify(ctx: click.Context, value: str, media: bool):
    """Classify a piece of text or a media reference."""
    service = _service(ctx)
    if media:
        _print_classification("Media", service.moderate_image(value))
    else:
        _print_classification("Text", service.moderate_text(value))


@main.command(name="check-post")
@click.argument("text")
@click.option("--image", "-i", multiple=True, help="Image reference (repeatable)")
@click.option("--video", "-v", multiple=True, help="Video reference (repeatable)")
@click.pass_context
def check_post(ctx: click.Context, text: str, image: tuple, video: tuple):
    """Classify a whole post: text plus image and video references."""
    result = _service(ctx).moderate_post(text, list(image), list(video))
    _print_classification("Post", result)


# ── Content & reports ────────────────────────────────────────────────


@main.command()
@click.argument("author_id")
@click.argument("text")
@click.option("--image", "-i", multiple=True, help="Image reference (repeatable)")
@click.option("--video", "-v", multiple=True, help="Video reference (repeatable)")
@click.pass_context
def submit(ctx: click.Context, author_id: str, text: str, image: tuple, video: tuple):
    """Submit new content through the classification gate."""
    try:
        item = _service(ctx).submit_content(author_id, text, list(image), list(video))
    except ContentRejectedError as e:
        console.print(f"[red]Rejected:[/] {e}")
        ctx.exit(1)
    console.print(f"[green]Stored[/] content {item.id}")


@main.command()
@click.argument("content_id")
@click.argument("reporter_id")
@click.option(
    "--reason",
    default="other",
    type=click.Choice(["inappropriate", "spam", "offensive", "other"]),
)
@click.option("--name", "reporter_name", default="", help="Reporter display name")
@click.pass_context
def report(ctx: click.Context, content_id: str, reporter_id: str, reason: str, reporter_name: str):
    """File a community report and re-evaluate the content item."""
    try:
        filed, evaluation = _service(ctx).add_report(content_id, reporter_id, reason, reporter_name)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    console.print(f"  Report {filed.id} filed ({evaluation.report_count} total)")
    if evaluation.deleted:
        console.print(f"  [red]Deleted[/] content {content_id}")
    elif evaluation.warned:
        console.print(f"  [yellow]Warned[/] author of {content_id}")


# ── Administration ───────────────────────────────────────────────────


@main.command()
@click.pass_context
def sweep(ctx: click.Context):
    """Re-evaluate every content item against the report thresholds."""
    console.print("\n[bold blue]CMod[/] — Reconciliation sweep\n")
    result = _service(ctx).process_all_content()
    console.print(
        Panel(
            f"Processed: {result.processed_count}\n"
            f"Deleted:   {result.deleted_count}\n"
            f"Warned:    {result.warned_count}\n"
            f"Failed:    {result.failed_count}",
            title="Sweep Result",
        )
    )


@main.command(name="high-reports")
@click.option("--threshold", "-t", default=3, show_default=True, type=int)
@click.pass_context
def high_reports(ctx: click.Context, threshold: int):
    """List content items with at least THRESHOLD reports."""
    items = _service(ctx).get_high_report_items(threshold)
    if not items:
        console.print("[yellow]No content at or above the threshold.[/]")
        return

    table = Table(title=f"Highly reported content ({len(items)})")
    table.add_column("Content", style="cyan")
    table.add_column("Author")
    table.add_column("Reports", justify="right", style="red")
    table.add_column("Body")
    for entry in items:
        table.add_row(entry.item.id, entry.item.author_id, str(entry.report_count), entry.item.body[:50])
    console.print(table)


@main.command()
@click.option("--limit", "-n", default=50, show_default=True, type=int)
@click.option("--format", "fmt", default="table", type=click.Choice(["table", "json", "csv"]))
@click.pass_context
def logs(ctx: click.Context, limit: int, fmt: str):
    """Show the moderation audit log, newest first."""
    service = _service(ctx)
    if fmt != "table":
        click.echo(service.audit_log.export(fmt, limit=limit))
        return

    entries = service.get_moderation_logs(limit)
    if not entries:
        console.print("[yellow]No moderation actions recorded.[/]")
        return

    table = Table(title=f"Moderation log ({len(entries)} entries)")
    table.add_column("When", style="dim")
    table.add_column("Content", style="cyan")
    table.add_column("Action")
    table.add_column("Reports", justify="right")
    table.add_column("Admin", justify="center")
    table.add_column("Reason")
    for e in entries:
        table.add_row(
            e.created_at[:19],
            e.content_id,
            e.action.value,
            str(e.report_count),
            "Y" if e.is_admin_initiated else "",
            e.reason[:50],
        )
    console.print(table)


@main.command()
@click.argument("content_id")
@click.option("--admin", "admin_id", required=True, help="Administrator performing the delete")
@click.option("--reason", default="", help="Reason recorded in the audit log")
@click.pass_context
def delete(ctx: click.Context, content_id: str, admin_id: str, reason: str):
    """Delete a content item regardless of its report count."""
    outcome = _service(ctx).admin_delete(content_id, admin_id, reason)
    if outcome.executed:
        console.print(f"[green]Deleted[/] content {content_id}")
    else:
        console.print(f"[yellow]Content {content_id} was already deleted.[/]")


@main.command()
@click.argument("content_id")
@click.option("--reason", default="Reviewed by moderator")
@click.pass_context
def review(ctx: click.Context, content_id: str, reason: str):
    """Record that a content item was reviewed and left in place."""
    try:
        _service(ctx).review(content_id, reason)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    console.print(f"[green]Reviewed[/] content {content_id}")


@main.command(name="config")
@click.pass_context
def show_config(ctx: click.Context):
    """Print the effective configuration."""
    from dataclasses import asdict

    settings = asdict(ctx.obj["config"])
    if settings["notification_webhook_secret"]:
        settings["notification_webhook_secret"] = "***"
    click.echo(json.dumps(settings, indent=2))


if __name__ == "__main__":
    main()
