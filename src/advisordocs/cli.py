"""Command line interface for advisordocs."""

from __future__ import annotations

import shlex
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from advisordocs.config import AdvisorDocsConfig, ConfigError, ConfigManager, flatten_for_env
from advisordocs.documents import group_documents_by_base_name
from advisordocs.documents.models import FREQUENCIES, DocumentRequest, as_utc
from advisordocs.documents.store import DocumentStore
from advisordocs.logging_setup import configure_logging
from advisordocs.notifications import Notification, Notifier, discard
from advisordocs.overview import build_overview, calendar_events
from advisordocs.presets import PresetBin, PresetItem
from advisordocs.scheduling import DueStatus, classify, get_next_due_date
from advisordocs.session import Session, SessionError, load_session

console = Console()

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


def _load_config() -> AdvisorDocsConfig:
    """Load the effective configuration and configure logging from it.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    manager = ConfigManager()
    try:
        config = manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(config.logging)
    return config


def _console_notifier(quiet: bool) -> Notifier:
    if quiet:
        return discard

    def _print(notification: Notification) -> None:
        colour = "yellow" if notification.level == "warning" else "cyan"
        console.print(f"[{colour}]{notification.title}:[/{colour}] {notification.description}")

    return _print


def _quiet_enabled(ctx: click.Context, quiet: bool, config: AdvisorDocsConfig) -> bool:
    if ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE:
        return quiet
    return config.cli.quiet_default


def _outcome(store: DocumentStore, request: DocumentRequest) -> str:
    document = store.get(request.id)
    return "update requested" if document and document.has_update_request else "new request"


def _load_session_or_empty(path: Optional[str]) -> Session:
    if path is None:
        return Session()
    try:
        return load_session(Path(path))
    except SessionError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_bin(spec: str, position: int) -> PresetBin:
    """Parse ``LABEL=Item A,Item B`` into a preset bin."""
    label, separator, items = spec.partition("=")
    if not separator or not label.strip():
        raise click.BadParameter(f"Expected LABEL=item,item but got {spec!r}.", param_hint="--bin")
    names = [name.strip() for name in items.split(",") if name.strip()]
    return PresetBin(
        id=f"bin-{position}",
        label=label.strip(),
        items=tuple(PresetItem(name=name) for name in names),
    )


def _now(value: Optional[datetime]) -> datetime:
    return as_utc(value) if value else datetime.now(timezone.utc)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="advisordocs")
def cli() -> None:
    """advisordocs tracks document requests, uploads and recurring due dates
    for advisory clients.
    """


# ---------------------------------------------------------------------- #
# presets                                                                #
# ---------------------------------------------------------------------- #


@cli.group()
def presets() -> None:
    """Manage reusable document request presets."""


@presets.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit presets as JSON.")
def presets_list(json_output: bool) -> None:
    """List saved presets, most recent first."""
    config = _load_config()
    store = DocumentStore.from_config(config)
    saved = store.presets.presets

    if json_output:
        console.print_json(data=[p.model_dump(mode="json", by_alias=True) for p in saved])
        return
    if not saved:
        console.print("[yellow]No presets saved yet.[/yellow]")
        return

    table = Table(title="Document presets")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Bins", justify="right")
    table.add_column("Documents", justify="right")
    table.add_column("Updated")
    for preset in saved:
        table.add_row(
            preset.id,
            preset.name,
            str(len(preset.bins)),
            str(sum(len(bin_.items) for bin_ in preset.bins)),
            preset.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@presets.command("show")
@click.argument("preset_id")
def presets_show(preset_id: str) -> None:
    """Show the bins and document types of PRESET_ID."""
    config = _load_config()
    preset = DocumentStore.from_config(config).presets.get(preset_id)
    if preset is None:
        raise click.ClickException(f"No preset with id {preset_id}.")

    console.print(f"[bold]{preset.name}[/bold] ({preset.id})")
    for bin_ in preset.bins:
        console.print(f"  {bin_.label} [dim]({bin_.frequency})[/dim]")
        for item in bin_.items:
            console.print(f"    - {item.name}")


@presets.command("save")
@click.argument("name")
@click.option(
    "--bin",
    "bin_specs",
    multiple=True,
    required=True,
    help='Bin as "LABEL=Document A,Document B"; repeat for several bins.',
)
def presets_save(name: str, bin_specs: tuple[str, ...]) -> None:
    """Save a new preset called NAME."""
    config = _load_config()
    bins = [_parse_bin(spec, position) for position, spec in enumerate(bin_specs, start=1)]
    preset = DocumentStore.from_config(config).save_preset(name, bins)
    console.print(f"[green]Saved preset {preset.name} ({preset.id}).[/green]")


@presets.command("rename")
@click.argument("preset_id")
@click.argument("name")
def presets_rename(preset_id: str, name: str) -> None:
    """Rename PRESET_ID to NAME."""
    config = _load_config()
    updated = DocumentStore.from_config(config).update_preset(preset_id, name=name)
    if updated is None:
        raise click.ClickException(f"No preset with id {preset_id}.")
    console.print(f"[green]Renamed preset {preset_id} to {updated.name}.[/green]")


@presets.command("delete")
@click.argument("preset_id")
def presets_delete(preset_id: str) -> None:
    """Delete PRESET_ID."""
    config = _load_config()
    if not DocumentStore.from_config(config).delete_preset(preset_id):
        raise click.ClickException(f"No preset with id {preset_id}.")
    console.print(f"[green]Deleted preset {preset_id}.[/green]")


@presets.command("apply")
@click.argument("preset_id")
@click.option("--client", "client_id", required=True, help="Client to request documents from.")
@click.option("--advisor", "advisor_name", help="Requesting advisor (defaults to configuration).")
@click.option(
    "--session",
    "session_path",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="YAML seed with the documents already on file.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the created requests as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress notifications.")
@click.pass_context
def presets_apply(
    ctx: click.Context,
    preset_id: str,
    client_id: str,
    advisor_name: Optional[str],
    session_path: Optional[str],
    json_output: bool,
    quiet: bool,
) -> None:
    """Request every document of PRESET_ID from a client."""
    config = _load_config()
    session = _load_session_or_empty(session_path)
    store = DocumentStore.from_config(
        config,
        session.documents,
        notifier=_console_notifier(_quiet_enabled(ctx, quiet, config) or json_output),
    )
    if store.presets.get(preset_id) is None:
        raise click.ClickException(f"No preset with id {preset_id}.")

    requests = store.apply_preset_to_client(
        preset_id,
        client_id=client_id,
        advisor_name=advisor_name or config.requests.advisor_name,
    )

    if json_output:
        console.print_json(data=[request.model_dump(mode="json") for request in requests])
        return

    table = Table(title=f"Requests for client {client_id}")
    table.add_column("ID")
    table.add_column("Document")
    table.add_column("Frequency")
    table.add_column("Outcome")
    for request in requests:
        table.add_row(
            request.id, request.document_name, request.frequency, _outcome(store, request)
        )
    console.print(table)


# ---------------------------------------------------------------------- #
# request / find                                                         #
# ---------------------------------------------------------------------- #


@cli.command()
@click.argument("name")
@click.option("--client", "client_id", required=True, help="Client to request the document from.")
@click.option(
    "--frequency",
    type=click.Choice(FREQUENCIES),
    help="Recurrence of the request (defaults to configuration).",
)
@click.option("--advisor", "advisor_name", help="Requesting advisor (defaults to configuration).")
@click.option("--description", help="Note sent to the client with the request.")
@click.option(
    "--session",
    "session_path",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="YAML seed with the documents already on file.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the request as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress notifications.")
@click.pass_context
def request(
    ctx: click.Context,
    name: str,
    client_id: str,
    frequency: Optional[str],
    advisor_name: Optional[str],
    description: Optional[str],
    session_path: Optional[str],
    json_output: bool,
    quiet: bool,
) -> None:
    """Request the document NAME from a client.

    When a similar document is already on file, an update is requested for it
    instead of opening a new request.
    """
    config = _load_config()
    session = _load_session_or_empty(session_path)
    store = DocumentStore.from_config(
        config,
        session.documents,
        notifier=_console_notifier(_quiet_enabled(ctx, quiet, config) or json_output),
    )
    try:
        result = store.request_document(
            name,
            requested_by=advisor_name or config.requests.advisor_name,
            client_id=client_id,
            frequency=frequency,  # type: ignore[arg-type]
            description=description,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="NAME") from exc

    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
        return
    console.print(
        f"[green]{result.document_name}: {_outcome(store, result)} "
        f"({result.id}, {result.frequency}).[/green]"
    )


@cli.command()
@click.argument("name")
@click.argument("session_path", type=click.Path(exists=True, dir_okay=False, path_type=str))
def find(name: str, session_path: str) -> None:
    """Look up documents in SESSION_PATH resembling NAME."""
    config = _load_config()
    session = _load_session_or_empty(session_path)
    store = DocumentStore.from_config(
        config, session.documents, notifier=_console_notifier(False)
    )

    match = store.find_similar(name)
    if match is not None:
        console.print(f"Closest match: [bold]{match.name}[/bold] ({match.id}, {match.folder})")

    hits = store.search(name)
    if not hits:
        console.print(f"[yellow]No documents contain {name!r}.[/yellow]")
        return
    table = Table(title=f"Documents containing {name!r}")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Folder")
    table.add_column("Client")
    for document in hits:
        table.add_row(document.id, document.name, document.folder, document.client_id or "-")
    console.print(table)


# ---------------------------------------------------------------------- #
# due / overview / groups                                                #
# ---------------------------------------------------------------------- #


@cli.command()
@click.argument("anchor", type=click.DateTime(formats=_DATE_FORMATS))
@click.option("--frequency", type=click.Choice(FREQUENCIES), help="Recurrence of the request.")
@click.option(
    "--override",
    type=click.DateTime(formats=_DATE_FORMATS),
    help="Explicit due date that replaces the computed one.",
)
@click.option("--now", type=click.DateTime(formats=_DATE_FORMATS), help="Reference time.")
def due(
    anchor: datetime,
    frequency: Optional[str],
    override: Optional[datetime],
    now: Optional[datetime],
) -> None:
    """Print the next due date for a document anchored at ANCHOR."""
    config = _load_config()
    due_date = get_next_due_date(
        as_utc(anchor),
        frequency,  # type: ignore[arg-type]
        as_utc(override) if override else None,
    )
    if due_date is None:
        console.print("[yellow]No due date: the request does not recur.[/yellow]")
        return

    status = classify(due_date, _now(now), window_days=config.scheduling.due_soon_days)
    suffix = ""
    if status is not None:
        colour = "red" if status is DueStatus.OVERDUE else "yellow"
        suffix = f" [{colour}]({status.value})[/{colour}]"
    console.print(f"Next due: {due_date.date().isoformat()}{suffix}")


@cli.command()
@click.argument("session_path", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option("--client", "client_ids", multiple=True, help="Limit the calendar to these clients.")
@click.option("--now", type=click.DateTime(formats=_DATE_FORMATS), help="Reference time.")
@click.option("--json", "json_output", is_flag=True, help="Emit the overview as JSON.")
def overview(
    session_path: str,
    client_ids: tuple[str, ...],
    now: Optional[datetime],
    json_output: bool,
) -> None:
    """Summarize due dates and pending requests for the documents in SESSION_PATH."""
    config = _load_config()
    session = _load_session_or_empty(session_path)
    result = build_overview(
        session.documents,
        session.clients,
        _now(now),
        due_soon_days=config.scheduling.due_soon_days,
        upcoming_limit=config.scheduling.upcoming_limit,
    )
    events = calendar_events(session.documents, set(client_ids) or None)

    if json_output:
        payload: dict[str, Any] = {
            "overdue": len(result.overdue),
            "due_soon": len(result.due_soon),
            "pending_requests": len(result.pending_requests),
            "clients": [
                {
                    "id": row.client.id,
                    "name": row.client.name,
                    "documents": row.documents_count,
                    "pending_updates": row.pending_updates,
                    "unread_messages": row.unread_messages,
                    "due_soon": row.due_soon,
                    "overdue": row.overdue,
                }
                for row in result.client_rows
            ],
            "upcoming": [
                {"id": entry.document.id, "name": entry.document.name, "due": entry.due.isoformat()}
                for entry in result.upcoming
            ],
            "calendar": {
                day.isoformat(): [event.title for event in day_events]
                for day, day_events in events.items()
            },
        }
        console.print_json(data=payload)
        return

    console.print(
        f"[green]Overdue: {len(result.overdue)}, due soon: {len(result.due_soon)}, "
        f"pending requests: {len(result.pending_requests)}.[/green]"
    )

    table = Table(title="Clients")
    for column in ("Client", "Documents", "Pending updates", "Unread", "Due soon", "Overdue"):
        table.add_column(column, justify="left" if column == "Client" else "right")
    for row in result.client_rows:
        table.add_row(
            row.client.name,
            str(row.documents_count),
            str(row.pending_updates),
            str(row.unread_messages),
            str(row.due_soon),
            str(row.overdue),
        )
    console.print(table)

    upcoming = Table(title="Upcoming")
    upcoming.add_column("Due")
    upcoming.add_column("Document")
    upcoming.add_column("Client")
    for entry in result.upcoming:
        upcoming.add_row(
            entry.due.date().isoformat(), entry.document.name, entry.document.client_id or "-"
        )
    console.print(upcoming)


@cli.command()
@click.argument("session_path", type=click.Path(exists=True, dir_okay=False, path_type=str))
def groups(session_path: str) -> None:
    """Group the documents in SESSION_PATH by base name."""
    _load_config()
    session = _load_session_or_empty(session_path)
    for base_name, members in group_documents_by_base_name(session.documents).items():
        console.print(f"[bold]{base_name}[/bold] ({len(members)})")
        for document in members:
            console.print(f"  - {document.name} [dim]{document.timestamp.date().isoformat()}[/dim]")


# ---------------------------------------------------------------------- #
# config                                                                 #
# ---------------------------------------------------------------------- #


@cli.group()
def config() -> None:
    """Manage advisordocs configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    try:
        diff = ConfigManager().assign(segments, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an editor and validate the result."""
    manager = ConfigManager()
    original = manager.text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        manager.replace(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print("[green]Configuration updated successfully.[/green]")


@config.command("env")
def config_env() -> None:
    """Print the effective configuration as ADVISORDOCS__ environment exports."""
    try:
        effective = ConfigManager().load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    for name, value in flatten_for_env(effective).items():
        click.echo(f"export {name}={shlex.quote(value)}")


def main() -> None:
    """Console-script entry point."""
    cli()


__all__ = ["cli", "main"]
