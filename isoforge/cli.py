from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from .artifacts import save_json_error, unpack_artifacts
from .config import Settings, load_settings, setup_logging
from .llm import InvalidModelJSON
from .models import Architecture, BuildLogEntry, Distribution, ImageRequest
from .prompts import build_blueprint_prompt
from .session import ForgeSession
from .templates import TEMPLATES

app = typer.Typer(help="ISOForge: AI-assisted blueprints for custom bootable Linux images.")
console = Console()

SEVERITY_STYLES = {
    "info": ("white", "i "),
    "success": ("green", "✔ "),
    "warning": ("yellow", "! "),
    "error": ("red", "✖ "),
}

ARCH_ALIASES = {"amd64": Architecture.X86_64, "arm64": Architecture.AARCH64}


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Diagnostic log level (DEBUG, INFO, WARNING, ERROR). Defaults to ISOFORGE_LOG_LEVEL.",
    ),
):
    """ISOForge CLI entrypoint."""
    settings = load_settings()
    setup_logging(log_level or settings.log_level)
    ctx.obj = settings
    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit(code=0)


def _settings(ctx: typer.Context) -> Settings:
    if isinstance(ctx.obj, Settings):
        return ctx.obj
    return load_settings()


def _normalize(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


def _resolve_distribution(value: str) -> Distribution:
    wanted = _normalize(value)
    for distribution in Distribution:
        if wanted in {_normalize(distribution.value), _normalize(distribution.name)}:
            return distribution
    choices = ", ".join(d.value for d in Distribution)
    print(f"[red]Invalid distribution '{escape(value)}'. Use one of: {choices}.[/red]")
    raise typer.Exit(code=2)


def _resolve_architecture(value: str) -> Architecture:
    normalized = value.lower()
    if normalized in ARCH_ALIASES:
        return ARCH_ALIASES[normalized]
    for architecture in Architecture:
        if normalized == architecture.value:
            return architecture
    print("[red]Invalid architecture. Use 'x86_64' or 'aarch64'.[/red]")
    raise typer.Exit(code=2)


def _read_request_file(file: Path) -> ImageRequest:
    if not file.exists():
        print("[red]File not found[/red]")
        raise typer.Exit(code=1)
    try:
        return ImageRequest.model_validate_json(file.read_text(encoding="utf-8"))
    except ValidationError as exc:
        print(f"[red]Invalid request file:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def _print_log_entry(entry: BuildLogEntry) -> None:
    color, icon = SEVERITY_STYLES[entry.severity]
    print(f"[dim]\\[{entry.timestamp}][/dim] [{color}]{icon}{escape(entry.message)}[/{color}]")


def _print_artifacts(session: ForgeSession) -> None:
    for artifact in session.artifacts:
        console.rule(f"[bold]{escape(artifact.name)}[/bold] [dim]({escape(artifact.language)})[/dim]")
        console.print(Syntax(artifact.content, artifact.language or "text", word_wrap=True))


def _build_session(
    settings: Settings,
    template: Optional[str],
    request_file: Optional[Path],
) -> ForgeSession:
    session = ForgeSession(settings)
    session.on_log(_print_log_entry)
    if template is not None and request_file is not None:
        print("[red]Use either --template or --request-file, not both.[/red]")
        raise typer.Exit(code=2)
    if template is not None:
        try:
            session.load_template(template)
        except KeyError:
            print(f"[red]Unknown template '{escape(template)}'.[/red] Run 'isoforge templates' to list them.")
            raise typer.Exit(code=1)
    elif request_file is not None:
        session.request = _read_request_file(request_file)
    return session


@app.command()
def forge(
    ctx: typer.Context,
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Start from a preset template id."),
    request_file: Optional[Path] = typer.Option(
        None, "--request-file", "-f", help="Start from an image request stored as JSON."
    ),
    distribution: Optional[str] = typer.Option(None, "--distribution", "-d", help="Target distribution."),
    distribution_version: Optional[str] = typer.Option(
        None, "--distro-version", help="Distribution version label, e.g. '24.04 LTS'."
    ),
    architecture: Optional[str] = typer.Option(None, "--arch", help="x86_64 or aarch64."),
    hostname: Optional[str] = typer.Option(None, "--hostname"),
    username: Optional[str] = typer.Option(None, "--username"),
    packages: Optional[List[str]] = typer.Option(None, "--package", "-p", help="Add a package (repeatable)."),
    removed_packages: Optional[List[str]] = typer.Option(
        None, "--remove-package", help="Remove a package (repeatable)."
    ),
    clear_packages: bool = typer.Option(False, "--clear-packages", help="Start from an empty package list."),
    instructions: Optional[str] = typer.Option(None, "--instructions", "-i", help="Free-text custom instructions."),
    cloud_init: Optional[bool] = typer.Option(None, "--cloud-init/--no-cloud-init"),
    out: Path = typer.Option(Path("."), "--out", "-o", help="Directory for the exported bundle."),
    unpack: bool = typer.Option(False, "--unpack", help="Also write each artifact to its own file."),
    show: bool = typer.Option(True, "--show/--no-show", help="Print generated artifacts."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the prompt without calling the service."),
):
    """Generate a configuration blueprint for a bootable image."""
    settings = _settings(ctx)
    session = _build_session(settings, template, request_file)

    overrides = {
        "distribution": _resolve_distribution(distribution) if distribution is not None else None,
        "distribution_version": distribution_version,
        "architecture": _resolve_architecture(architecture) if architecture is not None else None,
        "hostname": hostname,
        "username": username,
        "custom_instructions": instructions,
        "cloud_init_enabled": cloud_init,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if clear_packages:
        overrides["packages"] = ()
    if overrides:
        session.update(**overrides)
    for name in packages or []:
        session.add_package(name)
    for name in removed_packages or []:
        session.remove_package(name)

    if dry_run:
        print(escape(build_blueprint_prompt(session.request)))
        raise typer.Exit(code=0)

    artifacts = session.generate()
    if not artifacts:
        if isinstance(session.last_error, InvalidModelJSON):
            exc = session.last_error
            error_path = save_json_error(exc.raw_text, exc.error, exc.kind, runs_dir=settings.runs_dir)
            print(f"Saved error artifact to [bold]{error_path}[/bold].")
        raise typer.Exit(code=1)

    if show:
        _print_artifacts(session)

    bundle_path = session.export(out)
    print(f"Saved blueprint to [bold]{bundle_path}[/bold]")
    if unpack:
        for path in unpack_artifacts(artifacts, out):
            print(f"- {path}")


@app.command()
def templates():
    """List preset image templates."""
    table = Table(title="Quick Start Templates")
    table.add_column("id", style="bold")
    table.add_column("name")
    table.add_column("distribution")
    table.add_column("description")
    for template in TEMPLATES:
        table.add_row(
            template.id,
            template.name,
            f"{template.request.distribution.value} {template.request.distribution_version}",
            template.description,
        )
    console.print(table)


@app.command()
def ask(
    ctx: typer.Context,
    query: str,
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Ask in the context of a template."),
    distribution: Optional[str] = typer.Option(None, "--distribution", "-d"),
):
    """Ask the assistant a question about the image being configured."""
    session = _build_session(_settings(ctx), template, None)
    if distribution is not None:
        session.update(distribution=_resolve_distribution(distribution))
    try:
        answer = session.ask(query)
    except Exception as exc:
        print(f"[red]Assistant request failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    print(escape(answer))


if __name__ == "__main__":
    app()
