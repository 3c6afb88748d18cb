"""apprepo CLI — inspect and manage the local application registry."""

import json
import logging

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from apprepo import __version__

console = Console()

data_dir_option = click.option(
    "--data-dir",
    "-d",
    default=None,
    envvar="APPREPO_DATA_DIR",
    help="Registry data directory (default: ~/.apprepo)",
)


def _open_registry(data_dir: str | None):
    from apprepo.registry.repo import AppRegistry

    return AppRegistry.open(data_dir)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """apprepo — application installation registry.

    Install web application manifests, see what is installed at or by an
    origin, and manage per-application state.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
@data_dir_option
def list_apps(data_dir: str | None):
    """List every installed application."""
    reg = _open_registry(data_dir)
    views = reg.list()

    if not views:
        console.print("[yellow]No applications installed.[/]")
        return

    table = Table(title=f"Installed applications ({len(views)})")
    table.add_column("Name", style="cyan")
    table.add_column("Launch URL")
    table.add_column("Installed by")
    table.add_column("Widget", justify="center")

    for view in views:
        widget = "[green]Y[/]" if view.widget_url else ""
        table.add_row(view.name or "", view.launch_url, view.install_url, widget)

    console.print(table)


# ── Install ──────────────────────────────────────────────────────────


class ConsolePrompt:
    """Ask for install consent on the terminal."""

    def __init__(self, assume_yes: bool = False) -> None:
        self.assume_yes = assume_yes

    def prompt(self, install_origin, manifest, on_confirm, options):
        lines = [
            f"[bold]{manifest.get('name', '')}[/]",
            manifest.get("description", ""),
            f"Launch URL: {manifest['base_url']}{manifest.get('launch_path') or ''}",
            f"Requested by: {install_origin}",
        ]
        console.print(Panel("\n".join(line for line in lines if line), title="Install application"))
        if options.get("isExternalServer"):
            console.print(
                "[bold red]Warning:[/] this manifest was not served from the application's own site."
            )
        if self.assume_yes:
            on_confirm(True)
            return
        on_confirm(click.confirm("Install this application?", default=False))


@main.command()
@click.argument("origin")
@click.option("--url", "-u", default=None, help="Manifest URL to fetch")
@click.option(
    "--manifest",
    "-m",
    "manifest_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Local manifest file (JSON or YAML)",
)
@click.option("--authorization-url", default=None, help="Authorization URL to record")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.option("--timeout", default=10.0, show_default=True, help="Manifest fetch timeout (seconds)")
@data_dir_option
def install(
    origin: str,
    url: str | None,
    manifest_path: str | None,
    authorization_url: str | None,
    yes: bool,
    timeout: float,
    data_dir: str | None,
):
    """Install an application on behalf of ORIGIN.

    Give either --url to fetch the manifest, or --manifest to read it from
    a local file.
    """
    from apprepo.capabilities import HttpManifestFetcher

    args: dict = {}
    if manifest_path:
        try:
            with open(manifest_path) as f:
                args["manifest"] = yaml.safe_load(f)
        except yaml.YAMLError as e:
            console.print(f"  [red]Failed to parse:[/] {e}")
            raise SystemExit(1)
        if args["manifest"] is None:
            console.print(f"  [red]Failed to parse:[/] {escape(manifest_path)} is empty")
            raise SystemExit(1)
    if url:
        args["url"] = url
    if authorization_url:
        args["authorization_url"] = authorization_url

    outcome: list = []
    reg = _open_registry(data_dir)
    reg.install(
        origin,
        args,
        ConsolePrompt(assume_yes=yes),
        HttpManifestFetcher(timeout=timeout),
        outcome.append,
    )

    if outcome and outcome[0] is True:
        console.print("\n[green]Installed.[/]")
        return

    if outcome:
        code, message = outcome[0]["error"]
        color = "yellow" if code == "denied" else "red"
        console.print(f"\n[{color}]{code}[/]: {escape(message)}")
    raise SystemExit(1)


# ── Remove ───────────────────────────────────────────────────────────


@main.command()
@click.argument("key")
@data_dir_option
def remove(key: str, data_dir: str | None):
    """Remove the application installed under KEY (its launch URL)."""
    from apprepo.exceptions import NoSuchApplicationError

    reg = _open_registry(data_dir)
    try:
        reg.remove(key)
    except NoSuchApplicationError as e:
        console.print(f"[red]{e.code}[/]: {escape(e.message)}")
        raise SystemExit(1)
    console.print(f"  Removed: {key}")


# ── Origin queries ───────────────────────────────────────────────────


@main.command()
@click.argument("origin")
@data_dir_option
def installed(origin: str, data_dir: str | None):
    """List applications that run at ORIGIN."""
    reg = _open_registry(data_dir)
    apps = reg.get_installed(origin)

    if not apps:
        console.print(f"[yellow]Nothing installed at {origin}.[/]")
        return

    for app in apps:
        console.print(f"  [cyan]{app.get('name', '')}[/] {app['base_url']}{app.get('launch_path') or ''}")


@main.command(name="installed-by")
@click.argument("origin")
@data_dir_option
def installed_by(origin: str, data_dir: str | None):
    """List applications that ORIGIN installed."""
    from datetime import datetime, timezone

    reg = _open_registry(data_dir)
    installs = reg.get_installed_by(origin)

    if not installs:
        console.print(f"[yellow]Nothing installed by {origin}.[/]")
        return

    for item in installs:
        when = datetime.fromtimestamp(item.install_time / 1000, tz=timezone.utc)
        console.print(f"  [cyan]{item.manifest.get('name', '')}[/] installed {when.isoformat()}")


# ── State ────────────────────────────────────────────────────────────


@main.group()
def state():
    """Manage per-application state."""


@state.command(name="get")
@click.argument("state_id")
@data_dir_option
def state_get(state_id: str, data_dir: str | None):
    """Print the state stored for STATE_ID."""
    value = _open_registry(data_dir).load_state(state_id)
    if value is None:
        console.print(f"[yellow]No state for {state_id}.[/]")
        return
    click.echo(json.dumps(value, indent=2))


@state.command(name="set")
@click.argument("state_id")
@click.argument("value")
@data_dir_option
def state_set(state_id: str, value: str, data_dir: str | None):
    """Store VALUE (a JSON document) as the state for STATE_ID."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        console.print(f"  [red]Invalid JSON:[/] {e}")
        raise SystemExit(1)
    _open_registry(data_dir).save_state(state_id, parsed)
    console.print(f"  Saved state for {state_id}")


@state.command(name="delete")
@click.argument("state_id")
@data_dir_option
def state_delete(state_id: str, data_dir: str | None):
    """Delete the state stored for STATE_ID."""
    _open_registry(data_dir).save_state(state_id, None)
    console.print(f"  Deleted state for {state_id}")


if __name__ == "__main__":
    main()
