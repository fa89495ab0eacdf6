"""mantle CLI for inspecting applications - Tyro implementation."""

import json
import logging
import sys
from builtins import print as builtin_print
from pathlib import Path
from typing import Annotated, Any

import attrs
import tyro
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mantle.application import Application, ApplicationService
from mantle.application.provider import Binding, type_label
from mantle.config import MantleConfig, import_path, set_config_instance
from mantle.exceptions import MantleError
from mantle.service.hook import HookFunction, get_hook_definition


# Subcommand definitions using attrs
@attrs.define
class Services:
    """List the services registered with an application."""

    target: Annotated[str, tyro.conf.Positional]
    """Application import path (module:attr), or a factory returning one."""

    json: Annotated[bool, tyro.conf.arg(aliases=["-j"])] = False
    """Output as JSON."""

    setup: Annotated[bool, tyro.conf.arg(aliases=["-s"])] = False
    """Run application setup (provider resolution) before listing."""


@attrs.define
class Pipeline:
    """Show the hook order around one service."""

    target: Annotated[str, tyro.conf.Positional]
    """Application import path (module:attr), or a factory returning one."""

    operation_id: Annotated[str, tyro.conf.Positional]
    """Operation id of the service."""

    json: Annotated[bool, tyro.conf.arg(aliases=["-j"])] = False
    """Output as JSON."""


Command = (
    Annotated[Services, tyro.conf.subcommand(name="services")]
    | Annotated[Pipeline, tyro.conf.subcommand(name="pipeline")]
)


def setup_logging() -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_application(target: str) -> Application:
    """Import an application from ``module:attr``.

    The attribute may be an Application or a callable returning one.

    Raises:
        MantleError: If the target cannot be imported or is not an application
    """
    obj = import_path(target)
    if not isinstance(obj, Application) and callable(obj):
        obj = obj()
    if not isinstance(obj, Application):
        raise MantleError(f"{target} is not an Application (got {type(obj).__name__})")
    return obj


def _hook_label(hook_fn: HookFunction) -> str:
    definition = get_hook_definition(hook_fn)
    if definition is None:
        return getattr(hook_fn, "__name__", "anonymous")
    return definition.label


def _format_binding(binding: Binding) -> str:
    label = type_label(binding.type)
    if binding.style:
        label = f"{label}/{binding.style}"
    return label


def describe_service(service: ApplicationService) -> dict[str, Any]:
    """Get a JSON-serializable summary of a registered service."""
    return {
        "operation_id": service.operation_id,
        "name": service.name,
        "method": service.method.value,
        "resource": service.resource,
        "bindings": [_format_binding(b) for b in service.bindings],
        "hooks": len(service.get_hooks()),
        "setup": service.is_setup,
    }


def show_services(app: Application, output_json: bool = False) -> None:
    """Print the services of an application."""
    services = [describe_service(s) for s in app.services]

    if output_json:
        builtin_print(
            json.dumps(
                {
                    "version": app.version,
                    "state": app.state.value,
                    "global_hooks": len(app.get_hooks()),
                    "providers": [
                        {"type": type_label(p.type), "style": p.style} for p in app.providers
                    ],
                    "services": services,
                },
                indent=2,
            )
        )
        return

    console = Console()

    if not services:
        print("[yellow]No services registered[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Operation", style="cyan")
    table.add_column("Method")
    table.add_column("Resource")
    table.add_column("Bindings")
    table.add_column("Hooks", justify="right")
    table.add_column("Setup")

    for service in services:
        table.add_row(
            service["operation_id"],
            service["method"],
            service["resource"],
            ", ".join(service["bindings"]) or "[dim]default[/dim]",
            str(service["hooks"]),
            "[green]true[/green]" if service["setup"] else "[red]false[/red]",
        )

    console.print(
        Panel(
            f"[bold]mantle {app.version}[/bold] state: {app.state.value}, "
            f"providers: {len(app.providers)}, global hooks: {len(app.get_hooks())}",
            expand=False,
        )
    )
    console.print(table)


def show_pipeline(app: Application, operation_id: str, output_json: bool = False) -> None:
    """Print the onion order of hooks around one service."""
    service = app.service(operation_id)
    if service is None:
        print(f"[red]Error: No service registered with operation id '{operation_id}'[/red]", file=sys.stderr)
        sys.exit(1)

    layers = [("global", _hook_label(h)) for h in app.get_hooks()]
    layers += [("service", _hook_label(h)) for h in service.get_hooks()]

    if output_json:
        builtin_print(
            json.dumps(
                {
                    "operation_id": service.operation_id,
                    "before": [name for _, name in layers],
                    "after": [name for _, name in reversed(layers)],
                    "layers": [{"scope": scope, "hook": name} for scope, name in layers],
                },
                indent=2,
            )
        )
        return

    console = Console()
    console.print(Panel(f"[bold cyan]Pipeline: {service.operation_id}[/bold cyan]", expand=False))

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Scope")
    table.add_column("Hook", style="cyan")
    for index, (scope, name) in enumerate(layers, start=1):
        table.add_row(str(index), scope, name)
    console.print(table)

    names = [name for _, name in layers]
    flow = [*names, f"<<{service.name}>>", *reversed(names)]
    console.print(" => ".join(flow), markup=False)


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    config_dir: Annotated[Path | None, tyro.conf.arg(help="Configuration directory")] = None,
) -> None:
    """mantle - service-dispatch engine.

    Inspect the services, providers and hook pipelines of an application.
    """
    setup_logging()

    if config_dir is not None:
        set_config_instance(MantleConfig.from_yaml(config_dir / "mantle.yaml"))

    try:
        app = load_application(cmd.target)
    except MantleError as e:
        print(f"[red]Error loading application: {e}[/red]", file=sys.stderr)
        sys.exit(1)

    if isinstance(cmd, Services):
        if cmd.setup:
            try:
                app.setup()
            except MantleError as e:
                print(f"[red]Error during setup: {e}[/red]", file=sys.stderr)
                sys.exit(1)
        show_services(app, output_json=cmd.json)

    elif isinstance(cmd, Pipeline):
        show_pipeline(app, cmd.operation_id, output_json=cmd.json)


def entry_point() -> None:
    """Entry point for the mantle command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()
