"""CLI main entry point"""

import logging
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from devflow import __version__
from devflow.core.command import CommandRef, PrimaryCommand, with_default_selector
from devflow.core.config import CONFIG_FILE, RuntimeContext, load_config
from devflow.core.errors import DevflowError
from devflow.core.executor import run
from devflow.core.extensions import ExtensionRegistry
from devflow.core.policy import resolve_policy_commands

console = Console()

# Legacy command names still accepted on the command line
ALIASES = {
    "verify": "check",
    "smoke": "test:smoke",
}


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _command_text(command: str, selector: Optional[str]) -> str:
    text = f"{command}:{selector}" if selector else command
    return ALIASES.get(text, text)


@click.command(name="dwf")
@click.version_option(version=__version__, prog_name="dwf")
@click.argument("command")
@click.argument("selector", required=False)
@click.option("--config", "config_path", default=CONFIG_FILE, show_default=True,
              help="Path to devflow config")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv)")
@click.pass_context
def cli(ctx, command: str, selector: Optional[str], config_path: str, verbose: int):
    """Devflow - run canonical commands (fmt:check, test:unit, ...) across stacks.

    COMMAND may carry its selector (test:unit) or take it as a second
    argument (test unit).
    """
    _setup_logging(verbose)

    try:
        command_ref = CommandRef.parse(_command_text(command, selector))
        config = load_config(config_path)
        registry = ExtensionRegistry.discover(config)
        registry.validate_target_support(config.targets.profiles)

        if command_ref.primary == PrimaryCommand.CHECK:
            profile = command_ref.selector or PrimaryCommand.CHECK.default_selector()
            resolved = resolve_policy_commands(config, profile)
            console.print(f"[cyan]check:{profile}[/cyan] (runtime={config.runtime.profile.value})")
            for item in resolved:
                registry.ensure_can_run(item)
                console.print(f" - {item}")
            return

        registry.ensure_can_run(with_default_selector(command_ref))
        console.print(
            f"[cyan]run {command_ref}[/cyan] (runtime={config.runtime.profile.value}, "
            f"project={config.project.name}, stack={','.join(config.project.stack)})"
        )
        run(config, registry, command_ref, RuntimeContext.from_environ())

    except DevflowError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(1)


def main():
    cli()


if __name__ == "__main__":
    main()
