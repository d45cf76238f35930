#!/usr/bin/env python3
"""
awssume command-line interface

Manages the local Role registry and runs commands with assumed-Role
credentials.

Commands:
    list        List configured Roles
    add         Add a Role
    remove      Remove a Role
    convert     Convert the configuration file to another format
    exec        Run a command with a Role's temporary credentials
    version     Display the awssume version

Usage:
    awssume list
    awssume add arn:aws:iam::123456789012:role/admin admin my-session
    awssume convert json
    awssume exec admin --session-duration 900 -- aws s3 ls
"""

import sys
from typing import Dict, List, Optional

import click

from .arn import ARN
from .auth.role_manager import DEFAULT_SESSION_DURATION, RoleManager
from .config_store import CONFIG_PATH_ENV_VAR, Config, load_config
from .formats import ConfigFormat
from .logging_config import configure_logging
from .models import Role
from .process import get_shell
from .version import __version__

#: Short names accepted for each command
COMMAND_ALIASES: Dict[str, str] = {
    "l": "list",
    "ls": "list",
    "c": "convert",
    "conv": "convert",
    "a": "add",
    "rm": "remove",
    "e": "exec",
    "ex": "exec",
    "exe": "exec",
}

TABLE_PADDING = 4


class AliasedGroup(click.Group):
    """click Group resolving the short command names in COMMAND_ALIASES"""

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: List[str]):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args

    def main(self, *args, **kwargs):
        """Run the CLI, reporting every failure on stdout with exit status 1.

        Usage errors (missing arguments, unknown options) are reported like
        any other error instead of click's stderr/exit 2 default. A status
        passed to ``ctx.exit`` (the child's exit status for ``exec``) is
        propagated unchanged.
        """
        kwargs["standalone_mode"] = False
        try:
            rv = super().main(*args, **kwargs)
        except click.ClickException as e:
            click.echo(e.format_message())
            sys.exit(1)
        except click.exceptions.Abort:
            click.echo("Aborted!")
            sys.exit(1)
        sys.exit(rv if isinstance(rv, int) else 0)


def handle_error(error: Exception, verbose: bool = False) -> None:
    """Print the error to stdout and exit with status 1"""
    if verbose:
        click.echo(f"{type(error).__name__}: {error}")
        import traceback

        traceback.print_exc()
    else:
        click.echo(str(error))
    sys.exit(1)


def format_table(rows: List[List[str]]) -> str:
    """Left-aligned columns separated by at least TABLE_PADDING spaces"""
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        cells = [cell.ljust(width + TABLE_PADDING) for cell, width in zip(row[:-1], widths)]
        lines.append("".join(cells) + row[-1])
    return "\n".join(lines)


def _load(ctx: click.Context) -> Config:
    return load_config(ctx.obj.get("config_path"))


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.option(
    "--config",
    "config_path",
    envvar=CONFIG_PATH_ENV_VAR,
    default=None,
    help="Configuration path without extension (default: ~/.config/awssume)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and verbose error output")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], verbose: bool):
    """
    CLI for performing sts:AssumeRole

    Keeps a registry of IAM Roles in ~/.config/awssume.{yaml,json,toml} and
    runs commands with temporary credentials of a chosen Role.
    """
    configure_logging("DEBUG" if verbose else None)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("version", __version__)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_context
def version(ctx: click.Context):
    """Display awssume version"""
    click.echo(f"awssume version {ctx.obj['version']}")


@cli.command(name="list")
@click.pass_context
def list_roles(ctx: click.Context):
    """
    List configured Roles

    Examples:
        awssume list
        awssume ls
    """
    try:
        config = _load(ctx)
        rows = [["ALIAS", "ARN", "SESSION_NAME"]]
        rows.extend([role.alias, str(role.arn), role.session_name] for role in config.roles)
        click.echo(format_table(rows))
    except Exception as e:
        handle_error(e, ctx.obj["verbose"])


@cli.command()
@click.argument("fmt", metavar="FORMAT", type=str)
@click.pass_context
def convert(ctx: click.Context, fmt: str):
    """
    Convert configuration between formats

    FORMAT is one of json, yaml (or yml), toml.

    Examples:
        awssume convert json
        awssume conv toml
    """
    try:
        config = _load(ctx)
        old_path = config.file_path
        config.convert(ConfigFormat.from_ext(fmt))
        click.echo(f"✓ Configuration converted: {old_path} -> {config.file_path}", err=True)
    except Exception as e:
        handle_error(e, ctx.obj["verbose"])


@cli.command()
@click.argument("arn", type=str)
@click.argument("alias", type=str)
@click.argument("session_name", type=str)
@click.pass_context
def add(ctx: click.Context, arn: str, alias: str, session_name: str):
    """
    Add a new Role

    Examples:
        awssume add arn:aws:iam::123456789012:role/admin admin my-session
    """
    try:
        config = _load(ctx)
        role = Role(alias=alias, arn=ARN.parse(arn), session_name=session_name)
        config.roles.add(role)
        config.save()
        click.echo(f"✓ Role {alias} added to {config.file_path}", err=True)
    except Exception as e:
        handle_error(e, ctx.obj["verbose"])


@cli.command()
@click.argument("alias", type=str)
@click.pass_context
def remove(ctx: click.Context, alias: str):
    """
    Remove a Role by its alias

    Examples:
        awssume remove admin
    """
    try:
        config = _load(ctx)
        config.roles.remove_by_alias(alias)
        config.save()
        click.echo(f"✓ Role {alias} removed from {config.file_path}", err=True)
    except Exception as e:
        handle_error(e, ctx.obj["verbose"])


@cli.command(name="exec")
@click.argument("alias", type=str)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--session-duration",
    "-d",
    type=int,
    default=DEFAULT_SESSION_DURATION,
    show_default=True,
    help="The duration of the STS Session when the Role is assumed",
)
@click.pass_context
def exec_command(ctx: click.Context, alias: str, command: tuple, session_duration: int):
    """
    Execute a subprocess with Role credentials as environment variables

    Without a command, your shell ($SHELL, /bin/bash or /bin/sh) is started.

    Examples:
        awssume exec admin -- aws sts get-caller-identity
        awssume exec admin -d 900 -- terraform plan
        awssume exec admin
    """
    try:
        config = _load(ctx)
        argv = list(command) if command else [get_shell()]
        status = RoleManager(config).exec_role(alias, session_duration, argv[0], argv[1:])
    except Exception as e:
        handle_error(e, ctx.obj["verbose"])
    else:
        ctx.exit(status)


def main() -> None:
    cli(obj={"version": __version__})


if __name__ == "__main__":
    main()
