"""Click entry point: run a command and report how it went."""

import logging
import os
import sys

import click

from bossy import __version__, config, log
from bossy.command import Command
from bossy.error import Error, SpawnFailed

EXIT_SPAWN_FAILED = 127


def _exit_code(err: Error) -> int:
    """Map an Error to the exit code the CLI reports, shell-style."""
    if isinstance(err.cause, SpawnFailed):
        return EXIT_SPAWN_FAILED
    status = err.status
    if status is None:
        return 1
    if status.signal is not None:
        return 128 + status.signal
    return status.code


@click.group()
@click.version_option(version=__version__, prog_name="bossy")
def main():
    """Run commands and find out exactly how they failed."""


@main.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.option("--pure", is_flag=True, help="Start from an empty environment")
@click.option("--env", "-e", "env", multiple=True, metavar="KEY=VALUE", help="Set an environment variable")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML mapping of environment variables",
)
@click.option("--cwd", "-C", type=click.Path(exists=True, file_okay=False), default=None, help="Working directory")
@click.option("--capture", is_flag=True, help="Collect output, print stdout when done")
@click.option("--verbose", "-v", count=True, help="Log what bossy does (-vv for debug)")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def run(pure, env, env_file, cwd, capture, verbose, command):
    """Run COMMAND directly (no shell)."""
    try:
        level = config.log_level(verbose)
    except ValueError as e:
        raise click.UsageError(str(e))
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    env_vars = {}
    if env_file:
        try:
            env_vars.update(config.load_env_file(env_file))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--env-file")
    try:
        env_vars.update(config.parse_env_assignments(list(env)))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--env")

    name, *args = command
    cmd = Command.pure(name) if pure else Command.impure(name)
    cmd.add_args(args).add_env_vars(env_vars)
    if cwd:
        cmd.set_current_dir(cwd)

    try:
        if capture:
            output = cmd.run_and_wait_for_output()
            click.echo(output.stdout, nl=False)
            status = output.status
        else:
            status = cmd.run_and_wait()
    except Error as e:
        log.error(str(e))
        sys.exit(_exit_code(e))

    if verbose:
        log.info(f"{cmd.display()}: {status}")


@main.command()
@click.argument("line")
def parse(line):
    """Show how LINE splits into a command name and arguments.

    Splitting is on whitespace only. Quotes and backslashes are passed
    through as ordinary characters.
    """
    try:
        cmd = Command.impure_parse(line)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="LINE")
    click.echo(os.fsdecode(cmd.name))
    for arg in cmd.args:
        click.echo(arg)
    click.echo(f"display: {cmd.display()}")


if __name__ == "__main__":
    main()
