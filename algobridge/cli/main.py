import logging
import sys

import click

from algobridge.config import AlgoBridgeConfig
from algobridge.data.provider import DefaultDataProvider
from algobridge.errors import AlgoBridgeError
from algobridge.interpreters import message_header
from algobridge.runtime.registry import build_chain
from algobridge.runtime.sandbox import ScriptRuntime

logger = logging.getLogger(__name__)


def _load_config() -> AlgoBridgeConfig:
    config = AlgoBridgeConfig.from_env()
    try:
        config.validate()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    return config


@click.group()
def cli(): ...


@cli.command()
@click.argument("script")
@click.option("--class", "class_name", required=True, help="Algorithm class defined by the script")
@click.option("--method", "methods", multiple=True, help="Method to call (repeatable, called in order)")
@click.option("--module", "module_name", default=None, help="Module name (default: file stem)")
def run(script, class_name, methods, module_name):
    """
    Run an algorithm script and report failures as one diagnostic.

    \b
    Examples:
      algobridge run algo.py --class MyAlgorithm --method initialize --method on_data
    """
    config = _load_config()
    try:
        chain = build_chain(config)
    except AlgoBridgeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    runtime = ScriptRuntime()

    try:
        module = runtime.load_file(script, module_name)
        algorithm = module.create(class_name)
        for method in methods:
            result = algorithm.call(method)
            if result is not None:
                click.echo(f"{method}: {result!r}")
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as exc:
        interpreted = chain.interpret(exc)
        logger.debug("Run of %s failed: %s", script, message_header(interpreted))
        click.echo(str(interpreted), err=True)
        sys.exit(1)

    click.echo("OK")


@cli.command()
@click.argument("key")
@click.option("--data-folder", default=None, help="Base directory for relative keys")
def fetch(key, data_folder):
    """Write the data stored under KEY to stdout (decompressing .gz)."""
    config = _load_config()
    provider = DefaultDataProvider(data_folder or config.data_folder)
    stream = provider.fetch(key)
    if stream is None:
        click.echo(f"Not found: {key}", err=True)
        sys.exit(1)
    with stream:
        click.get_binary_stream("stdout").write(stream.read())


@cli.command()
def interpreters():
    """List the interpreter chain in dispatch order."""
    config = _load_config()
    try:
        chain = build_chain(config)
    except AlgoBridgeError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()
    for position, interpreter in enumerate(chain.interpreters, start=1):
        cls = type(interpreter)
        click.echo(f"{position}. {cls.__module__}.{cls.__qualname__}")


@cli.command()
def config():
    """Show the configuration loaded from the environment."""
    click.echo(_load_config().get_summary())


if __name__ == "__main__":
    cli()
