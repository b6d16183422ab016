import logging

import click

from spark_monitoring.config import (
    DEFAULT_PROFILE,
    DEFAULT_PROPERTIES,
    SPARK_MONITORING_HOST,
    SPARK_MONITORING_PORT,
    Config,
    DictConfigLoader,
    LocalFileConfigLoader,
)
from spark_monitoring.interpreter import InterpreterContext, SparkMonitoringInterpreter
from spark_monitoring.results import InterpreterResult

EXIT_WORDS = ("exit", "quit")


def echo_result(result: InterpreterResult):
    if result.message:
        click.echo(result.message.rstrip("\n"), err=not result.ok)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="JSON file of <profile>.spark.monitoring.* properties.",
)
@click.option("--host", help="Host of the default profile.")
@click.option("--port", type=int, help="Port of the default profile.")
@click.option("-v", "--verbose", is_flag=True)
@click.pass_context
def main(ctx, config_path, host, port, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if config_path:
        loader = LocalFileConfigLoader(config_path)
    else:
        loader = DictConfigLoader(DEFAULT_PROPERTIES)
    properties = Config(loader).properties()
    if host:
        properties[f"{DEFAULT_PROFILE}.{SPARK_MONITORING_HOST}"] = host
    if port:
        properties[f"{DEFAULT_PROFILE}.{SPARK_MONITORING_PORT}"] = str(port)

    interpreter = SparkMonitoringInterpreter(properties)
    interpreter.open()
    ctx.obj = interpreter
    ctx.call_on_close(interpreter.close)


@main.command()
@click.argument("command", nargs=-1, required=True)
@click.pass_obj
def run(interpreter, command):
    """Run one command, e.g. ``run /jobs/hour/8``."""
    result = interpreter.interpret(" ".join(command), InterpreterContext())
    echo_result(result)
    if not result.ok:
        raise click.exceptions.Exit(1)


@main.command()
@click.pass_obj
def shell(interpreter):
    """Read commands from stdin, one per line, sharing one session."""
    for line in click.get_text_stream("stdin"):
        line = line.strip()
        if line in EXIT_WORDS:
            break
        echo_result(interpreter.interpret(line, InterpreterContext()))


@main.command()
@click.argument("buf", default="")
@click.pass_obj
def complete(interpreter, buf):
    """List the command names matching BUF."""
    for suggestion in interpreter.completion(buf, len(buf)):
        click.echo(suggestion)


if __name__ == "__main__":
    main()
