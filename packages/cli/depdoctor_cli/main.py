"""depdoctor CLI - Main entry point."""

import typer

from depdoctor_common import configure_logging
from depdoctor_common.constants import DEFAULT_LOG_LEVEL, ENV_LOG_LEVEL

from . import analyze_cmd, info_cmd, rules_cmd

app = typer.Typer(
    name="depdoctor",
    help="depdoctor - Diagnose dependency version conflicts in JVM builds",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL, "--log-level", envvar=ENV_LOG_LEVEL, help="Log level: debug, info, warning, error"
    ),
    log_json: bool = typer.Option(False, "--log-json", help="Emit log records as JSON lines"),
):
    """Configure logging for every command."""
    configure_logging(log_level, json_format=log_json)


# Register all commands
app.command()(analyze_cmd.analyze)
app.command()(rules_cmd.rules)
app.command()(rules_cmd.check)
app.command()(info_cmd.version)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
