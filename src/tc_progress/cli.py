from typing import Optional
import sys
import typer
from .config import load_config, Options
from .events import ReportError, iter_elements
from .logging import setup_logging
from .reporters.teamcity import escape as escape_value
from .runners.handler import ReportTranslator

LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

app = typer.Typer(add_completion=False, help="tc-progress - translate test progress reports into console and TeamCity output")

@app.command()
def translate(
    input: str = typer.Argument("-", help="File of progress reports, '-' for stdin"),
    teamcity: Optional[bool] = typer.Option(None, "--teamcity/--no-teamcity", help="Emit ##teamcity service messages"),
    labels: Optional[bool] = typer.Option(None, "--labels/--no-labels", help="Print '***** <name>' as each test starts"),
    strict: Optional[bool] = typer.Option(None, "--strict/--lenient", help="Stop at the first bad report"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config YAML"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Diagnostics level (written to stderr)"),
):
    if log_level.upper() not in LOG_LEVELS:
        raise typer.BadParameter(f"Unknown level {log_level!r}, expected one of: {', '.join(LOG_LEVELS)}", param_hint="--log-level")
    log = setup_logging(log_level.upper())
    cfg: Options = load_config(config)
    overrides = {k: v for k, v in {"teamcity": teamcity, "labels": labels, "strict": strict}.items() if v is not None}
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    translator = ReportTranslator(cfg)

    stream = sys.stdin if input == "-" else open(input, encoding="utf-8")
    try:
        for node in iter_elements(stream):
            translator.handle_element(node)
    except ReportError as e:
        log.error("%s", e)
        raise typer.Exit(code=1)
    finally:
        if stream is not sys.stdin:
            stream.close()

@app.command()
def escape(text: str = typer.Argument(..., help="Value to escape for a service message field")):
    typer.echo(escape_value(text))

if __name__ == "__main__":
    app()
