# Lightweight package init: the CLI imports typer/rich, library users should not need to.
__all__ = ["ReportTranslator", "Options", "escape"]

def __getattr__(name):
    if name == "ReportTranslator":
        from .runners.handler import ReportTranslator as _ReportTranslator
        return _ReportTranslator
    if name == "Options":
        from .config import Options as _Options
        return _Options
    if name == "escape":
        from .reporters.teamcity import escape as _escape
        return _escape
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
