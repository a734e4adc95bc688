from typing import List, Optional, TextIO
import logging, sys, threading
import xml.etree.ElementTree as ET
from ..config import Options
from ..events import Event, ReportError, from_element, parse_report
from ..output import Line, write_lines
from ..reporters.console import ConsoleReporter
from ..reporters.teamcity import TeamCityReporter

log = logging.getLogger(__name__)

def _raw(source) -> str:
    if isinstance(source, ET.Element):
        return ET.tostring(source, encoding="unicode")
    return source if isinstance(source, str) else repr(source)

class ReportTranslator:
    """Turns progress reports into console and TeamCity output, one report at a time.

    Bad reports are logged and skipped unless ``options.strict`` is set, in
    which case the ReportError propagates. The streams are flushed after each
    report but never closed.
    """

    def __init__(self, options: Options, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.options = options
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.teamcity = TeamCityReporter() if options.teamcity else None
        self.console = ConsoleReporter(labels=options.labels)
        self._lock = threading.Lock()

    def render(self, event: Event) -> List[Line]:
        lines: List[Line] = []
        if self.teamcity:
            lines += self.teamcity.render(event)
        lines += self.console.render(event)
        return lines

    def handle(self, event: Optional[Event]) -> None:
        self._translate(event, lambda e: e)

    def report_progress(self, report: str) -> None:
        self._translate(report, parse_report)

    def handle_element(self, node: ET.Element) -> None:
        self._translate(node, from_element)

    def _translate(self, source, parse) -> None:
        with self._lock:
            try:
                event = parse(source)
                if event is None:
                    log.debug("Ignoring report: %s", _raw(source))
                    return
                lines = self.render(event)
            except ReportError as e:
                if self.options.strict:
                    raise
                log.warning("Skipping report: %s", e)
                log.debug("Report was: %s", _raw(source))
                return
            self._emit(lines)

    def _emit(self, lines: List[Line]) -> None:
        write_lines(lines, self.out, self.err)
        self.out.flush()
        self.err.flush()
