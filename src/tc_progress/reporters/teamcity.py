"""TeamCity service messages.

Each message is one line of the form::

    ##teamcity[testStarted name='Adds' captureStandardOutput='true']

Values live inside single quotes, so every value goes through `escape`.
"""
from typing import List
from ..events import Event, SuiteStarted, SuiteFinished, TestStarted, TestCaseFinished, Output, format_ms
from ..output import Channel, Line

# applied in order; no rule matches a character an earlier rule introduced
_ESCAPES = [
    ("|", "||"),
    ("'", "|'"),
    ("\n", "|n"),
    ("\r", "|r"),
    ("\u0086", "|x"),
    ("\u2028", "|l"),
    ("\u2029", "|p"),
    ("[", "|["),
    ("]", "|]"),
]

def escape(value: str) -> str:
    for char, replacement in _ESCAPES:
        value = value.replace(char, replacement)
    return value

def service_message(kind: str, **fields: str) -> str:
    """Format a message; fields keep their keyword order."""
    attrs = " ".join(f"{key}='{escape(value)}'" for key, value in fields.items())
    return f"##teamcity[{kind} {attrs}]"

class TeamCityReporter:
    def render(self, event: Event) -> List[Line]:
        if isinstance(event, SuiteStarted):
            return [self._out("testSuiteStarted", name=event.name)]
        if isinstance(event, SuiteFinished):
            return [self._out("testSuiteFinished", name=event.name)]
        if isinstance(event, TestStarted):
            return [self._out("testStarted", name=event.name, captureStandardOutput="true")]
        if isinstance(event, TestCaseFinished):
            return self._test_case(event)
        if isinstance(event, Output):
            return self._output(event)
        return []

    def _test_case(self, event: TestCaseFinished) -> List[Line]:
        if event.result == "Passed":
            return [self._finished(event)]
        if event.result == "Inconclusive":
            return [self._out("testIgnored", name=event.name, message="Inconclusive")]
        if event.result == "Skipped":
            return [self._out("testIgnored", name=event.name, message=event.skip_reason())]
        if event.result == "Failed":
            message, stack_trace = event.failure()
            return [
                self._out("testFailed", name=event.name, message=message, details=stack_trace),
                self._finished(event),
            ]
        return []

    def _output(self, event: Output) -> List[Line]:
        if event.type == "Out":
            return [Line(Channel.STDOUT, escape(event.text))]
        if event.type == "Error":
            return [Line(Channel.STDERR, escape(event.text))]
        return []

    def _finished(self, event: TestCaseFinished) -> Line:
        return self._out("testFinished", name=event.name, duration=format_ms(event.duration_ms))

    @staticmethod
    def _out(kind: str, **fields: str) -> Line:
        return Line(Channel.STDOUT, service_message(kind, **fields))
