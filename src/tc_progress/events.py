"""Progress report events.

A progress report is one small XML fragment sent by the test engine while a
run is in progress, e.g.::

    <start-test id="1001" name="Adds" fullname="Calc.Tests.Adds"/>
    <test-case name="Adds" result="Failed" time="0.012">
      <failure><message>boom</message><stack-trace>at Adds()</stack-trace></failure>
    </test-case>

`parse_report` turns one fragment into one of the event dataclasses below, or
None when the tag is not one we know about.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, DecimalException, InvalidOperation
from typing import Iterable, Iterator, Optional, Union
import xml.etree.ElementTree as ET

class ReportError(Exception):
    """Base class for reports that cannot be translated."""

class MalformedReport(ReportError):
    def __init__(self, report: str, reason: str):
        super().__init__(f"malformed progress report ({reason}): {report!r}")
        self.report = report
        self.reason = reason

class MissingRequiredField(ReportError):
    def __init__(self, tag: str, field: str):
        super().__init__(f"<{tag}> report is missing required field {field!r}")
        self.tag = tag
        self.field = field

@dataclass(frozen=True)
class SuiteStarted:
    name: str
    fullname: Optional[str] = None

@dataclass(frozen=True)
class SuiteFinished:
    name: str
    result: str
    fullname: Optional[str] = None

@dataclass(frozen=True)
class TestStarted:
    __test__ = False  # not a pytest class

    id: str
    name: str
    fullname: Optional[str] = None
    testcase: Optional[str] = None

@dataclass(frozen=True)
class TestCaseFinished:
    __test__ = False

    name: str
    result: str
    time: str
    fullname: Optional[str] = None
    reason_message: Optional[str] = None
    failure_message: Optional[str] = None
    stack_trace: Optional[str] = None

    @property
    def duration_ms(self) -> Decimal:
        """Elapsed time in milliseconds, exact to the precision of `time`."""
        return seconds_to_ms(self.time)

    def skip_reason(self) -> str:
        if self.reason_message is None:
            raise MissingRequiredField("test-case", "reason/message")
        return self.reason_message

    def failure(self) -> tuple[str, str]:
        """(message, stack trace) of a failed test."""
        if self.failure_message is None:
            raise MissingRequiredField("test-case", "failure/message")
        if self.stack_trace is None:
            raise MissingRequiredField("test-case", "failure/stack-trace")
        return self.failure_message, self.stack_trace

@dataclass(frozen=True)
class Output:
    type: str
    text: str

Event = Union[SuiteStarted, SuiteFinished, TestStarted, TestCaseFinished, Output]

def seconds_to_ms(value: str) -> Decimal:
    try:
        seconds = Decimal(value.strip())
    except InvalidOperation:
        raise MalformedReport(value, "time is not a decimal number") from None
    if not seconds.is_finite():
        raise MalformedReport(value, "time is not finite")
    try:
        return seconds * 1000
    except DecimalException:
        raise MalformedReport(value, "time is out of range") from None

def format_ms(ms: Decimal) -> str:
    # plain notation, no trailing zeros: 1500.000 -> "1500", 12.300 -> "12.3"
    text = format(ms.normalize(), "f")
    return "0" if text == "-0" else text

def _inner_text(node: Optional[ET.Element]) -> Optional[str]:
    if node is None:
        return None
    return "".join(node.itertext())

def _require(node: ET.Element, attr: str) -> str:
    value = node.get(attr)
    if value is None:
        raise MissingRequiredField(node.tag, attr)
    return value

def _suite_started(node: ET.Element) -> SuiteStarted:
    return SuiteStarted(name=_require(node, "name"), fullname=node.get("fullname"))

def _suite_finished(node: ET.Element) -> SuiteFinished:
    result = node.get("result")
    if not result:
        raise MissingRequiredField(node.tag, "result")
    return SuiteFinished(name=_require(node, "name"), result=result, fullname=node.get("fullname"))

def _test_started(node: ET.Element) -> TestStarted:
    return TestStarted(
        id=_require(node, "id"),
        name=_require(node, "name"),
        fullname=node.get("fullname"),
        testcase=node.get("testcase"),
    )

def _test_case(node: ET.Element) -> TestCaseFinished:
    failure = node.find("failure")
    event = TestCaseFinished(
        name=_require(node, "name"),
        result=_require(node, "result"),
        time=_require(node, "time"),
        fullname=node.get("fullname"),
        reason_message=_inner_text(node.find("reason/message")),
        failure_message=_inner_text(failure.find("message")) if failure is not None else None,
        stack_trace=_inner_text(failure.find("stack-trace")) if failure is not None else None,
    )
    # surface bad input at parse time rather than halfway through formatting
    seconds_to_ms(event.time)
    if event.result == "Skipped":
        event.skip_reason()
    elif event.result == "Failed":
        event.failure()
    return event

def _output(node: ET.Element) -> Output:
    text = _inner_text(node.find("text"))
    if text is None:
        raise MissingRequiredField(node.tag, "text")
    return Output(type=_require(node, "type"), text=text)

PARSERS = {
    "start-suite": _suite_started,
    "test-suite": _suite_finished,
    "start-test": _test_started,
    "test-case": _test_case,
    "output": _output,
}

def from_element(node: ET.Element) -> Optional[Event]:
    """Build the event for an already parsed report element, None for unknown tags."""
    parse = PARSERS.get(node.tag)
    if parse is None:
        return None
    return parse(node)

def parse_report(report: str) -> Optional[Event]:
    try:
        node = ET.fromstring(report)
    except ET.ParseError as e:
        raise MalformedReport(report, str(e)) from None
    return from_element(node)

def iter_elements(lines: Iterable[str]) -> Iterator[ET.Element]:
    """Split a stream of concatenated reports into top-level elements.

    Reports may span several lines. A stream that is not well-formed stops
    the iteration with MalformedReport; reports before the bad one have
    already been yielded.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    root = None
    depth = 0

    def drain() -> Iterator[ET.Element]:
        nonlocal root, depth
        for kind, node in parser.read_events():
            if kind == "start":
                depth += 1
                if root is None:
                    root = node
            else:
                depth -= 1
                if depth == 1:
                    yield node
                    root.remove(node)

    try:
        parser.feed("<reports>")
        for line in lines:
            parser.feed(line)
            yield from drain()
        parser.feed("</reports>")
        parser.close()
        yield from drain()
    except ET.ParseError as e:
        raise MalformedReport("<stream>", str(e)) from None
