"""Tests for progress report parsing."""

from decimal import Decimal
import io

import pytest

from tc_progress.events import (
    MalformedReport,
    MissingRequiredField,
    Output,
    SuiteFinished,
    SuiteStarted,
    TestCaseFinished,
    TestStarted,
    format_ms,
    iter_elements,
    parse_report,
    seconds_to_ms,
)


def test_parse_start_suite() -> None:
    """start-suite becomes SuiteStarted."""
    event = parse_report('<start-suite id="1" name="Calc" fullname="Calc.Tests"/>')
    assert event == SuiteStarted(name="Calc", fullname="Calc.Tests")


def test_parse_test_suite() -> None:
    """test-suite becomes SuiteFinished."""
    event = parse_report('<test-suite name="Calc" result="Passed"/>')
    assert event == SuiteFinished(name="Calc", result="Passed")


def test_parse_test_suite_empty_result() -> None:
    """A finished suite needs a non-empty result."""
    with pytest.raises(MissingRequiredField) as exc:
        parse_report('<test-suite name="Calc" result=""/>')
    assert exc.value.field == "result"
    assert exc.value.tag == "test-suite"


def test_parse_start_test() -> None:
    """start-test becomes TestStarted."""
    event = parse_report('<start-test id="1001" name="Adds" fullname="Calc.Tests.Adds"/>')
    assert event == TestStarted(id="1001", name="Adds", fullname="Calc.Tests.Adds")


def test_parse_start_test_without_id() -> None:
    """start-test requires an id."""
    with pytest.raises(MissingRequiredField) as exc:
        parse_report('<start-test name="Adds"/>')
    assert exc.value.field == "id"


def test_parse_skipped_case() -> None:
    """The skip reason comes from reason/message."""
    event = parse_report(
        '<test-case name="Adds" result="Skipped" time="0">'
        "<reason><message>not today</message></reason></test-case>"
    )
    assert isinstance(event, TestCaseFinished)
    assert event.skip_reason() == "not today"


def test_parse_skipped_case_without_reason() -> None:
    """A skipped case without a reason message is rejected."""
    with pytest.raises(MissingRequiredField) as exc:
        parse_report('<test-case name="Adds" result="Skipped" time="0"/>')
    assert exc.value.field == "reason/message"


def test_parse_failed_case() -> None:
    """Message and stack trace come from the failure element, CDATA included."""
    event = parse_report(
        '<test-case name="Adds" result="Failed" time="0.25">'
        "<failure><message><![CDATA[Expected 3]]></message>"
        "<stack-trace>at Adds()\nat Run()</stack-trace></failure></test-case>"
    )
    assert isinstance(event, TestCaseFinished)
    assert event.failure() == ("Expected 3", "at Adds()\nat Run()")
    assert event.duration_ms == Decimal("250")


def test_parse_failed_case_without_stack_trace() -> None:
    """A failed case needs both message and stack trace."""
    with pytest.raises(MissingRequiredField) as exc:
        parse_report('<test-case name="Adds" result="Failed" time="1"><failure><message>x</message></failure></test-case>')
    assert exc.value.field == "failure/stack-trace"


@pytest.mark.parametrize("missing", ["name", "result", "time"])
def test_parse_case_missing_attribute(missing: str) -> None:
    """name, result and time are all required on a test case."""
    attrs = {"name": "Adds", "result": "Passed", "time": "1"}
    del attrs[missing]
    report = "<test-case " + " ".join(f'{k}="{v}"' for k, v in attrs.items()) + "/>"
    with pytest.raises(MissingRequiredField) as exc:
        parse_report(report)
    assert exc.value.field == missing


def test_parse_case_bad_time() -> None:
    """A time that is not a decimal number is malformed."""
    with pytest.raises(MalformedReport):
        parse_report('<test-case name="Adds" result="Passed" time="1,5"/>')


def test_parse_case_unknown_result() -> None:
    """Unknown results still parse; formatting decides what to do."""
    event = parse_report('<test-case name="Adds" result="Foo" time="1"/>')
    assert isinstance(event, TestCaseFinished)
    assert event.result == "Foo"


def test_parse_output() -> None:
    """Output text keeps its line endings."""
    event = parse_report('<output type="Out"><text>hello\n</text></output>')
    assert event == Output(type="Out", text="hello\n")


def test_parse_output_without_text() -> None:
    """An output report needs a text element."""
    with pytest.raises(MissingRequiredField) as exc:
        parse_report('<output type="Out"/>')
    assert exc.value.field == "text"


def test_parse_output_without_type() -> None:
    """An output report needs a type attribute."""
    with pytest.raises(MissingRequiredField) as exc:
        parse_report("<output><text>hi</text></output>")
    assert exc.value.field == "type"
    assert exc.value.tag == "output"


def test_parse_unknown_tag() -> None:
    """Unknown report kinds are not errors."""
    assert parse_report('<start-run count="3"/>') is None


def test_parse_not_xml() -> None:
    """Text that is not XML raises MalformedReport."""
    with pytest.raises(MalformedReport):
        parse_report("<test-case name='x'")


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        ("1.5", "1500"),
        ("0.012", "12"),
        ("0.0123", "12.3"),
        ("0", "0"),
        ("0.000", "0"),
        ("2", "2000"),
        ("1.1", "1100"),
        ("0.0000005", "0.0005"),
    ],
)
def test_duration_ms(seconds: str, expected: str) -> None:
    """Seconds convert to milliseconds without binary float noise."""
    assert format_ms(seconds_to_ms(seconds)) == expected


def test_seconds_to_ms_rejects_nan() -> None:
    """NaN and infinities are not durations."""
    with pytest.raises(MalformedReport):
        seconds_to_ms("NaN")


def test_seconds_to_ms_rejects_out_of_range() -> None:
    """A time too large to convert to milliseconds is malformed, not a crash."""
    with pytest.raises(MalformedReport) as exc:
        seconds_to_ms("1e999999")
    assert exc.value.reason == "time is out of range"


def test_iter_elements_multiline_stream() -> None:
    """Reports spanning several lines are split at top-level elements."""
    stream = io.StringIO(
        '<start-suite name="Calc"/>\n'
        '<test-case name="Adds" result="Failed" time="1">\n'
        "  <failure>\n    <message>m</message>\n    <stack-trace>s</stack-trace>\n  </failure>\n"
        "</test-case>\n"
        '<test-suite name="Calc" result="Failed"/>\n'
    )
    tags = [node.tag for node in iter_elements(stream)]
    assert tags == ["start-suite", "test-case", "test-suite"]


def test_iter_elements_keeps_children() -> None:
    """Yielded elements still carry their nested content."""
    nodes = list(iter_elements(['<output type="Out"><text>hi</text></output>']))
    assert nodes[0].find("text").text == "hi"


def test_iter_elements_broken_stream() -> None:
    """A broken stream stops with MalformedReport after the good reports."""
    seen = []
    with pytest.raises(MalformedReport):
        for node in iter_elements(['<start-suite name="a"/>\n', "<start-test name=>\n"]):
            seen.append(node.tag)
    assert seen == ["start-suite"]
