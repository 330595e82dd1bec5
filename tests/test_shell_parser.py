import pytest

from pipeshell.exceptions import ParseError
from pipeshell.shell_parser import (
    InputRedirect,
    OutputMode,
    OutputRedirect,
    Pipeline,
    PipelineParser,
    PipelineStage,
    parse_pipeline,
)


def test_parse_empty_line_returns_no_stages():
    pipeline = parse_pipeline("   ")
    assert pipeline.is_empty


def test_parse_plain_command():
    pipeline = parse_pipeline("ls -l /tmp")
    assert pipeline.stages == [PipelineStage(("ls", "-l", "/tmp"))]
    assert pipeline.discarded_outputs == []


def test_parse_input_redirection():
    pipeline = parse_pipeline("cat < in.txt")
    assert pipeline.stages == [PipelineStage(("cat",), stdin=InputRedirect("in.txt"))]


def test_parse_output_truncate_and_append():
    truncate = parse_pipeline("echo hi > out.txt")
    assert truncate.stdout == OutputRedirect("out.txt", OutputMode.TRUNCATE)
    append = parse_pipeline("echo hi >> out.txt")
    assert append.stdout == OutputRedirect("out.txt", OutputMode.APPEND)
    assert append.stdout.append


def test_parse_input_and_output():
    pipeline = parse_pipeline("sort < in.txt >> out.txt")
    assert pipeline.stages == [
        PipelineStage(
            ("sort",),
            stdin=InputRedirect("in.txt"),
            stdout=OutputRedirect("out.txt", OutputMode.APPEND),
        )
    ]


def test_only_last_output_is_connected():
    pipeline = parse_pipeline("echo hi > a.txt >> b.txt > c.txt")
    assert pipeline.stdout == OutputRedirect("c.txt", OutputMode.TRUNCATE)
    assert pipeline.discarded_outputs == [
        OutputRedirect("a.txt", OutputMode.TRUNCATE),
        OutputRedirect("b.txt", OutputMode.APPEND),
    ]


def test_parse_three_stage_pipeline():
    pipeline = parse_pipeline("printf a | tr a b | cat")
    assert [stage.argv for stage in pipeline.stages] == [("printf", "a"), ("tr", "a", "b"), ("cat",)]
    assert pipeline.stdin is None
    assert pipeline.stdout is None


def test_parse_pipeline_with_both_redirections():
    pipeline = parse_pipeline("cat < in.txt | tr a-z A-Z | sort > out.txt")
    first, middle, last = pipeline.stages
    assert first == PipelineStage(("cat",), stdin=InputRedirect("in.txt"))
    assert middle == PipelineStage(("tr", "a-z", "A-Z"))
    assert last == PipelineStage(("sort",), stdout=OutputRedirect("out.txt"))


def test_pipeline_output_before_final_file_keeps_discarded():
    pipeline = parse_pipeline("ls | cat > a.txt > b.txt")
    assert pipeline.stages[-1] == PipelineStage(("cat",), stdout=OutputRedirect("b.txt"))
    assert pipeline.discarded_outputs == [OutputRedirect("a.txt")]


@pytest.mark.parametrize(
    ("line", "message"),
    [
        ("cmd > out | cmd2", "Cannot pipe after output redirection"),
        ("cat < a < b", "Cannot redirect input twice"),
        ("ls | cat < in.txt", "before the first pipe"),
        ("cat > out < in", "before output redirection"),
        ("| cat", "Missing program before pipe"),
        ("ls | | cat", "Missing program to pipe to"),
        ("ls |", "Missing program to pipe to"),
        ("cat <", "No file for input redirection"),
        ("echo hi >", "No file for output redirection"),
        ("echo hi > > out", "No file for output redirection"),
        ("cat < > out", "No file for input redirection"),
        ("cat < | wc", "No file for input redirection"),
        ("< in.txt cat", "Missing program for input redirection"),
        ("> out.txt", "Missing program for output redirection"),
        ("ls | > out", "Missing program to pipe to"),
        ("cat < a b", "Unexpected argument 'b'"),
    ],
)
def test_grammar_violations(line, message):
    with pytest.raises(ParseError) as exc:
        parse_pipeline(line)
    assert message in str(exc.value)


def test_argument_limit():
    words = " ".join(f"a{i}" for i in range(9))
    assert len(parse_pipeline(f"echo {words}").stages[0].argv) == 10
    with pytest.raises(ParseError, match="Too many args"):
        parse_pipeline(f"echo {words} extra")


def test_argument_limit_is_per_command():
    words = " ".join(f"a{i}" for i in range(9))
    pipeline = parse_pipeline(f"echo {words} | echo {words}")
    assert len(pipeline.stages) == 2


def test_custom_argument_limit():
    with pytest.raises(ParseError):
        parse_pipeline("echo a b", max_args=2)


def test_parser_is_reusable_after_error():
    parser = PipelineParser()
    with pytest.raises(ParseError):
        parser.parse(["ls", "|"])
    parser.reset()
    pipeline = parser.parse(["ls"])
    assert pipeline.stages == [PipelineStage(("ls",))]


def test_incremental_feed():
    parser = PipelineParser()
    for token in ["cat", "<", "in.txt", "|", "wc"]:
        parser.feed(token)
    pipeline = parser.finish()
    assert len(pipeline.stages) == 2
    assert pipeline.stdin == InputRedirect("in.txt")


def test_pipeline_rejects_interior_redirections():
    with pytest.raises(ValueError):
        Pipeline(stages=[PipelineStage(("a",)), PipelineStage(("b",), stdin=InputRedirect("x"))])
    with pytest.raises(ValueError):
        Pipeline(stages=[PipelineStage(("a",), stdout=OutputRedirect("x")), PipelineStage(("b",))])
