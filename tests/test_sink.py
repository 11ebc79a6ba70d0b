import logging
from pathlib import Path

from listme.errors import BlameUnavailable
from listme.models import AnnotatedLine, FileBlame, LineBlame, MatchedLine, ScanResult
from listme.sink import ResultSink

RESULT = ScanResult(
    path=Path("src/main.go"),
    lines=(MatchedLine(1, "TODO", "first"), MatchedLine(3, "FIXME", "third")),
)


class FakeBlame:
    def __init__(self, file_blame=None, error=None):
        self.file_blame = file_blame
        self.error = error
        self.calls = []

    def __call__(self, path):
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return self.file_blame


def test_annotate_with_blame():
    alice, bob = LineBlame("Alice", 100), LineBlame("Bob", 200)
    fake = FakeBlame(FileBlame((alice, LineBlame("x", 1), bob)))
    annotated = ResultSink(fake).annotate(RESULT)

    assert annotated.path == RESULT.path
    assert annotated.lines == (
        AnnotatedLine(RESULT.lines[0], alice),
        AnnotatedLine(RESULT.lines[1], bob),
    )
    assert annotated.match_count == 2
    assert annotated.max_line_number == 3
    assert fake.calls == [RESULT.path]


def test_blame_unavailable_is_a_soft_failure(caplog):
    fake = FakeBlame(error=BlameUnavailable("not a git repository"))
    with caplog.at_level(logging.WARNING, logger="listme.sink"):
        annotated = ResultSink(fake).annotate(RESULT)
    assert [line.blame for line in annotated.lines] == [None, None]
    assert "not a git repository" in caplog.text


def test_out_of_range_line_loses_only_its_blame(caplog):
    fake = FakeBlame(FileBlame((LineBlame("Alice", 100),)))
    with caplog.at_level(logging.ERROR, logger="listme.sink"):
        annotated = ResultSink(fake).annotate(RESULT)
    assert annotated.lines[0].blame == LineBlame("Alice", 100)
    assert annotated.lines[1].blame is None
    assert "out of range" in caplog.text


def test_without_blame_git_is_never_called():
    fake = FakeBlame(error=AssertionError("should not be called"))
    annotated = ResultSink(fake, with_blame=False).annotate(RESULT)
    assert fake.calls == []
    assert all(line.blame is None for line in annotated.lines)


def test_process_keeps_arrival_order_and_blames_once_per_file():
    other = ScanResult(path=Path("b.py"), lines=(MatchedLine(2, "XXX", "b"),))
    fake = FakeBlame(FileBlame((LineBlame("A", 1),) * 3))
    annotated = list(ResultSink(fake).process([other, RESULT]))
    assert [a.path for a in annotated] == [other.path, RESULT.path]
    assert fake.calls == [other.path, RESULT.path]


def test_file_outside_any_repository_has_no_blame(tmp_path):
    source = tmp_path / "loose.py"
    source.write_text("# TODO: no git here\n")
    result = ScanResult(path=source, lines=(MatchedLine(1, "TODO", "no git here"),))
    annotated = ResultSink().annotate(result)
    assert annotated.lines == (AnnotatedLine(result.lines[0], None),)
