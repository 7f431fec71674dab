"""Tests for output path selection and the CSV result sink."""

from __future__ import annotations

from pathlib import Path

from wavalidate.domain.records import ResultRecord
from wavalidate.infrastructure.results import ResultSink, available_results_path


class TestAvailableResultsPath:
    def test_first_choice(self, tmp_path: Path) -> None:
        assert available_results_path(tmp_path / "numbers.txt") == tmp_path / "numbers_results.csv"

    def test_second_when_first_exists(self, tmp_path: Path) -> None:
        (tmp_path / "numbers_results.csv").write_text("x")
        assert available_results_path(tmp_path / "numbers.txt") == tmp_path / "numbers_results2.csv"

    def test_third_when_two_exist(self, tmp_path: Path) -> None:
        (tmp_path / "numbers_results.csv").write_text("x")
        (tmp_path / "numbers_results2.csv").write_text("x")
        assert available_results_path(tmp_path / "numbers.txt") == tmp_path / "numbers_results3.csv"

    def test_never_hands_out_a_path_twice(self, tmp_path: Path) -> None:
        first = available_results_path(tmp_path / "batch.txt")
        second = available_results_path(tmp_path / "batch.txt")
        third = available_results_path(tmp_path / "batch.txt")
        assert [first.name, second.name, third.name] == [
            "batch_results.csv",
            "batch_results2.csv",
            "batch_results3.csv",
        ]
        assert not first.exists()

    def test_custom_suffix_and_extension(self, tmp_path: Path) -> None:
        path = available_results_path(tmp_path / "in.txt", suffix="_out", extension=".tsv")
        assert path.name == "in_out.tsv"


class TestResultSink:
    def test_header_and_rows(self, tmp_path: Path) -> None:
        path = tmp_path / "out.csv"
        with ResultSink.open(path) as sink:
            sink.append(ResultRecord(address="5491122334455", exists=True))
            sink.append(ResultRecord(address="", exists=False))
            assert sink.rows_written == 2
        assert path.read_text() == "phone,validate\n5491122334455,true\n,false\n"

    def test_rows_flushed_before_close(self, tmp_path: Path) -> None:
        path = tmp_path / "out.csv"
        sink = ResultSink.open(path)
        sink.append(ResultRecord(address="1", exists=False))
        assert path.read_text() == "phone,validate\n1,false\n"
        sink.close()

    def test_append_mode_keeps_existing_content(self, tmp_path: Path) -> None:
        path = tmp_path / "out.csv"
        path.write_text("old\n")
        with ResultSink.open(path, header=("a", "b")) as sink:
            sink.append(ResultRecord(address="1", exists=True))
        assert path.read_text() == "old\na,b\n1,true\n"
