"""Tests for input file listing and line reading."""

from __future__ import annotations

from pathlib import Path

import pytest

from wavalidate.infrastructure.inputs import (
    check_decodable,
    has_allowed_extension,
    iter_lines,
    list_candidate_files,
)


class TestListCandidateFiles:
    def test_sorted_regular_files_only(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("")
        (tmp_path / "a.txt").write_text("")
        (tmp_path / ".hidden.txt").write_text("")
        (tmp_path / "sub").mkdir()
        assert [p.name for p in list_candidate_files(tmp_path)] == ["a.txt", "b.txt"]

    def test_extension_filter_case_insensitive(self, tmp_path: Path) -> None:
        (tmp_path / "numbers.TXT").write_text("")
        (tmp_path / "notes.md").write_text("")
        files = list_candidate_files(tmp_path, extensions=[".txt"])
        assert [p.name for p in files] == ["numbers.TXT"]


def test_has_allowed_extension() -> None:
    assert has_allowed_extension(Path("numbers.txt"), [".txt"])
    assert not has_allowed_extension(Path("numbers.csv"), [".txt"])
    assert not has_allowed_extension(Path("numbers"), [".txt"])


class TestIterLines:
    def test_mixed_line_endings(self, tmp_path: Path) -> None:
        path = tmp_path / "numbers.txt"
        path.write_bytes(b"111\r\n222\r333\n\n444")
        assert list(iter_lines(path)) == ["111", "222", "333", "", "444"]

    def test_bom_dropped(self, tmp_path: Path) -> None:
        path = tmp_path / "numbers.txt"
        path.write_bytes("﻿0112\n".encode())
        assert list(iter_lines(path)) == ["0112"]

    def test_lazy(self, tmp_path: Path) -> None:
        path = tmp_path / "numbers.txt"
        path.write_text("1\n2\n")
        lines = iter_lines(path)
        assert next(lines) == "1"


class TestCheckDecodable:
    def test_valid_text_passes(self, tmp_path: Path) -> None:
        path = tmp_path / "numbers.txt"
        path.write_text("0112\n5491122334455\n")
        check_decodable(path)

    def test_bad_bytes_raise(self, tmp_path: Path) -> None:
        path = tmp_path / "numbers.txt"
        path.write_bytes(b"0112\n\xff\xfe\xfa\n")
        with pytest.raises(UnicodeDecodeError):
            check_decodable(path)
