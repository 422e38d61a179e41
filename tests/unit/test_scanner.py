"""Tests for the dual-backend record scanner."""

from pathlib import Path

import pytest

from conftest import claude_line, codex_meta_line, write_record
from session_catalog import backends, scanner
from session_catalog.backends import Backend
from session_catalog.errors import CatalogIOError
from session_catalog.models import ConversationMeta
from session_catalog.scanner import scan, sort_by_modified


class TestScanEmpty:
    """Absent or empty roots are not errors."""

    @pytest.mark.parametrize("backend", [Backend.CLAUDE, Backend.CODEX])
    def test_missing_root(self, tmp_path, backend):
        assert scan(backend, tmp_path / "nope") == []

    @pytest.mark.parametrize("backend", [Backend.CLAUDE, Backend.CODEX])
    def test_empty_root(self, tmp_path, backend):
        root = tmp_path / "root"
        root.mkdir()
        assert scan(backend, root) == []

    def test_root_is_a_file(self, tmp_path):
        root = tmp_path / "projects"
        root.write_text("")
        with pytest.raises(CatalogIOError):
            scan(Backend.CLAUDE, root)


class TestClaudeScan:
    """Flat per-project tree."""

    def test_finds_records_per_project(self, claude_root, populated_trees):
        records = scan(Backend.CLAUDE, claude_root)

        assert [m.id for m in records] == ["abc123", "xyz789"]
        assert records[0].container_name == "proj-x"
        assert records[0].session_id == "sess-aaa"
        assert records[1].container_name == "proj-y"

    def test_skips_hidden_dirs_and_other_extensions(self, claude_root):
        write_record(claude_root / ".timelines" / "hidden.jsonl", [claude_line("h")])
        write_record(claude_root / "proj" / "notes.json", [claude_line("n")])
        write_record(claude_root / "proj" / "real.jsonl", [claude_line("r")])
        write_record(claude_root / "top-level.jsonl", [claude_line("t")])
        write_record(claude_root / "proj" / "nested" / "deep.jsonl", [claude_line("d")])

        records = scan(Backend.CLAUDE, claude_root)

        assert [m.id for m in records] == ["real"]

    def test_corrupt_record_skipped(self, claude_root):
        write_record(claude_root / "proj" / "good.jsonl", [claude_line("g")])
        bad = claude_root / "proj" / "bad.jsonl"
        bad.write_bytes(b"\xff\xfe\xfa")

        records = scan(Backend.CLAUDE, claude_root)

        assert [m.id for m in records] == ["good"]

    def test_directory_named_like_record_skipped(self, claude_root):
        (claude_root / "proj" / "looks-like.jsonl").mkdir(parents=True)
        assert scan(Backend.CLAUDE, claude_root) == []


class TestCodexScan:
    """Year/month/day tree."""

    def test_finds_records_at_day_level(self, codex_root, populated_trees):
        records = scan(Backend.CODEX, codex_root)

        assert [m.id for m in records] == ["rollout-2", "rollout-1"]
        assert all(m.container_name is None for m in records)
        assert records[0].session_id == "codex-s2"

    def test_ignores_records_above_day_level(self, codex_root):
        write_record(codex_root / "2025" / "top.jsonl", [codex_meta_line("a")])
        write_record(codex_root / "2025" / "01" / "month.jsonl", [codex_meta_line("b")])
        write_record(codex_root / "2025" / "01" / "05" / "day.jsonl", [codex_meta_line("c")])

        assert [m.id for m in scan(Backend.CODEX, codex_root)] == ["day"]


class TestOrdering:
    """Result is sorted by modified_at, newest first."""

    def test_descending_across_containers(self, claude_root):
        for i, mtime in enumerate([500, 100, 900, 300, 700]):
            write_record(claude_root / f"proj-{i % 2}" / f"r{i}.jsonl", [claude_line(f"s{i}")], mtime=mtime)

        records = scan(Backend.CLAUDE, claude_root, max_workers=3)
        times = [m.modified_at for m in records]

        assert times == sorted(times, reverse=True)
        assert times[0] == 900

    def test_single_worker_same_result(self, claude_root, populated_trees):
        assert scan(Backend.CLAUDE, claude_root, max_workers=1) == scan(Backend.CLAUDE, claude_root, max_workers=8)


def test_sort_by_modified_is_stable():
    a = ConversationMeta(id="a", backend=Backend.CLAUDE, file_path="/a", modified_at=5)
    b = ConversationMeta(id="b", backend=Backend.CLAUDE, file_path="/b", modified_at=5)
    c = ConversationMeta(id="c", backend=Backend.CLAUDE, file_path="/c", modified_at=9)

    assert [m.id for m in sort_by_modified([a, b, c])] == ["c", "a", "b"]


def _failing_list_dir(real, bad_dir):
    """list_dir that fails for one directory and delegates otherwise."""

    def list_dir(path):
        if Path(path) == bad_dir:
            raise CatalogIOError(f"Failed to read directory {path}: permission denied", str(path))
        return real(path)

    return list_dir


class TestUnreadableSubdirs:
    """One unreadable directory below the root is skipped, the rest still scan."""

    def test_claude_project_dir(self, monkeypatch, claude_root, populated_trees):
        monkeypatch.setattr(scanner, "list_dir", _failing_list_dir(backends.list_dir, claude_root / "proj-x"))

        records = scan(Backend.CLAUDE, claude_root)

        assert [m.id for m in records] == ["xyz789"]

    def test_codex_month_dir(self, monkeypatch, codex_root, populated_trees):
        monkeypatch.setattr(backends, "list_dir", _failing_list_dir(backends.list_dir, codex_root / "2025" / "01"))

        records = scan(Backend.CODEX, codex_root)

        assert [m.id for m in records] == ["rollout-2"]

    def test_codex_day_dir(self, monkeypatch, codex_root, populated_trees):
        bad_day = codex_root / "2025" / "02" / "10"
        monkeypatch.setattr(scanner, "list_dir", _failing_list_dir(backends.list_dir, bad_day))

        records = scan(Backend.CODEX, codex_root)

        assert [m.id for m in records] == ["rollout-1"]

    def test_root_failure_still_raises(self, monkeypatch, claude_root, populated_trees):
        monkeypatch.setattr(backends, "list_dir", _failing_list_dir(backends.list_dir, claude_root))

        with pytest.raises(CatalogIOError):
            scan(Backend.CLAUDE, claude_root)
