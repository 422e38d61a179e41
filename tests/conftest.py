"""
Shared fixtures: generated conversation trees and an isolated $HOME.
"""

import json
import os
from pathlib import Path

import pytest

from session_catalog.config import ENV_CLAUDE_DIR, ENV_CODEX_DIR, ENV_SCAN_WORKERS, CatalogSettings


def write_record(path: Path, lines: list, mtime: int | None = None) -> Path:
    """
    Write a JSONL record. dict lines are JSON-encoded, str lines written as-is.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    text = "".join((json.dumps(line) if isinstance(line, dict) else line) + "\n" for line in lines)
    path.write_text(text, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def claude_line(session_id: str, msg_type: str = "user", text: str = "hello") -> dict:
    return {
        "uuid": f"{session_id}-u1",
        "parentUuid": None,
        "sessionId": session_id,
        "type": msg_type,
        "timestamp": "2025-01-02T03:04:05Z",
        "message": {"role": msg_type, "content": [{"type": "text", "text": text}]},
    }


def codex_meta_line(session_id: str) -> dict:
    return {
        "timestamp": "2025-01-02T03:04:05Z",
        "type": "session_meta",
        "payload": {"id": session_id, "cwd": "/work"},
    }


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point $HOME at a temp dir and clear catalog env overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for name in (ENV_CLAUDE_DIR, ENV_CODEX_DIR, ENV_SCAN_WORKERS):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def settings(fake_home):
    """Settings with no overrides (roots resolve under fake_home)."""
    return CatalogSettings()


@pytest.fixture
def claude_root(fake_home):
    return fake_home / ".claude" / "projects"


@pytest.fixture
def codex_root(fake_home):
    return fake_home / ".codex" / "sessions"


@pytest.fixture
def populated_trees(claude_root, codex_root):
    """
    Two claude projects and two codex days.

    Returns:
        dict of name -> record path
    """
    paths = {
        "abc123": write_record(
            claude_root / "proj-x" / "abc123.jsonl",
            [claude_line("sess-aaa"), claude_line("sess-aaa", "assistant")],
            mtime=1_700_000_300,
        ),
        "xyz789": write_record(
            claude_root / "proj-y" / "xyz789.jsonl",
            [claude_line("sess-bbb")],
            mtime=1_700_000_100,
        ),
        "rollout-1": write_record(
            codex_root / "2025" / "01" / "02" / "rollout-1.jsonl",
            [codex_meta_line("codex-s1"), {"type": "event_msg", "payload": {}}],
            mtime=1_700_000_200,
        ),
        "rollout-2": write_record(
            codex_root / "2025" / "02" / "10" / "rollout-2.jsonl",
            [codex_meta_line("codex-s2")],
            mtime=1_700_000_400,
        ),
    }
    return paths
