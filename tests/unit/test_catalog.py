"""Tests for ConversationCatalog: listing, search, read and delete."""

import pytest

from conftest import claude_line, write_record
from session_catalog.backends import Backend
from session_catalog.catalog import ConversationCatalog, matches_keyword
from session_catalog.config import CatalogSettings
from session_catalog.errors import NotFoundError
from session_catalog.models import ConversationMeta


@pytest.fixture
def catalog(settings):
    return ConversationCatalog(settings)


class TestMatchesKeyword:
    def _meta(self, **kwargs):
        return ConversationMeta(backend=Backend.CLAUDE, file_path="/x", **kwargs)

    def test_matches_id_case_insensitive(self):
        assert matches_keyword(self._meta(id="abc123"), "ABC")

    def test_matches_container(self):
        assert matches_keyword(self._meta(id="zzz", container_name="Proj-X"), "proj-x")

    def test_matches_session_id(self):
        assert matches_keyword(self._meta(id="zzz", session_id="SESS-42"), "sess-4")

    def test_missing_optional_fields_do_not_match(self):
        assert not matches_keyword(self._meta(id="zzz"), "proj")


class TestListing:
    def test_root_resolution_uses_home(self, catalog, fake_home):
        assert catalog.root_for("claude") == fake_home / ".claude" / "projects"

    def test_root_resolution_uses_override(self, tmp_path):
        settings = CatalogSettings(codex_override_dir=str(tmp_path / "cx"))
        assert ConversationCatalog(settings).root_for(Backend.CODEX) == tmp_path / "cx" / "sessions"

    def test_explicit_roots(self, tmp_path, settings):
        catalog = ConversationCatalog(settings, roots={Backend.CLAUDE: tmp_path / "p"})
        assert catalog.root_for(Backend.CLAUDE) == tmp_path / "p"

    def test_list_each_backend(self, catalog, populated_trees):
        assert [m.id for m in catalog.list_conversations("claude")] == ["abc123", "xyz789"]
        assert [m.id for m in catalog.list_conversations(Backend.CODEX)] == ["rollout-2", "rollout-1"]

    def test_list_with_nothing_on_disk(self, catalog):
        assert catalog.list_conversations(Backend.CLAUDE) == []
        assert catalog.list_conversations(Backend.CODEX) == []


class TestSearch:
    def test_empty_keyword_returns_all_concatenated(self, catalog, populated_trees):
        """claude results first, then codex; no cross-backend re-sort."""
        results = catalog.search_conversations(None, "")
        assert [m.id for m in results] == ["abc123", "xyz789", "rollout-2", "rollout-1"]

    def test_keyword_any_case(self, catalog, populated_trees):
        results = catalog.search_conversations(None, "ABC")
        assert [m.id for m in results] == ["abc123"]

    def test_backend_filter(self, catalog, populated_trees):
        results = catalog.search_conversations("codex", "rollout")
        assert [m.id for m in results] == ["rollout-2", "rollout-1"]

    def test_filter_excludes_other_backend(self, catalog, populated_trees):
        assert catalog.search_conversations(Backend.CODEX, "abc") == []

    def test_search_by_project_and_session(self, catalog, populated_trees):
        assert [m.id for m in catalog.search_conversations(None, "proj-y")] == ["xyz789"]
        assert [m.id for m in catalog.search_conversations(None, "codex-s1")] == ["rollout-1"]


class TestContent:
    def test_get_content(self, catalog, populated_trees):
        path = populated_trees["abc123"]
        assert catalog.get_conversation_content(str(path)) == path.read_text()

    def test_get_content_missing(self, catalog, tmp_path):
        with pytest.raises(NotFoundError):
            catalog.get_conversation_content(tmp_path / "missing.jsonl")

    def test_get_messages(self, catalog, claude_root):
        path = write_record(
            claude_root / "p" / "m.jsonl",
            [claude_line("s", "user", "question"), claude_line("s", "assistant", "answer")],
        )

        messages = catalog.get_conversation_messages(path, Backend.CLAUDE)

        assert [(m.role, m.content) for m in messages] == [("user", "question"), ("assistant", "answer")]


class TestDelete:
    def test_delete_removes_file_and_empty_project(self, catalog, claude_root, populated_trees):
        catalog.delete_conversation(populated_trees["abc123"])

        assert not populated_trees["abc123"].exists()
        assert not (claude_root / "proj-x").exists()
        assert (claude_root / "proj-y").exists()

    def test_delete_keeps_non_empty_project(self, catalog, claude_root):
        a = write_record(claude_root / "p" / "a.jsonl", [claude_line("a")])
        write_record(claude_root / "p" / "b.jsonl", [claude_line("b")])

        catalog.delete_conversation(a)

        assert (claude_root / "p").exists()

    def test_delete_collapses_codex_date_chain(self, catalog, codex_root, populated_trees):
        catalog.delete_conversation(populated_trees["rollout-2"])

        assert not (codex_root / "2025" / "02").exists()
        assert (codex_root / "2025" / "01" / "02").exists()

    def test_backend_roots_survive_deleting_everything(self, catalog, claude_root, codex_root, populated_trees):
        for path in populated_trees.values():
            catalog.delete_conversation(path)

        assert claude_root.exists() and list(claude_root.iterdir()) == []
        assert codex_root.exists() and list(codex_root.iterdir()) == []

    def test_second_delete_is_not_found(self, catalog, claude_root, populated_trees):
        path = populated_trees["xyz789"]
        catalog.delete_conversation(path)
        before = sorted(p for p in claude_root.rglob("*"))

        with pytest.raises(NotFoundError):
            catalog.delete_conversation(path)

        assert sorted(p for p in claude_root.rglob("*")) == before
