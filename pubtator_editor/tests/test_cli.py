"""
Tests for the terminal editor commands.
"""

import pytest
from rich.console import Console

from pubtator_editor import cli
from pubtator_editor.cli import PubTatorCLI

from .conftest import SAMPLE_PUBTATOR


@pytest.fixture
def recorded_console(monkeypatch):
    console = Console(record=True, width=160, force_terminal=False)
    monkeypatch.setattr(cli, "console", console)
    return console


@pytest.fixture
def editor(config, tmp_path, recorded_console):
    path = tmp_path / "corpus.pubtator"
    path.write_text(SAMPLE_PUBTATOR, encoding="utf-8")
    editor = PubTatorCLI(config)
    assert editor.load_file(str(path))
    return editor


class TestCommands:
    """Tests for PubTatorCLI._handle_command."""

    def test_load_reports_counts(self, editor, recorded_console):
        assert "Loaded 2 documents from corpus.pubtator" in recorded_console.export_text()

    def test_load_missing_file(self, config, recorded_console):
        assert PubTatorCLI(config).load_file("/nonexistent/file.txt") is False

    def test_goto_and_unknown_id(self, editor, recorded_console):
        editor._handle_command("/goto 200")
        assert editor.manager.current_doc_index == 1

        editor._handle_command("/goto 999")
        assert 'Document with ID "999" not found' in recorded_console.export_text()
        assert editor.manager.current_doc_index == 1

    def test_add_and_delete(self, editor):
        editor._handle_command("/add 6 15 Variant")
        stored = editor.manager.current_doc.annotations[1]
        assert (stored.text, stored.type) == ("mutations", "Variant")
        assert "Variant" in editor.manager.registry

        editor._handle_command(f"/delete {stored.uid}")
        assert all(anno.type != "Variant" for anno in editor.manager.current_doc.annotations)

    def test_select_trims_whitespace(self, editor):
        editor._handle_command("/select 5 16 Variant")

        texts = [anno.text for anno in editor.manager.current_doc.annotations]
        assert "mutations" in texts

    def test_edit_by_uid(self, editor):
        uid = editor.manager.current_doc.annotations[0].uid

        editor._handle_command(f"/edit {uid} 0 5 Protein P38398")

        edited = editor.manager.get_annotation_by_id(uid)
        assert (edited.type, edited.normalized_id) == ("Protein", "P38398")

    def test_bad_arguments_reported(self, editor, recorded_console):
        editor._handle_command("/add 0 999 Gene")
        editor._handle_command("/delete abc")

        output = recorded_console.export_text()
        assert output.count("Invalid arguments") == 2

    def test_search_highlights_without_changing_annotations(self, editor):
        before = list(editor.manager.current_doc.annotations)

        editor._handle_command("/search carriers")

        assert editor.regex_pattern == "carriers"
        assert editor.manager.current_doc.annotations == before

    def test_render_document_covers_text(self, editor):
        rendered = editor.render_document()

        assert rendered.plain == editor.manager.current_doc.combined_text

    def test_save_and_exit(self, editor, tmp_path):
        target = tmp_path / "out.pubtator"

        editor._handle_command(f"/save {target}")
        assert target.read_text(encoding="utf-8") == SAMPLE_PUBTATOR

        with pytest.raises(SystemExit):
            editor._handle_command("/exit")

    def test_unknown_command(self, editor, recorded_console):
        editor._handle_command("/frobnicate")

        assert "Unknown command: /frobnicate" in recorded_console.export_text()


class TestFailureReporting:
    """Tests for errors that must not end the session."""

    def test_search_with_unusable_pattern(self, editor):
        editor._handle_command("/search a{4294967296}")

        assert editor.regex_pattern == "a{4294967296}"
        assert editor.render_document().plain == editor.manager.current_doc.combined_text

    def test_save_when_target_and_fallback_unwritable(self, editor, tmp_path, recorded_console):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        editor.config.fallback_dir = str(blocker / "downloads")

        assert editor.save(str(tmp_path / "missing" / "dir" / "out.txt")) is None

        editor._handle_command(f"/save {tmp_path / 'missing' / 'out.txt'}")
        assert recorded_console.export_text().count("Could not save documents") == 2

    def test_load_non_utf8_file(self, config, tmp_path, recorded_console):
        path = tmp_path / "latin1.pubtator"
        path.write_bytes("100|t|Caf\xe9 au lait\n".encode("latin-1"))
        editor = PubTatorCLI(config)

        assert editor.load_file(str(path)) is False

        editor._handle_command(f"/load {path}")
        output = recorded_console.export_text()
        assert output.count("file is not UTF-8 text") == 2
        assert "Invalid arguments" not in output
        assert editor.manager.documents == []
