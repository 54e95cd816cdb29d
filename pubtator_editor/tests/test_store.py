"""
Unit tests for the annotation store.
"""

import pytest

from pubtator_editor.core import store as store_module
from pubtator_editor.core.errors import (
    AnnotationNotFoundError,
    DocumentNotFoundError,
    NoCurrentDocumentError,
)
from pubtator_editor.core.models import Document, SegmentKind, TextSelection
from pubtator_editor.core.store import NEW_DOCUMENT_TITLE, AnnotationManager

from .conftest import SAMPLE_PUBTATOR, make_annotation


class TestAddAnnotation:
    """Tests for add_annotation."""

    def test_sorted_by_start_after_adds(self, manager):
        for start in (12, 0, 6):
            manager.add_annotation(make_annotation(start, start + 3, "x"))

        assert [anno.start for anno in manager.current_doc.annotations] == [0, 6, 12]

    def test_equal_starts_keep_insertion_order(self, manager):
        manager.add_annotation(make_annotation(6, 11, "world", "First"))
        manager.add_annotation(make_annotation(6, 9, "wor", "Second"))
        manager.add_annotation(make_annotation(0, 5, "Hello", "Third"))

        assert [anno.type for anno in manager.current_doc.annotations] == ["Third", "First", "Second"]

    def test_id_forced_to_document_id(self, manager):
        stored = manager.add_annotation(make_annotation(0, 5, "Hello", doc_id="other"))

        assert stored.id == "doc1"

    def test_duplicates_allowed_with_distinct_uids(self, manager):
        first = manager.add_annotation(make_annotation(0, 5, "Hello"))
        second = manager.add_annotation(make_annotation(0, 5, "Hello"))

        assert len(manager.current_doc.annotations) == 2
        assert first.uid != second.uid

    def test_new_type_registered(self, manager):
        manager.add_annotation(make_annotation(0, 5, "Hello", "Greeting"))

        assert "Greeting" in manager.registry

    def test_add_from_selection(self, manager):
        stored = manager.add_annotation_from_selection(TextSelection(12, 15, "p53"), "Gene", "")

        assert (stored.start, stored.end, stored.text, stored.type) == (12, 15, "p53", "Gene")
        assert stored.normalized_id is None

    def test_add_without_documents(self, config):
        empty = AnnotationManager(config=config)

        with pytest.raises(NoCurrentDocumentError):
            empty.add_annotation(make_annotation(0, 1, "x"))


class TestEditDeleteFind:
    """Tests for positional and uid-based edits."""

    @pytest.fixture
    def populated(self, manager):
        for start, end, text in [(0, 5, "Hello"), (6, 11, "world"), (12, 15, "p53")]:
            manager.add_annotation(make_annotation(start, end, text))
        return manager

    def test_edit_replaces_without_resorting(self, populated):
        original_uid = populated.current_doc.annotations[0].uid

        stored = populated.edit_annotation(0, make_annotation(23, 29, "cancer", "Disease"))

        assert [anno.start for anno in populated.current_doc.annotations] == [23, 6, 12]
        assert stored.uid == original_uid
        assert stored.id == "doc1"

    def test_edit_bad_index(self, populated):
        with pytest.raises(AnnotationNotFoundError):
            populated.edit_annotation(3, make_annotation(0, 1, "H"))

    def test_delete_shifts_indices(self, populated):
        removed = populated.delete_annotation(0)

        assert removed.text == "Hello"
        assert [anno.text for anno in populated.current_doc.annotations] == ["world", "p53"]

    def test_find_index_matches_start_end_text(self, populated):
        probe = make_annotation(6, 11, "world", "AnyType")

        assert populated.find_annotation_index(probe) == 1
        assert populated.find_annotation_index(make_annotation(6, 11, "World")) is None

    def test_find_index_ambiguous_returns_first(self, config):
        doc = Document(id="d", title="foo foo", annotations=[
            make_annotation(0, 3, "foo", "Gene", doc_id="d"),
            make_annotation(0, 3, "foo", "Chemical", doc_id="d"),
        ])
        store = AnnotationManager(documents=[doc], config=config)

        assert store.find_annotation_index(make_annotation(0, 3, "foo", "Chemical")) == 0

    def test_uid_operations_survive_deletes(self, populated):
        p53_uid = populated.current_doc.annotations[2].uid
        populated.delete_annotation(0)

        edited = populated.edit_annotation_by_id(p53_uid, make_annotation(12, 15, "p53", "Protein"))

        assert populated.get_annotation_by_id(p53_uid) is edited
        assert edited.type == "Protein"
        assert populated.delete_annotation_by_id(p53_uid).text == "p53"

    def test_unknown_uid(self, populated):
        with pytest.raises(AnnotationNotFoundError):
            populated.delete_annotation_by_id(999)

    def test_sort_annotations_after_edit(self, populated):
        populated.edit_annotation(0, make_annotation(23, 29, "cancer"))
        populated.sort_annotations()

        assert [anno.start for anno in populated.current_doc.annotations] == [6, 12, 23]


class TestDocuments:
    """Tests for loading and navigating documents."""

    @pytest.fixture
    def loaded(self, config):
        store = AnnotationManager(config=config)
        store.load_content(SAMPLE_PUBTATOR, "corpus.pubtator")
        return store

    def test_load_content(self, loaded):
        assert [doc.id for doc in loaded.documents] == ["100", "200"]
        assert loaded.current_doc_index == 0
        assert loaded.filename == "corpus.pubtator"
        assert all(anno.uid is not None for doc in loaded.documents for anno in doc.annotations)

    def test_seed_types_kept_after_load(self, loaded):
        assert {"Chemical", "Gene", "Disease", "Species", "Mutation", "CellLine"} <= set(loaded.registry)

    def test_navigation_is_clamped(self, loaded):
        assert loaded.next_document() == 1
        assert loaded.next_document() == 1
        assert loaded.previous_document() == 0
        assert loaded.previous_document() == 0
        assert loaded.navigate(10) == 1

    def test_navigate_by_id(self, loaded):
        assert loaded.navigate_to_document_by_id(" 200 ") == 1
        assert loaded.current_doc.title == "Tamoxifen therapy"

    def test_navigate_by_unknown_id(self, loaded):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            loaded.navigate_to_document_by_id("999")

        assert loaded.current_doc_index == 0
        assert '"999"' in str(exc_info.value)

    def test_search_document_ids(self, loaded):
        assert loaded.search_document_ids("0") == ["100", "200"]
        assert loaded.search_document_ids("2") == ["200"]

    def test_new_document(self, loaded):
        doc = loaded.new_document()

        assert doc.id.startswith("new_")
        assert doc.title == NEW_DOCUMENT_TITLE
        assert doc.annotations == []
        assert loaded.current_doc is doc

    def test_placeholder_when_empty(self, config):
        empty = AnnotationManager(config=config)

        assert empty.current_doc.id == ""
        assert empty.segments() == []

    def test_export_round_trip(self, loaded):
        assert loaded.export_content() == SAMPLE_PUBTATOR


class TestTextEditing:
    """Tests for update_document_text."""

    def test_title_edit_moves_annotations(self, manager):
        cancer = manager.add_annotation(make_annotation(23, 29, "cancer", "Disease"))

        report = manager.update_document_text(title="Hello big world")

        assert report.relocated == [cancer]
        assert manager.current_doc.combined_text[cancer.start:cancer.end] == "cancer"

    def test_unresolved_annotations_reported(self, manager):
        p53 = manager.add_annotation(make_annotation(12, 15, "p53"))

        report = manager.update_document_text(abstract="TP63 causes cancer")

        assert report.unresolved == [p53]

    def test_segments_follow_edits(self, manager):
        manager.add_annotation(make_annotation(12, 15, "p53"))

        kinds = [segment.kind for segment in manager.segments()]

        assert kinds == [SegmentKind.PLAIN, SegmentKind.ANNOTATION, SegmentKind.PLAIN]

    def test_segments_use_configured_tolerance(self, manager, monkeypatch):
        seen = {}

        def record_tolerance(segments, annotations, combined_text, tolerance):
            seen["tolerance"] = tolerance
            return segments

        monkeypatch.setattr(store_module, "reconcile_segment_positions", record_tolerance)
        manager.config.segmentation.reconcile_tolerance = 2

        manager.segments()

        assert seen == {"tolerance": 2}

    def test_segments_carry_annotation_uids(self, manager):
        first = manager.add_annotation(make_annotation(0, 5, "Hello"))
        second = manager.add_annotation(make_annotation(12, 15, "p53"))

        highlighted = [segment for segment in manager.segments() if segment.highlighted]

        assert [(s.start, s.end, s.annotation_uid) for s in highlighted] == \
            [(0, 5, first.uid), (12, 15, second.uid)]


class TestDocumentUids:
    """Tests for per-document uid allocation."""

    def test_uid_counter_not_a_constructor_argument(self):
        with pytest.raises(TypeError):
            Document(id="d", title="t", _next_uid=5)

    def test_allocate_uid_counts_from_one(self):
        doc = Document(id="d", title="t")

        assert [doc.allocate_uid(), doc.allocate_uid()] == [1, 2]
        assert "_next_uid" not in repr(doc)
