"""
PubTator Editor Annotation Store
In-memory documents with the current-document cursor and annotation CRUD
"""

import logging
import uuid
from typing import List, Optional

from .config import EditorConfig, default_config
from .errors import AnnotationNotFoundError, DocumentNotFoundError, NoCurrentDocumentError
from .models import Annotation, Document, Segment, TextSelection
from .pubtator import ParseResult, generate_export_content, parse_pubtator
from .registry import EntityTypeRegistry
from .segmenter import (
    ReanchorReport,
    process_text_segments,
    reanchor_annotations,
    reconcile_segment_positions,
)

logger = logging.getLogger(__name__)

NEW_DOCUMENT_TITLE = "Untitled document"


class AnnotationManager:
    """
    Manages documents and the annotations of the current document

    Annotations are addressed either positionally (index into the current
    document's list, invalidated by deletes) or by their stable ``uid``.
    """

    def __init__(self,
                 documents: Optional[List[Document]] = None,
                 registry: Optional[EntityTypeRegistry] = None,
                 config: Optional[EditorConfig] = None):
        self.config = config or default_config
        self.registry = registry if registry is not None else EntityTypeRegistry(self.config.seed_entity_types)
        self.filename = self.config.default_filename
        self.documents: List[Document] = []
        self.current_doc_index = 0
        self.set_all_documents(documents or [])

    # Document set

    @property
    def current_doc(self) -> Document:
        """Current document, or an empty placeholder when nothing is loaded"""
        if 0 <= self.current_doc_index < len(self.documents):
            return self.documents[self.current_doc_index]
        return Document(id='', title='', abstract='')

    def _require_current(self) -> Document:
        if not self.documents:
            raise NoCurrentDocumentError("No document is loaded")
        return self.documents[self.current_doc_index]

    def set_all_documents(self, documents: List[Document]):
        """Replace the whole document set and go back to the first document"""
        self.documents = list(documents)
        self.current_doc_index = 0
        for doc in self.documents:
            for anno in doc.annotations:
                if anno.uid is None:
                    anno.uid = doc.allocate_uid()

    def load_content(self, content: str, filename: Optional[str] = None) -> ParseResult:
        """Parse PubTator content, replace the document set and register its types"""
        result = parse_pubtator(content)
        self.set_all_documents(result.documents)
        new_types = self.registry.register_all(result.entity_types)
        if filename:
            self.filename = filename

        logger.info(f"Loaded {len(result.documents)} documents ({new_types} new entity types)")
        return result

    def export_content(self) -> str:
        return generate_export_content(self.documents)

    def new_document(self, title: Optional[str] = None, abstract: str = "") -> Document:
        """Append an empty document with a generated id and make it current"""
        existing = {doc.id for doc in self.documents}
        doc_id = f"new_{uuid.uuid4().hex[:8]}"
        while doc_id in existing:
            doc_id = f"new_{uuid.uuid4().hex[:8]}"

        doc = Document(id=doc_id, title=title or NEW_DOCUMENT_TITLE, abstract=abstract)
        self.documents.append(doc)
        self.current_doc_index = len(self.documents) - 1
        return doc

    # Navigation

    def navigate(self, index: int) -> int:
        if not self.documents:
            self.current_doc_index = 0
        else:
            self.current_doc_index = max(0, min(len(self.documents) - 1, index))
        return self.current_doc_index

    def next_document(self) -> int:
        return self.navigate(self.current_doc_index + 1)

    def previous_document(self) -> int:
        return self.navigate(self.current_doc_index - 1)

    def navigate_to_document_by_id(self, doc_id: str) -> int:
        search_id = (doc_id or '').strip()
        for index, doc in enumerate(self.documents):
            if doc.id == search_id:
                self.current_doc_index = index
                return index
        raise DocumentNotFoundError(search_id)

    def search_document_ids(self, query: str) -> List[str]:
        """Document ids containing ``query``, case-insensitively"""
        query_lower = (query or '').lower()
        return [doc.id for doc in self.documents if query_lower in doc.id.lower()]

    # Annotations

    def add_annotation(self, annotation: Annotation) -> Annotation:
        """Add an annotation to the current document, keeping the list sorted by start"""
        doc = self._require_current()
        stored = annotation.copy(id=doc.id, uid=doc.allocate_uid())
        doc.annotations.append(stored)

        # Stable sort: equal starts keep insertion order
        doc.annotations.sort(key=lambda anno: anno.start)
        self.registry.register(stored.type)
        return stored

    def add_annotation_from_selection(self,
                                      selection: TextSelection,
                                      entity_type: str,
                                      normalized_id: Optional[str] = None) -> Annotation:
        return self.add_annotation(Annotation(
            id=self.current_doc.id,
            start=selection.start,
            end=selection.end,
            text=selection.text,
            type=entity_type,
            normalized_id=normalized_id or None
        ))

    def edit_annotation(self, index: int, updated: Annotation) -> Annotation:
        """Replace the annotation at ``index``; the list is not re-sorted"""
        doc = self._require_current()
        self._check_index(doc, index)
        stored = updated.copy(id=doc.id, uid=doc.annotations[index].uid)
        doc.annotations[index] = stored
        self.registry.register(stored.type)
        return stored

    def delete_annotation(self, index: int) -> Annotation:
        """Remove the annotation at ``index``; later indices shift down by one"""
        doc = self._require_current()
        self._check_index(doc, index)
        return doc.annotations.pop(index)

    def find_annotation_index(self, annotation: Annotation) -> Optional[int]:
        """Index of the first annotation with the same start, end and text"""
        for index, anno in enumerate(self.current_doc.annotations):
            if (anno.start == annotation.start
                    and anno.end == annotation.end
                    and anno.text == annotation.text):
                return index
        return None

    def sort_annotations(self):
        doc = self._require_current()
        doc.annotations.sort(key=lambda anno: anno.start)

    def _check_index(self, doc: Document, index: int):
        if not 0 <= index < len(doc.annotations):
            raise AnnotationNotFoundError(
                f"No annotation at index {index} in document {doc.id} "
                f"({len(doc.annotations)} annotations)"
            )

    def _index_of_uid(self, uid: int) -> int:
        doc = self._require_current()
        for index, anno in enumerate(doc.annotations):
            if anno.uid == uid:
                return index
        raise AnnotationNotFoundError(f"No annotation with id {uid} in document {doc.id}")

    def get_annotation_by_id(self, uid: int) -> Annotation:
        return self.current_doc.annotations[self._index_of_uid(uid)]

    def edit_annotation_by_id(self, uid: int, updated: Annotation) -> Annotation:
        return self.edit_annotation(self._index_of_uid(uid), updated)

    def delete_annotation_by_id(self, uid: int) -> Annotation:
        return self.delete_annotation(self._index_of_uid(uid))

    # Text

    def update_document_text(self,
                             title: Optional[str] = None,
                             abstract: Optional[str] = None) -> ReanchorReport:
        """
        Edit the current document's title and/or abstract

        Annotations are re-anchored onto the new text; any that could not be
        relocated are returned in ``ReanchorReport.unresolved``.
        """
        doc = self._require_current()
        if title is not None:
            doc.title = title
        if abstract is not None:
            doc.abstract = abstract

        report = reanchor_annotations(doc.annotations, doc.combined_text,
                                      window=self.config.segmentation.reanchor_window)
        if report.relocated:
            doc.annotations.sort(key=lambda anno: anno.start)
        return report

    def segments(self, pattern: Optional[str] = None) -> List[Segment]:
        doc = self.current_doc
        segmentation = self.config.segmentation
        segments = process_text_segments(doc.combined_text, doc.annotations, pattern, config=segmentation)
        return reconcile_segment_positions(segments, doc.annotations, doc.combined_text,
                                           tolerance=segmentation.reconcile_tolerance)
