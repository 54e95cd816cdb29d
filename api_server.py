#!/usr/bin/env python3
"""
PubTator Editor REST API Server
Provides HTTP endpoints for a browser frontend to load, annotate and export PubTator files
"""

import logging

from flask import Flask, Response, request, jsonify
from flask_cors import CORS

from pubtator_editor.core.colors import get_entity_color, get_pattern_match_style, get_potential_match_style
from pubtator_editor.core.config import default_config
from pubtator_editor.core.errors import (
    AnnotationNotFoundError,
    DocumentNotFoundError,
    NoCurrentDocumentError,
    PubTatorError,
)
from pubtator_editor.core.models import Annotation, Document, SegmentKind
from pubtator_editor.core.segmenter import get_text_selection_info
from pubtator_editor.core.store import AnnotationManager

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app, expose_headers=["Content-Disposition"])  # Enable CORS for the frontend

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB

# Single-user editing session (initialized once)
manager = None


def initialize_components(config=None):
    """Start a fresh editing session"""
    global manager

    manager = AnnotationManager(config=config or default_config)
    logger.info("PubTator editor session ready")
    return manager


def _annotation_to_dict(anno: Annotation) -> dict:
    return {
        "uid": anno.uid,
        "id": anno.id,
        "start": anno.start,
        "end": anno.end,
        "text": anno.text,
        "type": anno.type,
        "normalized_id": anno.normalized_id,
        "color": get_entity_color(anno.type).to_dict()
    }


def _document_to_dict(doc: Document) -> dict:
    return {
        "id": doc.id,
        "title": doc.title,
        "abstract": doc.abstract,
        "combined_text": doc.combined_text,
        "annotations": [_annotation_to_dict(anno) for anno in doc.annotations]
    }


def _navigation_state() -> dict:
    return {
        "current_index": manager.current_doc_index,
        "document_count": len(manager.documents)
    }


def _annotation_from_request(data: dict) -> Annotation:
    """Build an annotation from JSON; text defaults to the covered substring"""
    try:
        start = int(data["start"])
        end = int(data["end"])
    except (KeyError, TypeError, ValueError):
        raise ValueError("start and end must be integers")

    entity_type = (data.get("type") or "").strip()
    if not entity_type:
        raise ValueError("type is required")

    combined_text = manager.current_doc.combined_text
    if not 0 <= start < end <= len(combined_text):
        raise ValueError(f"range [{start}, {end}) is outside the document text")

    return Annotation(
        id=manager.current_doc.id,
        start=start,
        end=end,
        text=data.get("text") or combined_text[start:end],
        type=entity_type,
        normalized_id=data.get("normalized_id") or None
    )


@app.errorhandler(DocumentNotFoundError)
@app.errorhandler(AnnotationNotFoundError)
def handle_not_found(e):
    return jsonify({"error": str(e)}), 404


@app.errorhandler(NoCurrentDocumentError)
def handle_no_document(e):
    return jsonify({"error": str(e)}), 409


@app.errorhandler(ValueError)
def handle_bad_request(e):
    return jsonify({"error": str(e)}), 400


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({"status": "healthy", "message": "PubTator editor API is running"})


@app.route('/api/upload', methods=['POST'])
def upload_file():
    """
    Load a PubTator file, replacing the current documents

    Accepts a multipart ``file`` field or JSON ``{"content": ..., "filename": ...}``.
    """
    if 'file' in request.files:
        file = request.files['file']
        raw = file.read(MAX_FILE_SIZE + 1)
        if len(raw) > MAX_FILE_SIZE:
            return jsonify({"error": f"File '{file.filename}' exceeds 50MB limit"}), 413
        try:
            content = raw.decode('utf-8')
        except UnicodeDecodeError:
            return jsonify({"error": f"File '{file.filename}' is not UTF-8 text"}), 400
        filename = file.filename or None
    else:
        data = request.get_json(silent=True) or {}
        content = data.get("content")
        filename = data.get("filename")
        if content is None:
            return jsonify({"error": "No file provided"}), 400

    result = manager.load_content(content, filename)

    return jsonify({
        "success": True,
        "filename": manager.filename,
        "document_count": len(result.documents),
        "entity_types": manager.registry.sorted_types(),
        "errors": [
            {"line_number": issue.line_number, "kind": issue.kind, "message": issue.message}
            for issue in result.errors
        ]
    })


@app.route('/api/documents', methods=['GET'])
def list_documents():
    """Document ids and titles, optionally filtered by an id substring"""
    query = request.args.get('q', '')
    matching = set(manager.search_document_ids(query))
    return jsonify({
        "documents": [
            {"index": i, "id": doc.id, "title": doc.title, "annotation_count": len(doc.annotations)}
            for i, doc in enumerate(manager.documents) if doc.id in matching
        ],
        **_navigation_state()
    })


@app.route('/api/documents', methods=['POST'])
def create_document():
    data = request.get_json(silent=True) or {}
    doc = manager.new_document(data.get("title"), data.get("abstract", ""))
    return jsonify({"document": _document_to_dict(doc), **_navigation_state()}), 201


@app.route('/api/navigate', methods=['POST'])
def navigate():
    """Body: {"index": int} or {"doc_id": str} or {"direction": "next"|"previous"}"""
    data = request.get_json(silent=True) or {}

    if data.get("doc_id"):
        manager.navigate_to_document_by_id(data["doc_id"])
    elif data.get("direction") == "next":
        manager.next_document()
    elif data.get("direction") == "previous":
        manager.previous_document()
    elif "index" in data:
        try:
            manager.navigate(int(data["index"]))
        except (TypeError, ValueError):
            raise ValueError("index must be an integer")
    else:
        return jsonify({"error": "Provide index, doc_id or direction"}), 400

    return jsonify({"document": _document_to_dict(manager.current_doc), **_navigation_state()})


@app.route('/api/document', methods=['GET'])
def current_document():
    if not manager.documents:
        raise NoCurrentDocumentError("No document is loaded")
    return jsonify({"document": _document_to_dict(manager.current_doc), **_navigation_state()})


@app.route('/api/document/text', methods=['PUT'])
def update_document_text():
    """Edit title/abstract; annotations that could not follow the text are reported"""
    data = request.get_json(silent=True) or {}
    report = manager.update_document_text(title=data.get("title"), abstract=data.get("abstract"))

    return jsonify({
        "document": _document_to_dict(manager.current_doc),
        "relocated": [anno.uid for anno in report.relocated],
        "unresolved": [_annotation_to_dict(anno) for anno in report.unresolved]
    })


@app.route('/api/segments', methods=['GET'])
def get_segments():
    """Highlight segments of the current document for an optional ?regex= pattern"""
    if not manager.documents:
        raise NoCurrentDocumentError("No document is loaded")

    potential_style = get_potential_match_style()
    pattern_style = get_pattern_match_style()

    segments = []
    for segment in manager.segments(request.args.get('regex', '')):
        item = segment.to_dict()
        if segment.kind in (SegmentKind.ANNOTATION, SegmentKind.POTENTIAL):
            item["color"] = get_entity_color(segment.entity_type).to_dict()
        if segment.kind == SegmentKind.POTENTIAL:
            item["style"] = potential_style
        elif segment.kind == SegmentKind.PATTERN:
            item["style"] = pattern_style
        segments.append(item)

    return jsonify({"doc_id": manager.current_doc.id, "segments": segments})


@app.route('/api/selection', methods=['POST'])
def map_selection():
    """Body: {"start": int, "end": int}; returns trimmed offsets and text"""
    data = request.get_json(silent=True) or {}
    try:
        start, end = int(data["start"]), int(data["end"])
    except (KeyError, TypeError, ValueError):
        raise ValueError("start and end must be integers")

    selection = get_text_selection_info(manager.current_doc.combined_text, start, end)
    if selection is None:
        return jsonify({"selection": None})
    return jsonify({"selection": {"start": selection.start, "end": selection.end, "text": selection.text}})


@app.route('/api/annotations', methods=['POST'])
def add_annotation():
    data = request.get_json(silent=True) or {}
    stored = manager.add_annotation(_annotation_from_request(data))
    return jsonify({"annotation": _annotation_to_dict(stored)}), 201


@app.route('/api/annotations/<int:uid>', methods=['PUT'])
def edit_annotation(uid):
    data = request.get_json(silent=True) or {}
    stored = manager.edit_annotation_by_id(uid, _annotation_from_request(data))
    return jsonify({"annotation": _annotation_to_dict(stored)})


@app.route('/api/annotations/<int:uid>', methods=['DELETE'])
def delete_annotation(uid):
    removed = manager.delete_annotation_by_id(uid)
    return jsonify({"deleted": _annotation_to_dict(removed)})


@app.route('/api/entity-types', methods=['GET'])
def get_entity_types():
    return jsonify({
        "entity_types": [
            {"type": entity_type, "color": get_entity_color(entity_type).to_dict()}
            for entity_type in manager.registry.sorted_types()
        ]
    })


@app.route('/api/entity-types', methods=['POST'])
def register_entity_type():
    data = request.get_json(silent=True) or {}
    entity_type = (data.get("type") or "").strip()
    if not entity_type:
        return jsonify({"error": "type is required"}), 400

    added = manager.registry.register(entity_type)
    return jsonify({"type": entity_type, "added": added}), 201 if added else 200


@app.route('/api/export', methods=['GET'])
def export_file():
    """Download all documents in PubTator format"""
    content = manager.export_content()
    return Response(
        content,
        mimetype='text/plain',
        headers={"Content-Disposition": f'attachment; filename="{manager.filename}"'}
    )


@app.errorhandler(PubTatorError)
def handle_editor_error(e):
    logger.error(f"Editor error: {e}")
    return jsonify({"error": str(e)}), 400


initialize_components()


if __name__ == '__main__':
    logging.basicConfig(level=default_config.log_level)
    print("Starting PubTator editor API server...")
    print("\nStarting Flask server on http://localhost:8000")
    print("Press Ctrl+C to stop\n")
    app.run(host='0.0.0.0', port=8000, debug=True)
