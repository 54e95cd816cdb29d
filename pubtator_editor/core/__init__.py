from .config import EditorConfig, SegmentationConfig, default_config
from .errors import (
    AnnotationNotFoundError,
    DocumentNotFoundError,
    NoCurrentDocumentError,
    ParseIssue,
    PubTatorError,
    PubTatorParseError,
)
from .models import Annotation, Document, Segment, SegmentKind, TextSelection
from .pubtator import ParseResult, generate_export_content, parse_pubtator
from .registry import EntityTypeRegistry
from .segmenter import get_combined_text, get_text_selection_info, process_text_segments
from .store import AnnotationManager

__all__ = [
    "EditorConfig",
    "SegmentationConfig",
    "default_config",
    "AnnotationNotFoundError",
    "DocumentNotFoundError",
    "NoCurrentDocumentError",
    "ParseIssue",
    "PubTatorError",
    "PubTatorParseError",
    "Annotation",
    "Document",
    "Segment",
    "SegmentKind",
    "TextSelection",
    "ParseResult",
    "generate_export_content",
    "parse_pubtator",
    "EntityTypeRegistry",
    "get_combined_text",
    "get_text_selection_info",
    "process_text_segments",
    "AnnotationManager",
]
