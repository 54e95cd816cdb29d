"""
PubTator Format Codec
Parses the line-oriented PubTator interchange format and generates it back
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .errors import ParseIssue, PubTatorParseError
from .models import Annotation, Document

logger = logging.getLogger(__name__)

# "<id>|t|<title>" and "<id>|a|<abstract>"; the id itself holds no pipe or tab
TEXT_LINE_PATTERN = re.compile(r'^([^|\t]*)\|([ta])\|(.*)$')

ANNOTATION_MIN_FIELDS = 5


@dataclass
class ParseResult:
    """Documents recovered from a PubTator file plus everything that went wrong"""
    documents: List[Document] = field(default_factory=list)
    entity_types: Set[str] = field(default_factory=set)
    errors: List[ParseIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_pubtator(content: str, strict: bool = False) -> ParseResult:
    """
    Parse PubTator content into structured documents

    Bad lines are skipped and reported in ``ParseResult.errors`` so that
    one corrupt record never discards the rest of the file.

    Args:
        content: The PubTator format content
        strict: Raise PubTatorParseError instead of returning partial results

    Returns:
        ParseResult with documents in file order and the set of entity types seen
    """
    result = ParseResult()
    current_doc: Optional[Document] = None

    for line_number, raw_line in enumerate(content.split('\n'), start=1):
        line = raw_line.rstrip('\r')
        if not line.strip():
            continue

        text_match = TEXT_LINE_PATTERN.match(line)
        if text_match:
            doc_id, tag, text = text_match.groups()
            if tag == 't':
                # Title line starts a new document
                if current_doc is not None:
                    result.documents.append(current_doc)
                current_doc = Document(id=doc_id, title=text)
            elif current_doc is None:
                _report(result, line_number, line, "no_current_document",
                        "abstract line before any title line")
            else:
                current_doc.abstract = text
            continue

        # Annotation line
        parts = line.split('\t')
        if len(parts) < ANNOTATION_MIN_FIELDS:
            _report(result, line_number, line, "malformed_line",
                    f"expected at least {ANNOTATION_MIN_FIELDS} tab-separated fields, got {len(parts)}")
            continue

        if current_doc is None:
            _report(result, line_number, line, "no_current_document",
                    "annotation line before any title line")
            continue

        anno_id, start, end, text, entity_type = parts[:ANNOTATION_MIN_FIELDS]
        try:
            start_offset = int(start)
            end_offset = int(end)
        except ValueError:
            _report(result, line_number, line, "invalid_offset",
                    f"non-numeric offsets {start!r}, {end!r}")
            continue

        normalized_id = parts[5] if len(parts) >= 6 else None

        result.entity_types.add(entity_type)
        current_doc.annotations.append(Annotation(
            id=anno_id,
            start=start_offset,
            end=end_offset,
            text=text,
            type=entity_type,
            normalized_id=normalized_id
        ))

    if current_doc is not None:
        result.documents.append(current_doc)

    logger.info(f"Parsed {len(result.documents)} documents, "
                f"{len(result.entity_types)} entity types, {len(result.errors)} issues")

    if strict and result.errors:
        raise PubTatorParseError(result.errors)

    return result


def _report(result: ParseResult, line_number: int, line: str, kind: str, message: str):
    issue = ParseIssue(line_number=line_number, line=line, kind=kind, message=message)
    logger.warning(f"Skipping {issue}")
    result.errors.append(issue)


def format_annotation_line(annotation: Annotation) -> str:
    """Single tab-separated annotation record"""
    anno_line = (f"{annotation.id}\t{annotation.start}\t{annotation.end}\t"
                 f"{annotation.text}\t{annotation.type}")

    # Add normalized ID if it exists
    if annotation.normalized_id:
        anno_line += f"\t{annotation.normalized_id}"

    return anno_line


def generate_export_content(documents: List[Document]) -> str:
    """
    Generate PubTator format content from structured documents

    Args:
        documents: Documents in export order

    Returns:
        PubTator format content, one blank line after every document
    """
    lines = []

    for doc in documents:
        lines.append(f"{doc.id}|t|{doc.title}")
        lines.append(f"{doc.id}|a|{doc.abstract}")

        for anno in doc.annotations:
            lines.append(format_annotation_line(anno))

        # Empty line between documents
        lines.append("")

    return "".join(line + "\n" for line in lines)
