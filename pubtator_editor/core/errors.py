"""
PubTator Editor Errors
Exception hierarchy raised by the core and the per-line issues reported by the parser
"""

from dataclasses import dataclass
from typing import List


@dataclass
class ParseIssue:
    """A recoverable problem found on a single input line"""
    line_number: int
    line: str
    kind: str  # "malformed_line", "invalid_offset", "no_current_document"
    message: str

    def __str__(self):
        return f"line {self.line_number}: {self.message}"


class PubTatorError(Exception):
    """Base class for all editor errors"""


class PubTatorParseError(PubTatorError):
    """Raised by a strict parse when any line could not be used"""

    def __init__(self, issues: List[ParseIssue]):
        self.issues = issues
        summary = "; ".join(str(issue) for issue in issues[:3])
        if len(issues) > 3:
            summary += f" (+{len(issues) - 3} more)"
        super().__init__(f"{len(issues)} invalid line(s): {summary}")


class NoCurrentDocumentError(PubTatorError):
    """An operation needed a current document but none is loaded"""


class DocumentNotFoundError(PubTatorError):
    """No document with the requested id exists"""

    def __init__(self, doc_id: str):
        self.doc_id = doc_id
        super().__init__(f'Document with ID "{doc_id}" not found')


class AnnotationNotFoundError(PubTatorError):
    """No annotation at the requested index or with the requested uid"""
