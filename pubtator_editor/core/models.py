"""
PubTator Editor Data Model
Documents, annotations and the highlight segments computed from them
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass
class Annotation:
    """A character-offset entity span inside a document's combined text"""
    id: str
    start: int
    end: int
    text: str
    type: str
    normalized_id: Optional[str] = None
    # Stable per-document identifier assigned by the store
    uid: Optional[int] = field(default=None, compare=False)

    def copy(self, **changes) -> 'Annotation':
        values = {
            'id': self.id,
            'start': self.start,
            'end': self.end,
            'text': self.text,
            'type': self.type,
            'normalized_id': self.normalized_id,
            'uid': self.uid,
        }
        values.update(changes)
        return Annotation(**values)


@dataclass
class Document:
    """A PubTator document: title, abstract and annotations"""
    id: str
    title: str
    abstract: str = ""
    annotations: List[Annotation] = field(default_factory=list)
    _next_uid: int = field(default=1, init=False, compare=False, repr=False)

    @property
    def combined_text(self) -> str:
        """Title and abstract joined by a single space; all offsets refer to this"""
        return self.title + (" " + self.abstract if self.abstract else "")

    def allocate_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid


class SegmentKind(str, Enum):
    PLAIN = "plain"
    ANNOTATION = "annotation"
    POTENTIAL = "potential"
    PATTERN = "pattern"


@dataclass
class Segment:
    """One span of the linear walk over a document's combined text"""
    text: str
    start: int
    end: int
    kind: SegmentKind = SegmentKind.PLAIN
    entity_type: Optional[str] = None
    annotation_uid: Optional[int] = None

    @property
    def highlighted(self) -> bool:
        return self.kind != SegmentKind.PLAIN

    def to_dict(self) -> dict:
        return {
            'text': self.text,
            'start': self.start,
            'end': self.end,
            'kind': self.kind.value,
            'entity_type': self.entity_type,
            'annotation_uid': self.annotation_uid,
        }


@dataclass
class TextSelection:
    """Offsets of a user's text selection within the combined text"""
    start: int
    end: int
    text: str
