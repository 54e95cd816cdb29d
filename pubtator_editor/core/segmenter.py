"""
PubTator Editor Segmentation Engine
Splits a document's combined text into non-overlapping highlight segments
from explicit annotations, potential re-occurrences and a search pattern
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import SegmentationConfig
from .models import Annotation, Document, Segment, SegmentKind, TextSelection

logger = logging.getLogger(__name__)

_DIGIT_PATTERN = re.compile(r'\d')


@dataclass
class _Position:
    start: int
    end: int
    kind: SegmentKind
    entity_type: Optional[str] = None
    annotation_uid: Optional[int] = None


@dataclass
class ReanchorReport:
    """Outcome of relocating annotations after the text they point into changed"""
    unchanged: List[Annotation] = field(default_factory=list)
    relocated: List[Annotation] = field(default_factory=list)
    unresolved: List[Annotation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unresolved


def get_combined_text(document: Document) -> str:
    """Combined text from title and abstract"""
    return document.combined_text


def ranges_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open interval intersection"""
    return start1 < end2 and end1 > start2


def _overlaps_any(start: int, end: int, positions: List[_Position]) -> bool:
    return any(ranges_overlap(start, end, pos.start, pos.end) for pos in positions)


def _create_annotation_positions(annotations: List[Annotation]) -> List[_Position]:
    return [
        _Position(
            start=anno.start,
            end=anno.end,
            kind=SegmentKind.ANNOTATION,
            entity_type=anno.type,
            annotation_uid=anno.uid
        )
        for anno in annotations
    ]


def _create_unique_text_map(annotations: List[Annotation],
                            config: SegmentationConfig) -> Dict[str, str]:
    """
    Map of lowercase annotated text to entity type

    Very short texts (under two characters) are only kept when they contain
    a digit, so single letters do not light up the whole document.
    """
    unique_texts = {}

    for anno in annotations:
        text = anno.text
        if len(text) < 2 and not _DIGIT_PATTERN.search(text):
            continue
        if config.potential_min_length <= len(text) <= config.potential_max_length:
            unique_texts[text.lower()] = anno.type

    return unique_texts


def _create_potential_matches(text: str,
                              unique_texts: Dict[str, str],
                              existing_positions: List[_Position]) -> List[_Position]:
    potential_positions = []

    # Longer texts first so they claim the span over their own substrings
    sorted_entries = sorted(unique_texts.items(), key=lambda item: len(item[0]), reverse=True)

    for anno_text, entity_type in sorted_entries:
        pattern = re.compile(re.escape(anno_text), re.IGNORECASE)

        for match in pattern.finditer(text):
            match_start, match_end = match.start(), match.end()

            if _overlaps_any(match_start, match_end, existing_positions):
                continue
            if _overlaps_any(match_start, match_end, potential_positions):
                continue

            potential_positions.append(_Position(
                start=match_start,
                end=match_end,
                kind=SegmentKind.POTENTIAL,
                entity_type=entity_type
            ))

    return potential_positions


def compile_search_pattern(pattern: Optional[str],
                           config: Optional[SegmentationConfig] = None) -> Optional[re.Pattern]:
    """
    Compile a user search pattern case-insensitively

    Returns:
        The compiled pattern, or None for blank, oversized or invalid patterns
    """
    config = config or SegmentationConfig()

    if not pattern or not pattern.strip():
        return None

    if len(pattern) > config.max_pattern_length:
        logger.warning(f"Search pattern rejected: longer than {config.max_pattern_length} characters")
        return None

    try:
        return re.compile(pattern, re.IGNORECASE)
    except (re.error, OverflowError, RecursionError) as e:
        logger.warning(f"Invalid regex pattern {pattern!r}: {e}")
        return None


def _create_pattern_matches(text: str,
                            pattern: Optional[str],
                            existing_positions: List[_Position],
                            config: SegmentationConfig) -> List[_Position]:
    pattern_positions = []

    regex = compile_search_pattern(pattern, config)
    if regex is None:
        return pattern_positions

    for match in regex.finditer(text):
        match_start, match_end = match.start(), match.end()

        if match_start == match_end:
            continue
        if _overlaps_any(match_start, match_end, existing_positions):
            continue
        if _overlaps_any(match_start, match_end, pattern_positions):
            continue

        pattern_positions.append(_Position(
            start=match_start,
            end=match_end,
            kind=SegmentKind.PATTERN
        ))

    return pattern_positions


def _create_text_segments(text: str, positions: List[_Position]) -> List[Segment]:
    segments = []
    last_end = 0

    for pos in positions:
        if pos.start < 0 or pos.end > len(text) or pos.start >= pos.end:
            logger.debug(f"Dropping out-of-range span [{pos.start}, {pos.end})")
            continue

        # Duplicate or overlapping explicit annotations: the earlier one is shown
        if pos.start < last_end:
            logger.debug(f"Dropping span [{pos.start}, {pos.end}) overlapping previous segment")
            continue

        if pos.start > last_end:
            segments.append(Segment(
                text=text[last_end:pos.start],
                start=last_end,
                end=pos.start
            ))

        segments.append(Segment(
            text=text[pos.start:pos.end],
            start=pos.start,
            end=pos.end,
            kind=pos.kind,
            entity_type=pos.entity_type if pos.kind != SegmentKind.PATTERN else None,
            annotation_uid=pos.annotation_uid
        ))

        last_end = pos.end

    if last_end < len(text):
        segments.append(Segment(
            text=text[last_end:],
            start=last_end,
            end=len(text)
        ))

    return segments


def process_text_segments(combined_text: str,
                          annotations: List[Annotation],
                          pattern: Optional[str] = None,
                          config: Optional[SegmentationConfig] = None) -> List[Segment]:
    """
    Process document text and create segments with all kinds of highlights in one pass

    Explicit annotations take precedence over potential matches, which take
    precedence over pattern matches; highlighted segments never overlap and
    the segment texts concatenate back to ``combined_text``.

    Args:
        combined_text: Combined document text
        annotations: Annotations of the document
        pattern: Optional regex pattern to highlight
        config: Segmentation limits

    Returns:
        Ordered list of segments
    """
    if not combined_text:
        return []

    config = config or SegmentationConfig()

    # Step 1: explicit annotations
    annotation_positions = _create_annotation_positions(annotations)

    # Step 2: re-occurrences of annotated texts
    unique_texts = _create_unique_text_map(annotations, config)
    potential_positions = _create_potential_matches(combined_text, unique_texts, annotation_positions)

    # Step 3: search pattern
    pattern_positions = _create_pattern_matches(
        combined_text, pattern, annotation_positions + potential_positions, config
    )

    # Stable sort keeps explicit before potential before pattern on equal starts
    positions = annotation_positions + potential_positions + pattern_positions
    positions.sort(key=lambda pos: pos.start)

    segments = _create_text_segments(combined_text, positions)
    logger.debug(f"Segmented {len(combined_text)} chars into {len(segments)} segments "
                 f"({len(potential_positions)} potential, {len(pattern_positions)} pattern)")
    return segments


def find_segment_annotation(segment: Segment,
                            annotations: List[Annotation],
                            combined_text: str,
                            tolerance: int = 5) -> Optional[Annotation]:
    """
    Best-effort lookup of the annotation behind a highlighted segment

    Accepts the first annotation whose live substring equals the segment text
    and whose start lies within ``tolerance`` characters of the segment start.
    """
    for anno in annotations:
        if (combined_text[anno.start:anno.end] == segment.text
                and abs(anno.start - segment.start) < tolerance):
            return anno
    return None


def _annotation_by_uid(segment: Segment,
                       annotations: List[Annotation],
                       combined_text: str) -> Optional[Annotation]:
    # A segment that still names its annotation keeps it while the live text agrees
    if segment.annotation_uid is None:
        return None
    for anno in annotations:
        if anno.uid == segment.annotation_uid and combined_text[anno.start:anno.end] == segment.text:
            return anno
    return None


def reconcile_segment_positions(segments: List[Segment],
                                annotations: List[Annotation],
                                combined_text: str,
                                tolerance: int = 5) -> List[Segment]:
    """
    Recompute segment offsets cumulatively and snap annotation segments to
    the annotation found by content match near that position
    """
    reconciled = []
    current_position = 0

    for segment in segments:
        new_segment = Segment(
            text=segment.text,
            start=current_position,
            end=current_position + len(segment.text),
            kind=segment.kind,
            entity_type=segment.entity_type,
            annotation_uid=segment.annotation_uid
        )

        if segment.kind == SegmentKind.ANNOTATION:
            matching = _annotation_by_uid(segment, annotations, combined_text)
            if matching is None:
                matching = find_segment_annotation(new_segment, annotations, combined_text, tolerance)
            if matching is not None:
                new_segment.start = matching.start
                new_segment.end = matching.end
                new_segment.annotation_uid = matching.uid

        current_position += len(segment.text)
        reconciled.append(new_segment)

    return reconciled


def _nearest_occurrence(text: str, needle: str, around: int, window: int) -> Optional[int]:
    low = max(0, around - window)
    high = min(len(text), around + window + len(needle))

    best = None
    index = text.find(needle, low, high)
    while index != -1:
        if best is None or abs(index - around) < abs(best - around):
            best = index
        index = text.find(needle, index + 1, high)
    return best


def reanchor_annotations(annotations: List[Annotation],
                         new_text: str,
                         window: int = 50) -> ReanchorReport:
    """
    Move annotations back onto their text after the combined text changed

    An annotation whose offsets still cover its stored text is left alone;
    otherwise it is moved to the nearest occurrence of its text within
    ``window`` characters of its old start. Annotations that cannot be
    found are reported as unresolved and keep their stale offsets.
    """
    report = ReanchorReport()

    for anno in annotations:
        if new_text[anno.start:anno.end] == anno.text:
            report.unchanged.append(anno)
            continue

        found = _nearest_occurrence(new_text, anno.text, anno.start, window) if anno.text else None
        if found is None:
            logger.warning(f"Could not re-anchor annotation '{anno.text}' at [{anno.start}, {anno.end})")
            report.unresolved.append(anno)
            continue

        anno.start = found
        anno.end = found + len(anno.text)
        report.relocated.append(anno)

    return report


def get_text_selection_info(combined_text: str, start: int, end: int) -> Optional[TextSelection]:
    """
    Map a raw selection range onto trimmed offsets in the combined text

    Returns:
        TextSelection, or None for empty, blank or out-of-range selections
    """
    if start is None or end is None:
        return None

    start = max(0, start)
    end = min(len(combined_text), end)
    if start >= end:
        return None

    raw = combined_text[start:end]
    text = raw.strip()
    if not text:
        return None

    selection_start = start + (len(raw) - len(raw.lstrip()))
    return TextSelection(start=selection_start, end=selection_start + len(text), text=text)
