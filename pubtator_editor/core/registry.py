"""
Entity Type Registry
Known annotation labels: a fixed seed vocabulary that grows during a session
"""

import logging
from typing import Iterable, Iterator, List, Optional

from .config import DEFAULT_ENTITY_TYPES

logger = logging.getLogger(__name__)


class EntityTypeRegistry:
    """
    Set of known entity type labels.

    Labels are matched case-sensitively and are never removed; the seed
    vocabulary is always present.
    """

    def __init__(self, seed: Optional[Iterable[str]] = None):
        self._types = {}
        self.register_all(DEFAULT_ENTITY_TYPES if seed is None else seed)

    def register(self, entity_type: Optional[str]) -> bool:
        """
        Add a label if it is not known yet

        Returns:
            True when the label was new
        """
        if not entity_type or not entity_type.strip():
            return False
        if entity_type in self._types:
            return False

        self._types[entity_type] = None
        logger.debug(f"Registered entity type '{entity_type}'")
        return True

    def register_all(self, entity_types: Iterable[str]) -> int:
        """Register several labels, returning how many were new"""
        return sum(1 for entity_type in entity_types if self.register(entity_type))

    def sorted_types(self) -> List[str]:
        """Labels in lexicographic order, as shown in choice lists"""
        return sorted(self._types)

    def __contains__(self, entity_type) -> bool:
        return entity_type in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._types))

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self):
        return f"EntityTypeRegistry({self.sorted_types()!r})"
