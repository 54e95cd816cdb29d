"""
Entity colour assignment for the presentation layers
Colours are rich style strings; the same type always maps to the same colour
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EntityColor:
    bg: str
    text: str
    highlight: str

    def to_dict(self) -> dict:
        return {'bg': self.bg, 'text': self.text, 'highlight': self.highlight}


DEFAULT_COLOR = EntityColor(bg="grey93", text="grey23", highlight="black on grey82")

# Predefined colors for common entity types
COLOR_MAP = {
    'Chemical': EntityColor(bg="light_sky_blue1", text="dark_blue", highlight="black on light_sky_blue1"),
    'Gene': EntityColor(bg="dark_sea_green2", text="dark_green", highlight="black on dark_sea_green2"),
    'Disease': EntityColor(bg="light_pink1", text="dark_red", highlight="black on light_pink1"),
    'Species': EntityColor(bg="thistle1", text="purple4", highlight="black on thistle1"),
    'Mutation': EntityColor(bg="light_goldenrod1", text="dark_goldenrod", highlight="black on light_goldenrod1"),
    'CellLine': EntityColor(bg="light_slate_blue", text="navy_blue", highlight="white on light_slate_blue"),
}

# Fallback palette for unknown types, indexed by a string hash
COLOR_OPTIONS = [
    EntityColor(bg="sky_blue1", text="deep_sky_blue4", highlight="black on sky_blue1"),
    EntityColor(bg="aquamarine1", text="dark_cyan", highlight="black on aquamarine1"),
    EntityColor(bg="navajo_white1", text="orange4", highlight="black on navajo_white1"),
    EntityColor(bg="misty_rose1", text="deep_pink4", highlight="black on misty_rose1"),
    EntityColor(bg="plum1", text="magenta3", highlight="black on plum1"),
    EntityColor(bg="dark_olive_green1", text="chartreuse4", highlight="black on dark_olive_green1"),
    EntityColor(bg="pale_turquoise1", text="turquoise4", highlight="black on pale_turquoise1"),
    EntityColor(bg="light_cyan1", text="cyan3", highlight="black on light_cyan1"),
    EntityColor(bg="light_salmon1", text="dark_orange3", highlight="black on light_salmon1"),
]

POTENTIAL_MATCH_STYLE = {'text': "red3", 'style': "red3 on grey93"}
PATTERN_MATCH_STYLE = {'text': "black", 'style': "black on yellow1"}


def _string_hash(value: str) -> int:
    """32-bit signed rolling hash (hash * 31 + char)"""
    hash_value = 0
    for char in value:
        hash_value = ord(char) + ((hash_value << 5) - hash_value)
        hash_value = (hash_value + 2 ** 31) % 2 ** 32 - 2 ** 31
    return hash_value


def get_entity_color(entity_type: str) -> EntityColor:
    """Consistent colour for an entity type"""
    if not entity_type:
        return DEFAULT_COLOR

    if entity_type in COLOR_MAP:
        return COLOR_MAP[entity_type]

    return COLOR_OPTIONS[abs(_string_hash(entity_type)) % len(COLOR_OPTIONS)]


def get_potential_match_style() -> dict:
    return dict(POTENTIAL_MATCH_STYLE)


def get_pattern_match_style() -> dict:
    return dict(PATTERN_MATCH_STYLE)
