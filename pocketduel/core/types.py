"""Global element type metadata: names, colors & abbreviations.

Provides:
  ELEMENT_TYPES: the ten element names the battle engine knows about
  TYPE_COLORS_HEX: mapping type -> hex color string (#RRGGBB)
  TYPE_ABBREVIATIONS: mapping type -> 3-letter abbreviation (upper)
  helpers producing rich markup for colored type labels.
"""
from __future__ import annotations
from typing import Dict, Tuple

ELEMENT_TYPES: Tuple[str, ...] = (
    "normal", "electric", "water", "flying", "grass",
    "fire", "ground", "rock", "fighting", "psychic",
)

TYPE_COLORS_HEX: Dict[str, str] = {
    "normal": "#A8A77A",
    "electric": "#F7D02C",
    "water": "#6390F0",
    "flying": "#A98FF3",
    "grass": "#7AC74C",
    "fire": "#EE8130",
    "ground": "#E2BF65",
    "rock": "#B6A136",
    "fighting": "#C22E28",
    "psychic": "#F95587",
}

TYPE_ABBREVIATIONS: Dict[str, str] = {
    "normal": "NRM",
    "electric": "ELE",
    "water": "WTR",
    "flying": "FLY",
    "grass": "GRS",
    "fire": "FIR",
    "ground": "GRN",
    "rock": "RCK",
    "fighting": "FGT",
    "psychic": "PSY",
}

ABBREVIATION_TYPES: Dict[str, str] = {abbr: t for t, abbr in TYPE_ABBREVIATIONS.items()}

def is_element_type(name: str) -> bool:
    return name.lower() in TYPE_COLORS_HEX

def type_abbreviation(type_name: str) -> str:
    return TYPE_ABBREVIATIONS.get(type_name.lower(), type_name[:3].upper())

def rich_type_text(type_name: str, text: str) -> str:
    """Wrap text in rich markup using the type's color (plain text if unknown)."""
    hex_val = TYPE_COLORS_HEX.get(type_name.lower())
    if not hex_val:
        return text
    return f"[{hex_val}]{text}[/{hex_val}]"

def format_types(types: Tuple[str, ...]) -> str:
    parts = [rich_type_text(t, type_abbreviation(t)) for t in types]
    return '/'.join(parts)

__all__ = [
    'ELEMENT_TYPES','TYPE_COLORS_HEX','TYPE_ABBREVIATIONS','ABBREVIATION_TYPES',
    'is_element_type','type_abbreviation','rich_type_text','format_types'
]
