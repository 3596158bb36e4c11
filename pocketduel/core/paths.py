"""
Centralized path helpers.
"""
from __future__ import annotations
from pathlib import Path

# This file lives at pocketduel/core/paths.py
PACKAGE = Path(__file__).resolve().parents[1]
ASSETS = PACKAGE / "assets"
MOVES_FILE = ASSETS / "moves.json"
SPECIES_FILE = ASSETS / "species.json"
CREATURES_FILE = ASSETS / "creatures.json"
