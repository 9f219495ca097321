"""
Keyword tables used to read detector labels and OCR text.

The tables are data, not logic: every one of them can be replaced from a JSON
file named by VOCABULARY_FILE without touching the resolvers. Only the lookup
order matters to the rest of the engine:

  • lists are scanned front to back
  • piece-type tables map a canonical piece type → its label keywords, and the
    canonical types are scanned in insertion order

Override file format (every key optional):
  {
    "brands": ["Nike®", "Adidas®"],
    "colors": ["Black", "White"],
    "apparel_piece_types": {"Shirts": ["shirt", "blouse"]},
    ...
  }
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

import config

logger = logging.getLogger(__name__)

REGISTERED_MARK = "®"

# ── Default tables ────────────────────────────────────────────────────────────

FOOTWEAR_KEYWORDS = [
    "Footwear", "Shoe", "Sneaker", "Athletic Shoe", "Boot", "Sandal",
    "Heel", "Loafer", "Slipper", "Flip-flop",
]

APPAREL_KEYWORDS = [
    "Clothing", "Apparel", "Shirt", "T-Shirt", "Jacket", "Dress", "Pants",
    "Jeans", "Skirt", "Top", "Blouse", "Sweater", "Coat", "Vest", "Shorts",
    "Hoodie", "Sweatshirt", "Outerwear",
]

# Display form is what the engine reports; matching ignores the ® suffix.
BRANDS = [
    "Nike®", "Adidas®", "Puma®", "Reebok®", "New Balance®", "Converse®",
    "Levi's®", "Tommy Hilfiger®", "Calvin Klein®", "Ralph Lauren®",
    "Lacoste®", "Zara", "H&M", "Uniqlo", "Gucci", "Prada", "Louis Vuitton",
    "Chanel", "Balenciaga", "Versace", "Osklen", "Reserva",
]

COLORS = [
    "Black", "White", "Off White", "Gray", "Beige", "Cream", "Brown",
    "Khaki", "Red", "Burgundy", "Pink", "Orange", "Yellow", "Gold",
    "Green", "Olive", "Blue", "Light Blue", "Navy Blue", "Navy", "Purple",
    "Silver",
]

APPAREL_MATERIALS = [
    "Cotton", "Polyester", "Wool", "Silk", "Linen", "Denim", "Leather",
    "Nylon", "Cashmere", "Viscose", "Velvet", "Satin", "Fleece", "Tweed",
    "Corduroy", "Knit",
]

FOOTWEAR_MATERIALS = [
    "Leather", "Patent Leather", "Suede", "Canvas", "Mesh", "Rubber",
    "Synthetic", "Textile", "Knit",
]

APPAREL_PIECE_TYPES: dict[str, list[str]] = {
    "Shirts":    ["shirt", "blouse", "button-up"],
    "Jackets":   ["jacket", "blazer", "coat", "outerwear"],
    "Pants":     ["pants", "trousers", "jeans"],
    "Dresses":   ["dress", "gown"],
    "Tops":      ["top", "blouse"],
    "Shorts":    ["shorts"],
    "Skirts":    ["skirt"],
    "Sweats":    ["sweatshirt", "hoodie", "sweatpants"],
    "Knitwear":  ["sweater", "cardigan", "pullover"],
    "Tank Tops": ["tank", "camisole"],
    "Bags":      ["bag", "purse", "handbag", "backpack"],
    "Jewelry":   ["jewelry", "necklace", "bracelet", "ring"],
    "Eyewear":   ["glasses", "sunglasses"],
}

FOOTWEAR_PIECE_TYPES: dict[str, list[str]] = {
    "Sneakers":    ["sneaker", "athletic shoe", "running shoe", "trainer", "shoe"],
    "Boots":       ["boot", "ankle boot"],
    "Sandals":     ["sandal", "flip-flop", "slide"],
    "Dress Shoes": ["dress shoe", "oxford", "loafer"],
    "Heels":       ["heel", "pump", "stiletto"],
    "Athletic":    ["athletic", "sport", "running"],
}


@dataclass
class Vocabulary:
    """All keyword tables the engine consults, in lookup order."""
    footwear_keywords: list[str] = field(default_factory=lambda: list(FOOTWEAR_KEYWORDS))
    apparel_keywords: list[str] = field(default_factory=lambda: list(APPAREL_KEYWORDS))
    brands: list[str] = field(default_factory=lambda: list(BRANDS))
    colors: list[str] = field(default_factory=lambda: list(COLORS))
    apparel_materials: list[str] = field(default_factory=lambda: list(APPAREL_MATERIALS))
    footwear_materials: list[str] = field(default_factory=lambda: list(FOOTWEAR_MATERIALS))
    apparel_piece_types: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in APPAREL_PIECE_TYPES.items()}
    )
    footwear_piece_types: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in FOOTWEAR_PIECE_TYPES.items()}
    )

    def piece_types(self, domain: str) -> dict[str, list[str]]:
        return self.footwear_piece_types if domain == "FOOTWEAR" else self.apparel_piece_types

    def materials(self, domain: str) -> list[str]:
        return self.footwear_materials if domain == "FOOTWEAR" else self.apparel_materials


# ── Matching primitives ───────────────────────────────────────────────────────

def mentions(name: str, term: str) -> bool:
    """
    True when `term` appears in `name` as a whole word, optionally pluralized
    with "s" or "es", case-insensitively.

    "Athletic Shoe" mentions "shoe", "Sneakers" mentions "sneaker",
    but "Laptop" does not mention "top" and "Blueberry" does not mention "blue".
    """
    if not term:
        return False
    pattern = r"\b" + re.escape(term.lower()) + r"(?:s|es)?(?!\w)"
    return re.search(pattern, name.lower()) is not None


def best_match(name: str, table: dict[str, list[str]]) -> Optional[str]:
    """
    Return the canonical entry of `table` whose keyword best describes `name`.

    The longest matching keyword wins, so "Dress Shoe" resolves to the entry
    listing "dress shoe" rather than the one listing "shoe". Ties go to the
    entry that comes first in the table.
    """
    best: Optional[str] = None
    best_len = 0
    for canonical, keywords in table.items():
        for keyword in keywords:
            if len(keyword) > best_len and mentions(name, keyword):
                best, best_len = canonical, len(keyword)
    return best


def as_table(terms: list[str]) -> dict[str, list[str]]:
    """Turn a flat term list into a table where each term names itself."""
    return {term: [term] for term in terms}


def brand_match_key(brand: str) -> str:
    return brand.replace(REGISTERED_MARK, "").strip().lower()


# ── Loading ───────────────────────────────────────────────────────────────────

_TABLES = {f.name for f in fields(Vocabulary)}
_MAPPING_TABLES = {"apparel_piece_types", "footwear_piece_types"}


def load_vocabulary(path: str | Path) -> Vocabulary:
    """
    Build a Vocabulary from the defaults overridden by the JSON file at `path`.
    Raises ValueError on an unreadable file, malformed JSON or unknown tables.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read vocabulary file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Vocabulary file {path} must contain a JSON object")

    unknown = set(raw) - _TABLES
    if unknown:
        raise ValueError(f"Unknown vocabulary tables in {path}: {', '.join(sorted(unknown))}")

    overrides: dict = {}
    for name, value in raw.items():
        if name in _MAPPING_TABLES:
            if not isinstance(value, dict) or not all(isinstance(v, list) for v in value.values()):
                raise ValueError(f"Vocabulary table '{name}' must map names to keyword lists")
            overrides[name] = {str(k): [str(x) for x in v] for k, v in value.items()}
        else:
            if not isinstance(value, list):
                raise ValueError(f"Vocabulary table '{name}' must be a list")
            overrides[name] = [str(x) for x in value]

    logger.info("Loaded vocabulary overrides from %s: %s", path, ", ".join(sorted(overrides)))
    return replace(Vocabulary(), **overrides)


# Module-level cache, cleared by reset_vocabulary()
_vocabulary: Optional[Vocabulary] = None


def get_vocabulary() -> Vocabulary:
    global _vocabulary
    if _vocabulary is None:
        _vocabulary = load_vocabulary(config.VOCABULARY_FILE) if config.VOCABULARY_FILE else Vocabulary()
    return _vocabulary


def reset_vocabulary() -> None:
    global _vocabulary
    _vocabulary = None
