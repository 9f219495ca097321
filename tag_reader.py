"""
Reads what a garment photo shows beyond the four core attributes:
which view it is (front, brand tag, care tag, detail…), the fibre composition
printed on a care tag and the size printed on a brand tag.

Pure functions over the labels and the deduplicated OCR text; nothing here
touches a collaborator or changes a fused attribute.
"""
from __future__ import annotations

import re
from typing import Optional, Sequence

from analysis import CompositionEntry, RawLabel

# ── Viewpoint ─────────────────────────────────────────────────────────────────

_CARE_KEYWORDS      = ["wash", "dry", "iron", "bleach", "cotton", "polyester", "wool", "%"]
_SIZE_WORDS         = ["s", "m", "l", "xl", "xxl", "small", "medium", "large"]
_BRAND_TAG_PHRASES  = ["made in", "rn", "ca"]
_DAMAGE_KEYWORDS    = ["stain", "hole", "tear", "damage", "rip"]
_DETAIL_KEYWORDS    = ["texture", "pattern", "macro"]


def _has_word(text: str, word: str) -> bool:
    return re.search(r"\b" + re.escape(word) + r"\b", text) is not None


def detect_viewpoint(labels: Sequence[RawLabel], detected_text: Sequence[str]) -> str:
    label_names = [label.name.lower() for label in labels]
    all_text = " ".join(detected_text).lower()

    if sum(1 for k in _CARE_KEYWORDS if k in all_text) >= 2:
        return "Composition Tag"

    size_on_text_label = (
        any(_has_word(all_text, s) for s in _SIZE_WORDS)
        and any("text" in name for name in label_names)
    )
    brand_tag_phrase = any(_has_word(all_text, p) for p in _BRAND_TAG_PHRASES)
    tag_label = any("label" in name and "clothing" not in name for name in label_names)
    if size_on_text_label or brand_tag_phrase or tag_label:
        return "Main Tag"

    for detail in ("zipper", "button", "pocket"):
        if detail in label_names:
            return detail.capitalize()

    if any(k in name for name in label_names for k in _DAMAGE_KEYWORDS):
        return "Damage"
    if any(k in name for name in label_names for k in _DETAIL_KEYWORDS):
        return "Details"

    return "Front"


# ── Composition ───────────────────────────────────────────────────────────────

_MATERIAL_NAMES = {
    # English
    "cotton": "Cotton", "polyester": "Polyester", "wool": "Wool", "silk": "Silk",
    "linen": "Linen", "nylon": "Nylon", "spandex": "Spandex", "elastane": "Elastane",
    "viscose": "Viscose", "rayon": "Rayon", "acrylic": "Acrylic", "cashmere": "Cashmere",
    "leather": "Leather", "denim": "Denim", "velvet": "Velvet", "satin": "Satin",
    "chiffon": "Chiffon", "tweed": "Tweed", "fleece": "Fleece", "modal": "Modal",
    "lyocell": "Lyocell", "tencel": "Tencel", "hemp": "Hemp", "bamboo": "Bamboo",
    # Portuguese
    "algodão": "Cotton", "algodao": "Cotton", "poliéster": "Polyester", "poliester": "Polyester",
    "lã": "Wool", "la": "Wool", "seda": "Silk", "linho": "Linen",
    "náilon": "Nylon", "nailon": "Nylon", "elastano": "Elastane", "couro": "Leather",
    "acrílico": "Acrylic", "acrilico": "Acrylic", "caxemira": "Cashmere", "cachemir": "Cashmere",
}

_PERCENT_FIRST = re.compile(r"(\d{1,3})\s*%\s*([A-Za-zÀ-ÿ]+)")
_MATERIAL_FIRST = re.compile(r"([A-Za-zÀ-ÿ]+)\s*(\d{1,3})\s*%")


def normalize_material_name(raw: str) -> str:
    key = raw.strip().lower()
    if key in _MATERIAL_NAMES:
        return _MATERIAL_NAMES[key]
    return key.capitalize()


def parse_composition(detected_text: Sequence[str]) -> list[CompositionEntry]:
    """
    "60% Cotton 40% Polyester" → [Cotton 60, Polyester 40].
    Falls back to the "Cotton 60%" order only when the first pattern finds nothing.
    """
    all_text = " ".join(detected_text)
    entries: list[CompositionEntry] = []

    for pct, name in _PERCENT_FIRST.findall(all_text):
        percentage = int(pct)
        if 0 < percentage <= 100:
            entries.append(CompositionEntry(normalize_material_name(name), percentage))

    if not entries:
        for name, pct in _MATERIAL_FIRST.findall(all_text):
            percentage = int(pct)
            if 0 < percentage <= 100:
                entries.append(CompositionEntry(normalize_material_name(name), percentage))

    entries.sort(key=lambda e: e.percentage, reverse=True)
    return entries


# ── Size ──────────────────────────────────────────────────────────────────────

_SIZE_PATTERNS = [
    re.compile(r"\b(XXS|XS|S|M|L|XL|XXL|XXXL|2XL|3XL|4XL|5XL)\b"),
    re.compile(r"\bSIZE\s*(\d{1,2})\b"),
    re.compile(r"\bTAMANHO\s*(\d{1,2})\b"),
    re.compile(r"\b(3[4-9]|4[0-9]|5[0-2])\b"),     # EU 34–52
    re.compile(r"\bUS\s*(\d{1,2})\b"),
    re.compile(r"\bUK\s*(\d{1,2})\b"),
]
_STANDALONE_LETTER_SIZE = re.compile(r"^(XXS|XS|S|M|L|XL|XXL|XXXL|2XL|3XL)$")
_STANDALONE_NUMBER = re.compile(r"^(\d{1,2})$")


def extract_size(detected_text: Sequence[str]) -> Optional[str]:
    all_text = " ".join(detected_text).upper()
    for pattern in _SIZE_PATTERNS:
        match = pattern.search(all_text)
        if match:
            return match.group(1)

    for text in detected_text:
        trimmed = text.strip().upper()
        if _STANDALONE_LETTER_SIZE.match(trimmed):
            return trimmed
        number = _STANDALONE_NUMBER.match(trimmed)
        if number:
            value = int(number.group(1))
            if value <= 18 or 34 <= value <= 52:
                return number.group(1)
    return None
