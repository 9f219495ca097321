"""
Attribute resolvers — brand, piece type, color and material.

Every attribute goes through the same chain, first non-empty value wins:

  1. classifier field, verbatim
  2. fallback source
       brand       → known brand names found in the OCR text (never labels)
       piece type  → domain-scoped keyword table applied to labels in order
       color       → color vocabulary applied to labels in order
       material    → domain-scoped material vocabulary applied to labels in order
  3. None
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from analysis import LINE, WORD, ClassifierResult, RawLabel, RawTextDetection
from vocabulary import Vocabulary, as_table, best_match, brand_match_key, get_vocabulary

_WORD_TOKEN = re.compile(r"\w+")


@dataclass(frozen=True)
class ResolvedAttributes:
    brand: Optional[str] = None
    piece_type: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def resolve(
    primary: Optional[str],
    fallback: Callable[[], Optional[str]],
) -> Optional[str]:
    """
    Return `primary` when it carries a value, else whatever `fallback()` finds.
    Absent and blank count the same; `fallback` only runs when needed.
    """
    if _present(primary):
        return primary
    value = fallback()
    return value if _present(value) else None


def _first_label_match(labels: Sequence[RawLabel], table: dict[str, list[str]]) -> Optional[str]:
    """Labels keep detector order: the first label that matches anything decides."""
    for label in labels:
        match = best_match(label.name, table)
        if match:
            return match
    return None


# ── Fallback sources ──────────────────────────────────────────────────────────

def brand_from_text(texts: Sequence[RawTextDetection], vocabulary: Vocabulary) -> Optional[str]:
    haystacks = [t.text.lower() for t in texts if t.text]
    for brand in vocabulary.brands:
        key = brand_match_key(brand)
        if key and any(key in text for text in haystacks):
            return brand
    return None


def piece_type_from_labels(labels: Sequence[RawLabel], domain: str, vocabulary: Vocabulary) -> Optional[str]:
    return _first_label_match(labels, vocabulary.piece_types(domain))


def color_from_labels(labels: Sequence[RawLabel], vocabulary: Vocabulary) -> Optional[str]:
    return _first_label_match(labels, as_table(vocabulary.colors))


def material_from_labels(labels: Sequence[RawLabel], domain: str, vocabulary: Vocabulary) -> Optional[str]:
    return _first_label_match(labels, as_table(vocabulary.materials(domain)))


# ── Public API ────────────────────────────────────────────────────────────────

def resolve_attributes(
    domain: str,
    labels: Sequence[RawLabel],
    texts: Sequence[RawTextDetection],
    classifier_result: Optional[ClassifierResult],
    vocabulary: Optional[Vocabulary] = None,
) -> ResolvedAttributes:
    vocab = vocabulary or get_vocabulary()
    cr = classifier_result or ClassifierResult()

    return ResolvedAttributes(
        brand=resolve(cr.brand, lambda: brand_from_text(texts, vocab)),
        piece_type=resolve(cr.piece_type, lambda: piece_type_from_labels(labels, domain, vocab)),
        color=resolve(cr.color, lambda: color_from_labels(labels, vocab)),
        material=resolve(cr.material, lambda: material_from_labels(labels, domain, vocab)),
    )


def detected_text_values(texts: Sequence[RawTextDetection]) -> list[str]:
    """
    Literal text shown to the caller: every distinct LINE, in detector order.
    A WORD is only kept when no LINE already contains it, so a detector that
    reports "Nike" as both a line and a word yields ["Nike"] once. Words are
    compared without punctuation: "INC." is part of the line "NIKE, INC.".
    Single-character fragments are dropped.
    """
    lines: list[str] = []
    for t in texts:
        text = t.text.strip()
        if t.kind == LINE and len(text) > 1 and text not in lines:
            lines.append(text)

    line_tokens = {token for line in lines for token in _WORD_TOKEN.findall(line.lower())}
    result = list(lines)
    for t in texts:
        text = t.text.strip()
        if t.kind != WORD or len(text) <= 1 or text in result:
            continue
        tokens = _WORD_TOKEN.findall(text.lower())
        # punctuation-only words, and words already read as part of a line
        if not tokens or all(token in line_tokens for token in tokens):
            continue
        result.append(text)
    return result
