"""
Maps an ItemAttributeAnalysis onto catalog (VUFS) properties: the category
hierarchy, the brand hierarchy, item metadata, a condition estimate and the
pick-lists offered to the user for review.

Everything here is derived from the analysis alone — no collaborator calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from analysis import APPAREL, FOOTWEAR, ItemAttributeAnalysis
from confidence import round_half_up
from vocabulary import Vocabulary, brand_match_key, get_vocabulary, mentions

# ── Mapping tables ────────────────────────────────────────────────────────────

_APPAREL_BLUE_SUBCATEGORY = {
    "Shirts": "Tops",
    "Tops": "Tops",
    "Tank Tops": "Tops",
    "Pants": "Bottoms",
    "Shorts": "Bottoms",
    "Skirts": "Bottoms",
    "Dresses": "Dresses",
    "Jackets": "Outerwear",
    "Sweats": "Casual",
    "Accessories": "Accessories",
}

_FOOTWEAR_BLUE_SUBCATEGORY = {
    "Sneakers": "Athletic",
    "Boots": "Boots",
    "Sandals": "Casual",
    "Dress Shoes": "Formal",
    "Athletic": "Athletic",
}

# Keys are brand names without the ® suffix, lowercase
_BRAND_LINES = {
    "adidas": ["originals", "performance", "neo"],
    "nike": ["air", "dunk", "jordan", "sb"],
    "zara": ["basic", "trf", "woman"],
}

_CARE_INSTRUCTIONS = {
    "Cotton": ["Machine wash cold", "Tumble dry low", "Iron medium heat"],
    "Polyester": ["Machine wash warm", "Tumble dry low", "Do not iron"],
    "Wool": ["Hand wash cold", "Lay flat to dry", "Dry clean recommended"],
    "Silk": ["Hand wash cold", "Air dry", "Dry clean only"],
    "Denim": ["Machine wash cold", "Hang dry", "Iron medium heat"],
}
_DEFAULT_CARE = ["Follow care label instructions"]

_WEAR_KEYWORDS = ["worn", "faded", "stain", "hole", "tear", "damage"]

CONDITION_CONFIDENCE = 75

# property → (boost over overall, cap)
_PROPERTY_BOOST = {
    "brand": (20, 95),
    "color": (15, 90),
    "piece_type": (10, 85),
    "material": (5, 80),
}


@dataclass
class VufsExtraction:
    category: dict = field(default_factory=dict)
    brand: dict = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)
    condition: dict = field(default_factory=dict)
    confidence: dict = field(default_factory=dict)
    suggestions: dict = field(default_factory=dict)
    detected_viewpoint: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "brand": self.brand,
            "metadata": self.metadata,
            "condition": self.condition,
            "confidence": self.confidence,
            "suggestions": self.suggestions,
            "detected_viewpoint": self.detected_viewpoint,
        }


def _label_names(analysis: ItemAttributeAnalysis) -> list[str]:
    return [label.name.lower() for label in analysis.raw_labels]


# ── Category ──────────────────────────────────────────────────────────────────

def _apparel_gray_subcategory(labels: list[str]) -> str:
    if any("formal" in l or "business" in l for l in labels):
        return "Formal"
    if any("sport" in l or "athletic" in l for l in labels):
        return "Athletic"
    return "Casual"


def _footwear_gray_subcategory(labels: list[str]) -> str:
    if any("running" in l or "sport" in l for l in labels):
        return "Athletic"
    if any("dress" in l or "formal" in l for l in labels):
        return "Formal"
    return "Casual"


def extract_category(analysis: ItemAttributeAnalysis) -> dict:
    labels = _label_names(analysis)
    piece_type = analysis.detected_piece_type

    if analysis.domain == FOOTWEAR:
        if piece_type is None:
            blue = "Shoes"
        else:
            blue = _FOOTWEAR_BLUE_SUBCATEGORY.get(piece_type, "Casual")
        return {
            "page": "Footwear",
            "blue_subcategory": blue,
            "white_subcategory": piece_type or "Shoes",
            "gray_subcategory": _footwear_gray_subcategory(labels),
        }

    if piece_type is None:
        return {}
    return {
        "page": "Apparel",
        "blue_subcategory": _APPAREL_BLUE_SUBCATEGORY.get(piece_type, "Other"),
        "white_subcategory": piece_type,
        "gray_subcategory": _apparel_gray_subcategory(labels),
    }


# ── Brand ─────────────────────────────────────────────────────────────────────

def _detect_collaboration(text: str) -> Optional[str]:
    if " x " in text:
        partner = text.split(" x ", 1)[1].split(" ")[0]
        return partner or None
    return None


def extract_brand(analysis: ItemAttributeAnalysis) -> dict:
    if not analysis.detected_brand:
        return {}

    text = " ".join(analysis.detected_text).lower()
    lines = _BRAND_LINES.get(brand_match_key(analysis.detected_brand), [])
    brand: dict = {"brand": analysis.detected_brand}

    line = next((l for l in lines if mentions(text, l)), None)
    if line:
        brand["line"] = line
    collaboration = _detect_collaboration(text)
    if collaboration:
        brand["collaboration"] = collaboration
    return brand


# ── Metadata ──────────────────────────────────────────────────────────────────

def _undertones(analysis: ItemAttributeAnalysis, vocabulary: Vocabulary) -> list[str]:
    names = [
        label.name for label in analysis.raw_labels
        if "color" in label.name.lower()
        or any(mentions(label.name, c) for c in vocabulary.colors)
    ]
    return names[:2]


def care_instructions(material: str) -> list[str]:
    return list(_CARE_INSTRUCTIONS.get(material, _DEFAULT_CARE))


def extract_metadata(analysis: ItemAttributeAnalysis, vocabulary: Vocabulary) -> dict:
    metadata: dict = {}

    if analysis.parsed_composition:
        metadata["composition"] = [e.to_dict() for e in analysis.parsed_composition]
    elif analysis.detected_material:
        metadata["composition"] = [{"material": analysis.detected_material, "percentage": 100}]

    if analysis.detected_size:
        metadata["size"] = analysis.detected_size

    if analysis.detected_color:
        metadata["colors"] = [{
            "primary": analysis.detected_color,
            "undertones": _undertones(analysis, vocabulary),
        }]

    if analysis.detected_material:
        metadata["care_instructions"] = care_instructions(analysis.detected_material)

    return metadata


# ── Condition ─────────────────────────────────────────────────────────────────

def wear_indicators(analysis: ItemAttributeAnalysis) -> list[str]:
    labels = _label_names(analysis)
    return [k for k in _WEAR_KEYWORDS if any(k in l for l in labels)]


def extract_condition(analysis: ItemAttributeAnalysis) -> dict:
    quality = analysis.confidence.overall / 100
    wear = wear_indicators(analysis)

    if quality > 0.8 and not wear:
        status = "Excellent Used"
    elif quality > 0.6 and len(wear) <= 1:
        status = "Good"
    elif quality > 0.4:
        status = "Fair"
    else:
        status = "Poor"

    return {"status": status, "defects": wear}


# ── Confidence & suggestions ──────────────────────────────────────────────────

def extraction_confidence(
    analysis: ItemAttributeAnalysis,
    category: dict,
    brand: dict,
    metadata: dict,
    condition: dict,
) -> dict:
    c = analysis.confidence
    category_conf = min(c.piece_type + 10, 90) if category else 0
    brand_conf = min(c.brand + 15, 95) if brand.get("brand") else 0
    metadata_conf = (
        min(round_half_up((c.color + c.material) / 2 + 10), 85)
        if metadata.get("composition") or metadata.get("colors") else 0
    )
    condition_conf = CONDITION_CONFIDENCE if condition.get("status") else 0

    return {
        "category": category_conf,
        "brand": brand_conf,
        "metadata": metadata_conf,
        "condition": condition_conf,
        "overall": round_half_up((category_conf + brand_conf + metadata_conf + condition_conf) / 4),
    }


def suggestions(analysis: ItemAttributeAnalysis, vocabulary: Vocabulary) -> dict:
    domain = analysis.domain if analysis.domain in (APPAREL, FOOTWEAR) else APPAREL
    return {
        "category": list(vocabulary.piece_types(domain))[:5],
        "brand": vocabulary.brands[:10],
        "colors": vocabulary.colors[:10],
        "materials": vocabulary.materials(domain)[:8],
    }


def property_confidence(prop: str, analysis: ItemAttributeAnalysis) -> int:
    """
    Confidence for a single property as shown next to a suggested value:
    the overall score boosted per property and capped, 0 when nothing was
    detected. Unknown properties get the overall score.
    """
    if prop not in _PROPERTY_BOOST:
        return analysis.confidence.overall
    value = getattr(analysis, f"detected_{prop}")
    if not value:
        return 0
    boost, cap = _PROPERTY_BOOST[prop]
    return min(analysis.confidence.overall + boost, cap)


def extract_vufs_properties(
    analysis: ItemAttributeAnalysis,
    vocabulary: Optional[Vocabulary] = None,
) -> VufsExtraction:
    vocab = vocabulary or get_vocabulary()

    category = extract_category(analysis)
    brand = extract_brand(analysis)
    metadata = extract_metadata(analysis, vocab)
    condition = extract_condition(analysis)

    return VufsExtraction(
        category=category,
        brand=brand,
        metadata=metadata,
        condition=condition,
        confidence=extraction_confidence(analysis, category, brand, metadata, condition),
        suggestions=suggestions(analysis, vocab),
        detected_viewpoint=analysis.detected_viewpoint,
    )
