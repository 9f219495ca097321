"""Tests for vocabulary.py — matching primitives and JSON overrides."""
from __future__ import annotations

import json

import pytest

import config
import vocabulary
from vocabulary import (
    Vocabulary,
    best_match,
    brand_match_key,
    get_vocabulary,
    load_vocabulary,
    mentions,
)


class TestMentions:
    @pytest.mark.parametrize("name, term", [
        ("Athletic Shoe", "shoe"),
        ("Sneakers", "sneaker"),
        ("T-Shirt", "shirt"),
        ("NAVY BLUE", "navy blue"),
        ("Dresses", "dress"),
        ("Ankle Boots", "boot"),
    ])
    def test_matches(self, name, term):
        assert mentions(name, term)

    @pytest.mark.parametrize("name, term", [
        ("Laptop", "top"),
        ("Necklace", "lace"),
        ("Blueberry", "blue"),
        ("Redwood", "red"),
        ("Goldfish", "gold"),
        ("Shoe", ""),
    ])
    def test_no_match(self, name, term):
        assert not mentions(name, term)


class TestBestMatch:
    TABLE = {"Sneakers": ["shoe", "sneaker"], "Dress Shoes": ["dress shoe"]}

    def test_longest_keyword_wins(self):
        assert best_match("Dress Shoe", self.TABLE) == "Dress Shoes"

    def test_tie_goes_to_table_order(self):
        table = {"First": ["boot"], "Second": ["boot"]}
        assert best_match("Boot", table) == "First"

    def test_no_match(self):
        assert best_match("Hat", self.TABLE) is None


def test_brand_match_key_strips_mark():
    assert brand_match_key("Levi's®") == "levi's"
    assert brand_match_key("Zara") == "zara"


class TestVocabulary:
    def test_domain_tables(self):
        vocab = Vocabulary()
        assert "Sneakers" in vocab.piece_types("FOOTWEAR")
        assert "Shirts" in vocab.piece_types("APPAREL")
        assert "Suede" in vocab.materials("FOOTWEAR")
        assert "Suede" not in vocab.materials("APPAREL")

    def test_defaults_are_independent_copies(self):
        a, b = Vocabulary(), Vocabulary()
        a.brands.append("Acme")
        assert "Acme" not in b.brands
        assert "Acme" not in vocabulary.BRANDS


class TestLoadVocabulary:
    def test_override_replaces_only_named_tables(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({
            "brands": ["Acme"],
            "footwear_piece_types": {"Clogs": ["clog"]},
        }), encoding="utf-8")

        vocab = load_vocabulary(path)

        assert vocab.brands == ["Acme"]
        assert vocab.footwear_piece_types == {"Clogs": ["clog"]}
        assert vocab.colors == vocabulary.COLORS

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Cannot read"):
            load_vocabulary(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Cannot read"):
            load_vocabulary(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_vocabulary(path)

    def test_unknown_table(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"hats": ["Fedora"]}), encoding="utf-8")
        with pytest.raises(ValueError, match="hats"):
            load_vocabulary(path)

    def test_wrong_shapes(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"brands": "Nike"}), encoding="utf-8")
        with pytest.raises(ValueError, match="must be a list"):
            load_vocabulary(path)

        path.write_text(json.dumps({"apparel_piece_types": ["shirt"]}), encoding="utf-8")
        with pytest.raises(ValueError, match="keyword lists"):
            load_vocabulary(path)


class TestGetVocabulary:
    def test_defaults_without_file(self):
        assert get_vocabulary() == Vocabulary()

    def test_cached(self):
        assert get_vocabulary() is get_vocabulary()

    def test_reads_configured_file(self, tmp_path, monkeypatch):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"colors": ["Teal"]}), encoding="utf-8")
        monkeypatch.setattr(config, "VOCABULARY_FILE", str(path))
        vocabulary.reset_vocabulary()

        assert get_vocabulary().colors == ["Teal"]
