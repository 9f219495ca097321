"""Tests for domain_classifier.py."""
from __future__ import annotations

import config
from analysis import APPAREL, FOOTWEAR, ClassifierResult
from conftest import labels
from domain_classifier import classify_domain
from vocabulary import Vocabulary


class TestClassifierDomain:
    def test_classifier_domain_wins_over_labels(self):
        cr = ClassifierResult(domain=FOOTWEAR)
        assert classify_domain(labels("Clothing", "Shirt"), cr) == FOOTWEAR

    def test_classifier_without_domain_falls_through(self):
        cr = ClassifierResult(brand="Nike®", confidence=0.9)
        assert classify_domain(labels("Sneaker"), cr) == FOOTWEAR


class TestLabelKeywords:
    def test_footwear_labels(self):
        assert classify_domain(labels("Shoe", "Sneaker", "Athletic Shoe"), None) == FOOTWEAR

    def test_apparel_labels(self):
        assert classify_domain(labels("Clothing", "Shirt"), None) == APPAREL

    def test_first_matching_label_decides(self):
        assert classify_domain(labels("Jacket", "Boot"), None) == APPAREL
        assert classify_domain(labels("Boot", "Jacket"), None) == FOOTWEAR

    def test_label_order_not_confidence(self):
        lbls = labels("Shirt", confidence=40.0) + labels("Sneaker", confidence=99.0)
        assert classify_domain(lbls, None) == APPAREL

    def test_non_matching_labels_skipped(self):
        assert classify_domain(labels("Product", "Font", "Sneakers"), None) == FOOTWEAR

    def test_label_mentioning_both_counts_as_footwear(self):
        assert classify_domain(labels("Dress Shoe"), None) == FOOTWEAR

    def test_keyword_must_start_a_word(self, monkeypatch):
        # "Laptop" contains "top" but is not a top
        monkeypatch.setattr(config, "DEFAULT_DOMAIN", FOOTWEAR)
        assert classify_domain(labels("Laptop"), None) == FOOTWEAR


class TestDefault:
    def test_no_match_defaults_to_apparel(self):
        assert classify_domain(labels("Object", "Rectangle"), None) == APPAREL

    def test_empty_labels_default(self):
        assert classify_domain([], None) == APPAREL

    def test_default_is_configurable(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_DOMAIN", FOOTWEAR)
        assert classify_domain([], None) == FOOTWEAR

    def test_invalid_default_falls_back_to_apparel(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_DOMAIN", "HATS")
        assert classify_domain([], None) == APPAREL


def test_custom_vocabulary():
    vocab = Vocabulary(footwear_keywords=["Clog"], apparel_keywords=["Kimono"])
    assert classify_domain(labels("Shoe", "Clog"), None, vocab) == FOOTWEAR
    assert classify_domain(labels("Kimono"), None, vocab) == APPAREL
    assert classify_domain(labels("Shoe"), None, vocab) == APPAREL
