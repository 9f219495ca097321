"""
Coarse category inference: APPAREL vs FOOTWEAR.

Priority:
  1. classifier domain, verbatim
  2. first label (in detector order) mentioning a footwear or apparel keyword;
     a label that mentions both (e.g. "Dress Shoe") counts as footwear
  3. the configured default (DEFAULT_DOMAIN, APPAREL unless overridden)
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import config
from analysis import APPAREL, DOMAINS, FOOTWEAR, ClassifierResult, RawLabel
from vocabulary import Vocabulary, get_vocabulary, mentions

logger = logging.getLogger(__name__)


def _default_domain() -> str:
    if config.DEFAULT_DOMAIN in DOMAINS:
        return config.DEFAULT_DOMAIN
    logger.warning("Ignoring unknown DEFAULT_DOMAIN=%r, using %s", config.DEFAULT_DOMAIN, APPAREL)
    return APPAREL


def classify_domain(
    labels: Sequence[RawLabel],
    classifier_result: Optional[ClassifierResult],
    vocabulary: Optional[Vocabulary] = None,
) -> str:
    if classifier_result is not None and classifier_result.domain:
        return classifier_result.domain

    vocab = vocabulary or get_vocabulary()
    for label in labels:
        if any(mentions(label.name, kw) for kw in vocab.footwear_keywords):
            return FOOTWEAR
        if any(mentions(label.name, kw) for kw in vocab.apparel_keywords):
            return APPAREL

    domain = _default_domain()
    logger.debug("No domain keyword among %d labels — defaulting to %s", len(labels), domain)
    return domain
