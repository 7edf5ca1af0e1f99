"""Wikidata knowledge-graph adapter."""

from __future__ import annotations

from .client import WikidataAPIError, WikidataClient
from .translator import REGISTRY_PROPERTIES, translate_person, translate_registry_ids

__all__ = [
    "REGISTRY_PROPERTIES",
    "WikidataAPIError",
    "WikidataClient",
    "translate_person",
    "translate_registry_ids",
]
