# application/services/categorizer.py
from __future__ import annotations
from typing import Any, Mapping


class KeywordCategorizer:
    """
    Categorizador por defecto: una categoría encaja si alguna de sus keywords
    aparece (sin distinguir mayúsculas) en el texto.
    Regla admitida: lista de keywords o una sola cadena.
    """

    def extract_categories(self, text: str, vocabulary: Mapping[str, Any]) -> set[str]:
        t = (text or "").lower()
        if not t:
            return set()
        found: set[str] = set()
        for name, rule in vocabulary.items():
            keywords = [rule] if isinstance(rule, str) else list(rule or [])
            if any(k and str(k).lower() in t for k in keywords):
                found.add(name)
        return found
