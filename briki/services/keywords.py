# briki/services/keywords.py
"""
Keyword tables used by the plan ranker.

All keywords are stored accent-free and lowercase so they can be matched
against text passed through `normalize_text`.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple


def normalize_text(text: str) -> str:
    """Lowercase and strip diacritics ("Protección" -> "proteccion")."""
    if not isinstance(text, str):
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _freeze(table: Mapping[str, Iterable[str]]) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType(
        {normalize_text(k): tuple(dict.fromkeys(normalize_text(w) for w in words))
         for k, words in table.items()}
    )


def _terms(words: Iterable[str]) -> Tuple[str, ...]:
    return tuple(normalize_text(w) for w in words)


@dataclass(frozen=True)
class KeywordConfig:
    categories: Mapping[str, Tuple[str, ...]]
    attributes: Mapping[str, Tuple[str, ...]]
    vehicles: Mapping[str, Tuple[str, ...]]
    price_terms: Tuple[str, ...] = ("barato", "economico", "precio")
    price_tag: str = "economico"
    premium_terms: Tuple[str, ...] = ("completo", "premium", "mejor")
    premium_tags: Tuple[str, ...] = ("premium", "completo")
    category_weight: float = 30.0
    price_bonus: float = 15.0
    premium_bonus: float = 10.0
    min_word_length: int = 4

    @classmethod
    def build(
        cls,
        categories: Mapping[str, Iterable[str]],
        attributes: Mapping[str, Iterable[str]],
        vehicles: Mapping[str, Iterable[str]],
        **kwargs,
    ) -> "KeywordConfig":
        """Normalize raw tables into an immutable config."""
        for key in ("price_terms", "premium_terms", "premium_tags"):
            if key in kwargs:
                kwargs[key] = _terms(kwargs[key])
        if "price_tag" in kwargs:
            kwargs["price_tag"] = normalize_text(kwargs["price_tag"])
        return cls(
            categories=_freeze(categories),
            attributes=_freeze(attributes),
            vehicles=_freeze(vehicles),
            **kwargs,
        )


CATEGORY_KEYWORDS = {
    "travel": [
        "viaje", "viajar", "viajero", "vacaciones", "turismo", "turista", "hotel",
        "avión", "vuelo", "internacional", "país", "extranjero", "pasaporte",
        "equipaje", "maleta", "cancelación", "retraso", "asistencia",
    ],
    "auto": [
        "auto", "carro", "coche", "vehículo", "automóvil", "conductor", "manejar",
        "conducir", "tránsito", "accidente", "colisión", "choque", "daño",
        "responsabilidad civil", "terceros", "robo", "grúa", "asistencia vial",
    ],
    "pet": [
        "mascota", "perro", "gato", "animal", "veterinario", "clínica veterinaria",
        "vacuna", "enfermedad", "accidente", "tratamiento", "medicamento", "cirugía",
        "atención médica", "emergencia veterinaria", "consulta",
    ],
    "health": [
        "salud", "médico", "doctor", "hospital", "clínica", "enfermedad", "accidente",
        "tratamiento", "medicamento", "cirugía", "consulta", "especialista",
        "emergencia", "ambulancia", "hospitalización", "examen", "diagnóstico",
    ],
}

ATTRIBUTE_KEYWORDS = {
    "económico": ["económico", "barato", "asequible", "accesible", "bajo costo", "precio bajo", "básico"],
    "premium": ["premium", "completo", "exclusivo", "lujo", "top", "máxima cobertura", "alta gama"],
    "sin deducible": ["sin deducible", "cero deducible", "0 deducible", "deducible cero"],
    "familiar": ["familia", "familiar", "hijos", "niños", "padres", "grupo familiar"],
    "cobertura completa": ["cobertura completa", "cobertura total", "todo incluido", "100% cobertura"],
    "colombia": ["colombia", "colombiano", "bogotá", "medellín", "cali"],
    "latinoamérica": ["latinoamérica", "latam", "américa latina", "sudamérica", "centroamérica"],
    "internacional": ["internacional", "global", "mundial", "extranjero", "fuera del país"],
    "asistencia 24/7": ["24/7", "24 horas", "todo el día", "asistencia permanente"],
}

VEHICLE_KEYWORDS = {
    "moto": ["moto", "motocicleta", "scooter", "vespa", "ciclomotor"],
    "carro": ["carro", "auto", "coche", "automóvil", "vehículo"],
    "camioneta": ["camioneta", "suv", "pickup", "todo terreno"],
    "comercial": ["comercial", "furgoneta", "camión", "transporte"],
}

DEFAULT_KEYWORDS = KeywordConfig.build(CATEGORY_KEYWORDS, ATTRIBUTE_KEYWORDS, VEHICLE_KEYWORDS)
