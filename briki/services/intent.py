# briki/services/intent.py
"""
Intent detection for the chat assistant.

`should_suggest_plans` decides whether a user message warrants plan cards:
short greetings never do, explicit shopping intent always does, anything
else does not. The remaining helpers feed the assistant's follow-up logic.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Tuple

from .keywords import normalize_text

logger = logging.getLogger(__name__)

_INSURANCE = r"(seguros?|proteccion|proteger|asegurar|cobertura|plan(es)?|polizas?|insurance|coverage)\b"
_ASSETS = (
    r"(carro|auto|coche|moto|vespa|scooter|vehiculo|camioneta|perro|gato|mascota|"
    r"cachorro|viaje|casa|car|dog|cat|pet|trip)"
)

GREETING_WORDS = (
    "hola", "hello", "hi", "hey", "buenas", "buenos dias", "buenas tardes",
    "buenas noches", "como estas", "que tal", "saludos",
)

INTENT_PATTERNS = (
    # need statements: "necesito un seguro", "looking for coverage"
    rf"\b(necesito|busco|quiero|requiero|me interesa|need|looking for|want)\b.*\b{_INSURANCE}",
    # asset ownership: "tengo un perro", "compre una moto"
    rf"\b(tengo|compre|acabo de comprar|voy a comprar|i have|i bought)\b.*\b{_ASSETS}\b",
    # travel plans
    r"\b(viajo|voy a viajar|me voy de viaje|planeo viajar|traveling to|travelling to)\b",
    # price inquiries, either word order
    rf"^(?=.*\b(cuanto cuesta|cuanto vale|precios?|cotizar|cotizacion|how much|price|quote)\b)(?=.*\b{_INSURANCE})",
    # comparison / recommendation requests
    r"\b(compara|comparar|comparacion|compare|recomienda|recomiendame|recomendacion|"
    r"muestrame|mostrar|opciones)\b.*\b(seguros?|plan(es)?|polizas?|opciones)\b",
)


def _compile_any(words: Tuple[str, ...]) -> Pattern[str]:
    return re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")\b")


@dataclass(frozen=True)
class IntentRules:
    greeting_words: Tuple[str, ...] = GREETING_WORDS
    greeting_max_length: int = 50
    patterns: Tuple[str, ...] = INTENT_PATTERNS

    def __post_init__(self):
        object.__setattr__(self, "_greeting_re", _compile_any(self.greeting_words))
        object.__setattr__(self, "_intent_res", tuple(re.compile(p) for p in self.patterns))

    def is_short_greeting(self, text: str) -> bool:
        return len(text) < self.greeting_max_length and bool(self._greeting_re.search(text))

    def has_intent(self, text: str) -> bool:
        return any(p.search(text) for p in self._intent_res)


DEFAULT_RULES = IntentRules()


def should_suggest_plans(message: str, rules: IntentRules = DEFAULT_RULES) -> bool:
    text = normalize_text(message).strip()
    if not text:
        return False
    if rules.is_short_greeting(text):
        logger.debug("Short greeting, no plans: %r", text)
        return False
    return rules.has_intent(text)


# ---------------------------------------------------------------------------
# Category detection and context sufficiency
# ---------------------------------------------------------------------------

# Checked in this order; first hit wins
CATEGORY_DETECTION = {
    "pet": ["mascota", "perro", "gato", "pet", "dog", "cat", "animal", "veterinario",
            "cachorro", "felino", "canino"],
    "travel": ["viaje", "travel", "trip", "internacional", "europa", "estados unidos",
               "mexico", "vacaciones", "turismo", "exterior", "extranjero"],
    "auto": ["auto", "carro", "vehiculo", "moto", "car", "vehicle", "motorcycle", "scooter",
             "vespa", "motocicleta", "automovil", "coche", "mazda", "bmw", "mercedes", "audi",
             "kia", "hyundai", "volkswagen", "vw", "peugeot", "renault", "fiat", "jeep",
             "subaru", "mitsubishi", "suzuki", "lexus", "chevy"],
    "health": ["salud", "health", "medico", "medical", "hospital", "doctor", "medicina",
               "hospitalizacion", "clinica", "eps"],
}

# Whole words (plural allowed), so "buscar" does not read as "car"
_CATEGORY_RES = {
    category: re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")(s|es)?\b")
    for category, words in CATEGORY_DETECTION.items()
}

_CATEGORY_FALLBACKS = (
    ("pet", re.compile(r"seguro.*(mascot|perr|gat)")),
    ("travel", re.compile(r"seguro.*(viaj|travel)")),
    ("auto", re.compile(r"seguro.*(auto|vehicul|carro)")),
    ("health", re.compile(r"seguro.*(salud|medic)")),
)


def detect_category(message: str) -> str:
    text = normalize_text(message)
    for category, pattern in _CATEGORY_RES.items():
        if pattern.search(text):
            return category
    for category, pattern in _CATEGORY_FALLBACKS:
        if pattern.search(text):
            return category
    return "general"


_DESTINATIONS = (
    r"(europa|asia|mexico|estados unidos|colombia|espana|francia|alemania|italia|brasil|"
    r"chile|peru|usa|canada|argentina|viajar a)"
)

# category -> field -> (pattern, follow-up question)
REQUIRED_CONTEXT: Dict[str, Dict[str, Tuple[str, str]]] = {
    "travel": {
        "destination": (_DESTINATIONS, "¿A qué país o ciudad planeas viajar?"),
        "origin": (r"\b(desde|de|partiendo de|salgo de|origen)\b", "¿Desde dónde iniciarás tu viaje?"),
        "duration": (r"(dias?|semanas?|meses?|\d+)", "¿Cuántos días durará tu viaje?"),
    },
    "pet": {
        "petType": (r"(perr|gat|dog|cat)", "¿Qué tipo de mascota tienes? (perro, gato, etc.)"),
        "petAge": (r"(\d+|\banos?\b|\bmeses?\b|cachorro|adulto|mayor)", "¿Qué edad tiene tu mascota?"),
    },
    "auto": {
        "brand": (
            r"(marca|toyota|honda|ford|chevrolet|nissan|mazda|kia|hyundai|bmw|mercedes|audi|"
            r"volkswagen|vw|renault|fiat)",
            "¿Cuál es la marca de tu vehículo?",
        ),
        "model": (r"(modelo|\d{4}|\bano\b)", "¿Cuál es el modelo y año?"),
    },
    "health": {
        "age": (r"(\d+|\banos?\b|joven|adulto|mayor)", "¿Qué edad tienes?"),
        "gender": (r"(hombre|mujer|masculino|femenino)", "¿Cuál es tu género?"),
        "location": (r"(vivo en|resido en|en colombia|en mexico|en peru)", "¿En qué país vives actualmente?"),
    },
}


@dataclass
class ContextAnalysis:
    category: str
    needs_more_context: bool = False
    missing_info: List[str] = field(default_factory=list)
    suggested_questions: List[str] = field(default_factory=list)


def analyze_context_needs(conversation: str, category: str) -> ContextAnalysis:
    """Which details are still missing before recommending plans in `category`."""
    result = ContextAnalysis(category=category)
    checks = REQUIRED_CONTEXT.get(category)
    if not checks:
        return result
    text = normalize_text(conversation)
    for name, (pattern, question) in checks.items():
        if not re.search(pattern, text):
            result.missing_info.append(name)
            result.suggested_questions.append(question)
    result.needs_more_context = bool(result.missing_info)
    return result


# ---------------------------------------------------------------------------
# Follow-ups and requested counts
# ---------------------------------------------------------------------------

_FOLLOW_UP_RE = re.compile(
    r"(cual es (el |la )?mejor|cual (me )?recomienda|que (me )?recomienda|"
    r"cual es (la )?diferencia|cual conviene|entre (esos|estos)|"
    r"que incluye|que cubre|cuanto cuesta|precio|cobertura|"
    r"el primero|el segundo|el tercero|el ultimo|ese plan|esa opcion|"
    r"mas informacion|mas detalles|explica|compara)"
)

_COUNT_RE = re.compile(r"(\d+)\s*(plan(es)?|opciones?|seguros?|recommendations?)\b")

WRITTEN_NUMBERS = {
    "uno": 1, "dos": 2, "tres": 3, "cuatro": 4, "cinco": 5,
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
}
_WRITTEN_RE = _compile_any(tuple(WRITTEN_NUMBERS))

MAX_REQUESTED_PLANS = 10


def is_follow_up_question(message: str) -> bool:
    return bool(_FOLLOW_UP_RE.search(normalize_text(message).strip()))


def extract_requested_plan_count(message: str) -> Optional[int]:
    """Explicit plan count in the message ("muéstrame 4 planes"), capped at 10."""
    text = normalize_text(message)
    m = _COUNT_RE.search(text)
    if m:
        count = int(m.group(1))
        return count if 0 < count <= MAX_REQUESTED_PLANS else None
    m = _WRITTEN_RE.search(text)
    if m:
        return WRITTEN_NUMBERS[m.group(1)]
    return None
