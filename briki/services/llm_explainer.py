# briki/services/llm_explainer.py
from __future__ import annotations
from typing import Any, List, Optional, Sequence

from .validators import as_str_list, field

SYSTEM_PROMPT = (
    "Eres Briki, un asistente experto en seguros para Latinoamérica "
    "(viaje, auto, mascotas y salud). Hablas en español colombiano, de forma amigable "
    "y clara, sin jerga técnica. Haz preguntas específicas para entender las necesidades "
    "del usuario y recomienda solo planes que se ajusten a su perfil. "
    "No inventes precios ni coberturas: usa únicamente los planes de referencia."
)

_CATEGORY_LABEL = {
    "travel": "viaje",
    "auto": "auto",
    "pet": "mascotas",
    "health": "salud",
}

_CATEGORY_HINT = {
    "travel": "revisa la cobertura médica en el exterior y la protección de equipaje.",
    "auto": "compara la responsabilidad civil, el deducible y la asistencia en carretera.",
    "pet": "confirma los períodos de carencia y si cubre consultas veterinarias.",
    "health": "revisa la red de clínicas, los copagos y los tiempos de espera.",
}


def _price(pl: Any) -> str:
    try:
        amount = float(field(pl, "base_price", 0.0))
    except (TypeError, ValueError):
        amount = 0.0
    currency = str(field(pl, "currency", "COP"))
    return f"${amount:,.0f} {currency}"


def _plan_line(pl: Any) -> str:
    name = str(field(pl, "name", "Plan sin nombre"))
    provider = str(field(pl, "provider", "")) or "proveedor no indicado"
    features = as_str_list(field(pl, "features"))[:2]
    highlights = f" Incluye: {', '.join(features)}." if features else ""
    return f"- **{name}** ({provider}) — desde {_price(pl)}.{highlights}"


def build_system_prompt(plans: Sequence[Any], has_history: bool = False) -> str:
    lines: List[str] = [SYSTEM_PROMPT]
    if plans:
        lines.append("")
        lines.append("Planes disponibles de referencia:")
        for pl in plans:
            lines.append(
                f"- {field(pl, 'name', '')} ({field(pl, 'provider', '')}) - "
                f"{field(pl, 'category', '')}: {field(pl, 'description', '')} - {_price(pl)}"
            )
    if has_history:
        lines.append("")
        lines.append(
            "El usuario ya ha conversado contigo. Mantén coherencia con las recomendaciones anteriores."
        )
    return "\n".join(lines)


def fallback_reply(
    plans: Sequence[Any],
    *,
    category: str = "general",
    questions: Optional[Sequence[str]] = None,
) -> str:
    """Reply used when the chat model is not configured or unreachable."""
    label = _CATEGORY_LABEL.get(category)
    header = (
        f"¡Hola! Soy Briki, tu asistente de seguros. Te ayudo con tu seguro de {label}."
        if label
        else "¡Hola! Soy Briki, tu asistente de seguros. Te ayudo a encontrar el plan ideal."
    )
    lines: List[str] = [header, ""]
    if plans:
        lines.append("**Estos planes podrían interesarte:**")
        for pl in plans:
            lines.append(_plan_line(pl))
        lines.append("")
        hint = _CATEGORY_HINT.get(category)
        if hint:
            lines.append(f"**Consejo:** {hint}")
    if questions:
        lines.append("Para darte una mejor recomendación, cuéntame:")
        for q in questions:
            lines.append(f"- {q}")
    if not plans and not questions:
        lines.append("¿Qué tipo de seguro estás buscando: viaje, auto, mascotas o salud?")
    return "\n".join(lines).strip()
