"""Tests for chat intent detection (services/intent.py)."""
import pytest

from briki.services.intent import (
    IntentRules,
    analyze_context_needs,
    detect_category,
    extract_requested_plan_count,
    is_follow_up_question,
    should_suggest_plans,
)


class TestShouldSuggestPlans:

    @pytest.mark.parametrize("message", [
        "Necesito un seguro",
        "necesito un seguro",
        "Necesito una protección para mi familia",
        "tengo un perro de 3 años",
        "Acabo de comprar una moto",
        "¿Cuánto cuesta un seguro de viaje?",
        "compara los planes de salud",
        "voy a viajar a Europa en diciembre",
        "I need travel insurance",
        "hola, necesito un seguro de auto para mi carro nuevo",
    ])
    def test_intent_detected(self, message):
        assert should_suggest_plans(message) is True

    @pytest.mark.parametrize("message", [
        "hola",
        "Buenas tardes, ¿cómo estás?",
        "hi there",
        "me gusta el fútbol",
        "gracias por la información",
        "",
        "   ",
    ])
    def test_no_intent(self, message):
        assert should_suggest_plans(message) is False

    def test_accents_do_not_matter(self):
        assert (
            should_suggest_plans("Necesito protección")
            == should_suggest_plans("necesito proteccion")
            == should_suggest_plans("NECESITO PROTECCIÓN")
        )

    def test_short_greeting_wins(self):
        # under 50 chars a greeting suppresses plans even with intent words
        assert should_suggest_plans("hola, necesito un seguro") is False

    def test_greeting_needs_whole_word(self):
        assert should_suggest_plans("necesito un seguro para viajar a Chile") is True

    def test_custom_rules(self):
        rules = IntentRules(greeting_max_length=10)
        assert should_suggest_plans("hola, necesito un seguro", rules) is True

    @pytest.mark.parametrize("message", [
        "necesito un plan para mi perro",
        "busco un plan de salud para mi familia",
        "quiero un plan de viaje",
        "muéstrame un plan",
    ])
    def test_singular_plan(self, message):
        assert should_suggest_plans(message) is True

    @pytest.mark.parametrize("message", [
        "quiero planear mis vacaciones",
        "quiero asegurarme de que me entiendas",
    ])
    def test_insurance_words_match_whole_words(self, message):
        assert should_suggest_plans(message) is False


class TestDetectCategory:

    @pytest.mark.parametrize("message, expected", [
        ("Busco un seguro económico para mi perro", "pet"),
        ("seguro para mis vacaciones", "travel"),
        ("quiero asegurar mi carro", "auto"),
        ("tengo una Mazda 2020", "auto"),
        ("seguro de salud para mi mamá", "health"),
        ("seguro para mi perrito", "pet"),
        ("quiero buscar opciones", "general"),
        ("hola", "general"),
    ])
    def test_categories(self, message, expected):
        assert detect_category(message) == expected


class TestAnalyzeContextNeeds:

    def test_complete_pet_context(self):
        result = analyze_context_needs("quiero un seguro para mi perro de 3 años", "pet")
        assert result.needs_more_context is False
        assert result.missing_info == []

    def test_missing_pet_age(self):
        result = analyze_context_needs("quiero un seguro para mi perro", "pet")
        assert result.needs_more_context is True
        assert result.missing_info == ["petAge"]
        assert result.suggested_questions == ["¿Qué edad tiene tu mascota?"]

    def test_travel_context(self):
        result = analyze_context_needs("viaje a Europa desde Bogotá por 10 días", "travel")
        assert result.needs_more_context is False

    def test_auto_missing_everything(self):
        result = analyze_context_needs("seguro para mi carro", "auto")
        assert result.missing_info == ["brand", "model"]

    def test_general_needs_nothing(self):
        result = analyze_context_needs("hola", "general")
        assert result.needs_more_context is False
        assert result.suggested_questions == []


class TestFollowUps:

    @pytest.mark.parametrize("message", [
        "¿Cuál es el mejor?",
        "explícame el primero",
        "¿Qué incluye ese plan?",
        "compara los dos",
    ])
    def test_follow_up(self, message):
        assert is_follow_up_question(message) is True

    def test_not_follow_up(self):
        assert is_follow_up_question("tengo un gato") is False


class TestRequestedCount:

    @pytest.mark.parametrize("message, expected", [
        ("muéstrame 4 planes", 4),
        ("quiero 2 opciones de seguro", 2),
        ("dame tres opciones", 3),
        ("show me five plans", 5),
        ("quiero 12 opciones", None),
        ("necesito un seguro", None),
    ])
    def test_counts(self, message, expected):
        assert extract_requested_plan_count(message) == expected
