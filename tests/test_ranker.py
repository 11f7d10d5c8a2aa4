"""Tests for keyword relevance ranking (services/ranker.py)."""
import pytest

from briki.services.keywords import KeywordConfig, normalize_text
from briki.services.ranker import PlanRanker, filter_by_country, rank_plans

from conftest import make_plan


@pytest.fixture
def ranker():
    return PlanRanker()


class TestNormalizeText:

    def test_strips_accents_and_case(self):
        assert normalize_text("Protección ECONÓMICA") == "proteccion economica"

    def test_non_string_is_empty(self):
        assert normalize_text(None) == ""


class TestScore:

    def test_pet_scenario_breakdown(self, ranker):
        plan = make_plan("p", "pet", "Plan Básico Mascota",
                         tags=["económico", "básico"], description="Consultas veterinarias")
        # category +30, "economico" tag match +2, price bonus +15
        assert ranker.score("Busco un seguro económico para mi perro", plan) == 47

    def test_category_dominance(self, ranker):
        travel = make_plan("t", "travel", "Plan Uno", description="Cobertura")
        auto = make_plan("a", "auto", "Plan Uno", description="Cobertura")
        assert ranker.score("viaje", travel) > ranker.score("viaje", auto)
        assert ranker.score("viaje", auto) == 0

    def test_category_counts_once(self, ranker):
        plan = make_plan("p", "pet", "Opcion")
        assert ranker.score("perro gato mascota", plan) == 30

    def test_attribute_tag_match_beats_untagged(self, ranker):
        tagged = make_plan("a", "auto", "Plan A", tags=["económico"])
        untagged = make_plan("b", "auto", "Plan B")
        # category +30, attribute +2/+1, "carro" vehicle +1, price bonus +15 only when tagged
        assert ranker.score("quiero un carro barato", tagged) == 48
        assert ranker.score("quiero un carro barato", untagged) == 32

    def test_untagged_attribute_ignored_off_category(self, ranker):
        plan = make_plan("t", "travel", "Plan Viajero Plus", tags=["premium"],
                         description="Asistencia en el exterior")
        assert ranker.score("Busco un seguro económico para mi perro", plan) == 0

    def test_vehicle_subtype_tag(self, ranker):
        moto = make_plan("m", "auto", "Plan A", tags=["moto"])
        plain = make_plan("p", "auto", "Plan B")
        assert ranker.score("seguro para mi moto", moto) == 3
        assert ranker.score("seguro para mi moto", plain) == 1

    def test_vehicle_signal_only_for_auto(self, ranker):
        plan = make_plan("h", "health", "Plan A", tags=["moto"])
        assert ranker.score("seguro para mi moto", plan) == 0

    def test_premium_bonus(self, ranker):
        premium = make_plan("a", "pet", "Opcion A", tags=["premium"])
        basic = make_plan("b", "pet", "Opcion B", tags=["económico"])
        assert ranker.score("quiero el mejor plan para mi gato", premium) == 40
        assert ranker.score("quiero el mejor plan para mi gato", basic) == 30

    def test_name_description_feature_words(self, ranker):
        plan = make_plan("p", "pet", "Cirugía Total", description="incluye cirugia",
                         features=["Cirugía mayor", "Vacunas"])
        # category +30, name +2, description +1, one feature +0.5
        assert ranker.score("cirugia urgente perro", plan) == 33.5

    def test_short_words_ignored(self, ranker):
        plan = make_plan("h", "health", "Mi plan de uso")
        assert ranker.score("mi de uso", plan) == 0

    def test_accents_do_not_matter(self, ranker):
        plan = make_plan("a", "auto", "Plan Vehículo", tags=["carro"])
        assert ranker.score("vehículo", plan) == ranker.score("vehiculo", plan)

    def test_dict_plan_missing_fields(self, ranker):
        assert ranker.score("perro", {"id": "x", "category": "pet", "name": "Algo"}) == 30

    def test_malformed_plan_does_not_raise(self, ranker):
        plan = {"category": None, "tags": None, "features": "Cirugia", "name": 42}
        assert ranker.score("cirugia", plan) == 0.5

    def test_blank_query(self, ranker):
        plan = make_plan("p", "pet", "Plan")
        assert ranker.score("   ", plan) == 0


class TestRank:

    def test_example_scenario(self):
        pet = make_plan("pet", "pet", "Plan Básico Mascota",
                        tags=["económico", "básico"], description="Consultas veterinarias")
        travel = make_plan("travel", "travel", "Plan Viajero Plus", tags=["premium"],
                           description="Asistencia en el exterior")
        result = rank_plans("Busco un seguro económico para mi perro", [travel, pet], 5)
        assert [p.name for p in result] == ["Plan Básico Mascota"]

    def test_empty_catalog(self):
        assert rank_plans("cualquier cosa", [], 5) == []

    def test_non_positive_scores_excluded(self, catalog):
        result = rank_plans("viaje", catalog, 10)
        assert [p.id for p in result] == ["travel-plus"]

    def test_limit_respected(self, catalog):
        assert len(rank_plans("seguro para mi perro", catalog, 1)) == 1
        assert rank_plans("seguro para mi perro", catalog, 0) == []

    def test_sorted_by_descending_score(self, catalog, ranker):
        query = "Busco un seguro económico para mi perro"
        result = ranker.rank(query, catalog, 10)
        scores = [ranker.score(query, p) for p in result]
        assert scores == sorted(scores, reverse=True)
        assert [p.id for p in result] == ["pet-basic", "pet-premium", "auto-moto"]

    def test_ties_keep_input_order(self):
        a = make_plan("a", "pet", "Opcion")
        b = make_plan("b", "pet", "Opcion")
        c = make_plan("c", "pet", "Opcion")
        assert [p.id for p in rank_plans("perro", [a, b, c])] == ["a", "b", "c"]
        assert [p.id for p in rank_plans("perro", [c, a, b])] == ["c", "a", "b"]

    def test_deterministic(self, catalog):
        query = "quiero un seguro premium completo para mi carro"
        first = rank_plans(query, catalog, 4)
        assert rank_plans(query, catalog, 4) == first

    def test_does_not_mutate_plans(self, catalog):
        before = [p.model_dump() for p in catalog]
        rank_plans("seguro barato para mi moto", catalog, 3)
        assert [p.model_dump() for p in catalog] == before

    def test_custom_keywords(self):
        plan = make_plan("p", "pet", "Plan")
        custom = KeywordConfig.build({"pet": ["michi"]}, {}, {})
        assert rank_plans("seguro para mi michi", [plan], keywords=custom) == [plan]
        assert rank_plans("seguro para mi michi", [plan]) == []


class TestFilterByCountry:

    def test_allow_lists(self):
        open_plan = make_plan("open", "pet", "A")
        co_only = make_plan("co", "pet", "B", available_countries=["CO"])
        mx_only = make_plan("mx", "pet", "C", restrictions={"countries": ["Mexico"]})
        world = make_plan("ww", "pet", "D", available_countries=["WW"])
        plans = [open_plan, co_only, mx_only, world]

        assert [p.id for p in filter_by_country(plans, "CO")] == ["open", "co", "ww"]
        assert [p.id for p in filter_by_country(plans, "mx")] == ["open", "mx", "ww"]
        assert [p.id for p in filter_by_country(plans, "Colombia")] == ["open", "co", "ww"]

    def test_no_country_keeps_everything(self, catalog):
        assert filter_by_country(catalog, None) == catalog

    def test_dict_plans(self):
        plans = [{"id": "a", "availableCountries": ["CO"]}, {"id": "b"}]
        assert [p["id"] for p in filter_by_country(plans, "PE")] == ["b"]
