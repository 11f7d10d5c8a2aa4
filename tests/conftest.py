"""Pytest fixtures shared across tests."""

import pytest
from fastapi.testclient import TestClient

from briki.deps import get_engine, get_llm_client
from briki.main import app, get_catalog
from briki.schemas import InsurancePlan


def make_plan(plan_id, category, name, *, tags=(), features=(), description="", **extra):
    return InsurancePlan(
        id=plan_id,
        category=category,
        provider=extra.pop("provider", "Aseguradora"),
        name=name,
        description=description,
        tags=list(tags),
        features=list(features),
        **extra,
    )


@pytest.fixture
def catalog():
    return [
        make_plan("pet-basic", "pet", "Plan Básico Mascota",
                  tags=["económico", "básico"], description="Consultas veterinarias",
                  base_price=39000),
        make_plan("pet-premium", "pet", "Mascota Premium",
                  tags=["premium", "completo"], description="Cirugías y hospitalización",
                  base_price=89000,
                  features=["Cirugía", "Hospitalización"]),
        make_plan("travel-plus", "travel", "Plan Viajero Plus",
                  tags=["premium"], description="Asistencia en el exterior", features=["Equipaje"],
                  base_price=120000),
        make_plan("auto-car", "auto", "Auto Total",
                  tags=["carro", "premium"], description="Todo riesgo", features=["Grúa"],
                  base_price=150000),
        make_plan("auto-moto", "auto", "Moto Básica",
                  tags=["moto", "económico"], description="Responsabilidad civil",
                  base_price=45000, provider="Sura"),
        make_plan("health-family", "health", "Salud Familiar",
                  tags=["familiar"], description="Medicina prepagada", features=["Urgencias"],
                  base_price=210000),
    ]


@pytest.fixture
def client(catalog):
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_llm_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_engine_cache():
    """Engine is cached per SQLITE_PATH; reset it for isolation."""
    get_engine.cache_clear()
    yield
    get_engine.cache_clear()
