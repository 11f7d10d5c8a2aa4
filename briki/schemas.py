from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional

InsuranceCategory = Literal["travel", "auto", "pet", "health"]
INSURANCE_CATEGORIES = ("travel", "auto", "pet", "health")


class _CamelModel(BaseModel):
    # Wire format is camelCase (basePrice, availableCountries, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlanRestrictions(_CamelModel):
    countries: Optional[List[str]] = None


class InsurancePlan(_CamelModel):
    id: str
    category: InsuranceCategory
    provider: str = ""
    name: str
    description: str = ""
    base_price: float = 0.0
    currency: str = "COP"
    duration: Optional[str] = None
    coverage_amount: float = 0.0
    coverage: Dict[str, Any] = {}
    features: List[str] = []
    deductible: Optional[float] = None
    exclusions: List[str] = []
    add_ons: List[str] = []
    tags: List[str] = []
    rating: Optional[float] = None
    status: Literal["draft", "active", "archived"] = "active"
    external_link: Optional[str] = None
    is_external: bool = False
    restrictions: Optional[PlanRestrictions] = None
    available_countries: Optional[List[str]] = None


class SearchResponse(_CamelModel):
    results: List[InsurancePlan]
    count: int
    query: str


class ChatMessage(_CamelModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(_CamelModel):
    message: str = Field(min_length=1)
    history: List[ChatMessage] = []
    country: Optional[str] = None
    previous_plan_ids: List[str] = []


class ChatResponse(_CamelModel):
    message: str
    suggested_plans: List[InsurancePlan] = []
    category: str = "general"
    needs_more_context: bool = False
    suggested_questions: List[str] = []
    used_fallback: bool = False


class IntentRequest(_CamelModel):
    message: str = Field(min_length=1)


class IntentResponse(_CamelModel):
    suggest_plans: bool
    category: str
    requested_count: Optional[int] = None


class PlanFilters(_CamelModel):
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_coverage: Optional[float] = None
    max_coverage: Optional[float] = None
    min_deductible: Optional[float] = None
    max_deductible: Optional[float] = None
    currency: Optional[str] = None
    providers: List[str] = []
    min_rating: Optional[float] = None
    status: Optional[Literal["draft", "active", "archived"]] = None
    # substring of a plan tag, e.g. "latam"
    region: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_defaults=True)


class FilterResponse(_CamelModel):
    results: List[InsurancePlan]
    count: int
    filters: PlanFilters
