from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator


class RubricParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    weight: float
    description: str
    levels: Tuple[str, str, str, str, str]


class WeightedRubric(BaseModel):
    """Ordered rubric group; parameter weights must sum to 1.0."""

    model_config = ConfigDict(frozen=True)

    title: str
    parameters: Tuple[RubricParameter, ...]

    @model_validator(mode="after")
    def _weights_sum_to_one(self):
        total = sum(p.weight for p in self.parameters)
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"{self.title} weights sum to {total}, expected 1.0")
        return self

    @property
    def weights(self) -> Dict[str, float]:
        return {p.name: p.weight for p in self.parameters}

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)


CV_RUBRIC = WeightedRubric(
    title="CV Match Evaluation",
    parameters=(
        RubricParameter(
            name="technicalSkills",
            weight=0.40,
            description="Alignment with job requirements (backend, databases, APIs, cloud, AI/LLM).",
            levels=("Irrelevant skills", "Few overlaps", "Partial match",
                    "Strong match", "Excellent match + AI/LLM exposure"),
        ),
        RubricParameter(
            name="experienceLevel",
            weight=0.25,
            description="Years of experience & project complexity.",
            levels=("<1 yr / trivial projects", "1-2 yrs", "2-3 yrs w/ mid-scale projects",
                    "3-4 yrs solid track record", "5+ yrs / high-impact projects"),
        ),
        RubricParameter(
            name="relevantAchievements",
            weight=0.20,
            description="Impact of past work (scaling, performance, adoption).",
            levels=("No clear achievements", "Minimal improvements", "Some measurable outcomes",
                    "Significant contributions", "Major measurable impact"),
        ),
        RubricParameter(
            name="culturalFit",
            weight=0.15,
            description="Communication, learning mindset, teamwork/leadership.",
            levels=("Not demonstrated", "Minimal", "Average",
                    "Good", "Excellent & well demonstrated"),
        ),
    ),
)

PROJECT_RUBRIC = WeightedRubric(
    title="Project Deliverable Evaluation",
    parameters=(
        RubricParameter(
            name="correctness",
            weight=0.30,
            description="Prompt design, LLM chaining or ML integration, RAG / context injection, end-to-end logic correctness.",
            levels=("Not implemented", "Minimal attempt", "Works partially",
                    "Works correctly", "Fully correct + thoughtful"),
        ),
        RubricParameter(
            name="codeQuality",
            weight=0.25,
            description="Clean, modular, reusable, tested. Code organization consistent with best practices.",
            levels=("Poor", "Some structure", "Decent modularity",
                    "Good structure + some tests", "Excellent quality + strong tests"),
        ),
        RubricParameter(
            name="resilience",
            weight=0.20,
            description="Handling long jobs, retries, randomness, API failures, logging, stability.",
            levels=("Missing", "Minimal try/catch", "Partial handling",
                    "Solid handling", "Robust, production-ready"),
        ),
        RubricParameter(
            name="documentation",
            weight=0.15,
            description="README clarity, setup instructions, trade-off explanations.",
            levels=("Missing", "Minimal", "Adequate",
                    "Clear", "Excellent + insightful"),
        ),
        RubricParameter(
            name="creativity",
            weight=0.10,
            description="Extra features beyond requirements, thoughtful enhancements.",
            levels=("None", "Very basic", "Useful extras",
                    "Strong enhancements", "Outstanding creativity"),
        ),
    ),
)

# cv_match_rate = cv_score * MATCH_RATE_FACTOR
MATCH_RATE_FACTOR = 0.2


class EvaluatorConfig(BaseModel):
    """Fixed configuration for one process, passed explicitly to the engine."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: str = "gemini-2.5-flash"
    api_key: Optional[str] = None
    cv_rubric: WeightedRubric = CV_RUBRIC
    project_rubric: WeightedRubric = PROJECT_RUBRIC
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    request_timeout: float = 60.0

    @classmethod
    def from_settings(cls, settings) -> "EvaluatorConfig":
        return cls(
            model_name=settings.GEMINI_MODEL,
            api_key=settings.GEMINI_API_KEY,
            max_retries=settings.LLM_MAX_RETRIES,
            request_timeout=settings.LLM_TIMEOUT_SECONDS,
        )
