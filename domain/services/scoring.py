"""Deterministic post-processing of model output.

Everything here is pure: numeric values coming back from the model pass
through ``clamp`` / ``round2`` before they reach an ``EvaluationResult``.
"""
import logging
import math
from typing import Any, Dict, Iterable, Mapping

from domain.rubrics import MATCH_RATE_FACTOR, EvaluatorConfig, WeightedRubric
from domain.schemas import EvaluationRequest, EvaluationResult

logger = logging.getLogger("evaluation_pipeline")

CV_FEEDBACK_KEYS = ("cvFeedback", "cv_feedback", "cvComment", "cvSummary")
PROJECT_FEEDBACK_KEYS = ("projectFeedback", "project_feedback", "projectComment")
SUMMARY_KEYS = ("overallSummary", "overall_summary", "summary")

CV_FEEDBACK_PLACEHOLDER = (
    "CV evaluation available in parameter reasons, but no explicit cvFeedback field was provided."
)
PROJECT_FEEDBACK_PLACEHOLDER = (
    "Project evaluation available in parameter reasons, but no explicit projectFeedback field was provided."
)
SUMMARY_PLACEHOLDER = "Overall summary not provided explicitly by the model."

FALLBACK_TEXT_SCALE = 3000


def clamp(value: Any, min_value: float = 1, max_value: float = 5) -> float:
    try:
        n = float(value)
    except OverflowError:
        # integers beyond float range
        n = math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return min_value
    if math.isnan(n):
        return min_value
    return min(max_value, max(min_value, n))


def round2(value: Any) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        n = 0.0
    if not math.isfinite(n):
        n = 0.0
    if not math.isfinite(n * 100):
        # already coarser than 0.01
        return n
    # half-up, not banker's rounding
    return math.floor(n * 100 + 0.5) / 100


def _text_of(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return "\n".join(f"- {str(x)}" for x in value if x is not None)
    return str(value).strip()


def first_present(payload: Mapping, keys: Iterable[str], default: str) -> str:
    """Return the first non-empty value among ``keys`` in priority order."""
    for key in keys:
        text = _text_of(payload.get(key))
        if text:
            return text
    return default


def _param_scores(group: Any, rubric: WeightedRubric) -> Dict[str, float]:
    group = group if isinstance(group, Mapping) else {}
    scores = {}
    for name in rubric.names:
        entry = group.get(name)
        raw = entry.get("score") if isinstance(entry, Mapping) else entry
        scores[name] = clamp(raw)
    return scores


def weighted_score(scores: Mapping[str, float], rubric: WeightedRubric) -> float:
    total = sum(scores[p.name] * p.weight for p in rubric.parameters)
    return round2(clamp(total))


def match_rate(cv_score: float) -> float:
    return round2(clamp(cv_score) * MATCH_RATE_FACTOR)


def compute_scores(parsed: Mapping, config: EvaluatorConfig) -> EvaluationResult:
    """Turn the model's per-parameter scores into the final weighted result."""
    if not isinstance(parsed, Mapping):
        parsed = {}
    cv_scores = _param_scores(parsed.get("cv"), config.cv_rubric)
    project_scores = _param_scores(parsed.get("project"), config.project_rubric)

    cv_score = weighted_score(cv_scores, config.cv_rubric)
    project_score = weighted_score(project_scores, config.project_rubric)

    result = EvaluationResult(
        cv_score=cv_score,
        cv_match_rate=match_rate(cv_score),
        project_score=project_score,
        cv_feedback=first_present(parsed, CV_FEEDBACK_KEYS, CV_FEEDBACK_PLACEHOLDER),
        project_feedback=first_present(
            parsed, PROJECT_FEEDBACK_KEYS, PROJECT_FEEDBACK_PLACEHOLDER),
        overall_summary=first_present(parsed, SUMMARY_KEYS, SUMMARY_PLACEHOLDER),
        raw_cv_scores=cv_scores,
        raw_project_scores=project_scores,
        used_fallback=False,
    )
    logger.info(
        f"Normalized scores: cv_score={result.cv_score} "
        f"cv_match_rate={result.cv_match_rate} project_score={result.project_score}"
    )
    return result


def _rough_score(text: str) -> float:
    return clamp(2 + min(3, len(text or "") / FALLBACK_TEXT_SCALE))


def heuristic_fallback(request: EvaluationRequest) -> EvaluationResult:
    """Length-based estimate used whenever the model path is unavailable."""
    cv_score = round2(_rough_score(request.cv_text))
    return EvaluationResult(
        cv_score=cv_score,
        cv_match_rate=match_rate(cv_score),
        project_score=round2(_rough_score(request.report_text)),
        cv_feedback=(
            "Automatic fallback evaluation: the CV was scored from its length and general "
            "structure only. This assessment did not come from a language model."
        ),
        project_feedback=(
            "Automatic fallback evaluation: the project report was scored from its length and "
            "text structure only. A manual review is recommended."
        ),
        overall_summary=(
            "The language model could not be used, so a simple heuristic based on document "
            "length was applied. Hiring decisions should include an additional manual review "
            "of the CV and project report."
        ),
        raw_cv_scores=None,
        raw_project_scores=None,
        used_fallback=True,
    )


def insufficient_input_result() -> EvaluationResult:
    return EvaluationResult(
        cv_score=0,
        cv_match_rate=0,
        project_score=0,
        cv_feedback="No CV text was provided, so an evaluation cannot be performed.",
        project_feedback="No project report text was provided, so an evaluation cannot be performed.",
        overall_summary=(
            "Neither CV nor project report content was provided. "
            "Please submit both documents for assessment."
        ),
        raw_cv_scores=None,
        raw_project_scores=None,
        used_fallback=False,
    )
