import math

import pytest

from domain.rubrics import CV_RUBRIC, PROJECT_RUBRIC, EvaluatorConfig, WeightedRubric, RubricParameter
from domain.schemas import EvaluationRequest
from domain.services.scoring import (
    CV_FEEDBACK_PLACEHOLDER,
    SUMMARY_PLACEHOLDER,
    clamp,
    compute_scores,
    heuristic_fallback,
    insufficient_input_result,
    round2,
)
from conftest import model_payload


@pytest.mark.parametrize("value", [-10, 0, 1, 2.5, 5, 7, 1e9, "3", True, float("inf"), float("-inf"), 10**400, -(10**400), 1e308])
def test_clamp_numeric_stays_in_range(value):
    assert 1 <= clamp(value) <= 5


@pytest.mark.parametrize("value", [None, "abc", "", [], {}, float("nan"), object()])
def test_clamp_non_numeric_returns_min(value):
    assert clamp(value) == 1
    assert clamp(value, 0, 10) == 0


def test_clamp_custom_bounds():
    assert clamp(0.5, 0, 1) == 0.5
    assert clamp(3, 0, 1) == 1


def test_round2_half_up_and_non_numeric():
    assert round2(1.234) == 1.23
    assert round2(4.999) == 5.0
    assert round2(0.125) == 0.13
    assert round2("x") == 0
    assert round2(None) == 0
    assert round2(float("nan")) == 0
    assert round2(10**400) == 0
    assert round2(1e307) == 1e307
    assert round2(-1e307) == -1e307
    assert round2(1e15) == 1e15


def test_rubric_weights_sum_to_one():
    assert math.isclose(sum(CV_RUBRIC.weights.values()), 1.0)
    assert math.isclose(sum(PROJECT_RUBRIC.weights.values()), 1.0)
    assert list(CV_RUBRIC.weights) == ["technicalSkills", "experienceLevel", "relevantAchievements", "culturalFit"]


def test_rubric_rejects_bad_weights():
    with pytest.raises(ValueError):
        WeightedRubric(title="bad", parameters=(
            RubricParameter(name="a", weight=0.5, description="", levels=("1", "2", "3", "4", "5")),
        ))


def test_perfect_scores_give_max(config):
    result = compute_scores(model_payload(cv_score=5, project_score=5), config)
    assert result.cv_score == 5.0
    assert result.cv_match_rate == 1.0
    assert result.project_score == 5.0
    assert result.used_fallback is False
    assert result.raw_cv_scores["technicalSkills"] == 5


def test_weighted_average_uses_weights(config):
    payload = model_payload(cv_score=1, project_score=1)
    payload["cv"]["technicalSkills"]["score"] = 5
    payload["project"]["correctness"]["score"] = 5
    result = compute_scores(payload, config)
    # 5*0.4 + 1*0.6 and 5*0.3 + 1*0.7
    assert result.cv_score == pytest.approx(2.6)
    assert result.project_score == pytest.approx(2.2)
    assert result.cv_match_rate == pytest.approx(0.52)


def test_out_of_range_and_missing_scores_are_clamped(config):
    payload = {
        "cv": {"technicalSkills": {"score": 9}, "experienceLevel": {"score": "abc"}, "culturalFit": None},
        "project": "not an object",
    }
    result = compute_scores(payload, config)
    assert result.raw_cv_scores == {
        "technicalSkills": 5, "experienceLevel": 1, "relevantAchievements": 1, "culturalFit": 1,
    }
    assert set(result.raw_project_scores.values()) == {1}
    assert 1 <= result.cv_score <= 5
    assert 1 <= result.project_score <= 5
    assert 0 <= result.cv_match_rate <= 1


def test_match_rate_identity_holds(config):
    for score in range(-2, 9):
        result = compute_scores(model_payload(cv_score=score, project_score=score), config)
        assert result.cv_match_rate == round2(result.cv_score * 0.2)


def test_feedback_aliases_in_priority_order(config):
    payload = {"cv_feedback": "", "cvComment": "from comment", "cvSummary": "from summary",
               "project_feedback": ["first", "second"], "summary": "short summary"}
    result = compute_scores(payload, config)
    assert result.cv_feedback == "from comment"
    assert result.project_feedback == "- first\n- second"
    assert result.overall_summary == "short summary"


def test_feedback_placeholders_when_missing(config):
    result = compute_scores({}, config)
    assert result.cv_feedback == CV_FEEDBACK_PLACEHOLDER
    assert result.overall_summary == SUMMARY_PLACEHOLDER


def test_compute_scores_tolerates_non_mapping(config):
    result = compute_scores(["unexpected"], config)
    assert result.cv_score == 1.0
    assert result.used_fallback is False


def test_fallback_scales_with_text_length():
    request = EvaluationRequest(cv_text="x" * 1500, report_text="y" * 12000)
    result = heuristic_fallback(request)
    assert result.cv_score == 2.5
    assert result.cv_match_rate == 0.5
    assert result.project_score == 5.0
    assert result.used_fallback is True
    assert result.raw_cv_scores is None
    assert "fallback" in result.cv_feedback.lower()


def test_fallback_and_model_results_share_shape(config):
    fallback = heuristic_fallback(EvaluationRequest(cv_text="cv", report_text=""))
    graded = compute_scores(model_payload(), config)
    assert set(fallback.model_dump()) == set(graded.model_dump())
    assert fallback.project_score == 2.0
    assert fallback.cv_match_rate == round2(fallback.cv_score * 0.2)


def test_insufficient_input_result_is_zeroed():
    result = insufficient_input_result()
    assert (result.cv_score, result.cv_match_rate, result.project_score) == (0, 0, 0)
    assert result.used_fallback is False


def test_config_from_settings():
    class FakeSettings:
        GEMINI_MODEL = "gemini-x"
        GEMINI_API_KEY = None
        LLM_MAX_RETRIES = 5
        LLM_TIMEOUT_SECONDS = 12.5

    cfg = EvaluatorConfig.from_settings(FakeSettings)
    assert cfg.model_name == "gemini-x"
    assert cfg.api_key is None
    assert cfg.max_retries == 5
    assert cfg.request_timeout == 12.5


def test_huge_model_scores_are_clamped_not_rejected(config):
    payload = model_payload(cv_score=10**400, project_score=1e308)
    result = compute_scores(payload, config)
    assert result.raw_cv_scores["technicalSkills"] == 5
    assert result.cv_score == 5.0
    assert result.project_score == 5.0
    assert result.cv_match_rate == 1.0
