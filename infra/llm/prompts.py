import json

from domain.rubrics import EvaluatorConfig, WeightedRubric
from domain.schemas import EvaluationRequest, RubricContext

SECTION_RULE = "=" * 40

EVALUATOR_INTRO = "You are an AI evaluator for internship candidates."

TASK_INSTRUCTIONS = """
1. Carefully read the CV and project report.
2. Score each parameter from 1 to 5 (integers only).
3. Write a short reason for each parameter score.
4. Write cvFeedback and projectFeedback: 2-4 short sentences each, based only on evidence in the documents.
5. Write an overallSummary of **3-5 sentences** in a professional tone
   (include strengths, weaknesses/gaps, and recommendations).

IMPORTANT:
- All parameter scores MUST be integers 1, 2, 3, 4, or 5.
- Do NOT compute weighted totals; only score each parameter.
- Do NOT mention the internal rubric, parameter names or weights in cvFeedback, projectFeedback or overallSummary.
- Do NOT wrap the JSON in markdown fences and do NOT add any text before or after it.
"""


def _section(title: str, body: str) -> str:
    return f"{SECTION_RULE}\n{title}\n{SECTION_RULE}\n{body}"


def render_rubric(index: int, rubric: WeightedRubric) -> str:
    lines = [f"{index}) {rubric.title} (1-5 per parameter, weighted)", "", "Parameters & Weights:"]
    for p in rubric.parameters:
        lines.append(f"- {p.name} (Weight: {round(p.weight * 100)}%)")
        lines.append(f"  {p.description}")
        lines.append("  Scoring:")
        for level, text in enumerate(p.levels, start=1):
            lines.append(f"    {level} = {text}")
        lines.append("")
    return "\n".join(lines)


def response_schema(config: EvaluatorConfig) -> str:
    """JSON skeleton the model must fill; keys match what the scorer reads."""
    param = {"score": "1-5", "reason": "string"}
    schema = {
        "cv": {name: param for name in config.cv_rubric.names},
        "project": {name: param for name in config.project_rubric.names},
        "cvFeedback": "2-4 sentences string",
        "projectFeedback": "2-4 sentences string",
        "overallSummary": "3-5 sentences string",
    }
    return json.dumps(schema, indent=2)


def build_prompt(request: EvaluationRequest, rubric_context: RubricContext, config: EvaluatorConfig) -> str:
    rubrics = "\n".join([
        render_rubric(1, config.cv_rubric),
        render_rubric(2, config.project_rubric),
    ])
    hints = (
        f"[CV Rubrics Hints]\n{rubric_context.cv_rubrics_text.strip() or '(none)'}\n\n"
        f"[Project Rubrics Hints]\n{rubric_context.project_rubrics_text.strip() or '(none)'}"
    )
    parts = [
        EVALUATOR_INTRO,
        f"Vacancy title: {(request.job_title or '').strip() or '-'}",
        _section("RAW CV TEXT", request.cv_text if request.cv_text.strip() else "(empty)"),
        _section("RAW PROJECT REPORT TEXT",
                 request.report_text if request.report_text.strip() else "(empty)"),
        _section("SCORING RUBRICS", rubrics),
        _section("EXTRA RUBRICS CONTEXT FROM KNOWLEDGE BASE", hints),
        _section("TASK", TASK_INSTRUCTIONS.strip()),
        "Return ONLY valid JSON with this EXACT schema (no additional text):\n\n"
        + response_schema(config),
    ]
    return "\n\n".join(parts) + "\n"
