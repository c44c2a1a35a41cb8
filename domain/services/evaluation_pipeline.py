import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from app.settings import settings
from domain.errors import MalformedResponseError
from domain.rubrics import EvaluatorConfig
from domain.schemas import EvaluationRequest, EvaluationResult, RubricContext
from domain.services.scoring import compute_scores, heuristic_fallback, insufficient_input_result
from infra.llm.client import GeminiTransport, extract_text, invoke_with_retry, sanitize_and_parse
from infra.llm.prompts import build_prompt
from infra.pdf.parser import parse_document_text
from infra.rag.retriever import find_rubrics_for_cv_and_project

logger = logging.getLogger("evaluation_pipeline")

RubricLookup = Callable[[str, str], Awaitable[RubricContext]]


class CandidateEvaluator:
    """Runs one CV + project evaluation; ``evaluate`` never raises."""

    def __init__(
        self,
        config: EvaluatorConfig,
        rubric_lookup: Optional[RubricLookup] = None,
        transport: Any = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config
        self.rubric_lookup = rubric_lookup or find_rubrics_for_cv_and_project
        self.transport = transport or GeminiTransport(
            config.api_key, timeout=config.request_timeout)
        self.sleep = sleep

    async def _rubric_context(self, request: EvaluationRequest) -> RubricContext:
        try:
            ctx = await self.rubric_lookup(request.cv_text, request.report_text)
            if not isinstance(ctx, RubricContext):
                ctx = RubricContext.model_validate(ctx or {}, from_attributes=True)
        except Exception as exc:
            logger.warning(f"Rubric lookup failed, continuing without hints: {exc!r}")
            return RubricContext()
        logger.info(
            f"RAG rubrics: cv_len={len(ctx.cv_rubrics_text)} "
            f"project_len={len(ctx.project_rubrics_text)}"
        )
        return ctx

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
        if not request.cv_text.strip() and not request.report_text.strip():
            logger.info("CV and report are both empty; skipping model call")
            return insufficient_input_result()

        if not self.config.api_key:
            logger.warning("GEMINI_API_KEY is not set; using heuristic fallback")
            return heuristic_fallback(request)

        try:
            rubric_context = await self._rubric_context(request)
            prompt = build_prompt(request, rubric_context, self.config)
            response = await invoke_with_retry(
                prompt,
                transport=self.transport,
                model=self.config.model_name,
                max_retries=self.config.max_retries,
                backoff_base=self.config.backoff_base_seconds,
                sleep=self.sleep,
            )
            raw_text = extract_text(response)

            try:
                parsed = sanitize_and_parse(raw_text)
            except MalformedResponseError as exc:
                logger.warning(f"Response was not valid JSON ({exc}); using fallback. Raw: {raw_text[:500]}")
                return heuristic_fallback(request)

            return compute_scores(parsed, self.config)
        except Exception as exc:
            logger.error(f"LLM call failed, using fallback: {exc!r}")
            return heuristic_fallback(request)


def default_evaluator() -> CandidateEvaluator:
    return CandidateEvaluator(EvaluatorConfig.from_settings(settings))


async def evaluate_candidate(
    job_title: Optional[str],
    cv_text: Optional[str],
    report_text: Optional[str],
    evaluator: Optional[CandidateEvaluator] = None,
) -> EvaluationResult:
    request = EvaluationRequest(job_title=job_title, cv_text=cv_text, report_text=report_text)
    return await (evaluator or default_evaluator()).evaluate(request)


async def run_evaluation(job_title: Optional[str], cv_path: str, report_path: str) -> Dict:
    logger.info("=== Starting evaluation job ===")
    logger.info(f"Job title: {job_title}")
    logger.info(f"CV path: {cv_path}")
    logger.info(f"Report path: {report_path}")

    cv_text = parse_document_text(cv_path)
    report_text = parse_document_text(report_path)
    logger.info(f"CV text length: {len(cv_text)} chars")
    logger.info(f"Report text length: {len(report_text)} chars")

    result = (await evaluate_candidate(job_title, cv_text, report_text)).model_dump()

    logger.info(f"Final combined result:\n{json.dumps(result, indent=2)}")
    logger.info("=== Evaluation job completed ===\n")
    return result
