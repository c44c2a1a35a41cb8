import asyncio
import logging
from fastapi import APIRouter, HTTPException
from domain.schemas import EvaluateRequest, JobStatusResponse
from infra.repositories.files_repository import FilesRepository
from infra.repositories.jobs_repository import JobsRepository
from domain.services.evaluation_pipeline import run_evaluation

logger = logging.getLogger(__name__)

router = APIRouter()
files_repo = FilesRepository()
jobs_repo = JobsRepository()
# strong refs so queued jobs are not garbage-collected mid-run
_running: set[asyncio.Task] = set()


async def process_job(job_id: str, job_title: str | None, cv_id: str, report_id: str) -> None:
    try:
        jobs_repo.update_status(job_id, "processing")
        cv_path = files_repo.get_path(cv_id)
        report_path = files_repo.get_path(report_id)
        result = await run_evaluation(job_title, cv_path, report_path)
        jobs_repo.complete(job_id, result)
    except Exception as e:
        logger.exception("Evaluation job %s failed", job_id)
        jobs_repo.fail(job_id, str(e))


@router.post("/evaluate", response_model=JobStatusResponse)
async def evaluate(body: EvaluateRequest) -> JobStatusResponse:
    if not (files_repo.exists(body.cv_id) and files_repo.exists(body.report_id)):
        raise HTTPException(
            status_code=404, detail="cv_id or report_id not found")

    job_id = jobs_repo.create_job(body.job_title, body.cv_id, body.report_id)

    task = asyncio.create_task(
        process_job(job_id, body.job_title, body.cv_id, body.report_id))
    _running.add(task)
    task.add_done_callback(_running.discard)
    return JobStatusResponse(id=job_id, status="queued")
