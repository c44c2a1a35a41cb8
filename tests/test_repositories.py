import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from domain.schemas import EvaluationRequest
from domain.services.scoring import heuristic_fallback
from infra.db.session import init_db
from infra.repositories.files_repository import FilesRepository
from infra.repositories.jobs_repository import JobsRepository


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.sqlite3'}", future=True)
    init_db(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, future=True)


@pytest.fixture
def job_id(session_factory):
    files = FilesRepository(session_factory)
    cv_id = files.save(ftype="cv", path="/tmp/cv.pdf", name="cv.pdf")
    report_id = files.save(ftype="report", path="/tmp/report.pdf", name="report.pdf")
    assert files.exists(cv_id)
    assert files.get_path(report_id) == "/tmp/report.pdf"
    return JobsRepository(session_factory).create_job(None, cv_id, report_id)


def test_unknown_file_raises(session_factory):
    files = FilesRepository(session_factory)
    assert not files.exists("file_missing")
    with pytest.raises(KeyError):
        files.get_path("file_missing")


def test_job_lifecycle_stores_full_result(session_factory, job_id):
    jobs = JobsRepository(session_factory)
    assert jobs.get(job_id)["status"] == "queued"

    jobs.update_status(job_id, "processing")
    result = heuristic_fallback(EvaluationRequest(cv_text="x" * 1500)).model_dump()
    result["raw_cv_scores"] = {"technicalSkills": 4.0}
    jobs.complete(job_id, result)

    stored = jobs.get(job_id)
    assert stored["status"] == "completed"
    assert stored["result"]["cv_score"] == 2.5
    assert stored["result"]["cv_match_rate"] == 0.5
    assert stored["result"]["used_fallback"] is True
    assert stored["result"]["raw_cv_scores"] == {"technicalSkills": 4.0}
    assert stored["result"]["raw_project_scores"] is None
    assert stored["error"] is None


def test_failed_job_reports_error(session_factory, job_id):
    jobs = JobsRepository(session_factory)
    jobs.fail(job_id, "could not read PDF")
    stored = jobs.get(job_id)
    assert stored["status"] == "failed"
    assert stored["result"] is None
    assert stored["error"] == "could not read PDF"


def test_missing_job_returns_none(session_factory):
    assert JobsRepository(session_factory).get("job_missing") is None
