import uuid
import json
from typing import Optional, Dict, Any
from infra.db.session import SessionLocal
from infra.db.models import JobRecord, JobResultRecord


def _to_text(val: Any) -> Optional[str]:
    if val is None:
        return None
    if isinstance(val, list):
        return "\n".join(f"- {str(x)}" for x in val)
    if isinstance(val, dict):
        return json.dumps(val, ensure_ascii=False)
    return str(val)


def _from_json(val: Optional[str]) -> Optional[Dict]:
    return json.loads(val) if val else None


class JobsRepository:
    def __init__(self, session_factory=SessionLocal):
        self._session = session_factory

    def create_job(self, job_title: Optional[str], cv_id: str, report_id: str) -> str:
        jid = f"job_{uuid.uuid4().hex}"
        with self._session() as s:
            s.add(JobRecord(id=jid, status="queued", job_title=job_title,
                            cv_file_id=cv_id, report_file_id=report_id))
            s.commit()
        return jid

    def update_status(self, job_id: str, status: str) -> None:
        with self._session() as s:
            job = s.get(JobRecord, job_id)
            if not job:
                return
            job.status = status
            s.commit()

    def complete(self, job_id: str, result: Dict) -> None:
        with self._session() as s:
            job = s.get(JobRecord, job_id)
            if not job:
                return
            job.status = "completed"
            jr = JobResultRecord(
                job_id=job_id,
                cv_score=float(result.get("cv_score") or 0.0),
                cv_match_rate=float(result.get("cv_match_rate") or 0.0),
                project_score=float(result.get("project_score") or 0.0),
                cv_feedback=_to_text(result.get("cv_feedback")),
                project_feedback=_to_text(result.get("project_feedback")),
                overall_summary=_to_text(result.get("overall_summary")),
                raw_cv_scores=_to_text(result.get("raw_cv_scores")),
                raw_project_scores=_to_text(result.get("raw_project_scores")),
                used_fallback=bool(result.get("used_fallback")),
            )
            s.merge(jr)
            s.commit()

    def fail(self, job_id: str, error: str) -> None:
        with self._session() as s:
            job = s.get(JobRecord, job_id)
            if not job:
                return
            job.status = "failed"
            s.merge(JobResultRecord(job_id=job_id, error=error))
            s.commit()

    def get(self, job_id: str) -> Optional[Dict]:
        with self._session() as s:
            job = s.get(JobRecord, job_id)
            if not job:
                return None
            jr = s.get(JobResultRecord, job_id)
            out = {"id": job.id, "status": job.status,
                   "result": None, "error": None}
            if jr and job.status == "completed":
                out["result"] = {
                    "cv_score": jr.cv_score,
                    "cv_match_rate": jr.cv_match_rate,
                    "project_score": jr.project_score,
                    "cv_feedback": jr.cv_feedback,
                    "project_feedback": jr.project_feedback,
                    "overall_summary": jr.overall_summary,
                    "raw_cv_scores": _from_json(jr.raw_cv_scores),
                    "raw_project_scores": _from_json(jr.raw_project_scores),
                    "used_fallback": jr.used_fallback,
                }
            if jr and job.status == "failed":
                out["error"] = jr.error
            return out
