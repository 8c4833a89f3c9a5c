"""HTTP interface: the alert trigger endpoint and job search."""

from typing import Callable, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from job_alerts import __version__
from job_alerts.logging import get_logger
from job_alerts.persistence.database import get_session
from job_alerts.persistence.repositories import JobRepository
from job_alerts.pipeline.runner import AlertRunner
from job_alerts.search.models import SALARY_CEILING, SALARY_FLOOR, JobSearchFilters, SortOrder
from job_alerts.search.spelling import suggest_correction

logger = get_logger(__name__, component="api")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

TRIGGER_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    runner_factory: Callable[[], AlertRunner],
    session_factory=get_session,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        runner_factory: Returns the AlertRunner to use. Called per request so
            configuration problems surface as a 500 response; return the same
            runner each time to keep the overlapping-run guard effective.
        session_factory: Context manager factory yielding database sessions

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(title="Job Alert Worker", version=__version__)

    @app.api_route("/process-job-alerts", methods=TRIGGER_METHODS)
    def process_job_alerts(request: Request):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        try:
            result = runner_factory().run_once()
        except Exception as e:
            logger.error(
                f"Error processing job alerts: {e}",
                extra={"event": "api.trigger.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return JSONResponse({"error": str(e)}, status_code=500, headers=CORS_HEADERS)

        return JSONResponse(result.to_response(), status_code=200, headers=CORS_HEADERS)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/jobs/search")
    def search_jobs(
        q: str = "",
        page: int = Query(1, ge=1),
        per_page: int = Query(10, ge=1, le=100),
        sort: SortOrder = SortOrder.DATE,
        employment_type: List[str] = Query(default=[]),
        job_level: List[str] = Query(default=[]),
        onsite_type: List[str] = Query(default=[]),
        salary_min: int = Query(SALARY_FLOOR, ge=0),
        salary_max: int = Query(SALARY_CEILING, ge=0),
    ):
        try:
            filters = JobSearchFilters(
                employment_types=employment_type,
                job_levels=job_level,
                onsite_types=onsite_type,
                salary_range=(salary_min, salary_max),
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        with session_factory() as session:
            result = JobRepository(session).search(
                query=q, filters=filters, page=page, per_page=per_page, sort=sort
            )

        return {
            "jobs": [job.model_dump(mode="json") for job in result.jobs],
            "total": result.total_count,
            "page": result.page,
            "per_page": result.per_page,
            "total_pages": result.total_pages,
            "suggestion": suggest_correction(q),
        }

    return app
