from fastapi import APIRouter, Depends, Request
from sqlalchemy.engine import Connection

from ..models import jobs
from ..schema import JobNew, JobSearch, JobUpdate, validate_payload
from .deps import ensure_admin, get_conn

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", status_code=201, dependencies=[Depends(ensure_admin)])
def create_job(data: JobNew, conn: Connection = Depends(get_conn)):
    return {"job": jobs.create(conn, data.model_dump())}


@router.get("")
def list_jobs(request: Request, conn: Connection = Depends(get_conn)):
    """Filters come from the query string: title, minSalary, hasEquity."""
    search = validate_payload(JobSearch, request.query_params)
    return {"jobs": jobs.find_all(conn, search.model_dump(exclude_none=True))}


@router.get("/{job_id}")
def get_job(job_id: int, conn: Connection = Depends(get_conn)):
    return {"job": jobs.get(conn, job_id)}


@router.patch("/{job_id}", dependencies=[Depends(ensure_admin)])
def update_job(job_id: int, data: JobUpdate, conn: Connection = Depends(get_conn)):
    return {"job": jobs.update(conn, job_id, data.model_dump(exclude_unset=True))}


@router.delete("/{job_id}", dependencies=[Depends(ensure_admin)])
def delete_job(job_id: int, conn: Connection = Depends(get_conn)):
    jobs.remove(conn, job_id)
    return {"deleted": job_id}
