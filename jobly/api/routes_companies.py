from fastapi import APIRouter, Depends, Request
from sqlalchemy.engine import Connection

from ..models import companies
from ..schema import CompanyNew, CompanySearch, CompanyUpdate, validate_payload
from .deps import ensure_admin, get_conn

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post("", status_code=201, dependencies=[Depends(ensure_admin)])
def create_company(data: CompanyNew, conn: Connection = Depends(get_conn)):
    return {"company": companies.create(conn, data.model_dump())}


@router.get("")
def list_companies(request: Request, conn: Connection = Depends(get_conn)):
    """Filters come from the query string: nameLike, minEmployees, maxEmployees."""
    search = validate_payload(CompanySearch, request.query_params)
    return {"companies": companies.find_all(conn, search.model_dump(exclude_none=True))}


@router.get("/{handle}")
def get_company(handle: str, conn: Connection = Depends(get_conn)):
    return {"company": companies.get(conn, handle)}


@router.patch("/{handle}", dependencies=[Depends(ensure_admin)])
def update_company(handle: str, data: CompanyUpdate, conn: Connection = Depends(get_conn)):
    return {"company": companies.update(conn, handle, data.model_dump(exclude_unset=True))}


@router.delete("/{handle}", dependencies=[Depends(ensure_admin)])
def delete_company(handle: str, conn: Connection = Depends(get_conn)):
    companies.remove(conn, handle)
    return {"deleted": handle}
