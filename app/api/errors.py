# app/api/errors.py
from fastapi import HTTPException

from app.domain.errors import CheckoutError, ErrorKind

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SECURITY: 400,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.INTERNAL: 500,
}


def http_error(e: CheckoutError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_KIND[e.kind],
        detail={"code": e.code, "message": e.message},
    )


def clamp_pagination(page: int, limit: int) -> tuple[int, int]:
    if page < 1:
        page = 1
    if limit < 1 or limit > 100:
        limit = 10
    return page, limit


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": (total + limit - 1) // limit,
    }
