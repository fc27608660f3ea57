from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import AppError, ConflictError, NotFoundError, ValidationError

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PermissionError, status.HTTP_403_FORBIDDEN),
)


def to_http_exception(error: Exception) -> HTTPException:
    """Преобразование доменной ошибки в HTTP ответ"""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            detail = error.message if isinstance(error, AppError) else str(error)
            return HTTPException(status_code=status_code, detail=detail)

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """422 без исходных данных запроса: в ответ попадают только место и текст ошибки"""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": errors})
