# storefront/errors.py
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class StorefrontError(HTTPException):
    """Базовая ошибка сервиса, отдаётся клиенту как {success: false, errors}."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)


class ConflictError(StorefrontError):
    status_code = 400


class UnauthorizedError(StorefrontError):
    status_code = 401


class NotFoundError(StorefrontError):
    status_code = 404


# Ошибка медиа-хоста; /upload отдаёт её клиенту как 500 {success: false, message}
class UpstreamError(StorefrontError):
    status_code = 500


async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "errors": exc.detail})
