"""
Standard JSON envelope for every API response:

    {"success": bool, "message": str, "data": ...}

Errors carry "errors" instead of "data" when there are field-level details.
Money is stored as Numeric(10, 2) and always sent as a 2-decimal string
("24.00"), never a float.
"""
from decimal import Decimal
from typing import Any, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette import status

DECIMAL_ENCODER = {Decimal: lambda value: f"{value:.2f}"}


def api_response(data: Any = None, message: str = "Success", status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "success": 200 <= status_code < 300,
            "message": message,
            "data": data if data is not None else {}
        }, custom_encoder=DECIMAL_ENCODER)
    )


def error_response(message: str, status_code: int, errors: Optional[Any] = None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)
