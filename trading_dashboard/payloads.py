# trading_dashboard/payloads.py

import json
from typing import Any, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from logger import logger
from trading_dashboard.errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def read_json_body(request: Request) -> Any:
    """
    Decodes the raw request body as JSON.

    Raises:
        ValidationError: Empty or malformed body.
    """
    raw_body = await request.body()
    cleaned_body = raw_body.decode("utf-8", errors="replace").strip().replace("\x00", "")
    if not cleaned_body:
        raise ValidationError("Invalid JSON body", [{"loc": ["body"], "msg": "Request body is empty", "type": "missing"}])
    try:
        return json.loads(cleaned_body)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON Decode Error: {e}")
        raise ValidationError("Invalid JSON body", [{"loc": ["body"], "msg": str(e), "type": "json_invalid"}])


def validate_payload(schema: Type[SchemaT], payload: Any, message: str) -> SchemaT:
    """
    Validates a decoded payload against a request schema.

    Raises:
        ValidationError: With one entry per offending field.
    """
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning(f"{message}: {e.error_count()} error(s)")
        raise ValidationError.from_pydantic(message, e)


async def parse_body(request: Request, schema: Type[SchemaT], message: str) -> SchemaT:
    return validate_payload(schema, await read_json_body(request), message)
