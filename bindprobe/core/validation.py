import logging
from typing import Optional

from fastapi import HTTPException
from starlette.datastructures import FormData


logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {'application/x-www-form-urlencoded', 'multipart/form-data'}
MIN_STATUS_CODE = 200
MAX_STATUS_CODE = 999


def validate_content_type(content_type: Optional[str]) -> None:
    media_type = (content_type or '').split(';', 1)[0].strip().lower()
    if media_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=415, detail=f"Unsupported content type. Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}")


def validate_form_fields(form: FormData) -> None:
    for key, value in form.multi_items():
        if not isinstance(value, str):
            logger.warning(f"Rejected file part '{key}' in form payload")
            raise HTTPException(status_code=400, detail=f"File uploads are not accepted: {key}")


def validate_status_code(status_code: int) -> None:
    if status_code < MIN_STATUS_CODE or status_code > MAX_STATUS_CODE:
        raise HTTPException(status_code=400, detail=f"StatusCode must be between {MIN_STATUS_CODE} and {MAX_STATUS_CODE}")
