from datetime import datetime
from typing import Any, List, Tuple

from .shapes import BINDING_MODEL, BindingMode, Shape


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def encode_form(record: Any, shape: Shape = BINDING_MODEL, mode: BindingMode = BindingMode.REQUIRED, prefix: str = "") -> List[Tuple[str, str]]:
    """Flatten a record into the form pairs a browser would post for it.

    Children are written as ``Children[i].Name``. Fields outside ``mode`` are
    left out, so a permissive payload never carries ``LastName``.
    """
    pairs: List[Tuple[str, str]] = []
    for spec in shape.fields_for(mode):
        key = f"{prefix}.{spec.name}" if prefix else spec.name
        value = getattr(record, spec.target)
        if spec.kind == "list":
            for index, child in enumerate(value):
                pairs.extend(encode_form(child, spec.shape, mode, f"{key}[{index}]"))
        else:
            pairs.append((key, _format_value(value)))
    return pairs
