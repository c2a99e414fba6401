import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from .shapes import BINDING_MODEL, BindingMode, FieldSpec, Int32, Shape


_HEAD = re.compile(r"[^.\[\]]+")
_SEGMENT = re.compile(r"\[([^\[\]]*)\]|\.([^.\[\]]+)")

_ADAPTERS: Dict[str, TypeAdapter] = {
    "int": TypeAdapter(Int32),
    "uuid": TypeAdapter(UUID),
    "datetime": TypeAdapter(datetime),
}

Segment = Union[str, int]
Entry = Tuple[Tuple[Segment, ...], Any]


class BindingError(Exception):
    """Base class for failures that abort binding of a request."""

    def __init__(self, field_name: str, message: str):
        super().__init__(message)
        self.field_name = field_name
        self.message = message

    def as_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "field": self.field_name, "detail": self.message}


class MissingFieldError(BindingError):
    def __init__(self, field_name: str):
        super().__init__(field_name, f"The {field_name} field is required.")


class ConversionError(BindingError):
    def __init__(self, field_name: str, raw_value: Any, target_type: str):
        super().__init__(field_name, f"The value '{raw_value}' is not valid for {field_name} ({target_type}).")
        self.raw_value = raw_value
        self.target_type = target_type

    def as_dict(self) -> Dict[str, Any]:
        data = super().as_dict()
        data["raw_value"] = self.raw_value if isinstance(self.raw_value, str) else repr(self.raw_value)
        data["target_type"] = self.target_type
        return data


def _segment(token: str) -> Segment:
    return int(token) if token.isascii() and token.isdigit() else token


def parse_key(key: str) -> Optional[Tuple[Segment, ...]]:
    """Split a form key into path segments.

    ``Children[0].Name``, ``Children[0][Name]`` and ``Children.0.Name`` all
    yield ``("Children", 0, "Name")``. Returns None for malformed keys.
    """
    match = _HEAD.match(key)
    if match is None:
        return None
    segments: List[Segment] = [_segment(match.group(0))]
    pos = match.end()
    while pos < len(key):
        match = _SEGMENT.match(key, pos)
        if match is None:
            return None
        token = match.group(1) if match.group(1) is not None else match.group(2)
        if not token:
            return None
        segments.append(_segment(token))
        pos = match.end()
    return tuple(segments)


def _iter_pairs(payload) -> Iterable[Tuple[str, Any]]:
    # Starlette's FormData keeps every value of a repeated key
    if hasattr(payload, "multi_items"):
        return payload.multi_items()
    if isinstance(payload, Mapping):
        return payload.items()
    return payload


def convert(field_name: str, raw: Any, spec: FieldSpec) -> Any:
    """Convert a raw form value to the field's declared type."""
    if not isinstance(raw, str):
        raise ConversionError(field_name, raw, spec.kind)

    if spec.kind == "string":
        if raw == "" and spec.nullable:
            return None
        return raw

    adapter = _ADAPTERS.get(spec.kind)
    if adapter is None:
        raise ValueError(f"Unsupported field kind: {spec.kind}")
    try:
        return adapter.validate_python(raw.strip())
    except ValidationError:
        raise ConversionError(field_name, raw, spec.kind)


def zero_value(spec: FieldSpec) -> Any:
    if spec.kind == "string":
        return None if spec.nullable else ""
    if spec.kind == "int":
        return 0
    if spec.kind == "uuid":
        return UUID(int=0)
    if spec.kind == "datetime":
        return datetime.min
    if spec.kind == "list":
        return ()
    raise ValueError(f"Unsupported field kind: {spec.kind}")


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _is_bindable(segments: Tuple[Segment, ...], shape: Shape, mode: BindingMode) -> bool:
    """Whether ``segments`` addresses a field that ``shape`` binds."""
    head = segments[0]
    if not isinstance(head, str):
        return False
    spec = shape.lookup(head, mode)
    if spec is None:
        return False
    if spec.kind == "list":
        return len(segments) > 2 and isinstance(segments[1], int) and _is_bindable(segments[2:], spec.shape, mode)
    return len(segments) == 1


def _bind_shape(entries: List[Entry], shape: Shape, mode: BindingMode, prefix: str) -> Any:
    scalars: Dict[str, Any] = {}
    nested: Dict[str, List[Entry]] = {}

    for segments, value in entries:
        if not _is_bindable(segments, shape, mode):
            continue
        spec = shape.lookup(segments[0], mode)
        if spec.kind == "list":
            nested.setdefault(spec.name, []).append((segments[1:], value))
        else:
            # First value wins for repeated keys
            scalars.setdefault(spec.name, value)

    values: Dict[str, Any] = {}
    for spec in shape.fields_for(mode):
        path = _join(prefix, spec.name)
        if spec.kind == "list":
            values[spec.target] = _bind_list(nested.get(spec.name, []), spec, mode, path)
        elif spec.name in scalars:
            values[spec.target] = convert(path, scalars[spec.name], spec)
        elif mode is BindingMode.REQUIRED and spec.required:
            raise MissingFieldError(path)
        else:
            values[spec.target] = zero_value(spec)

    return shape.factory(**values)


def _bind_list(entries: List[Entry], spec: FieldSpec, mode: BindingMode, path: str) -> Tuple[Any, ...]:
    # Entries were filtered by _is_bindable; no index opens without a known field
    groups: Dict[int, List[Entry]] = {}
    for segments, value in entries:
        groups.setdefault(segments[0], []).append((segments[1:], value))

    return tuple(
        _bind_shape(groups[index], spec.shape, mode, f"{path}[{index}]")
        for index in sorted(groups)
    )


def bind(payload, shape: Shape = BINDING_MODEL, mode: BindingMode = BindingMode.REQUIRED) -> Any:
    """Bind a flat form payload onto ``shape``.

    ``payload`` may be a mapping, an iterable of ``(key, value)`` pairs or a
    Starlette ``FormData``. Unknown keys are ignored. The first failing field
    raises ``MissingFieldError`` or ``ConversionError`` and no record is
    returned.
    """
    entries: List[Entry] = []
    for key, value in _iter_pairs(payload):
        segments = parse_key(key)
        if segments is not None:
            entries.append((segments, value))
    return _bind_shape(entries, shape, mode, "")
