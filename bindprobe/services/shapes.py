"""Shape descriptors for the bind-model probe.

A single descriptor covers both versions of the binding model. Fields carry
the binding modes they take part in, so ``LastName`` only appears when
binding in ``REQUIRED`` mode.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Callable, Dict, FrozenSet, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BindingMode(str, Enum):
    PERMISSIVE = "permissive"
    REQUIRED = "required"


ALL_MODES: FrozenSet[BindingMode] = frozenset(BindingMode)


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class ChildRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str]
    age: Int32


class RootRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    first_name: Optional[str]
    middle_name: Optional[str]
    last_name: Optional[str] = None
    birth_date: datetime
    status_code: Int32
    children: Tuple[ChildRecord, ...] = ()


@dataclass(frozen=True)
class FieldSpec:
    """One field of a shape.

    ``name`` is the wire name, ``target`` the record attribute it fills.
    ``shape`` is only set for ``list`` fields.
    """

    name: str
    kind: str
    target: str
    nullable: bool = False
    required: bool = True
    modes: FrozenSet[BindingMode] = ALL_MODES
    shape: Optional["Shape"] = None


@dataclass(frozen=True)
class Shape:
    name: str
    fields: Tuple[FieldSpec, ...]
    factory: Callable[..., Any]
    _by_name: Dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_by_name", {f.name.lower(): f for f in self.fields})

    def fields_for(self, mode: BindingMode) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if mode in f.modes)

    def lookup(self, name: str, mode: BindingMode) -> Optional[FieldSpec]:
        spec = self._by_name.get(name.lower())
        if spec is None or mode not in spec.modes:
            return None
        return spec


CHILD_SHAPE = Shape(
    name="BindingModelChild",
    fields=(
        FieldSpec("Name", "string", "name", nullable=True),
        FieldSpec("Age", "int", "age"),
    ),
    factory=ChildRecord,
)

BINDING_MODEL = Shape(
    name="BindingModel",
    fields=(
        FieldSpec("Id", "uuid", "id"),
        FieldSpec("FirstName", "string", "first_name", nullable=True),
        FieldSpec("MiddleName", "string", "middle_name", nullable=True),
        FieldSpec("LastName", "string", "last_name", nullable=True, modes=frozenset({BindingMode.REQUIRED})),
        FieldSpec("BirthDate", "datetime", "birth_date"),
        FieldSpec("StatusCode", "int", "status_code"),
        # An empty form never carries the array, so it is never "missing".
        FieldSpec("Children", "list", "children", required=False, shape=CHILD_SHAPE),
    ),
    factory=RootRecord,
)
