"""
Typed attribute builders

Each builder maps a key and a typed value to an immutable Attribute
record. Attributes are converted to the SDK's attribute mapping only when
a span is started.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Sequence


class AttributeType(Enum):
    STRING = "string"
    INT = "int"
    INT64 = "int64"
    FLOAT64 = "float64"
    BOOL = "bool"
    STRING_SLICE = "string_slice"
    INT_SLICE = "int_slice"


@dataclass(frozen=True)
class Attribute:
    key: str
    value: Any
    type: AttributeType

    def _expect(self, *types: AttributeType) -> Any:
        if self.type not in types:
            raise TypeError(
                f"attribute {self.key!r} holds {self.type.value}, not {types[0].value}"
            )
        return self.value

    def as_string(self) -> str:
        return self._expect(AttributeType.STRING)

    def as_int(self) -> int:
        return self._expect(AttributeType.INT, AttributeType.INT64)

    def as_int64(self) -> int:
        return self._expect(AttributeType.INT64, AttributeType.INT)

    def as_float64(self) -> float:
        return self._expect(AttributeType.FLOAT64)

    def as_bool(self) -> bool:
        return self._expect(AttributeType.BOOL)

    def as_string_slice(self) -> Sequence[str]:
        return self._expect(AttributeType.STRING_SLICE)

    def as_int_slice(self) -> Sequence[int]:
        return self._expect(AttributeType.INT_SLICE)


def str_attr(key: str, value: str) -> Attribute:
    return Attribute(key, value, AttributeType.STRING)


def int_attr(key: str, value: int) -> Attribute:
    return Attribute(key, value, AttributeType.INT)


def int64_attr(key: str, value: int) -> Attribute:
    return Attribute(key, value, AttributeType.INT64)


def float64_attr(key: str, value: float) -> Attribute:
    return Attribute(key, value, AttributeType.FLOAT64)


def bool_attr(key: str, value: bool) -> Attribute:
    return Attribute(key, value, AttributeType.BOOL)


def str_slice_attr(key: str, values: Iterable[str]) -> Attribute:
    return Attribute(key, tuple(values), AttributeType.STRING_SLICE)


def int_slice_attr(key: str, values: Iterable[int]) -> Attribute:
    return Attribute(key, tuple(values), AttributeType.INT_SLICE)


def to_otel_attributes(attrs: Iterable[Attribute]) -> Dict[str, Any]:
    """
    Convert attributes to the mapping accepted by ``Tracer.start_span``

    Insertion order is kept; for duplicate keys the later value wins.
    """
    result: Dict[str, Any] = {}
    for attr in attrs:
        result[attr.key] = attr.value
    return result
