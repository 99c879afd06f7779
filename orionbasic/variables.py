from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from orionbasic.config import DEFAULT_LIMITS, Limits
from orionbasic.errors import BasicError, ErrorCode
from orionbasic.logging import get_logger
from orionbasic.values import coerce_number

logger = get_logger(__name__)


class VariableKind(Enum):
    NUMERIC = "numeric"
    STRING = "string"
    NUMERIC_ARRAY = "numeric array"
    STRING_ARRAY = "string array"


def is_string_name(name: str) -> bool:
    return name.endswith('$')


@dataclass
class NumericScalar:
    name: str
    value: float = 0.0
    kind = VariableKind.NUMERIC


@dataclass
class StringScalar:
    name: str
    value: str = ""
    kind = VariableKind.STRING


@dataclass
class ArrayVariable:
    name: str
    dims: Tuple[int, ...]
    values: List = field(default_factory=list)

    def offset(self, indices: Sequence[int]) -> int:
        """Row-major flat offset for 1-based ``indices``."""
        if len(indices) != len(self.dims):
            raise BasicError(
                ErrorCode.ARRAY_BOUNDS,
                f"{self.name} has {len(self.dims)} dimension(s), got {len(indices)} subscript(s)",
            )
        flat = 0
        for index, extent in zip(indices, self.dims):
            if index < 1 or index > extent:
                raise BasicError(ErrorCode.ARRAY_BOUNDS, f"Subscript {index} out of range for {self.name}")
            flat = flat * extent + (index - 1)
        return flat

    def get(self, indices: Sequence[int]):
        return self.values[self.offset(indices)]

    def set(self, indices: Sequence[int], value):
        self.values[self.offset(indices)] = value


@dataclass
class NumericArray(ArrayVariable):
    kind = VariableKind.NUMERIC_ARRAY


@dataclass
class StringArray(ArrayVariable):
    kind = VariableKind.STRING_ARRAY


Variable = Union[NumericScalar, StringScalar, NumericArray, StringArray]


class VariableStore:
    def __init__(self, limits: Limits = DEFAULT_LIMITS):
        self.limits = limits
        self._vars: Dict[str, Variable] = {}

    def find(self, name: str) -> Optional[Variable]:
        return self._vars.get(name.upper())

    def _add(self, variable: Variable) -> Variable:
        if len(self._vars) >= self.limits.max_variables:
            raise BasicError(ErrorCode.OUT_OF_MEMORY, "Too many variables")
        self._vars[variable.name] = variable
        return variable

    def _mismatch(self, variable: Variable, wanted: str) -> BasicError:
        return BasicError(
            ErrorCode.TYPE_MISMATCH,
            f"{variable.name} is a {variable.kind.value} variable, not {wanted}",
        )

    def get_or_create_numeric(self, name: str) -> NumericScalar:
        name = name.upper()
        var = self._vars.get(name)
        if var is None:
            if is_string_name(name):
                raise BasicError(ErrorCode.TYPE_MISMATCH, f"{name} can't hold a number")
            return self._add(NumericScalar(name))
        if not isinstance(var, NumericScalar):
            raise self._mismatch(var, "numeric")
        return var

    def get_or_create_string(self, name: str) -> StringScalar:
        name = name.upper()
        var = self._vars.get(name)
        if var is None:
            if not is_string_name(name):
                raise BasicError(ErrorCode.TYPE_MISMATCH, f"{name} can't hold a string")
            return self._add(StringScalar(name))
        if not isinstance(var, StringScalar):
            raise self._mismatch(var, "string")
        return var

    def create_array(self, name: str, dims: Sequence[int]) -> ArrayVariable:
        name = name.upper()
        if not 1 <= len(dims) <= self.limits.max_dimensions:
            raise BasicError(ErrorCode.SYNTAX, f"{name}: 1 to {self.limits.max_dimensions} dimensions allowed")
        if name in self._vars:
            raise BasicError(ErrorCode.SYNTAX, f"Array already dimensioned: {name}")

        size = 1
        for extent in dims:
            if extent < 1:
                raise BasicError(ErrorCode.ILLEGAL_FUNCTION_CALL, f"Invalid dimension {extent} for {name}")
            size *= extent
        if size > self.limits.max_array_size:
            raise BasicError(ErrorCode.OUT_OF_MEMORY, f"Array {name} too large ({size} elements)")

        if is_string_name(name):
            array = StringArray(name, tuple(dims), [""] * size)
        else:
            array = NumericArray(name, tuple(dims), [0.0] * size)
        self._add(array)
        logger.debug(f"DIM {name}{tuple(dims)}: {size} elements")
        return array

    def array(self, name: str) -> ArrayVariable:
        var = self.find(name)
        if var is None:
            raise BasicError(ErrorCode.UNDEFINED_VARIABLE, f"Array not dimensioned: {name.upper()}")
        if not isinstance(var, ArrayVariable):
            raise self._mismatch(var, "an array")
        return var

    def read_numeric(self, name: str) -> float:
        var = self.find(name)
        if var is None:
            raise BasicError(ErrorCode.UNDEFINED_VARIABLE, f"Undefined variable: {name.upper()}")
        if isinstance(var, NumericScalar):
            return var.value
        if isinstance(var, StringScalar):
            return coerce_number(var.value)
        raise self._mismatch(var, "a scalar")

    def read_string(self, name: str) -> str:
        var = self.find(name)
        if var is None:
            raise BasicError(ErrorCode.UNDEFINED_VARIABLE, f"Undefined variable: {name.upper()}")
        if isinstance(var, StringScalar):
            return var.value
        raise self._mismatch(var, "a string scalar")

    def assign(self, name: str, value: Union[float, str]):
        if isinstance(value, str):
            self.get_or_create_string(name).value = value
        else:
            self.get_or_create_numeric(name).value = float(value)

    def read_element(self, name: str, indices: Sequence[int]) -> Union[float, str]:
        return self.array(name).get(indices)

    def assign_element(self, name: str, indices: Sequence[int], value: Union[float, str]):
        array = self.array(name)
        if isinstance(array, StringArray) != isinstance(value, str):
            raise self._mismatch(array, "a string" if isinstance(value, str) else "a number")
        array.set(indices, value if isinstance(value, str) else float(value))

    def clear(self):
        self._vars.clear()

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._vars.values()))

    def __len__(self):
        return len(self._vars)

    def __contains__(self, name: str):
        return name.upper() in self._vars


__all__ = [
    "VariableKind", "NumericScalar", "StringScalar", "ArrayVariable",
    "NumericArray", "StringArray", "Variable", "VariableStore", "is_string_name",
]
