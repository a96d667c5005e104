# -*- coding: utf-8 -*-
"""Mapping of UPnP data types to Python types."""

import re
import urllib.parse
from typing import Any, Callable, Mapping, NamedTuple, Optional

import voluptuous as vol

from async_upnp_bindgen.exceptions import (
    UpnpUnknownDataTypeError,
    UpnpUnsupportedDataTypeError,
)

FLOAT32_MAX = 3.4028234663852886e38

_FIXED_DATA_TYPE = re.compile(r"^fixed\.\d+\.\d+$")

_BOOLEAN_TRUE = ("1", "true", "yes")
_BOOLEAN_FALSE = ("0", "false", "no")


class DataTypeInfo(NamedTuple):
    """Semantic type for an UPnP data type."""

    data_type: str
    python_type: type
    type_hint: str
    description: str
    validator: vol.Schema
    coerce_python: Callable[[str], Any]
    coerce_upnp: Callable[[Any], str]

    def validate(self, value: Any) -> Any:
        """Validate value, returns the (possibly normalized) value."""
        return self.validator(value)


def _strict_int(value: Any) -> int:
    """Accept ints, but not bools."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise vol.Invalid(f"expected int, got {type(value).__name__}")
    return value


def _number(value: Any) -> float:
    """Accept ints and floats, but not bools."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise vol.Invalid(f"expected float, got {type(value).__name__}")
    return float(value)


def _split_result(value: Any) -> urllib.parse.SplitResult:
    """Accept a SplitResult, or a str to be parsed into one."""
    if isinstance(value, urllib.parse.SplitResult):
        return value
    if isinstance(value, str):
        return urllib.parse.urlsplit(value)
    raise vol.Invalid(f"expected uri, got {type(value).__name__}")


def _int_coercer(minimum: int, maximum: int) -> Callable[[str], int]:
    """Create a coercer for an integer of limited width."""

    def coerce(upnp_value: str) -> int:
        value = int(upnp_value.strip())
        if not minimum <= value <= maximum:
            raise ValueError(f"{value} out of range [{minimum}, {maximum}]")
        return value

    return coerce


def _coerce_float32(upnp_value: str) -> float:
    value = float(upnp_value.strip())
    if abs(value) > FLOAT32_MAX:
        raise ValueError(f"{value} out of range for r4")
    return value


def _uri_to_upnp(value: Any) -> str:
    if isinstance(value, urllib.parse.SplitResult):
        return value.geturl()
    return str(value)


def _coerce_char(upnp_value: str) -> str:
    if len(upnp_value) != 1:
        raise ValueError(f"Expected a single character, got '{upnp_value}'")
    return upnp_value


def _coerce_boolean(upnp_value: str) -> bool:
    value = upnp_value.strip().lower()
    if value in _BOOLEAN_TRUE:
        return True
    if value in _BOOLEAN_FALSE:
        return False
    raise ValueError(f"Invalid boolean: '{upnp_value}'")


def _integer(data_type: str, bits: int, signed: bool, description: str) -> DataTypeInfo:
    if signed:
        minimum, maximum = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    else:
        minimum, maximum = 0, 2 ** bits - 1
    return DataTypeInfo(
        data_type=data_type,
        python_type=int,
        type_hint="int",
        description=description,
        validator=vol.Schema(vol.All(_strict_int, vol.Range(min=minimum, max=maximum))),
        coerce_python=_int_coercer(minimum, maximum),
        coerce_upnp=lambda i: str(int(i)),
    )


def _float(data_type: str, description: str) -> DataTypeInfo:
    return DataTypeInfo(
        data_type=data_type,
        python_type=float,
        type_hint="float",
        description=description,
        validator=vol.Schema(_number),
        coerce_python=lambda s: float(s.strip()),
        coerce_upnp=lambda f: str(float(f)),
    )


def _text(data_type: str) -> DataTypeInfo:
    return DataTypeInfo(
        data_type=data_type,
        python_type=str,
        type_hint="str",
        description="text",
        validator=vol.Schema(str),
        coerce_python=str,
        coerce_upnp=str,
    )


DATA_TYPE_MAPPING: Mapping[str, DataTypeInfo] = {
    "ui1": _integer("ui1", 8, False, "8-bit unsigned integer"),
    "ui2": _integer("ui2", 16, False, "16-bit unsigned integer"),
    "ui4": _integer("ui4", 32, False, "32-bit unsigned integer"),
    "i1": _integer("i1", 8, True, "8-bit signed integer"),
    "i2": _integer("i2", 16, True, "16-bit signed integer"),
    "i4": _integer("i4", 32, True, "32-bit signed integer"),
    "int": _integer("int", 64, True, "64-bit signed integer"),
    "r4": DataTypeInfo(
        data_type="r4",
        python_type=float,
        type_hint="float",
        description="32-bit float",
        validator=vol.Schema(
            vol.All(_number, vol.Range(min=-FLOAT32_MAX, max=FLOAT32_MAX))
        ),
        coerce_python=_coerce_float32,
        coerce_upnp=lambda f: str(float(f)),
    ),
    "number": _float("number", "64-bit float"),
    "r8": _float("r8", "64-bit float"),
    "float": _float("float", "64-bit float"),
    "float64": _float("float64", "64-bit float"),
    "char": DataTypeInfo(
        data_type="char",
        python_type=str,
        type_hint="str",
        description="single character",
        validator=vol.Schema(vol.All(str, vol.Length(min=1, max=1))),
        coerce_python=_coerce_char,
        coerce_upnp=str,
    ),
    # Date/time types are passed through as text, on purpose.
    "string": _text("string"),
    "date": _text("date"),
    "dateTime": _text("dateTime"),
    "dateTime.tz": _text("dateTime.tz"),
    "time": _text("time"),
    "time.tz": _text("time.tz"),
    "uuid": _text("uuid"),
    "boolean": DataTypeInfo(
        data_type="boolean",
        python_type=bool,
        type_hint="bool",
        description="boolean",
        validator=vol.Schema(bool),
        coerce_python=_coerce_boolean,
        coerce_upnp=lambda b: "1" if b else "0",
    ),
    "uri": DataTypeInfo(
        data_type="uri",
        python_type=urllib.parse.SplitResult,
        type_hint="SplitResult",
        description="uri",
        validator=vol.Schema(_split_result),
        coerce_python=lambda s: urllib.parse.urlsplit(s.strip()),
        coerce_upnp=_uri_to_upnp,
    ),
}


def map_data_type(data_type: Optional[str]) -> DataTypeInfo:
    """
    Get the semantic type for an UPnP data type.

    :raise UpnpUnsupportedDataTypeError: fixed.<p>.<q> data types
    :raise UpnpUnknownDataTypeError: any other unknown data type
    """
    if data_type is not None:
        data_type_info = DATA_TYPE_MAPPING.get(data_type)
        if data_type_info is not None:
            return data_type_info

        if _FIXED_DATA_TYPE.match(data_type):
            raise UpnpUnsupportedDataTypeError(data_type)

    raise UpnpUnknownDataTypeError(data_type)
