"""Type definitions and helpers for CODE.

This module defines the runtime type system used by the CODE interpreter:
the `Value` tagged union produced by expressions, the `DeclaredType` a
variable is bound to, display rendering, and the coercion rules applied
when a declaration has an initializer or when console input is scanned
into a variable.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any
import math
import re
import struct

from .errors import InvalidConversion


# Value variants
INTEGER = 'Integer'
FLOAT = 'Float'
BOOLEAN = 'Boolean'
CHARACTER = 'Character'
TEXT = 'Text'
ABSENT = 'Absent'

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

# one mandatory fractional digit plus up to fifteen more
FLOAT_FRACTION_DIGITS = 16
FLOAT_SIGNIFICANT_DIGITS = 9


def wrap_int32(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 32-bit range."""
    return (n - INT32_MIN) % 2 ** 32 + INT32_MIN


def to_single(x: float) -> float:
    """Round a float to the nearest single-precision value."""
    try:
        return struct.unpack('<f', struct.pack('<f', x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


@dataclass(frozen=True)
class Value:
    """A runtime CODE value.

    `kind` is one of the variant names above and `data` holds the Python
    payload: int for Integer, a float rounded to single precision for Float, bool for Boolean, a one
    character str for Character, str for Text and None for Absent. Values
    never change once built; variables are rebound instead.
    """
    kind: str
    data: Any = None

    def __repr__(self) -> str:
        if self.kind == ABSENT:
            return 'Absent'
        return f"{self.kind}({self.data!r})"

    # Convenience constructors
    @staticmethod
    def integer(n: int) -> 'Value':
        return Value(INTEGER, wrap_int32(n))

    @staticmethod
    def floating(x: float) -> 'Value':
        single = to_single(float(x))
        if not math.isfinite(single):
            raise ValueError(f"Float out of range: {x!r}")
        return Value(FLOAT, single)

    @staticmethod
    def boolean(b: bool) -> 'Value':
        return Value(BOOLEAN, bool(b))

    @staticmethod
    def character(c: str) -> 'Value':
        if len(c) != 1:
            raise ValueError(f"Character needs exactly one character, got {c!r}")
        return Value(CHARACTER, c)

    @staticmethod
    def text(s: str) -> 'Value':
        return Value(TEXT, s)

    @staticmethod
    def absent() -> 'Value':
        return ABSENT_VALUE

    @property
    def is_numeric(self) -> bool:
        return self.kind in (INTEGER, FLOAT)

    @property
    def is_absent(self) -> bool:
        return self.kind == ABSENT


ABSENT_VALUE = Value(ABSENT)


_KIND_BY_TYPE = {
    'INT': INTEGER,
    'FLOAT': FLOAT,
    'BOOL': BOOLEAN,
    'CHAR': CHARACTER,
    'STRING': TEXT,
}


@dataclass(frozen=True)
class DeclaredType:
    """The type tag a variable is bound to at declaration (INT, FLOAT, ...)."""
    name: str

    def __post_init__(self):
        if self.name not in _KIND_BY_TYPE:
            raise ValueError(f"unknown declared type {self.name!r}")

    def __repr__(self) -> str:
        return self.name

    @property
    def value_kind(self) -> str:
        """The Value variant a variable of this type holds."""
        return _KIND_BY_TYPE[self.name]


INT_TYPE = DeclaredType('INT')
FLOAT_TYPE = DeclaredType('FLOAT')
BOOL_TYPE = DeclaredType('BOOL')
CHAR_TYPE = DeclaredType('CHAR')
STRING_TYPE = DeclaredType('STRING')


def format_float(x: float) -> str:
    """Render a float the way DISPLAY shows it.

    The shortest decimal that reads back as the same single-precision
    value is written in fixed point, always with a decimal point and at
    most sixteen fractional digits. `3.0` renders as ``3.0`` and
    `3.14159265` as ``3.1415927``.
    """
    if not math.isfinite(x):
        raise ValueError(f"cannot display non-finite float {x!r}")
    x = to_single(x)
    for digits in range(1, FLOAT_SIGNIFICANT_DIGITS + 1):
        shortest = f"{x:.{digits}g}"
        if to_single(float(shortest)) == x:
            break
    number = Decimal(shortest)
    if number.as_tuple().exponent < -FLOAT_FRACTION_DIGITS:
        number = number.quantize(Decimal(1).scaleb(-FLOAT_FRACTION_DIGITS))
    whole, _, frac = format(number, 'f').partition('.')
    frac = frac.rstrip('0') or '0'
    return f"{whole}.{frac}"


def to_string(value: Value) -> str:
    """Convert a CODE value to its display form."""
    kind = value.kind
    if kind == INTEGER:
        return str(value.data)
    if kind == FLOAT:
        return format_float(value.data)
    if kind == BOOLEAN:
        return 'TRUE' if value.data else 'FALSE'
    if kind in (CHARACTER, TEXT):
        return value.data
    if kind == ABSENT:
        return ''
    raise TypeError(f"not a CODE value: {value!r}")


def type_name(value: Value) -> str:
    """Return the variant name of a runtime value, for diagnostics."""
    return value.kind


_INT_TEXT = re.compile(r'[+-]?[0-9]+')
_FLOAT_TEXT = re.compile(r'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def parse_int(text: str) -> int:
    """Strictly parse a 32-bit signed decimal integer; ValueError otherwise."""
    stripped = text.strip()
    if not _INT_TEXT.fullmatch(stripped):
        raise ValueError(f"not an integer: {text!r}")
    n = int(stripped)
    if not INT32_MIN <= n <= INT32_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return n


def parse_float(text: str) -> float:
    """Strictly parse a decimal number; rejects inf, nan and underscores."""
    stripped = text.strip()
    if not _FLOAT_TEXT.fullmatch(stripped):
        raise ValueError(f"not a number: {text!r}")
    return float(stripped)


def parse_bool(text: str) -> bool:
    word = text.strip().upper()
    if word == 'TRUE':
        return True
    if word == 'FALSE':
        return False
    raise ValueError(f"not a boolean: {text!r}")


def convert_value(target: DeclaredType, value: Value) -> Value:
    """Coerce a value to a declared type.

    Used for declaration initializers and for scanned input (which arrives
    as Text). Raises InvalidConversion naming the declared type when the
    value cannot be represented. Plain assignment never goes through here.
    """
    if value.kind == target.value_kind:
        return value
    if value.kind == ABSENT:
        return value
    try:
        if target == INT_TYPE:
            if value.kind == TEXT:
                return Value.integer(parse_int(value.data))
        elif target == FLOAT_TYPE:
            if value.kind == INTEGER:
                return Value.floating(float(value.data))
            if value.kind == TEXT:
                return Value.floating(parse_float(value.data))
        elif target == BOOL_TYPE:
            if value.kind == TEXT:
                return Value.boolean(parse_bool(value.data))
        elif target == CHAR_TYPE:
            if value.kind == TEXT and len(value.data) == 1:
                return Value.character(value.data)
        elif target == STRING_TYPE:
            if value.kind == CHARACTER:
                return Value.text(value.data)
    except ValueError:
        pass
    raise InvalidConversion(f"cannot convert {type_name(value)} {to_string(value)!r} to {target.name}")


def parse_input(target: DeclaredType, raw: str) -> Value:
    """Convert one raw input line to a value of the declared type."""
    if target == STRING_TYPE:
        return Value.text(raw)
    if target == CHAR_TYPE:
        if len(raw) != 1:
            raise InvalidConversion(f"CHAR input needs exactly one character, got {raw!r}")
        return Value.character(raw)
    try:
        if target == INT_TYPE:
            return Value.integer(parse_int(raw))
        if target == FLOAT_TYPE:
            return Value.floating(parse_float(raw))
        if target == BOOL_TYPE:
            return Value.boolean(parse_bool(raw))
    except ValueError:
        raise InvalidConversion(f"input {raw!r} is not a valid {target.name}")
    raise InvalidConversion(f"cannot read input into {target.name}")
