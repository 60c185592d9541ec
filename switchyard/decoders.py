"""
Value decoders: raw token text -> typed value.

A Decoder binds a converter callable (anything taking one string, like int,
float, pathlib.Path or the helpers below) and turns conversion failures into
ParseFailedError carrying the argument name and the original exception as its
cause.

Builtin converters
- boolean: "true" / "false" only.
- character: exactly one character.
- integer(bits, signed): range-checked integers; i8..i64 and u8..u64 are ready-made.
- choice(*values): restrict to a fixed set of strings.
"""
import functools
import re

from .faults import ParseError, ParseFailedError
from .utils import rename

# Exceptions a converter may raise to mean "this text is not a valid value".
CONVERSION_ERRORS = (ValueError, TypeError, ArithmeticError)

# Optional sign and ASCII decimal digits only (no underscores, no other scripts).
DIGITS = re.compile(r"[+-]?[0-9]+")


class Decoder:
    """
    Converts raw strings with a bound converter.

    Converters raising ParseError subclasses propagate unchanged; the usual
    conversion exceptions (see CONVERSION_ERRORS) become ParseFailedError.
    """
    __slots__ = ("_type",)

    def __init__(self, type=str, /):
        if not callable(type):
            raise TypeError("decoder 'type' must be callable")
        self._type = type

    @property
    def type(self):
        return self._type

    def decode(self, name, raw, /):
        try:
            return self._type(raw)
        except ParseError:
            raise
        except CONVERSION_ERRORS as error:
            raise ParseFailedError(name=name, cause=error, raw=raw) from error

    def __repr__(self):
        return f"Decoder({getattr(self._type, '__name__', self._type)!r})"


def boolean(text, /):
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError("provided string was not `true` or `false`")


def character(text, /):
    if len(text) != 1:
        raise ValueError("expected exactly one character, got %d" % len(text))
    return text


@functools.cache
def integer(bits, /, signed=True):
    """
    Build a converter for integers of a fixed width.

    The result accepts an optional sign and ASCII decimal digits (whitespace,
    underscores and non-ASCII digits are rejected) and fails when the value
    does not fit.
    """
    if not isinstance(bits, int) or bits < 1:
        raise ValueError("integer() 'bits' must be a positive integer")
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)

    @rename(("i" if signed else "u") + str(bits))
    def convert(text, /):
        if not text:
            raise ValueError("cannot parse integer from empty string")
        if not DIGITS.fullmatch(text):
            raise ValueError("invalid digit found in string")
        value = int(text, 10)
        if value < low:
            raise ValueError("number too small to fit in target type")
        if value > high:
            raise ValueError("number too large to fit in target type")
        return value

    return convert


i8 = integer(8)
i16 = integer(16)
i32 = integer(32)
i64 = integer(64)
u8 = integer(8, signed=False)
u16 = integer(16, signed=False)
u32 = integer(32, signed=False)
u64 = integer(64, signed=False)


def choice(*values):
    """Build a converter that only accepts one of the given strings."""
    if not values:
        raise TypeError("choice() requires at least one value")
    if len(set(values)) != len(values):
        raise ValueError("choice() values cannot contain duplicates")

    @rename("choice")
    def convert(text, /):
        if text not in values:
            raise ValueError("expected one of %s" % ", ".join(map(repr, values)))
        return text

    return convert


__all__ = (
    "Decoder",
    "boolean",
    "character",
    "integer",
    "choice",
    "i8",
    "i16",
    "i32",
    "i64",
    "u8",
    "u16",
    "u32",
    "u64",
)
