"""
Switchyard faults (parse errors) and rendering.

Scope
- ErrorKind: canonical, stable numeric identifiers for every way a parse can fail.
- ParseError: base type carrying message + kind + context options; knows how to
  render itself with rich and how to terminate the process (fail-fast mode).
- One subclass per kind so callers can catch precisely.
- SchemaError: builder-time invariant violations (never raised while parsing).

Propagation
- The first fault aborts the parse; nothing is collected or retried.
- try-mode callers receive the ParseError unchanged; fail-fast callers get
  "error: <message>" on stderr and exit status 1 (see ParseError.exit).

Styling
- Colors default to the palette below and may be overridden by a __styles__
  mapping in __main__ (keys: "error-label", "error-message").
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class ErrorKind(IntEnum):
    """
    canonical parse error kinds (stable identifiers).

    grouping
    - values (1311x): PARSE_FAILED, INVALID_UTF8
    - switches (1312x): UNKNOWN_SWITCH, MISSING_VALUE, UNEXPECTED_VALUE
    - positionals (1313x): TOO_MANY_POSITIONAL
    - finalization (1314x): MISSING_REQUIRED_ARGUMENT
    - delegated (1319x): OTHER
    """
    # --- value errors ---
    PARSE_FAILED                = 13111
    INVALID_UTF8                = 13112

    # --- switch errors ---
    UNKNOWN_SWITCH              = 13121
    MISSING_VALUE               = 13122
    UNEXPECTED_VALUE            = 13123

    # --- positional errors ---
    TOO_MANY_POSITIONAL         = 13131

    # --- finalization errors ---
    MISSING_REQUIRED_ARGUMENT   = 13141

    # --- caller-raised errors ---
    OTHER                       = 13191


class ParseError(Exception):
    """
    Base class of every error surfaced by a parse.

    attributes
    - message: human-readable, single sentence (no "error:" prefix).
    - kind: ErrorKind of this fault.
    - options: read-only mapping with context (name, switch, token, ...).

    the underlying conversion error, when any, is chained as __cause__.
    """
    kind = ErrorKind.OTHER

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __getattr__(self, name):
        # context options read like attributes (e.g. error.switch)
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "error-label": "bold #FF4DA6",  # friendly pinky label
            "error-message": "#C8C8D0",  # soft light gray message
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style):
            return Text(fragment, styles[style] if colorful else "")

        return Text.assemble(text("error", "error-label"), ": ", text(self.message, "error-message"))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replaced = type(self).__new__(type(self))
        ParseError.__init__(replaced, self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced

    def exit(self, *, colorful=Unset):
        """
        print "error: <message>" to stderr and terminate with status 1.

        colorful defaults to whether stderr is a terminal.
        """
        if colorful is Unset:
            colorful = console.is_terminal
        console.print(self.__replace__(colorful=colorful), soft_wrap=True)
        sys.exit(1)

    @classmethod
    def other(cls, message, /, **options):
        """escape hatch for caller-raised failures (e.g. custom validation)."""
        return OtherError(message, **options)


class ParseFailedError(ParseError):
    kind = ErrorKind.PARSE_FAILED

    def __init__(self, message=Unset, /, *, name, **options):
        if message is Unset:
            cause = options.get("cause")
            message = "Invalid value for '%s': %s" % (name, cause)
        super().__init__(message, name=name, **options)


class UnknownSwitchError(ParseError):
    kind = ErrorKind.UNKNOWN_SWITCH

    def __init__(self, message=Unset, /, *, switch, **options):
        if message is Unset:
            message = "Did not recognize argument '%s'" % switch
        super().__init__(message, switch=switch, **options)


class TooManyPositionalError(ParseError):
    kind = ErrorKind.TOO_MANY_POSITIONAL

    def __init__(self, message=Unset, /, *, token, **options):
        if message is Unset:
            message = "Too many positional arguments, starting with '%s'" % token
        super().__init__(message, token=token, **options)


class MissingRequiredArgumentError(ParseError):
    kind = ErrorKind.MISSING_REQUIRED_ARGUMENT

    def __init__(self, message=Unset, /, *, name, **options):
        if message is Unset:
            message = "Missing required argument '%s'" % name
        super().__init__(message, name=name, **options)


class MissingValueError(MissingRequiredArgumentError):
    """an option ran out of tokens before receiving its value."""
    kind = ErrorKind.MISSING_VALUE

    def __init__(self, message=Unset, /, *, name, switch, **options):
        if message is Unset:
            message = "Missing value for '%s'" % switch
        super().__init__(message, name=name, switch=switch, **options)


class UnexpectedValueError(ParseError):
    kind = ErrorKind.UNEXPECTED_VALUE

    def __init__(self, message=Unset, /, *, switch, **options):
        if message is Unset:
            message = "Flag '%s' cannot take a value" % switch
        super().__init__(message, switch=switch, **options)


class InvalidUtf8Error(ParseError):
    kind = ErrorKind.INVALID_UTF8

    def __init__(self, message=Unset, /, **options):
        if message is Unset:
            message = "Invalid UTF-8 was detected in one or more arguments"
        super().__init__(message, **options)


class OtherError(ParseError):
    kind = ErrorKind.OTHER


class SchemaError(ValueError):
    """a schema declaration breaks a construction-time invariant."""


__all__ = (
    "ErrorKind",
    "ParseError",
    "ParseFailedError",
    "UnknownSwitchError",
    "TooManyPositionalError",
    "MissingRequiredArgumentError",
    "MissingValueError",
    "UnexpectedValueError",
    "InvalidUtf8Error",
    "OtherError",
    "SchemaError",
)
