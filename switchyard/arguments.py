r"""
Switchyard argument specifications.

Overview
- Switch: how a flag/option is addressed (short character, long name, or both).
- Flag: presence-only switch (no value); drives a FlagSink.
- Option: switch carrying exactly one value per occurrence; drives a ValueSink.
- Positional: value matched by declaration order; drives a ValueSink.

Specs are normally created through schema.SchemaBuilder, which also enforces
the cross-spec invariants (unique switches, positional ordering). The classes
here only validate their own metadata.

Arity and requiredness (Option/Positional)
- multiple: every occurrence appends; otherwise the last occurrence wins.
- default: pre-seeded value; makes the argument non-required. For multiple
  arguments the default is a sequence used when no occurrence was seen.
- optional: non-required without a default (the value stays None).
- required: neither multiple, optional, nor defaulted.

Validation highlights
- Names are non-empty strings (trimmed).
- Short switches are a single character other than '-' and '='.
- Long switches are non-empty, contain no '=' and do not start with '-'.

Introspection & representation
- ArgumentType metaclass exposes the fields listed in __introspectable__ as
  read-only properties and provides stable __repr__/__rich_repr__.
"""
import builtins
import functools
import operator
import re
from collections import namedtuple
from collections.abc import Iterable

from .decoders import Decoder
from .sinks import FlagSink, ValueSink
from .utils import *


class Switch(namedtuple("Switch", ("short", "long"))):
    """
    Switch identity of a flag or option.

    short: single character or None; long: name without leading dashes or None.
    str(switch) renders the long form when present ("--name"), else "-c".
    """
    __slots__ = ()

    def __new__(cls, short=None, long=None):
        if short is not None:
            if not isinstance(short, str):
                raise TypeError("switch 'short' must be a string")
            elif len(short) != 1:
                raise ValueError("switch 'short' must be a single character")
            elif short in "-=":
                raise ValueError("switch 'short' cannot be '-' or '='")
        if long is not None:
            if not isinstance(long, str):
                raise TypeError("switch 'long' must be a string")
            elif not long:
                raise ValueError("switch 'long' cannot be empty")
            elif "=" in long or long.startswith("-"):
                raise ValueError("switch 'long' cannot contain '=' or start with '-'")
        if short is None and long is None:
            raise ValueError("switch must have a short character, a long name, or both")
        return super().__new__(cls, short, long)

    @property
    def forms(self):
        """every spelling that addresses this switch on the command line."""
        return tuple(form for form in (
            self.short and "-" + self.short,
            self.long and "--" + self.long,
        ) if form)

    def __str__(self):
        return self.forms[-1]


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    - __typename__ is derived from the class name and used in messages.
    - every name in __introspectable__ becomes a read-only property (mirror).
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the fields shared by every spec.

    - name: required non-empty string (trimmed).
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name


def _sanitize_switch_metadata(cls, metadata, /):
    """
    Internal: validate the switch identity of flags and options.

    - switch: a Switch, or a (short, long) pair that is turned into one.
    """
    switch = metadata["switch"]
    if isinstance(switch, tuple) and not isinstance(switch, Switch):
        switch = Switch(*switch)
    if not isinstance(switch, Switch):
        raise TypeError(f"{cls.__typename__} 'switch' must be a Switch")
    metadata["switch"] = switch


def _sanitize_sink(cls, metadata, base, /):
    if not isinstance(metadata["sink"], base):
        raise TypeError(f"{cls.__typename__} 'sink' must be a {base.__name__}")


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing arguments.

    - type: converter callable, wrapped into a Decoder (a Decoder is kept as-is).
    - default: any value or Unset; for multiple arguments an iterable (non-string)
      normalized to a tuple.
    - optional/multiple: booleans; optional and multiple are exclusive.
    """
    if not isinstance(decoder := metadata["type"], Decoder):
        if not callable(decoder):
            raise TypeError(f"{cls.__typename__} 'type' must be callable")
        decoder = Decoder(decoder)
    metadata["type"] = decoder

    if metadata["optional"] and metadata["multiple"]:
        raise TypeError(f"{cls.__typename__} cannot be both 'optional' and 'multiple'")

    if metadata["multiple"] and (default := metadata["default"]) is not Unset:
        if not isinstance(default, Iterable) or isinstance(default, str | bytes):
            raise TypeError(f"multiple {cls.__typename__} 'default' must be a non-string iterable")
        metadata["default"] = tuple(default)


class Argument(metaclass=ArgumentType):
    """
    Common behavior of every spec: a name, a sink and an assign() entry point.
    """

    def __init__(self, metadata, /):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def takes_value(self):
        return self._sink.takes_value

    @property
    def required(self):
        """a value must be supplied on the command line (flags never are)."""
        return False


class _Parametric(Argument):
    """shared behavior of value-bearing specs (Option, Positional)."""

    @property
    def decoder(self):
        return self._type

    @property
    def required(self):
        return not (self._optional or self._multiple or self._default is not Unset)

    def assign(self, raw, /):
        """decode raw with this spec's decoder and store the result."""
        self._sink.assign(self._type.decode(self._name, raw))


class Flag(Argument):
    """
    Named, presence-only switch.

    Each occurrence calls sink.assign() (a boolean toggle or a counter for the
    builtin sinks). Flags never receive values: '--flag=x' and '-f=x' are errors.
    """
    __introspectable__ = (
        "name",
        "switch",
        "sink",
    )

    def __init__(self, name, /, switch, sink):
        metadata = {
            "name": name,
            "switch": switch,
            "sink": sink,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_switch_metadata(type(self), metadata)
        _sanitize_sink(type(self), metadata, FlagSink)
        super().__init__(metadata)

    def assign(self):
        self._sink.assign()


class Option(_Parametric):
    """
    Named switch taking exactly one value per occurrence.

    Values come inline ('--name=V', '-nV', '-n=V') or from the next token.
    """
    __introspectable__ = (
        "name",
        "switch",
        "type",
        "default",
        "optional",
        "multiple",
        "sink",
    )

    def __init__(self, name, /, switch, sink, type=str, default=Unset, *, optional=False, multiple=False):
        metadata = {
            "name": name,
            "switch": switch,
            "sink": sink,
            "type": type,
            "default": default,
            "optional": bool(optional),
            "multiple": bool(multiple),
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_switch_metadata(builtins.type(self), metadata)
        _sanitize_sink(builtins.type(self), metadata, ValueSink)
        _sanitize_parametric_metadata(builtins.type(self), metadata)
        super().__init__(metadata)


class Positional(_Parametric):
    """
    Unnamed value matched by declaration order.

    A multiple positional absorbs every excess positional token; it must be
    the last one declared (enforced by the schema builder).
    """
    __introspectable__ = (
        "name",
        "type",
        "default",
        "optional",
        "multiple",
        "sink",
    )

    def __init__(self, name, /, sink, type=str, default=Unset, *, optional=False, multiple=False):
        metadata = {
            "name": name,
            "sink": sink,
            "type": type,
            "default": default,
            "optional": bool(optional),
            "multiple": bool(multiple),
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_sink(builtins.type(self), metadata, ValueSink)
        _sanitize_parametric_metadata(builtins.type(self), metadata)
        super().__init__(metadata)


__all__ = (
    # Classes (specifications)
    "Switch",
    "Argument",
    "Flag",
    "Option",
    "Positional",
)

# internal metaclass, not part of the public API
del ArgumentType
