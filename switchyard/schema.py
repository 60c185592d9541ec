"""
Schema registry and builder.

Schema
- Immutable description of the flags, options and positionals one parse
  accepts, plus their declaration order.
- Lookups by short character / long name are indexed (dicts built once).

SchemaBuilder
- The single construction API: register each flag/option/positional with its
  switch identity, arity, multiplicity and default, then build().
- Enforces cross-spec invariants before any parse can run:
  • names are unique across the schema;
  • short characters and long names are unique across flags + options;
  • at most one positional is multiple, and it is the last one;
  • a required positional never follows an optional or multiple one.
- When no sink is given, allocates a slot in the builder's Slots table and
  wires the matching builtin sink (Toggle/Count, Store, Append).

Quick example
    >>> schema = (
    ...     SchemaBuilder()
    ...     .flag("verbose", short="v", count=True)
    ...     .option("num", long=True, type=int)
    ...     .positional("foo")
    ...     .build()
    ... )
    >>> schema.try_parse(["prog", "--num=10", "-vvv", "hello"])
    Namespace(verbose=3, num=10, foo='hello')
"""
from contextlib import contextmanager
from types import MappingProxyType

from .arguments import Switch, Flag, Option, Positional
from .faults import SchemaError
from .sinks import Slots, Toggle, Count, Store, Append
from .utils import Unset, coalesce


class Schema:
    """
    Registry of argument specs for one program.

    Contract
    - flag_by_short(c) / flag_by_long(name) -> Flag | None
    - option_by_short(c) / option_by_long(name) -> Option | None
    - positionals: ordered tuple of Positional
    - specs: every spec in declaration order
    - slots: the Slots table allocated by the builder (None when every sink was
      supplied by the caller)
    """
    __slots__ = ("_flags", "_options", "_positionals", "_specs", "_index", "_slots")

    def __init__(self, flags=(), options=(), positionals=(), *, specs=Unset, slots=None):
        self._flags = tuple(flags)
        self._options = tuple(options)
        self._positionals = tuple(positionals)
        self._specs = tuple(coalesce(specs, self._flags + self._options + self._positionals))
        self._slots = slots

        index = {"flag-short": {}, "flag-long": {}, "option-short": {}, "option-long": {}}
        for kind, specs in (("flag", self._flags), ("option", self._options)):
            for spec in specs:
                if spec.switch.short is not None:
                    index[kind + "-short"][spec.switch.short] = spec
                if spec.switch.long is not None:
                    index[kind + "-long"][spec.switch.long] = spec
        self._index = MappingProxyType({key: MappingProxyType(value) for key, value in index.items()})

    @staticmethod
    def builder():
        return SchemaBuilder()

    @property
    def flags(self):
        return self._flags

    @property
    def options(self):
        return self._options

    @property
    def positionals(self):
        return self._positionals

    @property
    def specs(self):
        return self._specs

    @property
    def slots(self):
        return self._slots

    def flag_by_short(self, short, /):
        return self._index["flag-short"].get(short)

    def flag_by_long(self, long, /):
        return self._index["flag-long"].get(long)

    def option_by_short(self, short, /):
        return self._index["option-short"].get(short)

    def option_by_long(self, long, /):
        return self._index["option-long"].get(long)

    def try_parse(self, args=Unset, /):
        from .parser import try_parse
        return try_parse(self, args)

    def parse_or_exit(self, args=Unset, /, *, colorful=Unset):
        from .parser import parse_or_exit
        return parse_or_exit(self, args, colorful=colorful)

    def __repr__(self):
        return "Schema(flags=%r, options=%r, positionals=%r)" % (
            [spec.name for spec in self._flags],
            [spec.name for spec in self._options],
            [spec.name for spec in self._positionals],
        )


class SchemaBuilder:
    """
    Chainable builder producing an immutable Schema.

    Switch shorthands
    - short=True uses the first character of the name.
    - long=True uses the name itself.
    """

    def __init__(self, slots=Unset):
        if slots is not Unset and not isinstance(slots, Slots):
            raise TypeError("SchemaBuilder() 'slots' must be a Slots table")
        self._slots = coalesce(slots, Slots())
        self._allocated = False
        self._flags = []
        self._options = []
        self._positionals = []
        self._specs = []
        self._shorts = {}
        self._longs = {}
        self._built = False

    def _check_name(self, name, /):
        """return the trimmed name (the spec, its slot and its lookups share it)."""
        if self._built:
            raise SchemaError("schema was already built")
        if isinstance(name, str):
            name = name.strip()
        if any(spec.name == name for spec in self._specs):
            raise SchemaError(f"argument name {name!r} is already in use")
        return name

    @contextmanager
    def _declaring(self):
        # slots allocated for a spec that fails validation are released
        length, allocated = len(self._slots), self._allocated
        try:
            yield
        except BaseException:
            self._slots.truncate(length)
            self._allocated = allocated
            raise

    def _resolve_switch(self, name, short, long, /):
        if short is True:
            short = name[:1]
        elif short is False:
            short = None
        if long is True:
            long = name
        elif long is False:
            long = None
        switch = Switch(short, long)
        if switch.short is not None and switch.short in self._shorts:
            raise SchemaError(f"short switch '-{switch.short}' is already used by {self._shorts[switch.short]!r}")
        if switch.long is not None and switch.long in self._longs:
            raise SchemaError(f"long switch '--{switch.long}' is already used by {self._longs[switch.long]!r}")
        return switch

    def _register_switch(self, spec, /):
        if spec.switch.short is not None:
            self._shorts[spec.switch.short] = spec.name
        if spec.switch.long is not None:
            self._longs[spec.switch.long] = spec.name
        self._specs.append(spec)

    def _value_sink(self, name, default, multiple, /):
        self._allocated = True
        if multiple:
            return Append(self._slots, self._slots.allocate(name, factory=list))
        return Store(self._slots, self._slots.allocate(name, coalesce(default)))

    def flag(self, name, /, short=None, long=None, *, count=False, sink=Unset):
        """register a presence-only switch (boolean, or counter when count=True)."""
        name = self._check_name(name)
        switch = self._resolve_switch(name, short, long)
        with self._declaring():
            if sink is Unset:
                self._allocated = True
                kind = Count if count else Toggle
                sink = kind(self._slots, self._slots.allocate(name, 0 if count else False))
            spec = Flag(name, switch=switch, sink=sink)
        self._flags.append(spec)
        self._register_switch(spec)
        return self

    def option(self, name, /, short=None, long=None, *, type=str, default=Unset, optional=False, multiple=False,
               sink=Unset):
        """register a switch taking one value per occurrence."""
        name = self._check_name(name)
        switch = self._resolve_switch(name, short, long)
        with self._declaring():
            if sink is Unset:
                sink = self._value_sink(name, default, multiple)
            spec = Option(name, switch=switch, sink=sink, type=type, default=default, optional=optional,
                          multiple=multiple)
        self._options.append(spec)
        self._register_switch(spec)
        return self

    def positional(self, name, /, *, type=str, default=Unset, optional=False, multiple=False, sink=Unset):
        """register a value matched by declaration order."""
        name = self._check_name(name)
        if self._positionals:
            previous = self._positionals[-1]
            if previous.multiple:
                raise SchemaError(
                    f"positional {name!r} cannot follow multiple positional {previous.name!r}"
                )
            if not (optional or multiple or default is not Unset) and not previous.required:
                raise SchemaError(
                    f"required positional {name!r} cannot follow optional positional {previous.name!r}"
                )
        with self._declaring():
            if sink is Unset:
                sink = self._value_sink(name, default, multiple)
            spec = Positional(name, sink=sink, type=type, default=default, optional=optional, multiple=multiple)
        self._positionals.append(spec)
        self._specs.append(spec)
        return self

    def build(self):
        """freeze the declarations into a Schema (the builder cannot be reused)."""
        if self._built:
            raise SchemaError("schema was already built")
        self._built = True
        return Schema(
            self._flags,
            self._options,
            self._positionals,
            specs=self._specs,
            slots=self._slots if self._allocated else None,
        )


__all__ = (
    "Schema",
    "SchemaBuilder",
)
