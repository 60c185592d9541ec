"""
Assignment sinks: where decoded values land.

Two capabilities
- FlagSink.assign(): presence-only side effect (toggle, count, callback).
- ValueSink.assign(value): store an already-decoded value (the owning spec
  runs the Decoder first, see arguments.Argument.assign).

Slot table
- Slots is an index-addressed table of mutable cells owned by the caller. The
  builtin sinks (Toggle, Count, Store, Append) each address one slot by index,
  so a schema never captures caller variables in closures.
- Slots.reset() reseeds every cell to its initial value; Slots.namespace()
  snapshots the current values by name.

Callbacks
- FlagCallback / Callback forward to caller callables (the equivalent of
  decorator-bound handlers). Anything but a ParseError escaping the callable is
  wrapped as OtherError, with the original exception as __cause__.
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping

from .faults import ParseError, OtherError
from .utils import Unset, coalesce


class Sink(ABC):
    """common base; takes_value tells flags and value-bearing sinks apart."""
    __slots__ = ()
    takes_value = Unset


class FlagSink(Sink):
    __slots__ = ()
    takes_value = False

    @abstractmethod
    def assign(self): ...


class ValueSink(Sink):
    __slots__ = ()
    takes_value = True

    @abstractmethod
    def assign(self, value, /): ...


class Namespace(Mapping):
    """
    Read-only result of a parse: decoded values by argument name.

    Values are reachable both as items (ns["num"]) and attributes (ns.num).
    """
    __slots__ = ("_values",)

    def __init__(self, values=(), /):
        object.__setattr__(self, "_values", dict(values))

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"namespace has no argument {name!r}") from None

    def __setattr__(self, name, value):
        raise AttributeError("namespace is read-only")

    def __reduce__(self):
        return type(self), (self._values,)

    def __repr__(self):
        return "Namespace(%s)" % ", ".join("%s=%r" % item for item in self._values.items())

    def __rich_repr__(self):
        yield from self._values.items()


class Slots:
    """
    Index-addressed table of mutable cells backing the builtin sinks.

    Each cell remembers its name and how to (re)build its initial value:
    a plain initial object, or a zero-argument factory for mutable ones.
    """

    def __init__(self):
        self._names = []
        self._initials = []
        self._factories = []
        self._values = []

    def allocate(self, name, /, initial=None, *, factory=Unset):
        if not isinstance(name, str):
            raise TypeError("slot name must be a string")
        if name in self._names:
            raise ValueError(f"slot {name!r} is already allocated")
        self._names.append(name)
        self._initials.append(initial)
        self._factories.append(factory)
        self._values.append(coalesce(factory, lambda: initial)())
        return len(self._values) - 1

    def truncate(self, length, /):
        """drop every cell allocated after the first length ones."""
        for cells in (self._names, self._initials, self._factories, self._values):
            del cells[length:]

    def reset(self):
        for index, factory in enumerate(self._factories):
            self._values[index] = factory() if factory is not Unset else self._initials[index]

    def __getitem__(self, index):
        return self._values[index]

    def __setitem__(self, index, value):
        self._values[index] = value

    def __len__(self):
        return len(self._values)

    def index(self, name, /):
        return self._names.index(name)

    def namespace(self):
        return Namespace(zip(self._names, self._values))

    def __repr__(self):
        return "Slots(%s)" % ", ".join("%s=%r" % item for item in zip(self._names, self._values))


class _SlotSink:
    __slots__ = ("_slots", "_index")

    def __init__(self, slots, index, /):
        if not isinstance(slots, Slots):
            raise TypeError(f"{type(self).__name__} requires a Slots table")
        if not isinstance(index, int) or not 0 <= index < len(slots):
            raise IndexError(f"{type(self).__name__} slot index out of range")
        self._slots = slots
        self._index = index

    @property
    def slots(self):
        return self._slots

    @property
    def index(self):
        return self._index

    def __repr__(self):
        return f"{type(self).__name__}(slot={self._index})"


class Toggle(_SlotSink, FlagSink):
    """boolean flag: the slot becomes True."""
    __slots__ = ()

    def assign(self):
        self._slots[self._index] = True


class Count(_SlotSink, FlagSink):
    """counter flag: each occurrence adds one."""
    __slots__ = ()

    def assign(self):
        self._slots[self._index] += 1


class Store(_SlotSink, ValueSink):
    """single value: every occurrence overwrites (the default included)."""
    __slots__ = ()

    def assign(self, value, /):
        self._slots[self._index] = value


class Append(_SlotSink, ValueSink):
    """multiple values: occurrences accumulate in order."""
    __slots__ = ()

    def assign(self, value, /):
        self._slots[self._index].append(value)


class FlagCallback(FlagSink):
    __slots__ = ("_callback",)

    def __init__(self, callback, /):
        if not callable(callback):
            raise TypeError("FlagCallback() argument must be callable")
        self._callback = callback

    def assign(self):
        try:
            self._callback()
        except ParseError:
            raise
        except Exception as exception:
            raise OtherError(str(exception) or type(exception).__name__, exception=exception) from exception

    def __repr__(self):
        return f"FlagCallback({getattr(self._callback, '__name__', self._callback)!r})"


class Callback(ValueSink):
    __slots__ = ("_callback",)

    def __init__(self, callback, /):
        if not callable(callback):
            raise TypeError("Callback() argument must be callable")
        self._callback = callback

    def assign(self, value, /):
        try:
            self._callback(value)
        except ParseError:
            raise
        except Exception as exception:
            raise OtherError(str(exception) or type(exception).__name__, exception=exception) from exception

    def __repr__(self):
        return f"Callback({getattr(self._callback, '__name__', self._callback)!r})"


__all__ = (
    "Sink",
    "FlagSink",
    "ValueSink",
    "Namespace",
    "Slots",
    "Toggle",
    "Count",
    "Store",
    "Append",
    "FlagCallback",
    "Callback",
)
