"""
Output slots: where bound values land.

The engine never owns output storage. A Slot is a write capability the caller
hands over at registration time; the binder calls set() on it at most once per
parse. Three spellings cover the usual cases:

    Slot(callback)                 -> callback(value)
    Slot.item(mapping, "key")      -> mapping["key"] = value
    Slot.attribute(object, "name") -> setattr(object, "name", value)

Parameters declared without an explicit slot write into a Namespace, a small
caller-owned buffer with mapping and attribute access, keyed by the parameter's
dest. Subcommand selections nest: Namespace.select("build") records the choice
and returns the namespace receiving the "build" level's values.
"""
import builtins
from collections.abc import MutableMapping

from .utils import Unset


class Slot:
    """
    Write capability over caller-owned storage.

    target identifies the underlying storage so two parameters writing the same
    place can be detected when a registry is finalized.
    """
    __slots__ = ("_setter", "_target", "_label")

    def __init__(self, setter, /, target=Unset, label=Unset):
        if not callable(setter):
            raise TypeError("Slot() argument must be callable")
        self._setter = setter
        self._target = target if target is not Unset else ("call", id(setter))
        self._label = label if label is not Unset else getattr(setter, "__qualname__", repr(setter))

    @classmethod
    def item(cls, mapping, key, /):
        if not isinstance(mapping, MutableMapping):
            raise TypeError("Slot.item() first argument must be a mutable mapping")

        def setter(value):
            mapping[key] = value

        return cls(setter, target=("item", id(mapping), key), label=f"[{key!r}]")

    @classmethod
    def attribute(cls, object, name, /):
        if not isinstance(name, str):
            raise TypeError("Slot.attribute() second argument must be a string")

        def setter(value):
            builtins.setattr(object, name, value)

        return cls(setter, target=("attribute", id(object), name), label=f".{name}")

    @property
    def target(self):
        return self._target

    def set(self, value, /):
        self._setter(value)

    def __eq__(self, other):
        if not isinstance(other, Slot):
            return NotImplemented
        return self._target == other._target

    def __hash__(self):
        return hash(self._target)

    def __repr__(self):
        return f"slot({self._label})"


class Namespace:
    """
    Caller-owned buffer for parameters declared without an explicit slot.

    Values are reachable by key (namespace["dry_run"]) and by attribute
    (namespace.dry_run). selected names the subcommand chosen at this level,
    if any, and namespace[selected] holds that level's values.
    """
    __slots__ = ("_values", "_selected")

    # public methods; values stored under these keys are only reachable by key
    __reserved__ = frozenset(("selected", "slot", "select", "get"))

    def __init__(self, values=(), /, **kwargs):
        object.__setattr__(self, "_values", dict(values, **kwargs))
        object.__setattr__(self, "_selected", None)

    @property
    def selected(self):
        return self._selected

    def slot(self, key, /):
        return Slot.item(self._values, key)

    def select(self, name, /):
        """
        Record name as the chosen subcommand and return its (new or existing) namespace.
        """
        if self._selected is not None and self._selected != name:
            raise ValueError(f"namespace already selected {self._selected!r}")
        object.__setattr__(self, "_selected", name)
        child = self._values.get(name)
        if not isinstance(child, Namespace):
            self._values[name] = child = Namespace()
        return child

    def get(self, key, default=None, /):
        return self._values.get(key, default)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"namespace has no attribute {name!r}") from None

    def __setattr__(self, name, value):
        self._values[name] = value

    def __getitem__(self, key):
        return self._values[key]

    def __setitem__(self, key, value):
        self._values[key] = value

    def __contains__(self, key):
        return key in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, Namespace):
            return self._values == other._values and self._selected == other._selected
        return NotImplemented

    __hash__ = None

    def __rich_repr__(self):
        yield from self._values.items()
        if self._selected is not None:
            yield "selected", self._selected

    def __repr__(self):
        return f"namespace({', '.join(f'{key}={value!r}' for key, value in self._values.items())})"


__all__ = (
    "Slot",
    "Namespace",
)
