"""
Argot binder: turn matched raw strings into typed values and write them out.

For every capture, in the order captures were opened:
- a switch writes its target value;
- a capture without values (a greedy parameter that received none) is skipped;
- otherwise every raw string goes through the parameter's converter, choices
  are enforced, and the result is written as a single value (scalar narg) or
  as a list in token order (collection narg).

Parameters that were not bound this way receive their declared default, when
there is one. Parameters without a default are never touched, so whatever the
caller left in their slot stays there.

Writes go to the parameter's slot, or to the namespace under its dest. The
binder stops at the first failing conversion; writes already made are kept.
"""
import logging

from .faults import InvalidChoiceError, InvalidValueError
from .parameters import Arity
from .utils import Unset, ordinal

log = logging.getLogger(__name__)


def convert(parameter, raw, /, index=None, path=()):
    """
    Convert one raw string for parameter.

    Raises
    - InvalidValueError: the converter raised (chained as __cause__).
    - InvalidChoiceError: the converted value is not one of parameter.choices.
    """
    where = "" if index is None else " at %s position" % ordinal(index + 1)
    try:
        value = parameter.type(raw)
    except Exception as error:
        reason = str(error) or type(error).__name__
        raise InvalidValueError(
            "invalid value %r for %s %r%s: %s" % (raw, parameter.kind.value, parameter.label, where, reason),
            token=raw,
            index=index,
            parameter=parameter,
            raw=raw,
            cause=error,
            path=tuple(path),
            hint="pass a value %s accepts" % getattr(parameter.type, "__name__", "the converter"),
        ) from error

    if parameter.choices and value not in parameter.choices:
        raise InvalidChoiceError(
            "invalid choice %r for %s %r%s" % (raw, parameter.kind.value, parameter.label, where),
            token=raw,
            index=index,
            parameter=parameter,
            raw=raw,
            cause=None,
            path=tuple(path),
            hint="choose one of %s" % ", ".join(map(repr, parameter.choices)),
        )
    return value


def _write(parameter, namespace, value):
    slot = parameter.slot if parameter.slot is not None else namespace.slot(parameter.dest)
    log.debug("binding %r -> %r", parameter.label, value)
    slot.set(value)


def bind(matches, namespace, /, path=()):
    """
    Convert and write every capture of matches, then the defaults; return namespace.

    path names the subcommand level being bound; it travels with conversion errors.
    """
    bound = set()

    for capture in matches:
        parameter = capture.parameter
        if parameter.narg.arity is Arity.ZERO:
            value = parameter.target
        elif not capture.values:
            continue
        elif parameter.narg.collection:
            value = [convert(parameter, raw, index, path) for raw, index in zip(capture.values, capture.indexes)]
        else:
            value = convert(parameter, capture.values[0], capture.indexes[0], path)
        _write(parameter, namespace, value)
        bound.add(parameter)

    for parameter in matches.registry.parameters:
        if parameter not in bound and parameter.default is not Unset:
            _write(parameter, namespace, parameter.default)

    return namespace


__all__ = (
    "convert",
    "bind",
)
