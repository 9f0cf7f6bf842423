"""
optionparser value types.

Overview
- A value type turns the raw text that follows an option (or a positional
  token) into a Python value. Every type exposes:
  • name: unique identifier used by the type table ("int", "vector", ...).
  • default_label: placeholder shown in usage text ("INT", "VECTOR").
  • parse(value, values, argument): convert; raise to reject.
      - value: str, or None when the option was given without a value and the
        type does not require one.
      - values: the result being assembled (a Namespace); side-effecting types
        (presets and callbacks) may read or write any slot in it.
      - argument: the ArgInfo being parsed, or None for positionals.
  • requires_argument(): whether a following token must be consumed.

- TypeInfo is a convenience base; any object with the same attributes is
  accepted by the registry (see is_value_type).

Builtin types
- int / float: whole-text base-10 numbers; "nan" and "inf" are rejected.
- string: identity.
- flag: no value → True; otherwise yes/no style words.
- noarg_callback / arg_callback / preset: parse-time hooks bound to an ArgInfo.

Application types
- EnumType(name, values): closed set of words, case-normalized.
- ConverterType(name, function): wrap any str -> value callable.
"""
import re
from types import MappingProxyType

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_BOOLEANS = MappingProxyType({
    "true": True, "yes": True, "t": True, "y": True, "1": True,
    "false": False, "no": False, "f": False, "n": False, "0": False,
})


class TypeInfo:
    """
    Base value type. Subclasses override parse() and, for presence-only
    types, requires_argument().
    """
    invokes_callback = False

    def __init__(self, name):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__name__} name must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__name__} name cannot be empty")
        self.name = name
        self.default_label = name.upper().replace("-", "_")

    def parse(self, value, values, argument):
        raise NotImplementedError(f"{type(self).__name__}.parse() is not implemented")

    def requires_argument(self):
        return True

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


class IntType(TypeInfo):
    def __init__(self):
        super().__init__("int")

    def parse(self, value, values=None, argument=None):
        if not _INTEGER.fullmatch(text := value.strip()):
            raise ValueError(f"invalid integer {value!r}")
        return int(text)


class FloatType(TypeInfo):
    def __init__(self):
        super().__init__("float")

    def parse(self, value, values=None, argument=None):
        # float() would accept "nan", "inf" and "1_0"; the pattern does not
        if not _FLOAT.fullmatch(text := value.strip()):
            raise ValueError(f"invalid number {value!r}")
        return float(text)


class StringType(TypeInfo):
    def __init__(self):
        super().__init__("string")

    def parse(self, value, values=None, argument=None):
        return value


class FlagType(TypeInfo):
    def __init__(self):
        super().__init__("flag")

    def parse(self, value, values=None, argument=None):
        if value is None:
            return True
        try:
            return _BOOLEANS[value.lower()]
        except KeyError:
            raise ValueError(f"error parsing boolean from {value!r}") from None

    def requires_argument(self):
        return False


class EnumType(TypeInfo):
    """
    A closed set of words.

    The case normalizer is picked once: when every permitted value is already
    lower-case, input is lower-cased before the membership test (likewise for
    upper-case); mixed-case sets are matched exactly.
    """

    def __init__(self, name, values):
        super().__init__(name)
        if isinstance(values, str):
            raise TypeError("EnumType values must be an iterable of strings")
        values = tuple(values)
        if not values:
            raise ValueError("EnumType values cannot be empty")
        if not all(isinstance(value, str) for value in values):
            raise TypeError("EnumType values must be an iterable of strings")
        if len(set(values)) != len(values):
            raise ValueError("EnumType values cannot contain duplicates")

        if all(value == value.lower() for value in values):
            self.normalize = _lower
        elif all(value == value.upper() for value in values):
            self.normalize = _upper
        else:
            self.normalize = _identity
        self.values = values

    def parse(self, value, values=None, argument=None):
        if (normalized := self.normalize(value)) not in self.values:
            raise ValueError(f"invalid value {value!r} (expected one of: {', '.join(self.values)})")
        return normalized


def _lower(value, /):
    return value.lower()


def _upper(value, /):
    return value.upper()


def _identity(value, /):
    return value


class ConverterType(TypeInfo):
    """
    Adapt a plain callable (str -> value) into a value type.

    >>> vector = ConverterType("vector", lambda text: [float(x) for x in text.split(",")])
    """

    def __init__(self, name, function, /, requires_argument=True):
        super().__init__(name)
        if not callable(function):
            raise TypeError("ConverterType function must be callable")
        self.function = function
        self._requires_argument = bool(requires_argument)

    def parse(self, value, values=None, argument=None):
        return self.function(value)

    def requires_argument(self):
        return self._requires_argument


class NoArgCallbackType(TypeInfo):
    """
    Runs argument.callback(values, argument); its return value is stored in
    the option's own slot.
    """
    invokes_callback = True

    def __init__(self):
        super().__init__("noarg_callback")

    def parse(self, value, values, argument):
        return argument.callback(values, argument)

    def requires_argument(self):
        return False


class ArgCallbackType(TypeInfo):
    """
    Runs argument.callback(value, values, argument) with the option's text.
    """
    invokes_callback = True

    def __init__(self):
        super().__init__("arg_callback")

    def parse(self, value, values, argument):
        return argument.callback(value, values, argument)


class PresetType(TypeInfo):
    """
    Writes every entry of argument.settings into the result at once.
    """

    def __init__(self):
        super().__init__("preset")

    def parse(self, value, values, argument):
        for key, setting in argument.settings.items():
            values[key] = setting
        return True

    def requires_argument(self):
        return False


BUILTIN_TYPES = MappingProxyType({
    type.name: type for type in (
        IntType(),
        FloatType(),
        StringType(),
        FlagType(),
        NoArgCallbackType(),
        ArgCallbackType(),
        PresetType(),
    )
})


def is_value_type(object, /):
    """
    Duck-typed check: a name plus callable parse and requires_argument.
    """
    return (
        isinstance(getattr(object, "name", None), str) and
        callable(getattr(object, "parse", None)) and
        callable(getattr(object, "requires_argument", None))
    )


def coerce_type(object, /):
    """
    Accept a value type instance or a zero-argument value type class.
    """
    if isinstance(object, type):
        try:
            object = object()
        except TypeError:
            raise TypeError(f"type {object.__name__!r} must be constructible without arguments") from None
    if not is_value_type(object):
        raise TypeError("value type must provide 'name', 'parse' and 'requires_argument'")
    return object


def label_of(type, /):
    """
    Usage placeholder of a value type (falls back to the upper-cased name).
    """
    return getattr(type, "default_label", None) or type.name.upper().replace("-", "_")


__all__ = (
    "TypeInfo",
    "IntType",
    "FloatType",
    "StringType",
    "FlagType",
    "EnumType",
    "ConverterType",
    "NoArgCallbackType",
    "ArgCallbackType",
    "PresetType",
    "BUILTIN_TYPES",
    "is_value_type",
    "coerce_type",
    "label_of",
)
