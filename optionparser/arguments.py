r"""
optionparser option descriptors.

Overview
- ArgInfo: metadata for one declared option (name, value type, description,
  mandatory/repeated/hidden flags, default, usage label, constraints, short
  codes and exclusivity membership).
- ArgInfo instances are created by OptionParser.add_* and configured through
  chained setters:

    >>> parser.add_int("count", "number of times to run") \
    ...     .set_minimum(0) \
    ...     .add_short_code("n")

- Introspection: the ArgumentType metaclass exposes the fields listed in
  __introspectable__ as read-only properties (containers are handed out as
  copies) and provides stable __repr__/__rich_repr__ implementations.

Constraints
- A constraint is a callable receiving the converted value. It rejects the
  value by raising (the exception text becomes the message) or by returning
  False; anything else accepts. Constraints run in declaration order.
- set_minimum / set_strict_minimum / set_maximum / set_strict_maximum /
  set_interval install ready-made numeric constraints; set_interval(a, b) is
  half-open: a <= value < b.
"""
import functools
import operator
import re
import warnings

from .faults import SchemaWarning
from .utils import *
from .valuetypes import label_of


class ArgumentType(type):
    """
    Metaclass that turns descriptors into introspectable, fluent objects.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            """
            Return a concise, stable representation with key metadata.

            Example
            - arg-info(name='count', type='int', ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class ArgInfo(metaclass=ArgumentType):
    """
    One declared option of an OptionParser.

    Lifecycle
    - Created by OptionParser.add_generic (and the add_* shorthands), which
      computes the canonical identifier and registers the descriptor.
    - Configured by the chained setters below during schema construction.
    - Read-only while parsing; the engine never mutates a descriptor.
    """
    __introspectable__ = (
        "name",
        "identifier",
        "type",
        "description",
        "mandatory",
        "repeated",
        "tolerate_repeated",
        "hidden",
        "default",
        "constraints",
        "short_codes",
        "exclusive_indices",
        "parser",
    )

    __displayable__ = (
        "name",
        "identifier",
        "type",
        "description",
        "mandatory",
        "repeated",
        "tolerate_repeated",
        "hidden",
        "default",
        "short_codes",
    )

    def __init__(self, name, value_type, description, /, *, identifier, parser):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        elif name.startswith("-") or "=" in name:
            raise ValueError(f"{type(self).__typename__} 'name' {name!r} must not start with '-' or contain '='")
        if not isinstance(description, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'description' must be a string")

        self._name = name
        self._identifier = identifier
        self._type = value_type
        self._description = coalesce(description, "")
        self._mandatory = False
        self._repeated = False
        # flags and no-argument callbacks are harmless when repeated
        self._tolerate_repeated = not value_type.requires_argument()
        self._hidden = False
        self._default = Unset
        self._label = Unset
        self._constraints = []
        self._short_codes = []
        self._exclusive_indices = []
        self._parser = parser
        self.callback = None
        self.settings = {}

    @property
    def label(self):
        """
        Placeholder shown after '=' in usage text (explicit label or the type's).
        """
        return coalesce(self._label, label_of(self._type))

    @property
    def has_default(self):
        return self._default is not Unset

    def requires_argument(self):
        return bool(self._type.requires_argument())

    def set_mandatory(self, mandatory=True, /):
        self._mandatory = bool(mandatory)
        if self._mandatory and self.has_default:
            warnings.warn(
                f"mandatory option {self._name!r} has a default value that can never apply",
                SchemaWarning,
                stacklevel=2,
            )
        return self

    def set_repeated(self, repeated=True, /):
        self._repeated = bool(repeated)
        return self

    def set_tolerate_repeated(self, tolerate=True, /):
        self._tolerate_repeated = bool(tolerate)
        return self

    def set_hidden(self, hidden=True, /):
        self._hidden = bool(hidden)
        return self

    def set_default_value(self, value, /):
        self._default = value
        if self._mandatory:
            warnings.warn(
                f"mandatory option {self._name!r} has a default value that can never apply",
                SchemaWarning,
                stacklevel=2,
            )
        return self

    def set_label(self, label, /):
        if not isinstance(label, str):
            raise TypeError(f"{type(self).__typename__} 'label' must be a string")
        elif not (label := label.strip()):
            raise ValueError(f"{type(self).__typename__} 'label' cannot be empty")
        self._label = label
        return self

    def add_constraint(self, constraint, /):
        if not callable(constraint):
            raise TypeError(f"{type(self).__typename__} constraint must be callable")
        self._constraints.append(constraint)
        return self

    def set_minimum(self, minimum, /):
        @rename("minimum")
        def constraint(value):
            if value < minimum:
                raise ValueError(f"too small (must be at least {minimum})")
        return self.add_constraint(constraint)

    def set_strict_minimum(self, minimum, /):
        @rename("strict_minimum")
        def constraint(value):
            if value <= minimum:
                raise ValueError(f"too small (must be more than {minimum})")
        return self.add_constraint(constraint)

    def set_maximum(self, maximum, /):
        @rename("maximum")
        def constraint(value):
            if value > maximum:
                raise ValueError(f"too large (must be at most {maximum})")
        return self.add_constraint(constraint)

    def set_strict_maximum(self, maximum, /):
        @rename("strict_maximum")
        def constraint(value):
            if value >= maximum:
                raise ValueError(f"too large (must be less than {maximum})")
        return self.add_constraint(constraint)

    def set_interval(self, lower, upper, /):
        if not lower < upper:
            raise ValueError(f"{type(self).__typename__} interval [{lower}, {upper}) is empty")

        @rename("interval")
        def constraint(value):
            if value < lower or value >= upper:
                raise ValueError(f"value is outside of interval [{lower}, {upper})")
        return self.add_constraint(constraint)

    def add_short_code(self, code, /):
        """
        Bind a one-character alias (-x) to this option; the code must be free
        in the owning schema.
        """
        self._parser._bind_short_code(code, self)
        return self

    def _join_exclusive(self, index, /):
        self._exclusive_indices.append(index)


__all__ = (
    "ArgInfo",
)

# Not part of the public API.
del ArgumentType
