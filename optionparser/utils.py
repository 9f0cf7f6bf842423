"""
optionparser utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the schema, the parse engine and the usage
  renderer so that sentinels, naming and message wording stay consistent.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables (constraints, handlers).

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as a copy.

- pluralize(text) / ordinal(number)
  • Message helpers: "argument" → "arguments", 3 → "third".

- Naming conventions
  • camel_case, underscore, kebab, identity: option name → canonical identifier.
  • naming_convention(spec): resolve a convention keyword or callable.

Stability and contract
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> underscore("this-option")
    'this_option'
    >>> camel_case("this-option")
    'thisOption'
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value (an option default can be
    None), but the API needs a way to distinguish “not provided” from “provided
    as None”. A single instance, Unset, is exposed.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator

    Generated constraint predicates and handlers use this so that reprs and
    tracebacks read "minimum" instead of "ArgInfo.set_minimum.<locals>.<lambda>".
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Hand out a one-level copy of schema state: tuples and lists come back as
    lists (ArgInfo.short_codes, a tuple default), mappings as dicts and sets as
    sets. Items are shared, so a list default holding dicts still exposes
    those dicts. Strings and scalars pass through.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return set(object)
    return object


def mirror(name, /):
    """
    Read-only property over "_{name}" for OptionParser and ArgInfo
    introspection (parent, keyword, description, short_codes, ...).

    The getter goes through _immortalize, so appending to
    argument.short_codes changes nothing; bind codes with add_short_code().
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def pluralize(text, /):
    """
    Best-effort English pluralizer for the last word of a message fragment.

    Examples
    - pluralize("argument")        -> "arguments"
    - pluralize("short code")      -> "short codes"
    - pluralize("ARGUMENT")        -> "ARGUMENTS"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")

    match = re.search(r'(\S+)(\s*)$', text)
    if not match:
        return text

    head, last, trail = text[:match.start(1)], match.group(1), match.group(2)
    lower = last.lower()

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if last.isupper():
        plural = plural.upper()
    elif last[:1].isupper():
        plural = plural[:1].upper() + plural[1:]

    return head + plural + trail


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def camel_case(name, /):
    """
    "this-option" -> "thisOption". Hyphens not followed by a lowercase letter
    are dropped ("a-1" -> "a1").
    """
    return re.sub(r"-([a-z])", lambda match: match[1].upper(), name).replace("-", "")


def underscore(name, /):
    """
    "this-option" -> "this_option".
    """
    return name.replace("-", "_")


def kebab(name, /):
    """
    "thisOption" / "this_option" -> "this-option".
    """
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).replace("_", "-").lower()


def identity(name, /):
    return name


_CONVENTIONS = {
    "camel": camel_case,
    "underscore": underscore,
    "kebab": kebab,
    "identity": identity,
}


def naming_convention(spec, /):
    """
    Resolve a naming convention keyword ("camel", "underscore", "kebab",
    "identity") or a custom callable into a callable str -> str.
    """
    if callable(spec):
        return spec
    if not isinstance(spec, str):
        raise TypeError("naming convention must be a string or a callable")
    try:
        return _CONVENTIONS[spec]
    except KeyError:
        raise ValueError(
            "unknown naming convention %r (expected one of: %s)" % (spec, ", ".join(_CONVENTIONS))
        ) from None


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "ordinal",
    "camel_case",
    "underscore",
    "kebab",
    "identity",
    "naming_convention",
    "UnsetType",
    "Unset",
)
