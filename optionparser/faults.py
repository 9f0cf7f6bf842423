"""
optionparser faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  error. Codes are grouped by domain to keep copy consistent and make logs and
  searches predictable.
- ParseFault: base type for user-input errors found while scanning an argument
  vector. Faults carry a message, a title, a hint and the schema they were
  raised from, and know how to render themselves with rich.
- SchemaError: programmer errors found while building a schema (duplicate
  option, unknown type, ...). These are raised immediately and never routed
  through an error handler.
- SchemaWarning: advisories emitted through the warnings module while a schema
  is built (e.g. a default value on a mandatory option can never apply).
- report() / escalate(): stock error handlers.

UX goals
- Position-first messages: parse faults name the ordinal position of the
  offending token (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parse engine raises ParseFault subclasses internally; OptionParser.parse
  catches the fault once and hands it to the error handler resolved through the
  parent chain. A handler may print and return (parse then returns None) or
  raise (the exception reaches the caller of parse).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .usage import program_name
from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the parse engine (stable identifiers).

    grouping (by high-level domain)
    - modes (1110x)
      • UNKNOWN_MODE, NO_MODE_SELECTED
    - options (1111x)
      • UNKNOWN_OPTION, UNKNOWN_SHORT_OPTION, MISSING_ARGUMENT,
        INSUFFICIENT_ARGUMENTS, DUPLICATE_ARGUMENT, MISSING_MANDATORY_OPTION
    - positionals (1112x)
      • UNEXPECTED_ARGUMENT, TOO_MANY_ARGUMENTS, TOO_FEW_ARGUMENTS,
        MISSING_WRAPPER_TARGET
    - values (1113x)
      • INVALID_VALUE, CONSTRAINT_VIOLATION, CALLBACK_ERROR
    - exclusivity (1114x)
      • EXCLUSIVITY_CONFLICT, EXCLUSIVITY_REQUIRED

    normalize() allows the host to remap codes to custom labels while keeping
    the numeric identity stable.
    """
    # --- mode errors (1110x) ---
    UNKNOWN_MODE                = 11101
    NO_MODE_SELECTED            = 11102

    # --- option errors (1111x) ---
    UNKNOWN_OPTION              = 11111
    UNKNOWN_SHORT_OPTION        = 11112
    MISSING_ARGUMENT            = 11113
    INSUFFICIENT_ARGUMENTS      = 11114
    DUPLICATE_ARGUMENT          = 11115
    MISSING_MANDATORY_OPTION    = 11116

    # --- positional errors (1112x) ---
    UNEXPECTED_ARGUMENT         = 11121
    TOO_MANY_ARGUMENTS          = 11122
    TOO_FEW_ARGUMENTS           = 11123
    MISSING_WRAPPER_TARGET      = 11124

    # --- value errors (1113x) ---
    INVALID_VALUE               = 11131
    CONSTRAINT_VIOLATION        = 11132
    CALLBACK_ERROR              = 11133

    # --- exclusivity errors (1114x) ---
    EXCLUSIVITY_CONFLICT        = 11141
    EXCLUSIVITY_REQUIRED        = 11142

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseFault(Exception):
    """
    Base class of every parse-time (user input) error.

    Attributes
    - message: lowercased, one-sentence description (also str(fault)).
    - code: FaultCode of the concrete fault type.
    - title: short heading used by the renderer.
    - hint: actionable next step, or None.
    - options: read-only mapping of context (parser, token, index, argument, ...).
    """
    code = None
    title = "parse error"

    def __init__(self, message, /, *, hint=Unset, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    @property
    def parser(self):
        """
        The schema whose scan raised this fault (None when raised by user code).
        """
        return self.options.get("parser")

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = bool(getattr(self.parser, "colorful", False))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        if self.parser is not None:
            program = program_name(self.parser, self.options.get("program"))
        else:
            program = getattr(main, "__prog__", None) or self.options.get("program") or "optionparser"
        code = self.code.normalize() if self.code is not None else "-"

        header = Text.assemble(
            "[ ",
            text(program, "prog-name"),
            " — ",
            text(code, "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        if not self.hint:
            return Group(header, message)
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))
        return Group(header, message, hint)


class UnknownOptionError(ParseFault):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"
class UnknownShortOptionError(ParseFault):
    code = FaultCode.UNKNOWN_SHORT_OPTION
    title = "unknown short option"
class UnknownModeError(ParseFault):
    code = FaultCode.UNKNOWN_MODE
    title = "unknown mode"
class NoModeSelectedError(ParseFault):
    code = FaultCode.NO_MODE_SELECTED
    title = "no mode selected"
class MissingArgumentError(ParseFault):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"
class InsufficientArgumentsError(ParseFault):
    code = FaultCode.INSUFFICIENT_ARGUMENTS
    title = "insufficient arguments"
class DuplicateArgumentError(ParseFault):
    code = FaultCode.DUPLICATE_ARGUMENT
    title = "duplicate argument"
class MissingMandatoryOptionError(ParseFault):
    code = FaultCode.MISSING_MANDATORY_OPTION
    title = "missing mandatory option"
class UnexpectedArgumentError(ParseFault):
    code = FaultCode.UNEXPECTED_ARGUMENT
    title = "unexpected argument"
class TooManyArgumentsError(ParseFault):
    code = FaultCode.TOO_MANY_ARGUMENTS
    title = "too many arguments"
class TooFewArgumentsError(ParseFault):
    code = FaultCode.TOO_FEW_ARGUMENTS
    title = "too few arguments"
class MissingWrapperTargetError(ParseFault):
    code = FaultCode.MISSING_WRAPPER_TARGET
    title = "missing program"
class InvalidValueError(ParseFault):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"
class CallbackError(InvalidValueError):
    code = FaultCode.CALLBACK_ERROR
    title = "callback failed"
class ConstraintViolationError(ParseFault):
    code = FaultCode.CONSTRAINT_VIOLATION
    title = "bad value"
class ExclusivityConflictError(ParseFault):
    code = FaultCode.EXCLUSIVITY_CONFLICT
    title = "conflicting options"
class ExclusivityRequiredError(ParseFault):
    code = FaultCode.EXCLUSIVITY_REQUIRED
    title = "missing one of options"


class SchemaError(ValueError):
    """
    Raised while a schema is being built; indicates a bug in the calling
    application rather than bad user input.
    """
class DuplicateOptionError(SchemaError): ...
class DuplicateModeError(SchemaError): ...
class DuplicateTypeError(SchemaError): ...
class DuplicateShortCodeError(SchemaError): ...
class UnknownTypeError(SchemaError): ...
class UnresolvedOptionError(SchemaError): ...
class UnknownModeKeywordError(SchemaError): ...
class ParentError(SchemaError): ...


class SchemaWarning(UserWarning):
    """
    Advisory emitted while building a schema; parsing still works but some
    declaration has no effect.
    """


def report(fault, /):
    """
    default error handler: render the fault and the usage of the failing
    schema on stderr, then return (parse() returns None).
    """
    if not isinstance(fault, ParseFault):
        raise TypeError("report() argument must be a parse fault")
    console.print(fault)
    if fault.parser is not None:
        console.print()
        console.print(fault.parser.render_usage(program=fault.options.get("program")))


def escalate(fault, /):
    """
    strict error handler: raise the fault so the caller of parse() receives it.
    """
    if not isinstance(fault, ParseFault):
        raise TypeError("escalate() argument must be a parse fault")
    raise fault


__all__ = (
    "FaultCode",
    "ParseFault",
    "UnknownOptionError",
    "UnknownShortOptionError",
    "UnknownModeError",
    "NoModeSelectedError",
    "MissingArgumentError",
    "InsufficientArgumentsError",
    "DuplicateArgumentError",
    "MissingMandatoryOptionError",
    "UnexpectedArgumentError",
    "TooManyArgumentsError",
    "TooFewArgumentsError",
    "MissingWrapperTargetError",
    "InvalidValueError",
    "CallbackError",
    "ConstraintViolationError",
    "ExclusivityConflictError",
    "ExclusivityRequiredError",
    "SchemaError",
    "DuplicateOptionError",
    "DuplicateModeError",
    "DuplicateTypeError",
    "DuplicateShortCodeError",
    "UnknownTypeError",
    "UnresolvedOptionError",
    "UnknownModeKeywordError",
    "ParentError",
    "SchemaWarning",
    "report",
    "escalate",
)
