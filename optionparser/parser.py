"""
optionparser schema builder and parse engine.

What this module provides
- OptionParser: a mutable schema of options, value types, modes (keyword
  selected sub-schemas), positional policy, wrapper flag and exclusivity
  groups, plus the engine that scans an argument vector against it.
- Namespace: the result of a successful parse (a dict with attribute access).
- UsageRequest: the result of a --help* request (a str carrying the rendered
  help, its topic and the schema it describes).
- invoke(parser, argv): host helper that turns outcomes into SystemExit.

Quick start
    from optionparser import OptionParser

    parser = OptionParser("move things around")
    parser.add_int("count", "number of times to run").set_minimum(0).add_short_code("n")
    parser.add_flag("verbose", "chatty output").add_short_code("v")

    values = parser.parse(["prog", "-vn", "3"])
    # values.count == 3, values.verbose is True

Scanning (one forward pass over a deque of tokens)
- "--"            end of options; the rest is positional (or wrapper) input.
- "-"             a positional argument (the program to run under a wrapper).
- "--name[=v]"    long option; "--no-name" negates a flag; --help* render usage.
- "-xyz"          cluster of short codes, validated as a whole before any of
                  its options is applied.
- anything else   mode keyword (modes), program to wrap (wrapper) or
                  positional argument (positional policy), in that priority.

Outcomes
- Namespace on success.
- UsageRequest after the usage handler ran (help was requested).
- None after the error handler ran (a ParseFault was raised while scanning).
  Handlers are resolved through the parent chain; exactly one handler call is
  made per failing parse.
"""
import difflib
import shlex
import sys
import warnings
from collections import deque
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from rich.console import Console

from .arguments import ArgInfo
from .faults import *
from .usage import program_name, render_all, render_mode_tree, render_usage
from .utils import *
from .valuetypes import BUILTIN_TYPES, ConverterType, FlagType, coerce_type, label_of

output = Console()

_HELP_TOPICS = ("help", "help-all", "help-hidden", "help-mode-tree")

_DECLARATION_KEYS = frozenset((
    "name",
    "type",
    "description",
    "mandatory",
    "repeated",
    "tolerate_repeated",
    "hidden",
    "default",
    "label",
    "short_codes",
    "callback",
    "settings",
    "constraints",
))

# result metadata and dict methods, which attribute access reaches first
_RESERVED = frozenset(("arguments", "mode", "mode_values", "full_mode")) | frozenset(
    name for name in dir(dict) if not name.startswith("_")
)


class Namespace(dict):
    """
    Parse result: canonical identifier -> value, readable as attributes.

    Extra attributes (never stored as keys)
    - arguments: captured positionals or the wrapped program's argv.
    - mode: selected mode keyword (canonical even when an alias was typed).
    - mode_values: Namespace of the selected mode (also stored under the
      mode keyword).
    - full_mode: slash-joined path of selected modes (top-level result only).

    These names and the dict methods (keys, items, get, ...) cannot be option
    identifiers or mode keywords.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.arguments = []
        self.mode = None
        self.mode_values = None
        self.full_mode = None

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __repr__(self):
        return f"{type(self).__name__}({super().__repr__()})"


class UsageRequest(str):
    """
    Rendered help returned by parse() when a --help* option was given.

    - str(request) / request.text: plain text.
    - request.render: the rich Text (styled when the schema is colorful).
    - request.topic: "help", "help-all", "help-hidden", "help-mode-tree" or
      "help-<mode>".
    - request.parser: the schema the help was requested from.
    """

    def __new__(cls, render, /, topic, parser):
        self = super().__new__(cls, render.plain)
        self.render = render
        self.topic = topic
        self.parser = parser
        return self

    @property
    def text(self):
        return str(self)


def display(request, /):
    """
    default usage handler: print the rendered help on stdout.
    """
    output.print(request.render, soft_wrap=True)


class OptionParser:
    """
    Schema of one command (or of one mode of a command) and its parse engine.

    Construction
    - OptionParser(description, *, short_description, naming, camel_case,
      permit_arguments, wrapper, types, args, program_name, error_handler,
      usage_handler, colorful, width)
    - naming picks the canonical identifier of each option name:
      "underscore" (default), "camel", "kebab", "identity" or a callable.
      Modes inherit their parent's convention unless they set one.
    - args declares options from mappings (see declare()).

    Lookups walk up the parent chain: value types, naming, handlers, colors
    and width all fall back to the enclosing schema.
    """

    def __init__(
            self,
            description=Unset,
            /,
            *,
            short_description=Unset,
            naming=Unset,
            camel_case=Unset,
            permit_arguments=True,
            wrapper=False,
            types=(),
            args=(),
            program_name=None,
            error_handler=None,
            usage_handler=None,
            colorful=Unset,
            width=Unset,
    ):
        if not isinstance(description, str | Unset):
            raise TypeError(f"{type(self).__name__} 'description' must be a string")
        if not isinstance(short_description, str | Unset):
            raise TypeError(f"{type(self).__name__} 'short_description' must be a string")
        if camel_case is not Unset:
            if naming is not Unset:
                raise TypeError(f"{type(self).__name__} accepts either 'naming' or 'camel_case', not both")
            naming = "camel" if camel_case else "underscore"
        if naming is not Unset:
            naming_convention(naming)
        if error_handler is not None and not callable(error_handler):
            raise TypeError(f"{type(self).__name__} 'error_handler' must be callable")
        if usage_handler is not None and not callable(usage_handler):
            raise TypeError(f"{type(self).__name__} 'usage_handler' must be callable")
        if width is not Unset and (not isinstance(width, int) or width < 20):
            raise ValueError(f"{type(self).__name__} 'width' must be an integer of at least 20")

        self._description = description
        self._short_description = short_description
        self._naming = naming
        self._convention = None
        self._options = {}
        self._types = {}
        self._modes = {}
        self._aliases = {}
        self._short_codes = {}
        self._exclusive = []
        self._positionals = True
        self._wrapper = False
        self._parent = None
        self._keyword = None
        self._program_name = program_name
        self._error_handler = error_handler
        self._usage_handler = usage_handler
        self._colorful = colorful
        self._width = width

        self._configure(types=types, args=args, permit_arguments=permit_arguments, wrapper=wrapper)

    def _configure(self, *, types=(), args=(), permit_arguments=True, wrapper=False):
        for type in types:
            if isinstance(type, tuple):
                self.register_type(*type)
            else:
                self.register_type(type)
        self.permit_arguments(permit_arguments)
        if wrapper:
            self.set_wrapper(wrapper)
        for declaration in args:
            self.declare(declaration)

    # === Introspection ===

    parent = mirror("parent")
    keyword = mirror("keyword")
    description = mirror("description")
    short_description = mirror("short_description")
    wrapper = mirror("wrapper")

    @property
    def positionals(self):
        """
        Positional policy: False, True, a value type or a tuple of value types.
        """
        return self._positionals

    @property
    def root(self):
        """
        The topmost schema of the mode tree this schema belongs to.
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Mode keywords from the root down to this schema (empty for the root).
        """
        path = []
        node = self
        while node._parent is not None:
            path.append(node._keyword)
            node = node._parent
        return tuple(reversed(path))

    @property
    def options(self):
        return list(self._options.values())

    @property
    def modes(self):
        return MappingProxyType(self._modes)

    @property
    def exclusive_groups(self):
        return [(required, list(members)) for required, members in self._exclusive]

    @property
    def program_name(self):
        return self._program_name

    @property
    def colorful(self):
        if self._colorful is not Unset:
            return bool(self._colorful)
        return self._parent.colorful if self._parent is not None else False

    @property
    def width(self):
        if self._width is not Unset:
            return self._width
        return self._parent.width if self._parent is not None else 80

    @property
    def naming(self):
        if self._convention is not None:
            return self._convention
        if self._naming is not Unset:
            return naming_convention(self._naming)
        return self._parent.naming if self._parent is not None else underscore

    def aliases_of(self, keyword, /):
        return tuple(alias for alias, target in self._aliases.items() if target == keyword)

    def __repr__(self):
        return "%s(path=%r, options=%r, modes=%r)" % (
            type(self).__name__,
            "/".join(self.path),
            [argument.name for argument in self._options.values()],
            list(self._modes),
        )

    # === Options ===

    def _identify(self, name, /, strict=True):
        if not isinstance(identifier := self.naming(name), str) or not identifier:
            if not strict:
                return None
            raise ValueError(f"naming convention turned option name {name!r} into an invalid identifier")
        return identifier

    def _resolve(self, name, /):
        try:
            return self._options[self._identify(name)]
        except KeyError:
            raise UnresolvedOptionError(f"option {name!r} is not declared") from None

    def add_generic(self, name, type, description=Unset, /):
        """
        Declare an option bound to a value type (a registered type name, a
        value type instance or a value type class) and return its ArgInfo
        for chained configuration.
        """
        if isinstance(type, str):
            if (value_type := self.lookup_type(type)) is None:
                raise UnknownTypeError(f"unknown value type {type!r} for option {name!r}")
        else:
            value_type = coerce_type(type)

        if not isinstance(name, str):
            raise TypeError("option name must be a string")
        # identifiers are stored canonical, so the convention is fixed from here on
        if self._convention is None:
            self._convention = self.naming
        identifier = self._identify(name.strip())
        if identifier in _RESERVED:
            raise ValueError(f"option name {name!r} is reserved (it would be shadowed by Namespace.{identifier})")
        if identifier in self._options:
            raise DuplicateOptionError(f"option {name!r} is already declared (as {identifier!r})")
        if identifier in self._modes:
            raise DuplicateOptionError(f"option {name!r} collides with mode {identifier!r}")

        argument = ArgInfo(name, value_type, description, identifier=identifier, parser=self)
        self._options[identifier] = argument
        return argument

    def add_string(self, name, description=Unset, /):
        return self.add_generic(name, "string", description)

    def add_int(self, name, description=Unset, /):
        return self.add_generic(name, "int", description)

    def add_float(self, name, description=Unset, /):
        return self.add_generic(name, "float", description)

    def add_flag(self, name, description=Unset, /):
        return self.add_generic(name, "flag", description)

    def add_arg_callback(self, name, label, description, callback, /):
        """
        Declare an option whose value is handed to callback(value, values,
        argument); the return value is stored.
        """
        if not callable(callback):
            raise TypeError("add_arg_callback() callback must be callable")
        argument = self.add_generic(name, "arg_callback", description).set_label(label)
        argument.callback = callback
        return argument

    def add_noarg_callback(self, name, description, callback, /):
        """
        Declare a presence-only option running callback(values, argument).
        """
        if not callable(callback):
            raise TypeError("add_noarg_callback() callback must be callable")
        argument = self.add_generic(name, "noarg_callback", description)
        argument.callback = callback
        return argument

    def add_preset(self, name, description, settings, /):
        """
        Declare a presence-only option writing several settings at once.
        Keys are option names and are canonicalized here.
        """
        if not isinstance(settings, Mapping):
            raise TypeError("add_preset() settings must be a mapping")
        argument = self.add_generic(name, "preset", description)
        argument.settings = {self._identify(key): value for key, value in settings.items()}
        return argument

    def declare(self, declaration, /):
        """
        Declare an option from a mapping:
        {name, type="string", description, mandatory, repeated,
         tolerate_repeated, hidden, default, label, short_codes, callback,
         settings, constraints}
        """
        if not isinstance(declaration, Mapping):
            raise TypeError("option declaration must be a mapping")
        if unknown := set(declaration) - _DECLARATION_KEYS:
            raise TypeError("unknown option declaration keys: %s" % ", ".join(sorted(unknown)))
        if "name" not in declaration:
            raise TypeError("option declaration requires a 'name'")

        argument = self.add_generic(
            declaration["name"],
            declaration.get("type", "string"),
            declaration.get("description", Unset),
        )
        if "callback" in declaration:
            argument.callback = declaration["callback"]
        if "settings" in declaration:
            argument.settings = {self._identify(key): value for key, value in declaration["settings"].items()}
        if "label" in declaration:
            argument.set_label(declaration["label"])
        if "repeated" in declaration:
            argument.set_repeated(declaration["repeated"])
        if "tolerate_repeated" in declaration:
            argument.set_tolerate_repeated(declaration["tolerate_repeated"])
        if "hidden" in declaration:
            argument.set_hidden(declaration["hidden"])
        if "mandatory" in declaration:
            argument.set_mandatory(declaration["mandatory"])
        if "default" in declaration:
            argument.set_default_value(declaration["default"])
        for constraint in declaration.get("constraints", ()):
            argument.add_constraint(constraint)
        for code in declaration.get("short_codes", ()):
            argument.add_short_code(code)
        return argument

    def add_short_alias(self, code, name, /):
        """
        Bind the short code -<code> to the option declared as <name>.
        """
        argument = self._resolve(name)
        self._bind_short_code(code, argument)
        return argument

    def _bind_short_code(self, code, argument, /):
        if not isinstance(code, str):
            raise TypeError("short code must be a string")
        if len(code) != 1 or code in "-=" or code.isspace():
            raise ValueError(f"invalid short code {code!r} (expected a single character other than '-' and '=')")
        if code in self._short_codes:
            raise DuplicateShortCodeError(
                f"short code '-{code}' is already bound to option {self._options[self._short_codes[code]].name!r}"
            )
        self._short_codes[code] = argument.identifier
        argument._short_codes.append(code)

    def set_exclusive(self, required, names, /):
        """
        Declare that at most one (exactly one when required) of the named
        options may be given.
        """
        if isinstance(names, str) or not isinstance(names, Iterable):
            raise TypeError("set_exclusive() names must be an iterable of option names")
        members = tuple(self._resolve(name) for name in names)
        if len(members) < 2:
            raise ValueError("set_exclusive() needs at least two options")

        index = len(self._exclusive)
        self._exclusive.append((bool(required), tuple(member.identifier for member in members)))
        for member in members:
            member._join_exclusive(index)
        return self

    # === Types ===

    def register_type(self, type, function=Unset, /):
        """
        Register a value type in this schema's table.

        Forms
        - register_type(instance_or_class)
        - register_type("name", function)  (function: str -> value)
        """
        value_type = coerce_type(type) if function is Unset else ConverterType(type, function)
        if value_type.name in self._types:
            raise DuplicateTypeError(f"value type {value_type.name!r} is already registered")
        self._types[value_type.name] = value_type
        return value_type

    def lookup_type(self, name, /):
        """
        Resolve a type name: local table, then the parent chain, then the
        builtin table. Returns None when nothing matches.
        """
        node = self
        while node is not None:
            if name in node._types:
                return node._types[name]
            node = node._parent
        return BUILTIN_TYPES.get(name)

    def _type_of(self, spec):
        if isinstance(spec, str):
            if (value_type := self.lookup_type(spec)) is None:
                raise UnknownTypeError(f"unknown value type {spec!r}")
            return value_type
        return coerce_type(spec)

    # === Trailing tokens ===

    def permit_arguments(self, spec=True, /):
        """
        Set the positional policy: False (none), True (any, kept as text), a
        type (repeatable positional of that type) or a list/tuple of types
        (fixed arity). Types may be given by name.
        """
        if isinstance(spec, bool):
            self._positionals = spec
        elif isinstance(spec, list | tuple):
            self._positionals = tuple(self._type_of(item) for item in spec)
        else:
            self._positionals = self._type_of(spec)
        return self

    def set_wrapper(self, wrapper=True, /):
        self._wrapper = bool(wrapper)
        if self._wrapper and self._modes:
            warnings.warn(
                "wrapper flag has no effect on a schema with modes (mode dispatch wins)",
                SchemaWarning,
                stacklevel=2,
            )
        return self

    # === Modes ===

    def add_mode(self, keyword, schema=None, updater=None, /):
        """
        Register a mode and return its schema.

        - schema: None (empty schema), a mapping of OptionParser keywords, or
          a detached OptionParser.
        - updater: optional callable receiving the mode schema.
        """
        if not isinstance(keyword, str):
            raise TypeError("mode keyword must be a string")
        if not keyword or keyword.startswith("-") or any(character.isspace() for character in keyword):
            raise ValueError(f"invalid mode keyword {keyword!r}")
        if keyword in self._modes or keyword in self._aliases:
            raise DuplicateModeError(f"mode {keyword!r} is already registered")
        if keyword in _RESERVED:
            raise ValueError(f"mode keyword {keyword!r} is reserved (it would be shadowed by Namespace.{keyword})")
        if keyword in self._options:
            raise DuplicateModeError(f"mode {keyword!r} collides with option {self._options[keyword].name!r}")
        if updater is not None and not callable(updater):
            raise TypeError("add_mode() updater must be callable")

        deferred = {}
        if schema is None:
            child = type(self)()
        elif isinstance(schema, Mapping):
            options = dict(schema)
            for key in ("types", "args", "permit_arguments", "wrapper"):
                if key in options:
                    deferred[key] = options.pop(key)
            child = type(self)(**options)
        elif isinstance(schema, OptionParser):
            child = schema
            if child._parent is not None:
                raise ParentError(f"schema for mode {keyword!r} already belongs to mode {'/'.join(child.path)!r}")
            if child is self.root:
                raise ParentError(f"schema for mode {keyword!r} cannot be one of its own ancestors")
        else:
            raise TypeError("add_mode() schema must be None, a mapping or an OptionParser")

        child._parent = self
        child._keyword = keyword
        self._modes[keyword] = child
        if self._wrapper:
            warnings.warn(
                "wrapper flag has no effect on a schema with modes (mode dispatch wins)",
                SchemaWarning,
                stacklevel=2,
            )
        if deferred:
            child._configure(**deferred)
        if updater is not None:
            updater(child)
        return child

    def add_mode_alias(self, alias, keyword, /):
        if keyword not in self._modes:
            raise UnknownModeKeywordError(f"cannot alias unknown mode {keyword!r}")
        if not isinstance(alias, str) or not alias or alias.startswith("-"):
            raise ValueError(f"invalid mode alias {alias!r}")
        if alias in self._modes or alias in self._aliases:
            raise DuplicateModeError(f"mode {alias!r} is already registered")
        self._aliases[alias] = keyword
        return self._modes[keyword]

    # === Handlers ===

    def set_error_handler(self, handler, /):
        if handler is not None and not callable(handler):
            raise TypeError("error handler must be callable")
        self._error_handler = handler
        return self

    def set_usage_handler(self, handler, /):
        if handler is not None and not callable(handler):
            raise TypeError("usage handler must be callable")
        self._usage_handler = handler
        return self

    def _handler(self, kind, /):
        node = self
        while node is not None:
            if (handler := getattr(node, f"_{kind}_handler")) is not None:
                return handler
            node = node._parent
        return report if kind == "error" else display

    # === Usage ===

    def render_usage(self, /, width=Unset, **options):
        return render_usage(self, width=coalesce(width, self.width), **options)

    def get_usage(self, /, width=Unset, **options):
        return self.render_usage(width=width, **options).plain

    def render_mode_tree(self, /, program=None):
        return render_mode_tree(self, program=program)

    def _usage_request(self, topic, /):
        match topic:
            case "help":
                render = self.render_usage()
            case "help-all":
                render = render_all(self, width=self.width, show_hidden=True)
            case "help-hidden":
                render = render_all(self, width=self.width, show_hidden=True, show_nonhidden=False)
            case "help-mode-tree":
                render = self.render_mode_tree()
            case _:
                keyword = topic.removeprefix("help-")
                render = self._modes[self._aliases.get(keyword, keyword)].render_usage()
        return UsageRequest(render, topic=topic, parser=self)

    # === Parsing ===

    def parse(self, argv=None, /):
        """
        Parse an argument vector.

        - argv: None (sys.argv), a list whose first element is the program
          path, or a shell-like string holding only the arguments.

        Returns a Namespace, a UsageRequest (help was requested) or None (an
        error was reported through the error handler).
        """
        if argv is None:
            tokens = sys.argv[1:]
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            tokens = list(argv)[1:]
        else:
            raise TypeError("parse() argument must be a list of strings or a string")
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must only contain strings")

        try:
            result = _Scanner(self, deque(tokens), 1).run()
        except ParseFault as fault:
            (fault.parser or self)._handler("error")(fault)
            return None

        if isinstance(result, UsageRequest):
            result.parser._handler("usage")(result)
            return result

        path, node = [], result
        while node.mode is not None:
            path.append(node.mode)
            node = node.mode_values
        result.full_mode = "/".join(path) if path else None
        return result


class _Scanner:
    """
    Per-invocation state of one schema's scan; a fresh instance per parse (and
    per selected mode) so schemas are never mutated while parsing.
    """

    def __init__(self, parser, tokens, index):
        self.parser = parser
        self.tokens = tokens
        self.index = index
        self.values = Namespace()
        self.seen = set()
        self.satisfied = {}
        self.moded = False
        for argument in parser.options:
            if argument.repeated:
                self.values[argument.identifier] = []

    def fault(self, type, message, /, **options):
        options.setdefault("index", self.index)
        return type(message, parser=self.parser, **options)

    def route(self):
        return " ".join((program_name(self.parser), *self.parser.path))

    def run(self):
        parser = self.parser
        while self.tokens:
            token = self.tokens.popleft()

            if token == "--":
                if parser.modes or not (parser.wrapper or parser.positionals is not False):
                    raise self.fault(
                        UnexpectedArgumentError,
                        "unexpected '--' at %s position" % ordinal(self.index),
                        hint="this command does not take positional arguments",
                        token=token,
                    )
                remaining, self.tokens = list(self.tokens), deque()
                if parser.wrapper:
                    self.values.arguments.extend(remaining)
                else:
                    for token in remaining:
                        self.index += 1
                        self.positional(token)
                break
            elif token == "-" and (parser.modes or not parser.wrapper):
                self.positional(token)
            elif token.startswith("--"):
                if (request := self.long(token)) is not None:
                    return request
            elif token.startswith("-") and token != "-":
                self.cluster(token)
            elif parser.modes:
                return self.mode(token)
            elif parser.wrapper:
                self.values.arguments.append(token)
                self.values.arguments.extend(self.tokens)
                self.tokens.clear()
                break
            else:
                self.positional(token)
            self.index += 1

        return self.finish()

    def long(self, token):
        parser = self.parser
        name, separator, value = token[2:].partition("=")
        value = value if separator else None
        argument = parser._options.get(parser._identify(name, strict=False)) if name else None
        preparsed = Unset

        if argument is None and name.startswith("no-"):
            flag = parser._options.get(parser._identify(name[3:], strict=False)) if name[3:] else None
            if flag is not None and isinstance(flag.type, FlagType):
                if value is not None:
                    raise self.fault(
                        InvalidValueError,
                        "negated flag %r at %s position cannot have a value" % ("--" + name, ordinal(self.index)),
                        hint="use '--%s' alone" % name,
                        token=token,
                    )
                argument, preparsed = flag, False

        if argument is None:
            if name in _HELP_TOPICS:
                return parser._usage_request(name)
            if name.startswith("help-"):
                keyword = name.removeprefix("help-")
                if keyword in parser.modes or keyword in parser._aliases:
                    return parser._usage_request(name)

            names = ["--" + option.name for option in parser.options]
            suggestions = difflib.get_close_matches("--" + name, names, 1)
            try:
                hint = "did you mean %r? run '%s --help' to see available options" % (suggestions[0], self.route())
            except IndexError:
                hint = "run '%s --help' to see available options" % self.route()
            raise self.fault(
                UnknownOptionError,
                "unknown option %r at %s position" % ("--" + name, ordinal(self.index)),
                hint=hint,
                token=token,
                suggestions=suggestions,
            )

        self.apply(argument, "--" + name, value, self.index, preparsed)

    def cluster(self, token):
        parser = self.parser
        arguments = []
        for code in token[1:]:
            try:
                arguments.append((code, parser._options[parser._short_codes[code]]))
            except KeyError:
                raise self.fault(
                    UnknownShortOptionError,
                    "unknown short option '-%s' in %r at %s position" % (code, token, ordinal(self.index)),
                    hint="run '%s --help' to see available options" % self.route(),
                    token=token,
                    code=code,
                ) from None

        needed = sum(argument.requires_argument() for _, argument in arguments)
        if needed > len(self.tokens):
            raise self.fault(
                InsufficientArgumentsError,
                "short options %r at %s position need %d %s but only %d %s left" % (
                    token,
                    ordinal(self.index),
                    needed,
                    "value" if needed == 1 else pluralize("value"),
                    len(self.tokens),
                    "is" if len(self.tokens) == 1 else "are",
                ),
                hint="give one value per short code that takes one, in order",
                token=token,
            )

        start = self.index
        for code, argument in arguments:
            self.apply(argument, "-" + code, None, start)

    def apply(self, argument, input, value, start, preparsed=Unset):
        """
        Consume, convert, check and store one occurrence of an option.
        """
        identifier = argument.identifier

        if value is None and preparsed is Unset and argument.requires_argument():
            if not self.tokens:
                raise self.fault(
                    MissingArgumentError,
                    "option %r at %s position requires a value" % (input, ordinal(start)),
                    hint="pass it as '%s=%s' or '%s %s'" % (input, argument.label, input, argument.label),
                    token=input,
                    index=start,
                )
            value = self.tokens.popleft()
            self.index += 1

        for group in argument.exclusive_indices:
            if (holder := self.satisfied.get(group, identifier)) != identifier:
                raise self.fault(
                    ExclusivityConflictError,
                    "option %r at %s position conflicts with '--%s'" % (
                        input, ordinal(start), self.parser._options[holder].name
                    ),
                    hint="give only one of: %s" % ", ".join(
                        "--" + self.parser._options[member].name for member in self.parser._exclusive[group][1]
                    ),
                    token=input,
                    index=start,
                )
            self.satisfied[group] = identifier

        # preparsed values (--no-<flag>) skip conversion and constraints
        if preparsed is not Unset:
            result = preparsed
        else:
            try:
                result = argument.type.parse(value, self.values, argument)
            except ParseFault:
                raise
            except Exception as exception:
                raise self.fault(
                    CallbackError if argument.type.invokes_callback else InvalidValueError,
                    "invalid value for option %r at %s position: %s" % (input, ordinal(start), exception),
                    hint="expected %s" % argument.label,
                    token=input,
                    index=start,
                    value=value,
                ) from exception

            for constraint in argument.constraints:
                try:
                    accepted = constraint(result)
                except ParseFault:
                    raise
                except Exception as exception:
                    raise self.fault(
                        ConstraintViolationError,
                        "bad value for option %r at %s position: %s" % (input, ordinal(start), exception),
                        token=input,
                        index=start,
                        value=value,
                    ) from exception
                if accepted is False:
                    raise self.fault(
                        ConstraintViolationError,
                        "bad value for option %r at %s position: rejected by %s" % (
                            input, ordinal(start), getattr(constraint, "__name__", "constraint")
                        ),
                        token=input,
                        index=start,
                        value=value,
                    )

        if identifier in self.seen and not (argument.repeated or argument.tolerate_repeated):
            raise self.fault(
                DuplicateArgumentError,
                "option %r at %s position was already provided" % (input, ordinal(start)),
                hint="give '--%s' only once" % argument.name,
                token=input,
                index=start,
            )
        self.seen.add(identifier)

        if argument.repeated:
            if not isinstance(self.values.get(identifier), list):
                self.values[identifier] = []
            self.values[identifier].append(result)
        else:
            self.values[identifier] = result

    def mode(self, token):
        parser = self.parser
        keyword = parser._aliases.get(token, token)
        if (child := parser.modes.get(keyword)) is None:
            keywords = [*parser.modes, *parser._aliases]
            suggestions = difflib.get_close_matches(token, keywords, 1)
            try:
                hint = "did you mean %r? run '%s --help' to see available modes" % (suggestions[0], self.route())
            except IndexError:
                hint = "expected one of: %s" % ", ".join(parser.modes)
            raise self.fault(
                UnknownModeError,
                "unknown mode %r at %s position" % (token, ordinal(self.index)),
                hint=hint,
                token=token,
                suggestions=suggestions,
            )

        result = _Scanner(child, self.tokens, self.index + 1).run()
        if isinstance(result, UsageRequest):
            return result

        self.moded = True
        self.values.mode = keyword
        self.values.mode_values = result
        self.values[keyword] = result
        return self.finish()

    def positional(self, token):
        parser = self.parser
        policy = parser.positionals
        if parser.modes or policy is False:
            raise self.fault(
                UnexpectedArgumentError,
                "unexpected argument %r at %s position" % (token, ordinal(self.index)),
                hint="run '%s --help' to see the expected usage" % self.route(),
                token=token,
            )
        if policy is True:
            self.values.arguments.append(token)
            return

        if isinstance(policy, tuple):
            if len(self.values.arguments) >= len(policy):
                raise self.fault(
                    TooManyArgumentsError,
                    "unexpected argument %r at %s position (expected %d)" % (token, ordinal(self.index), len(policy)),
                    hint="usage: %s %s" % (self.route(), " ".join(map(label_of, policy))),
                    token=token,
                )
            value_type = policy[len(self.values.arguments)]
        else:
            value_type = policy

        try:
            value = value_type.parse(token, self.values, None)
        except ParseFault:
            raise
        except Exception as exception:
            raise self.fault(
                InvalidValueError,
                "invalid %s argument %r at %s position: %s" % (label_of(value_type), token, ordinal(self.index), exception),
                token=token,
            ) from exception
        self.values.arguments.append(value)

    def finish(self):
        """
        Checks that need the whole input, then defaults.
        """
        parser = self.parser
        policy = parser.positionals

        if isinstance(policy, tuple) and not parser.modes and not parser.wrapper:
            if (count := len(self.values.arguments)) < len(policy):
                raise self.fault(
                    TooFewArgumentsError,
                    "expected %d %s but got %d" % (len(policy), pluralize("argument"), count),
                    hint="usage: %s %s" % (self.route(), " ".join(map(label_of, policy))),
                )

        for index, (required, members) in enumerate(parser._exclusive):
            if required and index not in self.satisfied:
                raise self.fault(
                    ExclusivityRequiredError,
                    "one of options %s is required" % ", ".join("--" + parser._options[member].name for member in members),
                    hint="give exactly one of them",
                )

        if parser.wrapper and not parser.modes and not self.values.arguments:
            raise self.fault(
                MissingWrapperTargetError,
                "missing program to run",
                hint="usage: %s [OPTIONS] PROGRAM PROGRAM_ARGUMENTS..." % self.route(),
            )

        for argument in parser.options:
            identifier = argument.identifier
            if argument.repeated:
                present = bool(self.values.get(identifier))
            else:
                present = identifier in self.values
            if argument.mandatory and not present:
                raise self.fault(
                    MissingMandatoryOptionError,
                    "missing mandatory option '--%s'" % argument.name,
                    hint="run '%s --help' to see the expected usage" % self.route(),
                    argument=argument,
                )
            if not present and argument.has_default:
                default = argument._default
                if argument.repeated:
                    self.values[identifier] = list(default) if isinstance(default, list | tuple) else [default]
                else:
                    self.values[identifier] = default
            self.values.setdefault(identifier, [] if argument.repeated else None)

        if parser.modes and not self.moded:
            raise self.fault(
                NoModeSelectedError,
                "no mode selected",
                hint="expected one of: %s" % ", ".join(parser.modes),
            )

        return self.values


def invoke(parser, argv=None, /):
    """
    Host helper: parse and exit on anything but success.

    - Namespace  -> returned.
    - UsageRequest -> SystemExit(0) (after the usage handler ran).
    - failure    -> SystemExit(2) (after the error handler ran).
    """
    if not isinstance(parser, OptionParser):
        raise TypeError("invoke() first argument must be an OptionParser")
    result = parser.parse(argv)
    if result is None:
        raise SystemExit(2)
    if isinstance(result, UsageRequest):
        raise SystemExit(0)
    return result


__all__ = (
    "OptionParser",
    "Namespace",
    "UsageRequest",
    "display",
    "invoke",
)
