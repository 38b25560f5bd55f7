"""
Arbor faults (resolution outcomes and configuration errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure.
- Outcome and its kinds: the terminal result of one resolve() call.
  • Success: the bound action already ran; nothing to report.
  • InvalidCommand: unknown token under the exact matching policy.
  • BadCommand: unknown token under the prefix matching policy (keeps the context).
  • NeedsSubCommand: a group was selected but no sub-command followed.
  • TooManyMatches: a partial token matches more than one sibling.
- ConfigurationError and its kinds: programmer mistakes (unbound actions, late
  registration). These are raised, never reported through the outcome hooks.

UX goals
- Messages follow fixed templates so hosts can match them byte-for-byte.
- Every failure knows how to render itself with rich (header, message, hint),
  honoring a __styles__ mapping and a __codes__ mapping in __main__.

Integration
- The resolver returns outcomes; the reporter maps them to the host hooks; the
  host decides whether to print them (see arbor.reporting.console_hooks).
"""
import functools
import operator
import re
from collections import defaultdict
from enum import IntEnum

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import *


class FaultCode(IntEnum):
    """
    canonical fault codes for resolution failures (stable identifiers).

    grouping
    - routing (2110x)
      • BAD_COMMAND, INVALID_COMMAND
    - structure (2111x)
      • NEEDS_SUBCOMMAND, TOO_MANY_MATCHES

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (21xxx) ---
    BAD_COMMAND         = 21101
    INVALID_COMMAND     = 21102

    # --- structure errors (21xxx) ---
    NEEDS_SUBCOMMAND    = 21111
    TOO_MANY_MATCHES    = 21112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ConfigurationError(Exception):
    """
    the embedding application mis-built its command tree.

    never reported through the outcome hooks: resolution aborts with this exception.
    """


class UnboundActionError(ConfigurationError):
    """a command was reached during resolution with no bound action."""


class SealedTreeError(ConfigurationError):
    """a command was attached after the tree was sealed for resolution."""


class OutcomeType(type):
    """
    Metaclass giving every outcome kind a value-like, introspectable shape.

    Responsibilities
    - Expose the names listed in __introspectable__ as read-only properties
      mirroring the private backing fields (self._name).
    - Provide stable __repr__/__rich_repr__ built from those same names.
    - Derive __typename__ from the class name (camel-case split with hyphens).
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
            """
            Return a concise, stable representation.

            Example
            - bad-command(context='remote', token='ad')
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Outcome(metaclass=OutcomeType):
    """
    Terminal result of one resolution.

    Outcomes are immutable values: two outcomes are equal when they are of the
    same kind and carry equal fields. The message follows a fixed template per
    kind; code is the FaultCode of a failure (None for Success).
    """
    __slots__ = ()
    __title__ = ""
    code = None

    @property
    def message(self):
        raise NotImplementedError

    @property
    def hint(self):
        return ""

    def _key(self):
        return tuple(getattr(self, name) for name in type(self).__introspectable__)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self), self._key()))

    def __bool__(self):
        """
        Truthy only for Success, so callers can write `if dispatcher.resolve(...)`.
        """
        return False

    def render(self, *, colorful=True, fancy=False, width=None):
        """
        Build a rich renderable for this failure.

        Palette keys
        - prog-name, code, error-title, error-message, hint-arrow, hint

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - Define __prog__ in __main__ to replace the program name in the header.
        - When colorful is False, styling is suppressed.
        """
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

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "arbor"), "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.__title__.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left", width=width)
        return Group(header, message, hint)

    def __rich__(self):
        return self.render()


class Success(Outcome):
    """
    The bound action ran. There is a single Success value.
    """
    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    @property
    def message(self):
        return ""

    def __bool__(self):
        return True

    def render(self, *, colorful=True, fancy=False, width=None):
        return Text("")


class InvalidCommand(Outcome):
    """
    No child matched the token exactly (nor by alias) and no fallback action was bound.
    """
    __slots__ = ("_token",)
    __title__ = "invalid command"
    __introspectable__ = ("token",)
    code = FaultCode.INVALID_COMMAND

    def __init__(self, token, /):
        self._token = token

    @property
    def message(self):
        return "Bad Command: %s" % self.token

    @property
    def hint(self):
        return "try 'help' to see all available commands"


class BadCommand(Outcome):
    """
    No child of the context group starts with the token.

    The context is the full identifier of the group where matching failed; it is
    empty at the top level and then left out of the message.
    """
    __slots__ = ("_context", "_token")
    __title__ = "bad command"
    __introspectable__ = ("context", "token")
    code = FaultCode.BAD_COMMAND

    def __init__(self, context, token, /):
        self._context = context
        self._token = token

    @property
    def message(self):
        return "Bad Command: %s" % " ".join(filter(None, (self.context, self.token)))

    @property
    def hint(self):
        if self.context:
            return "try 'help' to see the sub-commands of '%s'" % self.context
        return "try 'help' to see all available commands"


class NeedsSubCommand(Outcome):
    """
    A group without an action of its own was selected, and no token followed it.
    """
    __slots__ = ("_group",)
    __title__ = "missing sub-command"
    __introspectable__ = ("group",)
    code = FaultCode.NEEDS_SUBCOMMAND

    def __init__(self, group, /):
        self._group = group

    @property
    def message(self):
        # The root has an empty full identifier; keep a single space around it.
        name = " ".join(filter(None, ("Command", self.group.full_identifier)))
        return "%s requires a sub-command: [%s]" % (name, ", ".join(self.group.identifiers))

    @property
    def hint(self):
        return "add one of: %s" % ", ".join(self.group.identifiers)


class TooManyMatches(Outcome):
    """
    The token is a prefix of more than one child of the context group.

    candidates are the matching identifiers, sorted lexicographically.
    """
    __slots__ = ("_context", "_token", "_candidates")
    __title__ = "ambiguous command"
    __introspectable__ = ("context", "token", "candidates")
    code = FaultCode.TOO_MANY_MATCHES

    def __init__(self, context, token, candidates, /):
        self._context = context
        self._token = token
        self._candidates = sorted(candidates)

    @property
    def message(self):
        return "Partial command %s matches more than one command: [%s]" % (
            " ".join(filter(None, (self.context, self.token))),
            ", ".join(self.candidates)
        )

    @property
    def hint(self):
        return "type more characters to pick one of: %s" % ", ".join(self.candidates)


__all__ = (
    "FaultCode",
    "ConfigurationError",
    "UnboundActionError",
    "SealedTreeError",
    "Outcome",
    "Success",
    "InvalidCommand",
    "BadCommand",
    "NeedsSubCommand",
    "TooManyMatches",
)
