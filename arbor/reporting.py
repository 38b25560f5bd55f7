"""
Arbor reporting: hand resolution outcomes to the embedding application.

Scope
- Hooks: the immutable bundle of callbacks a dispatcher reports to.
  Every hook is called as hook(receiver, arg, message) and may be None.
- report(): calls exactly one hook per outcome; an unset hook drops the outcome.
  • Success                   → success (empty message; the action already ran)
  • InvalidCommand/BadCommand → bad_command
  • NeedsSubCommand           → needs_subcommand
  • TooManyMatches            → too_many_matches
  The help hook is only called by the built-in help command.
- console_hooks(): a ready-made bundle printing through rich consoles (help to
  stdout, failures to stderr), for hosts that want shell-like behavior.

There is no implicit output: nothing is printed unless the host wires hooks.
"""
from collections import defaultdict, namedtuple

from rich.console import Console
from rich.text import Text

from .faults import *
from .utils import *

console = Console(stderr=True)


class Hooks(namedtuple("Hooks", (
    "success",
    "bad_command",
    "needs_subcommand",
    "too_many_matches",
    "help",
), defaults=(None, None, None, None, None))):
    """
    Callbacks invoked with (receiver, arg, message) for each outcome kind.

    Fields are set once, at construction: use _replace() to derive a new bundle.
    """
    __slots__ = ()

    def __new__(cls, *args, **kwargs):
        self = super().__new__(cls, *args, **kwargs)
        for name, hook in zip(self._fields, self):
            if hook is not None and not callable(hook):
                raise TypeError(f"hooks {name!r} must be callable")
        return self

    @classmethod
    def _make(cls, iterable):
        # _replace() builds through _make(), which would bypass __new__.
        return cls(*iterable)


def report(outcome, receiver, arg, hooks, /):
    """
    Translate outcome into a call on the matching hook.

    Returns
    - the outcome itself, so callers can chain on it.

    Raises
    - TypeError: when outcome is not an Outcome.
    """
    match outcome:
        case Success():
            hook = hooks.success
        case InvalidCommand() | BadCommand():
            hook = hooks.bad_command
        case NeedsSubCommand():
            hook = hooks.needs_subcommand
        case TooManyMatches():
            hook = hooks.too_many_matches
        case _:
            raise TypeError("report() argument must be an outcome")
    if hook is not None:
        hook(receiver, arg, outcome.message)
    return outcome


def console_hooks(stdout=Unset, stderr=Unset, /, *, colorful=True):
    """
    Build hooks printing help and failures through rich.

    Parameters
    - stdout: Console | Unset
      Console receiving the help text (a fresh stdout console when Unset).
    - stderr: Console | Unset
      Console receiving failures (the module stderr console when Unset).
    - colorful: bool
      Style failures with the "error-mark"/"error-message" palette entries,
      overridable through a __styles__ mapping in __main__.

    Messages are printed as plain Text, never parsed as rich markup, so
    placeholders like [NAME] survive untouched.
    """
    stdout = coalesce(stdout, Console())
    stderr = coalesce(stderr, console)

    styles = defaultdict(str, {
        "error-mark": "bold #FF4DA6",  # friendly pinky mark
        "error-message": "#C8C8D0",  # soft light gray message
    } | getattr(__import__("__main__"), "__styles__", {}))

    @rename("help")
    def help(receiver, arg, message):
        stdout.print(Text(message), soft_wrap=True)

    @rename("failure")
    def failure(receiver, arg, message):
        if not colorful:
            return stderr.print(Text(message), soft_wrap=True)
        stderr.print(Text.assemble(("✗ ", styles["error-mark"]), (message, styles["error-message"])), soft_wrap=True)

    return Hooks(
        bad_command=failure,
        needs_subcommand=failure,
        too_many_matches=failure,
        help=help,
    )


__all__ = (
    "Hooks",
    "report",
    "console_hooks",
)
