"""
Arbor dispatcher: one command tree, one receiver, one set of hooks.

What this module provides
- Dispatcher: owns the root group of a command tree and runs commands typed as
  plain strings against it.
  • Registration: command(...) / group(...) attach top-level nodes (see arbor.nodes).
  • Resolution: resolve(command, arg) tokenizes, walks the tree, runs the selected
    action with (receiver, arg, tokens), and reports failures through the hooks.
  • Help: a built-in top-level "help" command renders the whole tree and hands it
    to the help hook.

Lifecycle
- Setup: build the tree and pass the configuration (paragraph, indent, matching,
  hooks) to the constructor; configuration is read-only afterwards.
- Run: the first resolve() seals the tree; from then on it is treated as
  immutable and may be shared by several threads resolving concurrently.

Quick start
    from arbor import Dispatcher, console_hooks

    tool = Dispatcher(state, paragraph="Git-like remote manager", hooks=console_hooks())
    remote = tool.group("remote", descr="Manage remotes")

    @remote.command("add", descr="Add a remote", metavar="URL", required=True).action
    def add(state, arg, tokens):
        state.remotes.extend(tokens)

    tool.resolve("remote add https://example.org/repo.git")
    tool.resolve("rem a origin")   # unique prefixes are enough
    tool.resolve("help")           # prints the aligned command listing
"""
from . import helps, resolver
from .nodes import Group
from .reporting import Hooks, report
from .resolver import Matching
from .utils import *


class Dispatcher:
    """
    Command-tree dispatcher parameterized over a receiver and a per-call argument.

    The dispatcher never interprets the receiver nor the argument: both are
    handed, untouched, to the selected action and to the hooks.

    Properties
    - receiver: object actions run against.
    - root: the root group (full identifier "").
    - identifiers: sorted top-level identifiers (always includes "help").
    - paragraph, indent, matching, hooks: the configuration given at construction.
    - sealed: whether the tree refuses further registration.
    """

    def __init__(
            self,
            receiver,
            /,
            *,
            paragraph="",
            indent=helps.INDENT,
            matching=Matching.PREFIX,
            hooks=Unset
    ):
        """
        Configure a dispatcher and register the built-in help command.

        Parameters
        - receiver: any
        - paragraph: str
          Free text printed above the "Commands:" listing by the help command.
        - indent: int
          Column where descriptions start in help output (non-negative).
        - matching: Matching | str
          Child selection policy, applied uniformly at every level.
        - hooks: Hooks | Unset
          Outcome callbacks; no hooks (silent dispatcher) when Unset.

        Raises
        - TypeError/ValueError on invalid configuration values.
        """
        if not isinstance(paragraph, str):
            raise TypeError("dispatcher 'paragraph' must be a string")
        if not isinstance(indent, int) or isinstance(indent, bool):
            raise TypeError("dispatcher 'indent' must be an integer")
        elif indent < 0:
            raise ValueError("dispatcher 'indent' cannot be negative")
        try:
            matching = Matching(matching)
        except ValueError:
            raise ValueError(
                "dispatcher 'matching' must be one of %s" % ", ".join(map(repr, map(str, Matching)))
            ) from None
        if not isinstance(hooks := coalesce(hooks, Hooks()), Hooks):
            raise TypeError("dispatcher 'hooks' must be a hooks bundle")

        self._receiver = receiver
        self._paragraph = paragraph
        self._indent = indent
        self._matching = matching
        self._hooks = hooks
        self._root = Group("")

        self._root.command("help", self._helper, descr="Print this help message")

    paragraph = mirror("paragraph")
    indent = mirror("indent")
    matching = mirror("matching")

    @property
    def receiver(self):
        return self._receiver

    @property
    def hooks(self):
        return self._hooks

    @property
    def root(self):
        return self._root

    @property
    def identifiers(self):
        return self._root.identifiers

    @property
    def sealed(self):
        return self._root._sealed

    def _helper(self, receiver, arg, tokens):
        """
        Action of the built-in help command: render the tree, call the help hook.
        """
        if self._hooks.help is not None:
            self._hooks.help(receiver, arg, self.help())

    def help(self):
        """
        Return the whole-tree help text (paragraph, "Commands:", every node).
        """
        return helps.render_tree(self._root, self._paragraph, self._indent)

    def seal(self):
        """
        Freeze the tree: later registrations and action bindings raise SealedTreeError.

        Called implicitly by the first resolve(); calling it again is harmless.
        """
        self._root._sealed = True
        return self

    def command(self, identifier, callback=Unset, /, **options):
        """
        Create a top-level leaf and return it. See Group.command.
        """
        return self._root.command(identifier, callback, **options)

    def group(self, identifier, /, **options):
        """
        Create a top-level group and return it. See Group.group.
        """
        return self._root.group(identifier, **options)

    def resolve(self, command, arg=None, /):
        """
        Run one command.

        Parameters
        - command: str | Iterable[str]
          Space-separated command line, or pre-split tokens.
        - arg: any
          Per-call value handed to the action and to the hooks.

        Returns
        - Outcome: Success when an action ran, otherwise the reported failure.

        Raises
        - UnboundActionError: the selected command has no bound action.
        - TypeError: command is neither a string nor an iterable of strings.
        """
        tokens = resolver.tokenize(command)
        self.seal()
        outcome = resolver.resolve(self._root, tokens, self._receiver, arg, self._matching)
        return report(outcome, self._receiver, arg, self._hooks)


__all__ = (
    "Dispatcher",
)
