"""
Arbor resolver: walk a command tree with a token stream.

Algorithm (resolving group G against the remaining tokens T)
1. T is empty: run G's own action when one is bound, otherwise the outcome is
   NeedsSubCommand(G).
2. Select the children of G matching T[0] under the dispatcher's policy:
   • Matching.PREFIX: identifier starts with the token (case-sensitive).
     one match → recurse; none → BadCommand; several → TooManyMatches.
   • Matching.EXACT: token equals identifier or alias (case-insensitive).
     one match → recurse; none → G's own action with all of T, or InvalidCommand.
3. A leaf consumes all remaining tokens and runs its action → Success.
4. Running a node without a bound action raises UnboundActionError: that is a
   configuration mistake, never a user-facing outcome.

Every level consumes exactly one token, so the walk always terminates. The
walk keeps no state between calls: identical trees and inputs give identical
outcomes.
"""
from collections.abc import Iterable
from enum import StrEnum

from .faults import *
from .nodes import Leaf, Group


class Matching(StrEnum):
    """
    How a token selects a child among its siblings.

    - PREFIX: unique prefix of the identifier, ambiguity is reported.
    - EXACT: whole identifier or alias, ignoring case; unknown tokens may fall
      back to the parent group's own action.
    """
    PREFIX = "prefix"
    EXACT = "exact"


def tokenize(command, /):
    """
    Split a raw command into tokens.

    - str: split on literal spaces, empty tokens dropped (no quoting/escaping).
    - Iterable[str]: each item stripped, empty items dropped.

    Raises
    - TypeError: when command is neither a string nor an iterable of strings.
    """
    if isinstance(command, str):
        return tuple(token for token in command.split(" ") if token)
    if not isinstance(command, Iterable):
        raise TypeError("tokenize() argument must be a string or an iterable of strings")

    tokens = []
    for item in command:
        if not isinstance(item, str):
            raise TypeError("tokenize() argument must be a string or an iterable of strings")
        if item := item.strip():
            tokens.append(item)
    return tuple(tokens)


def _run(node, receiver, arg, tokens):
    """
    Invoke the action bound to node with the unconsumed tokens.
    """
    if not node.bound:
        raise UnboundActionError(
            f"{type(node).__typename__} {node.full_identifier!r} was selected but has no bound action"
        )
    node.callback(receiver, arg, tokens)
    return Success()


def _select_prefix(group, token):
    """
    Children of group whose identifier starts with token, sorted by identifier.
    """
    return [child for identifier, child in group.children.items() if identifier.startswith(token)]


def _select_exact(group, token):
    """
    Children of group named token (or aliased to it), ignoring case.
    """
    token = token.casefold()
    return [
        child for child in group.children.values()
        if token == child.identifier.casefold() or token == (child.alias or "").casefold()
    ]


def resolve(node, tokens, receiver, arg, /, matching=Matching.PREFIX):
    """
    Resolve tokens against node and run the selected action.

    Parameters
    - node: Leaf | Group
      Where the walk starts (usually the root group).
    - tokens: Sequence[str]
      Already tokenized input; see tokenize().
    - receiver, arg: passed through, untouched, to the action.
    - matching: Matching
      Selection policy applied at every level.

    Returns
    - Outcome: Success when an action ran, otherwise the failure kind.

    Raises
    - UnboundActionError: when the selected node has no bound action.
    """
    matching = Matching(matching)
    tokens = tuple(tokens)

    while True:
        match node:
            case Leaf():
                return _run(node, receiver, arg, tokens)
            case Group() if not tokens:
                if node.requires_subcommand:
                    return NeedsSubCommand(node)
                return _run(node, receiver, arg, ())
            case Group():
                head, rest = tokens[0], tokens[1:]
                match matching:
                    case Matching.PREFIX:
                        candidates = _select_prefix(node, head)
                        if not candidates:
                            return BadCommand(node.full_identifier, head)
                        if len(candidates) > 1:
                            return TooManyMatches(
                                node.full_identifier, head, [child.identifier for child in candidates]
                            )
                    case Matching.EXACT:
                        candidates = _select_exact(node, head)
                        if not candidates:
                            if node.bound:
                                return _run(node, receiver, arg, tokens)
                            return InvalidCommand(head)
                node, tokens = candidates[0], rest
            case _:
                raise TypeError(f"resolve() cannot walk a {type(node).__name__!r} object")


__all__ = (
    "Matching",
    "tokenize",
    "resolve",
)
