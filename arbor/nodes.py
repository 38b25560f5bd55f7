"""
Arbor command nodes: the static shape of a command surface.

What this module provides
- Leaf: a command bound to an action, terminal in the tree.
- Group: a command whose behavior is selecting among named children; it may also
  carry an action of its own, in which case it no longer requires a sub-command.
- Registration builders on Group: command(...) and group(...), each returning the
  new node so it can be configured further (bind its action, add children).

Core ideas
- Data, not behavior: nodes only compute their full identifier and expose a
  sorted view of their children. Matching lives in arbor.resolver and layout in
  arbor.helps, both dispatching on the node kind.
- Ownership flows down: a group holds its children, a child only keeps a weak
  reference to its parent (used for full identifiers and error context).
- Build once: nodes are attached during setup; once the owning tree is sealed
  (first resolution), attaching or binding raises SealedTreeError.

Quick start
    from arbor.nodes import Group

    root = Group("")
    remote = root.group("remote", descr="Manage remotes")
    add = remote.command("add", descr="Add a remote", metavar="URL", required=True)

    @add.action
    def on_add(receiver, arg, tokens):
        ...

    add.full_identifier  # "remote add"

    Keep a reference to the root: parents are weak references, so an unnamed
    chain like Group("").group("a").command("b") loses its ancestors. A
    Dispatcher holds its root for you.
"""
import functools
import operator
import re
import weakref
from types import MappingProxyType

from .faults import SealedTreeError
from .utils import *


class NodeType(type):
    """
    Metaclass that turns node classes into introspectable, read-only shapes.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      for consistent labels in validation messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            - leaf(identifier='add', full_identifier='remote add', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_identifier(cls, metadata, /):
    """
    Internal: validate and normalize the identifier and alias of a node.

    Rules
    - identifier: required string, trimmed, without inner whitespace (tokens are
      split on spaces, so such a name could never be typed). It may be empty only
      for a root group (no parent).
    - alias: Unset or a non-empty string without whitespace; becomes None when Unset.

    Raises
    - TypeError: when a value is not a string.
    - ValueError: when a value is empty after trimming or contains whitespace.
    """
    if not isinstance(identifier := metadata["identifier"], str):
        raise TypeError(f"{cls.__typename__} 'identifier' must be a string")
    identifier = identifier.strip()
    if not identifier and metadata["parent"] is not Unset:
        raise ValueError(f"{cls.__typename__} 'identifier' cannot be empty")
    if re.search(r"\s", identifier):
        raise ValueError(f"{cls.__typename__} 'identifier' cannot contain whitespace")
    metadata["identifier"] = identifier

    if not isinstance(alias := metadata["alias"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'alias' must be a string")
    elif isinstance(alias, str):
        if not (alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} 'alias' cannot be empty")
        if re.search(r"\s", alias):
            raise ValueError(f"{cls.__typename__} 'alias' cannot contain whitespace")
    metadata["alias"] = coalesce(alias)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the help metadata shared by every node.

    - descr: Unset or string; trimmed; defaults to "" (help shows nothing).
    - metavar: Unset or non-empty string; becomes None when Unset.
    - required: coerced to bool; only meaningful with a metavar.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = coalesce(descr, "").strip()

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    metadata["required"] = bool(metadata["required"])


def _attach_to_parent(self, parent):
    """
    Register this node under its parent, enforcing unique names among siblings.

    Behavior
    - Refuses to attach once the owning tree is sealed.
    - Refuses an identifier or alias that equals (case-insensitively) any
      sibling identifier or alias, so every node stays reachable by its own name
      under either matching policy.
    """
    if parent.root._sealed:
        raise SealedTreeError(
            f"{type(self).__typename__} {self.identifier!r} cannot be attached to a sealed tree"
        )

    if self.identifier in parent._children:
        typeof = "sub-command" if parent.parent else "command"
        raise ValueError(f"{type(self).__typename__} {typeof} name {self.identifier!r} is already in use")

    names = {name.casefold(): name for name in (self.identifier, self.alias) if name}
    for sibling in parent._children.values():
        for taken in filter(None, (sibling.identifier, sibling.alias)):
            if taken.casefold() in names:
                raise ValueError(
                    f"{type(self).__typename__} name {names[taken.casefold()]!r} "
                    f"clashes with {sibling.full_identifier!r}"
                )

    parent._children[self.identifier] = self


class Node(metaclass=NodeType):
    """
    Fields shared by every command node.

    Identity
    - identifier: the token a user types to select this node among its siblings.
    - alias: optional alternate token (only the exact matching policy uses it).
    - full_identifier: the identifiers from the top level down to this node,
      space-joined; computed once when the node is attached.

    Help
    - descr: one-line description ("" when not given).
    - metavar / required: argument placeholder, printed NAME when required and
      [NAME] otherwise.

    Action
    - callback: Unset until bound through action(); called as
      callback(receiver, arg, tokens) with the unconsumed tokens.
    """
    __introspectable__ = (
        "identifier",
        "alias",
        "full_identifier",
        "descr",
        "metavar",
        "required",
        "callback",
    )

    def __new__(
            cls,
            identifier,
            /,
            parent=Unset,
            *,
            descr=Unset,
            metavar=Unset,
            required=False,
            alias=Unset
    ):
        """
        Construct a node and attach it under parent (when given).

        Parameters
        - identifier: str
          Name typed by the user; must not contain whitespace.
        - parent: Group | Unset
          Group that owns this node. Unset only for a root group.
        - descr, metavar, alias: str | Unset
          Help text, argument placeholder, and alternate name.
        - required: bool
          Whether the placeholder is printed bare (NAME) or bracketed ([NAME]).

        Raises
        - TypeError/ValueError on invalid metadata or duplicate sibling names.
        - SealedTreeError when the parent's tree is already sealed.
        """
        if not isinstance(parent, Group | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a group")
        if parent is Unset and cls is not Group:
            raise TypeError(f"{cls.__typename__} must be attached to a group")

        metadata = {
            "identifier": identifier,
            "parent": parent,
            "descr": descr,
            "metavar": metavar,
            "required": required,
            "alias": alias,
        }
        _sanitize_identifier(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        self._parent = weakref.ref(parent) if parent is not Unset else None
        self._identifier = metadata["identifier"]
        self._alias = metadata["alias"]
        self._descr = metadata["descr"]
        self._metavar = metadata["metavar"]
        self._required = metadata["required"]
        self._callback = Unset
        self._full_identifier = " ".join(
            filter(None, (getattr(coalesce(parent), "full_identifier", ""), self._identifier))
        )
        return self

    @property
    def parent(self):
        """
        The owning group, or None for a root (or when the owner was collected).
        """
        return self._parent() if self._parent else None

    @property
    def root(self):
        """
        Return the topmost group of the tree this node belongs to.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        The ancestry from the first top-level node down to this node.

        The root group itself is not part of the path, so len(path) equals the
        number of tokens in full_identifier.
        """
        path = []
        node = self
        while node.parent:
            path.append(node)
            node = node.parent
        return tuple(reversed(path))

    @property
    def bound(self):
        """
        Whether an action was bound to this node.
        """
        return self._callback is not Unset

    def action(self, callback, /):
        """
        Bind the action run when resolution selects this node.

        Rules
        - Must be callable.
        - Can be set only once per node (cannot be overridden).
        - Cannot be set once the tree is sealed.

        Returns
        - The same callable, enabling decorator-style usage: @node.action
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        if self._callback is not Unset:
            raise TypeError(f"{type(self).__typename__} action cannot be overridden")
        if self.root._sealed:
            raise SealedTreeError(
                f"{type(self).__typename__} {self.full_identifier!r} cannot be bound in a sealed tree"
            )
        self._callback = callback
        return callback

    def __bool__(self):
        return True


class Leaf(Node):
    """
    A command bound to an action; terminal in the tree.

    A leaf consumes every token that follows it: they are handed to its action
    as opaque arguments.
    """
    __introspectable__ = Node.__introspectable__

    def __new__(cls, identifier, /, parent=Unset, *, callback=Unset, **options):
        self = super().__new__(cls, identifier, parent, **options)
        # Bound first: a rejected callback must leave the parent untouched.
        if callback is not Unset:
            self.action(callback)
        _attach_to_parent(self, parent)
        return self


class Group(Node):
    """
    A command whose behavior is selecting among named children.

    Children are kept in registration order internally, but every public view
    (children, identifiers) is sorted by identifier: registration order never
    influences matching or help.

    A group owns its children but not its parent: whoever builds a standalone
    root group must keep it alive for as long as the tree is used.
    """
    __introspectable__ = Node.__introspectable__ + ("identifiers",)
    __displayable__ = ("identifier", "full_identifier", "descr", "identifiers")

    def __new__(cls, identifier, /, parent=Unset, **options):
        self = super().__new__(cls, identifier, parent, **options)
        self._children = {}
        self._sealed = False
        if parent is not Unset:
            _attach_to_parent(self, parent)
        return self

    @property
    def children(self):
        """
        Read-only mapping of identifier → child, ordered by identifier.
        """
        return MappingProxyType(dict(sorted(self._children.items())))

    @property
    def _identifiers(self):
        return sorted(self._children)

    @property
    def requires_subcommand(self):
        """
        A group requires a sub-command unless an action is bound to it.
        """
        return not self.bound

    def command(self, identifier, callback=Unset, /, **options):
        """
        Create a leaf under this group and return it.

        Parameters
        - identifier: str
        - callback: Callable | Unset
          Action to bind right away; otherwise bind later with @leaf.action.
        - descr, metavar, required, alias: forwarded to the node.
        """
        return Leaf(identifier, self, callback=callback, **options)

    def group(self, identifier, /, **options):
        """
        Create a sub-group under this group and return it.
        """
        return Group(identifier, self, **options)


__all__ = (
    "Node",
    "Leaf",
    "Group",
)
