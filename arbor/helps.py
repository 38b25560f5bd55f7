"""
Arbor help rendering: aligned, indented listings of a command tree.

Layout
- Every node renders a head line: its full identifier, a placeholder when one
  applies, then its description aligned on a fixed column (indent, 18 by default).
  • head shorter than indent → padded with spaces up to the column, then descr.
  • otherwise               → descr on the next line, indented by `indent` spaces.
- Placeholders
  • leaf with metavar: NAME when required, [NAME] otherwise.
  • group without action: {child1, child2}.
  • group with action: the metavar (if any) then the children, in braces when the
    metavar is required and in brackets otherwise: [NAME, a, b] / {NAME, a, b}.
- A group is followed by the rendering of each child, sorted by identifier.

Example (indent=18)
    remote {add, remove}
                      Manage remotes
    remote add URL    Add a remote
    remote remove [NAME]
                      Remove a remote

These are pure functions of the tree: no matching happens here.
"""
from .nodes import Leaf, Group

INDENT = 18


def _align(head, descr, indent):
    if len(head) < indent:
        return head.ljust(indent) + descr
    return "%s\n%s%s" % (head, " " * indent, descr)


def _placeholder(node):
    match node:
        case Leaf(metavar=None):
            return ""
        case Leaf():
            return node.metavar if node.required else "[%s]" % node.metavar
        case Group():
            entries = [node.metavar] if node.metavar else []
            entries += node.identifiers
            if not node.bound or node.required:
                return "{%s}" % ", ".join(entries)
            return "[%s]" % ", ".join(entries)
    raise TypeError(f"render() cannot lay out a {type(node).__name__!r} object")


def head(node, /, indent=INDENT):
    """
    Render the single head entry of node (identifier, placeholder, description).
    """
    return _align(" ".join(filter(None, (node.full_identifier, _placeholder(node)))), node.descr, indent)


def render(node, /, indent=INDENT):
    """
    Render the help of node and, for a group, of all its descendants.

    Returns
    - str: lines joined by "\n" (no trailing newline).
    """
    match node:
        case Group():
            return "\n".join([head(node, indent)] + [render(child, indent) for child in node.children.values()])
        case _:
            return head(node, indent)


def render_tree(root, /, paragraph="", indent=INDENT):
    """
    Render the whole-tree help printed by the built-in help command.

    The free-text paragraph comes first, then a "Commands:" header, then every
    top-level node sorted by identifier (root itself has no entry).
    """
    return "%s\n\nCommands:\n%s" % (
        paragraph,
        "\n".join(render(child, indent) for child in root.children.values())
    )


__all__ = (
    "INDENT",
    "head",
    "render",
    "render_tree",
)
