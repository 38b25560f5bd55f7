from rich.console import Console
from rich.pretty import pprint

from arbor import *

console = Console(stderr=True)
remotes = {}

tool = Dispatcher(
    remotes,
    paragraph="Manage the remotes of a repository.",
    hooks=Hooks(help=console_hooks().help),
)
remote = tool.group("remote", descr="Manage remotes")


@remote.command("add", descr="Add a remote", metavar="NAME URL", required=True).action
def add(remotes, arg, tokens):
    name, url = tokens
    remotes[name] = url


@remote.command("remove", descr="Remove a remote", metavar="NAME").action
def remove(remotes, arg, tokens):
    for name in tokens:
        remotes.pop(name, None)


@remote.command("rename", descr="Rename a remote", metavar="OLD NEW", required=True).action
def rename(remotes, arg, tokens):
    old, new = tokens
    remotes[new] = remotes.pop(old)


@remote.command("show", descr="Show remotes").action
def show(remotes, arg, tokens):
    pprint(remotes)


if __name__ == '__main__':
    for line in ("help", "remote add origin https://example.org/repo.git", "rem s", "remote", "remote re", "pull"):
        if not (outcome := tool.resolve(line)):
            console.print(outcome)
    pprint(tool.root)
