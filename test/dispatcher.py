"""
Dispatcher behavioral tests (configuration, hooks, sealing, scenarios).

Scope
- Validate configuration checks on construction.
- Validate that each outcome reaches exactly one hook with its formatted message.
- Validate the built-in help command and the console hook bundle.
- Validate sealing on first resolution.

Conventions
- Test method names follow CamelCase per project convention.
- Hooks are recorded through a Recorder receiver.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from arbor import (
    Dispatcher,
    Hooks,
    Matching,
    INDENT,
    console_hooks,
    report,
    Success,
    BadCommand,
    NeedsSubCommand,
    SealedTreeError,
    UnboundActionError,
)


class Recorder:
    """Receiver collecting hook calls as (hook, arg, message)."""

    def __init__(self):
        self.calls = []
        self.flag = 0

    def hook(self, name):
        def callback(receiver, arg, message):
            receiver.calls.append((name, arg, message))
        return callback

    def hooks(self, *names):
        return Hooks(**{name: self.hook(name) for name in names or Hooks._fields})


class TestConfiguration(TestCase):
    """Construction-time validation."""

    def testDefaults(self):
        tool = Dispatcher("receiver")
        self.assertEqual(tool.receiver, "receiver")
        self.assertEqual(tool.paragraph, "")
        self.assertEqual(tool.indent, INDENT)
        self.assertIs(tool.matching, Matching.PREFIX)
        self.assertEqual(tool.hooks, Hooks())
        self.assertEqual(tool.identifiers, ("help",))
        self.assertFalse(tool.sealed)

    def testBuiltInHelpCommand(self):
        help = Dispatcher(object()).root.children["help"]
        self.assertEqual(help.descr, "Print this help message")
        self.assertTrue(help.bound)

    def testInvalidParagraph(self):
        with self.assertRaises(TypeError):
            Dispatcher(object(), paragraph=3)

    def testInvalidIndent(self):
        with self.assertRaises(TypeError):
            Dispatcher(object(), indent="18")
        with self.assertRaises(TypeError):
            Dispatcher(object(), indent=True)
        with self.assertRaises(ValueError):
            Dispatcher(object(), indent=-1)

    def testInvalidMatching(self):
        with self.assertRaises(ValueError):
            Dispatcher(object(), matching="fuzzy")
        self.assertIs(Dispatcher(object(), matching="exact").matching, Matching.EXACT)

    def testInvalidHooks(self):
        with self.assertRaises(TypeError):
            Dispatcher(object(), hooks={"help": print})
        with self.assertRaises(TypeError):
            Hooks(help="print")

    def testDerivedHooksAreValidated(self):
        hooks = Hooks(help=print)
        with self.assertRaises(TypeError):
            hooks._replace(help="print")
        derived = hooks._replace(success=print)
        self.assertIsInstance(derived, Hooks)
        self.assertEqual((derived.success, derived.help), (print, print))


class TestHooks(TestCase):
    """Each outcome reaches exactly one hook."""

    def setUp(self):
        self.receiver = Recorder()
        self.tool = Dispatcher(self.receiver, hooks=self.receiver.hooks())
        self.tool.command("tea", lambda receiver, arg, tokens: None)
        self.tool.command("test", lambda receiver, arg, tokens: None)
        group = self.tool.group("group")
        group.command("sub1", lambda receiver, arg, tokens: None)
        group.command("sub2", lambda receiver, arg, tokens: None)

    def testHelpHook(self):
        self.assertEqual(self.tool.resolve("help", 7), Success())
        self.assertEqual(self.receiver.calls[0], ("help", 7, self.tool.help()))
        self.assertEqual(self.receiver.calls[1], ("success", 7, ""))
        self.assertEqual(len(self.receiver.calls), 2)

    def testBadCommandHook(self):
        self.tool.resolve("bad", 1)
        self.assertEqual(self.receiver.calls, [("bad_command", 1, "Bad Command: bad")])

    def testNeedsSubCommandHook(self):
        self.tool.resolve("group", 2)
        self.assertEqual(self.receiver.calls, [
            ("needs_subcommand", 2, "Command group requires a sub-command: [sub1, sub2]")
        ])

    def testTooManyMatchesHook(self):
        self.tool.resolve("te", 3)
        self.assertEqual(self.receiver.calls, [
            ("too_many_matches", 3, "Partial command te matches more than one command: [tea, test]")
        ])

    def testUnsetHooksDropOutcomes(self):
        receiver = Recorder()
        tool = Dispatcher(receiver, hooks=receiver.hooks("help"))
        self.assertEqual(tool.resolve("bad"), BadCommand("", "bad"))
        self.assertEqual(tool.resolve(""), NeedsSubCommand(tool.root))
        self.assertEqual(receiver.calls, [])

    def testReportRejectsNonOutcomes(self):
        with self.assertRaises(TypeError):
            report("oops", None, None, Hooks())


class TestScenarios(TestCase):
    """End-to-end behavior through Dispatcher.resolve."""

    def testHelpListsOnlyHelp(self):
        receiver = Recorder()
        tool = Dispatcher(receiver, hooks=receiver.hooks("help"))
        tool.resolve("help")
        self.assertEqual(receiver.calls, [
            ("help", None, "\n\nCommands:\nhelp" + " " * (INDENT - 4) + "Print this help message")
        ])

    def testSubCommandActionRunsOnce(self):
        receiver = Recorder()
        tool = Dispatcher(receiver, hooks=receiver.hooks(
            "bad_command", "needs_subcommand", "too_many_matches", "help"
        ))

        @tool.group("test").command("sub-test").action
        def subtest(receiver, arg, tokens):
            receiver.flag += 1

        self.assertEqual(tool.resolve("test sub-test", 2), Success())
        self.assertEqual(receiver.flag, 1)
        self.assertEqual(receiver.calls, [])

    def testIterableInput(self):
        seen = []
        tool = Dispatcher(object())
        tool.command("echo", lambda receiver, arg, tokens: seen.append(tokens))
        tool.resolve(["echo", " a ", "", "b"])
        self.assertEqual(seen, [("a", "b")])

    def testExactMatchingDispatcher(self):
        seen = []
        tool = Dispatcher(object(), matching=Matching.EXACT)
        tool.command("list", lambda receiver, arg, tokens: seen.append(arg), alias="ls")
        self.assertEqual(tool.resolve("LS", "x"), Success())
        self.assertFalse(tool.resolve("li"))
        self.assertEqual(seen, ["x"])

    def testUnboundCommandRaises(self):
        receiver = Recorder()
        tool = Dispatcher(receiver, hooks=receiver.hooks())
        tool.command("broken")
        with self.assertRaises(UnboundActionError):
            tool.resolve("broken")
        self.assertEqual(receiver.calls, [])

    def testFirstResolveSeals(self):
        tool = Dispatcher(object())
        tool.resolve("help")
        self.assertTrue(tool.sealed)
        with self.assertRaises(SealedTreeError):
            tool.command("late", lambda receiver, arg, tokens: None)


class TestConsoleHooks(TestCase):
    """Ready-made rich hooks."""

    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.hooks = console_hooks(
            Console(file=self.stdout, width=120),
            Console(file=self.stderr, width=120),
            colorful=False
        )

    def testHelpGoesToStdout(self):
        tool = Dispatcher(object(), hooks=self.hooks)
        tool.command("rm", lambda receiver, arg, tokens: None, descr="Remove", metavar="NAME")
        tool.resolve("help")
        self.assertIn("rm [NAME]", self.stdout.getvalue())
        self.assertEqual(self.stderr.getvalue(), "")

    def testFailuresGoToStderr(self):
        tool = Dispatcher(object(), hooks=self.hooks)
        tool.resolve("nope")
        self.assertEqual(self.stderr.getvalue().strip(), "Bad Command: nope")
        self.assertEqual(self.stdout.getvalue(), "")

    def testNoSuccessHook(self):
        self.assertIsNone(self.hooks.success)


if __name__ == "__main__":
    unittest.main()
