"""
End-to-end parser tests.

Scope
- Parser.parse(): argv in, namespace out, across subcommand levels.
- Help short-circuit: HelpRequested, nothing bound.
- Parser.run()/invoke(): prompt handling, help exit 0, parse errors exit 1 with usage.
- Usage line and help page rendering.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through StringIO-backed rich consoles, never a real terminal.
"""
import contextlib
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

import argot.faults
from argot import *


def capture(renderable, width=100):
    console = Console(file=io.StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class ParseTest(TestCase):

    def setUp(self):
        registry = Registry("copy", "copy files around")
        registry.register(argument("sources", "+", descr="files to copy"))
        registry.register(option("dest", "d", descr="target directory"))
        registry.register(option("jobs", "j", type=int, default=1))
        registry.register(option("mode", "m", choices=("fast", "safe")))
        registry.register(switch("force", "f", default=False))
        registry.register(switch("a-flag", "a"))
        registry.register(switch("b-flag", "b"))
        registry.register(option("c-value", "c"))
        self.parser = Parser(registry.finalize())

    def testParse(self):
        namespace = self.parser.parse(["a.txt", "b.txt", "-d", "out", "-f", "-j", "4"])
        self.assertEqual(namespace.sources, ["a.txt", "b.txt"])
        self.assertEqual(namespace.dest, "out")
        self.assertIs(namespace.force, True)
        self.assertEqual(namespace.jobs, 4)
        self.assertNotIn("mode", namespace)

    def testDefaults(self):
        namespace = self.parser.parse(["a.txt"])
        self.assertEqual(namespace.jobs, 1)
        self.assertIs(namespace.force, False)
        self.assertNotIn("dest", namespace)

    def testInlineAndSeparateValuesAgree(self):
        self.assertEqual(
            self.parser.parse(["a", "--dest=out"]),
            self.parser.parse(["a", "--dest", "out"]),
        )

    def testInlineValueKeepsEquals(self):
        self.assertEqual(self.parser.parse(["a", "--dest=V1=V2"]).dest, "V1=V2")

    def testClusterEqualsLongSwitches(self):
        self.assertEqual(
            self.parser.parse(["x", "-abf"]),
            self.parser.parse(["x", "--a-flag", "--b-flag", "--force"]),
        )

    def testClusterInlineValueGoesToLast(self):
        namespace = self.parser.parse(["x", "-abc=V"])
        self.assertIs(namespace.a_flag, True)
        self.assertIs(namespace.b_flag, True)
        self.assertEqual(namespace.c_value, "V")

    def testInvalidValue(self):
        with self.assertRaises(InvalidValueError) as context:
            self.parser.parse(["a", "--jobs", "abc"])
        self.assertEqual(context.exception.raw, "abc")
        self.assertEqual(context.exception.parameter.name, "jobs")

    def testInvalidChoice(self):
        with self.assertRaises(InvalidChoiceError):
            self.parser.parse(["a", "--mode", "slow"])

    def testGivenNamespaceIsFilled(self):
        namespace = Namespace(extra=True)
        self.assertIs(self.parser.parse(["a"], namespace), namespace)
        self.assertIs(namespace.extra, True)

    def testArgumentValidation(self):
        with self.assertRaises(TypeError):
            self.parser.parse("a b")
        with self.assertRaises(TypeError):
            self.parser.parse(["a"], {})

    def testUnfinalizedRegistry(self):
        with self.assertRaises(RegistryNotReadyError):
            Parser(Registry("raw")).parse([])

    def testParserValidation(self):
        with self.assertRaises(TypeError):
            Parser("registry")
        with self.assertRaises(ValueError):
            Parser(Registry("tool"), " ")

    def testProgDefaultsToRegistryName(self):
        self.assertEqual(self.parser.prog, "copy")
        self.assertEqual(Parser(Registry("x"), "other").prog, "other")


class SubcommandParseTest(TestCase):

    def setUp(self):
        self.written = []
        self.git = Registry("git")
        self.git.register(switch("verbose", "v", slot=Slot(self.written.append)))
        remote = self.git.subcommand("remote", "manage remotes")
        add = remote.subcommand("add", "add a remote")
        add.register(argument("name"))
        add.register(argument("url"))
        add.register(switch("fetch", "f", default=False))
        remote.subcommand("remove")
        self.parser = Parser(self.git.finalize())

    def testNestedNamespace(self):
        namespace = self.parser.parse(["-v", "remote", "add", "origin", "https://example.org"])
        self.assertEqual(self.written, [True])
        self.assertEqual(namespace.selected, "remote")
        self.assertEqual(namespace.remote.selected, "add")
        self.assertEqual(namespace.remote.add.name, "origin")
        self.assertEqual(namespace.remote.add.url, "https://example.org")
        self.assertIs(namespace.remote.add.fetch, False)

    def testHelpBindsNothing(self):
        with self.assertRaises(HelpRequested) as context:
            self.parser.parse(["-v", "remote", "add", "-h"])
        self.assertEqual(context.exception.path, ("remote", "add"))
        self.assertEqual(self.written, [])

    def testLaterErrorBindsNothing(self):
        with self.assertRaises(MissingRequiredValueError):
            self.parser.parse(["-v", "remote", "add", "origin"])
        self.assertEqual(self.written, [])

    def testHelpForLevel(self):
        output = capture(self.parser.help(("remote",), width=100))
        self.assertIn("usage: git remote [-h] {add,remove} ...", output)
        self.assertIn("add a remote", output)
        self.assertIn("no description", output)

    def testHelpForUnknownLevel(self):
        with self.assertRaises(LookupError):
            self.parser.help(("nope",))


class RunTest(TestCase):

    def setUp(self):
        registry = Registry("tool", "a small tool", "see the manual")
        registry.register(argument("source", descr="what to read"))
        registry.register(option("count", "c", type=int, descr="how many times"))
        registry.register(switch("verbose", "v"))
        self.parser = Parser(registry.finalize())

    def testRunWithString(self):
        namespace = self.parser.run("'my file' -c 2")
        self.assertEqual(namespace.source, "my file")
        self.assertEqual(namespace.count, 2)

    def testRunWithIterable(self):
        self.assertEqual(self.parser.run(("x",)).source, "x")

    def testRunReadsArgv(self):
        with mock.patch.object(sys, "argv", ["tool", "from-argv"]):
            self.assertEqual(self.parser.run().source, "from-argv")

    def testRunRejectsBadPrompt(self):
        with self.assertRaises(TypeError):
            self.parser.run(1)
        with self.assertRaises(TypeError):
            self.parser.run(["x", 2])

    def testHelpExitsZero(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            self.parser.run(["--help"])
        self.assertEqual(context.exception.code, 0)
        self.assertIn("usage: tool", stdout.getvalue())
        self.assertIn("show this help message and exit", stdout.getvalue())

    def testParseErrorExitsOne(self):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        with mock.patch.object(argot.faults, "console", console), self.assertRaises(SystemExit) as context:
            self.parser.run(["x", "--colour"])
        self.assertEqual(context.exception.code, 1)
        output = console.file.getvalue()
        self.assertIn("unknown option '--colour' at second position", output)
        self.assertIn("usage: tool", output)
        self.assertIn("[ tool — 11112 | Unknown Option ]", output)

    def testParseErrorShowsArgumentLine(self):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        with mock.patch.object(argot.faults, "console", console), self.assertRaises(SystemExit):
            self.parser.run("'my file' -c two")
        lines = console.file.getvalue().splitlines()
        line = lines.index("'my file' -c two")
        self.assertEqual(lines[line + 1], " " * len("'my file' -c ") + "^")

    def testConfigurationErrorsPropagate(self):
        with self.assertRaises(RegistryNotReadyError):
            Parser(Registry("raw")).run([])

    def testInvokeParser(self):
        self.assertEqual(invoke(self.parser, "x -v").verbose, True)

    def testInvokeRegistry(self):
        registry = Registry("tool")
        registry.register(argument("source"))
        self.assertEqual(invoke(registry, ["x"]).source, "x")
        self.assertTrue(registry.finalized)

    def testInvokeRejectsOthers(self):
        with self.assertRaises(TypeError):
            invoke(object(), [])


class RenderTest(TestCase):

    def setUp(self):
        registry = Registry("tool", "a small tool", "see the manual")
        registry.register(argument("source", descr="what to read"))
        registry.register(argument("pair", 2, metavar="P"))
        registry.register(option("count", "c", type=int, descr="how many times"))
        registry.register(option("level", narg="?"))
        registry.register(option("include", "I", "*"))
        registry.register(option("mode", choices=("fast", "safe")))
        registry.register(option("pace", choices={"slow": "one at a time", "quick": "all at once"}))
        registry.register(switch("verbose", "v", descr="talk more"))
        registry.register(switch("secret", hidden=True))
        self.parser = Parser(registry.finalize())

    def testUsage(self):
        self.assertEqual(
            self.parser.usage(width=200).plain,
            "usage: tool [-h] [-c COUNT] [--level [LEVEL]] [-I [INCLUDE ...]] [--mode {fast,safe}] [--pace {slow,quick}] [-v] SOURCE P P",
        )

    def testUsageWraps(self):
        lines = self.parser.usage(width=40).plain.splitlines()
        self.assertGreater(len(lines), 1)
        self.assertTrue(lines[1].startswith(" " * len("usage: tool ")))

    def testHelpPage(self):
        output = capture(self.parser.help(width=100))
        self.assertIn("a small tool", output)
        self.assertIn("positional arguments:", output)
        self.assertIn("  SOURCE         what to read", output)
        self.assertIn("options:", output)
        self.assertIn("  -h, --help     show this help message and exit", output)
        self.assertIn("  -v, --verbose  talk more", output)
        self.assertIn("-c, --count COUNT", output)
        self.assertIn("how many times", output)
        self.assertIn("see the manual", output)
        self.assertNotIn("secret", output)

    def testChoiceLegend(self):
        lines = capture(self.parser.help(width=100)).splitlines()
        entry = lines.index("  --pace {slow,quick}")
        self.assertEqual(lines[entry + 1], "    slow" + " " * 9 + "one at a time")
        self.assertEqual(lines[entry + 2], "    quick" + " " * 8 + "all at once")
        # choices without descriptions get no legend
        self.assertNotIn("    fast", lines)

    def testHelpIsListedFirst(self):
        output = capture(self.parser.help(width=100))
        self.assertLess(output.index("--help"), output.index("--count"))

    def testFancyHelp(self):
        parser = Parser(self.parser.registry, fancy=True, colorful=True)
        output = capture(parser.help(width=100))
        self.assertIn("TOOL HELP", output)
        self.assertIn("╭", output)


if __name__ == "__main__":
    unittest.main()
