"""
Parameter model behavioral tests.

Scope
- Narg: notations accepted by Narg.parse(), bounds, greediness and collection shape.
- Parameter: metadata sanitization (names, short, narg, type, slot, choices, display).
- argument()/option()/switch(): what each factory declares.

Conventions
- Test method names follow CamelCase per project convention.
- Kind x narg legality belongs to the registry and is tested there.
"""
import unittest
from unittest import TestCase

from argot.parameters import *
from argot.slots import Slot
from argot.utils import Unset


class NargTest(TestCase):

    def testParseNotations(self):
        self.assertIs(Narg.parse("?"), Narg.OPTIONAL)
        self.assertIs(Narg.parse("+"), Narg.AT_LEAST_ONE)
        self.assertIs(Narg.parse("*"), Narg.ANY)
        self.assertIs(Narg.parse(0), Narg.ZERO)
        self.assertEqual(Narg.parse(3), Narg.exactly(3))
        self.assertEqual(Narg.parse(Narg.exactly(2)), Narg.exactly(2))

    def testParseRejectsBadValues(self):
        with self.assertRaises(ValueError):
            Narg.parse(-1)
        with self.assertRaises(ValueError):
            Narg.parse("...")
        with self.assertRaises(TypeError):
            Narg.parse(True)
        with self.assertRaises(TypeError):
            Narg.parse(1.5)

    def testParseChecksHandBuiltNarg(self):
        with self.assertRaises(ValueError):
            Narg.parse(Narg(Arity.EXACTLY, 0))
        with self.assertRaises(ValueError):
            Narg.parse(Narg(Arity.EXACTLY))
        with self.assertRaises(TypeError):
            Narg.parse(Narg(Arity.EXACTLY, "2"))
        with self.assertRaises(TypeError):
            Narg.parse(Narg("+"))
        self.assertIs(Narg.parse(Narg(Arity.ANY, 5)), Narg.ANY)
        with self.assertRaises(ValueError):
            option("level", narg=Narg(Arity.EXACTLY, 0))

    def testExactlyRejectsNonPositive(self):
        with self.assertRaises(ValueError):
            Narg.exactly(0)
        with self.assertRaises(TypeError):
            Narg.exactly("2")

    def testBounds(self):
        self.assertEqual((Narg.exactly(2).lower, Narg.exactly(2).upper), (2, 2))
        self.assertEqual((Narg.AT_LEAST_ONE.lower, Narg.AT_LEAST_ONE.upper), (1, None))
        self.assertEqual((Narg.ANY.lower, Narg.ANY.upper), (0, None))
        self.assertEqual((Narg.ZERO.lower, Narg.ZERO.upper), (0, 0))
        self.assertEqual((Narg.OPTIONAL.lower, Narg.OPTIONAL.upper), (1, 1))

    def testGreedyAndCollection(self):
        self.assertTrue(Narg.ANY.greedy and Narg.ANY.collection)
        self.assertTrue(Narg.AT_LEAST_ONE.greedy and Narg.AT_LEAST_ONE.collection)
        self.assertFalse(Narg.exactly(1).greedy or Narg.exactly(1).collection)
        self.assertTrue(Narg.exactly(2).collection)
        self.assertFalse(Narg.exactly(2).greedy)
        self.assertFalse(Narg.OPTIONAL.collection)

    def testStr(self):
        self.assertEqual(str(Narg.exactly(4)), "4")
        self.assertEqual(str(Narg.AT_LEAST_ONE), "+")
        self.assertEqual(repr(Narg.exactly(4)), "narg.exactly(4)")
        self.assertEqual(repr(Narg.ANY), "narg('*')")


class ParameterTest(TestCase):

    def testArgumentDefaults(self):
        parameter = argument("source")
        self.assertIs(parameter.kind, Kind.ARGUMENT)
        self.assertEqual(parameter.narg, Narg.exactly(1))
        self.assertIs(parameter.type, str)
        self.assertIsNone(parameter.short)
        self.assertIsNone(parameter.slot)
        self.assertIs(parameter.default, Unset)
        self.assertEqual(parameter.choices, ())
        self.assertEqual(parameter.keys, ())
        self.assertEqual(parameter.label, "source")

    def testOptionKeysAndLabel(self):
        parameter = option("dry-run", "n")
        self.assertIs(parameter.kind, Kind.OPTION)
        self.assertEqual(parameter.keys, ("--dry-run", "-n"))
        self.assertEqual(parameter.label, "--dry-run")
        self.assertEqual(parameter.dest, "dry_run")
        self.assertEqual(parameter.placeholder, "DRY_RUN")

    def testSwitchIsZeroArity(self):
        parameter = switch("verbose", "v")
        self.assertIs(parameter.narg, Narg.ZERO)
        self.assertIs(parameter.target, True)
        self.assertEqual(switch("quiet", target=False).target, False)

    def testMetavarOverridesPlaceholder(self):
        self.assertEqual(option("output", metavar="FILE").placeholder, "FILE")

    def testNameValidation(self):
        with self.assertRaises(TypeError):
            option(1)
        with self.assertRaises(ValueError):
            option("   ")
        with self.assertRaises(ValueError):
            option("--output")
        with self.assertRaises(ValueError):
            option("9lives")
        with self.assertRaises(ValueError):
            option("bad name")

    def testNameIsStripped(self):
        self.assertEqual(option("  output ").name, "output")

    def testShortValidation(self):
        with self.assertRaises(TypeError):
            option("output", 1)
        for short in ("", "ab", "-", "=", " "):
            with self.subTest(short=short), self.assertRaises(ValueError):
                option("output", short)

    def testTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            option("count", type="int")

    def testSlotMustBeSlot(self):
        with self.assertRaises(TypeError):
            option("count", slot={})
        slot = Slot(print)
        self.assertIs(option("count", slot=slot).slot, slot)

    def testChoices(self):
        self.assertEqual(option("mode", choices=["a", "b"]).choices, ("a", "b"))
        self.assertEqual(set(option("mode", choices={"a", "b"}).choices), {"a", "b"})
        with self.assertRaises(ValueError):
            option("mode", choices=["a", "a"])
        with self.assertRaises(TypeError):
            option("mode", choices="ab")
        with self.assertRaises(TypeError):
            option("mode", choices=1)

    def testChoicesWithDescriptions(self):
        parameter = option("mode", choices={"fast": "skip the checks", "safe": " check everything "})
        self.assertEqual(parameter.choices, ("fast", "safe"))
        self.assertEqual(dict(parameter.legend), {"fast": "skip the checks", "safe": "check everything"})
        with self.assertRaises(TypeError):
            parameter.legend["slow"] = "never"
        self.assertEqual(dict(option("mode", choices=["a", "b"]).legend), {})
        with self.assertRaises(TypeError):
            option("mode", choices={"fast": 1})
        with self.assertRaises(ValueError):
            option("mode", choices={"fast": "  "})

    def testDisplayValidation(self):
        with self.assertRaises(ValueError):
            option("output", metavar=" ")
        with self.assertRaises(TypeError):
            option("output", metavar=1)
        with self.assertRaises(ValueError):
            option("output", descr="")
        with self.assertRaises(TypeError):
            option("output", descr=1)

    def testKindMustBeKind(self):
        with self.assertRaises(TypeError):
            Parameter("option", "output")

    def testReadOnly(self):
        parameter = option("output")
        with self.assertRaises(AttributeError):
            parameter.name = "input"

    def testIdentityMatters(self):
        first, second = option("output"), option("output")
        self.assertNotEqual(first, second)
        self.assertEqual(len({first, second}), 2)

    def testRepr(self):
        self.assertTrue(repr(option("output", "o")).startswith("parameter(kind=<Kind.OPTION"))
        self.assertIn("name='output'", repr(option("output", "o")))


if __name__ == "__main__":
    unittest.main()
