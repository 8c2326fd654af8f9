"""
Registry and resolver behavioral tests.

Scope
- Validate named, positional and boolean-shorthand binding.
- Validate every resolver fault (unknown command/parameter, type mismatch,
  duplicate, missing) and the context they carry.
- Validate the built-in help command output and the default-command toggle.
- Validate runtime flags (shell, deferred), fallback handlers, discovery and invoke().

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Registry, parameter, invoke, faults).
"""
import contextlib
import io
import os
import sys
import tempfile
import textwrap
import unittest
from unittest import TestCase, mock

from cmdtools import Registry, Converter, Array, ArrayType, invoke, parameter, BOOLEAN, INT, STRING
from cmdtools.faults import (
    CommandLoadWarning,
    DuplicateParameterError,
    FaultCode,
    MalformedCommandError,
    MissingParameterError,
    ParameterTypeMismatchError,
    UnknownCommandError,
    UnknownParameterError,
)


def build():
    registry = Registry()

    @registry.command(descr="Greets someone.")
    @parameter("name", STRING, "Who to greet.", ordinal=1)
    @parameter("times", INT, "How often.", default=1, ordinal=2)
    def greet(values, stream):
        for _ in range(values["times"]):
            stream.write("Hello, %s!\n" % values["name"])

    @registry.command(descr="Shouts a word.")
    @parameter("word", STRING, "What to shout.", ordinal=1)
    @parameter("loud", BOOLEAN, "Whether to shout loudly.", default=False)
    def shout(values, stream):
        stream.write(values["word"].upper() if values["loud"] else values["word"])

    return registry


class ResolutionTest(TestCase):

    def setUp(self):
        self.registry = build()

    def testPositionalBinding(self):
        invocation = self.registry.parse('greet "Ada Lovelace" 3')
        self.assertEqual(dict(invocation.values), {"name": "Ada Lovelace", "times": 3})

    def testNamedBindingWithDefault(self):
        invocation = self.registry.parse("greet name Ada")
        self.assertEqual(dict(invocation.values), {"name": "Ada", "times": 1})

    def testNamesIgnoreCase(self):
        invocation = self.registry.parse("GREET NAME Ada TIMES 2")
        self.assertEqual(dict(invocation.values), {"name": "Ada", "times": 2})

    def testDefaultsEqualExplicitValues(self):
        self.assertEqual(
            dict(self.registry.parse("greet Ada").values),
            dict(self.registry.parse("greet Ada times 1").values)
        )

    def testPositionalCursorSkipsNamedSlots(self):
        invocation = self.registry.parse("greet times 2 Ada")
        self.assertEqual(dict(invocation.values), {"name": "Ada", "times": 2})

    def testBooleanShorthand(self):
        longhand = dict(self.registry.parse("shout hey loud true").values)
        self.assertEqual(dict(self.registry.parse("shout hey --loud").values), longhand)
        self.assertEqual(dict(self.registry.parse("shout --not-loud hey").values), {"word": "hey", "loud": False})

    def testResolveTakesTokens(self):
        invocation = self.registry.resolve("greet", ["Ada Lovelace", "2"])
        self.assertEqual(invocation.values["name"], "Ada Lovelace")
        self.assertEqual(invocation.command.name, "greet")

    def testImplicitValuesFillLowestRanks(self):
        registry = Registry()

        @registry.command(descr="Draws a box.")
        @parameter("width", INT, "Box width.", default=1, ordinal=1)
        @parameter("height", INT, "Box height.", default=1, ordinal=2)
        @parameter("depth", INT, "Box depth.", default=1, ordinal=3)
        def box(values, stream):
            pass

        self.assertEqual(dict(registry.parse("box 4 5").values), {"width": 4, "height": 5, "depth": 1})
        self.assertEqual(dict(registry.parse("box height 2 4 5").values), {"width": 4, "height": 2, "depth": 5})

    def testMutatedDefaultsDoNotLeak(self):
        registry = Registry()

        @registry.command(descr="Overwrites its first number.")
        @parameter("numbers", ArrayType(INT), "Numbers to change.", default=Array(INT, 1, 1, 2))
        def bump(values, stream):
            values["numbers"].set(99, 0)

        self.assertTrue(registry.parse("bump").execute().success)
        self.assertEqual(registry.parse("bump").values["numbers"], Array(INT, 1, 1, 2))
        self.assertEqual(registry.find("bump").parameter("numbers").default, Array(INT, 1, 1, 2))

    def testExecution(self):
        self.assertEqual(self.registry.parse("greet Ada 2").execute().output, "Hello, Ada!\nHello, Ada!\n")


class ResolutionFaultTest(TestCase):

    def setUp(self):
        self.registry = build()

    def testMissingParameter(self):
        with self.assertRaises(MissingParameterError) as context:
            self.registry.parse("greet")
        self.assertEqual(context.exception.options["parameter"], "name")
        self.assertEqual(context.exception.options["code"], FaultCode.MISSING_PARAMETER)

    def testDuplicateParameter(self):
        with self.assertRaises(DuplicateParameterError):
            self.registry.parse("greet name Ada name Grace")
        with self.assertRaises(DuplicateParameterError):
            self.registry.parse("greet Ada name Grace")
        with self.assertRaises(DuplicateParameterError) as context:
            self.registry.parse("shout hey --loud loud false")
        self.assertEqual(context.exception.options["parameter"], "loud")

    def testUnknownCommand(self):
        with self.assertRaises(UnknownCommandError) as context:
            self.registry.parse("frobnicate x")
        self.assertEqual(context.exception.options["command"], "frobnicate")
        self.assertEqual(context.exception.options["prog"], "cmdtools")

    def testUnknownCommandSuggestion(self):
        with self.assertRaises(UnknownCommandError) as context:
            self.registry.parse("gret Ada")
        self.assertIn("'greet'", context.exception.options["hint"])

    def testTypeMismatch(self):
        with self.assertRaises(ParameterTypeMismatchError) as context:
            self.registry.parse("greet name Ada times notanumber")
        self.assertEqual(context.exception.options["parameter"], "times")
        self.assertEqual(context.exception.options["index"], 3)

    def testPositionalTypeMismatch(self):
        with self.assertRaises(ParameterTypeMismatchError):
            self.registry.parse("greet Ada many")

    def testTooManyPositionals(self):
        with self.assertRaises(UnknownParameterError):
            self.registry.parse("greet Ada 2 extra")

    def testUnknownSwitch(self):
        with self.assertRaises(UnknownParameterError) as context:
            self.registry.parse("shout hey --lod")
        self.assertIn("'loud'", context.exception.options["hint"])

    def testSwitchOnNonBooleanParameter(self):
        with self.assertRaises(ParameterTypeMismatchError):
            self.registry.parse("shout --word")

    def testParameterNameWithoutValue(self):
        with self.assertRaises(MissingParameterError):
            self.registry.parse("greet Ada times")

    def testMalformedLine(self):
        with self.assertRaises(MalformedCommandError) as context:
            self.registry.parse('greet "Ada')
        self.assertEqual(context.exception.options["prog"], "cmdtools")


class RegistrationTest(TestCase):

    def setUp(self):
        self.registry = build()

    def testRegisterRejectsKnownNames(self):
        greet = self.registry.find("greet")
        self.assertFalse(self.registry.register(greet))
        self.assertFalse(self.registry.register(self.registry.find("HELP")))
        self.assertFalse(self.registry.register(self.registry.find("list")))

    def testDecoratorRejectsKnownNames(self):
        with self.assertRaises(ValueError):
            @self.registry.command(descr="Another greeting.")
            def greet(values, stream):
                pass

    def testRegisterRejectsNonCommands(self):
        with self.assertRaises(TypeError):
            self.registry.register(print)

    def testCommandOrder(self):
        self.assertEqual([known.name for known in self.registry.commands], ["list", "help", "greet", "shout"])

    def testDefaultsToggle(self):
        self.registry.defaults = False
        self.assertIsNone(self.registry.find("list"))
        self.assertIsNotNone(self.registry.find("help"))
        self.assertEqual([known.name for known in self.registry.commands], ["help", "greet", "shout"])
        with self.assertRaises(UnknownCommandError):
            self.registry.parse("list .")
        # built-ins still cannot be shadowed while hidden
        self.assertFalse(self.registry.register(Registry().find("list")))

    def testDisabledDefaultsFromConstructor(self):
        self.assertIsNone(Registry(defaults=False).find("list"))

    def testConverterIsReplaceable(self):
        converter = Converter()
        converter.register(INT, lambda raw: {"once": 1, "twice": 2}[raw])
        self.registry.converter = converter
        self.assertEqual(self.registry.parse("greet Ada twice").values["times"], 2)
        with self.assertRaises(TypeError):
            self.registry.converter = None


class HelpTest(TestCase):

    def setUp(self):
        self.registry = build()

    def testHelpForOneCommand(self):
        result = self.registry.parse("help Greet").execute()
        self.assertTrue(result.success)
        self.assertEqual(
            result.output,
            "Printing help for command 'greet': \n" + self.registry.find("greet").documentation() + "\n"
        )

    def testHelpForUnknownCommand(self):
        result = self.registry.parse("help nope").execute()
        self.assertFalse(result.success)
        self.assertEqual(result.output, "The command 'nope' was not recognized.\n")

    def testHelpForEverything(self):
        result = self.registry.parse("help").execute()
        self.assertTrue(result.success)
        self.assertEqual(
            result.output,
            "Documentation of all recognized commands: \n\n" +
            "".join(known.documentation() + "\n" for known in self.registry.commands)
        )

    def testHelpDocumentsItself(self):
        self.assertEqual(
            self.registry.find("help").documentation(),
            "help: \n"
            "    Prints the help you are currently reading.\n"
            "  Parameters: \n"
            "    1. command (String|): The command to print the documentation for.\n"
        )

    def testHelpHidesDisabledDefaults(self):
        self.registry.defaults = False
        self.assertFalse(self.registry.parse("help list").execute().success)


class RuntimeFlagsTest(TestCase):

    def testFallbackReceivesFaults(self):
        registry = build()
        faults = []
        registry.fallback(faults.append)
        self.assertIsNone(registry.parse("nope"))
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], UnknownCommandError)
        with self.assertRaises(TypeError):
            registry.fallback(faults.append)

    def testShellModeRendersAndExits(self):
        registry = Registry(shell=True)
        with mock.patch("cmdtools.faults.console") as console, self.assertRaises(SystemExit):
            registry.parse("nope")
        console.print.assert_called_once()

    def testDeferredShellModeKeepsRunning(self):
        registry = Registry(shell=True, deferred=True, prog="demo")
        with mock.patch("cmdtools.faults.console") as console:
            self.assertIsNone(registry.parse("nope"))
        fault, = console.print.call_args.args
        self.assertEqual(fault.options["prog"], "demo")
        self.assertTrue(fault.options["deferred"])


class DiscoveryTest(TestCase):

    package = "cmdtools_discovery_fixture"

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        root = os.path.join(self.directory.name, self.package)
        os.mkdir(root)
        with open(os.path.join(root, "__init__.py"), "w") as file:
            file.write("")
        with open(os.path.join(root, "good.py"), "w") as file:
            file.write(textwrap.dedent("""
                from cmdtools import Command

                def hello(values, stream):
                    \"\"\"Says hello.\"\"\"
                    stream.write("hello")

                hello = Command(hello)
            """))
        with open(os.path.join(root, "broken.py"), "w") as file:
            file.write("raise RuntimeError('cannot load')\n")
        os.mkdir(os.path.join(root, "damaged"))
        with open(os.path.join(root, "damaged", "__init__.py"), "w") as file:
            file.write("raise RuntimeError('cannot load package')\n")
        sys.path.insert(0, self.directory.name)

    def tearDown(self):
        sys.path.remove(self.directory.name)
        for name in [name for name in sys.modules if name.startswith(self.package)]:
            del sys.modules[name]
        self.directory.cleanup()

    def testIncludeRegistersCommandsAndWarnsOnFailures(self):
        registry = Registry()
        with self.assertWarns(CommandLoadWarning):
            names = registry.include(self.package + ".*")
        self.assertEqual(names, ["hello"])
        self.assertEqual(registry.parse("hello").execute().output, "hello")

    def testIncludeOfMissingPackageFindsNothing(self):
        self.assertEqual(Registry().include("cmdtools_no_such_package.*"), [])

    def testBrokenPackagesWarnOnce(self):
        registry = Registry()
        with mock.patch("warnings.warn") as warn:
            names = registry.include(self.package + ".**")
        self.assertEqual(names, ["hello"])
        modules = sorted(call.args[0].options["module"] for call in warn.call_args_list)
        self.assertEqual(modules, [self.package + ".broken", self.package + ".damaged"])

    def testBrokenPrefixPackageWarns(self):
        with self.assertWarns(CommandLoadWarning):
            self.assertEqual(Registry().include(self.package + ".damaged.*"), [])


class InvokeTest(TestCase):

    def testInvokeWithLine(self):
        registry = build()
        with contextlib.redirect_stdout(io.StringIO()) as stdout:
            result = invoke(registry, "greet Ada")
        self.assertTrue(result.success)
        self.assertIsNone(result.output)
        self.assertEqual(stdout.getvalue(), "Hello, Ada!\n")

    def testInvokeWithTokensKeepsThemWhole(self):
        registry = build()
        with contextlib.redirect_stdout(io.StringIO()) as stdout:
            invoke(registry, ["greet", "Ada Lovelace", "2"])
        self.assertEqual(stdout.getvalue(), "Hello, Ada Lovelace!\n" * 2)

    def testInvokeReadsProcessArguments(self):
        registry = build()
        with mock.patch.object(sys, "argv", ["prog", "greet", "Grace Hopper"]), \
                contextlib.redirect_stdout(io.StringIO()) as stdout:
            invoke(registry)
        self.assertEqual(stdout.getvalue(), "Hello, Grace Hopper!\n")

    def testInvokeRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            invoke(object(), "greet Ada")
        with self.assertRaises(TypeError):
            invoke(build(), 5)
        with self.assertRaises(TypeError):
            invoke(build(), ["greet", 5])


if __name__ == "__main__":
    unittest.main()
