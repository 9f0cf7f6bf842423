# python
"""
Faults behavioral tests.

Scope
- Validate fault codes, titles and normalization through __codes__.
- Validate rich rendering of faults (header, message, hint).
- Validate the stock handlers (report, escalate) and handler invocation count.

Conventions
- Test method names follow CamelCase per project convention.
- Console output is captured by swapping the module console for a recording one.
"""

from __future__ import annotations

import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from optionparser import (
    CallbackError,
    FaultCode,
    InvalidValueError,
    OptionParser,
    ParseFault,
    SchemaError,
    UnknownOptionError,
    escalate,
    report,
)


def render(renderable, width=100):
    console = Console(file=io.StringIO(), width=width, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCodes(TestCase):
    """Behavioral tests for fault identity."""

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION, 11111)
        self.assertEqual(UnknownOptionError.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(CallbackError.code, FaultCode.CALLBACK_ERROR)

    def testCallbackErrorIsInvalidValue(self):
        self.assertTrue(issubclass(CallbackError, InvalidValueError))

    def testSchemaErrorsAreValueErrors(self):
        self.assertTrue(issubclass(SchemaError, ValueError))
        self.assertFalse(issubclass(ParseFault, ValueError))

    def testNormalizeUsesHostLabels(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__codes__", {FaultCode.UNKNOWN_OPTION: "E-UNKNOWN"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.UNKNOWN_MODE.normalize(), "11101")

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            ParseFault(42)


class TestFaultRendering(TestCase):
    """Behavioral tests for __rich__ rendering."""

    def testHeaderMessageAndHint(self):
        parser = OptionParser(program_name="tool")
        fault = UnknownOptionError("unknown option '--x' at first position", hint="run 'tool --help'", parser=parser)
        text = render(fault)
        self.assertIn("[ tool — 11111 | Unknown Option ]", text)
        self.assertIn("unknown option '--x' at first position", text)
        self.assertIn("→ run 'tool --help'", text)

    def testFaultWithoutParserUsesFallbackProgram(self):
        text = render(ParseFault("something broke"))
        self.assertIn("something broke", text)
        self.assertIn(" — - | Parse Error ]", text)

    def testOptionsAreReadOnly(self):
        fault = ParseFault("broken", token="--x")
        self.assertEqual(fault.options["token"], "--x")
        with self.assertRaises(TypeError):
            fault.options["token"] = "--y"


class TestHandlers(TestCase):
    """Behavioral tests for report/escalate and handler dispatch."""

    def testEscalateRaises(self):
        fault = ParseFault("broken")
        with self.assertRaises(ParseFault):
            escalate(fault)

    def testHandlersRejectOtherExceptions(self):
        with self.assertRaises(TypeError):
            escalate(ValueError("nope"))
        with self.assertRaises(TypeError):
            report(ValueError("nope"))

    def testReportPrintsFaultAndUsage(self):
        parser = OptionParser("count things", program_name="tool")
        parser.add_int("count", "number of runs")
        buffer = io.StringIO()
        with mock.patch("optionparser.faults.console", Console(file=buffer, width=80, color_system=None)):
            self.assertIsNone(parser.parse("--count=x"))
        output = buffer.getvalue()
        self.assertIn("Invalid Value", output)
        self.assertIn("invalid value for option '--count' at first position", output)
        self.assertIn("usage: tool [OPTIONS]", output)

    def testHandlerCalledExactlyOnce(self):
        faults = []
        parser = OptionParser(error_handler=faults.append)
        parser.add_int("count").set_mandatory()
        self.assertIsNone(parser.parse("--count=1 --count=2"))
        self.assertEqual(len(faults), 1)
        self.assertEqual(faults[0].options["index"], 2)


if __name__ == "__main__":
    unittest.main()
