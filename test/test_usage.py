# python
"""
Usage renderer behavioral tests.

Scope
- Validate greedy word-wrap and the two-column layout.
- Validate the usage line suffixes, option entries, mode lists and filters.
- Validate that rendered lines respect the configured width.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked on plain text (get_usage / Text.plain).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from rich.text import Text

from optionparser import OptionParser, format_two_column, render_mode_tree, wordwrap


def build(description="count things", **options):
    return OptionParser(description, program_name="prog", **options)


class TestWordWrap(TestCase):
    """Behavioral tests for greedy word-wrap."""

    def testGreedyFill(self):
        self.assertEqual(wordwrap("aa bb cc dd", 5), ["aa bb", "cc dd"])

    def testLongWordIsNeverSplit(self):
        self.assertEqual(wordwrap("a abcdefghij b", 4), ["a", "abcdefghij", "b"])

    def testNewlinesForceBreaks(self):
        self.assertEqual(wordwrap("one\ntwo three", 40), ["one", "two three"])

    def testWhitespaceCollapses(self):
        self.assertEqual(wordwrap("  spaced \t out  ", 40), ["spaced out"])

    def testWidthMustBePositive(self):
        with self.assertRaises(ValueError):
            wordwrap("text", 0)


class TestTwoColumn(TestCase):
    """Behavioral tests for the two-column layout."""

    def testAlignedColumns(self):
        lines = format_two_column(2, 10, 2, 40, ["--a", "--bbb"], [["first"], ["second", "more"]])
        self.assertEqual([line.plain for line in lines], [
            "  --a    first",
            "  --bbb  second",
            "         more",
        ])

    def testWideLeftEntryMovesDescriptionDown(self):
        lines = format_two_column(2, 4, 2, 40, ["--x", "--very-long"], [["short"], ["below"]])
        self.assertEqual([line.plain for line in lines], [
            "  --x   short",
            "  --very-long",
            "        below",
        ])


class TestUsageText(TestCase):
    """Behavioral tests for rendered help."""

    def testSimpleSchema(self):
        parser = build()
        parser.add_int("count", "number of runs").add_short_code("n")
        parser.add_flag("verbose", "chatty output")
        self.assertEqual(parser.get_usage().splitlines(), [
            "usage: prog [OPTIONS] [ARGUMENTS...]",
            "",
            "count things",
            "",
            "options:",
            "  --count=INT [-n]  number of runs",
            "  --verbose         chatty output",
        ])

    def testCustomTypeLabel(self):
        parser = build(types=[("vector", lambda text: text.split(","))])
        parser.add_generic("a", "vector", "a vector")
        self.assertIn("--a=VECTOR", parser.get_usage())

    def testExplicitLabel(self):
        parser = build()
        parser.add_string("output", "where to write").set_label("FILE")
        self.assertIn("--output=FILE", parser.get_usage())

    def testNoOptionsRendersNone(self):
        usage = build(permit_arguments=False).get_usage()
        self.assertTrue(usage.startswith("usage: prog\n"))
        self.assertTrue(usage.endswith("options:\n  None"))

    def testPositionalSuffixes(self):
        self.assertIn("usage: prog [INT...]", build(permit_arguments="int").get_usage())
        self.assertIn("usage: prog STRING FLOAT", build(permit_arguments=["string", "float"]).get_usage())
        self.assertIn("usage: prog PROGRAM PROGRAM_ARGUMENTS...", build(wrapper=True).get_usage())

    def testHiddenFilter(self):
        parser = build()
        parser.add_flag("shown", "visible option")
        parser.add_flag("secret", "hidden option").set_hidden()
        self.assertNotIn("--secret", parser.get_usage())
        self.assertIn("--secret", parser.get_usage(show_hidden=True))
        only_hidden = parser.get_usage(show_hidden=True, show_nonhidden=False)
        self.assertIn("--secret", only_hidden)
        self.assertNotIn("--shown", only_hidden)

    def testModeList(self):
        parser = build()
        parser.add_mode("add", {"short_description": "add vectors"})
        parser.add_mode("cross", {"short_description": "cross-product of vectors"})
        parser.add_mode_alias("x", "cross")
        lines = parser.get_usage().splitlines()
        self.assertEqual(lines[0], "usage: prog MODE ...")
        self.assertIn("where MODE is one of:", lines)
        self.assertIn("  add        add vectors", lines)
        self.assertIn("  cross (x)  cross-product of vectors", lines)

    def testModeUsageShowsPath(self):
        parser = build()
        parser.add_mode("vec3").add_mode("add").add_flag("normalize")
        leaf = parser.modes["vec3"].modes["add"]
        self.assertTrue(leaf.get_usage().startswith("usage: prog vec3 add [OPTIONS]"))

    def testModeTree(self):
        parser = build()
        vec3 = parser.add_mode("vec3", {"short_description": "3-vectors"})
        vec3.add_mode("add", {"short_description": "add them"})
        parser.add_mode("scalar")
        self.assertEqual(render_mode_tree(parser).plain.splitlines(), [
            "prog",
            "  vec3 - 3-vectors",
            "    add - add them",
            "  scalar",
        ])

    def testLinesRespectWidth(self):
        parser = build(
            "a fairly long description that certainly needs to be wrapped over several lines "
            "when it is rendered at any of the widths exercised below",
        )
        parser.add_int("count", "number of times the operation is repeated before giving up").add_short_code("n")
        parser.add_string("output-file", "path of the file receiving the report, created when missing")
        parser.add_float("ratio", "mixing ratio between the two inputs").set_interval(0, 1)
        parser.add_flag("verbose", "print every intermediate step on the console").add_short_code("v")
        parser.add_mode("fetch", {"short_description": "download every configured source into the cache"})
        parser.add_mode("build", {"short_description": "turn cached sources into the final artifacts"})
        for width in range(60, 101, 5):
            with self.subTest(width=width):
                for line in parser.get_usage(width=width).splitlines():
                    self.assertLessEqual(len(line), width, line)

    def testColorfulRenderingKeepsPlainText(self):
        plain = build()
        plain.add_int("count", "number of runs")
        colorful = build(colorful=True)
        colorful.add_int("count", "number of runs")
        self.assertEqual(plain.get_usage(), colorful.get_usage())
        self.assertIsInstance(colorful.render_usage(), Text)
        self.assertTrue(colorful.render_usage().spans)
        self.assertFalse([span for span in plain.render_usage().spans if span.style])


if __name__ == "__main__":
    unittest.main()
