# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import io
import textwrap
import unittest

from deproguard.retrace import first_non_common_index, ReTrace, trim


MAPPING = textwrap.dedent(
    """\
    com.example.Foo -> a:
        java.lang.String name -> a
        1:3:void foo():10:12 -> a
        void overloadA() -> b
        void overloadB() -> b
        com.example.Bar getBar() -> c
    com.example.Bar -> b:
        java.lang.String getName() -> a
    """
)


class TestReTrace(unittest.TestCase):
    def setUp(self):
        self.retrace = ReTrace()
        self.remapper = ReTrace.read_mapping(io.StringIO(MAPPING))

    def retrace_line(self, line):
        return self.retrace.retrace_line(line, self.remapper)

    def test_at_line(self):
        self.assertEqual(
            self.retrace_line("    at a.a(SourceFile:2)"),
            ["    at com.example.Foo.foo(Foo.java:11)"],
        )

    def test_at_line_with_trailing_text(self):
        self.assertEqual(
            self.retrace_line("\tat a.a(SourceFile:2) [app.jar:1.0]"),
            ["\tat com.example.Foo.foo(Foo.java:11) [app.jar:1.0]"],
        )

    def test_throw_line_with_trailing_space(self):
        self.assertEqual(
            self.retrace_line("java.lang.RuntimeException: a "),
            ["java.lang.RuntimeException: com.example.Foo "],
        )

    def test_ambiguous_frame_is_trimmed(self):
        prefix = "    at com.example.Foo.overload"
        self.assertEqual(
            self.retrace_line("    at a.b(SourceFile)"),
            [prefix + "A(Foo.java)", " " * len(prefix) + "B(Foo.java)"],
        )

    def test_throw_line(self):
        self.assertEqual(
            self.retrace_line("Caused by: b: boom"),
            ["Caused by: com.example.Bar: boom"],
        )

    def test_unmatched_line(self):
        self.assertEqual(self.retrace_line("hello world"), ["hello world"])
        self.assertEqual(self.retrace_line(""), [""])

    def test_class_cast(self):
        self.assertEqual(
            self.retrace_line(
                "java.lang.ClassCastException: b cannot be cast to java.lang.String"
            ),
            [
                "java.lang.ClassCastException: com.example.Bar "
                "cannot be cast to java.lang.String"
            ],
        )

    def test_null_field_read(self):
        self.assertEqual(
            self.retrace_line(
                "java.lang.NullPointerException: Attempt to read from field "
                "'java.lang.String a.a' on a null object reference"
            ),
            [
                "java.lang.NullPointerException: Attempt to read from field "
                "'java.lang.String com.example.Foo.name' on a null object reference"
            ],
        )

    def test_return_value_null_retraces_both_methods(self):
        self.assertEqual(
            self.retrace_line(
                'java.lang.NullPointerException: Cannot invoke "b.a()" '
                'because the return value of "a.c()" is null'
            ),
            [
                "java.lang.NullPointerException: Cannot invoke "
                '"com.example.Bar.getName()" because the return value of '
                '"com.example.Foo.getBar()" is null'
            ],
        )

    def test_verbose(self):
        retrace = ReTrace(verbose=True)
        self.assertEqual(
            retrace.retrace_line("    at a.a(SourceFile:2)", self.remapper),
            ["    at com.example.Foo.void foo()(Foo.java:11)"],
        )

    def test_all_class_names(self):
        retrace = ReTrace(all_class_names=True)
        self.assertEqual(
            retrace.retrace_line("Objects a and b (a)", self.remapper),
            ["Objects com.example.Foo and com.example.Bar (com.example.Foo)"],
        )
        self.assertEqual(
            retrace.retrace_line("    at a.a(SourceFile:2)", self.remapper),
            ["    at com.example.Foo.foo(Foo.java:11)"],
        )

    def test_retrace_stream(self):
        output = io.StringIO()
        self.retrace.retrace(
            io.StringIO(MAPPING),
            io.StringIO(
                'Exception in thread "main" java.lang.RuntimeException\r\n'
                "    at a.b(SourceFile)\n"
                "    at a.a(SourceFile:2)"
            ),
            output,
        )
        self.assertEqual(
            output.getvalue(),
            'Exception in thread "main" java.lang.RuntimeException\n'
            "    at com.example.Foo.overloadA(Foo.java)\n"
            + " " * len("    at com.example.Foo.overload")
            + "B(Foo.java)\n"
            "    at com.example.Foo.foo(Foo.java:11)\n",
        )

    def test_custom_regular_expression(self):
        retrace = ReTrace(regular_expression=r"%c\.%m:%l", regular_expression2="")
        self.assertEqual(
            retrace.retrace_line("a.a:3", self.remapper),
            ["com.example.Foo.foo:12"],
        )


class TestTrim(unittest.TestCase):
    def test_first_non_common_index(self):
        self.assertEqual(first_non_common_index("abc", "abd"), 2)
        self.assertEqual(first_non_common_index("ab", "abc"), 2)
        self.assertEqual(first_non_common_index("", "abc"), 0)

    def test_trim(self):
        self.assertEqual(trim("abcd", "abxy"), "  cd")
        self.assertEqual(trim("abcd", "efgh"), "abcd")
        self.assertEqual(trim("", "abc"), "")


if __name__ == "__main__":
    unittest.main()
