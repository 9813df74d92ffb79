# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

import logging
import typing

import deproguard.logger as logger
from deproguard.class_util import split_with_delimiters
from deproguard.frame_pattern import FramePattern
from deproguard.frame_remapper import FrameRemapper
from deproguard.mapping_reader import MappingReader


# For example: "com.example.Foo.bar"
REGULAR_EXPRESSION_CLASS_METHOD = r"%c\.%m"

# For example:
# "(Foo.java:123:0) ~[0]"
# "()(Foo.java:123:0)"
# or no source line info at all.
REGULAR_EXPRESSION_SOURCE_LINE = (
    r"(?:\(\))?(?:\((?:%s)?(?::?%l)?(?::\d+)?\))?\s*(?:~\[.*\])?"
)

# For example: "at o.afc.b + 45(:45)"
REGULAR_EXPRESSION_OPTIONAL_SOURCE_LINE_INFO = r"(?:\+\s+[0-9]+)?"

# For example: "    at com.example.Foo.bar(Foo.java:123:0) ~[0]"
REGULAR_EXPRESSION_AT = (
    r".*?\bat\s+"
    + REGULAR_EXPRESSION_CLASS_METHOD
    + r"\s*"
    + REGULAR_EXPRESSION_OPTIONAL_SOURCE_LINE_INFO
    + REGULAR_EXPRESSION_SOURCE_LINE
)

# For example: "java.lang.ClassCastException: com.example.Foo cannot be cast to com.example.Bar"
# Every line can only have a single matched class, so we try to avoid
# longer non-obfuscated class names.
REGULAR_EXPRESSION_CAST1 = (
    r".*?\bjava\.lang\.ClassCastException: %c cannot be cast to .{5,}"
)
REGULAR_EXPRESSION_CAST2 = r".*?\bjava\.lang\.ClassCastException: .* cannot be cast to %c"

# For example: "java.lang.NullPointerException: Attempt to read from field 'java.lang.String com.example.Foo.bar' on a null object reference"
REGULAR_EXPRESSION_NULL_FIELD_READ = (
    r".*?\bjava\.lang\.NullPointerException: "
    r"Attempt to read from field '%t %c\.%f' on a null object reference"
)

# For example: "java.lang.NullPointerException: Attempt to write to field 'java.lang.String com.example.Foo.bar' on a null object reference"
REGULAR_EXPRESSION_NULL_FIELD_WRITE = (
    r".*?\bjava\.lang\.NullPointerException: "
    r"Attempt to write to field '%t %c\.%f' on a null object reference"
)

# For example: "java.lang.NullPointerException: Attempt to invoke virtual method 'void com.example.Foo.bar(int,boolean)' on a null object reference"
REGULAR_EXPRESSION_NULL_METHOD = (
    r".*?\bjava\.lang\.NullPointerException: "
    r"Attempt to invoke (?:virtual|interface) method '%t %c\.%m\(%a\)' on a null object reference"
)

# For example: "Something: com.example.FooException: something"
REGULAR_EXPRESSION_THROW = r'(?:.*?[:"]\s+)?%c(?::.*)?'

# For example: 'java.lang.NullPointerException: Cannot invoke "com.example.Foo.bar.foo(int)" because the return value of "com.example.Foo.bar.foo2()" is null'
# The first expression captures the second method, the second expression the
# first one.
REGULAR_EXPRESSION_RETURN_VALUE_NULL1 = (
    r'.*?\bjava\.lang\.NullPointerException: Cannot invoke ".*" '
    r'because the return value of "%c\.%m\(%a\)" is null'
)
REGULAR_EXPRESSION_RETURN_VALUE_NULL2 = (
    r'.*?\bjava\.lang\.NullPointerException: Cannot invoke "%c\.%m\(%a\)" '
    r'because the return value of ".*" is null'
)

# For example: 'Cannot invoke "java.net.ServerSocket.close()" because "com.example.Foo.bar" is null'
REGULAR_EXPRESSION_BECAUSE_IS_NULL = r'.*?\bbecause "%c\.%f" is null'

# The overall regular expression for a line in the stack trace.
REGULAR_EXPRESSION: str = "|".join(
    "(?:" + expression + ")"
    for expression in (
        REGULAR_EXPRESSION_AT,
        REGULAR_EXPRESSION_CAST1,
        REGULAR_EXPRESSION_CAST2,
        REGULAR_EXPRESSION_NULL_FIELD_READ,
        REGULAR_EXPRESSION_NULL_FIELD_WRITE,
        REGULAR_EXPRESSION_NULL_METHOD,
        REGULAR_EXPRESSION_RETURN_VALUE_NULL1,
        REGULAR_EXPRESSION_BECAUSE_IS_NULL,
        REGULAR_EXPRESSION_THROW,
    )
)

# Lines from Java 16+ helpful NullPointerExceptions can name two methods, and
# the overall expression only captures one of them. This one picks up the
# other on a second pass.
REGULAR_EXPRESSION2: str = "(?:" + REGULAR_EXPRESSION_RETURN_VALUE_NULL2 + ")"

DELIMITERS = "(){}[]<>;:,'\"/\\"


def is_delimiter(c: str) -> bool:
    return c.isspace() or c in DELIMITERS


def first_non_common_index(string1: str, string2: str) -> int:
    i = 0
    while i < len(string1) and i < len(string2):
        if string1[i] != string2[i]:
            return i
        i += 1
    return i


def trim(string1: str, string2: str) -> str:
    """
    Returns string1, with any leading characters that it has in common with
    string2 replaced by spaces.
    """
    trim_end = first_non_common_index(string1, string2)
    return " " * trim_end + string1[trim_end:]


class ReTrace(object):
    """
    Deobfuscates stack traces with the help of a mapping file.
    """

    def __init__(
        self,
        regular_expression: str = REGULAR_EXPRESSION,
        regular_expression2: str = REGULAR_EXPRESSION2,
        all_class_names: bool = False,
        verbose: bool = False,
    ) -> None:
        self.all_class_names = all_class_names
        self.verbose = verbose
        self.pattern1 = FramePattern(regular_expression, verbose)
        self.pattern2 = FramePattern(regular_expression2, verbose)

    @staticmethod
    def read_mapping(
        mapping_file: typing.Iterable[typing.Union[str, bytes]]
    ) -> FrameRemapper:
        remapper = FrameRemapper()
        errors = MappingReader().consume(mapping_file, remapper)
        logging.info(
            "Read %d class mappings, skipped %d malformed lines",
            len(remapper.class_map),
            len(errors),
        )
        return remapper

    def retrace(
        self,
        mapping_file: typing.Iterable[typing.Union[str, bytes]],
        stack_trace_file: typing.Iterable[str],
        writer: typing.TextIO,
    ) -> None:
        # The mapping file is read completely before the stack trace.
        remapper = self.read_mapping(mapping_file)

        for line in stack_trace_file:
            for retraced_line in self.retrace_line(line.rstrip("\r\n"), remapper):
                writer.write(retraced_line)
                writer.write("\n")
        writer.flush()

    def retrace_line(self, line: str, remapper: FrameRemapper) -> typing.List[str]:
        """
        Returns the lines that replace the given stack trace line: one per
        possible original frame, or the line itself if it isn't a frame.
        """
        retraced_lines = []
        for line1 in self._retrace_frame(self.pattern1, line, remapper):
            retraced_lines += self._retrace_frame(self.pattern2, line1, remapper)

        if self.all_class_names:
            retraced_lines = [
                self.deobfuscate(retraced_line, remapper)
                for retraced_line in retraced_lines
            ]
        return retraced_lines

    def _retrace_frame(
        self, pattern: FramePattern, line: str, remapper: FrameRemapper
    ) -> typing.List[str]:
        obfuscated_frame = pattern.parse(line)
        if obfuscated_frame is None:
            return [line]

        retraced_lines = []
        previous_line = None
        for retraced_frame in remapper.transform(obfuscated_frame):
            logger.log("Retraced", obfuscated_frame, "->", retraced_frame)
            retraced_line = pattern.format(line, retraced_frame)

            # Clear the common first part of ambiguous alternative
            # retraced lines, to present a cleaner list of alternatives.
            trimmed_line = retraced_line
            if previous_line is not None and obfuscated_frame.line_number == 0:
                trimmed_line = trim(retraced_line, previous_line)

            if trimmed_line:
                retraced_lines.append(trimmed_line)
            previous_line = retraced_line

        return retraced_lines

    def deobfuscate(self, line: str, remapper: FrameRemapper) -> str:
        """
        Replaces every token of the line that is an obfuscated class name.
        """
        return "".join(
            token
            if len(token) == 1 and is_delimiter(token)
            else remapper.original_class_name(token)
            for token in split_with_delimiters(line, is_delimiter)
        )
