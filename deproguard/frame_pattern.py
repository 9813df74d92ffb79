# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

import re
import typing

from deproguard.class_util import external_class_name, internal_class_name
from deproguard.frame_info import FrameInfo


REGEX_CLASS = r'(?:[^\s":./()]+\.)*[^\s":./()]+'
REGEX_CLASS_SLASH = r'(?:[^\s":./()]+/)*[^\s":./()]+'
REGEX_SOURCE_FILE = r"(?:[^:()\d][^:()]*)?"
REGEX_LINE_NUMBER = r"-?\b\d+\b"
REGEX_TYPE = REGEX_CLASS + r"(?:\[\])*"
REGEX_MEMBER = r'<?[^\s":./()]+>?'
REGEX_ARGUMENTS = r"(?:" + REGEX_TYPE + r"(?:\s*,\s*" + REGEX_TYPE + r")*)?"

# Placeholder letter -> regular expression fragment.
EXPRESSION_FRAGMENTS: typing.Dict[str, str] = {
    "c": REGEX_CLASS,
    "C": REGEX_CLASS_SLASH,
    "s": REGEX_SOURCE_FILE,
    "l": REGEX_LINE_NUMBER,
    "t": REGEX_TYPE,
    "f": REGEX_MEMBER,
    "m": REGEX_MEMBER,
    "a": REGEX_ARGUMENTS,
}

MAX_EXPRESSION_TYPES = 32


class FramePattern(object):
    """
    Parses and formats lines that represent stack frames matching a
    template regular expression.

    The template is a regular expression in which %c, %C, %s, %l, %t, %f, %m
    and %a stand for a class name, a class name with slashes, a source file,
    a line number, a type, a field name, a method name and an argument list.
    Each one becomes a capturing group; the letter behind each group is kept
    in expression_types, so expression_types[i] belongs to group i + 1. At
    most MAX_EXPRESSION_TYPES placeholders are compiled, unknown letters
    included; the rest of the template is kept as is.

    Lines are searched, not matched in full, so text around a frame is
    copied through untouched.
    """

    def __init__(self, regular_expression: str, verbose: bool = False) -> None:
        self.regular_expression = regular_expression
        self.verbose = verbose
        self.expression_types: typing.List[str] = []

        expression_buffer = []
        placeholder_count = 0
        index = 0
        while True:
            next_index = regular_expression.find("%", index)
            if (
                next_index < 0
                or next_index == len(regular_expression) - 1
                or placeholder_count == MAX_EXPRESSION_TYPES
            ):
                break

            # Copy a literal piece of the template.
            expression_buffer.append(regular_expression[index:next_index])

            expression_type = regular_expression[next_index + 1]
            fragment = EXPRESSION_FRAGMENTS.get(expression_type)
            if fragment is not None:
                expression_buffer.append("(" + fragment + ")")
                self.expression_types.append(expression_type)
            placeholder_count += 1

            index = next_index + 2

        # Copy the last literal piece of the template.
        expression_buffer.append(regular_expression[index:])

        self.expression = "".join(expression_buffer)
        self.pattern: typing.Pattern[str] = re.compile(self.expression)

    def parse(self, line: str) -> typing.Optional[FrameInfo]:
        """
        Returns the frame information in the given line, or None if the line
        isn't a stack frame. A match that captures nothing gives an empty
        FrameInfo(), which is not the same as None.
        """
        matcher = self.pattern.search(line)
        if matcher is None:
            return None

        fields: typing.Dict[str, typing.Any] = {}
        for index, expression_type in enumerate(self.expression_types, 1):
            match = matcher.group(index)
            if not match:
                continue

            if expression_type == "c":
                fields["class_name"] = match
            elif expression_type == "C":
                fields["class_name"] = external_class_name(match)
            elif expression_type == "s":
                fields["source_file"] = match
            elif expression_type == "l":
                try:
                    fields["line_number"] = int(match)
                except ValueError:
                    fields["line_number"] = -1
            elif expression_type == "t":
                fields["type"] = match
            elif expression_type == "f":
                fields["field_name"] = match
            elif expression_type == "m":
                fields["method_name"] = match
            elif expression_type == "a":
                fields["arguments"] = match

        return FrameInfo(**fields)

    def format(self, line: str, frame_info: FrameInfo) -> str:
        """
        The reverse of parse(): rebuilds the given template line with the
        given frame information in place of the matched placeholders.
        """
        matcher = self.pattern.search(line)
        if matcher is None:
            return line

        formatted = []
        line_index = 0
        for index, expression_type in enumerate(self.expression_types, 1):
            start_index, end_index = matcher.span(index)
            if start_index < 0:
                continue

            # Copy a literal piece of the input line.
            formatted.append(line[line_index:start_index])

            if expression_type == "c":
                formatted.append(frame_info.class_name)
            elif expression_type == "C":
                formatted.append(internal_class_name(frame_info.class_name))
            elif expression_type == "s":
                formatted.append(frame_info.source_file)
            elif expression_type == "l":
                formatted.append(str(frame_info.line_number))
            elif expression_type == "t":
                formatted.append(frame_info.type)
            elif expression_type == "f":
                if self.verbose:
                    formatted.append(frame_info.type + " ")
                formatted.append(frame_info.field_name)
            elif expression_type == "m":
                if self.verbose:
                    formatted.append(frame_info.type + " ")
                formatted.append(frame_info.method_name)
                if self.verbose:
                    formatted.append("(" + frame_info.arguments + ")")
            elif expression_type == "a":
                formatted.append(frame_info.arguments)

            # Skip the original text that has just been replaced.
            line_index = end_index

        # Copy the last literal piece of the input line.
        formatted.append(line[line_index:])
        return "".join(formatted)
