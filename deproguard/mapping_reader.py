# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

import logging
import typing

from deproguard.mapping_processor import MappingProcessor


class MappingError(Exception):
    def __init__(
        self, msg: str, line: str, line_number: typing.Optional[int] = None
    ) -> None:
        super().__init__(msg, line, line_number)
        self.msg = msg
        self.line = line
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return "{}: {!r}".format(self.msg, self.line)
        return "line {}: {}: {!r}".format(self.line_number, self.msg, self.line)


def _parse_line_number(line: str, start: int, end: int) -> int:
    try:
        return int(line[start:end].strip())
    except ValueError:
        raise MappingError(
            "Invalid line number {!r}".format(line[start:end].strip()), line
        )


class MappingReader(object):
    """
    Reads a mapping file of the form

        original.Class -> obfuscated.Class:
            fieldType fieldName -> obfuscatedFieldName
            [first:last:]returnType methodName(argTypes)[:origFirst[:origLast]] -> obfuscatedMethodName

    and feeds every mapping it finds to a MappingProcessor.
    """

    def consume(
        self,
        mapping_file: typing.Iterable[typing.Union[str, bytes]],
        processor: MappingProcessor,
    ) -> typing.List[MappingError]:
        """
        Reads all lines of mapping_file. Malformed member lines are logged and
        skipped; they are also returned, in file order.
        """
        errors: typing.List[MappingError] = []
        class_mapping: typing.Optional[typing.Tuple[str, str]] = None

        for line_number, line in enumerate(mapping_file, 1):
            if isinstance(line, bytes):
                line = line.decode("utf-8", errors="surrogateescape")
            line = line.strip()

            # Blank or comment line.
            if not line or line.startswith("#"):
                continue

            if line.endswith(":"):
                # A class mapping. Remember the class names for the members
                # that follow.
                class_mapping = self.process_class_mapping(line, processor)
            elif class_mapping is not None:
                class_name, new_class_name = class_mapping
                try:
                    self.process_class_member_mapping(
                        class_name, new_class_name, line, processor
                    )
                except MappingError as e:
                    e.line_number = line_number
                    logging.warning("Skipping malformed mapping %s", e)
                    errors.append(e)

        return errors

    def process_class_mapping(
        self, line: str, processor: MappingProcessor
    ) -> typing.Optional[typing.Tuple[str, str]]:
        """
        Parses "original -> obfuscated:". Returns both class names, or None
        if the line is malformed, the original name is empty, or the
        processor isn't interested in the members of the class.
        """
        arrow_index = line.find("->")
        if arrow_index < 0:
            return None

        colon_index = line.find(":", arrow_index + 2)
        if colon_index < 0:
            return None

        class_name = line[:arrow_index].strip()
        new_class_name = line[arrow_index + 2 : colon_index].strip()

        interested = processor.process_class_mapping(class_name, new_class_name)
        if interested and class_name:
            return class_name, new_class_name
        return None

    def process_class_member_mapping(
        self,
        class_name: str,
        new_class_name: str,
        line: str,
        processor: MappingProcessor,
    ) -> None:
        # See if we can parse one of
        #     ___ ___ -> ___
        #     ___:___:___ ___(___) -> ___
        #     ___:___:___ ___(___):___ -> ___
        #     ___:___:___ ___(___):___:___ -> ___
        # containing the optional line numbers, the return type, the original
        # field/method name, optional arguments, the optional original line
        # numbers, and the new field/method name. The original field/method
        # name may contain an original class name "___.___".
        colon_index1 = line.find(":")
        colon_index2 = -1
        colon_index3 = -1
        colon_index4 = -1
        argument_index1 = -1
        argument_index2 = -1

        if colon_index1 >= 0:
            colon_index2 = line.find(":", colon_index1 + 1)

        space_index = line.find(" ", colon_index2 + 2)
        cursor = space_index

        argument_index1 = line.find("(", space_index + 1)
        if argument_index1 >= 0:
            argument_index2 = line.find(")", argument_index1 + 1)
        if argument_index2 >= 0:
            cursor = argument_index2
            colon_index3 = line.find(":", argument_index2 + 1)
        if colon_index3 >= 0:
            cursor = colon_index3
            colon_index4 = line.find(":", colon_index3 + 1)
        if colon_index4 >= 0:
            cursor = colon_index4

        arrow_index = line.find("->", cursor + 1)

        if space_index < 0:
            raise MappingError("Missing space between type and name", line)
        if arrow_index < 0:
            raise MappingError("Missing '->'", line)

        member_type = line[colon_index2 + 1 : space_index].strip()
        name_end_index = argument_index1 if argument_index1 >= 0 else arrow_index
        member_name = line[space_index + 1 : name_end_index].strip()
        new_member_name = line[arrow_index + 2 :].strip()

        # An inlined member keeps the name of its original class.
        dot_index = member_name.rfind(".")
        if dot_index >= 0:
            class_name = member_name[:dot_index]
            member_name = member_name[dot_index + 1 :]

        if not member_type or not member_name or not new_member_name:
            return

        if argument_index2 < 0:
            processor.process_field_mapping(
                class_name, member_type, member_name, new_class_name, new_member_name
            )
            return

        first_line_number = 0
        last_line_number = 0
        new_first_line_number = 0
        new_last_line_number = 0

        if colon_index2 >= 0:
            first_line_number = _parse_line_number(line, 0, colon_index1)
            last_line_number = _parse_line_number(line, colon_index1 + 1, colon_index2)
            new_first_line_number = first_line_number
            new_last_line_number = last_line_number

        if colon_index3 >= 0:
            first_end_index = colon_index4 if colon_index4 >= 0 else arrow_index
            first_line_number = _parse_line_number(
                line, colon_index3 + 1, first_end_index
            )
            if colon_index4 < 0:
                last_line_number = first_line_number
            else:
                last_line_number = _parse_line_number(
                    line, colon_index4 + 1, arrow_index
                )

        arguments = line[argument_index1 + 1 : argument_index2].strip()
        processor.process_method_mapping(
            class_name,
            first_line_number,
            last_line_number,
            member_type,
            member_name,
            arguments,
            new_class_name,
            new_first_line_number,
            new_last_line_number,
            new_member_name,
        )
