# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

import typing
from collections import namedtuple

from deproguard.class_util import source_file_name
from deproguard.frame_info import FrameInfo
from deproguard.mapping_processor import MappingProcessor


class FieldInfo(
    namedtuple("FieldInfo", "original_class_name original_type original_name")
):
    __slots__ = ()

    def matches(self, original_type: str) -> bool:
        # An empty type is a wildcard.
        return not original_type or original_type == self.original_type


class MethodInfo(
    namedtuple(
        "MethodInfo",
        [
            "obfuscated_first_line_number",
            "obfuscated_last_line_number",
            "original_class_name",
            "original_first_line_number",
            "original_last_line_number",
            "original_type",
            "original_name",
            "original_arguments",
        ],
    )
):
    __slots__ = ()

    def matches(
        self, obfuscated_line_number: int, original_type: str, original_arguments: str
    ) -> bool:
        return (
            (
                obfuscated_line_number == 0
                or self.obfuscated_last_line_number == 0
                or self.obfuscated_first_line_number
                <= obfuscated_line_number
                <= self.obfuscated_last_line_number
            )
            and (not original_type or original_type == self.original_type)
            and (
                not original_arguments
                or original_arguments == self.original_arguments
            )
        )

    def original_line_number(self, obfuscated_line_number: int) -> int:
        if self.original_first_line_number == self.obfuscated_first_line_number:
            return obfuscated_line_number
        if (
            self.original_last_line_number != 0
            and self.original_last_line_number != self.original_first_line_number
            and self.obfuscated_first_line_number != 0
            and obfuscated_line_number != 0
        ):
            return (
                self.original_first_line_number
                - self.obfuscated_first_line_number
                + obfuscated_line_number
            )
        return self.original_first_line_number


class FrameRemapper(MappingProcessor):
    """
    Collects the mappings of a mapping file and turns obfuscated frames back
    into the original frames they may stand for.
    """

    def __init__(self) -> None:
        # Obfuscated class name -> original class name.
        self.class_map: typing.Dict[str, str] = {}
        # Original class name -> obfuscated field name -> fields.
        self.class_field_map: typing.Dict[
            str, typing.Dict[str, typing.Set[FieldInfo]]
        ] = {}
        # Original class name -> obfuscated method name -> methods, in the
        # order of the mapping file. The dict values are unused.
        self.class_method_map: typing.Dict[
            str, typing.Dict[str, typing.Dict[MethodInfo, None]]
        ] = {}

    def process_class_mapping(self, class_name: str, new_class_name: str) -> bool:
        self.class_map[new_class_name] = class_name
        return True

    def process_field_mapping(
        self,
        class_name: str,
        field_type: str,
        field_name: str,
        new_class_name: str,
        new_field_name: str,
    ) -> None:
        field_map = self.class_field_map.setdefault(
            self.original_class_name(new_class_name), {}
        )
        field_map.setdefault(new_field_name, set()).add(
            FieldInfo(class_name, field_type, field_name)
        )

    def process_method_mapping(
        self,
        class_name: str,
        first_line_number: int,
        last_line_number: int,
        method_return_type: str,
        method_name: str,
        method_arguments: str,
        new_class_name: str,
        new_first_line_number: int,
        new_last_line_number: int,
        new_method_name: str,
    ) -> None:
        method_map = self.class_method_map.setdefault(
            self.original_class_name(new_class_name), {}
        )
        method_infos = method_map.setdefault(new_method_name, {})
        method_infos.setdefault(
            MethodInfo(
                new_first_line_number,
                new_last_line_number,
                class_name,
                first_line_number,
                last_line_number,
                method_return_type,
                method_name,
                method_arguments,
            )
        )

    def transform(self, obfuscated_frame: FrameInfo) -> typing.List[FrameInfo]:
        """
        Returns the original frames that the obfuscated frame may stand for:
        the matching fields, then the matching methods in mapping file order,
        or a single frame with only the class name remapped.
        """
        original_class_name = self.original_class_name(obfuscated_frame.class_name)

        original_frames = self._transform_field_info(
            obfuscated_frame, original_class_name
        )
        original_frames += self._transform_method_info(
            obfuscated_frame, original_class_name
        )

        if not original_frames:
            # No remapping was possible, so just use the original frame.
            source_file = obfuscated_frame.source_file
            if not source_file:
                source_file = source_file_name(original_class_name)
            original_frames.append(
                obfuscated_frame._replace(
                    class_name=original_class_name, source_file=source_file
                )
            )

        return original_frames

    def _transform_field_info(
        self, obfuscated_frame: FrameInfo, original_class_name: str
    ) -> typing.List[FrameInfo]:
        field_map = self.class_field_map.get(original_class_name)
        if field_map is None:
            return []
        field_infos = field_map.get(obfuscated_frame.field_name)
        if field_infos is None:
            return []

        original_type = self.original_type(obfuscated_frame.type)

        # Sorted for a stable order across runs.
        return [
            obfuscated_frame._replace(
                class_name=field_info.original_class_name,
                source_file=source_file_name(field_info.original_class_name),
                type=field_info.original_type,
                field_name=field_info.original_name,
            )
            for field_info in sorted(field_infos)
            if field_info.matches(original_type)
        ]

    def _transform_method_info(
        self, obfuscated_frame: FrameInfo, original_class_name: str
    ) -> typing.List[FrameInfo]:
        method_map = self.class_method_map.get(original_class_name)
        if method_map is None:
            return []
        method_infos = method_map.get(obfuscated_frame.method_name)
        if method_infos is None:
            return []

        obfuscated_line_number = obfuscated_frame.line_number
        original_type = self.original_type(obfuscated_frame.type)
        original_arguments = self.original_arguments(obfuscated_frame.arguments)

        return [
            obfuscated_frame._replace(
                class_name=method_info.original_class_name,
                source_file=source_file_name(method_info.original_class_name),
                line_number=method_info.original_line_number(obfuscated_line_number),
                type=method_info.original_type,
                method_name=method_info.original_name,
                arguments=method_info.original_arguments,
            )
            for method_info in method_infos
            if method_info.matches(
                obfuscated_line_number, original_type, original_arguments
            )
        ]

    def original_class_name(self, obfuscated_class_name: str) -> str:
        return self.class_map.get(obfuscated_class_name, obfuscated_class_name)

    def original_type(self, obfuscated_type: str) -> str:
        # Only the element type of an array is mapped.
        index = obfuscated_type.find("[")
        if index >= 0:
            return (
                self.original_class_name(obfuscated_type[:index])
                + obfuscated_type[index:]
            )
        return self.original_class_name(obfuscated_type)

    def original_arguments(self, obfuscated_arguments: str) -> str:
        return ",".join(
            self.original_type(argument.strip())
            for argument in obfuscated_arguments.split(",")
        )
