# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

from abc import ABC, abstractmethod


class MappingProcessor(ABC):
    """
    Receives the name mappings between original classes and their obfuscated
    versions, as read from a mapping file by a MappingReader.
    """

    @abstractmethod
    def process_class_mapping(self, class_name: str, new_class_name: str) -> bool:
        """
        Processes the mapping of the original class_name to new_class_name.
        Returns whether the processor wants the mappings of the members of
        this class.
        """
        ...

    @abstractmethod
    def process_field_mapping(
        self,
        class_name: str,
        field_type: str,
        field_name: str,
        new_class_name: str,
        new_field_name: str,
    ) -> None:
        """
        class_name is the original class that declares the field, which may
        differ from the class that new_class_name (the obfuscated class
        name of the enclosing mapping) is the obfuscated version of.
        """
        ...

    @abstractmethod
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
        """
        Line numbers are 0 when unknown. first_line_number/last_line_number
        are the original lines, new_first_line_number/new_last_line_number
        the obfuscated ones.
        """
        ...
