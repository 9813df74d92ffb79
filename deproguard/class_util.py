# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

import typing


def external_class_name(name: str) -> str:
    """
    Converts an internal class name into an external class name,
    e.g. java/lang/Object -> java.lang.Object
    """
    return name.replace("/", ".")


def internal_class_name(name: str) -> str:
    return name.replace(".", "/")


def source_file_name(class_name: str) -> str:
    """
    Guesses the source file of a class: the simple name up to the first '$'
    for nested classes, otherwise the simple name plus ".java".
    """
    if not class_name:
        return class_name

    index1 = class_name.rfind(".") + 1
    index2 = class_name.find("$", index1)
    if index2 > 0:
        return class_name[index1:index2]
    return class_name[index1:] + ".java"


def split_with_delimiters(
    s: str, is_delimiter: typing.Callable[[str], bool]
) -> typing.List[str]:
    """
    Splits s into tokens, keeping every delimiter as a token of its own, so
    that "".join() of the result gives back s.
    """
    tokens = []
    start = 0
    for idx, c in enumerate(s):
        if is_delimiter(c):
            if start < idx:
                tokens.append(s[start:idx])
            tokens.append(c)
            start = idx + 1
    if start < len(s):
        tokens.append(s[start:])
    return tokens
