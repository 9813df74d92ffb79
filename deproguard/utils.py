# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.


# pyre-strict


import argparse
import gzip
import os
import typing


def get_file_ext(file_name: str) -> str:
    return os.path.splitext(file_name)[1]


def open_text_file(file_name: str) -> typing.TextIO:
    """
    Opens a UTF-8 text file for reading, decompressing it on the fly if its
    name ends in ".gz".
    """
    if get_file_ext(file_name) == ".gz":
        return typing.cast(
            typing.TextIO,
            gzip.open(file_name, "rt", encoding="utf-8", errors="surrogateescape"),
        )
    return open(file_name, encoding="utf-8", errors="surrogateescape")


def argparse_yes_no_flag(
    parser: argparse.ArgumentParser,
    flag_name: str,
    on_prefix: str = "",
    off_prefix: str = "no-",
    **kwargs: typing.Any,
) -> None:
    class FlagAction(argparse.Action):
        def __init__(self, option_strings, dest, nargs=None, **kwargs):
            super(FlagAction, self).__init__(option_strings, dest, nargs=0, **kwargs)

        def __call__(self, parser, namespace, values, option_string=None):
            setattr(
                namespace,
                self.dest,
                False if option_string.startswith(f"--{off_prefix}") else True,
            )

    parser.add_argument(
        f"--{on_prefix}{flag_name}",
        f"--{off_prefix}{flag_name}",
        dest=flag_name.replace("-", "_"),
        action=FlagAction,
        default=False,
        **kwargs,
    )
