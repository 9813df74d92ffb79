# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.


# pyre-strict


import os
import sys
import typing


# Cached TRACE levels and trace output, see reset().
_levels: typing.Optional[typing.Dict[str, int]] = None
_trace_file: typing.Optional[typing.TextIO] = None

ALL = "__ALL__"
MODULE = "RETRACE"


def parse_trace_string(trace_string: typing.Optional[str]) -> typing.Dict[str, int]:
    """
    TRACE is a comma separated list of MODULE:LEVEL entries. A bare LEVEL
    applies to all modules. Malformed entries are ignored.
    """
    levels = {}
    for entry in (trace_string or "").split(","):
        module, _, level = entry.rpartition(":")
        try:
            levels[module or ALL] = int(level)
        except ValueError:
            continue
    return levels


def get_log_level() -> int:
    global _levels
    if _levels is None:
        _levels = parse_trace_string(os.environ.get("TRACE"))
    return max(_levels.get(MODULE, 0), _levels.get(ALL, 0))


def get_trace_file() -> typing.TextIO:
    global _trace_file
    if _trace_file is None:
        path = os.environ.get("TRACEFILE")
        if path:
            sys.stderr.write("Trace output will go to %s\n" % path)
            _trace_file = open(path, "w")  # noqa: P201
        else:
            _trace_file = sys.stderr
    return _trace_file


def reset() -> None:
    """Forget the cached TRACE settings, e.g. after changing the environment."""
    global _levels, _trace_file
    if _trace_file is not None and _trace_file is not sys.stderr:
        _trace_file.close()
    _levels = None
    _trace_file = None


def log(*stuff: typing.Any) -> None:
    if get_log_level() > 0:
        print(*stuff, file=get_trace_file())
