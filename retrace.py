#!/usr/bin/env python3
# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# pyre-strict

import argparse
import io
import logging
import os
import signal
import sys
import typing
from contextlib import nullcontext

from deproguard.retrace import REGULAR_EXPRESSION, REGULAR_EXPRESSION2, ReTrace
from deproguard.utils import argparse_yes_no_flag, open_text_file


def arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""=== ReTrace ===

Deobfuscates Java stack traces with the mapping file written by ProGuard or
R8. Either file may be gzip compressed (".gz"). The stack trace is read from
stdin when no file is given.

Examples of usage:

    ./retrace.py mapping.txt crash.log

    adb logcat | ./retrace.py --all-class-names mapping.txt.gz
""",
    )

    parser.add_argument("mapping_file", help="The mapping file of the build")
    parser.add_argument(
        "stack_trace_file",
        nargs="?",
        help="The obfuscated stack trace. Defaults to stdin",
    )
    argparse_yes_no_flag(
        parser,
        "verbose",
        help="Print out the types and arguments of the original members",
    )
    argparse_yes_no_flag(
        parser,
        "all-class-names",
        help="Also deobfuscate class names outside of recognized stack frames",
    )
    parser.add_argument(
        "--regex",
        default=REGULAR_EXPRESSION,
        help="Regular expression for stack trace lines, with %%c, %%C, %%s, "
        "%%l, %%t, %%f, %%m and %%a placeholders",
    )
    parser.add_argument(
        "--regex2",
        default=REGULAR_EXPRESSION2,
        help="Regular expression for the second pass over each retraced line",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=("critical", "error", "warn", "warning", "info", "debug"),
        help="Specify the python logging level",
    )

    return parser


def _init_logging(level_str: str) -> None:
    levels = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }
    level = levels[level_str]
    logging.basicConfig(
        level=level,
        format="[%(levelname)-8s] %(message)s",
    )


def main(
    argv: typing.Optional[typing.List[str]] = None,
    stdin: typing.Optional[typing.TextIO] = None,
    stdout: typing.Optional[typing.TextIO] = None,
) -> int:
    args = arg_parser().parse_args(argv)

    _init_logging(args.log_level)

    for name, path in (
        ("Mapping", args.mapping_file),
        ("Stack trace", args.stack_trace_file),
    ):
        if path is not None and not os.path.isfile(path):
            logging.error("%s file %s does not exist", name, path)
            return 1

    if stdout is None:
        # ctrl-C in a pager such as `less` must not kill this script.
        if not sys.stdout.isatty():
            signal.signal(signal.SIGINT, signal.SIG_IGN)
        stdout = io.TextIOWrapper(
            sys.stdout.buffer, encoding="utf-8", errors="surrogateescape"
        )

    retrace = ReTrace(
        regular_expression=args.regex,
        regular_expression2=args.regex2,
        all_class_names=args.all_class_names,
        verbose=args.verbose,
    )

    if args.stack_trace_file is None and stdin is None:
        stdin = io.TextIOWrapper(
            sys.stdin.buffer, encoding="utf-8", errors="surrogateescape"
        )

    # Hold the output back until the whole input has been read, so a read
    # error doesn't leave a half retraced stack trace behind.
    output = io.StringIO()
    try:
        with open_text_file(args.mapping_file) as mapping_file:
            if args.stack_trace_file is None:
                stack_trace_context = nullcontext(stdin)
            else:
                stack_trace_context = open_text_file(args.stack_trace_file)
            with stack_trace_context as stack_trace_file:
                retrace.retrace(mapping_file, stack_trace_file, output)
    except (OSError, EOFError, UnicodeDecodeError) as e:
        logging.error("Error reading input: %s", e)
        return 1

    stdout.write(output.getvalue())
    stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
