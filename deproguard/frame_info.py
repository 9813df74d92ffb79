# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from collections import namedtuple


# A single stack frame, or a class/member reference pulled out of an exception
# message. Either freshly parsed from an obfuscated line or produced by
# remapping one. line_number is 0 when unknown.
FrameInfo = namedtuple(
    "FrameInfo",
    "class_name source_file line_number type field_name method_name arguments",
    defaults=("", "", 0, "", "", "", ""),
)
