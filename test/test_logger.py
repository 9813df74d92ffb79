# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import os
import tempfile
import unittest
from unittest import mock

import deproguard.logger as logger


class TestLogger(unittest.TestCase):
    def setUp(self):
        logger.reset()
        self.addCleanup(logger.reset)

    def test_parse_trace_string(self):
        self.assertEqual(logger.parse_trace_string(None), {})
        self.assertEqual(logger.parse_trace_string(""), {})
        self.assertEqual(
            logger.parse_trace_string("RETRACE:2,OTHER:1"),
            {"RETRACE": 2, "OTHER": 1},
        )
        self.assertEqual(logger.parse_trace_string("3"), {logger.ALL: 3})
        self.assertEqual(logger.parse_trace_string("bogus,RETRACE:x"), {})

    def test_log_level(self):
        with mock.patch.dict(os.environ, {"TRACE": "RETRACE:2"}):
            self.assertEqual(logger.get_log_level(), 2)

        # The setting is cached until reset.
        with mock.patch.dict(os.environ, {"TRACE": "OTHER:5"}):
            self.assertEqual(logger.get_log_level(), 2)
            logger.reset()
            self.assertEqual(logger.get_log_level(), 0)

        with mock.patch.dict(os.environ, {"TRACE": "1,RETRACE:0"}):
            logger.reset()
            self.assertEqual(logger.get_log_level(), 1)

    def test_log_to_trace_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            trace_file = os.path.join(tmp, "trace.txt")
            with mock.patch.dict(
                os.environ, {"TRACE": "RETRACE:1", "TRACEFILE": trace_file}
            ), mock.patch("sys.stderr"):
                logger.log("Retraced", 1, "->", 2)
                logger.reset()
            with open(trace_file) as f:
                self.assertEqual(f.read(), "Retraced 1 -> 2\n")

    def test_log_disabled(self):
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch(
            "sys.stderr"
        ) as stderr:
            logger.log("nothing")
            stderr.write.assert_not_called()


if __name__ == "__main__":
    unittest.main()
