#!/usr/bin/env python3
"""Unit tests for capture flags."""

import unittest

import nestedcapture as nc
from nestedcapture.streams import Capture, Stream


class TestCapture(unittest.TestCase):
    def test_constant_values(self):
        self.assertEqual(
            [
                nc.CAPTURE_NONE,
                nc.CAPTURE_STDIN,
                nc.CAPTURE_STDOUT,
                nc.CAPTURE_IN_OUT,
                nc.CAPTURE_STDERR,
                nc.CAPTURE_IN_ERR,
                nc.CAPTURE_OUT_ERR,
                nc.CAPTURE_ALL,
            ],
            list(range(8)),
        )

    def test_unions(self):
        self.assertEqual(Capture.STDIN | Capture.STDOUT, Capture.IN_OUT)
        self.assertEqual(Capture.STDIN | Capture.STDERR, Capture.IN_ERR)
        self.assertEqual(Capture.STDOUT | Capture.STDERR, Capture.OUT_ERR)
        self.assertEqual(Capture.IN_OUT | Capture.STDERR, Capture.ALL)

    def test_selected_keeps_fixed_order(self):
        self.assertEqual(Stream.selected(Capture.ALL), [Stream.INPUT, Stream.OUTPUT, Stream.ERROR])
        self.assertEqual(Stream.selected(6), [Stream.OUTPUT, Stream.ERROR])
        self.assertEqual(Stream.selected(0), [])

    def test_of(self):
        self.assertIs(Stream.of(Capture.STDERR), Stream.ERROR)
        self.assertIs(Stream.of(1), Stream.INPUT)
        self.assertIs(Stream.of(Stream.OUTPUT), Stream.OUTPUT)
        with self.assertRaises(ValueError):
            Stream.of(0)

    def test_attr_names(self):
        self.assertEqual([s.attr for s in Stream], ["stdin", "stdout", "stderr"])
        self.assertEqual(str(Stream.OUTPUT), "stdout")


if __name__ == "__main__":
    unittest.main()
