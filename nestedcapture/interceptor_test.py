#!/usr/bin/env python3
"""Unit tests for operation forwarding through `StreamInterceptor`."""

import io
import threading
import unittest
from types import SimpleNamespace
from unittest import mock

from nestedcapture.config import CaptureConfig
from nestedcapture.engine import NestedCapture
from nestedcapture.streams import CAPTURE_ALL, CAPTURE_STDIN, CAPTURE_STDOUT, Stream


class TestForwarding(unittest.TestCase):
    """Each stream operation reaches the buffer on top of the stack."""

    def setUp(self):
        self.ns = SimpleNamespace(stdin=io.StringIO(), stdout=io.StringIO(), stderr=io.StringIO())
        self.engine = NestedCapture(namespace=self.ns, config=CaptureConfig())

    def feed(self, text: str) -> None:
        self.engine.get_next_in().write(text)
        self.engine.start(CAPTURE_STDIN)
        self.addCleanup(self.engine.stop, CAPTURE_STDIN)

    def test_getc_reads_one_character_at_a_time(self):
        self.feed("ab")
        self.assertEqual(self.ns.stdin.getc(), "a")
        self.assertEqual(self.ns.stdin.getc(), "b")
        self.assertEqual(self.ns.stdin.getc(), "")

    def test_read_with_size(self):
        self.feed("hello world")
        self.assertEqual(self.ns.stdin.read(5), "hello")
        self.assertEqual(self.ns.stdin.read(), " world")
        self.assertEqual(self.ns.stdin.read(), "")

    def test_iteration_and_readlines(self):
        self.feed("one\ntwo\nthree\n")
        self.assertEqual(next(iter(self.ns.stdin)), "one\n")
        self.assertEqual(self.ns.stdin.readlines(), ["two\n", "three\n"])
        self.assertEqual(list(self.ns.stdin), [])

    def test_print_and_writelines(self):
        self.engine.start(CAPTURE_STDOUT)
        print("a", "b", sep="-", file=self.ns.stdout)
        self.ns.stdout.writelines(["c\n", "d\n"])
        self.ns.stdout.flush()
        self.engine.stop(CAPTURE_STDOUT)
        self.assertEqual(self.engine.get_last_out().read(), "a-b\nc\nd\n")

    def test_line_endings_pass_through(self):
        self.engine.start(CAPTURE_STDOUT)
        self.ns.stdout.write("dos\r\nmac\rend")
        self.engine.stop(CAPTURE_STDOUT)
        self.assertEqual(self.engine.get_last_out().read(), "dos\r\nmac\rend")

    def test_attributes_forward_to_top_buffer(self):
        self.engine.start(CAPTURE_STDOUT)
        self.assertEqual(self.ns.stdout.encoding, "utf-8")
        self.assertFalse(self.ns.stdout.isatty())
        self.assertTrue(self.ns.stdout.seekable())
        self.assertIn("depth=1", repr(self.ns.stdout))
        self.engine.stop(CAPTURE_STDOUT)

    def test_reference_taken_at_outer_level_reaches_inner_buffer(self):
        self.engine.start(CAPTURE_STDOUT)
        handle = self.ns.stdout
        inner = io.StringIO()
        self.engine.set_next_out(inner)
        self.engine.start(CAPTURE_STDOUT)
        handle.write("late bound")
        self.engine.stop(CAPTURE_STDOUT)
        self.engine.stop(CAPTURE_STDOUT)
        self.assertEqual(inner.getvalue(), "late bound")
        self.assertEqual(self.engine.get_last_out().read(), "")

    def test_reference_kept_after_stop_reaches_original(self):
        original = self.ns.stdout
        self.engine.start(CAPTURE_STDOUT)
        handle = self.ns.stdout
        self.engine.stop(CAPTURE_STDOUT)
        handle.write("after")
        self.assertEqual(original.getvalue(), "after")

    def test_close_closes_buffer_but_keeps_capture(self):
        self.engine.start(CAPTURE_STDOUT)
        buffer = self.engine.top(Stream.OUTPUT)
        self.ns.stdout.close()
        self.assertTrue(buffer.closed)
        self.assertTrue(self.ns.stdout.closed)
        self.assertEqual(self.engine.depth(CAPTURE_STDOUT), 1)

        self.engine.stop(CAPTURE_STDOUT)
        self.assertIs(self.engine.get_last_out(), buffer)
        self.assertFalse(self.ns.stdout.closed)

    def test_all_streams_at_once(self):
        self.engine.get_next_in().write("ping\n")
        self.engine.start(CAPTURE_ALL)
        line = self.ns.stdin.readline()
        self.ns.stdout.write(line.replace("ping", "pong"))
        self.ns.stderr.write("done\n")
        self.engine.stop(CAPTURE_ALL)
        self.assertEqual(self.engine.get_last_out().read(), "pong\n")
        self.assertEqual(self.engine.get_last_err().read(), "done\n")


class GatedBuffer(io.StringIO):
    """StringIO whose writes wait until `release` is set."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()
        self.release.set()

    def write(self, s):
        self.entered.set()
        self.release.wait(5)
        return super().write(s)


class TestThreading(unittest.TestCase):
    def test_stop_waits_for_write_in_flight(self):
        ns = SimpleNamespace(stdin=io.StringIO(), stdout=io.StringIO(), stderr=io.StringIO())
        engine = NestedCapture(namespace=ns, config=CaptureConfig())
        buffer = GatedBuffer()

        # Make the gated buffer engine-created so stop rewinds it
        with mock.patch("nestedcapture.engine.new_buffer", return_value=buffer):
            engine.start(CAPTURE_STDOUT)
        ns.stdout.write("hello world\n")

        buffer.entered.clear()
        buffer.release.clear()
        writer = threading.Thread(target=ns.stdout.write, args=("XX",))
        writer.start()
        self.assertTrue(buffer.entered.wait(5))

        stopper = threading.Thread(target=engine.stop, args=(CAPTURE_STDOUT,))
        stopper.start()
        stopper.join(0.2)
        self.assertTrue(stopper.is_alive())
        self.assertEqual(engine.depth(CAPTURE_STDOUT), 1)

        buffer.release.set()
        writer.join(5)
        stopper.join(5)

        self.assertEqual(engine.depth(CAPTURE_STDOUT), 0)
        self.assertIs(engine.get_last_out(), buffer)
        self.assertEqual(buffer.read(), "hello world\nXX")


if __name__ == "__main__":
    unittest.main()
