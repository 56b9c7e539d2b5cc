import json
import os
import struct
import tempfile
import unittest
import sys
import zlib
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from click.testing import CliRunner

from pnggrep.cli import cli
from pnggrep.png import PNG_SIGNATURE


def make_chunk(chunk_type: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + data) & 0xffffffff
    return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', crc)


def make_png(*texts: bytes) -> bytes:
    ihdr = make_chunk(b"IHDR", struct.pack('>IIBBBBB', 32, 16, 8, 2, 0, 0, 0))
    body = b"".join(make_chunk(b"tEXt", t) for t in texts)
    return PNG_SIGNATURE + ihdr + body + make_chunk(b"IEND", b"")


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.runner = CliRunner()
        self.env = {"LOG_FILE": "", "PNGGREP_DEBUG": "0"}
        self.jane = self._write("jane.png", make_png(b"Author\x00Jane", b"Title\x00sunset"))
        self.bob = self._write("bob.png", make_png(b"Author\x00Bob"))
        self.broken = self._write("broken.png", b"IAMADUCK")

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, name, data):
        path = os.path.join(self.tmp.name, name)
        with open(path, 'wb') as f:
            f.write(data)
        return path

    def invoke(self, *args):
        return self.runner.invoke(cli, list(args), env=self.env)

    def test_grep_match(self):
        result = self.invoke("grep", "Jane", self.jane, self.bob)
        self.assertEqual(result.exit_code, 0)
        self.assertIn(self.jane, result.output)
        self.assertNotIn(self.bob, result.output)

    def test_grep_show_match(self):
        result = self.invoke("grep", "-w", "Jane", self.jane)
        self.assertEqual(result.exit_code, 0)
        self.assertIn(repr("Author\x00Jane"), result.output)
        self.assertNotIn("sunset", result.output)

    def test_grep_ignore_case(self):
        self.assertEqual(self.invoke("grep", "jane", self.jane).exit_code, 1)
        self.assertEqual(self.invoke("grep", "-i", "jane", self.jane).exit_code, 0)

    def test_grep_no_match(self):
        result = self.invoke("grep", "Alice", self.jane, self.bob)
        self.assertEqual(result.exit_code, 1)
        self.assertNotIn(self.jane, result.output)

    def test_grep_invalid_regex(self):
        result = self.invoke("grep", "(oops", self.jane)
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Invalid regexp", result.output)

    def test_grep_stops_at_first_error(self):
        result = self.invoke("grep", "Jane", self.broken, self.jane)
        self.assertEqual(result.exit_code, 2)
        self.assertIn("wrong PNG header", result.output)
        self.assertNotIn(self.jane + "\n", result.output)

    def test_grep_missing_file(self):
        result = self.invoke("grep", "Jane", os.path.join(self.tmp.name, "nope.png"))
        self.assertEqual(result.exit_code, 2)

    def test_grep_directory_after_match(self):
        result = self.invoke("grep", "Jane", self.jane, self.tmp.name, self.bob)
        self.assertEqual(result.exit_code, 2)
        self.assertIn(self.jane + "\n", result.output)
        self.assertIn(self.tmp.name + ":", result.output)
        self.assertNotIn("Usage:", result.output)

    def test_grep_json(self):
        result = self.invoke("--json", "grep", "Author", self.jane, self.bob)
        self.assertEqual(result.exit_code, 0)
        payload = json.loads(result.output)
        self.assertEqual(payload, [
            {"file": self.jane, "matches": ["Author\x00Jane"]},
            {"file": self.bob, "matches": ["Author\x00Bob"]},
        ])

    def test_info(self):
        result = self.invoke("--json", "info", self.jane)
        self.assertEqual(result.exit_code, 0)
        payload = json.loads(result.output)
        self.assertEqual(len(payload), 1)
        info = payload[0]
        self.assertEqual((info["width"], info["height"]), (32, 16))
        self.assertEqual(info["color_type"], 2)
        self.assertEqual(info["chunk_count"], 4)
        self.assertEqual([c["type"] for c in info["chunks"]], ["IHDR", "tEXt", "tEXt", "IEND"])

    def test_info_error(self):
        result = self.invoke("info", self.broken)
        self.assertEqual(result.exit_code, 2)

if __name__ == "__main__":
    unittest.main()
