"""
Tests for SizeConstrainer and FFmpegService with a fake process runner
"""
import errno
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from cliprelay.downloader import SizeConstrainer, move_file
from cliprelay.errors import ProcessFailure, SizeConstraintInfeasible
from cliprelay.services import FFmpegService

MB = 1024 * 1024


class FakeRunner:
    """Stands in for ffprobe/ffmpeg; records every call"""

    def __init__(self, probe_output="120.000000\n", fail=None):
        self.probe_output = probe_output
        self.fail = fail
        self.calls = []

    async def run(self, executable, args):
        args = list(args)
        self.calls.append((executable, args))
        if executable == self.fail:
            raise ProcessFailure(f"{executable} exited with code 1: error", executable=executable, returncode=1)
        if executable == "ffprobe":
            return self.probe_output
        if executable == "ffmpeg":
            # output path sits right before the overwrite flag
            Path(args[-2]).write_bytes(b"encoded")
            return ""
        raise AssertionError(f"unexpected executable {executable}")


class TestSizeConstrainer(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.raw = self.test_dir / "downloads" / "req-1.mp4"
        self.final = self.test_dir / "videos" / "req-1.mp4"
        self.raw.parent.mkdir(parents=True)

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def _constrainer(self, runner, max_mb=10.0):
        return SizeConstrainer(FFmpegService(runner), max_file_size_mb=max_mb, safety_margin=0.9)

    def _sparse_raw(self, size):
        with open(self.raw, "wb") as f:
            f.truncate(size)

    async def test_small_file_is_moved_unchanged(self):
        payload = bytes(range(256)) * 64
        self.raw.write_bytes(payload)
        runner = FakeRunner()

        result = await self._constrainer(runner).constrain(self.raw, self.final)

        self.assertEqual(result, self.final)
        self.assertEqual(self.final.read_bytes(), payload)
        self.assertFalse(self.raw.exists())
        self.assertEqual(runner.calls, [])

    async def test_file_exactly_at_budget_is_moved(self):
        self._sparse_raw(int(9 * MB))
        runner = FakeRunner()

        await self._constrainer(runner).constrain(self.raw, self.final)

        self.assertTrue(self.final.exists())
        self.assertEqual(runner.calls, [])

    async def test_large_file_is_reencoded(self):
        self._sparse_raw(20 * MB)
        runner = FakeRunner(probe_output="120.000000\n")

        result = await self._constrainer(runner).constrain(self.raw, self.final)

        self.assertEqual(result, self.final)
        self.assertEqual(self.final.read_bytes(), b"encoded")
        # raw stays for the sweeper
        self.assertTrue(self.raw.exists())

        probe, encode = runner.calls
        self.assertEqual(probe, ("ffprobe", [
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(self.raw),
        ]))
        self.assertEqual(encode, ("ffmpeg", [
            "-i", str(self.raw),
            "-c:v", "libx264",
            "-b:v", "536000",
            "-c:a", "aac",
            "-b:a", "64000",
            str(self.final),
            "-y",
        ]))

    async def test_budget_infeasible_for_long_video(self):
        self._sparse_raw(20 * MB)
        runner = FakeRunner(probe_output="100000.0")

        with self.assertRaises(SizeConstraintInfeasible):
            await self._constrainer(runner).constrain(self.raw, self.final)
        self.assertEqual([c[0] for c in runner.calls], ["ffprobe"])
        self.assertFalse(self.final.exists())

    async def test_unreadable_probe_output(self):
        self._sparse_raw(20 * MB)
        runner = FakeRunner(probe_output="N/A\n")

        with self.assertRaises(SizeConstraintInfeasible):
            await self._constrainer(runner).constrain(self.raw, self.final)

    async def test_encoder_failure_propagates(self):
        self._sparse_raw(20 * MB)
        runner = FakeRunner(fail="ffmpeg")

        with self.assertRaises(ProcessFailure):
            await self._constrainer(runner).constrain(self.raw, self.final)

    async def test_missing_raw_file(self):
        with self.assertRaises(FileNotFoundError):
            await self._constrainer(FakeRunner()).constrain(self.raw, self.final)


class TestMoveFile(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_creates_destination_directory(self):
        src = self.test_dir / "a.mp4"
        src.write_bytes(b"video")
        dest = self.test_dir / "videos" / "a.mp4"

        move_file(src, dest)

        self.assertEqual(dest.read_bytes(), b"video")
        self.assertFalse(src.exists())

    def test_replaces_existing_destination(self):
        src = self.test_dir / "a.mp4"
        src.write_bytes(b"new")
        dest = self.test_dir / "b.mp4"
        dest.write_bytes(b"old")

        move_file(src, dest)

        self.assertEqual(dest.read_bytes(), b"new")

    def test_cross_device_move_copies_then_replaces(self):
        src = self.test_dir / "downloads" / "a.mp4"
        src.parent.mkdir()
        src.write_bytes(b"video" * 100)
        dest = self.test_dir / "videos" / "a.mp4"
        real_replace = os.replace
        calls = []

        def replace_across_devices(a, b):
            calls.append((a, b))
            if len(calls) == 1:
                raise OSError(errno.EXDEV, "Invalid cross-device link")
            return real_replace(a, b)

        with patch("cliprelay.downloader.size_constrainer.os.replace", side_effect=replace_across_devices):
            move_file(src, dest)

        self.assertEqual(len(calls), 2)
        self.assertEqual(dest.read_bytes(), b"video" * 100)
        self.assertFalse(src.exists())
        self.assertEqual(list(dest.parent.glob("*.tmp-*")), [])

    def test_other_os_errors_propagate(self):
        src = self.test_dir / "a.mp4"
        src.write_bytes(b"video")

        with patch("cliprelay.downloader.size_constrainer.os.replace",
                   side_effect=PermissionError(errno.EACCES, "denied")):
            with self.assertRaises(PermissionError):
                move_file(src, self.test_dir / "b.mp4")
        self.assertTrue(src.exists())


if __name__ == '__main__':
    unittest.main()
