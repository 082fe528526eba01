"""
CLI flow tests: dry-run output, full run with mocked I/O, exit codes.
"""
import io
import os
import tempfile
import threading
import time
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch, MagicMock

from audiobook_splitter import cli
from audiobook_splitter.config import Config
from audiobook_splitter.services.errors import CoverExtractionError
from audiobook_splitter.services.progress import ProgressChannel, RunContext


FAKE_SRT = """1
00:00:01,000 --> 00:00:02,000
First

2
00:00:02,000 --> 00:00:03,500
Second

3
00:00:05,000 --> 00:00:04,000
Third
"""


def _fake_ffmpeg(cmd, **kwargs):
    for i, arg in enumerate(cmd):
        if arg == "-to":
            with open(cmd[i + 2], "wb") as f:
                f.write(b"clip")
    proc = MagicMock()
    proc.returncode = 0
    proc.stderr = ""
    return proc


class TestCliFlow(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.audio = os.path.join(self.tmp.name, "book.mp3")
        self.subtitle = os.path.join(self.tmp.name, "book.srt")
        self.out = os.path.join(self.tmp.name, "gen")
        with open(self.audio, "wb") as f:
            f.write(b"ID3")
        with open(self.subtitle, "w", encoding="utf-8") as f:
            f.write(FAKE_SRT)

    def _main(self, *extra):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = cli.main([self.audio, self.subtitle, "--output-dir", self.out, *extra])
        return code, buf.getvalue()

    @patch("audiobook_splitter.services.ffmpeg.subprocess.run")
    def test_dry_run_prints_intervals_and_writes_nothing(self, mock_run):
        code, out = self._main("--start-offset", "-200", "--dry-run")
        self.assertEqual(code, 0)
        self.assertIn("#1 [00:00:00.800 -> 00:00:01.800] trim: book-1.mp3", out)
        self.assertIn("#2 [00:00:01.800 -> 00:00:04.800] trim", out)
        self.assertIn("#3 [00:00:05.000 -> 00:00:04.000] placeholder", out)
        self.assertFalse(os.path.exists(self.out))
        mock_run.assert_not_called()

    @patch("audiobook_splitter.cli.extract_cover", side_effect=CoverExtractionError("no picture"))
    @patch("audiobook_splitter.services.ffmpeg.subprocess.run", side_effect=_fake_ffmpeg)
    def test_full_run_writes_clips_and_notes(self, mock_run, _cover):
        code, out = self._main("--start-offset", "-200", "--prefix", "bk")
        self.assertEqual(code, 0)
        clip_dir = os.path.join(self.out, "bk")
        self.assertEqual(
            sorted(os.listdir(clip_dir)),
            ["bk-1.mp3", "bk-2.mp3", "bk-3.mp3", "bk.apkg"],
        )
        self.assertIn("3/3 completed!", out)
        self.assertEqual(mock_run.call_count, 1)

        # resumed run: nothing left to cut
        mock_run.reset_mock()
        code, out = self._main("--start-offset", "-200", "--prefix", "bk")
        self.assertEqual(code, 0)
        mock_run.assert_not_called()
        self.assertIn("skipped=3", out)

    @patch("audiobook_splitter.services.ffmpeg.subprocess.run")
    def test_failed_clips_give_non_zero_exit(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stderr="broken input")
        code, out = self._main("--no-cover", "--no-notes")
        self.assertEqual(code, 1)
        self.assertIn("Failed ordinals: 1, 2", out)

    def test_missing_subtitle_file(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = cli.main([self.audio, os.path.join(self.tmp.name, "none.srt")])
        self.assertEqual(code, 2)
        self.assertIn("File not found", buf.getvalue())

    def test_invalid_configuration(self):
        code, out = self._main("--chunk-size", "0")
        self.assertEqual(code, 2)
        self.assertIn("Configuration error", out)

    @patch("audiobook_splitter.cli.split_with_progress")
    @patch("audiobook_splitter.cli.extract_cover", return_value=None)
    @patch("audiobook_splitter.cli.ensure_splittable_audio")
    def test_converted_audio_is_removed(self, mock_ensure, _cover, mock_split):
        converted = os.path.join(self.tmp.name, "book-converted.mp3")
        open(converted, "wb").close()
        mock_ensure.return_value = (converted, True)
        summary = MagicMock(counts={}, cancelled=[], failures={}, ok=True)
        mock_split.return_value = summary

        code, _ = self._main("--no-notes")

        self.assertEqual(code, 0)
        self.assertFalse(os.path.exists(converted))
        self.assertEqual(mock_split.call_args[0][1], converted)


class InterruptedChannel(ProgressChannel):
    """Raises KeyboardInterrupt on the first reads, like repeated Ctrl+C"""

    def __init__(self, interrupts):
        super().__init__()
        self.interrupts = interrupts

    def receive(self, timeout=None):
        if self.interrupts:
            self.interrupts -= 1
            raise KeyboardInterrupt
        return super().receive(timeout)


class TestSplitWithProgress(unittest.TestCase):

    def test_repeated_ctrl_c_still_waits_for_worker(self):
        finished = threading.Event()

        def fake_run(intervals, **kwargs):
            context = kwargs["context"]
            deadline = time.monotonic() + 5
            while not context.cancelled and time.monotonic() < deadline:
                time.sleep(0.01)
            time.sleep(0.1)
            finished.set()
            return "summary"

        context = RunContext(channel=InterruptedChannel(2))
        buf = io.StringIO()
        with patch("audiobook_splitter.cli.run_segmentation", side_effect=fake_run), \
                redirect_stdout(buf):
            result = cli.split_with_progress([], "book.mp3", "bk", "gen/bk", Config(), context)

        self.assertEqual(result, "summary")
        self.assertTrue(finished.is_set())
        self.assertTrue(context.cancelled)
        self.assertIn("Shutting down", buf.getvalue())
        self.assertIn("Still waiting", buf.getvalue())


if __name__ == "__main__":
    unittest.main()
