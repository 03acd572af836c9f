"""Tests for transcript line parsing."""

from __future__ import annotations

import unittest

from app.extraction.transcript import clamp_text, parse_transcript_lines


class TranscriptParserTests(unittest.TestCase):
    def test_parses_chat_export_line(self) -> None:
        lines = parse_transcript_lines("08/09/17, 9:12 am - Joel: Yes we can")

        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].speaker, "Joel")
        self.assertEqual(lines[0].message, "Yes we can")
        self.assertEqual(lines[0].raw, "08/09/17, 9:12 am - Joel: Yes we can")

    def test_parses_plain_speaker_prefix(self) -> None:
        lines = parse_transcript_lines("Sarah: let's sync tomorrow")

        self.assertEqual(lines[0].speaker, "Sarah")
        self.assertEqual(lines[0].message, "let's sync tomorrow")

    def test_unattributed_line_keeps_whole_text_as_message(self) -> None:
        lines = parse_transcript_lines("no speaker here at all")

        self.assertIsNone(lines[0].speaker)
        self.assertEqual(lines[0].message, "no speaker here at all")

    def test_skips_blank_lines_and_keeps_order(self) -> None:
        lines = parse_transcript_lines("A1: first\n\n   \nB2: second\nthird")

        self.assertEqual([line.message for line in lines], ["first", "second", "third"])

    def test_empty_input_yields_no_lines(self) -> None:
        self.assertEqual(parse_transcript_lines(""), [])

    def test_clamp_marks_cut_with_ellipsis(self) -> None:
        clamped = clamp_text("x" * 300, 220)

        self.assertEqual(len(clamped), 220)
        self.assertTrue(clamped.endswith("…"))
        self.assertEqual(clamp_text("  short  ", 220), "short")


if __name__ == "__main__":
    unittest.main()
