"""Tests for block parsing and batch report folding."""

from proverbs.ingestion import BatchReport, LineOutcome, LineStatus, ParsedLine, parse_block


class TestParseBlock:
    def test_blank_lines_leave_gaps(self):
        """'a\\n\\nb\\nc' maps to ordinals 1, 3, 4"""
        lines = parse_block("a\n\nb\nc")
        assert [line.ordinal for line in lines] == [1, 3, 4]
        assert [line.text for line in lines] == ["a", "b", "c"]

    def test_whitespace_only_lines_are_skipped(self):
        lines = parse_block("  \n\tfirst\t\n   \nsecond")
        assert lines == [ParsedLine(2, "first"), ParsedLine(4, "second")]

    def test_windows_line_endings(self):
        lines = parse_block("one\r\ntwo\r\n")
        assert [(line.ordinal, line.text) for line in lines] == [(1, "one"), (2, "two")]

    def test_empty_block(self):
        assert parse_block("") == []
        assert parse_block("\n\n  \n") == []


class TestBatchReport:
    def test_fold_counts(self):
        outcomes = [
            LineOutcome(ordinal=3, status=LineStatus.FAILED, reason="db down", group_key=1),
            LineOutcome(ordinal=1, status=LineStatus.EMBEDDED, item_id=10, group_key=1),
            LineOutcome(ordinal=2, status=LineStatus.DEGRADED, item_id=11, reason="timeout", group_key=1),
        ]

        report = BatchReport.from_outcomes(1, outcomes)

        assert report.processed == 3
        assert report.stored == 2
        assert report.embedded == 1
        assert report.degraded == 1
        assert report.failed == 1
        assert report.failed_ordinals == [3]
        assert report.degraded_ordinals == [2]
        assert report.failures[0].reason == "db down"
        assert report.ok is False

    def test_failures_sorted_by_ordinal(self):
        outcomes = [
            LineOutcome(ordinal=9, status=LineStatus.FAILED, group_key=2, reason="x"),
            LineOutcome(ordinal=4, status=LineStatus.FAILED, group_key=2, reason="y"),
        ]
        assert BatchReport.from_outcomes(2, outcomes).failed_ordinals == [4, 9]

    def test_cross_chapter_failures_sorted_by_chapter_then_ordinal(self):
        outcomes = [
            LineOutcome(ordinal=1, status=LineStatus.FAILED, group_key=3, reason="x"),
            LineOutcome(ordinal=5, status=LineStatus.FAILED, group_key=1, reason="y"),
            LineOutcome(ordinal=2, status=LineStatus.FAILED, group_key=1, reason="z"),
        ]
        failures = BatchReport.from_outcomes(None, outcomes).failures
        assert [(f.group_key, f.ordinal) for f in failures] == [(1, 2), (1, 5), (3, 1)]

    def test_empty_batch_is_ok(self):
        report = BatchReport.from_outcomes(5, [])
        assert report.processed == 0
        assert report.ok is True
