"""Tests for reflog read/append/rewrite."""

import unittest

from renamestash.constants import STASH_REF, ZEROS
from renamestash.reflog import (
    ReflogEntry,
    append_reflog,
    delete_reflog,
    make_reflog_entry,
    normalize_reflog_message,
    parse_reflog_line,
    read_reflog,
    read_reflog_lines,
    reflog_path_for_ref,
    write_reflog,
)

from repo_fixtures import make_repo, remove_repo

SHA_A = "a" * 40
SHA_B = "b" * 40
WHO = "Test User <test@example.com>"


class TestReflog(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = make_repo("rs_reflog_")
        self.addCleanup(remove_repo, self.repo)

    def test_missing_log_is_empty(self) -> None:
        self.assertEqual(read_reflog(self.repo, STASH_REF), [])

    def test_append_then_read(self) -> None:
        append_reflog(self.repo, STASH_REF, ReflogEntry(ZEROS, SHA_A, WHO, 1700000000, "+0100", "On main: one"))
        append_reflog(self.repo, STASH_REF, ReflogEntry(SHA_A, SHA_B, WHO, 1700000100, "+0100", "On main: two"))
        log = read_reflog(self.repo, STASH_REF)
        self.assertEqual([e.new for e in log], [SHA_A, SHA_B])
        self.assertEqual(log[1], ReflogEntry(SHA_A, SHA_B, WHO, 1700000100, "+0100", "On main: two"))
        self.assertEqual(
            reflog_path_for_ref(self.repo, STASH_REF).read_text().splitlines()[0],
            f"{ZEROS} {SHA_A} {WHO} 1700000000 +0100\tOn main: one",
        )

    def test_malformed_lines_skipped(self) -> None:
        path = reflog_path_for_ref(self.repo, STASH_REF)
        path.parent.mkdir(parents=True)
        path.write_text(
            "garbage\n"
            f"{ZEROS} nothex {WHO} 1 +0000\tbad\n"
            f"{ZEROS} {SHA_A} {WHO} notatime +0000\tbad\n"
            f"{ZEROS} {SHA_A} {WHO} 5 +0000\tgood\n"
        )
        (entry,) = read_reflog(self.repo, STASH_REF)
        self.assertEqual(entry.message, "good")
        self.assertEqual(entry.timestamp, 5)

    def test_message_with_tab_kept(self) -> None:
        append_reflog(self.repo, STASH_REF, ReflogEntry(ZEROS, SHA_A, WHO, 1, "+0000", "a\tb"))
        self.assertEqual(read_reflog(self.repo, STASH_REF)[0].message, "a\tb")

    def test_empty_message_has_no_tab(self) -> None:
        self.assertEqual(
            ReflogEntry(ZEROS, SHA_A, WHO, 1, "+0000", "").to_line(),
            f"{ZEROS} {SHA_A} {WHO} 1 +0000\n",
        )

    def test_normalize_collapses_newlines(self) -> None:
        self.assertEqual(normalize_reflog_message("  subject\n\nbody  line\n"), "subject body line")

    def test_make_entry_normalizes_and_stamps(self) -> None:
        entry = make_reflog_entry(ZEROS, SHA_A, "two\nlines", WHO)
        self.assertEqual(entry.message, "two lines")
        self.assertGreater(entry.timestamp, 0)
        self.assertRegex(entry.tz, r"^[+-]\d{4}$")

    def test_write_replaces_and_delete_removes(self) -> None:
        append_reflog(self.repo, STASH_REF, ReflogEntry(ZEROS, SHA_A, WHO, 1, "+0000", "one"))
        write_reflog(self.repo, STASH_REF, [f"{ZEROS} {SHA_B} {WHO} 2 +0000\tonly"])
        self.assertEqual([e.new for e in read_reflog(self.repo, STASH_REF)], [SHA_B])
        delete_reflog(self.repo, STASH_REF)
        self.assertFalse(reflog_path_for_ref(self.repo, STASH_REF).exists())
        delete_reflog(self.repo, STASH_REF)

    def test_parse_keeps_spacing_in_identity(self) -> None:
        entry = parse_reflog_line(f"{ZEROS} {SHA_A} Jane  van  Doe <jane@example.com> 7 -0500\tmsg")
        self.assertEqual(entry.who, "Jane  van  Doe <jane@example.com>")
        self.assertEqual(entry.timestamp, 7)
        self.assertEqual(entry.tz, "-0500")

    def test_raw_lines_round_trip(self) -> None:
        lines = ["not a reflog line", f"{ZEROS} {SHA_A} Odd   Name <o@e> 1 +0000\tkept"]
        write_reflog(self.repo, STASH_REF, lines)
        self.assertEqual(read_reflog_lines(self.repo, STASH_REF), lines)
        self.assertEqual(len(read_reflog(self.repo, STASH_REF)), 1)


if __name__ == "__main__":
    unittest.main()
