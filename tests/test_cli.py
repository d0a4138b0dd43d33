"""Tests for the git-rename-stash command line."""

import argparse
import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from renamestash.cli import main, stash_position

from repo_fixtures import make_base_commit, make_repo, push_stash, remove_repo, stash_messages, stash_state


def run_cli(*argv: str):
    out = io.StringIO()
    with redirect_stdout(out):
        code = main(list(argv))
    return code, out.getvalue()


class TestStashPosition(unittest.TestCase):
    def test_forms(self) -> None:
        self.assertEqual(stash_position("0"), 0)
        self.assertEqual(stash_position("12"), 12)
        self.assertEqual(stash_position("stash@{3}"), 3)
        self.assertEqual(stash_position("refs/stash@{1}"), 1)

    def test_invalid(self) -> None:
        for value in ("-1", "stash@{x}", "stash", "HEAD~1", ""):
            with self.subTest(value=value):
                with self.assertRaises(argparse.ArgumentTypeError):
                    stash_position(value)


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = make_repo("rs_cli_")
        self.addCleanup(remove_repo, self.repo)
        base = make_base_commit(self.repo)
        push_stash(self.repo, base, "First", {"f": b"1"})
        push_stash(self.repo, base, "Second", {"f": b"2"})

    def test_rename(self) -> None:
        code, out = run_cli("-r", str(self.repo.path), "-m", "Better name", "stash@{1}")
        self.assertEqual(code, 0)
        self.assertRegex(out, r"^Renamed stash@\{1\} \([0-9a-f]{7}\) -> stash@\{0\} \([0-9a-f]{7}\): Better name\n$")
        self.assertEqual(stash_messages(self.repo), ["Better name", "Second"])

    def test_dry_run(self) -> None:
        before = stash_state(self.repo)
        code, out = run_cli("-r", str(self.repo.path), "--dry-run", "-m", "Preview", "0")
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("Would rename stash@{0}"))
        self.assertEqual(stash_state(self.repo), before)

    def test_missing_entry(self) -> None:
        code, out = run_cli("-r", str(self.repo.path), "-m", "x", "5")
        self.assertEqual(code, 1)
        self.assertTrue(out.startswith("Error: locate:"))

    def test_corrupt_stash_ref_names_stage(self) -> None:
        (self.repo.git_dir / "refs" / "stash").write_text("garbage\n")
        code, out = run_cli("-r", str(self.repo.path), "-m", "x", "0")
        self.assertEqual(code, 1)
        self.assertTrue(out.startswith("Error: locate: cannot read the stash list"))

    def test_discovers_from_subdirectory(self) -> None:
        sub = self.repo.path / "nested"
        sub.mkdir()
        code, _ = run_cli("-r", str(sub), "-m", "From below", "0")
        self.assertEqual(code, 0)
        self.assertEqual(stash_messages(self.repo)[0], "From below")

    def test_not_a_repository(self) -> None:
        plain = Path(tempfile.mkdtemp(prefix="rs_cli_plain_"))
        self.addCleanup(shutil.rmtree, plain, True)
        code, out = run_cli("-r", str(plain), "-m", "x", "0")
        self.assertEqual(code, 1)
        self.assertIn("not a git repository", out)

    def test_usage_errors_exit(self) -> None:
        for argv in (["0"], ["-m", "x", "bogus"]):
            with self.subTest(argv=argv):
                with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
                    main(argv)
                self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
