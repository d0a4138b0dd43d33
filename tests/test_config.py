"""Tests for config reading and identity lookup."""

import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from renamestash.config import (
    get_user_identity,
    get_value,
    global_config_paths,
    reflog_identity,
)
from renamestash.constants import DEFAULT_IDENTITY

from repo_fixtures import make_repo, remove_repo

IDENTITY_ENV = ("GIT_COMMITTER_NAME", "GIT_COMMITTER_EMAIL", "XDG_CONFIG_HOME")


class TestConfig(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = make_repo("rs_config_")
        self.addCleanup(remove_repo, self.repo)
        self.home = Path(tempfile.mkdtemp(prefix="rs_home_"))
        self.addCleanup(shutil.rmtree, self.home, True)
        self.global_config = self.home / "gitconfig"
        env = mock.patch.dict(os.environ, {"GIT_CONFIG_GLOBAL": str(self.global_config)})
        env.start()
        self.addCleanup(env.stop)
        for name in IDENTITY_ENV:
            os.environ.pop(name, None)

    def _repo_config(self, text: str) -> None:
        (self.repo.git_dir / "config").write_text(text)

    def test_repo_value(self) -> None:
        self.assertEqual(get_value(self.repo, "user.name"), "Test User")
        self.assertEqual(get_value(self.repo, "core.bare"), "false")
        self.assertIsNone(get_value(self.repo, "user.signingkey"))

    def test_quotes_and_inline_comment(self) -> None:
        self._repo_config('[user]\n\tname = "Quoted Name" # who\n\temail = q@example.com\n')
        self.assertEqual(get_value(self.repo, "user.name"), "Quoted Name")

    def test_bare_key_is_true(self) -> None:
        self._repo_config("[core]\n\tbare\n")
        self.assertEqual(get_value(self.repo, "core.bare"), "true")

    def test_global_fallback(self) -> None:
        self._repo_config("[core]\n\tbare = false\n")
        self.global_config.write_text("[user]\n\tname = Global User\n\temail = global@example.com\n")
        self.assertEqual(get_user_identity(self.repo), "Global User <global@example.com>")

    def test_repo_wins_over_global(self) -> None:
        self.global_config.write_text("[user]\n\tname = Global User\n")
        self.assertEqual(get_value(self.repo, "user.name"), "Test User")

    def test_env_overrides_config(self) -> None:
        os.environ["GIT_COMMITTER_NAME"] = "Env Name"
        self.assertEqual(get_user_identity(self.repo), "Env Name <test@example.com>")

    def test_unparsable_config_ignored(self) -> None:
        self._repo_config("this is not ini\n")
        self.assertIsNone(get_value(self.repo, "user.name"))

    def test_reflog_identity_default(self) -> None:
        self._repo_config("[core]\n\tbare = false\n")
        self.assertIsNone(get_user_identity(self.repo))
        self.assertEqual(reflog_identity(self.repo), DEFAULT_IDENTITY)

    def test_invalid_key(self) -> None:
        with self.assertRaises(ValueError):
            get_value(self.repo, "nosection")

    def test_global_paths(self) -> None:
        self.assertEqual(global_config_paths(), [self.global_config])
        os.environ["GIT_CONFIG_GLOBAL"] = ""
        self.assertEqual(global_config_paths(), [])
        del os.environ["GIT_CONFIG_GLOBAL"]
        os.environ["XDG_CONFIG_HOME"] = str(self.home / "xdg")
        self.assertEqual(global_config_paths()[0], self.home / "xdg" / "git" / "config")


if __name__ == "__main__":
    unittest.main()
