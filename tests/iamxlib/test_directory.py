"""
Unit tests for iamxlib.directory — export directory creation and wipe.
"""

import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
import iamxlib.directory as dir_mod
from iamxlib.directory import ensure_directory, wipe_directory


def _populate(root: Path) -> None:
    root.mkdir(parents=True, exist_ok=True)
    (root / "users.json").write_text("[]", encoding="utf-8")
    nested = root / "old"
    nested.mkdir()
    (nested / "user-alice.json").write_text("{}", encoding="utf-8")


class TestEnsureDirectory:
    def test_creates_missing_parents(self, tmp_path):
        target = tmp_path / "a" / "b" / "c"
        assert ensure_directory(target) == target
        assert target.is_dir()

    def test_existing_directory_is_fine(self, tmp_path):
        (tmp_path / "keep.json").write_text("{}", encoding="utf-8")
        ensure_directory(tmp_path)
        assert (tmp_path / "keep.json").exists()


class TestWipeDirectory:
    def test_missing_path_warns_and_returns(self, tmp_path, caplog):
        confirm = MagicMock(return_value=True)
        with caplog.at_level(logging.WARNING):
            assert wipe_directory(tmp_path / "missing", confirm=confirm) is False
        confirm.assert_not_called()
        assert "does not exist" in caplog.text

    def test_declined_leaves_contents(self, tmp_path, caplog):
        _populate(tmp_path)
        confirm = MagicMock(return_value=False)
        with caplog.at_level(logging.INFO):
            assert wipe_directory(tmp_path, forced=False, confirm=confirm) is False
        confirm.assert_called_once()
        assert str(tmp_path) in confirm.call_args[0][0]
        assert (tmp_path / "users.json").exists()
        assert (tmp_path / "old" / "user-alice.json").exists()
        assert "aborted" in caplog.text

    def test_confirmed_removes_contents_keeps_directory(self, tmp_path):
        _populate(tmp_path)
        assert wipe_directory(tmp_path, forced=False, confirm=lambda prompt: True) is True
        assert tmp_path.is_dir()
        assert list(tmp_path.iterdir()) == []

    def test_forced_skips_confirmation(self, tmp_path):
        _populate(tmp_path)
        confirm = MagicMock(return_value=False)
        assert wipe_directory(tmp_path, forced=True, confirm=confirm) is True
        confirm.assert_not_called()
        assert list(tmp_path.iterdir()) == []

    def test_no_confirmation_collaborator_skips(self, tmp_path):
        _populate(tmp_path)
        assert wipe_directory(tmp_path, forced=False, confirm=None) is False
        assert (tmp_path / "users.json").exists()

    def test_symlinked_directory_is_unlinked_not_followed(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.json").write_text("{}", encoding="utf-8")
        export = tmp_path / "export"
        export.mkdir()
        (export / "link").symlink_to(outside, target_is_directory=True)

        assert wipe_directory(export, forced=True) is True
        assert (outside / "keep.json").exists()
        assert list(export.iterdir()) == []

    def test_deletion_failure_is_reported_not_raised(self, tmp_path, caplog):
        _populate(tmp_path)
        with patch.object(dir_mod.shutil, "rmtree", side_effect=PermissionError("in use")):
            with caplog.at_level(logging.WARNING):
                assert wipe_directory(tmp_path, forced=True) is False
        assert "Could not erase" in caplog.text

    def test_failed_entry_does_not_stop_the_rest(self, tmp_path, caplog):
        _populate(tmp_path)
        (tmp_path / "user-bob.json").write_text("{}", encoding="utf-8")
        with patch.object(dir_mod.shutil, "rmtree", side_effect=PermissionError("in use")):
            with caplog.at_level(logging.WARNING):
                assert wipe_directory(tmp_path, forced=True) is False

        assert sorted(p.name for p in tmp_path.iterdir()) == ["old"]
        assert f"Could not erase {tmp_path / 'old'}: in use" in caplog.text
        assert "Erased 2 item(s)" in caplog.text
        assert "1 could not be removed" in caplog.text
