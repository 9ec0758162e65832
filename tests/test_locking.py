"""Tests for rdtrack.lib.locking module."""

import pytest

from rdtrack.lib.locking import LockTimeout, record_lock, sequence_lock


class TestRecordLock:
    def test_creates_lock_file(self, tmp_path):
        with record_lock(tmp_path, "runner"):
            assert (tmp_path / "locks" / "runner.lock").exists()
        # Lock files stay behind after release
        assert (tmp_path / "locks" / "runner.lock").exists()

    def test_reacquire_after_release(self, tmp_path):
        with record_lock(tmp_path, "runner", timeout=0.2):
            pass
        with record_lock(tmp_path, "runner", timeout=0.2):
            pass

    def test_timeout_while_held(self, tmp_path):
        """flock locks are per open file, so a second open in-process conflicts."""
        with record_lock(tmp_path, "runner"):
            with pytest.raises(LockTimeout):
                with record_lock(tmp_path, "runner", timeout=0.1):
                    pass

    def test_different_records_independent(self, tmp_path):
        with record_lock(tmp_path, "a"):
            with record_lock(tmp_path, "b", timeout=0.1):
                pass


class TestSequenceLock:
    def test_timeout_while_held(self, tmp_path):
        with sequence_lock(tmp_path):
            with pytest.raises(LockTimeout):
                with sequence_lock(tmp_path, timeout=0.1):
                    pass
