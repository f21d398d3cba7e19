"""
Unit tests for TempFileManager.
"""

import pytest

from inline_rust.build.temp_files import TempFileManager


class TestTempFileManager:
    """Test suite for TempFileManager."""

    @pytest.fixture
    def temps(self, tmp_path):
        """Create manager rooted in the test's temp directory."""
        return TempFileManager(base_dir=tmp_path / "temps")

    def test_root_created_lazily(self, temps, tmp_path):
        """Test nothing is created until a path is requested."""
        assert not (tmp_path / "temps").exists()

        path = temps.new_path("rs")

        assert path.parent == temps.root
        assert temps.root.parent == tmp_path / "temps"
        assert temps.root.is_dir()

    def test_paths_are_unique(self, temps):
        """Test every call returns a new path."""
        paths = [temps.new_path("a") for _ in range(50)]

        assert len(set(paths)) == 50

    def test_suffix(self, temps):
        """Test the extension is applied and the file isn't created."""
        path = temps.new_path("rs")

        assert path.suffix == ".rs"
        assert not path.exists()

    def test_managers_do_not_collide(self, tmp_path):
        """Test two managers use separate directories."""
        a = TempFileManager(base_dir=tmp_path)
        b = TempFileManager(base_dir=tmp_path)

        assert a.new_path("a").parent != b.new_path("a").parent

    def test_cleanup_removes_owned_files(self, temps):
        """Test cleanup deletes files and the private directory."""
        path = temps.new_path("rs")
        path.write_text("fn f() {}")
        root = temps.root

        temps.cleanup()

        assert not path.exists()
        assert not root.exists()

    def test_cleanup_keeps_handed_off(self, temps):
        """Test handed-off paths survive cleanup."""
        src = temps.new_path("rs")
        out = temps.new_path("a")
        src.write_text("fn f() {}")
        out.write_bytes(b"!<arch>\n")

        temps.hand_off(out)
        temps.cleanup()

        assert not src.exists()
        assert out.exists()
        assert not temps.is_owned(out)

    def test_handed_off_paths_are_forgotten(self, temps):
        """Test hand-off drops the path from tracking and keeps the root for the host."""
        outputs = [temps.new_path("a") for _ in range(3)]
        for out in outputs:
            out.write_bytes(b"!<arch>\n")
            temps.hand_off(out)

        assert temps._owned == []

        scratch = temps.new_path("rs")
        scratch.write_text("fn f() {}")
        temps.cleanup()

        assert not scratch.exists()
        assert all(out.exists() for out in outputs)
        assert temps._owned == []

    def test_new_dir(self, temps):
        """Test directories are created and removed."""
        work = temps.new_dir()
        (work / "file.txt").write_text("x")

        assert work.is_dir()

        temps.cleanup()

        assert not work.exists()

    def test_keep(self, tmp_path):
        """Test keep=True leaves everything in place."""
        temps = TempFileManager(base_dir=tmp_path, keep=True)
        path = temps.new_path("rs")
        path.write_text("fn f() {}")

        temps.cleanup()

        assert path.exists()

    def test_context_manager(self, tmp_path):
        """Test leaving the context cleans up."""
        with TempFileManager(base_dir=tmp_path) as temps:
            path = temps.new_path("rs")
            path.write_text("fn f() {}")

        assert not path.exists()

    def test_cleanup_missing_files(self, temps):
        """Test cleanup tolerates paths that were never written."""
        temps.new_path("rs")

        temps.cleanup()
