"""Tests for CLI build and emit commands."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from inline_rust.cli import main


def stub_popen(returncode=0, stderr=""):
    """Popen replacement that writes the expected archive on success."""

    def _popen(cmd, **kwargs):
        if returncode == 0:
            if cmd[0] == "cargo":
                manifest = Path(cmd[3].split("=", 1)[1])
                lib = manifest.parent / "target" / "release" / "libquasiquote.a"
                lib.parent.mkdir(parents=True, exist_ok=True)
                lib.write_bytes(b"!<arch>\n")
            else:
                Path(cmd[-1]).write_bytes(b"!<arch>\n")
        proc = Mock()
        proc.pid = 1
        proc.returncode = returncode
        proc.communicate.return_value = ("", stderr)
        return proc

    return _popen


class TestCLIBuild:
    """Tests for the 'inline-rust build' command."""

    @pytest.fixture
    def project_dir(self, tmp_path, monkeypatch):
        """Project directory with a config pointing temps into tmp_path."""
        (tmp_path / "inline-rust.ini").write_text(f"[build]\ntemp_dir = {tmp_path / 'temps'}\n")
        monkeypatch.chdir(tmp_path)
        return tmp_path

    @pytest.fixture
    def add_rs(self, project_dir):
        path = project_dir / "add.rs"
        path.write_text("#[no_mangle] pub extern fn add(a: i32, b: i32) -> i32 { a + b }\n")
        return path

    def test_build_success(self, add_rs, capsys):
        """Test successful build prints the archive path."""
        with patch("subprocess.Popen", side_effect=stub_popen()) as mock_popen:
            with pytest.raises(SystemExit) as exc_info:
                main(["build", str(add_rs)])

        assert exc_info.value.code == 0
        cmd = mock_popen.call_args[0][0]
        assert cmd[0] == "rustc"
        out = capsys.readouterr().out
        assert "Build successful!" in out
        assert f"Archive: {cmd[-1]}" in out

    def test_build_with_crate(self, add_rs):
        """Test --crate switches to cargo."""
        with patch("subprocess.Popen", side_effect=stub_popen()) as mock_popen:
            with pytest.raises(SystemExit) as exc_info:
                main(["build", str(add_rs), "--crate", "rand=0.3"])

        assert exc_info.value.code == 0
        assert mock_popen.call_args[0][0][:3] == ["cargo", "rustc", "--release"]

    def test_build_rustc_flags(self, add_rs):
        """Test --rustc-flag values are appended to the rustc command."""
        with patch("subprocess.Popen", side_effect=stub_popen()) as mock_popen:
            with pytest.raises(SystemExit):
                main(["build", str(add_rs), "--rustc-flag=-g", "--rustc-flag=-Copt-level=2"])

        cmd = mock_popen.call_args[0][0]
        assert cmd[1:4] == ["--crate-type=staticlib", "-g", "-Copt-level=2"]

    def test_build_link_list(self, add_rs, project_dir):
        """Test --link-list records the archive."""
        link_list = project_dir / "link.txt"

        with patch("subprocess.Popen", side_effect=stub_popen()):
            with pytest.raises(SystemExit):
                main(["build", str(add_rs), "--link-list", str(link_list)])

        assert link_list.read_text(encoding="utf-8").startswith("raw-object\t")

    def test_build_failure_shows_diagnostics(self, add_rs, capsys):
        """Test rustc's stderr reaches the user unmodified."""
        stderr = "error: expected `;`\n --> add.rs:1:5\n"

        with patch("subprocess.Popen", side_effect=stub_popen(returncode=1, stderr=stderr)):
            with pytest.raises(SystemExit) as exc_info:
                main(["build", str(add_rs)])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Rust source in quasiquote failed to compile:" in err
        assert stderr in err

    def test_build_bad_crate_spec(self, add_rs, capsys):
        """Test malformed --crate values are reported."""
        with patch("subprocess.Popen") as mock_popen:
            with pytest.raises(SystemExit) as exc_info:
                main(["build", str(add_rs), "--crate", "rand"])

        assert exc_info.value.code == 1
        mock_popen.assert_not_called()
        assert "Invalid crate specification" in capsys.readouterr().err

    def test_build_missing_fragment(self, project_dir, capsys):
        """Test missing fragment files are reported."""
        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(project_dir / "missing.rs")])

        assert exc_info.value.code == 1
        assert "Fragment file not found" in capsys.readouterr().err

    def test_build_bad_config(self, add_rs, project_dir, capsys):
        """Test config errors are reported."""
        (project_dir / "inline-rust.ini").write_text("[build]\nwork_dir_mode = bogus\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(add_rs)])

        assert exc_info.value.code == 1
        assert "work_dir_mode" in capsys.readouterr().err

    def test_build_keyboard_interrupt(self, add_rs):
        """Test Ctrl+C exits with 130."""
        with patch("subprocess.Popen", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main(["build", str(add_rs)])

        assert exc_info.value.code == 130

    def test_no_command_shows_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 0
        assert "usage:" in capsys.readouterr().out


class TestCLIEmit:
    """Tests for the 'inline-rust emit' command."""

    def test_emit_source(self, tmp_path, capsys):
        """Test fragments are printed in argument order."""
        a = tmp_path / "a.rs"
        b = tmp_path / "b.rs"
        a.write_text("fn a() {}\n")
        b.write_text("fn b() {}\n")

        main(["emit", str(a), str(b)])

        assert capsys.readouterr().out == "fn a() {}\nfn b() {}\n"

    def test_emit_with_crates(self, tmp_path, capsys):
        """Test crates add extern crate lines and a manifest."""
        a = tmp_path / "a.rs"
        a.write_text("fn a() {}")

        main(["emit", str(a), "--crate", "rand=0.3", "--crate", "libc=0.1"])

        out = capsys.readouterr().out
        assert out.startswith("extern crate rand;\nextern crate libc;\nfn a() {}\n")
        assert "# Cargo.toml" in out
        assert 'rand = "0.3"' in out.splitlines()
        assert 'libc = "0.1"' in out.splitlines()

    def test_emit_matches_build_source(self, tmp_path, monkeypatch, capsys):
        """Test emit prints exactly the source the build command compiles."""
        (tmp_path / "inline-rust.ini").write_text(f"[build]\ntemp_dir = {tmp_path / 'temps'}\n")
        monkeypatch.chdir(tmp_path)
        a = tmp_path / "a.rs"
        a.write_text("fn a() {}\n")
        built = {}

        def record_source(cmd, **kwargs):
            manifest = Path(cmd[3].split("=", 1)[1])
            built["source"] = (manifest.parent / "quasiquote.rs").read_text(encoding="utf-8")
            return stub_popen()(cmd, **kwargs)

        with patch("subprocess.Popen", side_effect=record_source):
            with pytest.raises(SystemExit):
                main(["build", str(a), "--crate", "rand=0.3"])
        capsys.readouterr()

        main(["emit", str(a), "--crate", "rand=0.3"])

        emitted = capsys.readouterr().out.split("\n# Cargo.toml\n")[0]
        assert emitted == built["source"]
