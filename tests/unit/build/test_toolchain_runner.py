"""
Unit tests for ToolchainRunner.
"""

import subprocess
import sys
from unittest.mock import Mock, patch

import psutil
import pytest

from inline_rust.build.toolchain_runner import ProcessResult, ToolchainRunner, terminate_process_tree


class TestProcessResult:
    """Test suite for ProcessResult."""

    def test_success(self):
        assert ProcessResult(command=["rustc"], returncode=0, stdout="", stderr="").success is True

    def test_failure(self):
        assert ProcessResult(command=["rustc"], returncode=1, stdout="", stderr="").success is False


class TestToolchainRunner:
    """Test suite for ToolchainRunner."""

    @patch("subprocess.Popen")
    def test_run_captures_output(self, mock_popen):
        """Test exit status and both streams are captured."""
        proc = Mock()
        proc.returncode = 1
        proc.communicate.return_value = ("out", "error: expected `;`")
        mock_popen.return_value = proc

        result = ToolchainRunner().run(["rustc", "x.rs"])

        assert result.command == ["rustc", "x.rs"]
        assert result.returncode == 1
        assert result.stdout == "out"
        assert result.stderr == "error: expected `;`"

    @patch("subprocess.Popen")
    def test_run_popen_arguments(self, mock_popen, tmp_path):
        """Test the child gets no stdin and piped text output."""
        proc = Mock()
        proc.returncode = 0
        proc.communicate.return_value = ("", "")
        mock_popen.return_value = proc

        ToolchainRunner(cwd=tmp_path).run(["cargo", tmp_path / "Cargo.toml"])

        args, kwargs = mock_popen.call_args
        assert args[0] == ["cargo", str(tmp_path / "Cargo.toml")]
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.PIPE
        assert kwargs["text"] is True
        assert kwargs["cwd"] == str(tmp_path)

    @patch("subprocess.Popen")
    def test_run_none_streams(self, mock_popen):
        """Test missing streams become empty strings."""
        proc = Mock()
        proc.returncode = 0
        proc.communicate.return_value = (None, None)
        mock_popen.return_value = proc

        result = ToolchainRunner().run(["rustc"])

        assert result.stdout == ""
        assert result.stderr == ""

    @patch("inline_rust.build.toolchain_runner.terminate_process_tree")
    @patch("subprocess.Popen")
    def test_keyboard_interrupt_kills_tree(self, mock_popen, mock_terminate):
        """Test Ctrl+C terminates the child tree and propagates."""
        proc = Mock()
        proc.pid = 31337
        proc.communicate.side_effect = KeyboardInterrupt
        mock_popen.return_value = proc

        with pytest.raises(KeyboardInterrupt):
            ToolchainRunner().run(["cargo", "rustc"])

        mock_terminate.assert_called_once_with(31337)

    def test_missing_program(self):
        """Test a missing executable raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ToolchainRunner().run(["definitely-not-a-rust-compiler-xyz"])

    def test_real_process(self):
        """Test running a real process end to end."""
        script = "import sys; sys.stdout.write('hi'); sys.stderr.write('boom'); sys.exit(3)"

        result = ToolchainRunner().run([sys.executable, "-c", script])

        assert result.returncode == 3
        assert result.stdout == "hi"
        assert result.stderr == "boom"


class TestTerminateProcessTree:
    """Test suite for terminate_process_tree."""

    @patch("psutil.Process", side_effect=psutil.NoSuchProcess(999999))
    def test_missing_process(self, _mock_process):
        """Test a process that's already gone is a no-op."""
        assert terminate_process_tree(999999) == 0

    def test_terminates_children_first(self):
        """Test children are signalled before the root."""
        order = []
        root = Mock(pid=1)
        child = Mock(pid=2)
        root.terminate.side_effect = lambda: order.append("root")
        child.terminate.side_effect = lambda: order.append("child")
        root.children.return_value = [child]

        with patch("psutil.Process", return_value=root), \
                patch("psutil.wait_procs", return_value=([root, child], [])):
            count = terminate_process_tree(1)

        assert count == 2
        assert order == ["child", "root"]

    def test_force_kills_survivors(self):
        """Test processes alive after the grace period are killed."""
        root = Mock(pid=1)
        root.children.return_value = []

        with patch("psutil.Process", return_value=root), \
                patch("psutil.wait_procs", return_value=([], [root])):
            terminate_process_tree(1, timeout=0)

        root.kill.assert_called_once()
