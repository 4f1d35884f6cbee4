import signal
import sys
import pytest

from jinplate.cli.post_exec import run_post_exec
from jinplate.exceptions import ExecError


def test_empty_command_is_a_no_op():
    assert run_post_exec([]) == 0


def test_returns_child_exit_status():
    assert run_post_exec([sys.executable, "-c", "import sys; sys.exit(5)"]) == 5


def test_previous_signal_handlers_restored():
    before = signal.getsignal(signal.SIGTERM)
    run_post_exec([sys.executable, "-c", "pass"])
    assert signal.getsignal(signal.SIGTERM) == before


@pytest.mark.skipif(not hasattr(signal, "SIGKILL"), reason="posix only")
def test_killed_child_reports_shell_style_status():
    code = "import os, signal; os.kill(os.getpid(), signal.SIGKILL)"
    assert run_post_exec([sys.executable, "-c", code]) == 128 + signal.SIGKILL


def test_missing_executable():
    with pytest.raises(ExecError, match="failed to run"):
        run_post_exec(["jinplate-no-such-command-xyz"])
