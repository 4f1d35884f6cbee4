# jinplate/cli/post_exec.py
"""
Runs the command given after `--` once rendering has succeeded, forwarding
signals received by jinplate to it while it runs.
"""
import signal
import subprocess
from typing import Dict, List, Sequence
import structlog

from jinplate.exceptions import ExecError

log = structlog.get_logger(__name__)

FORWARDED_SIGNAL_NAMES = ("SIGINT", "SIGTERM", "SIGHUP", "SIGQUIT", "SIGUSR1", "SIGUSR2")


def _forwarded_signals() -> List[signal.Signals]:
    # not every platform has every signal (e.g. windows).
    return [getattr(signal, name) for name in FORWARDED_SIGNAL_NAMES if hasattr(signal, name)]


def run_post_exec(command: Sequence[str]) -> int:
    """Runs `command` with inherited stdio and returns its exit status (0 when empty)."""
    if not command:
        return 0

    log.info("post_exec_starting", command=list(command))
    try:
        process = subprocess.Popen(list(command))
    except OSError as e:
        raise ExecError(f"failed to run '{command[0]}': {e}") from e

    def forward(signum, _frame):
        if process.poll() is None:
            log.debug("forwarding_signal", signal=signum, pid=process.pid)
            process.send_signal(signum)

    previous_handlers: Dict[int, object] = {}
    try:
        for sig in _forwarded_signals():
            try:
                previous_handlers[sig] = signal.signal(sig, forward)
            except ValueError:
                # handlers can only be installed from the main thread.
                log.debug("signal_forwarding_unavailable", signal=int(sig))
                break
        return_code = process.wait()
    finally:
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)

    log.info("post_exec_finished", command=command[0], return_code=return_code)
    # a child killed by a signal reports -N; shells report 128+N.
    return return_code if return_code >= 0 else 128 - return_code
