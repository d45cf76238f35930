"""Child process execution with signal forwarding."""

import os
import shutil
import signal
import subprocess
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping, Optional, Sequence

import structlog

from .errors import ExecError, NoShellFoundError

logger = structlog.get_logger(__name__)

#: Signals received by awssume that are forwarded to the running child
RELAYED_SIGNALS = (signal.SIGINT, signal.SIGTERM)

#: Shells tried, in order, when $SHELL is not set
FALLBACK_SHELLS = ("/bin/bash", "/bin/sh")


def get_shell() -> str:
    """Return the shell to run when no command is given.

    Returns:
        $SHELL if set, otherwise the first executable of /bin/bash, /bin/sh

    Raises:
        NoShellFoundError: If no shell can be found
    """
    shell = os.getenv("SHELL")
    if shell:
        return shell

    for candidate in FALLBACK_SHELLS:
        found = shutil.which(candidate)
        if found:
            return found

    raise NoShellFoundError()


def exit_status(returncode: int) -> int:
    """Convert a Popen return code to a process exit status.

    A child terminated by signal N (negative return code) maps to 128 + N,
    the convention used by POSIX shells.
    """
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


class SignalRelay:
    """Forwards the first relayed signal to the child process.

    A signal received before a child is attached is held and delivered by
    ``attach``. Later signals are swallowed.
    """

    def __init__(self):
        self.process: Optional[subprocess.Popen] = None
        self.pending: Optional[int] = None
        self._fired = False

    def handle(self, signum, _frame) -> None:
        if self._fired:
            return
        self._fired = True
        if self.process is None:
            self.pending = signum
            return
        self._forward(signum)

    def attach(self, process: subprocess.Popen) -> None:
        self.process = process
        if self.pending is not None:
            signum, self.pending = self.pending, None
            self._forward(signum)

    def _forward(self, signum: int) -> None:
        if self.process.poll() is None:
            logger.debug("Forwarding signal to child", signal=signal.Signals(signum).name, pid=self.process.pid)
            self.process.send_signal(signum)


@contextmanager
def relay_signals() -> Iterator[SignalRelay]:
    """Install SIGINT/SIGTERM handlers feeding a SignalRelay for the block.

    The previous handlers are restored on exit. Outside the main thread
    nothing is installed since Python only delivers signals there.
    """
    relay = SignalRelay()
    if threading.current_thread() is not threading.main_thread():
        yield relay
        return

    previous = {sig: signal.signal(sig, relay.handle) for sig in RELAYED_SIGNALS}
    try:
        yield relay
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def run_command(
    command: str,
    args: Sequence[str],
    env: Mapping[str, str],
    popen: Optional[Callable[..., subprocess.Popen]] = None,
) -> int:
    """Run ``command`` with ``args`` and ``env``, inheriting stdin/stdout/stderr.

    Blocks until the child exits.

    Returns:
        The child's exit status (128 + N if it was killed by signal N)

    Raises:
        ExecError: If the child cannot be started
    """
    popen = popen or subprocess.Popen
    with relay_signals() as relay:
        try:
            process = popen([command, *args], env=dict(env))
        except OSError as e:
            raise ExecError(command, args, e) from e

        logger.debug("Child process started", command=command, pid=process.pid)
        relay.attach(process)
        returncode = process.wait()

    status = exit_status(returncode)
    logger.debug("Child process exited", command=command, returncode=returncode, status=status)
    return status
