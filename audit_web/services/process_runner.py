from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from audit_web.domain.models import ProcessOutcome

log = logging.getLogger(__name__)

CompletionCallback = Callable[[ProcessOutcome], None]


@dataclass
class ProcessRunner:
    """
    Launches the external auditor in the background.

    run() returns a Future that resolves to ProcessOutcome(exit_code, stderr) once the
    child exits. stdout is only logged; stderr is buffered for failure reporting.
    """
    command: Sequence[str]
    config_file: Path
    work_dir: Path
    device: str = "mobile"
    _executor: ThreadPoolExecutor = field(
        default_factory=lambda: ThreadPoolExecutor(max_workers=1, thread_name_prefix="auditor"),
        init=False,
        repr=False,
    )

    def build_command(self, target_url: str) -> List[str]:
        return [
            *self.command,
            "--site", target_url,
            "--config-file", str(self.config_file),
            "--device", self.device,
        ]

    def run(
        self,
        target_url: str,
        on_complete: Optional[CompletionCallback] = None,
        *,
        timeout_seconds: Optional[float] = None,
    ) -> "Future[ProcessOutcome]":
        log.info("Starting audit for %s", target_url)
        future = self._executor.submit(self._execute, self.build_command(target_url), timeout_seconds)
        if on_complete is not None:
            future.add_done_callback(lambda f: on_complete(_outcome_of(f)))
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _execute(self, cmd: List[str], timeout_seconds: Optional[float]) -> ProcessOutcome:
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(self.work_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                start_new_session=True,
            )
        except OSError as e:
            log.error("Failed to launch auditor %s: %s", cmd[0], e)
            return ProcessOutcome(exit_code=None, stderr=f"Failed to launch {cmd[0]}: {e}")

        stderr_lines: List[str] = []
        drain = threading.Thread(target=_drain_stderr, args=(proc, stderr_lines), daemon=True)
        drain.start()

        timed_out = threading.Event()
        timer = None
        if timeout_seconds:
            def _kill():
                timed_out.set()
                log.warning("Auditor exceeded %ss, killing pid %s", timeout_seconds, proc.pid)
                _kill_tree(proc)

            timer = threading.Timer(timeout_seconds, _kill)
            timer.daemon = True
            timer.start()

        try:
            for line in proc.stdout:
                log.info("[auditor] %s", line.rstrip())
            returncode = proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            drain.join()
            proc.stdout.close()

        if timed_out.is_set():
            stderr_lines.append(f"Audit timed out after {timeout_seconds} seconds.\n")

        # Negative return codes mean the child was terminated by a signal.
        exit_code = returncode if returncode >= 0 else None
        log.info("Auditor exited with code %s", exit_code)
        return ProcessOutcome(exit_code=exit_code, stderr="".join(stderr_lines))


def _kill_tree(proc: subprocess.Popen) -> None:
    # The auditor runs in its own session; its browsers share the process group.
    if hasattr(os, "killpg"):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        proc.kill()


def _outcome_of(future: "Future[ProcessOutcome]") -> ProcessOutcome:
    try:
        return future.result()
    except Exception as e:
        log.exception("Auditor run crashed")
        return ProcessOutcome(exit_code=None, stderr=f"Auditor run crashed: {e}")


def _drain_stderr(proc: subprocess.Popen, sink: List[str]) -> None:
    for line in proc.stderr:
        sink.append(line)
        log.warning("[auditor stderr] %s", line.rstrip())
    proc.stderr.close()
