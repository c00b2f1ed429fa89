"""
Run external commands with consistent logging.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from delivery_build.exceptions import CommandFailedError
from delivery_build.util.redact import redact_sensitive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    returns: Iterable[int] = (0,),
    env: Mapping[str, str] | None = None,
    cwd: str | os.PathLike | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command (with secrets redacted).
    - Captures stdout/stderr for the caller.
    - A return code outside ``returns`` raises CommandFailedError when ``check`` is set.
    - dry_run logs but does not execute.
    """

    argv_list = [str(a) for a in argv]
    where = f" (cwd={cwd})" if cwd else ""
    logger.info("CMD %s%s", redact_sensitive(format_argv(argv_list)), where)

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    p = subprocess.run(
        argv_list,
        input=input_text,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=cwd,
        env=dict(os.environ, **(env or {})),
    )

    if p.stdout:
        logger.debug("STDOUT %s", redact_sensitive(p.stdout.strip()))
    if p.stderr:
        logger.debug("STDERR %s", redact_sensitive(p.stderr.strip()))

    if check and p.returncode not in tuple(returns):
        raise CommandFailedError(argv_list, p.returncode, redact_sensitive(p.stderr or ""))

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


def command_succeeds(argv: Sequence[str], cwd: str | os.PathLike | None = None) -> bool:
    """Guard helper: True iff the command runs and exits 0."""
    try:
        result = run_cmd(argv, check=False, cwd=cwd)
    except FileNotFoundError:
        logger.debug("Guard binary not found: %s", argv[0])
        return False
    return result.ok
