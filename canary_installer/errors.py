from __future__ import annotations

from typing import Sequence


class InstallerError(RuntimeError):
    """Fatal installer condition.

    hints are remediation lines shown to the operator after the error.
    """

    def __init__(self, message: str, *, hints: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.hints = list(hints)


class CommandError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        tail = "\n".join(stderr.strip().splitlines()[-5:])
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if tail:
            msg += f"\n{tail}"
        super().__init__(msg)
