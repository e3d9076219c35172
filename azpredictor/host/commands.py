"""Command execution against the PowerShell host.

IdentityContext never talks to PowerShell directly. It is handed a
CommandExecutor, which runs a script and returns its output objects. The
default PowerShellExecutor starts a `pwsh` process per script and reads the
output back as JSON.
"""
from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import Any, Protocol

logger = logging.getLogger(__name__)

ACCOUNT_ID_SCRIPT = "(Get-AzContext).Account.Id"
AZ_MODULE_SCRIPT = "Get-Module -Name Az -ListAvailable"
AZ_PREVIEW_MODULE_SCRIPT = "Get-Module -Name AzPreview -ListAvailable"
HOST_VERSION_SCRIPT = "(Get-Host).Version.ToString()"

POWERSHELL_EXECUTABLES = ("pwsh", "powershell")
DEFAULT_TIMEOUT_SECONDS = 30

# Module objects carry a System.Version; flatten it to a string before
# ConvertTo-Json so the output is a list of {"Name", "Version"} descriptors.
_MODULE_PROJECTION = (
    " | Select-Object -Property Name,"
    " @{Name='Version';Expression={$_.Version.ToString()}}"
)


class CommandExecutionError(RuntimeError):
    """A script could not be run or exited with an error."""

    def __init__(self, message: str, script: str = "", returncode: int | None = None):
        super().__init__(message)
        self.script = script
        self.returncode = returncode


class CommandExecutor(Protocol):
    def execute(self, script: str) -> list[Any]:
        """Run script and return its output objects. May raise."""
        ...

    def close(self) -> None:
        ...


def find_powershell() -> str | None:
    """Locate a PowerShell executable on PATH."""
    for name in POWERSHELL_EXECUTABLES:
        path = shutil.which(name)
        if path:
            return path
    return None


class PowerShellExecutor:
    """Runs scripts in a non-interactive `pwsh -NoProfile` process.

    The executable is resolved on first use. Once closed, execute() raises
    CommandExecutionError.
    """

    def __init__(self, executable: str | None = None,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self._executable = executable
        self.timeout = timeout
        self._closed = False

    @property
    def executable(self) -> str:
        if self._executable is None:
            found = find_powershell()
            if found is None:
                raise CommandExecutionError("PowerShell executable not found on PATH")
            self._executable = found
        return self._executable

    @property
    def closed(self) -> bool:
        return self._closed

    def execute(self, script: str) -> list[Any]:
        if self._closed:
            raise CommandExecutionError("Executor is closed", script=script)

        command = [
            self.executable, "-NoLogo", "-NoProfile", "-NonInteractive",
            "-Command", _wrap_script(script),
        ]
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandExecutionError(
                f"Script timed out after {self.timeout}s", script=script) from e
        except OSError as e:
            raise CommandExecutionError(f"Failed to start PowerShell: {e}", script=script) from e

        if result.returncode != 0:
            raise CommandExecutionError(
                f"Script exited with {result.returncode}: {result.stderr.strip()}",
                script=script,
                returncode=result.returncode,
            )
        logger.debug("Executed %r (%d bytes of output)", script, len(result.stdout))
        return parse_output(result.stdout, script=script)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> PowerShellExecutor:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _wrap_script(script: str) -> str:
    body = script
    if script.startswith("Get-Module"):
        body = script + _MODULE_PROJECTION
    # -InputObject @(...) keeps single results in a JSON array
    return f"ConvertTo-Json -InputObject @({body}) -Compress -Depth 2"


def parse_output(stdout: str, script: str = "") -> list[Any]:
    """Decode ConvertTo-Json output into a list of output objects."""
    text = stdout.strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CommandExecutionError(f"Invalid JSON output: {e}", script=script) from e
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    return [item for item in data if item is not None]
