"""Wrapper around the WSO2 apictl command line tool."""

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..exceptions import ApictlError, PreconditionError

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"\d+\.\d+\.\d+")

# apictl writes "export apis" output here, relative to the user's home
EXPORT_ROOT = Path("~/.wso2apictl/exported/migration")


def check_required_tools(tools: Iterable[str], which: Callable[[str], Optional[str]] = shutil.which) -> None:
    """Raise PreconditionError listing every tool not found on PATH."""
    missing = [tool for tool in tools if which(tool) is None]
    if missing:
        raise PreconditionError(f"Missing required tools: {' '.join(missing)}")


def parse_version(value: str) -> Tuple[int, ...]:
    """Parse a dotted numeric version ("4.10.0") into a comparable tuple."""
    match = VERSION_PATTERN.search(value)
    if not match:
        raise ValueError(f"No version number found in: {value!r}")
    return tuple(int(part) for part in match.group(0).split("."))


def version_ge(current: str, minimum: str) -> bool:
    """True if ``current`` is the same as or newer than ``minimum``."""
    return parse_version(current) >= parse_version(minimum)


class ApictlClient:
    """
    Runs apictl commands for one environment registration.

    Every command that exits non-zero raises ApictlError; nothing is
    retried.
    """

    def __init__(
        self,
        binary: str = "apictl",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        insecure: bool = True,
    ):
        """
        Initialize the client.

        Args:
            binary: Name or path of the apictl executable
            runner: Callable with the signature of subprocess.run
            insecure: Pass -k to apictl login (skip TLS verification)
        """
        self.binary = binary
        self.insecure = insecure
        self._runner = runner

    def _run(self, *args: str, input: Optional[str] = None) -> str:
        command = [self.binary, *args]
        # Never log stdin, it carries the password for login
        logger.debug(f"Running: {' '.join(command)}")
        completed = self._runner(
            command,
            input=input,
            capture_output=True,
            text=True,
            check=False,
        )
        if completed.returncode != 0:
            raise ApictlError(command, completed.returncode, completed.stderr)
        return completed.stdout or ""

    def version(self) -> str:
        """Return the installed apictl version (X.Y.Z)."""
        output = self._run("version")
        match = VERSION_PATTERN.search(output)
        if not match:
            raise PreconditionError(f"Could not determine apictl version from: {output.strip()!r}")
        return match.group(0)

    def check_version(self, minimum: str) -> str:
        """Fail unless the installed apictl is at least ``minimum``."""
        current = self.version()
        if not version_ge(current, minimum):
            raise PreconditionError(
                f"Incompatible apictl version {current}; minimum required version is {minimum}"
            )
        logger.info(f"Apictl version check passed ({current})")
        return current

    def get_envs(self) -> Dict[str, str]:
        """
        List registered environments.

        Returns:
            Mapping of environment name -> API Manager host
        """
        envs: Dict[str, str] = {}
        for line in self._run("get", "envs").splitlines():
            columns = line.split()
            if len(columns) < 2 or columns[0] == "NAME":
                continue
            envs[columns[0]] = columns[1]
        return envs

    def add_env(self, name: str, host: str) -> None:
        self._run("add", "env", name, "--apim", host)

    def remove_env(self, name: str) -> None:
        self._run("remove", "env", name)

    def login(self, name: str, username: str, password: str) -> None:
        """Log in to an environment, passing the password on stdin."""
        args: List[str] = ["login", name, "-u", username]
        if self.insecure:
            args.append("-k")
        args.append("--password-stdin")
        self._run(*args, input=password)

    def export_apis(self, name: str) -> None:
        """Export every published API of the environment as zip archives."""
        self._run("export", "apis", "--format", "json", "-e", name)

    @staticmethod
    def export_dir(name: str) -> Path:
        """Directory where apictl deposits the archives for ``name``."""
        return (EXPORT_ROOT / name / "tenant-default" / "apis").expanduser()

    @staticmethod
    def clear_export_dir(path: Path) -> int:
        """Delete files left by a previous export. Returns the number removed."""
        path.mkdir(parents=True, exist_ok=True)
        removed = 0
        for entry in path.iterdir():
            if entry.is_file() or entry.is_symlink():
                entry.unlink()
                removed += 1
        if removed:
            logger.debug(f"Removed {removed} stale file(s) from {path}")
        return removed
