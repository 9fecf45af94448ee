"""
Licence: MIT

Reads the Cassandra host ID of the local node from 'nodetool info'.
"""
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional
from cassandra_hostid.scripts.helper import exceptions

logger = logging.getLogger("hostid")

NODETOOL_COMMAND = "info"
DEFAULT_NODETOOL_PATH = "/usr/bin/nodetool"
UUID_REGEX = "[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{12}"

uuid_pattern = re.compile(UUID_REGEX)


@dataclass
class CommandResult:
    """Captured standard output and exit status of a finished command."""

    stdout: str = ""
    returncode: int = 0


class CommandRunner:
    """Runs an external command and captures its standard output."""

    def run(self, path: str, *args: str) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):

    def run(self, path: str, *args: str) -> CommandResult:
        """
        Runs the command and waits for it to exit.

        Args:
            path (str): Executable to run.
            *args (str): Arguments passed to the executable.

        Returns:
            CommandResult: Complete stdout of the command and its exit code.

        Raises:
            ExecutionError: If the command cannot be started.
        """
        try:
            result = subprocess.run([path, *args], stdout=subprocess.PIPE, text=True)
        except OSError as e:
            raise exceptions.ExecutionError(f"Could not run {path}: {e}")
        return CommandResult(stdout=result.stdout or "", returncode=result.returncode)


def extract_identifier(text: str) -> str:
    """
    Returns the first UUID-shaped token in text.

    Raises:
        IdentifierNotFoundError: If text contains no such token.
    """
    match = uuid_pattern.search(text)
    if match is None:
        raise exceptions.IdentifierNotFoundError("couldn't fetch Cassandra host ID")
    return match.group(0)


def get_cassandra_host_id(nodetool_path: str = DEFAULT_NODETOOL_PATH,
                          runner: Optional[CommandRunner] = None,
                          logger: logging.Logger = logger,
                          strict_exit_code: bool = False) -> str:
    """
    Runs '<nodetool_path> info' once and extracts the host ID from its output.

    A non-zero exit is tolerated as long as the output still contains a host ID,
    unless strict_exit_code is set.

    Args:
        nodetool_path (str): Path to the nodetool executable.
        runner (CommandRunner): Runner used to execute nodetool, a SubprocessCommandRunner if None.
        logger (logging.Logger): Logger to report to.
        strict_exit_code (bool): Treat every non-zero exit as a failure.

    Returns:
        str: The host ID as printed by nodetool.

    Raises:
        ExecutionError: If nodetool cannot be started or fails without usable output.
        IdentifierNotFoundError: If nodetool succeeded but printed no host ID.
    """
    if runner is None:
        runner = SubprocessCommandRunner()
    logger.debug(f"Running {nodetool_path} {NODETOOL_COMMAND}")
    result = runner.run(nodetool_path, NODETOOL_COMMAND)

    if result.returncode != 0:
        if strict_exit_code or not result.stdout.strip():
            logger.error(f"{nodetool_path} {NODETOOL_COMMAND} exited with code {result.returncode}")
            raise exceptions.ExecutionError(f"{nodetool_path} {NODETOOL_COMMAND} exited with code {result.returncode}")
        logger.warning(f"{nodetool_path} {NODETOOL_COMMAND} exited with code {result.returncode}, scanning its output anyway")
        try:
            return extract_identifier(result.stdout)
        except exceptions.IdentifierNotFoundError:
            raise exceptions.ExecutionError(f"{nodetool_path} {NODETOOL_COMMAND} exited with code {result.returncode} and printed no host ID")

    host_id = extract_identifier(result.stdout)
    logger.debug(f"Cassandra host ID: {host_id}")
    return host_id
