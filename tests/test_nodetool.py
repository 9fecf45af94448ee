import subprocess
from unittest.mock import patch

import pytest

from cassandra_hostid.scripts.helper import exceptions
from cassandra_hostid.scripts.helper import nodetool
from conftest import FakeRunner, HOST_ID, NODETOOL_INFO


def test_extract_identifier_from_sentence():
    assert nodetool.extract_identifier(f"ID : {HOST_ID} is alive") == HOST_ID


@pytest.mark.parametrize("text", [
    HOST_ID,
    f"{HOST_ID}\n",
    f"prefix-{HOST_ID}-suffix",
    f"Host ID={HOST_ID};",
])
def test_extract_identifier_ignores_surrounding_text(text):
    assert nodetool.extract_identifier(text) == HOST_ID


def test_extract_identifier_keeps_case():
    upper = HOST_ID.upper()
    assert nodetool.extract_identifier(f"ID : {upper}") == upper


def test_extract_identifier_returns_first_match():
    other = "00000000-0000-0000-0000-000000000000"
    assert nodetool.extract_identifier(f"{HOST_ID} {other}") == HOST_ID


@pytest.mark.parametrize("text", [
    "",
    "nodetool: Failed to connect to '127.0.0.1:7199'",
    "1b4e28ba-2fa1-11d2-883f-0016d3cca42",
    "1b4e28ba2fa111d2883f0016d3cca427",
    "zb4e28ba-2fa1-11d2-883f-0016d3cca42g",
])
def test_extract_identifier_not_found(text):
    with pytest.raises(exceptions.IdentifierNotFoundError):
        nodetool.extract_identifier(text)


def test_identifier_not_found_is_a_not_found_error():
    with pytest.raises(exceptions.NotFoundError):
        nodetool.extract_identifier("no id here")


def test_get_host_id_runs_nodetool_info(runner):
    assert nodetool.get_cassandra_host_id("/opt/cassandra/bin/nodetool", runner=runner) == HOST_ID
    assert runner.calls == [("/opt/cassandra/bin/nodetool", "info")]


def test_get_host_id_without_id_in_output():
    runner = FakeRunner(stdout="Gossip active : true\n")
    with pytest.raises(exceptions.IdentifierNotFoundError):
        nodetool.get_cassandra_host_id(runner=runner)


def test_get_host_id_nonzero_exit_without_output():
    runner = FakeRunner(stdout="", returncode=1)
    with pytest.raises(exceptions.ExecutionError):
        nodetool.get_cassandra_host_id(runner=runner)


def test_get_host_id_nonzero_exit_with_id_is_tolerated(caplog):
    runner = FakeRunner(stdout=NODETOOL_INFO, returncode=2)
    with caplog.at_level("WARNING", logger="hostid"):
        assert nodetool.get_cassandra_host_id(runner=runner) == HOST_ID
    assert "exited with code 2" in caplog.text


def test_get_host_id_nonzero_exit_with_output_but_no_id():
    runner = FakeRunner(stdout="error: connection refused\n", returncode=1)
    with pytest.raises(exceptions.ExecutionError):
        nodetool.get_cassandra_host_id(runner=runner)


def test_get_host_id_strict_exit_code():
    runner = FakeRunner(stdout=NODETOOL_INFO, returncode=1)
    with pytest.raises(exceptions.ExecutionError):
        nodetool.get_cassandra_host_id(runner=runner, strict_exit_code=True)


def test_get_host_id_uses_injected_logger(runner):
    logger = nodetool.logging.getLogger("hostid.test")
    with patch.object(logger, "debug") as debug:
        nodetool.get_cassandra_host_id(runner=runner, logger=logger)
    assert debug.called


def test_subprocess_runner_captures_stdout():
    completed = subprocess.CompletedProcess(args=["nodetool", "info"], returncode=0, stdout=NODETOOL_INFO)
    with patch("subprocess.run", return_value=completed) as run:
        result = nodetool.SubprocessCommandRunner().run("nodetool", "info")
    run.assert_called_once_with(["nodetool", "info"], stdout=subprocess.PIPE, text=True)
    assert result == nodetool.CommandResult(stdout=NODETOOL_INFO, returncode=0)


def test_subprocess_runner_command_cannot_start():
    with patch("subprocess.run", side_effect=FileNotFoundError("No such file or directory")):
        with pytest.raises(exceptions.ExecutionError):
            nodetool.SubprocessCommandRunner().run("/does/not/exist", "info")


def test_get_host_id_defaults_to_subprocess_runner():
    completed = subprocess.CompletedProcess(args=["/usr/bin/nodetool", "info"], returncode=0, stdout=NODETOOL_INFO)
    with patch("subprocess.run", return_value=completed) as run:
        assert nodetool.get_cassandra_host_id() == HOST_ID
    assert run.call_args.args[0] == ["/usr/bin/nodetool", "info"]
