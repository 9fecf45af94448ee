import logging

import pytest

from cassandra_hostid.scripts.helper import exceptions
from cassandra_hostid.scripts.helper.annotation_sync import WorkloadGroupClient
from cassandra_hostid.scripts.helper.nodetool import CommandResult, CommandRunner

HOST_ID = "1b4e28ba-2fa1-11d2-883f-0016d3cca427"

NODETOOL_INFO = f"""ID                     : {HOST_ID}
Gossip active          : true
Thrift active          : false
Native Transport active: true
Load                   : 105.3 KiB
Generation No          : 1488471220
Uptime (seconds)       : 5412
Heap Memory (MB)       : 241.07 / 1004.00
Data Center            : datacenter1
Rack                   : rack1
"""


class FakeRunner(CommandRunner):
    """Returns canned output and records every call."""

    def __init__(self, stdout="", returncode=0):
        self.result = CommandResult(stdout=stdout, returncode=returncode)
        self.calls = []

    def run(self, path, *args):
        self.calls.append((path,) + args)
        return self.result


class FakeWorkloadClient(WorkloadGroupClient):
    """In-memory StatefulSets keyed by (namespace, name) with merge patch semantics."""

    def __init__(self, stateful_sets=None):
        self.stateful_sets = stateful_sets if stateful_sets is not None else {}
        self.patches = []

    def get_workload_group(self, namespace, name):
        try:
            return dict(self.stateful_sets[(namespace, name)])
        except KeyError:
            raise exceptions.NotFoundError(f"StatefulSet {namespace}/{name} not found")

    def patch_annotations(self, namespace, name, annotations):
        if (namespace, name) not in self.stateful_sets:
            raise exceptions.ApplyError(f"StatefulSet {namespace}/{name} not found")
        self.patches.append((namespace, name, dict(annotations)))
        self.stateful_sets[(namespace, name)].update(annotations)
        return dict(self.stateful_sets[(namespace, name)])


@pytest.fixture
def runner():
    return FakeRunner(stdout=NODETOOL_INFO)


@pytest.fixture
def workload_client():
    return FakeWorkloadClient({("cassandra", "cassandra"): {"deployment.kubernetes.io/revision": "3"}})


@pytest.fixture(autouse=True)
def reset_hostid_logger():
    yield
    logger = logging.getLogger("hostid")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
