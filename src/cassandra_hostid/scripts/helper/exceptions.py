"""
Licence: MIT

Error kinds of cassandra-hostid. Every one of them is terminal.
"""


class HostIdFatalError(Exception):
    """Critical error, should lead to termination of the program"""
    def __init__(self, message):
        self.message = "Critical error:" + message
        super().__init__(self.message)


class ConfigError(HostIdFatalError):
    """Required configuration is missing or the config file is invalid."""


class AuthError(HostIdFatalError):
    """No usable Kubernetes client could be established."""


class NotFoundError(HostIdFatalError):
    """Pod, owner reference or StatefulSet does not exist."""


class IdentifierNotFoundError(NotFoundError):
    """nodetool output contains no host ID."""


class ExecutionError(HostIdFatalError):
    """nodetool could not be run or failed without usable output."""


class OrchestrationError(HostIdFatalError):
    """Kubernetes API call failed."""


class ApplyError(OrchestrationError):
    """Annotation patch was rejected."""


class MissingAnnotationError(HostIdFatalError):
    """StatefulSet carries no host ID annotation for the pod."""
