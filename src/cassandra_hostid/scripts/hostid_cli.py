import logging
import sys
from pathlib import Path
import click
from cassandra_hostid.scripts.helper import exceptions
from cassandra_hostid.scripts.helper import kubernetes_helper
from cassandra_hostid.scripts.helper.annotation_sync import fetch_host_id, get_annotation_name, populate_host_id
from cassandra_hostid.scripts.helper.hostid_config import HostIdConfig, load_config, merge_config, validate_config
from cassandra_hostid.scripts.helper.hostid_logger import setup_logger
from cassandra_hostid.scripts.helper.nodetool import SubprocessCommandRunner, get_cassandra_host_id
from cassandra_hostid.scripts.helper.owner_reference import resolve_owner


logger = logging.getLogger("hostid")


def abort(exception: exceptions.HostIdFatalError):
    logger.critical(exception)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", "--debug", is_flag=True, default=False, help="Enable verbose debug logging.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Also write log records to this file.")
def hostid_cli(verbose=False, log_file=None):
    if verbose:
        setup_logger(console_level=logging.DEBUG, log_file_level=logging.DEBUG, log_file=log_file)
        logger.debug("Running in verbose mode, extensive logging is active.")
    else:
        setup_logger(console_level=logging.INFO, log_file_level=logging.INFO, log_file=log_file)


@hostid_cli.command(name="sync",
                    short_help="Store the local Cassandra host ID in the StatefulSet annotations and/or read it back.")
@click.option("-c", "--config", "config_file", type=click.Path(path_type=Path), default=None, help="YAML file with default settings.")
@click.option("--kubeconfig", type=str, default=None, help="Absolute path to the kubeconfig file, in-cluster config if omitted.")
@click.option("--nodetool", type=str, default=None, help="Path to cassandra nodetool.")
@click.option("--namespace", type=str, envvar="POD_NAMESPACE", default=None, help="The kubernetes namespace of the pod.")
@click.option("--pod", type=str, envvar="POD_NAME", default=None, help="The kubernetes pod name.")
@click.option("--prefix", type=str, default=None, help="The prefix for the annotations tracking host IDs.")
@click.option("--populate/--no-populate", default=None, help="Populate the k8s annotations with our host ID.")
@click.option("--fetch/--no-fetch", default=None, help="Fetch our host ID from k8s annotations.")
@click.option("--strict-exit-code/--no-strict-exit-code", default=None, help="Fail on any non-zero nodetool exit code.")
def sync(config_file, kubeconfig, nodetool, namespace, pod, prefix, populate, fetch, strict_exit_code) -> None:
    """Resolves the StatefulSet owning the pod, then populates and/or fetches the host ID annotation.
    On fetch the host ID is printed to stdout.
    """
    try:
        config = load_config(config_file) if config_file else HostIdConfig()
        config = validate_config(merge_config(config, kubeconfig=kubeconfig, nodetool=nodetool, namespace=namespace,
                                              pod=pod, prefix=prefix, populate=populate, fetch=fetch,
                                              strict_exit_code=strict_exit_code))
        logger.debug(f"Configuration: {config}")

        api_client = kubernetes_helper.create_api_client(config.kubeconfig)
        k8s = kubernetes_helper.KubernetesWorkloadClient(api_client)

        own_pod = k8s.get_member(config.namespace, config.pod)
        owner = resolve_owner(own_pod, logger=logger)
        logger.info(f"Pod {config.pod} belongs to {owner.kind} {owner.namespace}/{owner.name}")

        if config.populate:
            populate_host_id(k8s, owner.namespace, owner.name, config.pod, config.prefix,
                             nodetool_path=config.nodetool, runner=SubprocessCommandRunner(), logger=logger,
                             strict_exit_code=config.strict_exit_code)

        if config.fetch:
            host_id = fetch_host_id(k8s, owner.namespace, owner.name, config.pod, config.prefix, logger=logger)
            click.echo(host_id)
    except exceptions.HostIdFatalError as exception:
        abort(exception)


@hostid_cli.command(name="extract", short_help="Print the host ID reported by nodetool.")
@click.option("--nodetool", type=str, default=HostIdConfig.nodetool, show_default=True, help="Path to cassandra nodetool.")
@click.option("--strict-exit-code", is_flag=True, default=False, help="Fail on any non-zero nodetool exit code.")
def extract(nodetool: str, strict_exit_code: bool) -> None:
    try:
        click.echo(get_cassandra_host_id(nodetool, runner=SubprocessCommandRunner(), logger=logger, strict_exit_code=strict_exit_code))
    except exceptions.HostIdFatalError as exception:
        abort(exception)


@hostid_cli.command(name="key", short_help="Print the annotation key used for a pod.")
@click.option("--pod", type=str, envvar="POD_NAME", required=True, help="The kubernetes pod name.")
@click.option("--prefix", type=str, default=HostIdConfig.prefix, show_default=True, help="The prefix for the annotations tracking host IDs.")
def key(pod: str, prefix: str) -> None:
    click.echo(get_annotation_name(prefix, pod))


if __name__ == "__main__":
    hostid_cli()
