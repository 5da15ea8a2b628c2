import json
import logging
import os
import sys
from typing import Dict, Tuple

import click
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from kubecli.cli import KubernetesCLI
from kubecli.modules.config import get_config
from kubecli.modules.executor import ALL_NAMESPACES, KubernetesError
from kubecli.modules.resource import KubernetesResource

load_dotenv()


def parse_pairs(pairs: Tuple[str, ...]) -> Dict[str, str]:
    """Turn ``("k=v", ...)`` into an ordered dict."""
    result = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}")
        result[key] = value
    return result


def resolve_namespace(namespace, all_namespaces):
    if all_namespaces and namespace:
        raise click.UsageError("--namespace and --all-namespaces are mutually exclusive")
    return ALL_NAMESPACES if all_namespaces else namespace


@click.group()
@click.option("--kubeconfig", "kubeconfig", default=None, help="Path to the kubeconfig file")
@click.option("--kubectl", "executable", default=None, help="kubectl executable to drive")
@click.pass_context
def main(ctx: click.Context, kubeconfig, executable):
    config = get_config()

    logging.basicConfig(
        level=config.get("log_level"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.obj = KubernetesCLI(
        kubeconfig or config.get("kubeconfig_path"),
        executable or config.get("executable"),
    )


def run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except KubernetesError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


@main.command()
@click.pass_obj
def version(cli: KubernetesCLI):
    """Show client and server version info."""
    echo_json(run(cli.version))


@main.command()
@click.pass_obj
def context(cli: KubernetesCLI):
    """Show the current kubeconfig context."""
    click.echo(run(cli.current_context))


@main.command("api-resources")
@click.pass_obj
def api_resources(cli: KubernetesCLI):
    """List the API resources the server supports."""
    click.echo(run(cli.api_resources), nl=False)


@main.command()
@click.argument("type_", metavar="TYPE")
@click.argument("name", required=False)
@click.option("-n", "--namespace", default=None)
@click.option("-A", "--all-namespaces", is_flag=True, default=False)
@click.option("-l", "--selector", "labels", multiple=True, help="key=value label to match")
@click.pass_obj
def get(cli: KubernetesCLI, type_, name, namespace, all_namespaces, labels):
    """Get one object by name, or many by label selector."""
    ns = resolve_namespace(namespace, all_namespaces)
    if name:
        echo_json(run(cli.get_object, type_, ns, name))
    else:
        echo_json(run(cli.get_objects, type_, ns, parse_pairs(labels)))


@main.command()
@click.argument("type_", metavar="TYPE")
@click.argument("name", required=False)
@click.option("-n", "--namespace", default=None)
@click.option("-A", "--all-namespaces", is_flag=True, default=False)
@click.option("-l", "--selector", "labels", multiple=True, help="key=value label to match")
@click.pass_obj
def delete(cli: KubernetesCLI, type_, name, namespace, all_namespaces, labels):
    """Delete one object by name, or many by label selector."""
    ns = resolve_namespace(namespace, all_namespaces)
    if name:
        run(cli.delete_object, type_, ns, name)
    else:
        run(cli.delete_objects, type_, ns, parse_pairs(labels))


@main.command()
@click.option("-f", "--filename", "source", required=True, help="Manifest file or URI")
@click.option("--dry-run", is_flag=True, default=None)
@click.pass_obj
def apply(cli: KubernetesCLI, source, dry_run):
    """Apply a manifest; local files are parsed and piped to kubectl."""
    if dry_run is None:
        dry_run = get_config().get("dry_run")

    if os.path.isfile(source):
        with open(source) as f:
            try:
                resources = KubernetesResource.load_all(f.read())
            except (yaml.YAMLError, ValidationError, ValueError) as e:
                raise click.ClickException(f"could not read manifest {source}: {e}") from e

        if not resources:
            raise click.ClickException(f"no Kubernetes objects found in {source}")
        for resource in resources:
            run(cli.apply, resource, dry_run=dry_run)
    else:
        run(cli.apply_uri, source, dry_run=dry_run)


@main.command()
@click.argument("type_", metavar="TYPE")
@click.argument("name")
@click.argument("annotations", nargs=-1, required=True)
@click.option("-n", "--namespace", default=None)
@click.option("--overwrite/--no-overwrite", default=True)
@click.pass_obj
def annotate(cli: KubernetesCLI, type_, name, annotations, namespace, overwrite):
    """Set key=value annotations on an object."""
    run(cli.annotate, type_, namespace, name, parse_pairs(annotations), overwrite=overwrite)


@main.command()
@click.argument("type_", metavar="TYPE")
@click.argument("name")
@click.argument("patch_data", metavar="PATCH")
@click.option("-n", "--namespace", default=None)
@click.option("--type", "patch_type", default="merge", type=click.Choice(["merge", "strategic", "json"]))
@click.pass_obj
def patch(cli: KubernetesCLI, type_, name, patch_data, namespace, patch_type):
    """Patch an object."""
    run(cli.patch_object, type_, namespace, name, patch_data, patch_type)


@main.command()
@click.argument("namespace")
@click.argument("deployment")
@click.pass_obj
def restart(cli: KubernetesCLI, namespace, deployment):
    """Trigger a rollout restart of a deployment."""
    run(cli.restart_deployment, namespace, deployment)


@main.command()
@click.argument("namespace")
@click.option("-l", "--selector", "labels", multiple=True, required=True)
@click.option("--follow/--no-follow", default=True)
@click.pass_obj
def logs(cli: KubernetesCLI, namespace, labels, follow):
    """Tail logs of pods matching a label selector."""
    cli.logtail(namespace, parse_pairs(labels), follow=follow)


@main.command("exec", context_settings={"ignore_unknown_options": True})
@click.argument("namespace")
@click.argument("pod")
@click.argument("container_cmd", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("-c", "--container", default=None)
@click.option("--tty/--no-tty", default=True)
@click.pass_obj
def exec_(cli: KubernetesCLI, namespace, pod, container_cmd, container, tty):
    """Run a command in a pod, replacing this process."""
    cli.exec_cmd(list(container_cmd), namespace, pod, tty=tty, container=container)


if __name__ == "__main__":
    main()
