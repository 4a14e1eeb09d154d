"""
CLI interface for wfpod.

Provides commands to compile a workflow step into a pod manifest, submit it
to a cluster, and check artifact/mount path overlap.
"""

import json
from pathlib import Path
from typing import NoReturn

import click
import yaml

from wfpod import __version__
from wfpod.errors import WfpodError
from wfpod.utils import setup_logging


def _fail(message: str) -> NoReturn:
    click.echo(f"✗ {message}", err=True)
    raise SystemExit(1)


def _load_inputs(ctx, template_path: str, workflow_path: str):
    from wfpod.config import load_template, load_workflow

    config = ctx.obj["config"]
    template = load_template(Path(template_path))
    workflow = load_workflow(Path(workflow_path), config.controller)
    return template, workflow


@click.group()
@click.version_option(version=__version__, prog_name="wfpod")
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False), default=None,
    help="Controller config file (default: $WFPOD_CONFIG or ~/.wfpod/config.yaml)",
)
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx, config_path, log_level):
    """
    wfpod - Workflow step pod synthesis.

    Compile step templates into Kubernetes pods and submit them.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["log_level"] = log_level


def _ensure_config(ctx) -> None:
    """Load the controller config on first use (not needed by `overlap`)."""
    from wfpod.config import load_config

    if "config" in ctx.obj:
        return
    config = load_config(ctx.obj["config_path"])
    setup_logging(
        ctx.obj["log_level"] or config.get_log_level(),
        config.get_log_format(),
        config.get_log_file_path(),
    )
    ctx.obj["config"] = config


@main.command("compile")
@click.argument("template_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--workflow", "workflow_path", required=True,
              type=click.Path(exists=True, dir_okay=False), help="Workflow object file")
@click.option("--step", "step_name", required=True, help="Node name of the step")
@click.option("--format", "output_format", type=click.Choice(["yaml", "json"]), default="yaml")
@click.pass_context
def compile_cmd(ctx, template_path, workflow_path, step_name, output_format):
    """Compile TEMPLATE_PATH into a pod manifest and print it."""
    from wfpod.compiler import compile_unit

    try:
        _ensure_config(ctx)
        template, workflow = _load_inputs(ctx, template_path, workflow_path)
        unit = compile_unit(step_name, template, workflow)
    except WfpodError as e:
        _fail(f"{e.code}: {e}")

    manifest = unit.to_manifest()
    if output_format == "json":
        click.echo(json.dumps(manifest, indent=2))
    else:
        click.echo(yaml.safe_dump(manifest, sort_keys=False), nl=False)


@main.command("submit")
@click.argument("template_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--workflow", "workflow_path", required=True,
              type=click.Path(exists=True, dir_okay=False), help="Workflow object file")
@click.option("--step", "step_name", required=True, help="Node name of the step")
@click.option("--kubeconfig", default=None, help="Kubeconfig file (default: in-cluster, then ~/.kube/config)")
@click.option("--context", "kube_context", default=None, help="Kubeconfig context")
@click.option("--timeout", type=float, default=None, help="Submission timeout in seconds")
@click.pass_context
def submit_cmd(ctx, template_path, workflow_path, step_name, kubeconfig, kube_context, timeout):
    """Compile TEMPLATE_PATH and create its pod on the cluster."""
    from wfpod.controller import create_workflow_pod
    from wfpod.submit import KubernetesPodClient, SubmitOutcome

    try:
        _ensure_config(ctx)
        template, workflow = _load_inputs(ctx, template_path, workflow_path)
        client = KubernetesPodClient.from_config(kubeconfig, kube_context)
        result = create_workflow_pod(step_name, template, workflow, client, timeout=timeout)
    except WfpodError as e:
        _fail(f"{e.code}: {e}")

    if result.outcome == SubmitOutcome.ALREADY_EXISTS:
        click.echo(f"✓ Pod {result.pod_name} already exists")
    else:
        click.echo(f"✓ Created pod {result.pod_name}")


@main.command("overlap")
@click.argument("path")
@click.argument("mounts", nargs=-1, required=True)
def overlap_cmd(path, mounts):
    """Report which of MOUNTS (mount paths) PATH overlaps with. Exits 1 if none."""
    from wfpod.schemas import VolumeMount
    from wfpod.volumes import find_overlap

    candidates = [VolumeMount(name=f"mount-{i}", mount_path=m) for i, m in enumerate(mounts)]
    hit = find_overlap(candidates, path)
    if hit is None:
        click.echo(f"{path}: no overlap")
        raise SystemExit(1)
    click.echo(f"{path}: overlaps with {hit.mount_path}")


if __name__ == "__main__":
    main()
