"""
Compiler - Transform Template + WorkflowContext into an ExecutionUnit.

The compiler resolves:
- the main container, from either a container or a script invocation
- the managed roles (init for staging, wait for monitoring)
- volume references against the workflow's volumes and claims
- input artifact and script volumes, skipping artifact bind mounts that
  would be shadowed by an explicit volume mount
- default output artifact locations
- sidecars, optionally mirroring main's mounts

The resulting ExecutionUnit has:
- A deterministic name (same step, same pod name)
- The resolved template serialized into its annotations, for the executor
- A fixed role list: init?, wait, main, sidecars*

Compilation either yields a complete unit or raises; nothing is partially
built or submitted.
"""

import copy
import json
import logging
from dataclasses import replace

from wfpod import common
from wfpod.artifacts import inject_defaults
from wfpod.errors import BadRequestError, InternalError
from wfpod.identity import node_id
from wfpod.roles import (
    docker_lib_volume,
    empty_dir_volume,
    new_monitor_role,
    new_staging_role,
    pod_metadata_volume,
)
from wfpod.schemas import (
    Container,
    ContainerInvocation,
    ExecutionUnit,
    OwnerReference,
    ScriptInvocation,
    Template,
    Volume,
    VolumeMount,
    WorkflowContext,
)
from wfpod.volumes import find_overlap, paths_overlap, resolve_volume

logger = logging.getLogger(__name__)

RESERVED_CONTAINER_NAMES = frozenset({
    common.MAIN_CONTAINER_NAME,
    common.INIT_CONTAINER_NAME,
    common.WAIT_CONTAINER_NAME,
})

RESERVED_VOLUME_NAMES = frozenset({
    common.POD_METADATA_VOLUME_NAME,
    common.DOCKER_LIB_VOLUME_NAME,
    common.INPUT_ARTIFACTS_VOLUME_NAME,
    common.SCRIPT_VOLUME_NAME,
})


def serialize_template(tmpl: Template) -> str:
    """Canonical JSON for the template annotation (stable across compiles)."""
    return json.dumps(tmpl.to_dict(), sort_keys=True, separators=(",", ":"))


def _main_container(tmpl: Template) -> Container:
    """
    Build the main container from the template's invocation.

    Raises:
        InternalError: If the template is neither a container nor a script
    """
    invocation = tmpl.invocation
    if isinstance(invocation, ContainerInvocation):
        ctr = invocation.container
    elif isinstance(invocation, ScriptInvocation):
        ctr = Container(
            image=invocation.image,
            command=invocation.command,
            args=(common.SCRIPT_TEMPLATE_SOURCE_PATH,),
        )
    else:
        raise InternalError("Cannot create container from non-container/script template")
    return replace(ctr, name=common.MAIN_CONTAINER_NAME)


class _PodSpec:
    """Working copy of the pod spec, local to one compile."""

    def __init__(self) -> None:
        self.init_containers: list[Container] = []
        self.containers: list[Container] = []
        self.volumes: list[Volume] = []

    def _locate(self, name: str) -> tuple[list[Container], int]:
        for roles in (self.init_containers, self.containers):
            for i, ctr in enumerate(roles):
                if ctr.name == name:
                    return roles, i
        raise InternalError(f"container '{name}' not found in pod spec")

    def get(self, name: str) -> Container:
        roles, i = self._locate(name)
        return roles[i]

    def has(self, name: str) -> bool:
        return any(c.name == name for c in self.init_containers + self.containers)

    def add_mounts(self, name: str, *mounts: VolumeMount) -> None:
        roles, i = self._locate(name)
        roles[i] = replace(roles[i], volume_mounts=roles[i].volume_mounts + mounts)

    def add_volume(self, vol: Volume) -> None:
        self.volumes.append(vol)

    def has_volume(self, name: str) -> bool:
        return any(v.name == name for v in self.volumes)


def _add_volume_references(
    spec: _PodSpec,
    ctx: WorkflowContext,
    mounts: tuple[VolumeMount, ...],
) -> None:
    """
    Add the volumes a container's explicit mounts refer to.

    Each volume is added once, in the order of its first mount.

    Raises:
        BadRequestError: If a mount names a volume the workflow lacks,
            or one of the volumes wfpod adds itself
    """
    for mnt in mounts:
        if mnt.name in RESERVED_VOLUME_NAMES:
            raise BadRequestError(f"volume name '{mnt.name}' is reserved")
        vol = resolve_volume(mnt.name, ctx)
        if spec.has_volume(vol.name):
            continue
        spec.add_volume(vol)


def _validate_input_artifacts(tmpl: Template) -> None:
    """
    Check input artifacts before any volume wiring.

    Raises:
        BadRequestError: If an artifact has no path, two artifacts share
            a name, or two artifact paths overlap each other
    """
    seen: list = []
    for art in tmpl.inputs.artifacts:
        if not art.path:
            raise BadRequestError(f"inputs.artifacts.{art.name} did not specify a path")
        for prev in seen:
            if prev.name == art.name:
                raise BadRequestError(f"inputs.artifacts.{art.name} is declared more than once")
            if paths_overlap(prev.path, art.path):
                raise BadRequestError(
                    f"inputs.artifacts.{art.name} path {art.path} overlaps with "
                    f"inputs.artifacts.{prev.name} path {prev.path}"
                )
        seen.append(art)


def _add_input_artifacts_volumes(
    spec: _PodSpec,
    tmpl: Template,
    explicit_mounts: tuple[VolumeMount, ...],
) -> None:
    """
    Share an emptyDir between init and main for input artifacts.

    init loads every artifact under the artifacts base dir
    (e.g. /wfpod/inputs/artifacts/CODE), and main mounts each artifact's
    sub-path at the artifact's own path.

    When an artifact path overlaps one of main's explicit mounts (e.g. a
    volume at /src and an artifact at /src/lib), the emptyDir is not mounted
    for that artifact. init also sees main's explicit mounts under
    /mainctrfs and loads the artifact into the user's volume instead.
    """
    if not tmpl.inputs.artifacts:
        return
    _validate_input_artifacts(tmpl)

    art_vol = empty_dir_volume(common.INPUT_ARTIFACTS_VOLUME_NAME)
    spec.add_volume(art_vol)

    spec.add_mounts(
        common.INIT_CONTAINER_NAME,
        VolumeMount(name=art_vol.name, mount_path=common.EXECUTOR_ARTIFACT_BASE_DIR),
        *(
            replace(mnt, mount_path=common.EXECUTOR_MAIN_FILESYSTEM_DIR + mnt.mount_path)
            for mnt in explicit_mounts
        ),
    )

    for art in tmpl.inputs.artifacts:
        overlap = find_overlap(explicit_mounts, art.path)
        if overlap is not None:
            logger.debug(
                f"skip volume mount of {art.name} ({art.path}): "
                f"overlaps with mount {overlap.name} at {overlap.mount_path}"
            )
            continue
        spec.add_mounts(
            common.MAIN_CONTAINER_NAME,
            VolumeMount(name=art_vol.name, mount_path=art.path, sub_path=art.name),
        )


def _add_script_volume(spec: _PodSpec) -> None:
    """Share an emptyDir between init and main holding the script source."""
    script_vol = empty_dir_volume(common.SCRIPT_VOLUME_NAME)
    spec.add_volume(script_vol)
    for name in (common.INIT_CONTAINER_NAME, common.MAIN_CONTAINER_NAME):
        spec.add_mounts(
            name,
            VolumeMount(name=script_vol.name, mount_path=common.SCRIPT_TEMPLATE_EMPTY_DIR),
        )


def _add_sidecars(spec: _PodSpec, tmpl: Template, ctx: WorkflowContext) -> None:
    """
    Append the template's sidecars after main.

    Volumes named by a sidecar's own mounts are resolved like main's.

    Raises:
        BadRequestError: If a sidecar is unnamed, reuses a reserved
            container name, or duplicates another sidecar's name
    """
    main_mounts = spec.get(common.MAIN_CONTAINER_NAME).volume_mounts
    for sidecar in tmpl.sidecars:
        name = sidecar.container.name
        if not name:
            raise BadRequestError(f"template '{tmpl.name}': sidecars must specify a name")
        if name in RESERVED_CONTAINER_NAMES or spec.has(name):
            raise BadRequestError(
                f"template '{tmpl.name}': sidecar name '{name}' is reserved or already in use"
            )
        ctr = sidecar.container
        _add_volume_references(spec, ctx, ctr.volume_mounts)
        if sidecar.mirror_volume_mounts:
            ctr = replace(ctr, volume_mounts=ctr.volume_mounts + main_mounts)
        spec.containers.append(ctr)


class Compiler:
    """
    Compiler for turning workflow step templates into pods.

    Usage:
        compiler = Compiler(ctx)
        unit = compiler.compile("my-wf.step-a", template)
    """

    def __init__(self, ctx: WorkflowContext):
        """
        Initialize the compiler.

        Args:
            ctx: The workflow the compiled pods belong to
        """
        self._ctx = ctx

    def compile(self, step_name: str, template: Template) -> ExecutionUnit:
        """
        Compile a step template into an ExecutionUnit.

        Args:
            step_name: Node name of the step; determines the pod name
            template: The step's template (never modified)

        Returns:
            The compiled ExecutionUnit

        Raises:
            BadRequestError: If the template references undeclared volumes
                or declares unusable artifacts or sidecars
            InternalError: If the template is neither a container nor a script
        """
        ctx = self._ctx
        tmpl = copy.deepcopy(template)
        pod_name = node_id(ctx.name, step_name)

        main_ctr = _main_container(tmpl)

        spec = _PodSpec()
        if tmpl.inputs.artifacts or tmpl.is_script:
            spec.init_containers.append(new_staging_role(ctx.config))
        spec.containers.append(new_monitor_role(ctx.config))
        spec.containers.append(main_ctr)
        spec.add_volume(pod_metadata_volume())
        spec.add_volume(docker_lib_volume())

        explicit_mounts = main_ctr.volume_mounts
        _add_volume_references(spec, ctx, explicit_mounts)

        _add_input_artifacts_volumes(spec, tmpl, explicit_mounts)

        tmpl = replace(tmpl, outputs=replace(
            tmpl.outputs,
            artifacts=inject_defaults(tmpl.outputs.artifacts, pod_name, ctx.name, ctx.config),
        ))

        if tmpl.is_script:
            _add_script_volume(spec)

        _add_sidecars(spec, tmpl, ctx)

        return ExecutionUnit(
            name=pod_name,
            namespace=ctx.namespace,
            labels={
                common.LABEL_KEY_WORKFLOW: ctx.name,
                common.LABEL_KEY_MANAGED: "true",
            },
            annotations={
                common.ANNOTATION_KEY_NODE_NAME: step_name,
                common.ANNOTATION_KEY_TEMPLATE: serialize_template(tmpl),
            },
            owner_references=(
                OwnerReference(
                    api_version=common.API_VERSION,
                    kind=common.WORKFLOW_KIND,
                    name=ctx.name,
                    uid=ctx.uid,
                ),
            ),
            init_containers=tuple(spec.init_containers),
            containers=tuple(spec.containers),
            volumes=tuple(spec.volumes),
            restart_policy=common.RESTART_POLICY_NEVER,
        )


def compile_unit(
    step_name: str,
    template: Template,
    ctx: WorkflowContext,
) -> ExecutionUnit:
    """
    Convenience function to compile a template without keeping a Compiler.

    Args:
        step_name: Node name of the step
        template: The step's template
        ctx: The owning workflow

    Returns:
        The compiled ExecutionUnit
    """
    return Compiler(ctx).compile(step_name, template)

