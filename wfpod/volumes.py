"""
Volume resolution for workflow pods.

resolve_volume() maps a volume name used by a template's volumeMounts to the
volume declared by the workflow (spec.volumes) or provisioned for it
(status.persistentVolumeClaims).

find_overlap() detects an input artifact path that falls inside an explicitly
mounted volume. Such an artifact must not be bind mounted from the shared
artifacts volume: the explicit mount would shadow it, and anything the
staging role wrote would be invisible to main.
"""

import posixpath
from typing import Iterable, Optional

from wfpod.errors import BadRequestError
from wfpod.schemas import Volume, VolumeMount, WorkflowContext


def resolve_volume(name: str, ctx: WorkflowContext) -> Volume:
    """
    Look up a volume by name in the workflow.

    Declared volumes take precedence over provisioned claims.

    Raises:
        BadRequestError: If neither source has the name
    """
    for vol in ctx.volumes:
        if vol.name == name:
            return vol
    for pvc in ctx.persistent_volume_claims:
        if pvc.name == name:
            return pvc
    raise BadRequestError(f"volume '{name}' not found in workflow spec")


def _normalize(path: str) -> str:
    # normpath keeps a leading "//"; container runtimes read it as "/"
    if path.startswith("/"):
        path = "/" + path.lstrip("/")
    return posixpath.normpath(path)


def _is_within(path: str, base: str) -> bool:
    """True if path equals base or lies under it, on path-segment boundaries."""
    path = _normalize(path)
    base = _normalize(base)
    if path == base:
        return True
    return path.startswith(base.rstrip("/") + "/")


def paths_overlap(a: str, b: str) -> bool:
    """True if either path is equal to or nested under the other."""
    return _is_within(a, b) or _is_within(b, a)


def find_overlap(mounts: Iterable[VolumeMount], path: str) -> Optional[VolumeMount]:
    """
    Return the first mount that path overlaps with, in declaration order.

    Example:
        mounts at /src: "/src" and "/src/sub" overlap, "/srcx" does not.
    """
    for mnt in mounts:
        if _is_within(path, mnt.mount_path):
            return mnt
    return None
