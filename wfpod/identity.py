"""
Deterministic pod identity for workflow steps.

Pod names are derived from the workflow name and the step (node) name so that
every compile of the same step yields the same pod name. This is what lets the
submission handler treat "already exists" as success: barring a hash
collision (see below), it means an earlier attempt already created this pod.

Pattern:
    {workflow_name}-{fnv1a_32(step_name)}

The workflow's own root node keeps the bare workflow name.

The suffix is a 32-bit hash, so two steps of one workflow can collide: by
the birthday bound the chance is about n**2 / 2**33 for n steps (roughly
1 in 8,600 for 1,000 steps). A colliding step would be reported as
"already exists" against the other step's pod. The hash is kept for
compatibility with existing pod names; check_collisions() lets callers that
know all step names of a workflow detect the case up front.

Rule: the name is opaque to callers - never parse it, use the
wfpod.io/workflow label and wfpod.io/node-name annotation instead.
"""

from typing import Iterable

FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193


def fnv1a_32(data: bytes) -> int:
    """
    32-bit FNV-1a hash.

    Example:
        >>> fnv1a_32(b"a")
        3826002220
    """
    h = FNV32_OFFSET_BASIS
    for b in data:
        h ^= b
        h = (h * FNV32_PRIME) & 0xFFFFFFFF
    return h


def node_id(workflow_name: str, step_name: str) -> str:
    """
    Pod name for a step of a workflow.

    Args:
        workflow_name: Name of the owning workflow
        step_name: Fully qualified node name of the step

    Returns:
        A DNS-compatible pod name, stable across calls
    """
    if step_name == workflow_name:
        return workflow_name
    return f"{workflow_name}-{fnv1a_32(step_name.encode('utf-8'))}"


def check_collisions(workflow_name: str, step_names: Iterable[str]) -> dict[str, list[str]]:
    """
    Find step names of one workflow that map to the same pod name.

    Returns:
        pod name -> the colliding step names, for every pod name shared by
        more than one distinct step. Empty when all names are distinct.
    """
    by_pod: dict[str, list[str]] = {}
    for step in dict.fromkeys(step_names):
        by_pod.setdefault(node_id(workflow_name, step), []).append(step)
    return {pod: steps for pod, steps in by_pod.items() if len(steps) > 1}
