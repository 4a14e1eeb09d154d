"""
wfpod - Workflow step pod synthesis

Compiles workflow step templates into Kubernetes pods (staging, monitor,
main and sidecar containers) and submits them idempotently.
"""

__version__ = "0.1.0"


__all__ = ["Compiler", "compile_unit", "create_workflow_pod", "submit_unit", "SubmitOutcome"]

from .compiler import Compiler, compile_unit
from .controller import create_workflow_pod
from .submit import SubmitOutcome, submit_unit
