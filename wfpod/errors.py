"""
Error classes for wfpod pod synthesis.

These error types classify compile and submission failures for the
reconciliation loop that calls into wfpod:
- PermanentError: Do not retry (the template or workflow is wrong)
- TransientError: The caller may retry the whole reconciliation pass

Concrete kinds carry a code so callers can report them uniformly:
- BadRequestError (ERR_BAD_REQUEST): template-authoring defect
- InternalError (ERR_INTERNAL): contract violation or control-plane failure

AlreadyExistsError is not a failure. Pod clients raise it on a name
collision and submit_unit() turns it into SubmitOutcome.ALREADY_EXISTS.
"""

from typing import Optional

CODE_BAD_REQUEST = "ERR_BAD_REQUEST"
CODE_INTERNAL = "ERR_INTERNAL"
CODE_ALREADY_EXISTS = "ERR_ALREADY_EXISTS"
CODE_CONFIG = "ERR_CONFIG"


class WfpodError(Exception):
    """Base exception for wfpod."""

    code = CODE_INTERNAL

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class TransientError(WfpodError):
    """
    Transient error - the caller may retry.

    Examples:
    - Control plane unavailable
    - Request timeout
    - Upstream handed us an inconsistent template

    wfpod never retries by itself; the reconciliation loop re-runs
    the whole pass, since the template or context may have changed.
    """
    pass


class PermanentError(WfpodError):
    """
    Permanent error - do not retry.

    Examples:
    - Template mounts a volume the workflow never declares
    - Input artifact without a path

    Retrying cannot help until the workflow author fixes the template.
    """
    pass


class BadRequestError(PermanentError):
    """Template-authoring defect surfaced to the user."""

    code = CODE_BAD_REQUEST


class InternalError(TransientError):
    """Upstream contract violation or control-plane failure."""

    code = CODE_INTERNAL

    @classmethod
    def wrap(cls, err: BaseException, message: Optional[str] = None) -> "InternalError":
        """Wrap an arbitrary exception, keeping it as __cause__."""
        wrapped = cls(message or f"{type(err).__name__}: {err}")
        wrapped.__cause__ = err
        return wrapped


class AlreadyExistsError(WfpodError):
    """Raised by pod clients when a pod with the same name already exists."""

    code = CODE_ALREADY_EXISTS

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"pod '{name}' already exists")


class ConfigError(WfpodError):
    """Configuration validation error."""

    code = CODE_CONFIG
