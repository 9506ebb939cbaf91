"""Exception classes for command execution"""

from typing import List, Optional

from devflow.core.errors import DevflowError


class ExecutorError(DevflowError):
    """Base exception for executor errors"""
    pass


class ContainerResolutionError(ExecutorError):
    """Raised when no usable container engine can be found"""
    pass


class ExecutionFailedError(ExecutorError):
    """Raised when an action fails to start or exits non-zero"""

    def __init__(
        self,
        command: str,
        stack: str,
        program: str,
        args: List[str],
        exit_code: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        invocation = " ".join([program, *args])
        if exit_code is None:
            detail = f"failed to start command '{invocation}': {reason}"
        else:
            detail = f"command failed with status {exit_code}: {invocation}"
        super().__init__(f"{command} failed for {stack}: {detail}")
        self.command = command
        self.stack = stack
        self.program = program
        self.args = list(args)
        self.exit_code = exit_code


class NoRunnableStackError(ExecutorError):
    """Raised when no applicable stack produced an action"""

    def __init__(self, command: str):
        super().__init__(f"command '{command}' did not match any runnable stack")
        self.command = command
