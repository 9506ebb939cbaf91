"""Command execution: stack dispatch and container proxying"""

from devflow.core.executor.exceptions import (
    ExecutorError,
    ContainerResolutionError,
    ExecutionFailedError,
    NoRunnableStackError,
)
from devflow.core.executor.executor_engine import run, run_action, map_custom, applicable_stacks
from devflow.core.executor.container_proxy import build_container_proxy

__all__ = [
    "ExecutorError",
    "ContainerResolutionError",
    "ExecutionFailedError",
    "NoRunnableStackError",
    "run",
    "run_action",
    "map_custom",
    "applicable_stacks",
    "build_container_proxy",
]
