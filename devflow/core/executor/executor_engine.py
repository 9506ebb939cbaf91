"""
Executor Engine

Dispatches a Devflow command to every applicable stack, strictly in
declaration order. The first failing stack aborts the run.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from devflow.core.command import CommandRef, PrimaryCommand, with_default_selector
from devflow.core.config import DevflowConfig, RuntimeContext, RuntimeProfile
from devflow.core.executor.container_proxy import build_container_proxy
from devflow.core.executor.exceptions import (
    ContainerResolutionError,
    ExecutionFailedError,
    NoRunnableStackError,
)
from devflow.core.extensions.models import ExecutionAction
from devflow.core.extensions.registry import ExtensionRegistry
from devflow.core.infra.tool_executor import ToolExecutor
from devflow.core.project import TARGET_CUSTOM_JUST, TARGET_CUSTOM_MAKE, stack_is_applicable

logger = logging.getLogger(__name__)

CUSTOM_STACK = "custom"


def applicable_stacks(config: DevflowConfig) -> List[str]:
    """
    Ordered stacks to try

    Declared stacks whose marker is present, then configured extensions that
    are not already covered. Configured extensions are assumed applicable.
    """
    stacks: List[str] = []
    base_dir = config.base_dir()

    for stack in config.project.stack:
        if stack_is_applicable(base_dir, stack):
            stacks.append(stack)
        else:
            logger.info(f"skip {stack}: manifest not found")

    for ext_name in config.extensions:
        if ext_name not in stacks:
            stacks.append(ext_name)

    return stacks


def map_custom(command: CommandRef, base_dir: Path = Path(".")) -> Optional[ExecutionAction]:
    """
    Fallback mapping for projects driven by a justfile or Makefile

    The target name is the canonical command with ``:`` replaced by ``-``
    (``test:unit`` -> ``test-unit``).
    """
    target = command.canonical().replace(":", "-")
    base_dir = Path(base_dir)

    if (base_dir / TARGET_CUSTOM_JUST).exists() and shutil.which("just"):
        return ExecutionAction(program="just", args=[target])
    if (base_dir / TARGET_CUSTOM_MAKE).exists():
        return ExecutionAction(program="make", args=[target])

    if command.primary == PrimaryCommand.SETUP and command.selector == "doctor":
        return ExecutionAction(
            program="echo",
            args=["custom stack requires justfile or Makefile targets"],
        )
    return None


def map_command(
    stack: str,
    command: CommandRef,
    registry: ExtensionRegistry,
    base_dir: Path = Path("."),
) -> Optional[ExecutionAction]:
    if stack == CUSTOM_STACK:
        return map_custom(command, base_dir)
    return registry.build_action(stack, command)


def run_action(
    action: ExecutionAction,
    command: CommandRef,
    stack: str,
    cwd: Optional[Path] = None,
) -> None:
    """
    Execute an action on the host with inherited stdio

    Raises:
        ExecutionFailedError: If the program cannot start or exits non-zero
    """
    try:
        exit_code = ToolExecutor.execute_command(action.argv(), env=action.env, cwd=cwd)
    except OSError as e:
        raise ExecutionFailedError(
            command.canonical(), stack, action.program, action.args, reason=str(e)
        ) from e

    if exit_code != 0:
        raise ExecutionFailedError(
            command.canonical(), stack, action.program, action.args, exit_code=exit_code
        )


def run(
    config: DevflowConfig,
    registry: ExtensionRegistry,
    command: CommandRef,
    context: Optional[RuntimeContext] = None,
) -> None:
    """
    Run a command on every applicable stack

    Args:
        config: Project configuration
        registry: Discovered extensions
        command: Requested command; a missing selector gets its default
        context: Process facts (container marker, cache override, cwd)

    Raises:
        ExecutionFailedError: On the first stack whose action fails
        ContainerResolutionError: If the container profile cannot find an engine
        NoRunnableStackError: If no stack produced an action
    """
    if context is None:
        context = RuntimeContext.from_environ()

    effective = with_default_selector(command)
    base_dir = config.base_dir()
    use_container = config.runtime.profile == RuntimeProfile.CONTAINER and not context.in_container
    attempted = False

    for stack in applicable_stacks(config):
        action = map_command(stack, effective, registry, base_dir)
        if action is None:
            logger.info(f"skip {stack}: unsupported command {effective.canonical()}")
            continue

        attempted = True

        if use_container:
            try:
                action = build_container_proxy(config, registry, action, context)
            except ContainerResolutionError as e:
                raise ContainerResolutionError(
                    f"{effective.canonical()} failed for {stack}: {e}"
                ) from e

        logger.info(f"run {effective.canonical()} on {stack}")
        run_action(action, effective, stack, cwd=context.cwd)

    if not attempted:
        raise NoRunnableStackError(command.canonical())
