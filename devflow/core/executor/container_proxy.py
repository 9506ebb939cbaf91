"""
Container Proxy

Rewrites a host execution action into an equivalent ``<engine> run --rm``
invocation:

1. Resolve the container engine (Docker/Podman).
2. Resolve the image.
3. Mount the workspace and the running host ``dwf`` binary (read-only), so
   the containerized run uses the same Devflow logic as the invoker even when
   the image is stale.
4. Mount every extension-declared cache directory under a single host cache
   root.
5. Forward the action's environment as ``-e`` flags.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from devflow.core.config import DevflowConfig, RuntimeContext
from devflow.core.executor.exceptions import ContainerResolutionError
from devflow.core.extensions.models import ExecutionAction
from devflow.core.extensions.registry import ExtensionRegistry
from devflow.core.infra.container_client import ContainerClientFactory, ContainerEngine

logger = logging.getLogger(__name__)

DEFAULT_CI_IMAGE = "ghcr.io/softmentor/devflow-ci:latest"
DEFAULT_CACHE_ROOT = ".cache/devflow"
CONTAINER_WORKSPACE = "/workspace"
CONTAINER_DWF_BIN = "/usr/local/bin/dwf"


def resolve_engine(engine: ContainerEngine) -> str:
    """
    Pick the container engine command

    Raises:
        ContainerResolutionError: If no engine (or not the configured one) is on PATH
    """
    resolved = ContainerClientFactory.detect_engine(engine)
    if resolved is None:
        if engine == ContainerEngine.AUTO:
            raise ContainerResolutionError("no container engine (docker or podman) found on PATH")
        raise ContainerResolutionError(
            f"required container engine '{engine.value}' is not installed or not on PATH"
        )

    logger.info(f"using container engine: {resolved.value}")
    return resolved.value


def resolve_cache_root(config: DevflowConfig, context: RuntimeContext) -> Path:
    """
    Host directory that anchors every cache mount

    Priority: ``DWF_CACHE_ROOT`` override, ``[cache].root``, then the default.
    Relative roots are anchored at the project source directory.
    """
    root = context.cache_root_override or config.cache.root or DEFAULT_CACHE_ROOT
    path = Path(root)
    if path.is_absolute():
        return path

    return _source_dir(config, context) / path


def _source_dir(config: DevflowConfig, context: RuntimeContext) -> Path:
    source_dir = config.base_dir()
    if not source_dir.is_absolute():
        source_dir = context.cwd / source_dir
    return source_dir


def parse_mount(mount: str) -> Optional[Tuple[str, str]]:
    """Split ``host_rel:container_abs``; None unless there are exactly two parts"""
    parts = mount.split(":")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def build_container_proxy(
    config: DevflowConfig,
    registry: ExtensionRegistry,
    action: ExecutionAction,
    context: RuntimeContext,
) -> ExecutionAction:
    """
    Transform a host action into a containerized proxy action

    Args:
        config: Project configuration (engine, image, cache root)
        registry: Source of the cache mount declarations
        action: Host action to wrap
        context: Working directory, host binary and cache root override

    Returns:
        New ExecutionAction running the engine

    Raises:
        ContainerResolutionError: If no container engine can be used
    """
    engine_cmd = resolve_engine(config.container.engine)
    image = config.container.image or DEFAULT_CI_IMAGE

    args: List[str] = [
        "run",
        "--rm",
        "-v",
        f"{context.cwd}:{CONTAINER_WORKSPACE}",
        "-v",
        f"{context.host_binary}:{CONTAINER_DWF_BIN}:ro",
        "-w",
        CONTAINER_WORKSPACE,
    ]

    if logger.isEnabledFor(logging.DEBUG):
        try:
            fingerprint = registry.fingerprint(_source_dir(config, context))
        except OSError as e:
            logger.warning(f"failed to compute cache fingerprint: {e}")
        else:
            logger.debug(f"cache fingerprint: {fingerprint}")

    cache_root = resolve_cache_root(config, context)
    for mount in registry.all_cache_mounts():
        parsed = parse_mount(mount)
        if parsed is None:
            logger.warning(f"invalid cache mount format from extension: {mount}")
            continue

        host_rel, container_abs = parsed
        host_abs = cache_root / host_rel
        try:
            host_abs.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"failed to create cache directory {host_abs}: {e}")

        args.extend(["-v", f"{host_abs}:{container_abs}"])

    for key in sorted(action.env):
        args.extend(["-e", f"{key}={action.env[key]}"])

    args.append(image)
    args.append(action.program)
    args.extend(action.args)

    return ExecutionAction(program=engine_cmd, args=args, env=dict(action.env))
