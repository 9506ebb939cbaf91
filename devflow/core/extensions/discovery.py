"""
Extension discovery

Bootstraps a registry for a project:

1. Built-in extensions for the declared stacks that name one.
2. Implicit subprocess extensions: every other declared stack ``<s>`` (except
   ``custom``) is probed as ``devflow-ext-<s>``.
3. Explicit subprocess extensions: every ``[extensions.<name>]`` with
   ``source = "path"`` is probed at its ``path`` or as ``devflow-ext-<name>``.

Probing is best-effort. A binary that is missing or does not answer simply
yields no extension.
"""

import logging
from typing import Optional, Set

from devflow.core.command import CommandRef
from devflow.core.config import DevflowConfig, ExtensionConfig
from devflow.core.extensions.builtin import BUILTIN_EXTENSIONS, BUILTIN_STACKS
from devflow.core.extensions.exceptions import ExtensionConfigError
from devflow.core.extensions.external import (
    ProbeOutcome,
    SubprocessExtension,
    probe_capabilities,
)
from devflow.core.extensions.models import Capability, ExtensionSource, parse_capabilities
from devflow.core.extensions.registry import ExtensionRegistry

logger = logging.getLogger(__name__)

EXTENSION_PREFIX = "devflow-ext-"


def extension_binary_name(name: str) -> str:
    return f"{EXTENSION_PREFIX}{name}"


def _covers(capability: Capability, other: Capability) -> bool:
    return capability.matches(CommandRef(other.primary, other.selector))


def narrow_capabilities(ext_name: str, advertised: Set[str], allowed: Set[str]) -> Set[str]:
    """
    Restrict advertised capabilities to what the config lists

    Tokens are compared as parsed capabilities, so a bare ``lint`` in either
    set keeps the qualified ``lint:static`` from the other. When both sides
    overlap, the narrower token is the one registered.

    Returns:
        Capability tokens to register for the extension
    """
    permitted = parse_capabilities(allowed, owner=ext_name)
    narrowed: Set[str] = set()
    dropped: Set[str] = set()

    for capability in parse_capabilities(advertised, owner=ext_name):
        kept = False
        for limit in permitted:
            if _covers(limit, capability):
                narrowed.add(capability.token())
                kept = True
            elif _covers(capability, limit):
                narrowed.add(limit.token())
                kept = True
        if not kept:
            dropped.add(capability.token())

    if dropped:
        logger.info(
            f"extension '{ext_name}' advertises capabilities not listed in config: "
            f"{sorted(dropped)}"
        )
    if not narrowed:
        logger.warning(
            f"extension '{ext_name}' has no capabilities left after applying configured "
            f"capabilities {sorted(allowed)}"
        )
    return narrowed


def discover_and_register(
    ext_name: str,
    binary: str,
    registry: ExtensionRegistry,
    allowed: Optional[Set[str]] = None,
) -> bool:
    """
    Probe one candidate binary and register it if it answers

    Args:
        ext_name: Name to register the extension under
        binary: Binary name or path to probe
        registry: Registry to populate
        allowed: Capabilities the config permits; None means all advertised

    Returns:
        True if the extension was registered
    """
    result = probe_capabilities(binary)

    if result.outcome == ProbeOutcome.NOT_APPLICABLE:
        logger.debug(f"no subprocess extension '{ext_name}' ({binary}): {result.detail}")
        return False
    if result.outcome == ProbeOutcome.ERROR:
        logger.warning(f"skipping subprocess extension '{ext_name}' ({binary}): {result.detail}")
        return False

    capabilities = result.capabilities
    if allowed:
        capabilities = narrow_capabilities(ext_name, capabilities, allowed)

    logger.debug(
        f"discovered subprocess extension '{ext_name}' with capabilities: {sorted(capabilities)}"
    )
    registry.register(SubprocessExtension(ext_name, binary, capabilities))
    return True


def register_builtin_extensions(config: DevflowConfig, registry: ExtensionRegistry) -> None:
    for stack in config.project.stack:
        extension_cls = BUILTIN_EXTENSIONS.get(stack)
        if extension_cls is not None:
            registry.register(extension_cls())


def discover_subprocess_extensions(config: DevflowConfig, registry: ExtensionRegistry) -> None:
    """Probe implicit (stack) and explicit (config) subprocess extensions"""
    for stack in config.project.stack:
        if stack in BUILTIN_STACKS:
            continue
        discover_and_register(stack, extension_binary_name(stack), registry)

    for ext_name, ext_config in config.extensions.items():
        if ext_config.source != ExtensionSource.PATH:
            continue
        binary = _resolve_binary(ext_name, ext_config, config)
        registered = discover_and_register(
            ext_name,
            binary,
            registry,
            allowed=set(ext_config.capabilities) or None,
        )
        if not registered and ext_config.required:
            raise ExtensionConfigError(
                f"required extension '{ext_name}' did not respond to {binary} --discover"
            )


def discover_extensions(config: DevflowConfig, registry: ExtensionRegistry) -> None:
    register_builtin_extensions(config, registry)
    discover_subprocess_extensions(config, registry)


def _resolve_binary(ext_name: str, ext_config: ExtensionConfig, config: DevflowConfig) -> str:
    if not ext_config.path:
        return extension_binary_name(ext_name)

    # Relative paths in devflow.toml are relative to the file, bare names go through PATH
    if "/" not in ext_config.path:
        return ext_config.path
    path = config.base_dir() / ext_config.path
    return str(path)
