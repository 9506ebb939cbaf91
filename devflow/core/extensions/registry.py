"""
Extension Registry

Owns every registered extension for the lifetime of the process and answers
capability questions against them. The registry is populated once during
discovery and read-only afterwards.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional

from devflow.core.command import CommandRef
from devflow.core.errors import UnknownCommandError
from devflow.core.extensions.base import Extension
from devflow.core.extensions.exceptions import NoCapabilityError, TargetValidationError
from devflow.core.extensions.models import Capability, ExecutionAction, parse_capabilities
from devflow.core.fingerprint import compute_fingerprint

if TYPE_CHECKING:
    from devflow.core.config import DevflowConfig

logger = logging.getLogger(__name__)


class ExtensionRegistry:
    """Name-keyed collection of extensions"""

    def __init__(self) -> None:
        self._extensions: Dict[str, Extension] = {}
        self._capabilities: Dict[str, List[Capability]] = {}

    @classmethod
    def discover(cls, config: "DevflowConfig") -> "ExtensionRegistry":
        """
        Build a registry for a project

        Registers built-in extensions for the declared stacks, then probes
        subprocess extensions implied by the stack list and the extension
        config.
        """
        from devflow.core.extensions.discovery import discover_extensions

        registry = cls()
        discover_extensions(config, registry)
        return registry

    def register(self, extension: Extension) -> None:
        """Insert an extension; a later registration under the same name wins"""
        name = extension.name
        if name in self._extensions:
            logger.debug(f"replacing registered extension '{name}'")
        self._extensions[name] = extension
        self._capabilities[name] = parse_capabilities(extension.capabilities(), owner=name)
        logger.debug(f"registered extension '{name}' ({len(self._capabilities[name])} capabilities)")

    def get(self, name: str) -> Optional[Extension]:
        return self._extensions.get(name)

    def names(self) -> List[str]:
        return list(self._extensions)

    def __len__(self) -> int:
        return len(self._extensions)

    def __contains__(self, name: object) -> bool:
        return name in self._extensions

    def ensure_can_run(self, command: CommandRef) -> None:
        """
        Check that some extension advertises ``command``

        An empty registry accepts everything so that a project without
        extensions can still plan commands.

        Raises:
            NoCapabilityError: If no extension matches
        """
        if not self._extensions:
            return

        for capabilities in self._capabilities.values():
            if any(capability.matches(command) for capability in capabilities):
                return

        raise NoCapabilityError(command.canonical())

    def build_action(self, extension_name: str, command: CommandRef) -> Optional[ExecutionAction]:
        """
        Ask a named extension for an action

        The extension's ``env_vars()`` are merged underneath the action's own
        env; keys set by the action win.

        Returns:
            ExecutionAction, or None if the extension is unknown or declines
        """
        extension = self._extensions.get(extension_name)
        if extension is None:
            return None

        action = extension.build_action(command)
        if action is None:
            return None

        base_env = extension.env_vars()
        if not base_env:
            return action

        return action.model_copy(update={"env": {**base_env, **action.env}})

    def validate_target_support(self, profiles: Mapping[str, Iterable[str]]) -> None:
        """
        Fail fast if any target profile lists a command nothing can run

        Raises:
            TargetValidationError: For the first unsupported or unparseable command
        """
        for profile, commands in profiles.items():
            for text in commands:
                try:
                    self.ensure_can_run(CommandRef.parse(text))
                except (UnknownCommandError, NoCapabilityError) as e:
                    raise TargetValidationError(profile, text, str(e)) from e

    def all_cache_mounts(self) -> List[str]:
        """Sorted, deduplicated union of every extension's cache mounts"""
        mounts = set()
        for extension in self._extensions.values():
            mounts.update(extension.cache_mounts())
        return sorted(mounts)

    def all_fingerprint_inputs(self) -> List[str]:
        inputs = set()
        for extension in self._extensions.values():
            inputs.update(extension.fingerprint_inputs())
        return sorted(inputs)

    def fingerprint(self, base_dir: Path) -> str:
        """Cache key over every extension's fingerprint inputs"""
        return compute_fingerprint(base_dir, self.all_fingerprint_inputs())
