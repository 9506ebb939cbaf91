"""
Extension Base Class

Defines the capability contract every extension implements, whether it is
compiled into Devflow or backed by an external binary.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set

from devflow.core.command import CommandRef
from devflow.core.extensions.models import ExecutionAction


class Extension(ABC):
    """
    Abstract base class for capability providers

    An extension advertises a set of capability tokens and maps commands it
    supports to concrete execution actions. The optional metadata hooks
    describe what the container proxy needs to reuse caches across runs.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Get the extension name

        Returns:
            Unique extension name (e.g., "rust", "python")
        """
        pass

    @abstractmethod
    def capabilities(self) -> Set[str]:
        """
        Get advertised capability tokens

        Returns:
            Set of ``primary`` or ``primary:selector`` tokens
        """
        pass

    @abstractmethod
    def build_action(self, command: CommandRef) -> Optional[ExecutionAction]:
        """
        Map a command to an execution action

        Args:
            command: Normalized command to map

        Returns:
            ExecutionAction, or None if this extension does not handle the command
        """
        pass

    def cache_mounts(self) -> List[str]:
        """Cache mounts formatted as ``host_relative_dir:container_absolute_dir``"""
        return []

    def env_vars(self) -> Dict[str, str]:
        """Environment applied underneath every action this extension builds"""
        return {}

    def fingerprint_inputs(self) -> List[str]:
        """Files whose content identity defines the cache key"""
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
