"""Container Client - container engine adapter

Wraps the Docker/Podman probes used to pick an engine. This is a system
boundary: it is allowed to call the external container engine.
"""

import logging
import shutil
import subprocess
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ContainerEngine(str, Enum):
    """Supported container engines"""
    DOCKER = "docker"
    PODMAN = "podman"
    AUTO = "auto"


# Order in which "auto" tries engines
AUTO_PREFERENCE = (ContainerEngine.PODMAN, ContainerEngine.DOCKER)


class ContainerClient:
    """Container engine client"""

    def __init__(self, engine: ContainerEngine):
        """
        Args:
            engine: Concrete engine (not AUTO)
        """
        if engine == ContainerEngine.AUTO:
            raise ValueError("ContainerClient needs a concrete engine")
        self.engine = engine

    @property
    def command(self) -> str:
        return self.engine.value

    def is_installed(self) -> bool:
        """Check whether the engine binary is on PATH"""
        return shutil.which(self.command) is not None

    def is_healthy(self) -> bool:
        """
        Check whether the engine has a responsive daemon

        ``<engine> info`` needs a working daemon connection, unlike ``--version``.
        """
        if not self.is_installed():
            return False

        try:
            result = subprocess.run(
                [self.command, "info"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.debug(f"{self.command} info failed to start: {e}")
            return False
        return result.returncode == 0


class ContainerClientFactory:
    """Container client factory"""

    @staticmethod
    def detect_engine(prefer: ContainerEngine = ContainerEngine.AUTO) -> Optional[ContainerEngine]:
        """
        Detect a usable container engine

        Args:
            prefer: Configured engine; an explicit engine is returned only if installed

        Returns:
            The engine to use, or None if nothing suitable is on PATH
        """
        if prefer != ContainerEngine.AUTO:
            if ContainerClient(prefer).is_installed():
                return prefer
            return None

        for engine in AUTO_PREFERENCE:
            if ContainerClient(engine).is_healthy():
                return engine

        for engine in AUTO_PREFERENCE:
            if ContainerClient(engine).is_installed():
                return engine

        return None
