"""Tool Executor - host process adapter

Runs resolved actions as child processes. This is a system boundary: it is
allowed to spawn arbitrary programs.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Host process executor"""

    @staticmethod
    def execute_command(
        command: List[str],
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> int:
        """
        Run a command with inherited stdio and wait for it

        Args:
            command: Program followed by its arguments
            env: Variables overlaid on the current environment
            cwd: Working directory

        Returns:
            Exit code of the child

        Raises:
            OSError: If the program cannot be started
        """
        child_env = None
        if env:
            child_env = {**os.environ, **env}

        logger.debug(f"spawning: {' '.join(command)}")
        result = subprocess.run(command, env=child_env, cwd=cwd)
        return result.returncode
