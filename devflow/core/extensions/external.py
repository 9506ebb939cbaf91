"""
Subprocess Extension - JSON over stdio

Delegates command mapping to an external binary. The protocol is a single
request/response per process:

- Discovery: ``<binary> --discover``, no stdin. Exit 0 with a JSON array of
  capability strings on stdout.
- Action: ``<binary> --build-action``, a JSON command
  ``{"primary": "...", "selector": "..." | null}`` on stdin. Exit 0 with a JSON
  ``{"program": "...", "args": [...], "env": {...}}`` on stdout. A non-zero exit
  means the extension declines the command.

stderr of the child is inherited so extension diagnostics reach the user.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set

from pydantic import ValidationError

from devflow.core.command import CommandRef
from devflow.core.extensions.base import Extension
from devflow.core.extensions.models import ExecutionAction

logger = logging.getLogger(__name__)

DISCOVER_FLAG = "--discover"
BUILD_ACTION_FLAG = "--build-action"


class ProbeOutcome(str, Enum):
    """Result kinds of a discovery probe"""
    SUPPORTED = "supported"
    NOT_APPLICABLE = "not_applicable"
    ERROR = "error"


@dataclass
class ProbeResult:
    """Outcome of ``<binary> --discover``"""
    outcome: ProbeOutcome
    capabilities: Set[str] = field(default_factory=set)
    detail: str = ""

    @property
    def supported(self) -> bool:
        return self.outcome == ProbeOutcome.SUPPORTED


def probe_capabilities(binary: str) -> ProbeResult:
    """
    Ask an extension binary which capabilities it provides

    Args:
        binary: Binary name (resolved on PATH) or path

    Returns:
        ProbeResult; never raises for spawn, exit or parse failures
    """
    logger.debug(f"probing for subprocess extension: {binary}")

    try:
        result = subprocess.run(
            [binary, DISCOVER_FLAG],
            stdin=subprocess.DEVNULL,
            capture_output=True,
        )
    except FileNotFoundError as e:
        return ProbeResult(ProbeOutcome.NOT_APPLICABLE, detail=f"not found: {e}")
    except OSError as e:
        return ProbeResult(ProbeOutcome.ERROR, detail=f"failed to execute: {e}")

    if result.returncode != 0:
        return ProbeResult(
            ProbeOutcome.ERROR,
            detail=f"{DISCOVER_FLAG} failed with status {result.returncode}",
        )

    try:
        payload = json.loads(result.stdout)
    except ValueError as e:
        return ProbeResult(ProbeOutcome.ERROR, detail=f"failed to parse capabilities: {e}")

    if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
        return ProbeResult(
            ProbeOutcome.ERROR,
            detail="capabilities must be a JSON array of strings",
        )

    return ProbeResult(ProbeOutcome.SUPPORTED, capabilities=set(payload))


class SubprocessExtension(Extension):
    """An extension backed by an external binary"""

    def __init__(self, name: str, binary_path: str, capabilities: Set[str]):
        self._name = name
        self.binary_path = binary_path
        self._capabilities = set(capabilities)

    @property
    def name(self) -> str:
        return self._name

    def capabilities(self) -> Set[str]:
        return set(self._capabilities)

    def build_action(self, command: CommandRef) -> Optional[ExecutionAction]:
        """
        Ask the binary for an action

        Returns:
            ExecutionAction, or None when the binary declines, cannot be
            started, or answers with malformed output
        """
        request = json.dumps(command.to_dict()).encode("utf-8")

        try:
            process = subprocess.Popen(
                [self.binary_path, BUILD_ACTION_FLAG],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=None,
            )
        except OSError as e:
            logger.error(f"failed to spawn extension binary '{self.binary_path}': {e}")
            return None

        try:
            stdout, _ = process.communicate(request)
        except OSError as e:
            # BrokenPipe when the child exits without reading stdin
            logger.error(f"failed to talk to extension '{self._name}': {e}")
            process.wait()
            return None

        if process.returncode != 0:
            logger.debug(
                f"extension {self._name} declined to build action for {command.canonical()}"
            )
            return None

        try:
            return ExecutionAction.model_validate_json(stdout)
        except (ValidationError, UnicodeDecodeError) as e:
            logger.error(f"failed to parse ExecutionAction from {self._name}: {e}")
            return None

    def __repr__(self) -> str:
        return f"SubprocessExtension(name={self._name!r}, binary_path={self.binary_path!r})"
