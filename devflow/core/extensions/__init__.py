"""Devflow Extensions System

Extensions are capability providers: they advertise which commands they can
serve and translate a command into a concrete execution action.

Components:
- base: Extension contract shared by every provider
- models: ExecutionAction, Capability and source enums
- builtin: Extensions compiled into Devflow (rust, node)
- external: Subprocess extensions speaking JSON over stdio
- registry: Name-keyed registry resolving commands against extensions
- discovery: Registry bootstrap from project configuration
- exceptions: Custom exceptions
"""

from devflow.core.extensions.exceptions import (
    ExtensionError,
    NoCapabilityError,
    TargetValidationError,
    ExtensionConfigError,
)
from devflow.core.extensions.models import (
    Capability,
    ExecutionAction,
    ExtensionSource,
)
from devflow.core.extensions.base import Extension
from devflow.core.extensions.external import (
    ProbeOutcome,
    ProbeResult,
    SubprocessExtension,
    probe_capabilities,
)
from devflow.core.extensions.registry import ExtensionRegistry

__all__ = [
    # Exceptions
    "ExtensionError",
    "NoCapabilityError",
    "TargetValidationError",
    "ExtensionConfigError",
    # Models
    "Capability",
    "ExecutionAction",
    "ExtensionSource",
    # Contract
    "Extension",
    # Subprocess protocol
    "ProbeOutcome",
    "ProbeResult",
    "SubprocessExtension",
    "probe_capabilities",
    # Registry
    "ExtensionRegistry",
]
