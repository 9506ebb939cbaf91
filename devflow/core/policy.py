"""Target profile resolution (check:pr, check:main, ...)"""

from typing import List

from devflow.core.command import CommandRef
from devflow.core.config import DevflowConfig
from devflow.core.errors import PolicyError


def resolve_policy_commands(config: DevflowConfig, profile: str) -> List[CommandRef]:
    """
    Resolve the commands listed under ``[targets].<profile>``

    Raises:
        PolicyError: If the profile is not configured
        UnknownCommandError: If an entry does not parse
    """
    entries = config.targets.profiles.get(profile)
    if entries is None:
        raise PolicyError(f"unknown check profile '{profile}'")
    return [CommandRef.parse(entry) for entry in entries]
