"""Data models for the Extension system"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from devflow.core.command import CommandRef, PrimaryCommand
from devflow.core.errors import UnknownCommandError

logger = logging.getLogger(__name__)


class ExtensionSource(str, Enum):
    """Where an extension comes from"""
    BUILTIN = "builtin"
    PATH = "path"


class ExecutionAction(BaseModel):
    """A fully resolved host invocation, ready to spawn"""
    model_config = ConfigDict(frozen=True)

    program: str = Field(description="Program to execute")
    args: List[str] = Field(default_factory=list, description="Program arguments")
    env: Dict[str, str] = Field(default_factory=dict, description="Extra environment variables")

    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def display(self) -> str:
        return " ".join(self.argv())


@dataclass(frozen=True)
class Capability:
    """
    Parsed capability token

    A bare primary (``test``) matches every selector under that primary; a
    qualified token (``test:lint``) matches only that exact command.
    """
    primary: PrimaryCommand
    selector: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> "Capability":
        """
        Raises:
            UnknownCommandError: If the token's primary is unknown
        """
        command = CommandRef.parse(token)
        return cls(primary=command.primary, selector=command.selector)

    def matches(self, command: CommandRef) -> bool:
        if self.primary != command.primary:
            return False
        if self.selector is None:
            return True
        return self.selector == command.selector

    def token(self) -> str:
        return CommandRef(self.primary, self.selector).canonical()


def parse_capabilities(tokens: Iterable[str], owner: str = "") -> List[Capability]:
    """Parse capability tokens, skipping the ones with an unknown primary"""
    parsed = []
    for token in tokens:
        try:
            parsed.append(Capability.parse(token))
        except UnknownCommandError as e:
            logger.warning(f"ignoring capability '{token}' of extension '{owner}': {e}")
    return parsed
