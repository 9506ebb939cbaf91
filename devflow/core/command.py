"""
Command Model

Canonical representation of a requested action: a primary category plus an
optional selector, rendered as ``primary`` or ``primary:selector``.

Examples:
    >>> cmd = CommandRef.parse("test:unit")
    >>> cmd.primary
    <PrimaryCommand.TEST: 'test'>
    >>> cmd.canonical()
    'test:unit'
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from devflow.core.errors import UnknownCommandError


class PrimaryCommand(str, Enum):
    """Top-level command categories"""
    INIT = "init"
    SETUP = "setup"
    FMT = "fmt"
    LINT = "lint"
    BUILD = "build"
    TEST = "test"
    PACKAGE = "package"
    CHECK = "check"
    RELEASE = "release"
    CI = "ci"
    PRUNE = "prune"

    @classmethod
    def parse(cls, text: str) -> "PrimaryCommand":
        try:
            return cls(text)
        except ValueError:
            raise UnknownCommandError(text) from None

    def default_selector(self) -> str:
        """Selector applied when a command is requested without one"""
        return _DEFAULT_SELECTORS[self]


_DEFAULT_SELECTORS: Dict[PrimaryCommand, str] = {
    PrimaryCommand.INIT: "project",
    PrimaryCommand.SETUP: "doctor",
    PrimaryCommand.FMT: "check",
    PrimaryCommand.LINT: "static",
    PrimaryCommand.BUILD: "debug",
    PrimaryCommand.TEST: "unit",
    PrimaryCommand.PACKAGE: "artifact",
    PrimaryCommand.CHECK: "pr",
    PrimaryCommand.RELEASE: "candidate",
    PrimaryCommand.CI: "check",
    PrimaryCommand.PRUNE: "cache",
}


@dataclass(frozen=True)
class CommandRef:
    """A primary command with an optional selector"""
    primary: PrimaryCommand
    selector: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "CommandRef":
        """
        Parse ``primary`` or ``primary:selector``

        Only the first ``:`` separates primary from selector; everything after
        it belongs to the selector.

        Raises:
            UnknownCommandError: If the primary part is not a known command
        """
        primary_text, sep, selector = text.partition(":")
        primary = PrimaryCommand.parse(primary_text)
        return cls(primary=primary, selector=selector if sep else None)

    def canonical(self) -> str:
        if self.selector is None:
            return self.primary.value
        return f"{self.primary.value}:{self.selector}"

    def with_selector(self, selector: Optional[str]) -> "CommandRef":
        return CommandRef(primary=self.primary, selector=selector)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form used by the subprocess extension protocol"""
        return {"primary": self.primary.value, "selector": self.selector}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandRef":
        return cls(
            primary=PrimaryCommand.parse(str(data.get("primary", ""))),
            selector=data.get("selector"),
        )

    def __str__(self) -> str:
        return self.canonical()


def with_default_selector(command: CommandRef) -> CommandRef:
    """Return ``command`` unchanged if it has a selector, else apply the default"""
    if command.selector is not None:
        return command
    return command.with_selector(command.primary.default_selector())
