from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from devflow.core.command import CommandRef, PrimaryCommand
from devflow.core.extensions import (
    ExecutionAction,
    Extension,
    ExtensionRegistry,
    NoCapabilityError,
    TargetValidationError,
)


class StaticExtension(Extension):
    """Test extension returning a fixed action for any supported command"""

    def __init__(
        self,
        name: str,
        capabilities: Set[str],
        action: Optional[ExecutionAction] = None,
        mounts: Optional[List[str]] = None,
        env: Optional[Dict[str, str]] = None,
        inputs: Optional[List[str]] = None,
    ):
        self._name = name
        self._capabilities = capabilities
        self._action = action
        self._mounts = mounts or []
        self._env = env or {}
        self._inputs = inputs or []

    @property
    def name(self) -> str:
        return self._name

    def capabilities(self) -> Set[str]:
        return set(self._capabilities)

    def build_action(self, command: CommandRef) -> Optional[ExecutionAction]:
        return self._action

    def cache_mounts(self) -> List[str]:
        return list(self._mounts)

    def env_vars(self) -> Dict[str, str]:
        return dict(self._env)

    def fingerprint_inputs(self) -> List[str]:
        return list(self._inputs)


def test_empty_registry_accepts_any_command() -> None:
    registry = ExtensionRegistry()
    for primary in PrimaryCommand:
        registry.ensure_can_run(CommandRef(primary, None))
        registry.ensure_can_run(CommandRef(primary, "anything"))


def test_selector_and_bare_primary_matching() -> None:
    registry = ExtensionRegistry()
    registry.register(StaticExtension("ext", {"test:lint", "fmt"}))

    registry.ensure_can_run(CommandRef.parse("test:lint"))
    registry.ensure_can_run(CommandRef.parse("fmt:anything"))
    registry.ensure_can_run(CommandRef.parse("fmt"))

    with pytest.raises(NoCapabilityError) as exc:
        registry.ensure_can_run(CommandRef.parse("test:unit"))
    assert exc.value.capability == "test:unit"


def test_qualified_capability_does_not_match_bare_command() -> None:
    registry = ExtensionRegistry()
    registry.register(StaticExtension("ext", {"test:unit"}))

    with pytest.raises(NoCapabilityError) as exc:
        registry.ensure_can_run(CommandRef.parse("test"))
    assert exc.value.capability == "test"


def test_unknown_capability_tokens_are_ignored() -> None:
    registry = ExtensionRegistry()
    registry.register(StaticExtension("ext", {"deploy:prod", "build"}))

    registry.ensure_can_run(CommandRef.parse("build:release"))
    with pytest.raises(NoCapabilityError):
        registry.ensure_can_run(CommandRef.parse("test:unit"))


def test_register_last_wins() -> None:
    registry = ExtensionRegistry()
    registry.register(StaticExtension("ext", {"test"}))
    registry.register(StaticExtension("ext", {"fmt"}))

    assert registry.names() == ["ext"]
    assert len(registry) == 1
    registry.ensure_can_run(CommandRef.parse("fmt:check"))
    with pytest.raises(NoCapabilityError):
        registry.ensure_can_run(CommandRef.parse("test:unit"))


def test_build_action_returns_action_unchanged() -> None:
    action = ExecutionAction(program="echo", args=["hello"])
    registry = ExtensionRegistry()
    registry.register(StaticExtension("mock", {"test"}, action=action))

    out = registry.build_action("mock", CommandRef(PrimaryCommand.TEST))
    assert out == action
    assert out.env == {}


def test_build_action_unknown_extension_returns_none() -> None:
    registry = ExtensionRegistry()
    assert registry.build_action("missing", CommandRef(PrimaryCommand.TEST, "unit")) is None


def test_build_action_declined_returns_none() -> None:
    registry = ExtensionRegistry()
    registry.register(StaticExtension("mock", {"test"}, action=None, env={"A": "1"}))
    assert registry.build_action("mock", CommandRef(PrimaryCommand.TEST, "unit")) is None


def test_build_action_merges_env_with_action_precedence() -> None:
    action = ExecutionAction(program="cargo", args=["build"], env={"SHARED": "action", "ONLY_ACTION": "x"})
    registry = ExtensionRegistry()
    registry.register(
        StaticExtension("rusty", {"build"}, action=action, env={"SHARED": "extension", "ONLY_EXT": "y"})
    )

    out = registry.build_action("rusty", CommandRef(PrimaryCommand.BUILD, "debug"))
    assert out.env == {"SHARED": "action", "ONLY_ACTION": "x", "ONLY_EXT": "y"}
    assert out.program == "cargo"
    assert out.args == ["build"]
    # Original action is not mutated
    assert action.env == {"SHARED": "action", "ONLY_ACTION": "x"}


def test_validate_target_support_reports_profile_and_command() -> None:
    registry = ExtensionRegistry()
    registry.register(StaticExtension("ext", {"fmt", "test:unit"}))

    registry.validate_target_support({"pr": ["fmt:check", "test:unit"]})

    with pytest.raises(TargetValidationError) as exc:
        registry.validate_target_support({
            "pr": ["fmt:check"],
            "main": ["test:unit", "test:integration", "build:release"],
        })
    assert exc.value.profile == "main"
    assert exc.value.command == "test:integration"


def test_validate_target_support_rejects_unparseable_command() -> None:
    registry = ExtensionRegistry()
    with pytest.raises(TargetValidationError) as exc:
        registry.validate_target_support({"release": ["deploy:prod"]})
    assert exc.value.profile == "release"
    assert exc.value.command == "deploy:prod"


def test_all_cache_mounts_is_sorted_and_deterministic() -> None:
    a = StaticExtension("a", {"test"}, mounts=["z/cache:/z", "shared:/shared"])
    b = StaticExtension("b", {"test"}, mounts=["a/cache:/a", "shared:/shared"])

    forward = ExtensionRegistry()
    forward.register(a)
    forward.register(b)

    backward = ExtensionRegistry()
    backward.register(b)
    backward.register(a)

    expected = ["a/cache:/a", "shared:/shared", "z/cache:/z"]
    assert forward.all_cache_mounts() == expected
    assert backward.all_cache_mounts() == expected


def test_fingerprint_covers_all_extension_inputs(tmp_path: Path) -> None:
    (tmp_path / "Cargo.lock").write_text("v1", encoding="utf-8")

    registry = ExtensionRegistry()
    registry.register(StaticExtension("a", {"test"}, inputs=["Cargo.lock"]))
    registry.register(StaticExtension("b", {"test"}, inputs=["package.json", "Cargo.lock"]))

    assert registry.all_fingerprint_inputs() == ["Cargo.lock", "package.json"]

    before = registry.fingerprint(tmp_path)
    (tmp_path / "Cargo.lock").write_text("v2", encoding="utf-8")
    assert registry.fingerprint(tmp_path) != before
