import pytest
from pydantic import ValidationError

from devflow.core.command import CommandRef, PrimaryCommand
from devflow.core.errors import UnknownCommandError
from devflow.core.extensions.models import Capability, ExecutionAction, parse_capabilities


def test_bare_capability_matches_any_selector() -> None:
    cap = Capability.parse("test")
    assert cap.matches(CommandRef.parse("test"))
    assert cap.matches(CommandRef.parse("test:unit"))
    assert not cap.matches(CommandRef.parse("fmt:check"))


def test_qualified_capability_matches_exactly() -> None:
    cap = Capability.parse("test:lint")
    assert cap.matches(CommandRef.parse("test:lint"))
    assert not cap.matches(CommandRef.parse("test:unit"))
    assert not cap.matches(CommandRef.parse("test"))
    assert cap.token() == "test:lint"


def test_capability_with_unknown_primary_is_rejected() -> None:
    with pytest.raises(UnknownCommandError):
        Capability.parse("deploy")


def test_parse_capabilities_skips_unknown(caplog) -> None:
    parsed = parse_capabilities(["fmt", "deploy:prod"], owner="ext")
    assert parsed == [Capability(PrimaryCommand.FMT)]
    assert "ignoring capability 'deploy:prod' of extension 'ext'" in caplog.text


def test_execution_action_wire_form() -> None:
    action = ExecutionAction.model_validate_json('{"program": "echo", "args": ["hi"], "env": {"A": "1"}}')
    assert action.argv() == ["echo", "hi"]
    assert action.env == {"A": "1"}
    assert action.display() == "echo hi"


def test_execution_action_requires_program() -> None:
    with pytest.raises(ValidationError):
        ExecutionAction.model_validate_json('{"args": []}')


def test_execution_action_is_frozen() -> None:
    action = ExecutionAction(program="echo")
    with pytest.raises(ValidationError):
        action.program = "rm"
