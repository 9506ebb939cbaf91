"""Built-in extension for Rust projects (cargo)"""

from typing import Dict, List, Optional, Set, Tuple

from devflow.core.command import CommandRef
from devflow.core.extensions.base import Extension
from devflow.core.extensions.models import ExecutionAction

_ACTIONS: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("setup", "toolchain"): ("rustup", "show"),
    ("setup", "deps"): ("cargo", "fetch"),
    ("setup", "doctor"): ("cargo", "--version"),
    ("fmt", "check"): ("cargo", "fmt", "--all", "--", "--check"),
    ("fmt", "fix"): ("cargo", "fmt", "--all"),
    ("lint", "static"): (
        "cargo", "clippy", "--all-targets", "--all-features", "--", "-D", "warnings",
    ),
    ("build", "debug"): ("cargo", "build"),
    ("build", "release"): ("cargo", "build", "--release"),
    ("test", "unit"): ("cargo", "nextest", "run", "--lib", "--bins"),
    ("test", "integration"): ("cargo", "test", "--tests"),
    ("test", "smoke"): ("cargo", "test", "smoke"),
    ("package", "artifact"): ("cargo", "build", "--release"),
    ("release", "candidate"): ("cargo", "build", "--release"),
}


class RustExtension(Extension):
    """Maps Devflow commands to cargo invocations"""

    @property
    def name(self) -> str:
        return "rust"

    def capabilities(self) -> Set[str]:
        return {
            "setup",
            "fmt:check",
            "fmt:fix",
            "lint:static",
            "build:debug",
            "build:release",
            "test:unit",
            "test:integration",
            "test:smoke",
            "package:artifact",
            "check",
            "release",
            "ci:generate",
            "ci:check",
        }

    def build_action(self, command: CommandRef) -> Optional[ExecutionAction]:
        argv = _ACTIONS.get((command.primary.value, command.selector or ""))
        if argv is None:
            return None
        return ExecutionAction(program=argv[0], args=list(argv[1:]))

    def cache_mounts(self) -> List[str]:
        return [
            "rust/cargo:/workspace/.cargo-cache",
            "rust/target:/workspace/target/ci",
        ]

    def env_vars(self) -> Dict[str, str]:
        return {
            "CARGO_HOME": "/workspace/.cargo-cache",
            "CARGO_TARGET_DIR": "/workspace/target/ci",
            "SCCACHE_DIR": "/workspace/.cargo-cache/sccache",
            "RUSTC_WRAPPER": "sccache",
        }

    def fingerprint_inputs(self) -> List[str]:
        return ["Cargo.lock", "rust-toolchain.toml", "Cargo.toml"]
