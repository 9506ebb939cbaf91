"""Built-in extension for Node.js projects (npm)"""

from typing import Dict, List, Optional, Set, Tuple

from devflow.core.command import CommandRef
from devflow.core.extensions.base import Extension
from devflow.core.extensions.models import ExecutionAction

_ACTIONS: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("setup", "deps"): ("npm", "ci"),
    ("setup", "doctor"): ("npm", "--version"),
    ("fmt", "check"): ("npm", "run", "fmt:check"),
    ("fmt", "fix"): ("npm", "run", "fmt:fix"),
    ("lint", "static"): ("npm", "run", "lint"),
    ("build", "debug"): ("npm", "run", "build"),
    ("build", "release"): ("npm", "run", "build"),
    ("test", "unit"): ("npm", "run", "test:unit"),
    ("test", "integration"): ("npm", "run", "test:integration"),
    ("test", "smoke"): ("npm", "run", "test:smoke"),
    ("package", "artifact"): ("npm", "pack", "--dry-run"),
}


class NodeExtension(Extension):
    """Maps Devflow commands to npm invocations"""

    @property
    def name(self) -> str:
        return "node"

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
        return ["node/npm:/root/.npm"]

    def fingerprint_inputs(self) -> List[str]:
        return ["package-lock.json", "yarn.lock", "pnpm-lock.yaml", "package.json"]
