"""Extensions compiled into Devflow"""

from typing import Dict, Type

from devflow.core.extensions.base import Extension
from devflow.core.extensions.builtin.node import NodeExtension
from devflow.core.extensions.builtin.rust import RustExtension

BUILTIN_EXTENSIONS: Dict[str, Type[Extension]] = {
    "rust": RustExtension,
    "node": NodeExtension,
}

# Stacks handled without probing for a devflow-ext-<stack> binary
BUILTIN_STACKS = frozenset({"rust", "node", "custom"})

__all__ = [
    "BUILTIN_EXTENSIONS",
    "BUILTIN_STACKS",
    "NodeExtension",
    "RustExtension",
]
