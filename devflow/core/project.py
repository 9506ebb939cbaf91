"""Stack applicability checks"""

from pathlib import Path

MANIFEST_RUST = "Cargo.toml"
MANIFEST_NODE = "package.json"
TARGET_CUSTOM_JUST = "justfile"
TARGET_CUSTOM_MAKE = "Makefile"


def stack_is_applicable(base_path: Path, stack: str) -> bool:
    """
    Determine whether a stack applies to the project at ``base_path``

    Built-in stacks need their marker file. Any other stack is backed by a
    subprocess extension and always applies; a bad mapping surfaces at
    execution time instead.
    """
    base_path = Path(base_path)
    if stack == "rust":
        return (base_path / MANIFEST_RUST).exists()
    if stack == "node":
        return (base_path / MANIFEST_NODE).exists()
    if stack == "custom":
        return (base_path / TARGET_CUSTOM_JUST).exists() or (base_path / TARGET_CUSTOM_MAKE).exists()
    return True
