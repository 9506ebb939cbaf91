"""
Devflow Configuration

Loads ``devflow.toml`` and validates it with pydantic models.

Example devflow.toml:

    [project]
    name = "demo"
    stack = ["rust", "python"]

    [runtime]
    profile = "container"

    [container]
    image = "ghcr.io/acme/ci:latest"
    engine = "auto"

    [cache]
    root = ".cache/devflow"

    [extensions.lint-tools]
    source = "path"
    path = "./tools/devflow-ext-lint"
    capabilities = ["lint"]

    [targets]
    pr = ["fmt:check", "test:unit"]
    main = ["fmt:check", "test:unit", "test:integration"]
"""

import os
import sys
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from devflow.core.errors import ConfigError
from devflow.core.extensions.models import ExtensionSource
from devflow.core.infra.container_client import ContainerEngine

CONFIG_FILE = "devflow.toml"

# Only protocol version understood by this release
EXTENSION_API_VERSION = 1

IN_CONTAINER_ENV = "IS_CONTAINER"
CACHE_ROOT_ENV = "DWF_CACHE_ROOT"


class RuntimeProfile(str, Enum):
    """Where actions run"""
    CONTAINER = "container"
    HOST = "host"
    AUTO = "auto"


class ProjectConfig(BaseModel):
    name: str = Field(description="Project name")
    stack: List[str] = Field(default_factory=list, description="Declared stacks, in execution order")


class RuntimeConfig(BaseModel):
    profile: RuntimeProfile = Field(default=RuntimeProfile.AUTO)


class CacheConfig(BaseModel):
    root: Optional[str] = Field(default=None, description="Host cache root for container mounts")


class ContainerConfig(BaseModel):
    image: Optional[str] = Field(default=None, description="Container image for proxied runs")
    engine: ContainerEngine = Field(default=ContainerEngine.AUTO)


class ExtensionConfig(BaseModel):
    """Configuration for one named extension"""
    source: ExtensionSource
    path: Optional[str] = Field(default=None, description="Binary path for source = 'path'")
    version: Optional[str] = None
    api_version: int = Field(default=EXTENSION_API_VERSION)
    capabilities: List[str] = Field(default_factory=list)
    required: bool = False

    @field_validator("api_version")
    @classmethod
    def validate_api_version(cls, v: int) -> int:
        if v != EXTENSION_API_VERSION:
            raise ValueError(
                f"unsupported api_version={v} (expected {EXTENSION_API_VERSION})"
            )
        return v


class TargetsConfig(BaseModel):
    """Named target profiles, each a list of command strings"""
    profiles: Dict[str, List[str]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_profiles(cls, data: Any) -> Any:
        # [targets] in TOML is a flat table of profile name -> commands
        if isinstance(data, dict) and "profiles" not in data:
            return {"profiles": data}
        return data


class DevflowConfig(BaseModel):
    """Root of devflow.toml"""
    project: ProjectConfig
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    container: ContainerConfig = Field(default_factory=ContainerConfig)
    extensions: Dict[str, ExtensionConfig] = Field(default_factory=dict)
    targets: TargetsConfig = Field(default_factory=TargetsConfig)

    # Directory holding devflow.toml; stack markers are looked up here
    source_dir: Optional[Path] = None

    def base_dir(self) -> Path:
        return self.source_dir if self.source_dir is not None else Path(".")


def load_config(path: str = CONFIG_FILE) -> DevflowConfig:
    """
    Load and validate a devflow.toml file

    Args:
        path: Path to the config file

    Returns:
        DevflowConfig with source_dir set to the file's directory

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or fails validation
    """
    config_path = Path(path)
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"failed to read config file: {config_path}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse TOML config {config_path}: {e}")

    try:
        config = DevflowConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {config_path}: {e}")

    config.source_dir = config_path.parent
    return config


@dataclass
class RuntimeContext:
    """
    Process-level facts the executor needs

    Read once at the CLI edge so deeper layers never consult os.environ.
    """
    in_container: bool = False
    cache_root_override: Optional[str] = None
    cwd: Path = field(default_factory=Path.cwd)
    host_binary: Path = field(default_factory=lambda: Path(sys.argv[0]).resolve())

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "RuntimeContext":
        if environ is None:
            environ = os.environ
        return cls(
            in_container=environ.get(IN_CONTAINER_ENV) == "true",
            cache_root_override=environ.get(CACHE_ROOT_ENV) or None,
        )
