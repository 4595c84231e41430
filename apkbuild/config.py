"""Build configuration management."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from apkbuild.exceptions import ConfigurationError

SDK_ENV_VAR = "ANDROID_HOME"


def _absolute(path: Path) -> Path:
    return Path(os.path.abspath(path.expanduser()))


def _default_keystore() -> Path:
    # keytool -genkey -v -keystore debug.keystore -alias androiddebugkey -keyalg RSA -keysize 2048 -validity 10000
    return Path.home() / ".android" / "debug.keystore"


@dataclass
class BuildConfig:
    """Configuration for a single APK build."""

    # SDK root; None means "not provided anywhere"
    sdk: Optional[str] = None

    # Inputs
    manifest: Path = Path("AndroidManifest.xml")
    resources: Path = Path("xml")
    java_sources: Path = Path("java")

    # Output
    output_dir: Path = Path(".")

    # Signing
    keystore: Path = field(default_factory=_default_keystore)
    storepass: str = "android"
    key_alias: str = "androiddebugkey"

    # Compilation
    java_release: str = "1.7"
    javac: str = "javac"
    jarsigner: str = "jarsigner"

    def __post_init__(self) -> None:
        """Coerce fields given as plain YAML or CLI values."""
        for name in ("manifest", "resources", "java_sources", "output_dir", "keystore"):
            value = getattr(self, name)
            if isinstance(value, (int, float)):
                value = str(value)
            if not isinstance(value, Path):
                setattr(self, name, Path(value))
        for name in ("storepass", "key_alias", "java_release", "javac", "jarsigner"):
            setattr(self, name, str(getattr(self, name)))
        if self.sdk is not None:
            self.sdk = str(self.sdk)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> BuildConfig:
        """
        Load configuration from environment variables.

        A .env file is loaded first (the given one, or the nearest one found
        from the current directory). Variables already set in the process
        environment take precedence over the file.
        """
        if env_file is None:
            env_file = find_dotenv(usecwd=True)
        if env_file:
            load_dotenv(env_file)

        return cls(sdk=os.environ.get(SDK_ENV_VAR))

    @classmethod
    def from_yaml(cls, path: str | Path, base: Optional[BuildConfig] = None) -> BuildConfig:
        """Load configuration from a YAML mapping of field names to values."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read config file '{path}': {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file '{path}' must contain a mapping")

        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                raise ConfigurationError(
                    f"Unknown key '{key}' in config file '{path}'",
                    config_key=key,
                )
            # bool is an int subclass
            if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int, float))):
                raise ConfigurationError(
                    f"Value of '{key}' in config file '{path}' must be a string or number, "
                    f"not {type(value).__name__}",
                    config_key=key,
                )

        return (base or cls()).merged(**data)

    def merged(self, **overrides: Any) -> BuildConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def require_sdk(self) -> str:
        """Return the SDK location or raise if it was never provided."""
        if self.sdk is None:
            raise ConfigurationError(
                f"{SDK_ENV_VAR} must be set as an environment variable "
                "or the SDK location must be provided manually as a flag",
                config_key="sdk",
            )
        if self.sdk == "":
            raise ConfigurationError(
                f"{SDK_ENV_VAR} is set as an empty environment variable and must be non-empty, "
                "or the SDK location must be provided manually as a flag",
                config_key="sdk",
            )
        return self.sdk

    def normalized(self) -> BuildConfig:
        """Return a copy with every input and output path made absolute."""
        return replace(
            self,
            manifest=_absolute(self.manifest),
            resources=_absolute(self.resources),
            java_sources=_absolute(self.java_sources),
            output_dir=_absolute(self.output_dir),
            keystore=_absolute(self.keystore),
        )

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Path):
                data[key] = str(value)
        data.pop("storepass")
        return data
