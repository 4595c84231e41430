"""
Toolchain Resolver - locates build tools and platform inside an Android SDK.

The newest build-tools and platform versions are chosen by byte-wise
lexicographic ordering of their directory names, so "30.0.1" beats "29.0.2"
but "9.0.0" also beats "30.0.1". Names are not parsed as versions.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from apkbuild.exceptions import ResolutionError

logger = logging.getLogger(__name__)

BUILD_TOOLS_DIR = "build-tools"
PLATFORMS_DIR = "platforms"
ANDROID_JAR = "android.jar"
AAPT_BIN = "aapt"
DX_BIN = "dx"
ZIPALIGN_BIN = "zipalign"


@dataclass(frozen=True)
class Toolchain:
    """Resolved SDK paths. Immutable once resolved."""

    sdk: str
    build_tools: str
    platform: str
    android_jar: str
    aapt: str
    dx: str

    @property
    def zipalign(self) -> str:
        """Path of the alignment tool shipped with the build tools."""
        return os.path.join(self.build_tools, ZIPALIGN_BIN)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sdk": self.sdk,
            "build_tools": self.build_tools,
            "platform": self.platform,
            "android_jar": self.android_jar,
            "aapt": self.aapt,
            "dx": self.dx,
            "zipalign": self.zipalign,
        }


def newest_entry(directory: str, label: str) -> str:
    """
    Return the absolute path of the lexicographically last subdirectory.

    Args:
        directory: Directory whose immediate subdirectories are versions.
        label: Human-readable name used in error messages.

    Raises:
        ResolutionError: If the directory cannot be listed or has no subdirectories.
    """
    try:
        with os.scandir(directory) as entries:
            names = [entry.name for entry in entries if entry.is_dir()]
    except OSError as e:
        raise ResolutionError(
            f"Could not list {label} under '{directory}': {e}",
            path=directory,
            cause=e,
        ) from e

    if not names:
        raise ResolutionError(f"No {label} found under '{directory}'", path=directory)

    newest = max(names, key=os.fsencode)
    logger.debug(f"Selected {label} '{newest}' from {sorted(names, key=os.fsencode)}")
    return os.path.abspath(os.path.join(directory, newest))


def resolve(sdk_root: str) -> Toolchain:
    """
    Resolve the toolchain from an SDK root.

    Args:
        sdk_root: Root of an installed Android SDK.

    Returns:
        Fully populated Toolchain.

    Raises:
        ResolutionError: Naming the sub-step that failed and why.
    """
    try:
        sdk = os.path.abspath(os.path.expanduser(sdk_root))
    except (TypeError, ValueError) as e:
        raise ResolutionError(
            f"No valid directory has been found as the SDK root '{sdk_root}': {e}",
            path=str(sdk_root),
            cause=e,
        ) from e

    if not os.path.isdir(sdk):
        raise ResolutionError(f"SDK root '{sdk}' is not an existing directory", path=sdk)

    build_tools = newest_entry(os.path.join(sdk, BUILD_TOOLS_DIR), "build-tools")
    platform = newest_entry(os.path.join(sdk, PLATFORMS_DIR), "platforms")

    toolchain = Toolchain(
        sdk=sdk,
        build_tools=build_tools,
        platform=platform,
        android_jar=os.path.join(platform, ANDROID_JAR),
        aapt=os.path.join(build_tools, AAPT_BIN),
        dx=os.path.join(build_tools, DX_BIN),
    )
    logger.info(f"Using build-tools {build_tools}")
    logger.info(f"Using platform {platform}")
    return toolchain
