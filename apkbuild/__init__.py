"""
apkbuild - Android APK build orchestrator

Resolves build tools and a platform inside an installed Android SDK and runs
aapt, javac, dx, jarsigner and zipalign in sequence to produce a signed,
aligned APK.
"""

__version__ = "0.1.0"

from apkbuild.config import BuildConfig
from apkbuild.exceptions import (
    ApkBuildError,
    ConfigurationError,
    FilesystemError,
    PipelineStepError,
    ResolutionError,
    ToolExecutionError,
)
from apkbuild.pipeline import Pipeline, StepResult
from apkbuild.runner import CommandResult, ToolRunner
from apkbuild.toolchain import Toolchain, resolve

__all__ = [
    "ApkBuildError",
    "BuildConfig",
    "CommandResult",
    "ConfigurationError",
    "FilesystemError",
    "Pipeline",
    "PipelineStepError",
    "ResolutionError",
    "StepResult",
    "ToolExecutionError",
    "ToolRunner",
    "Toolchain",
    "resolve",
]
