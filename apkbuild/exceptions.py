"""Custom exceptions for apkbuild."""

from __future__ import annotations

from typing import Optional


class ApkBuildError(Exception):
    """Base exception for all apkbuild errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ApkBuildError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        super().__init__(message, {"config_key": config_key})


class ResolutionError(ApkBuildError):
    """Raised when the SDK toolchain cannot be located."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        details = {"path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class FilesystemError(ApkBuildError):
    """Raised when creating, walking or removing build paths fails."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        details = {"path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class ToolExecutionError(ApkBuildError):
    """Raised when an external tool cannot be launched or exits non-zero."""

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        exit_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        self.command = command or []
        self.exit_code = exit_code
        self.cause = cause
        details = {
            "command": self.command,
            "exit_code": exit_code,
        }
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class PipelineStepError(ApkBuildError):
    """Raised when a pipeline step fails; wraps the underlying error."""

    def __init__(self, step_number: int, step_name: str, cause: Exception):
        self.step_number = step_number
        self.step_name = step_name
        self.cause = cause
        super().__init__(
            f"Step {step_number} ({step_name}) failed: {cause}",
            {
                "step_number": step_number,
                "step_name": step_name,
                "cause": str(cause),
            },
        )
