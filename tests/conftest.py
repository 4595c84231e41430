"""Pytest fixtures for apkbuild tests."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional

import pytest

from apkbuild.config import BuildConfig
from apkbuild.exceptions import ToolExecutionError
from apkbuild.runner import CommandResult
from apkbuild.toolchain import Toolchain, resolve


class RecordingRunner:
    """
    Stand-in for ToolRunner that records commands and fakes tool outputs.

    Each tool writes the file its real counterpart would produce, so the
    pipeline can be driven end to end without an SDK or JDK installed.
    """

    def __init__(self, fail_on: Optional[str] = None, exit_code: int = 1) -> None:
        self.fail_on = fail_on
        self.exit_code = exit_code
        self.commands: list[list[str]] = []
        self.cwds: list[Optional[str]] = []
        self.redacted: list[list[str]] = []

    @property
    def programs(self) -> list[str]:
        return [os.path.basename(cmd[0]) for cmd in self.commands]

    def run(self, command: list[str], cwd: Optional[str] = None, redact=()) -> CommandResult:
        command = [str(arg) for arg in command]
        self.commands.append(command)
        self.cwds.append(cwd)
        self.redacted.append(list(redact))

        program = os.path.basename(command[0])
        if program == self.fail_on:
            raise ToolExecutionError(
                f"Error when running command {program}: exit status {self.exit_code}",
                command=command,
                exit_code=self.exit_code,
            )

        handler = getattr(self, f"_fake_{program}", None)
        if handler:
            handler(command, cwd)
        return CommandResult(command=command, exit_code=0, duration=0.0)

    @staticmethod
    def _option(command: list[str], flag: str) -> str:
        return command[command.index(flag) + 1]

    def _fake_aapt(self, command: list[str], cwd: Optional[str]) -> None:
        if command[1] == "add":
            archive, dex = command[2], command[3]
            assert os.path.exists(os.path.join(cwd, archive))
            assert os.path.exists(os.path.join(cwd, dex))
        elif "-J" in command:
            package_dir = Path(self._option(command, "-J")) / "com" / "example"
            package_dir.mkdir(parents=True, exist_ok=True)
            (package_dir / "R.java").write_text("package com.example; public final class R {}\n")
        elif "-F" in command:
            Path(self._option(command, "-F")).write_bytes(b"PK\x05\x06" + b"\x00" * 18)

    def _fake_javac(self, command: list[str], cwd: Optional[str]) -> None:
        out = Path(self._option(command, "-d"))
        (out / "MainActivity.class").write_bytes(b"\xca\xfe\xba\xbe")

    def _fake_dx(self, command: list[str], cwd: Optional[str]) -> None:
        Path(self._option(command, "--output")).write_bytes(b"dex\n035\x00")

    def _fake_zipalign(self, command: list[str], cwd: Optional[str]) -> None:
        shutil.copyfile(command[-2], command[-1])


def make_sdk(root: Path, build_tools: tuple = ("30.0.1",), platforms: tuple = ("android-28",)) -> Path:
    """Create an SDK skeleton with the given version directories."""
    for version in build_tools:
        version_dir = root / "build-tools" / version
        version_dir.mkdir(parents=True)
        for tool in ("aapt", "dx", "zipalign"):
            (version_dir / tool).touch()
    (root / "build-tools").mkdir(parents=True, exist_ok=True)
    for version in platforms:
        platform_dir = root / "platforms" / version
        platform_dir.mkdir(parents=True)
        (platform_dir / "android.jar").touch()
    (root / "platforms").mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def sdk_root(tmp_path: Path) -> Path:
    """An SDK with one build-tools and one platform version."""
    return make_sdk(tmp_path / "sdk")


@pytest.fixture
def toolchain(sdk_root: Path) -> Toolchain:
    return resolve(str(sdk_root))


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """A minimal app source tree: manifest, resources and Java sources."""
    app = tmp_path / "app"
    (app / "xml" / "values").mkdir(parents=True)
    (app / "xml" / "values" / "strings.xml").write_text("<resources/>\n")
    (app / "java" / "com" / "example").mkdir(parents=True)
    (app / "java" / "com" / "example" / "MainActivity.java").write_text(
        "package com.example; public class MainActivity {}\n"
    )
    (app / "AndroidManifest.xml").write_text('<manifest package="com.example"/>\n')
    return app


@pytest.fixture
def build_config(app_dir: Path, tmp_path: Path) -> BuildConfig:
    return BuildConfig(
        manifest=app_dir / "AndroidManifest.xml",
        resources=app_dir / "xml",
        java_sources=app_dir / "java",
        output_dir=tmp_path / "out",
        keystore=tmp_path / "debug.keystore",
    )


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()
