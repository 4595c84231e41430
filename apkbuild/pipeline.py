"""
Pipeline Runner - assembles an APK from manifest, resources and Java sources.

Steps run strictly in order; the first failure stops the build. Nothing is
rolled back and partial artifacts stay in the output directory.

    aapt package -J  ->  javac  ->  dx  ->  aapt package -F  ->  aapt add
        ->  jarsigner  ->  zipalign  ->  clean up
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

from apkbuild.config import BuildConfig
from apkbuild.exceptions import ApkBuildError, FilesystemError, PipelineStepError
from apkbuild.files import find_java_sources, make_output_dirs, remove_paths
from apkbuild.runner import ToolRunner
from apkbuild.toolchain import Toolchain

logger = logging.getLogger(__name__)

GENERATED_SOURCES_DIR = "generated_java_sources"
BYTECODE_DIR = "java_virtual_machine_bytecode"
DEX_FILE = "classes.dex"
UNALIGNED_APK = "app.apk.unaligned"
FINAL_APK = "app.apk"

ALIGNMENT_BYTES = "4"


@dataclass
class StepResult:
    """Outcome of one pipeline step."""

    number: int
    name: str
    success: bool
    duration: float = 0.0
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "name": self.name,
            "success": self.success,
            "duration": self.duration,
            "message": self.message,
        }


class Pipeline:
    """Eight-step APK build against a resolved toolchain."""

    STEPS = [
        "generate resource bindings",
        "compile sources",
        "translate bytecode",
        "package resources",
        "inject bytecode",
        "sign",
        "align",
        "clean up",
    ]

    def __init__(
        self,
        toolchain: Toolchain,
        config: BuildConfig,
        runner: Optional[ToolRunner] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            toolchain: Resolved SDK toolchain.
            config: Build configuration; paths are made absolute here.
            runner: Command runner. A ToolRunner if None.
        """
        self.toolchain = toolchain
        self.config = config.normalized()
        self.runner = runner or ToolRunner()
        self.output_dir = str(self.config.output_dir)
        self.results: list[StepResult] = []

    def artifact(self, name: str) -> str:
        """Absolute path of a build artifact inside the output directory."""
        return os.path.join(self.output_dir, name)

    @property
    def temporary_dirs(self) -> list[str]:
        return [self.artifact(GENERATED_SOURCES_DIR), self.artifact(BYTECODE_DIR)]

    def _steps(self) -> list[Callable[[], None]]:
        return [
            self.generate_resource_bindings,
            self.compile_sources,
            self.translate_bytecode,
            self.package_resources,
            self.inject_bytecode,
            self.sign,
            self.align,
            self.clean_up,
        ]

    def run(self) -> list[StepResult]:
        """
        Run every step in order.

        Returns:
            One StepResult per step, all successful.

        Raises:
            ApkBuildError: If the output directories cannot be created.
            PipelineStepError: For the first step that fails.
        """
        self.results = []
        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Could not create output directory at '{self.output_dir}': {e}",
                path=self.output_dir,
                cause=e,
            ) from e
        make_output_dirs(*self.temporary_dirs)

        total = len(self.STEPS)
        for number, (name, step) in enumerate(zip(self.STEPS, self._steps()), 1):
            logger.info(f"[{number}/{total}] {name.capitalize()}")
            start = time.time()
            try:
                step()
            except ApkBuildError as e:
                self.results.append(
                    StepResult(number, name, False, time.time() - start, str(e))
                )
                raise PipelineStepError(number, name, e) from e
            self.results.append(StepResult(number, name, True, time.time() - start))

        logger.info(f"Built {self.artifact(FINAL_APK)}")
        return self.results

    # =========================================================================
    # Steps
    # =========================================================================

    def generate_resource_bindings(self) -> None:
        """Generate R.java from the manifest and resources."""
        self.runner.run([
            self.toolchain.aapt, "package",
            "-f",
            "-m",
            "-J", self.artifact(GENERATED_SOURCES_DIR),
            "-M", str(self.config.manifest),
            "-S", str(self.config.resources),
            "-I", self.toolchain.android_jar,
        ])

    def compile_sources(self) -> None:
        """Compile application and generated sources to class files."""
        generated = self.artifact(GENERATED_SOURCES_DIR)
        sources = find_java_sources(str(self.config.java_sources))
        sources += find_java_sources(generated)

        release = self.config.java_release
        self.runner.run([
            self.config.javac,
            "-classpath", self.toolchain.android_jar,
            "-sourcepath", os.pathsep.join([str(self.config.java_sources), generated]),
            "-d", self.artifact(BYTECODE_DIR),
            "-target", release,
            "-source", release,
            *sources,
        ])

    def translate_bytecode(self) -> None:
        """Translate class files into a single dex file."""
        self.runner.run([
            self.toolchain.dx,
            "--dex",
            "--output", self.artifact(DEX_FILE),
            self.artifact(BYTECODE_DIR),
        ])

    def package_resources(self) -> None:
        """Package manifest and resources into an unsigned archive."""
        self.runner.run([
            self.toolchain.aapt, "package",
            "-f",
            "-M", str(self.config.manifest),
            "-S", str(self.config.resources),
            "-I", self.toolchain.android_jar,
            "-F", self.artifact(UNALIGNED_APK),
        ])

    def inject_bytecode(self) -> None:
        """Add classes.dex to the archive root."""
        # aapt add stores the path as given, so run from the output directory
        self.runner.run(
            [self.toolchain.aapt, "add", UNALIGNED_APK, DEX_FILE],
            cwd=self.output_dir,
        )

    def sign(self) -> None:
        """Sign the archive with the debug keystore."""
        self.runner.run([
            self.config.jarsigner,
            "-keystore", str(self.config.keystore),
            "-storepass", self.config.storepass,
            self.artifact(UNALIGNED_APK),
            self.config.key_alias,
        ], redact=["-storepass"])

    def align(self) -> None:
        """Write the final aligned archive."""
        self.runner.run([
            self.toolchain.zipalign,
            "-f", ALIGNMENT_BYTES,
            self.artifact(UNALIGNED_APK),
            self.artifact(FINAL_APK),
        ])

    def clean_up(self) -> None:
        """Remove temporary directories and intermediate files."""
        remove_paths(
            *self.temporary_dirs,
            self.artifact(DEX_FILE),
            self.artifact(UNALIGNED_APK),
        )
