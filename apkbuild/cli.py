#!/usr/bin/env python3
"""
apkbuild CLI - build an APK from an Android SDK and a source tree

Usage:
    apkbuild --sdk ~/android --manifest AndroidManifest.xml --xml res --java java
    python -m apkbuild --out build/
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from apkbuild import __version__
from apkbuild.config import SDK_ENV_VAR, BuildConfig
from apkbuild.exceptions import ApkBuildError, ConfigurationError
from apkbuild.pipeline import FINAL_APK, Pipeline
from apkbuild.toolchain import resolve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="apkbuild",
        description="Build an Android APK with aapt, javac, dx, jarsigner and zipalign.",
    )
    parser.add_argument(
        "--sdk",
        help=f"The location of the Android SDK to use in lieu of the environment variable ${SDK_ENV_VAR} (default)",
    )
    parser.add_argument(
        "--manifest",
        help="The location of the AndroidManifest.xml of the app to build (default: ./AndroidManifest.xml)",
    )
    parser.add_argument(
        "--xml",
        dest="resources",
        help="The parent folder of XML resource files, commonly 'res' (default: ./xml)",
    )
    parser.add_argument(
        "--java",
        dest="java_sources",
        help="The parent folder of the app's Java source files (default: ./java)",
    )
    parser.add_argument(
        "--out",
        dest="output_dir",
        help="The directory for temporary build artifacts and the final APK (default: current directory)",
    )
    parser.add_argument("--config", help="YAML file with build settings; flags take precedence")
    parser.add_argument("--keystore", help="Keystore used for signing (default: ~/.android/debug.keystore)")
    parser.add_argument("--storepass", help="Keystore password (default: android)")
    parser.add_argument("--key-alias", help="Key alias in the keystore (default: androiddebugkey)")
    parser.add_argument("--java-release", help="Java -source/-target level (default: 1.7)")
    parser.add_argument(
        "--show-toolchain",
        action="store_true",
        help="Print the resolved toolchain as JSON and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(args: argparse.Namespace) -> BuildConfig:
    """Combine environment, optional YAML file and flags into one config."""
    config = BuildConfig.from_env()
    if args.config:
        config = BuildConfig.from_yaml(args.config, base=config)

    return config.merged(
        sdk=args.sdk or None,
        manifest=args.manifest,
        resources=args.resources,
        java_sources=args.java_sources,
        output_dir=args.output_dir,
        keystore=args.keystore,
        storepass=args.storepass,
        key_alias=args.key_alias,
        java_release=args.java_release,
    )


def log_step_summary(pipeline: Pipeline) -> None:
    """Log one JSON line per step that ran."""
    for result in pipeline.results:
        logger.debug(json.dumps(result.to_dict()))


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    try:
        config = load_config(args)
        sdk = config.require_sdk()
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        if e.config_key == "sdk":
            parser.print_help(sys.stderr)
        return 1

    try:
        toolchain = resolve(sdk)
    except ApkBuildError as e:
        print(f"Could not ascertain toolchain due to error: {e}", file=sys.stderr)
        return 1

    if args.show_toolchain:
        print(json.dumps(toolchain.to_dict(), indent=2))
        return 0

    pipeline = Pipeline(toolchain, config)
    try:
        pipeline.run()
    except ApkBuildError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        log_step_summary(pipeline)

    print(pipeline.artifact(FINAL_APK))
    return 0


if __name__ == "__main__":
    sys.exit(main())
