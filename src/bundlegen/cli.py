"""Command line interface for bundlegen."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .api import (
    PackOptions,
    diff_containers,
    extract_platform,
    inspect_container,
    pack_content,
    plan_groups,
    validate_bundle,
)
from .collaborators import CommandBuildCollaborator
from .config import BuildConfig, load_config
from .errors import BundleError, config_error
from .logging import configure_logging, step
from .platforms import Platform, resolve_settings
from .reporting import get_reporter, make_reporter, set_reporter, set_verbosity


def _resolve_build_config(args: argparse.Namespace) -> BuildConfig:
    if args.config is not None:
        cfg = load_config(args.config)
    else:
        if args.content_root is None:
            raise config_error("Either a config file or --content-root is required")
        cfg = BuildConfig(
            content_root=args.content_root,
            output_dir=args.output or Path("Build"),
        )
    # Flags override config values.
    if args.content_root is not None:
        cfg.content_root = args.content_root
    if args.output is not None:
        cfg.output_dir = args.output
    if args.staging is not None:
        cfg.staging_dir = args.staging
    if args.command:
        cfg.build_command = list(args.command)
    if args.exclude:
        cfg.exclude = list(args.exclude)
    if args.keep_staging:
        cfg.keep_staging = True
    if not cfg.build_command:
        raise config_error("No build command configured (use --command or build_command)")
    return cfg


def _build_cmd(args: argparse.Namespace) -> int:
    cfg = _resolve_build_config(args)
    collaborator = CommandBuildCollaborator(
        cfg.build_command, timeout=cfg.build_timeout
    )
    result = pack_content(
        PackOptions(
            content_root=cfg.content_root,
            output_dir=cfg.output_dir,
            staging_root=cfg.staging_root,
            exclude=cfg.exclude,
            keep_staging=cfg.keep_staging,
            manifest_path=args.emit_manifest,
            platform_settings=cfg.platforms,
        ),
        collaborator,
    )
    for path in result.containers:
        step(f"{path.name}: {result.bytes_written.get(path.stem, 0)} bytes")
    return 0


def _plan_cmd(args: argparse.Namespace) -> int:
    groups = plan_groups(args.content_root, exclude=args.exclude or ())
    if args.json:
        print(
            json.dumps(
                {
                    "groups": [g.to_manifest() for g in groups],
                    "platforms": {
                        p.value: resolve_settings(p).to_dict() for p in Platform
                    },
                },
                indent=2,
                sort_keys=True,
            )
        )
        return 0
    for g in groups:
        step(f"{g.bundle_name}: {len(g.entries)} assets")
    return 0


def _inspect_cmd(args: argparse.Namespace) -> int:
    info = inspect_container(args.bundle)
    if args.json:
        print(json.dumps(info, indent=2, sort_keys=True))
        return 0
    rep = get_reporter()
    rep.heading(f"Container {args.bundle.name}")
    rep.summary(
        "container",
        file_size=info["file_size"],
        magic_ok=info["magic_ok"],
        version=info["version"],
    )
    for e in info["index"]:
        step(f"{e['platform']}: offset={e['offset']} length={e['length']}")
    return 0


def _validate_cmd(args: argparse.Namespace) -> int:
    issues = validate_bundle(args.bundle)
    rep = get_reporter()
    for issue in issues:
        rep.fail(f"{args.bundle.name}: {issue}")
    if not issues:
        rep.info(f"{args.bundle.name}: ok")
    return 1 if issues else 0


def _extract_cmd(args: argparse.Namespace) -> int:
    platform = Platform.parse(args.platform)
    size = extract_platform(args.bundle, platform, args.output)
    step(f"extracted {platform.value} payload ({size} bytes) to {args.output}")
    return 0


def _diff_cmd(args: argparse.Namespace) -> int:
    result = diff_containers(args.left, args.right)
    count = result["summary"]["count"]
    get_reporter().summary(
        "diff", count=count, left=args.left.name, right=args.right.name
    )
    print(json.dumps(result, indent=2, sort_keys=True))
    return 1 if count else 0


def _platform_arg(text: str) -> str:
    try:
        return Platform.parse(text).value
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bundlegen", description="Multi-platform bundle packer"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show debug output; repeat for more",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Output style: plain lines, rich progress bars, json events or nothing",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Build one multi-platform bundle per group")
    b.add_argument("-c", "--config", type=Path, help="YAML or JSON config file")
    b.add_argument("--content-root", dest="content_root", type=Path)
    b.add_argument("-o", "--output", type=Path, help="Output directory")
    b.add_argument("--staging", type=Path, help="Staging root for platform builds")
    b.add_argument(
        "--command",
        nargs=argparse.REMAINDER,
        help="Build command and arguments (must be last)",
    )
    b.add_argument(
        "--exclude", action="append", help="Glob of file names to skip (repeatable)"
    )
    b.add_argument(
        "--keep-staging",
        dest="keep_staging",
        action="store_true",
        help="Keep per-platform build output",
    )
    b.add_argument(
        "--emit-manifest",
        dest="emit_manifest",
        type=Path,
        help="Also write a JSON manifest of the containers to this path",
    )
    b.set_defaults(func=_build_cmd)

    pl = sub.add_parser("plan", help="Discover content groups (no build)")
    pl.add_argument("content_root", type=Path)
    pl.add_argument("--exclude", action="append")
    pl.add_argument("--json", action="store_true", help="Emit JSON manifests")
    pl.set_defaults(func=_plan_cmd)

    i = sub.add_parser("inspect", help="Show a bundle's header and index")
    i.add_argument("bundle", type=Path)
    i.add_argument("--json", action="store_true")
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Check a bundle's layout invariants")
    v.add_argument("bundle", type=Path)
    v.set_defaults(func=_validate_cmd)

    x = sub.add_parser("extract", help="Write one platform's payload to a file")
    x.add_argument("bundle", type=Path)
    x.add_argument("platform", type=_platform_arg)
    x.add_argument("output", type=Path)
    x.set_defaults(func=_extract_cmd)

    d = sub.add_parser("diff", help="Diff two bundles per platform")
    d.add_argument("left", type=Path)
    d.add_argument("right", type=Path)
    d.set_defaults(func=_diff_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    set_reporter(make_reporter(args.reporter, interactive=sys.stderr.isatty()))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    rep = get_reporter()
    try:
        return args.func(args)
    except BundleError as exc:
        context = " ".join(f"{k}={v}" for k, v in (exc.context or {}).items())
        rep.fail(f"{exc.code}: {exc.message}" + (f" [{context}]" if context else ""))
        return 2
    except OSError as exc:
        rep.fail(str(exc))
        return 2
    finally:
        rep.close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
