from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from .core.errors import ConfigurationError, ErrorKind, RecfmtError
from .core.values import FormatConfig
from .formats import get_format, list_formats
from .io import ReadJob, ReadSettings, build_output_config, validate_format
from .logging_ import setup_logging


def _pairs(values: list[str], flag: str) -> dict[str, str]:
    """Parse repeated ``name=value`` arguments into a dict."""
    out: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise SystemExit(f"{flag} expects name=value, got {item!r}")
        k, v = item.split("=", 1)
        out[k.strip()] = v
    return out


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("format", type=str, help="Format name (see `recfmt formats`).")
    p.add_argument(
        "-o",
        "--option",
        dest="options",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Format option; repeatable. Values may contain ${macro} placeholders.",
    )
    p.add_argument(
        "-a",
        "--arg",
        dest="arguments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Macro argument used to resolve ${KEY}; repeatable.",
    )
    p.add_argument(
        "--schema-file",
        type=str,
        default="",
        help="Read the 'schema' option from a JSON file.",
    )
    p.add_argument("--log-level", type=str, default="WARNING", help="Logging level.")


def _config(args: argparse.Namespace) -> FormatConfig:
    options: dict[str, Any] = _pairs(args.options, "-o")
    if args.schema_file:
        try:
            options["schema"] = Path(args.schema_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"cannot read schema file {args.schema_file}: {exc.strerror or exc}",
                kind=ErrorKind.INVALID_VALUE,
                format_name=args.format,
                option="schema",
            ) from exc
    cfg = FormatConfig.from_mapping(options)
    arguments = _pairs(args.arguments, "-a")
    return cfg.resolve(arguments) if arguments else cfg


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, sort_keys=False, default=str))


def _cmd_formats(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="formats", description="List formats and their options.")
    p.add_argument("--json", action="store_true", help="Print as JSON.")
    args = p.parse_args(argv)

    rows = []
    for d in list_formats():
        rows.append(
            {
                "name": d.name,
                "description": d.description,
                "readable": d.readable,
                "writable": d.writable,
                "options": {
                    o.name: {"type": o.type, "required": o.required, "description": o.description}
                    for o in d.options.values()
                },
            }
        )
    if args.json:
        _print_json(rows)
        return 0
    for r in rows:
        mode = "/".join(m for m, on in (("read", r["readable"]), ("write", r["writable"])) if on)
        print(f"{r['name']:<10} {mode:<11} {r['description']}")
        for name, spec in r["options"].items():
            req = " (required)" if spec["required"] else ""
            print(f"    {name:<24} {spec['type']:<8}{req}")
    return 0


def _cmd_validate(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="validate", description="Validate format options and schema.")
    _add_common(p)
    p.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unresolved macros instead of deferring validation.",
    )
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    status = validate_format(args.format, _config(args), require_resolved=args.strict)
    print(status.value)
    return 0


def _cmd_plan(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="plan", description="Print the combined splits as JSON.")
    _add_common(p)
    p.add_argument("path", type=str, help="Input directory or file.")
    p.add_argument("--max-split-size", type=int, default=0, help="Override max split bytes.")
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    job = ReadJob(args.format, _config(args), _settings(args))
    splits = job.plan(args.path)
    _print_json([s.to_json_obj() for s in splits])
    return 0


def _cmd_read(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="read", description="Print records as JSON lines.")
    _add_common(p)
    p.add_argument("path", type=str, help="Input directory or file.")
    p.add_argument("--max-split-size", type=int, default=0, help="Override max split bytes.")
    p.add_argument("--serial", action="store_true", help="Read splits on the calling thread.")
    p.add_argument(
        "--skip-bad-files",
        action="store_true",
        help="Skip the rest of a file on a malformed record instead of aborting.",
    )
    p.add_argument("--provenance", action="store_true", help="Include _path and _offset keys.")
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    job = ReadJob(args.format, _config(args), _settings(args))

    def emit(env) -> None:
        row = env.to_row()
        if args.provenance:
            row["_path"] = env.source_path
            row["_offset"] = env.source_offset
        sys.stdout.write(json.dumps(row, default=str) + "\n")

    summary = job.run(args.path, sink=emit)
    print(json.dumps(summary.to_dict()), file=sys.stderr)
    return 0


def _cmd_output_config(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="output-config", description="Print the flat writer configuration as JSON."
    )
    _add_common(p)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    _print_json(build_output_config(get_format(args.format), _config(args)))
    return 0


def _settings(args: argparse.Namespace) -> ReadSettings:
    s = ReadSettings.load()
    if getattr(args, "max_split_size", 0):
        s = replace(s, max_split_size=args.max_split_size)
    if getattr(args, "serial", False):
        s = replace(s, executor="serial")
    if getattr(args, "skip_bad_files", False):
        s = replace(s, on_decode_error="skip_file")
    return s.validate()


_COMMANDS = {
    "formats": _cmd_formats,
    "validate": _cmd_validate,
    "plan": _cmd_plan,
    "read": _cmd_read,
    "output-config": _cmd_output_config,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="recfmt", description="Multi-format record IO utilities.")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in _COMMANDS:
        sub.add_parser(name)
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    else:
        try:
            code = handler(rest)
        except RecfmtError as exc:
            print(f"[ERROR] {exc.kind.value}: {exc}", file=sys.stderr)
            code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
