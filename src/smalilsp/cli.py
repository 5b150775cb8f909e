"""Command-line interface: ``smali-lsp check`` and ``smali-lsp serve``."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from smalilsp import __version__
from smalilsp.diagnostics import Diagnostic, Severity, sort_diagnostics
from smalilsp.errors import ConfigError, format_diagnostic

CONFIG_NAME = "smalilsp.toml"

_SEVERITY_NAMES = [s.name.lower() for s in Severity]
_LOG_LEVELS = ["debug", "info", "warning", "error"]


@dataclass(frozen=True, slots=True)
class CheckOptions:
    """Resolved options of ``smali-lsp check``."""

    files: list[Path]
    rules: list[str] | None
    min_severity: Severity
    tokens: bool


@dataclass(frozen=True, slots=True)
class ServeOptions:
    """Resolved options of ``smali-lsp serve``."""

    rules: list[str] | None
    min_severity: Severity
    tcp: tuple[str, int] | None
    log_level: str
    log_file: Path | None


def _add_validation_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--rules",
        type=parse_rules_arg,
        default=None,
        metavar="NAME[,NAME...]",
        help="Validation rules to run (default: all)",
    )
    p.add_argument(
        "--min-severity",
        choices=_SEVERITY_NAMES,
        default=None,
        help="Least severe diagnostic to report (default: hint)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="smali-lsp",
        description="Smali validator and language server",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate files and print diagnostics")
    check.add_argument("files", nargs="+", metavar="FILE", help="Input .smali files")
    _add_validation_args(check)
    check.add_argument("--tokens", action="store_true", help="Dump the token stream to stderr")

    serve = sub.add_parser("serve", help="Run the language server")
    _add_validation_args(serve)
    serve.add_argument("--tcp", action="store_true", help="Serve over TCP instead of stdio")
    serve.add_argument("--host", default="127.0.0.1", help="TCP host (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=2087, help="TCP port (default: 2087)")
    serve.add_argument("--log-level", choices=_LOG_LEVELS, default=None, help="Log level")
    serve.add_argument("--log-file", metavar="FILE", help="Log to FILE instead of stderr")
    return p


def parse_rules_arg(s: str) -> list[str]:
    """Parse a comma-separated rule list."""
    rules = [name.strip() for name in s.split(",") if name.strip()]
    if not rules:
        raise argparse.ArgumentTypeError(f"invalid rule list: {s!r}")
    return rules


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{path}: {exc}") from exc


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    section = config.get(name)
    return section if isinstance(section, dict) else {}


def _resolve_rules(cfg_rules: Any, cli_rules: list[str] | None) -> list[str] | None:
    from smalilsp.engine import RULES

    rules = cli_rules
    if rules is None and isinstance(cfg_rules, list):
        rules = [str(r) for r in cfg_rules]
    if rules is not None:
        unknown = [r for r in rules if r not in RULES]
        if unknown:
            raise ConfigError(f"unknown rule(s): {', '.join(unknown)}")
    return rules


def _resolve_severity(cfg_value: Any, cli_value: str | None) -> Severity:
    name = cli_value if cli_value is not None else cfg_value
    if name is None:
        return Severity.HINT
    try:
        return Severity.from_name(str(name))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def resolve_check_options(args: argparse.Namespace) -> CheckOptions:
    """Merge config file and CLI args for ``check``.

    Precedence: config file < CLI flags.
    """
    config_path = Path(args.config) if args.config else None
    validation = _section(load_config(config_path, Path(".")), "validation")

    return CheckOptions(
        files=[Path(f) for f in args.files],
        rules=_resolve_rules(validation.get("rules"), args.rules),
        min_severity=_resolve_severity(validation.get("min-severity"), args.min_severity),
        tokens=args.tokens,
    )


def resolve_serve_options(args: argparse.Namespace) -> ServeOptions:
    """Merge config file and CLI args for ``serve``."""
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, Path("."))
    validation = _section(config, "validation")
    server_cfg = _section(config, "server")

    log_level = args.log_level or str(server_cfg.get("log-level", "info")).lower()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"invalid log level: {log_level!r}")

    log_file = args.log_file or server_cfg.get("log-file")

    return ServeOptions(
        rules=_resolve_rules(validation.get("rules"), args.rules),
        min_severity=_resolve_severity(validation.get("min-severity"), args.min_severity),
        tcp=(args.host, args.port) if args.tcp else None,
        log_level=log_level,
        log_file=Path(log_file) if log_file else None,
    )


def check_source(source: str, options: CheckOptions) -> list[Diagnostic]:
    """Validate *source*, keep diagnostics at or above the threshold, in source order."""
    from smalilsp.engine import validate

    found = validate(source, options.rules)
    return sort_diagnostics([d for d in found if d.severity <= options.min_severity])


def check_files(options: CheckOptions) -> int:
    """Validate every input file. Returns exit code 0, 1 (errors found) or 2 (unreadable)."""
    from smalilsp.debug import dump_tokens
    from smalilsp.lexer import tokenize

    status = 0
    for path in options.files:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"error: cannot read {path}: {exc}", file=sys.stderr)
            status = 2
            continue

        if options.tokens:
            dump_tokens(tokenize(source), file=sys.stderr)

        diagnostics = check_source(source, options)
        for diagnostic in diagnostics:
            print(format_diagnostic(diagnostic, source, str(path)), file=sys.stderr)

        errors = sum(1 for d in diagnostics if d.severity is Severity.ERROR)
        print(f"{path}: {errors} error(s), {len(diagnostics)} diagnostic(s)", file=sys.stderr)
        if errors and status == 0:
            status = 1

    return status


def configure_logging(level: str, log_file: Path | None = None) -> None:
    """Send logs to *log_file* or stderr; stdout is reserved for the protocol."""
    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[handler],
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "check":
            check_options = resolve_check_options(args)
        else:
            serve_options = resolve_serve_options(args)
    except ConfigError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 2

    if args.command == "check":
        return check_files(check_options)

    from smalilsp.lsp import start

    configure_logging(serve_options.log_level, serve_options.log_file)
    start(serve_options.rules, serve_options.min_severity, serve_options.tcp)
    return 0
