from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from shiftmark.config.loader import AppConfig, ConfigError, load_config
from shiftmark.logging.init import setup_logging
from shiftmark.models.processing_result import Upload
from shiftmark.services.orchestrator import ProcessingError, process_all
from shiftmark.services.punch_index import MissingColumnsError

"""CLI entrypoint.

    shiftmark serve [--host H] [--port P] [--debug]
    shiftmark annotate --log LOG.xlsx --roster A.xlsx [--roster B.xlsx ...] [--out-dir DIR]

``annotate`` runs the same pipeline as ``POST /process`` but writes every
annotated roster (``updated_<name>``) to the output directory.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_MISSING_COLUMNS = 2


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env (if present) before config so PORT etc. can come from it."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    # サブコマンドの後ろでも --debug を受け付ける (未指定時は上位の値を上書きしない)
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--debug", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging")

    p = argparse.ArgumentParser(prog="shiftmark", description="Roster shift-code annotator")
    p.add_argument("--config", type=Path, default=None, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", parents=[common], help="Run the HTTP service")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    ann = sub.add_parser("annotate", parents=[common], help="Annotate roster files offline")
    ann.add_argument("--log", dest="log_path", type=Path, required=True, help="Attendance log report (.xlsx)")
    ann.add_argument(
        "--roster", dest="roster_paths", type=Path, action="append", required=True,
        help="Department roster (.xlsx); repeatable",
    )
    ann.add_argument("--out-dir", type=Path, default=Path("."), help="Output directory")
    return p.parse_args(argv)


def _serve(cfg: AppConfig, args: argparse.Namespace) -> int:
    from shiftmark.web.app import create_app

    if args.host:
        cfg = replace(cfg, host=args.host)
    if args.port:
        cfg = replace(cfg, port=args.port)
    app = create_app(cfg)
    app.run(host=cfg.host, port=cfg.port, debug=cfg.debug)
    return EXIT_SUCCESS


def _annotate(cfg: AppConfig, args: argparse.Namespace) -> int:
    logger = setup_logging()
    missing = [p for p in [args.log_path, *args.roster_paths] if not p.is_file()]
    if missing:
        logger.error(f"file not found: {', '.join(str(p) for p in missing)}")
        return EXIT_FATAL

    log_upload = Upload(filename=args.log_path.name, content=args.log_path.read_bytes())
    rosters = [Upload(filename=p.name, content=p.read_bytes()) for p in args.roster_paths]
    try:
        result = process_all(log_upload, rosters, cfg, show_progress=True)
    except MissingColumnsError:
        return EXIT_MISSING_COLUMNS
    except ProcessingError:
        return EXIT_FATAL

    args.out_dir.mkdir(parents=True, exist_ok=True)
    for f in result.files:
        out = args.out_dir / f.filename
        out.write_bytes(f.content)
        logger.info(f"written: {out}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストで main([...]) を直接呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)

    _load_env_file(Path(".env"))
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    if args.debug:
        cfg = replace(cfg, debug=True)
    elif cfg.debug:
        setup_logging(debug=True)
    if cfg.debug:
        logger.debug("debug mode enabled")

    if args.command == "serve":
        return _serve(cfg, args)
    return _annotate(cfg, args)

