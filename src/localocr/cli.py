# src/localocr/cli.py
from __future__ import annotations

import argparse
import ast
import json
import logging
import re
import sys
from pathlib import Path
from queue import Queue
from typing import List, Optional

from tqdm import tqdm

from .config import DEFAULT_OCR_BACKEND, DEFAULT_RENDER_SCALE, PROGRESS_MODES, SUPPORTED_LANGUAGES, OCRConfig
from .logger import configure_logging, setup_logging
from .models import RunOutcome, RunState
from .ocr_backends import normalize_backend_alias
from .runner import BatchRunner
from .utils import collect_files

__all__ = ["run_pipeline", "main"]

logger = logging.getLogger("localocr")

# Helper

def _parse_backend_kwargs(val) -> dict:
    """
    Accept several syntaxes for --ocr-backend-kwargs:
      1) JSON (double quotes)                      {"oem":1,"psm":6}
      2) JSON wrapped in single quotes             '{"oem":1,"psm":6}'
      3) Python-literal dict with single quotes    {'oem': 1, 'psm': 6}
      4) key=value pairs separated by , or ;       oem=1;psm=6
    """
    if isinstance(val, dict):
        return dict(val)
    if not isinstance(val, str):
        return {}

    s = val.strip()
    if not s:
        return {}
    # Strip outer quotes like '"{...}"' or "'{...}'"
    if len(s) >= 2 and s[0] in ("'", '"') and s[-1] == s[0]:
        s = s[1:-1].strip()

    try:
        parsed = json.loads(s)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    try:
        lit = ast.literal_eval(s)
        if isinstance(lit, dict):
            return lit
    except (ValueError, SyntaxError):
        pass

    # Fallback: key=value pairs
    out: dict = {}
    for part in re.split(r"[;,]\s*", s):
        if not part:
            continue
        if "=" in part:
            k, v = part.split("=", 1)
        elif ":" in part:
            k, v = part.split(":", 1)
        else:
            continue

        k = k.strip().strip('"\'').lstrip("{[").rstrip("}]").strip().lower().replace("-", "_")
        v = v.strip().strip('"\'').lstrip("{[").rstrip("}]").rstrip(",").strip()

        low = v.lower()
        if low in ("true", "false"):
            v = (low == "true")
        elif re.fullmatch(r"-?\d+", v):
            v = int(v)
        elif re.fullmatch(r"-?\d+\.\d*", v):
            v = float(v)

        out[k] = v

    if out:
        return out

    raise SystemExit(f"Invalid --ocr-backend-kwargs. Could not parse: {val!r}")


class _ProgressBar:
    """Drives a tqdm percentage bar from RunState updates."""

    def __init__(self, enabled: bool):
        self.enabled = enabled
        self._bar: Optional[tqdm] = None

    def __call__(self, state: RunState) -> None:
        if not self.enabled:
            return
        if state.is_processing and self._bar is None:
            self._bar = tqdm(total=100, desc="Recognizing", unit="%", leave=False)
        if self._bar is None:
            return
        if state.current_file is not None:
            self._bar.set_postfix_str(f"file {state.current_file + 1}/{state.total_files}")
        self._bar.n = int(state.progress_percent)
        self._bar.refresh()
        if not state.is_processing:
            self._bar.close()
            self._bar = None


def run_pipeline(inputs: List[Path], config: OCRConfig, show_progress: bool = True) -> Optional[RunOutcome]:
    """
    Collect the inputs and run one batch (non-UI CLI).
    Returns None when no supported file was found.
    """
    logger.info("Starting localocr")
    logger.info("Language: %s | render scale: %s | progress mode: %s",
                config.language, config.render_scale, config.progress_mode)

    files = collect_files(inputs)
    if not files:
        logger.info("No supported files to process")
        return None

    runner = BatchRunner(config)
    return runner.run(files, on_update=_ProgressBar(show_progress))


# -------------------------------
# CLI parsing
# -------------------------------

def _build_run_parser(subparsers: argparse._SubParsersAction | argparse.ArgumentParser) -> argparse.ArgumentParser:
    """
    Build the 'run' parser. If 'subparsers' is the root parser,
    this also works for legacy (no-subcommand) mode.
    """
    if isinstance(subparsers, argparse.ArgumentParser):
        p = subparsers
    else:
        p = subparsers.add_parser("run", help="Run OCR over a batch of files")

    p.add_argument("inputs", nargs="+", type=Path, help="Files or directories (PDF, TIFF, PNG, JPEG)")
    p.add_argument("-o", "--output-path", type=Path, help="Write the combined report here instead of stdout")
    p.add_argument(
        "-l", "--language",
        default="eng",
        help=f"OCR language, one of {', '.join(SUPPORTED_LANGUAGES)} (default: eng)",
    )
    p.add_argument("-s", "--scale", type=float, default=DEFAULT_RENDER_SCALE, help="Render scale for PDF pages")
    p.add_argument(
        "--progress-mode",
        choices=PROGRESS_MODES,
        default="per_call",
        help="per_call restarts the indicator for each recognition, weighted spreads it over the whole batch",
    )
    p.add_argument("--pdf-engine", default="pymupdf", choices=["pymupdf"], help="Underlying engine for PDF rendering")
    p.add_argument("--ocr-backend", default=DEFAULT_OCR_BACKEND, help="Dotted path to an OCR backend class, or an alias")
    p.add_argument(
        "--ocr-backend-kwargs",
        type=str,
        default="{}",
        help='Backend init kwargs as JSON or key=value pairs, e.g. \'{"psm": 6}\' or psm=6;oem=1',
    )
    p.add_argument("--error-log-path", type=Path, help="Append per-file failures to this JSONL file")
    p.add_argument("--log-file", type=Path, help="Write the run log to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Print log messages to stderr")
    p.add_argument("--no-progress-bar", action="store_true", help="Disable progress bars")
    return p


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="localocr: batch OCR for PDF and image files")
    subparsers = parser.add_subparsers(dest="command")

    _build_run_parser(subparsers)
    subparsers.add_parser("languages", help="List the supported OCR languages")

    if argv is None:
        argv = sys.argv[1:]
    if argv and argv[0] not in {"run", "languages", "-h", "--help"}:
        # Legacy mode: bare file arguments are treated as 'run'
        legacy_parser = argparse.ArgumentParser(add_help=False)
        _build_run_parser(legacy_parser)
        try:
            args = legacy_parser.parse_args(argv)
            args.command = "run"
            return args
        except SystemExit:
            pass

    return parser.parse_args(argv)


# -------------------------------
# Entry points
# -------------------------------

def _run_from_cli(args: argparse.Namespace) -> int:
    log_queue: Queue = Queue(-1)
    configure_logging(log_queue)
    listener = setup_logging(
        log_queue,
        level=logging.INFO,
        file_path=args.log_file,
        console=args.verbose,
    )
    listener.start()

    try:
        backend_kwargs = _parse_backend_kwargs(args.ocr_backend_kwargs)
        cfg_dict = {
            "language": args.language,
            "render_scale": args.scale,
            "progress_mode": args.progress_mode,
            "pdf_engine": args.pdf_engine,
            "ocr_backend": normalize_backend_alias(args.ocr_backend),
            "ocr_backend_kwargs": backend_kwargs,
            "error_log_path": args.error_log_path,
            "show_progress_bar": not args.no_progress_bar,
        }
        try:
            config = OCRConfig.from_dict({k: v for k, v in cfg_dict.items() if v is not None})
        except ValueError as e:
            raise SystemExit(str(e))

        outcome = run_pipeline(args.inputs, config, show_progress=not args.no_progress_bar)
    finally:
        listener.stop()

    if outcome is None:
        print("No supported files found (PDF, TIFF, PNG and JPEG files are accepted).", file=sys.stderr)
        return 2
    if not outcome.ok:
        print(outcome.error, file=sys.stderr)
        return 1

    if args.output_path:
        args.output_path.parent.mkdir(parents=True, exist_ok=True)
        args.output_path.write_text(outcome.text, encoding="utf-8")
    else:
        sys.stdout.write(outcome.text)
    return 0


def _print_languages() -> int:
    for code, name in SUPPORTED_LANGUAGES.items():
        print(f"{code}\t{name}")
    return 0


def main(argv: Optional[List[str]] = None):
    args = _parse_args(argv)

    if args.command == "languages":
        sys.exit(_print_languages())

    if args.command == "run":
        sys.exit(_run_from_cli(args))

    print("Usage:\n  localocr run <file-or-dir>... [-l eng] [-o report.txt]\n  localocr languages")
    sys.exit(2)


if __name__ == "__main__":
    main()
