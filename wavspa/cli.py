#!/usr/bin/env python3
"""wavspa spectrogram renderer CLI entrypoint (package module)."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Set, Tuple

from wavspa.dsp.windowing import WINDOW_NAMES
from wavspa.errors import ConfigError, WavspaError
from wavspa.io.presets import get_preset, serialize_presets
from wavspa.render.config import ENGINES, RenderConfig
from wavspa.render.driver import render_file
from wavspa.util.exit_codes import ExitCode
from wavspa.util.logging import configure_logging, get_logger, log_exception

logger = get_logger(__name__)

_ERROR_TYPES = {
    ExitCode.INVALID_CONFIG: "config",
    ExitCode.UNSUPPORTED_INPUT: "input",
    ExitCode.IO_ERROR: "io",
    ExitCode.ENGINE_ERROR: "engine",
}


def run(args: argparse.Namespace) -> int:
    """Top-level CLI dispatcher that delegates rendering to render.driver."""
    if getattr(args, "list_presets", False):
        _emit_presets_json(getattr(args, "engine", None))
        return ExitCode.SUCCESS
    config = config_from_args(args)
    logger.info("using %s preset '%s'", args.engine, args.preset)
    render_file(config, args.input, args.output)
    return ExitCode.SUCCESS


def _parse_range(text: str) -> Tuple[float, float]:
    try:
        lo_text, hi_text = str(text).split(":", 1)
        return float(lo_text), float(hi_text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LO:HI in Hz, got '{text}'")


def _add_logging_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-block progress (same as --log-level DEBUG)")
    p.add_argument("--log-level", dest="log_level", type=str, help="Log level: DEBUG, INFO, WARNING, ERROR (default WARNING)")
    p.add_argument("--log-json", dest="log_json", type=str, help="Also append JSON-lines log records to this path")


def _add_render_options(p: argparse.ArgumentParser, engine: str) -> None:
    p.add_argument("input", type=str, help="Mono WAV (or other libsndfile-readable) input file")
    p.add_argument("-o", "--output", type=str, help="Output PNG path (default: input with .png suffix)")
    p.add_argument("--preset", type=str, help="Preset name to pre-load defaults (see --list-presets; default 'default')")
    p.add_argument("--unit-time", dest="unit_time", type=int, help="Block duration in milliseconds (one image column per block)")
    if engine == "fft":
        p.add_argument("--fft-size", dest="fft_size", type=int, help="FFT size in samples")
        p.add_argument("--window", dest="window_function", choices=list(WINDOW_NAMES), help="Window function (default flat_top)")
    else:
        p.add_argument("--sigma", type=float, help="Gabor wavelet sigma (default 24)")
    p.add_argument("--width", dest="output_width", type=int, help="Frequency positions per column (image height without margin)")
    p.add_argument("--range", dest="freq_range", type=_parse_range, help="Frequency range in Hz as LO:HI (e.g. 200:8000)")
    p.add_argument("--scale", dest="scale_mode", choices=["log", "linear"], help="Frequency axis scale (default log)")
    p.add_argument("--mode", dest="transform_mode", choices=["power", "amplitude"], help="Magnitude kind to render (default power)")
    p.add_argument(
        "--quantize",
        dest="quantization",
        choices=["clamp", "luminance"],
        help="Brightness policy (default: luminance for power, clamp for amplitude)",
    )
    p.add_argument("--ceil", type=float, help="Level rendered at full brightness under clamp (default -10)")
    p.add_argument("--floor", type=float, help="Level rendered black under clamp (default -90)")
    p.add_argument("--luminance", type=float, help="Brightness multiplier under luminance scaling (default 3.5)")
    p.add_argument("--column-step", dest="column_step", type=int, help="Pixel columns per block (default 1)")
    p.add_argument("--freq-grid", dest="draw_freq_grid", action="store_true", help="Draw labelled frequency gridlines in a left margin")
    p.add_argument("--time-grid", dest="draw_time_grid", action="store_true", help="Draw labelled time gridlines in a bottom margin")
    p.add_argument("--basis-freq", dest="basis_freq", type=float, help="Frequency the gridlines are anchored on (default 440)")
    p.add_argument(
        "--grid-step",
        dest="grid_step",
        type=float,
        help="Gridline spacing: ratio for log scale (default 2), Hz for linear scale (default 2000)",
    )
    _add_logging_options(p)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        prog="wavspa",
        description="Render a mono PCM recording as an FFT or wavelet spectrogram PNG",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument("--list-presets", dest="list_presets", action="store_true", help="Print built-in presets as JSON and exit")
    _add_logging_options(p)
    sub = p.add_subparsers(dest="engine", metavar="{" + ",".join(ENGINES) + "}")
    for engine in ENGINES:
        sp = sub.add_parser(
            engine,
            help=f"Render with the {engine} engine",
            argument_default=argparse.SUPPRESS,
        )
        _add_render_options(sp, engine)

    args = p.parse_args(argv)
    args._cli_overrides = set()

    _set_default(args, args._cli_overrides, "list_presets", False)
    _set_default(args, args._cli_overrides, "verbose", False)
    _set_default(args, args._cli_overrides, "log_level", None)
    _set_default(args, args._cli_overrides, "log_json", None)

    if args.list_presets:
        delattr(args, "_cli_overrides")
        return args
    if not getattr(args, "engine", None):
        p.error("an engine (fft or wavelet) is required unless --list-presets is used")

    _set_default(args, args._cli_overrides, "output", None)
    _set_default(args, args._cli_overrides, "preset", "default")
    _set_default(args, args._cli_overrides, "quantization", None)
    _set_default(args, args._cli_overrides, "draw_freq_grid", False)
    _set_default(args, args._cli_overrides, "draw_time_grid", False)
    _set_default(args, args._cli_overrides, "basis_freq", None)
    _set_default(args, args._cli_overrides, "grid_step", None)
    for attr in (
        "unit_time",
        "fft_size",
        "window_function",
        "sigma",
        "output_width",
        "freq_range",
        "scale_mode",
        "transform_mode",
        "ceil",
        "floor",
        "luminance",
        "column_step",
    ):
        if hasattr(args, attr):
            args._cli_overrides.add(attr)

    _apply_preset(args, p)

    if args.output is None:
        args.output = str(Path(args.input).with_suffix(".png"))

    delattr(args, "_cli_overrides")
    return args


def _set_default(args: argparse.Namespace, overrides: Set[str], attr: str, value: Any) -> None:
    if hasattr(args, attr):
        overrides.add(attr)
    else:
        setattr(args, attr, value)


_PRESET_FIELDS = {
    "fft": ("unit_time", "output_width", "scale_mode", "transform_mode", "ceil", "floor", "luminance", "column_step", "fft_size", "window_function"),
    "wavelet": ("unit_time", "output_width", "scale_mode", "transform_mode", "ceil", "floor", "luminance", "column_step", "sigma"),
}


def _apply_preset(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    try:
        preset = get_preset(args.engine, args.preset)
    except ConfigError as exc:
        parser.error(f"{exc}. Use --list-presets to inspect options.")
    base = RenderConfig.from_preset(preset).as_dict()

    overrides: Set[str] = getattr(args, "_cli_overrides", set())

    def maybe_set(attr: str, value: Any) -> None:
        if value is None:
            return
        if attr in overrides:
            return
        setattr(args, attr, value)

    maybe_set("freq_range", tuple(base["freq_range"]))
    for attr in _PRESET_FIELDS[args.engine]:
        maybe_set(attr, base[attr])


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Translate parsed CLI arguments into a validated RenderConfig."""
    fields = {
        "engine": args.engine,
        "unit_time": args.unit_time,
        "output_width": args.output_width,
        "freq_range": args.freq_range,
        "scale_mode": args.scale_mode,
        "transform_mode": args.transform_mode,
        "ceil": args.ceil,
        "floor": args.floor,
        "luminance": args.luminance,
        "quantization": args.quantization,
        "column_step": args.column_step,
        "basis_freq": args.basis_freq,
        "grid_step": args.grid_step,
        "draw_freq_grid": args.draw_freq_grid,
        "draw_time_grid": args.draw_time_grid,
    }
    if args.engine == "fft":
        fields["fft_size"] = args.fft_size
        fields["window_function"] = args.window_function
    else:
        fields["sigma"] = args.sigma
    return RenderConfig(**fields).validate()


def _emit_presets_json(engine: Optional[str] = None) -> None:
    payload = serialize_presets(engine)
    print(json.dumps(payload, indent=2, sort_keys=True))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level, json_file=args.log_json, verbose=args.verbose)

    try:
        code = run(args)
    except WavspaError as exc:
        code = exc.exit_code
        log_exception(
            logger,
            f"{ExitCode.message(code)}: {exc}",
            error_type=_ERROR_TYPES.get(code, "general"),
            input=getattr(args, "input", None),
            output=getattr(args, "output", None),
        )
    except KeyboardInterrupt:
        logger.warning("interrupted")
        code = ExitCode.GENERAL_ERROR
    return int(code)


if __name__ == "__main__":
    sys.exit(main())
