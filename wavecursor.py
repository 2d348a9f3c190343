import argparse
import logging
import math
import os
import sys

try:
    from rich.console import Console
    from rich.table import Table
    from rich.text import Text
    from rich import box
except ImportError:
    print("Error: The 'rich' library is required for the CLI but not installed.", file=sys.stderr)
    print("Please install it with: pip install wavecursor[cli]", file=sys.stderr)
    sys.exit(1)

import soundfile as sf

from wavecursorlib import __version__
from wavecursorlib.audio import (
    RAW_EXTENSIONS, decode_file, decode_raw_pcm, format_duration, linear_to_db,
)
from wavecursorlib.config import (
    ConfigError, default_config, load_preset, merge_configs, validate_config,
)
from wavecursorlib.envelope import build_envelope
from wavecursorlib.models import InvalidFormat
from wavecursorlib.position import frames_to_ms, to_pixel
from wavecursorlib.render import Band, CursorLine, Segment, describe

console = Console()


def positive_int(value):
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return ivalue


def parse_arguments():
    parser = argparse.ArgumentParser(
        description="Print the min/max waveform envelope of an audio file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--version", action="version",
                        version=f"wavecursor {__version__}")
    parser.add_argument("file", type=str, help="Audio file to render")

    parser.add_argument("--width", type=positive_int, default=None,
                        help="Columns (defaults to the terminal width)")
    parser.add_argument("--height", type=positive_int, default=8,
                        help="Rows per channel")
    parser.add_argument("--zoom", type=float, default=None,
                        help="Zoom factor (>= 1, 1 fits the whole file)")
    parser.add_argument("--position", type=int, default=0,
                        help="Playback cursor position in frames")

    parser.add_argument("--raw", action="store_true",
                        help="Treat the file as headerless PCM")
    parser.add_argument("--channels", type=positive_int, default=None,
                        help="Channel count for --raw")
    parser.add_argument("--rate", type=positive_int, default=None,
                        help="Sample rate (Hz) for --raw")
    parser.add_argument("--dtype", type=str, default=None,
                        help="numpy sample format for --raw, e.g. '<i2'")

    parser.add_argument("--preset", type=str, default=None,
                        help="JSON preset overriding the built-in defaults")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args()


def build_config(args):
    config = default_config()
    if args.preset:
        config = merge_configs(config, load_preset(args.preset))
    overrides = {
        "zoom_factor": args.zoom,
        "raw_channels": args.channels,
        "raw_sample_rate": args.rate,
        "raw_dtype": args.dtype,
    }
    config = merge_configs(config, {k: v for k, v in overrides.items() if v is not None})
    validate_config(config)
    return config


# ---------------------------------------------------------------------------
# Rich console rendering (CLI-only, not in the library)
# ---------------------------------------------------------------------------

def rasterize(prims, width, height):
    """Turn draw primitives into rows of characters (one cell per pixel)."""
    grid = [[" "] * width for _ in range(height)]
    styles = [[None] * width for _ in range(height)]
    for prim in prims:
        if isinstance(prim, Band):
            mid = min(int(prim.center), height - 1)
            for x in range(width):
                grid[mid][x] = "·"
                styles[mid][x] = "dim"
        elif isinstance(prim, Segment):
            top = min(int(math.floor(prim.y1)), height - 1)
            bottom = max(int(math.ceil(prim.y2)) - 1, top)
            color = ("green", "cyan", "magenta", "yellow")[prim.channel % 4]
            for y in range(top, min(bottom, height - 1) + 1):
                grid[y][prim.x1] = "█"
                styles[y][prim.x1] = color
        elif isinstance(prim, CursorLine):
            if 0 <= prim.x < width:
                for y in range(height):
                    if grid[y][prim.x] == "█":
                        styles[y][prim.x] = "bold red"
                    else:
                        grid[y][prim.x] = "│"
                        styles[y][prim.x] = "red"
    lines = []
    for row, row_styles in zip(grid, styles):
        text = Text()
        for ch, style in zip(row, row_styles):
            text.append(ch, style=style)
        lines.append(text)
    return lines


def print_summary(path, buffer, envelope, position, cursor_px):
    table = Table(title=os.path.basename(path), box=box.SIMPLE_HEAVY)
    table.add_column("Property", style="bold")
    table.add_column("Value")
    table.add_row("Channels", str(buffer.channel_count))
    table.add_row("Sample rate", f"{buffer.sample_rate} Hz")
    table.add_row("Frames", str(buffer.frame_count))
    table.add_row("Duration", format_duration(buffer.frame_count, buffer.sample_rate))
    table.add_row("Columns", str(envelope.pixel_width))
    table.add_row("Zoom", f"{envelope.zoom_factor:g}x")
    table.add_row("Frames / column", str(envelope.samples_per_pixel))
    table.add_row("Cursor",
                  f"frame {position} ({frames_to_ms(position, buffer.sample_rate)} ms), "
                  f"column {cursor_px}")
    for ch in range(buffer.channel_count):
        data = buffer.channel(ch)
        peak = float(abs(data).max()) if data.size else 0.0
        table.add_row(f"Peak ch{ch + 1}", f"{linear_to_db(peak):.1f} dBFS (normalized)")
    console.print(table)


def main():
    args = parse_arguments()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if not os.path.isfile(args.file):
        console.print(f"[bold red]Error:[/] File '{args.file}' not found.")
        return 1

    try:
        config = build_config(args)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    raw = args.raw or os.path.splitext(args.file)[1].lower() in RAW_EXTENSIONS
    try:
        if raw:
            buffer = decode_raw_pcm(args.file, config["raw_channels"],
                                    config["raw_sample_rate"], config["raw_dtype"])
        else:
            buffer = decode_file(args.file)
    except InvalidFormat as e:
        console.print(f"[bold red]Invalid audio data:[/] {e}")
        return 1
    except (sf.LibsndfileError, OSError) as e:
        console.print(f"[bold red]Cannot decode '{args.file}':[/] {e}")
        return 1

    width = args.width or max(console.width - 2, 1)
    height = args.height * buffer.channel_count
    envelope = build_envelope(buffer, width, config["zoom_factor"])
    position = max(0, min(args.position, buffer.frame_count))
    cursor_px = to_pixel(position, buffer.frame_count, width)

    print_summary(args.file, buffer, envelope, position, cursor_px)
    if buffer.is_empty:
        console.print("[dim]No audio data.[/]")
        return 0

    prims = describe(envelope, cursor_px, height, buffer.channel_count)
    for line in rasterize(prims, width, height):
        console.print(line, no_wrap=True, crop=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
