"""qrstyle CLI: render styled QR codes and fetch site favicons."""

import argparse
import asyncio
import sys
from pathlib import Path

from qrcode.exceptions import DataOverflowError

from qrstyle.logging import setup_logging, get_logger, audit

log = get_logger("cli")


def _build_options(args):
    """Translate parsed render flags into RenderOptions."""
    from qrstyle.config import RenderOptions, ResolverConfig
    from qrstyle.presets import QUALITY_SIZES, get_color_preset

    fg, bg = args.fg, args.bg
    if args.preset:
        preset = get_color_preset(args.preset)
        fg, bg = preset.fg, preset.bg

    size = QUALITY_SIZES[args.quality] if args.quality else args.size
    return RenderOptions(
        size=size,
        ecc=args.ecc,
        margin=args.margin,
        style=args.style,
        fg=fg,
        bg=bg,
        logo=_resolve_logo_arg(args.logo),
        logo_shape=args.logo_shape,
        logo_layout=args.logo_layout,
        logo_size=args.logo_size,
        border_width=args.border,
        border_color=args.border_color,
        grid_dimension=args.grid_dimension,
        resolver=ResolverConfig.from_env(),
    )


def _resolve_logo_arg(value: str | None):
    """A preset id, a local image file, or a URL/data URI passed through."""
    from qrstyle.logos import find_preset, logo_from_file

    if not value:
        return None
    preset = find_preset(value)
    if preset is not None:
        return preset
    if Path(value).is_file():
        return logo_from_file(value)
    return value


def _save(image, output: Path, fmt: str):
    from qrstyle.canvas import encode_image

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(encode_image(image, fmt))


def cmd_generate(args):
    """Render one styled QR code."""
    from qrstyle.content import build_content, parse_batch_line
    from qrstyle.favicon import fetch_favicon_logo
    from qrstyle.pipeline import render_qr

    options = _build_options(args)
    content = build_content(args.mode, parse_batch_line(args.content, args.mode))

    async def run():
        opts = options
        if args.favicon:
            logo = await fetch_favicon_logo(args.favicon, config=opts.resolver)
            if logo is None:
                print("Could not fetch favicon. Try uploading a logo manually.", file=sys.stderr)
            else:
                opts = opts.with_changes(logo=logo)
        return await render_qr(content, opts)

    image = asyncio.run(run())
    output = Path(args.output)
    _save(image, output, args.format)
    print(f"Generated: {output} ({image.size[0]}x{image.size[1]}, style={args.style})")


def cmd_favicon(args):
    """Resolve a site's favicon into a 256x256 PNG."""
    from qrstyle.config import ResolverConfig
    from qrstyle.favicon import resolve_favicon

    icon = asyncio.run(resolve_favicon(args.url, config=ResolverConfig.from_env()))
    if icon is None:
        print(f"No favicon found for {args.url}. Try uploading a logo manually.", file=sys.stderr)
        sys.exit(1)

    output = Path(args.output)
    _save(icon, output, "png")
    print(f"Favicon: {output} ({icon.size[0]}x{icon.size[1]})")


def cmd_batch(args):
    """Render one QR code per line of an input file."""
    from qrstyle.content import batch_filename, batch_lines, parse_batch
    from qrstyle.pipeline import render_batch

    text = Path(args.input).read_text(encoding="utf-8")
    lines = batch_lines(text)
    contents = parse_batch(text, args.mode)
    options = _build_options(args)
    results = asyncio.run(render_batch(contents, options))

    out_dir = Path(args.output)
    for i, (line, result) in enumerate(zip(lines, results)):
        if result.ok:
            p = out_dir / f"{batch_filename(line, args.mode, i)}.{args.format}"
            _save(result.image, p, args.format)
            print(f"  [{i + 1:3d}] OK   {p}")
        else:
            print(f"  [{i + 1:3d}] FAIL {result.content[:40]!r}: {result.error}")

    ok = sum(r.ok for r in results)
    print(f"Generated {ok}/{len(results)} codes in {out_dir}")
    sys.exit(0 if ok == len(results) else 1)


def cmd_styles(args):
    """List styles, logo shapes/layouts and colour presets."""
    from qrstyle.compose import LogoLayout, LogoShape
    from qrstyle.logos import PRESET_LOGOS
    from qrstyle.presets import COLOR_PRESETS, QUALITY_SIZES
    from qrstyle.styles import DesignStyle

    print("Design styles: " + ", ".join(s.value for s in DesignStyle))
    print("Logo shapes:   " + ", ".join(s.value for s in LogoShape))
    print("Logo layouts:  " + ", ".join(x.value for x in LogoLayout))
    print("Preset logos:  " + ", ".join(p.id for p in PRESET_LOGOS))
    print("Quality:       " + ", ".join(f"{k}={v}px" for k, v in QUALITY_SIZES.items()))
    print("Colour presets:")
    for p in COLOR_PRESETS.values():
        print(f"  {p.id:10s} fg={p.fg} bg={p.bg}")


def _add_render_args(p: argparse.ArgumentParser):
    from qrstyle.compose import LogoLayout, LogoShape
    from qrstyle.content import QRMode
    from qrstyle.presets import QUALITY_SIZES
    from qrstyle.styles import DesignStyle

    p.add_argument("--mode", default="text", choices=[m.value for m in QRMode], help="Payload type")
    p.add_argument("-s", "--style", default="square", choices=[s.value for s in DesignStyle], help="Module style")
    p.add_argument("--fg", default="#000000", help="Foreground colour (hex)")
    p.add_argument("--bg", default="#ffffff", help="Background colour (hex)")
    p.add_argument("--preset", default=None, help="Colour preset id (overrides --fg/--bg)")
    p.add_argument("-e", "--ecc", default="H", choices=["L", "M", "Q", "H"], help="Error correction level")
    p.add_argument("--size", type=int, default=800, help="Output size in pixels")
    p.add_argument("--quality", default=None, choices=list(QUALITY_SIZES), help="Named output size (overrides --size)")
    p.add_argument("--margin", type=int, default=2, help="Quiet zone modules")
    p.add_argument("--grid-dimension", type=int, default=None,
                   help="Cells across the raster used for sampling (default: derived from the symbol)")
    p.add_argument("--logo", default=None, help="Preset logo id, image path, or image URL")
    p.add_argument("--logo-shape", default="circle", choices=[s.value for s in LogoShape])
    p.add_argument("--logo-layout", default="center", choices=[x.value for x in LogoLayout])
    p.add_argument("--logo-size", type=float, default=20, help="Logo size as %% of width (10-25)")
    p.add_argument("--border", type=int, default=0, help="Border width in pixels (0 = none)")
    p.add_argument("--border-color", default="#000000", help="Border colour (hex)")
    p.add_argument("--format", default="png", choices=["png", "jpeg", "webp"], help="Output image format")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="qrstyle", description="qrstyle: styled QR code renderer")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- generate ---
    p_gen = subparsers.add_parser("generate", help="Render a styled QR code")
    p_gen.add_argument("content", help="Data to encode (see --mode for | separated fields)")
    p_gen.add_argument("-o", "--output", default="output/qr.png", help="Output file path")
    p_gen.add_argument("--favicon", default=None, help="Use this site's favicon as the logo")
    _add_render_args(p_gen)

    # --- favicon ---
    p_fav = subparsers.add_parser("favicon", help="Fetch a site's favicon as a 256x256 PNG")
    p_fav.add_argument("url", help="Site URL or domain")
    p_fav.add_argument("-o", "--output", default="output/favicon.png", help="Output file path")

    # --- batch ---
    p_batch = subparsers.add_parser("batch", help="Render one QR code per input line")
    p_batch.add_argument("input", help="Text file with one item per line")
    p_batch.add_argument("-o", "--output", default="output/batch", help="Output directory")
    _add_render_args(p_batch)

    # --- styles ---
    subparsers.add_parser("styles", help="List available styles and presets")

    args = parser.parse_args(argv)

    # Setup logging before any command runs
    setup_logging(level="DEBUG" if args.verbose else None, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "generate": cmd_generate,
        "favicon": cmd_favicon,
        "batch": cmd_batch,
        "styles": cmd_styles,
    }
    try:
        commands[args.command](args)
    except (ValueError, DataOverflowError) as e:
        print(f"error: {str(e) or type(e).__name__}", file=sys.stderr)
        sys.exit(2)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
