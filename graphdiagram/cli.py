"""
Command-line interface for graphdiagram.

Usage:
    graphdiagram ./examples/amigos.graph -o ./build/
    graphdiagram ./examples/amigos.graph -o ./build/ --layout circular --curved
    graphdiagram ./examples/amigos.graph -o ./build/ --format json
    graphdiagram ./examples/amigos.graph -o ./build/ --watch
"""

import argparse
import asyncio
import logging
import random
import re
import sys
from pathlib import Path
from typing import List, Optional

from graphdiagram.backend.graphviz import GraphvizExporter
from graphdiagram.backend.svg import render
from graphdiagram.core.ir import GraphModel, RenderOptions
from graphdiagram.core.serialization import JsonSerializer
from graphdiagram.engine.pipeline import DiagramPipeline, LiveDiagram, RenderResult
from graphdiagram.frontend.parser import parse
from graphdiagram.layout import STRATEGIES, DEFAULT_LAYOUT, apply_layout

logger = logging.getLogger(__name__)

FORMATS = {"svg": ".svg", "json": ".json", "dot": ".dot"}
WATCH_INTERVAL = 0.5


def title_to_filename(title: str, extension: str) -> str:
    """Filesystem-safe name derived from a diagram title."""
    safe = title.strip().lower()
    safe = re.sub(r"[^a-z0-9\s_-]", "", safe)
    safe = re.sub(r"\s+", "-", safe)
    safe = re.sub(r"-+", "-", safe)
    if not safe:
        safe = "graph"
    ext = extension if extension.startswith(".") else f".{extension}"
    return f"{safe}{ext}"


def read_source(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def format_graph(graph: GraphModel, format: str, options: RenderOptions) -> str:
    """Serialize a laid-out graph in the requested output format."""
    if format == "svg":
        return asyncio.run(render(graph, options))
    if format == "json":
        return JsonSerializer.to_json(graph)
    if format == "dot":
        return GraphvizExporter.to_dot(graph)
    raise ValueError(f"Unknown format: {format}. Use: {', '.join(FORMATS)}")


def export_graph(graph: GraphModel, output_path: Path, format: str, options: RenderOptions) -> Path:
    """Write the graph into output_path, named after its title."""
    content = format_graph(graph, format, options)
    output_file = output_path / title_to_filename(graph.title, FORMATS[format])
    output_file.write_text(content, encoding="utf-8")
    return output_file


def build_options(args: argparse.Namespace) -> RenderOptions:
    return RenderOptions(
        width=args.width,
        height=args.height,
        padding=args.padding,
        background=args.background,
        embed_icons=args.embed_icons,
        optimize=args.optimize,
        curved_edges=args.curved,
    )


async def watch(path: Path, output_path: Path, pipeline: DiagramPipeline, delay: float) -> None:
    """Re-export whenever the input file changes, until cancelled."""

    def on_render(result: RenderResult) -> None:
        output_file = output_path / title_to_filename(result.graph.title, ".svg")
        output_file.write_text(result.svg, encoding="utf-8")
        print(f"{output_file}")

    live = LiveDiagram(pipeline, on_render, delay=delay)
    last_mtime = None
    while True:
        try:
            mtime = path.stat().st_mtime
        except OSError as e:
            logger.warning("Cannot stat %s: %s", path, e)
        else:
            if mtime != last_mtime:
                last_mtime = mtime
                live.notify(read_source(path))
        await asyncio.sleep(WATCH_INTERVAL)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="graphdiagram",
        description="Render graph diagram text to SVG.",
        epilog="Example: graphdiagram ./examples/amigos.graph -o ./build/",
    )

    parser.add_argument("input", type=Path, help="Diagram text file ('-' for stdin)")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("."),
        help="Output directory (default: current directory)",
    )
    parser.add_argument(
        "-f", "--format",
        choices=list(FORMATS),
        default="svg",
        help="Output format (default: svg)",
    )
    parser.add_argument(
        "-l", "--layout",
        choices=sorted(STRATEGIES),
        default=DEFAULT_LAYOUT,
        help=f"Layout strategy (default: {DEFAULT_LAYOUT})",
    )
    parser.add_argument("--curved", action="store_true", help="Draw every edge as a curve")
    parser.add_argument("--no-embed-icons", dest="embed_icons", action="store_false", help="Reference icons instead of embedding them")
    parser.add_argument("--no-optimize", dest="optimize", action="store_false", help="Keep absolute, unrounded path data")
    parser.add_argument("--width", type=float, default=800, help="SVG width, 0 for the diagram's own size (default: 800)")
    parser.add_argument("--height", type=float, default=600, help="SVG height, 0 for the diagram's own size (default: 600)")
    parser.add_argument("--padding", type=float, default=20, help="Padding around the diagram (default: 20)")
    parser.add_argument("--background", default="transparent", help="Background color (default: transparent)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible layouts")
    parser.add_argument("--watch", action="store_true", help="Re-export SVG whenever the input changes")
    parser.add_argument("--delay", type=float, default=1.0, help="Quiet period before re-exporting in watch mode (default: 1.0)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if str(args.input) != "-":
        if not args.input.exists():
            print(f"Error: File not found: {args.input}", file=sys.stderr)
            return 1
        if not args.input.is_file():
            print(f"Error: Not a file: {args.input}", file=sys.stderr)
            return 1

    options = build_options(args)
    rng = random.Random(args.seed) if args.seed is not None else None

    try:
        args.output.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Error creating output directory: {e}", file=sys.stderr)
        return 1

    if args.watch:
        if str(args.input) == "-":
            print("Error: --watch needs a file, not stdin", file=sys.stderr)
            return 1
        pipeline = DiagramPipeline(layout=args.layout, options=options, rng=rng)
        try:
            asyncio.run(watch(args.input, args.output, pipeline, args.delay))
        except KeyboardInterrupt:
            pass
        return 0

    try:
        text = read_source(args.input)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        return 1

    graph = parse(text)
    apply_layout(graph, args.layout, rng=rng)

    try:
        output_file = export_graph(graph, args.output, args.format, options)
    except OSError as e:
        print(f"Error exporting '{graph.title}': {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Exported '{graph.title}' ({len(graph.nodes)} nodes, {len(graph.edges)} edges) -> {output_file}")
    else:
        print(f"{output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
