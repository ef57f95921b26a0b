"""Demo: parse a diagram, lay it out three ways and export SVG, JSON and DOT.

Run from the repository root:

    python examples/demo.py
"""

import random
from pathlib import Path

from graphdiagram import JsonSerializer, GraphvizExporter, RenderOptions, SvgExporter, apply_layout, parse

HERE = Path(__file__).parent
BUILD = HERE / "build"


def main():
    text = (HERE / "amigos.graph").read_text(encoding="utf-8")
    BUILD.mkdir(exist_ok=True)

    for layout in ("circular", "simple-force", "force-atlas2"):
        graph = parse(text)
        apply_layout(graph, layout, rng=random.Random(42))

        options = RenderOptions(curved_edges=layout != "circular", background="white")
        svg_path = BUILD / f"amigos-{layout}.svg"
        svg_path.write_text(SvgExporter.to_svg(graph, options), encoding="utf-8")
        print(f"✓ {layout}: {svg_path}")

    (BUILD / "amigos.json").write_text(JsonSerializer.to_json(graph), encoding="utf-8")
    (BUILD / "amigos.dot").write_text(GraphvizExporter.to_dot(graph), encoding="utf-8")
    print(f"✓ JSON and DOT written to {BUILD}")


if __name__ == "__main__":
    main()
