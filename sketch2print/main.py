#!/usr/bin/env python3
"""
Sketch2Print - Command Line Entry Point

    sketch2print render PROJECT.json -o OUT.pdf [--optimize]
    sketch2print preview PROJECT.json
    sketch2print types

Run with: python -m sketch2print.main
"""

import argparse
import logging
import sys

from .config import CanvasSettings
from .core.errors import Sketch2PrintError
from .core.factory import get_supported_types
from .io.project_io import load_project

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sketch2print",
        description="Render 2D vector scenes to PDF",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    render = commands.add_parser("render", help="render a project to PDF or PNG")
    render.add_argument("project", help="project JSON file")
    render.add_argument("-o", "--output", required=True,
                        help="output file (.pdf, or .png for a raster image)")
    render.add_argument("--optimize", action="store_true", default=None,
                        help="fit elements to the page and compress the PDF")
    render.add_argument("--scale", type=float, default=1.0,
                        help="pixels per canvas unit for raster output")

    preview = commands.add_parser("preview", help="show a project in a window")
    preview.add_argument("project", help="project JSON file")

    commands.add_parser("types", help="list the supported shape types")
    return parser


def configure_logging(settings: CanvasSettings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(path: str):
    document = load_project(path)
    if document is None:
        raise Sketch2PrintError(f"Could not load project: {path}")
    return document


def cmd_render(args, settings: CanvasSettings) -> int:
    document = _load(args.project)

    if args.output.lower().endswith(".png"):
        from PyQt6.QtGui import QGuiApplication
        from .graphics.painter_context import render_to_image

        app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])
        image = render_to_image(document, args.scale, settings.background_color)
        if not image.save(args.output):
            raise Sketch2PrintError(f"Could not write image: {args.output}")
        logger.info(f"Saved image to {args.output}")
        return 0

    from .io.pdf_export import export_pdf_file

    optimize = settings.optimize_pdf if args.optimize is None else args.optimize
    report = export_pdf_file(document, args.output, optimize=optimize,
                             background=settings.background_color,
                             page_limits=(settings.min_page_size, settings.max_page_size))
    if report.failed:
        logger.warning(f"{len(report.failed)} elements could not be drawn")
    return 0


def cmd_preview(args, settings: CanvasSettings) -> int:
    from PyQt6.QtWidgets import QApplication, QMainWindow
    from .graphics.painter_context import CanvasPreview

    document = _load(args.project)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName("Sketch2Print")
    app.setOrganizationName("Sketch2Print")

    window = QMainWindow()
    window.setWindowTitle(f"Sketch2Print - {args.project}")
    preview = CanvasPreview(document)
    preview.background = settings.background_color
    preview.element_clicked.connect(
        lambda index: logger.info(f"Clicked element {index}" if index >= 0 else "Clicked canvas"))
    window.setCentralWidget(preview)
    window.resize(int(document.width) + 40, int(document.height) + 40)
    window.show()

    return app.exec()


def cmd_types(args, settings: CanvasSettings) -> int:
    for type_name in get_supported_types():
        print(type_name)
    return 0


COMMANDS = {
    "render": cmd_render,
    "preview": cmd_preview,
    "types": cmd_types,
}


def main(argv=None) -> int:
    """Main entry point for the sketch2print command."""
    args = build_parser().parse_args(argv)
    settings = CanvasSettings.load()
    configure_logging(settings, args.verbose)

    try:
        return COMMANDS[args.command](args, settings)
    except (Sketch2PrintError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
