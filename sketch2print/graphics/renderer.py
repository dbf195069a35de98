"""
Render Pipeline

Walks a shape sequence in paint order and draws each shape onto a
DrawingContext. One bad shape is logged and skipped; only a failure of
the output itself (RenderFatalError) aborts the render.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple, Union
import logging

from ..core.colors import validate_color
from ..core.document import Document
from ..core.errors import RenderFatalError, ValidationError
from ..core.factory import shape_from_dict
from ..core.fields import to_number
from ..core.shapes import Shape
from .context import DrawingContext

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = '#ffffff'


@dataclass
class RenderReport:
    """Outcome of one render pass."""
    drawn: int = 0
    failed: List[Tuple[int, str]] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.skipped


def render_shapes(shapes: Iterable[Shape], context: DrawingContext,
                  report: RenderReport = None) -> RenderReport:
    """Draw ``shapes`` in order, bottom first."""
    if report is None:
        report = RenderReport()

    for index, shape in enumerate(shapes):
        try:
            shape.draw(context)
        except RenderFatalError:
            raise
        except Exception as e:
            logger.error(f"Failed to draw element {index} ({shape.type_name}): {e}")
            report.failed.append((index, str(e)))
            continue
        report.drawn += 1

    return report


def _coerce_snapshot(snapshot: Union[Document, Dict[str, Any]],
                     report: RenderReport) -> Tuple[float, float, List[Shape]]:
    if isinstance(snapshot, Document):
        return snapshot.width, snapshot.height, list(snapshot.shapes)

    shapes = []
    for index, record in enumerate(snapshot.get('elements') or []):
        try:
            shapes.append(shape_from_dict(record))
        except ValidationError as e:
            logger.warning(f"Skipping element {index}: {e}")
            report.skipped.append((index, str(e)))
    width = to_number(snapshot.get('width')) or 0.0
    height = to_number(snapshot.get('height')) or 0.0
    return width, height, shapes


def render_document_to(snapshot: Union[Document, Dict[str, Any]], context: DrawingContext,
                       background: str = DEFAULT_BACKGROUND) -> RenderReport:
    """
    Render a whole document: background first, then every element.

    ``snapshot`` is a Document or its ``{width, height, elements}`` dict.
    Records that cannot be turned into shapes are skipped and reported.
    """
    report = RenderReport()
    width, height, shapes = _coerce_snapshot(snapshot, report)

    if width > 0 and height > 0:
        context.set_fill_color(validate_color(background, DEFAULT_BACKGROUND))
        context.fill_rect(0, 0, width, height)

    render_shapes(shapes, context, report)
    logger.info(f"Rendered {report.drawn} elements "
                f"({len(report.failed)} failed, {len(report.skipped)} skipped)")
    return report
