"""
Tkinter script generator.

Generates a runnable Tkinter script that redraws the editor's shapes on a
Tk Canvas with ``create_*`` calls.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Sequence

from models import (
    ArcStyle, ArrowStyle, CapStyle, FontSlant, FontWeight, JoinStyle,
    NONE_COLOR, Shape, ShapeState, ShapeType, TextAnchor, TextJustify,
    is_line_like, is_smooth_curve,
)
from .geometry import compute_center, compute_vertices, rotate_points
from .naming import default_name, tk_item_type
from .settings_manager import CanvasSettings

logger = logging.getLogger(__name__)


# Characters of text quoted in automatic comments
COMMENT_TEXT_PREVIEW = 20

_ARROW_DESCRIPTIONS = {
    ArrowStyle.FIRST: "arrow at the start",
    ArrowStyle.LAST: "arrow at the end",
    ArrowStyle.BOTH: "arrows at both ends",
}


class CodeLine(NamedTuple):
    """One line of generated code and the shape it draws, if any."""
    content: str
    shape_id: Optional[str] = None


# =============================================================================
# Formatting helpers
# =============================================================================

def format_number(value: float) -> str:
    """Round to 2 decimals and drop a trailing ``.0``."""
    rounded = round(float(value), 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return repr(rounded)


def string_literal(value: str) -> str:
    """Double-quoted Python string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class _Raw(str):
    """Option value emitted verbatim (variable names, True)."""


def format_value(value) -> str:
    if isinstance(value, _Raw):
        return str(value)
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return string_literal(value)
    if isinstance(value, (tuple, list)):
        return "(" + ", ".join(format_value(v) for v in value) + ")"
    return format_number(value)


def format_options(options: Dict[str, object]) -> str:
    """``, key=value`` pairs for a create call, or an empty string."""
    parts = [f"{key}={format_value(value)}" for key, value in options.items()
             if value is not None]
    return ", " + ", ".join(parts) if parts else ""


def _paint(color: str) -> str:
    return "" if color == NONE_COLOR else color


def describe_shape(shape: Shape) -> str:
    """One-sentence English description used for automatic comments."""
    if shape.type == ShapeType.TEXT:
        preview = shape.text[:COMMENT_TEXT_PREVIEW]
        ellipsis = "..." if len(shape.text) > COMMENT_TEXT_PREVIEW else ""
        return f'Text object: "{preview}{ellipsis}"'

    details = []
    if shape.fill != NONE_COLOR and not is_line_like(shape):
        details.append(f"fill: {shape.fill}")
    if shape.stroke != NONE_COLOR and shape.stroke_width > 0:
        details.append(f"outline: {shape.stroke}")
    if shape.type in (ShapeType.POLYGON, ShapeType.STAR):
        details.append(f"{shape.sides} sides")
    if shape.type == ShapeType.LINE and shape.arrow != ArrowStyle.NONE:
        details.append(_ARROW_DESCRIPTIONS[shape.arrow])

    description = default_name(shape)
    if details:
        description += f" ({', '.join(details)})"
    return description + "."


# =============================================================================
# Generator
# =============================================================================

class TkinterScriptGenerator:
    """
    Generates Tkinter scripts from a list of shapes.

    Options equal to the Tk defaults are left out, so the generated calls
    stay short. Rotated shapes are exported from their final vertices,
    except for circles, circular arcs and text, which Tk can draw rotated
    directly.
    """

    def __init__(self):
        self._image_vars: Dict[str, str] = {}

    def generate(self, shapes: Sequence[Shape],
                 canvas_settings: Optional[CanvasSettings] = None) -> str:
        """
        Generate the complete script.

        Args:
            shapes: Shapes in paint order
            canvas_settings: Canvas size, background and naming options

        Returns:
            Python source of the script
        """
        return "\n".join(line.content for line in self.generate_lines(shapes, canvas_settings)) + "\n"

    def generate_lines(self, shapes: Sequence[Shape],
                       canvas_settings: Optional[CanvasSettings] = None) -> List[CodeLine]:
        """Generate the script as lines tagged with the shape they draw."""
        settings = canvas_settings or CanvasSettings()
        canvas = settings.canvas_var_name.strip() or "c"
        self._image_vars = {}
        images = [s for s in shapes if s.type == ShapeType.IMAGE and not s.is_hidden]

        lines = [CodeLine("from tkinter import *")]
        if images:
            lines.extend([
                CodeLine("from PIL import Image, ImageTk"),
                CodeLine("import base64"),
                CodeLine("import io"),
            ])
        lines.extend([
            CodeLine(""),
            CodeLine("root = Tk()"),
            CodeLine(f"root.title({string_literal(settings.project_name)})"),
            CodeLine(f'root.geometry("{settings.width}x{settings.height}")'),
            CodeLine(""),
            CodeLine(f"{canvas} = Canvas(root, width={settings.width}, height={settings.height}, "
                     f"bg={string_literal(settings.background)})"),
            CodeLine(f"{canvas}.pack()"),
        ])
        lines.extend(self._generate_image_setup(images))
        lines.extend([
            CodeLine(""),
            CodeLine("# --- Shapes ---"),
        ])

        if not shapes:
            lines.append(CodeLine("# No shapes to draw"))

        exported = 0
        for shape in shapes:
            command = self.shape_command(shape, canvas)
            if command is None:
                continue
            exported += 1
            comment = shape.comment
            if not comment and settings.auto_comments:
                comment = describe_shape(shape)
            if comment:
                for text in comment.split("\n"):
                    lines.append(CodeLine("#" if not text.strip() else f"# {text}", shape.id))
            lines.append(CodeLine(command, shape.id))

        lines.extend([CodeLine(""), CodeLine("root.mainloop()")])
        logger.debug(f"Generated Tkinter script for {exported} of {len(shapes)} shapes")
        return lines

    def _generate_image_setup(self, images: Sequence[Shape]) -> List[CodeLine]:
        """
        PIL loading code binding one PhotoImage per image shape.

        Emitted after the root window exists, since Tk images need one.
        """
        if not images:
            return []

        lines = [
            CodeLine(""),
            CodeLine("# --- Image setup ---"),
        ]
        for index, shape in enumerate(images):
            var_name = f"img_photo_{index}"
            if shape.src.startswith("data:"):
                data = shape.src.split(",", 1)[1] if "," in shape.src else ""
                lines.append(CodeLine(f"img_data_{index} = base64.b64decode(b'{data}')"))
                lines.append(CodeLine(f"img_pil_{index} = Image.open(io.BytesIO(img_data_{index}))"))
            else:
                lines.append(CodeLine(f"img_pil_{index} = Image.open({string_literal(shape.src)})"))
            lines.append(CodeLine(f"{var_name} = ImageTk.PhotoImage(img_pil_{index})"))
            self._image_vars[shape.id] = var_name
        return lines

    # =========================================================================
    # Per-shape commands
    # =========================================================================

    def shape_command(self, shape: Shape, canvas: str = "c") -> Optional[str]:
        """
        The ``create_*`` call drawing one shape.

        Returns:
            The call, or None for hidden shapes and shapes without geometry
        """
        if shape.is_hidden:
            return None

        t = shape.type
        if t == ShapeType.TEXT:
            return self._text_command(shape, canvas)
        if t == ShapeType.IMAGE:
            return self._image_command(shape, canvas)
        if t == ShapeType.BITMAP:
            return self._bitmap_command(shape, canvas)
        if is_smooth_curve(shape):
            return self._smooth_command(shape, canvas)

        if t == ShapeType.ARC and (shape.rotation == 0 or shape.width == shape.height):
            return self._arc_command(shape, canvas)

        item = tk_item_type(shape)
        if item == "rectangle":
            if t == ShapeType.RECTANGLE:
                coords = [shape.x, shape.y, shape.x + shape.width, shape.y + shape.height]
            else:
                xs = [p.x for p in shape.points]
                ys = [p.y for p in shape.points]
                coords = [min(xs), min(ys), max(xs), max(ys)]
            return self._create(canvas, "rectangle", coords, self._closed_options(shape, item))

        if item == "oval":
            coords = [shape.cx - shape.rx, shape.cy - shape.ry, shape.cx + shape.rx, shape.cy + shape.ry]
            return self._create(canvas, "oval", coords, self._closed_options(shape, item))

        points = compute_vertices(shape)
        if len(points) < 2:
            logger.debug(f"Skipped {t.value} {shape.id} without geometry")
            return None
        flat = [v for p in points for v in p]
        if item == "line":
            return self._create(canvas, "line", flat, self._line_options(shape))
        return self._create(canvas, "polygon", flat, self._closed_options(shape, item))

    @staticmethod
    def _create(canvas: str, item: str, coords: Sequence[float], options: Dict[str, object]) -> str:
        args = ", ".join(format_number(v) for v in coords)
        return f"{canvas}.create_{item}({args}{format_options(options)})"

    def _common_options(self, shape: Shape) -> Dict[str, object]:
        options: Dict[str, object] = {}
        if shape.state != ShapeState.NORMAL:
            options["state"] = shape.state.value
        return options

    def _stroke_width(self, shape: Shape) -> float:
        return shape.stroke_width if shape.stroke_width > 0 else 1.0

    def _dash_options(self, shape: Shape, options: Dict[str, object]):
        if shape.dash:
            width = self._stroke_width(shape)
            options["dash"] = tuple(_Raw(format_number(v * width)) for v in shape.dash)
            if shape.dashoffset:
                options["dashoffset"] = shape.dashoffset

    def _closed_options(self, shape: Shape, item: str) -> Dict[str, object]:
        """Options of a filled item (rectangle, oval, arc, polygon)."""
        options = self._common_options(shape)
        has_stroke = shape.stroke != NONE_COLOR and shape.stroke_width > 0

        # Tk polygons fill black and have no outline by default
        if shape.fill != NONE_COLOR:
            options["fill"] = shape.fill
        elif item == "polygon":
            options["fill"] = ""
        if has_stroke:
            if item == "polygon" or shape.stroke != "#000000":
                options["outline"] = shape.stroke
            if shape.stroke_width != 1:
                options["width"] = shape.stroke_width
        elif item != "polygon":
            options["outline"] = ""

        if item == "polygon" and shape.joinstyle != JoinStyle.ROUND:
            options["joinstyle"] = shape.joinstyle.value
        if shape.stipple and shape.fill != NONE_COLOR:
            options["stipple"] = shape.stipple
        self._dash_options(shape, options)
        return options

    def _line_options(self, shape: Shape) -> Dict[str, object]:
        """Options of an open line item; the stroke color is the Tk fill."""
        options = self._common_options(shape)
        if shape.stroke != NONE_COLOR and shape.stroke_width > 0:
            if shape.stroke != "#000000":
                options["fill"] = shape.stroke
            if shape.stroke_width != 1:
                options["width"] = shape.stroke_width
        else:
            options["fill"] = ""

        if shape.joinstyle != JoinStyle.ROUND:
            options["joinstyle"] = shape.joinstyle.value
        if shape.stipple and shape.stroke != NONE_COLOR:
            options["stipple"] = shape.stipple
        self._dash_options(shape, options)

        arrow = getattr(shape, "arrow", ArrowStyle.NONE)
        if arrow != ArrowStyle.NONE:
            width = self._stroke_width(shape)
            options["arrow"] = arrow.value
            options["arrowshape"] = tuple(_Raw(format_number(v * width)) for v in shape.arrowshape)
        capstyle = getattr(shape, "capstyle", CapStyle.BUTT)
        if capstyle != CapStyle.BUTT:
            options["capstyle"] = capstyle.value
        return options

    def _smooth_command(self, shape: Shape, canvas: str) -> Optional[str]:
        """Smooth curves export their control points and let Tk do the spline."""
        points = list(shape.points)
        if len(points) < 2:
            return None
        if shape.rotation != 0:
            points = rotate_points(points, compute_center(shape), shape.rotation)

        if shape.is_closed:
            item = "polygon"
            options = self._closed_options(shape, item)
        else:
            item = "line"
            options = self._line_options(shape)
        options["smooth"] = _Raw("True")
        if shape.splinesteps != 12:
            options["splinesteps"] = shape.splinesteps
        flat = [v for p in points for v in p]
        return self._create(canvas, item, flat, options)

    def _arc_command(self, shape: Shape, canvas: str) -> str:
        """
        Arc item. Tk angles are counter-clockwise while rotation is
        clockwise, so a circular arc's rotation is subtracted from its start.
        """
        options = self._closed_options(shape, "arc")
        if shape.style == ArcStyle.ARC:
            options.pop("fill", None)
        start = shape.start - shape.rotation if shape.rotation else shape.start
        options["start"] = start
        options["extent"] = shape.extent
        if shape.style != ArcStyle.PIESLICE:
            options["style"] = shape.style.value
        coords = [shape.x, shape.y, shape.x + shape.width, shape.y + shape.height]
        return self._create(canvas, "arc", coords, options)

    def _text_command(self, shape: Shape, canvas: str) -> str:
        options = self._common_options(shape)
        font = [shape.font, int(round(shape.font_size))]
        if shape.weight == FontWeight.BOLD:
            font.append("bold")
        if shape.slant == FontSlant.ITALIC:
            font.append("italic")
        if shape.underline:
            font.append("underline")
        if shape.overstrike:
            font.append("overstrike")

        options["text"] = shape.text
        options["font"] = tuple(font)
        if shape.fill != "#000000":
            options["fill"] = _paint(shape.fill)
        if shape.anchor != TextAnchor.CENTER:
            options["anchor"] = shape.anchor.value
        if shape.width > 0:
            options["width"] = shape.width
        if shape.justify != TextJustify.LEFT:
            options["justify"] = shape.justify.value
        if shape.rotation != 0:
            # Tk text angles are counter-clockwise
            options["angle"] = (360 - shape.rotation) % 360
        if shape.stipple and shape.fill != NONE_COLOR:
            options["stipple"] = shape.stipple
        return self._create(canvas, "text", [shape.x, shape.y], options)

    def _image_command(self, shape: Shape, canvas: str) -> str:
        options = self._common_options(shape)
        var_name = self._image_vars.get(shape.id)
        if var_name is not None:
            options["image"] = _Raw(var_name)
        coords = [shape.x + shape.width / 2, shape.y + shape.height / 2]
        command = self._create(canvas, "image", coords, options)
        if shape.rotation != 0:
            command += "  # Tkinter cannot rotate images"
        return command

    def _bitmap_command(self, shape: Shape, canvas: str) -> str:
        options = self._common_options(shape)
        options["bitmap"] = shape.bitmap_type.value
        options["foreground"] = shape.foreground
        options["background"] = _paint(shape.background)
        coords = [shape.x + shape.width / 2, shape.y + shape.height / 2]
        command = self._create(canvas, "bitmap", coords, options)
        if shape.rotation != 0:
            command += "  # Tkinter cannot rotate bitmaps"
        return command


def generate_tkinter_script(shapes: Sequence[Shape],
                            canvas_settings: Optional[CanvasSettings] = None) -> str:
    """
    Convenience function to generate a Tkinter script.

    Args:
        shapes: Shapes in paint order
        canvas_settings: Canvas size, background and naming options

    Returns:
        Generated Python script as string
    """
    generator = TkinterScriptGenerator()
    return generator.generate(shapes, canvas_settings)


__all__ = [
    'CodeLine',
    'format_number',
    'format_options',
    'string_literal',
    'describe_shape',
    'TkinterScriptGenerator',
    'generate_tkinter_script',
]
