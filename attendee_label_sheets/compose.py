"""
Compose records into label descriptions.
"""

# Standard Library
import math

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.config
import attendee_label_sheets.records
import attendee_label_sheets.text_layout
import attendee_label_sheets.visual


Record = als.records.Record
FieldStyle = als.config.FieldStyle
CircleStyle = als.config.CircleStyle
GeneratorConfig = als.config.GeneratorConfig
VisualDescription = als.visual.VisualDescription

mm_to_px = als.config.mm_to_px
wrap_text = als.text_layout.wrap_text

BACKGROUND_COLOR = als.config.BACKGROUND_COLOR
WRAP_WIDTH_RATIO = als.config.WRAP_WIDTH_RATIO
IDENTIFIER_WIDTH = als.config.IDENTIFIER_WIDTH


#============================================
def text_anchor(align: str | None) -> str:
	"""
	Map a text alignment to a text anchor.

	Args:
		align: "left", "center" or "right".

	Returns:
		Anchor name.
	"""
	normalized = (align or "center").strip().lower()
	if normalized == "left":
		return als.visual.ANCHOR_START
	if normalized == "right":
		return als.visual.ANCHOR_END
	return als.visual.ANCHOR_MIDDLE


#============================================
def resolve_x(style: FieldStyle, canvas_width_px: int, dpi: int) -> float:
	"""
	Resolve a configured horizontal position to pixels.

	Args:
		style: Field style.
		canvas_width_px: Canvas width in pixels.
		dpi: Resolution.

	Returns:
		X coordinate in pixels.
	"""
	value = style.x
	center = canvas_width_px / 2
	if value == "center":
		return center
	if isinstance(value, bool):
		return center
	if not isinstance(value, (str, int, float)):
		return center
	try:
		value = float(value)
	except (ValueError, OverflowError):
		return center
	if math.isfinite(value):
		return mm_to_px(value, dpi)
	# non-finite values such as "inf" and "nan" center
	return center


#============================================
def circle_radius(circle: CircleStyle, width_px: int, height_px: int) -> float:
	"""
	Compute the identifier circle radius.
	"""
	if circle.radius_px:
		return circle.radius_px
	return min(width_px, height_px) * circle.radius_ratio


#============================================
def wrap_width(style: FieldStyle, canvas_width_px: int, dpi: int) -> float:
	"""
	Compute the width budget for a wrapped block.

	Args:
		style: Field style.
		canvas_width_px: Canvas width in pixels.
		dpi: Resolution.

	Returns:
		Width in pixels.
	"""
	if style.padding_left is None and style.padding_right is None:
		return canvas_width_px * WRAP_WIDTH_RATIO
	padding = mm_to_px(style.padding_left or 0.0, dpi) + mm_to_px(style.padding_right or 0.0, dpi)
	return max(0, canvas_width_px - padding)


#============================================
def build_text(style: FieldStyle, x: float, y: float, content: str) -> als.visual.Text:
	"""
	Build a single text primitive from a field style.
	"""
	return als.visual.Text(
		x=x,
		y=y,
		anchor=text_anchor(style.align),
		content=content,
		font_family=style.font_family,
		font_size=style.font_size,
		font_weight=style.font_weight,
		color=style.color,
	)


#============================================
def build_multiline(
	style: FieldStyle,
	x: float,
	y: float,
	lines: list[str],
) -> als.visual.MultilineText:
	"""
	Build a text block vertically centered on y.

	Args:
		style: Field style.
		x: Anchor x in pixels.
		y: Center y in pixels.
		lines: Wrapped lines.

	Returns:
		MultilineText primitive.
	"""
	count = len(lines)
	step = style.font_size * style.line_height
	offsets = tuple((index - (count - 1) / 2) * step for index in range(count))
	return als.visual.MultilineText(
		x=x,
		y=y,
		anchor=text_anchor(style.align),
		lines=tuple(lines),
		line_offsets=offsets,
		font_family=style.font_family,
		font_size=style.font_size,
		font_weight=style.font_weight,
		color=style.color,
	)


#============================================
def compose_label(record: Record, config: GeneratorConfig) -> VisualDescription:
	"""
	Compose one record into a label description.

	Args:
		record: Normalized record.
		config: Generator configuration.

	Returns:
		VisualDescription sized to the configured page.
	"""
	dpi = config.page.dpi
	width_px = mm_to_px(config.page.width_mm, dpi)
	height_px = mm_to_px(config.page.height_mm, dpi)

	stt_x = resolve_x(config.stt, width_px, dpi)
	stt_y = mm_to_px(config.stt.y, dpi)
	primitives: list = [
		als.visual.Rect(x=0, y=0, width=width_px, height=height_px, fill=BACKGROUND_COLOR),
		als.visual.Circle(
			center_x=stt_x,
			center_y=stt_y,
			radius=circle_radius(config.circle, width_px, height_px),
			stroke=config.circle.stroke_color,
			stroke_width=config.circle.line_width,
		),
		build_text(config.stt, stt_x, stt_y, record.display_identifier),
		build_text(
			config.name,
			resolve_x(config.name, width_px, dpi),
			mm_to_px(config.name.y, dpi),
			record.name,
		),
		# empty codes still get a text element so the slot stays visible
		build_text(
			config.code,
			resolve_x(config.code, width_px, dpi),
			mm_to_px(config.code.y, dpi),
			record.code,
		),
	]

	dept_style = config.department_company
	combined = record.department_company
	if combined:
		lines = wrap_text(combined, wrap_width(dept_style, width_px, dpi), dept_style.font_size)
		primitives.append(
			build_multiline(
				dept_style,
				resolve_x(dept_style, width_px, dpi),
				mm_to_px(dept_style.y, dpi),
				lines,
			)
		)

	return VisualDescription(width=width_px, height=height_px, primitives=tuple(primitives))


#============================================
def compose_number_mark(
	number: int,
	width_px: int,
	height_px: int,
	circle: CircleStyle,
	style: FieldStyle,
	font_size: float,
) -> VisualDescription:
	"""
	Compose a numbered circle centered in a cell.

	Args:
		number: Number to print.
		width_px: Cell width in pixels.
		height_px: Cell height in pixels.
		circle: Circle style; only the ratio sizes the radius.
		style: Identifier style for font family, weight and color.
		font_size: Number font size in pixels.

	Returns:
		VisualDescription sized to the cell.
	"""
	center_x = width_px / 2
	center_y = height_px / 2
	radius = min(width_px, height_px) * circle.radius_ratio
	content = str(number).rjust(IDENTIFIER_WIDTH, "0")
	primitives = (
		als.visual.Circle(
			center_x=center_x,
			center_y=center_y,
			radius=radius,
			stroke=circle.stroke_color,
			stroke_width=circle.line_width,
		),
		als.visual.Text(
			x=center_x,
			y=center_y,
			anchor=als.visual.ANCHOR_MIDDLE,
			content=content,
			font_family=style.font_family,
			font_size=font_size,
			font_weight=style.font_weight,
			color=style.color,
		),
	)
	return VisualDescription(width=width_px, height=height_px, primitives=primitives)
