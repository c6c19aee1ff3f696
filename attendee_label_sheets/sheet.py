"""
Grid geometry and sheet composition.
"""

# Standard Library
import dataclasses

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.compose
import attendee_label_sheets.config
import attendee_label_sheets.visual


VisualDescription = als.visual.VisualDescription
SheetConfig = als.config.SheetConfig
CircleStyle = als.config.CircleStyle
FieldStyle = als.config.FieldStyle

mm_to_px = als.config.mm_to_px

A4_WIDTH_MM = als.config.A4_WIDTH_MM
A4_HEIGHT_MM = als.config.A4_HEIGHT_MM
BACKGROUND_COLOR = als.config.BACKGROUND_COLOR
PAGE_BORDER_COLOR = als.config.PAGE_BORDER_COLOR
PAGE_BORDER_WIDTH = als.config.PAGE_BORDER_WIDTH
CUT_LINE_COLOR = als.config.CUT_LINE_COLOR
CUT_LINE_WIDTH = als.config.CUT_LINE_WIDTH
CUT_LINE_DASH = als.config.CUT_LINE_DASH


@dataclasses.dataclass(frozen=True)
class NumberStyle:
	circle: CircleStyle
	text: FieldStyle
	font_size: float


@dataclasses.dataclass(frozen=True)
class PageLayout:
	width_mm: float
	height_mm: float
	rows: int
	columns: int
	dpi: int

	@property
	def capacity(self) -> int:
		return self.rows * self.columns

	@property
	def cell_width_mm(self) -> float:
		return self.width_mm / self.columns

	@property
	def cell_height_mm(self) -> float:
		return self.height_mm / self.rows

	@property
	def width_px(self) -> int:
		return mm_to_px(self.width_mm, self.dpi)

	@property
	def height_px(self) -> int:
		return mm_to_px(self.height_mm, self.dpi)

	@property
	def cell_width_px(self) -> int:
		return mm_to_px(self.cell_width_mm, self.dpi)

	@property
	def cell_height_px(self) -> int:
		return mm_to_px(self.cell_height_mm, self.dpi)

	def cell_origin(self, index: int) -> tuple[int, int]:
		"""
		Compute the top left pixel of a cell.

		Args:
			index: Flat cell index, row major.

		Returns:
			Tuple of (x, y) in pixels.
		"""
		row, col = divmod(index, self.columns)
		return (col * self.cell_width_px, row * self.cell_height_px)


#============================================
def a4_layout(orientation: str, rows: int, columns: int, dpi: int) -> PageLayout:
	"""
	Build a grid layout on an A4 page.

	Args:
		orientation: "portrait" or "landscape".
		rows: Grid rows.
		columns: Grid columns.
		dpi: Resolution.

	Returns:
		PageLayout.
	"""
	if orientation == "landscape":
		width_mm, height_mm = A4_HEIGHT_MM, A4_WIDTH_MM
	else:
		width_mm, height_mm = A4_WIDTH_MM, A4_HEIGHT_MM
	return PageLayout(width_mm=width_mm, height_mm=height_mm, rows=rows, columns=columns, dpi=dpi)


#============================================
def sheet_layout(sheet: SheetConfig, dpi: int) -> PageLayout:
	"""
	Build the page layout for a sheet config.
	"""
	return a4_layout(sheet.orientation, sheet.rows, sheet.columns, dpi)


#============================================
def chunk_items(items: list, capacity: int) -> list[list]:
	"""
	Split items into consecutive sheet sized chunks.

	Args:
		items: Ordered items.
		capacity: Items per sheet.

	Returns:
		Chunks in order; the last one may be short.
	"""
	if capacity <= 0:
		raise ValueError(f"Sheet capacity must be positive, got {capacity}")
	chunks: list[list] = []
	for start in range(0, len(items), capacity):
		chunks.append(list(items[start:start + capacity]))
	return chunks


#============================================
def build_cut_lines(layout: PageLayout) -> list[als.visual.Line]:
	"""
	Build dashed guide lines on the internal cell boundaries.

	Args:
		layout: Page layout.

	Returns:
		Horizontal lines first, then vertical lines.
	"""
	width_px = layout.width_px
	height_px = layout.height_px
	lines: list[als.visual.Line] = []
	for row in range(1, layout.rows):
		y = row * layout.cell_height_px
		lines.append(
			als.visual.Line(
				x1=0, y1=y, x2=width_px, y2=y,
				stroke=CUT_LINE_COLOR,
				stroke_width=CUT_LINE_WIDTH,
				dash=CUT_LINE_DASH,
			)
		)
	for col in range(1, layout.columns):
		x = col * layout.cell_width_px
		lines.append(
			als.visual.Line(
				x1=x, y1=0, x2=x, y2=height_px,
				stroke=CUT_LINE_COLOR,
				stroke_width=CUT_LINE_WIDTH,
				dash=CUT_LINE_DASH,
			)
		)
	return lines


#============================================
def layout_grid(
	items: list[VisualDescription | int],
	rows: int,
	cols: int,
	page_width_mm: float,
	page_height_mm: float,
	dpi: int,
	with_cut_lines: bool,
	number_style: NumberStyle | None = None,
) -> VisualDescription:
	"""
	Arrange items into a grid on a page sized canvas.

	Args:
		items: Label descriptions, or numbers for circle sheets.
		rows: Grid rows.
		cols: Grid columns.
		page_width_mm: Page width in mm.
		page_height_mm: Page height in mm.
		dpi: Resolution.
		with_cut_lines: Draw dashed cut lines on top.
		number_style: Style for number items; required when items are ints.

	Returns:
		VisualDescription for the whole page.
	"""
	layout = PageLayout(
		width_mm=page_width_mm,
		height_mm=page_height_mm,
		rows=rows,
		columns=cols,
		dpi=dpi,
	)
	width_px = layout.width_px
	height_px = layout.height_px
	cell_width_px = layout.cell_width_px
	cell_height_px = layout.cell_height_px

	primitives: list = [
		als.visual.Rect(x=0, y=0, width=width_px, height=height_px, fill=BACKGROUND_COLOR),
	]
	for index, item in enumerate(items[:layout.capacity]):
		if isinstance(item, VisualDescription):
			content = item
		else:
			if number_style is None:
				raise ValueError("number_style is required for number items")
			content = als.compose.compose_number_mark(
				int(item),
				cell_width_px,
				cell_height_px,
				number_style.circle,
				number_style.text,
				number_style.font_size,
			)
		x, y = layout.cell_origin(index)
		primitives.append(
			als.visual.Placement(
				x=x, y=y,
				width=cell_width_px,
				height=cell_height_px,
				content=content,
			)
		)

	if number_style is not None:
		primitives.append(
			als.visual.Rect(
				x=0, y=0, width=width_px, height=height_px,
				fill=None,
				stroke=PAGE_BORDER_COLOR,
				stroke_width=PAGE_BORDER_WIDTH,
			)
		)
	if with_cut_lines:
		primitives.extend(build_cut_lines(layout))
	return VisualDescription(width=width_px, height=height_px, primitives=tuple(primitives))
