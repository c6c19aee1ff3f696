import pytest

import attendee_label_sheets.config as config_module
import attendee_label_sheets.sheet as sheet
import attendee_label_sheets.visual as visual


#============================================
def build_label_item(width: int = 50, height: int = 70) -> visual.VisualDescription:
	"""
	Build a tiny label description for placement tests.
	"""
	background = visual.Rect(x=0, y=0, width=width, height=height, fill="#FFFFFF")
	return visual.VisualDescription(width=width, height=height, primitives=(background,))


#============================================
def build_number_style() -> sheet.NumberStyle:
	config = config_module.GeneratorConfig()
	return sheet.NumberStyle(circle=config.circle, text=config.stt, font_size=40.0)


#============================================
@pytest.mark.parametrize(
	"orientation, rows, columns",
	[
		("portrait", 4, 2),
		("portrait", 5, 3),
		("landscape", 2, 4),
	],
)
def test_cells_within_page_and_non_overlapping(orientation: str, rows: int, columns: int) -> None:
	"""
	Ensure cell origins are on-page and adjacent cells do not overlap.
	"""
	layout = sheet.a4_layout(orientation, rows, columns, 300)
	cell_w = layout.cell_width_px
	cell_h = layout.cell_height_px
	origins = [layout.cell_origin(index) for index in range(layout.capacity)]
	assert len(set(origins)) == layout.capacity
	for x, y in origins:
		assert 0 <= x < layout.width_px
		assert 0 <= y < layout.height_px

	for col in range(columns - 1):
		left_x, _ = layout.cell_origin(col)
		right_x, _ = layout.cell_origin(col + 1)
		assert right_x >= left_x + cell_w
	for row in range(rows - 1):
		_, upper_y = layout.cell_origin(row * columns)
		_, lower_y = layout.cell_origin((row + 1) * columns)
		assert lower_y >= upper_y + cell_h

	# rounding leaves at most one pixel per cell at the far edges
	assert abs(columns * cell_w - layout.width_px) <= columns
	assert abs(rows * cell_h - layout.height_px) <= rows


#============================================
def test_a4_dimensions() -> None:
	portrait = sheet.a4_layout("portrait", 4, 2, 300)
	assert (portrait.width_px, portrait.height_px) == (2480, 3508)
	assert portrait.cell_width_mm == pytest.approx(105.0)
	assert portrait.cell_height_mm == pytest.approx(74.25)
	landscape = sheet.a4_layout("landscape", 4, 2, 300)
	assert (landscape.width_mm, landscape.height_mm) == (297.0, 210.0)


#============================================
def test_placement_origins_follow_row_major_order() -> None:
	"""
	Item k lands at column k mod cols and row k // cols.
	"""
	items = [build_label_item() for _ in range(6)]
	page = sheet.layout_grid(items, 4, 2, 210.0, 297.0, 300, with_cut_lines=False)
	placements = page.of_type(visual.Placement)
	assert len(placements) == 6
	for index, placement in enumerate(placements):
		row, col = divmod(index, 2)
		assert (placement.x, placement.y) == (col * 1240, row * 877)
		assert (placement.width, placement.height) == (1240, 877)
		assert placement.content is items[index]


#============================================
def test_items_past_capacity_are_ignored() -> None:
	items = [build_label_item() for _ in range(5)]
	page = sheet.layout_grid(items, 2, 2, 210.0, 297.0, 100, with_cut_lines=False)
	assert len(page.of_type(visual.Placement)) == 4


#============================================
def test_cut_lines_on_internal_boundaries() -> None:
	"""
	Cut lines sit on the internal boundaries and are painted last.
	"""
	items = [build_label_item()]
	page = sheet.layout_grid(items, 4, 2, 210.0, 297.0, 300, with_cut_lines=True)
	lines = page.of_type(visual.Line)
	horizontal = [line for line in lines if line.y1 == line.y2]
	vertical = [line for line in lines if line.x1 == line.x2]
	assert [line.y1 for line in horizontal] == [877, 1754, 2631]
	assert [line.x1 for line in vertical] == [1240]
	for line in lines:
		assert line.stroke == "#CCCCCC"
		assert line.stroke_width == 2.0
		assert line.dash == (10.0, 10.0)
	tail = page.primitives[-len(lines):]
	assert all(isinstance(primitive, visual.Line) for primitive in tail)
	assert horizontal[0].x2 == 2480
	assert vertical[0].y2 == 3508


#============================================
def test_single_cell_grid_has_no_cut_lines() -> None:
	page = sheet.layout_grid([build_label_item()], 1, 1, 210.0, 297.0, 100, with_cut_lines=True)
	assert page.of_type(visual.Line) == []


#============================================
def test_cut_lines_disabled() -> None:
	page = sheet.layout_grid([build_label_item()], 4, 2, 210.0, 297.0, 100, with_cut_lines=False)
	assert page.of_type(visual.Line) == []


#============================================
def test_number_sheet_adds_border_and_marks() -> None:
	"""
	Number items become centered marks and the page gets a gray border.
	"""
	page = sheet.layout_grid(
		[1, 2, 3],
		5,
		3,
		210.0,
		297.0,
		100,
		with_cut_lines=True,
		number_style=build_number_style(),
	)
	placements = page.of_type(visual.Placement)
	assert len(placements) == 3
	marks = [placement.content.of_type(visual.Text)[0].content for placement in placements]
	assert marks == ["001", "002", "003"]
	rects = page.of_type(visual.Rect)
	assert rects[0].fill == "#FFFFFF"
	assert rects[1].fill is None
	assert rects[1].stroke == "#808080"
	assert rects[1].stroke_width == 2.0
	assert len(page.of_type(visual.Line)) == 4 + 2


#============================================
def test_number_items_need_style() -> None:
	with pytest.raises(ValueError):
		sheet.layout_grid([1], 1, 1, 210.0, 297.0, 100, with_cut_lines=False)


#============================================
@pytest.mark.parametrize("count, capacity", [(0, 8), (1, 8), (8, 8), (9, 8), (31, 15), (45, 15)])
def test_chunk_items_sizes_and_order(count: int, capacity: int) -> None:
	"""
	Chunks cover the input in order with ceil(n / capacity) sheets.
	"""
	items = list(range(count))
	chunks = sheet.chunk_items(items, capacity)
	assert len(chunks) == -(-count // capacity)
	assert [item for chunk in chunks for item in chunk] == items
	for chunk in chunks[:-1]:
		assert len(chunk) == capacity
	if chunks:
		assert 1 <= len(chunks[-1]) <= capacity


#============================================
@pytest.mark.parametrize("capacity", [0, -1])
def test_chunk_items_rejects_bad_capacity(capacity: int) -> None:
	with pytest.raises(ValueError):
		sheet.chunk_items([1, 2, 3], capacity)
