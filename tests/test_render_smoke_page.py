import pathlib

import fitz
import PIL.Image
import pypdf
import pytest

import attendee_label_sheets.compose as compose
import attendee_label_sheets.config as config_module
import attendee_label_sheets.records as records_module
import attendee_label_sheets.render as render
import attendee_label_sheets.sheet as sheet
import attendee_label_sheets.visual as visual


DPI = 50
INK_THRESHOLD = 240


#============================================
def _system_fonts() -> render.FontRegistry:
	return render.FontRegistry(config_module.FontConfig(regular=None, bold=None))


#============================================
def _render_pdf_first_page(path: pathlib.Path) -> PIL.Image.Image:
	"""
	Render the first page of a PDF to an image.

	Args:
		path: PDF path.

	Returns:
		PIL image.
	"""
	document = fitz.open(path)
	page = document[0]
	scale = DPI / 72.0
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image


#============================================
def _count_ink_ratio(gray: PIL.Image.Image, threshold: int) -> float:
	"""
	Compute the ink ratio for a grayscale strip.
	"""
	pixels = list(gray.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < threshold)
	return ink / len(pixels)


#============================================
def test_rendered_sheet_cut_lines(tmp_path: pathlib.Path) -> None:
	"""
	Smoke test a blank sheet PDF: ink on the cut lines, none elsewhere.
	"""
	description = sheet.layout_grid([], 4, 2, 210.0, 297.0, DPI, with_cut_lines=True)
	image = render.rasterize(description, _system_fonts())
	assert image.size == (description.width, description.height)
	output_pdf = tmp_path / "sheet.pdf"
	render.write_pdf(image, output_pdf, 210.0, 297.0)

	reader = pypdf.PdfReader(str(output_pdf))
	assert len(reader.pages) == 1
	box = reader.pages[0].mediabox
	assert float(box.width) == pytest.approx(config_module.mm_to_points(210.0), abs=0.01)
	assert float(box.height) == pytest.approx(config_module.mm_to_points(297.0), abs=0.01)

	gray = _render_pdf_first_page(output_pdf).convert("L")
	width, height = gray.size
	line_y = config_module.mm_to_px(74.25, DPI)
	line_x = config_module.mm_to_px(105.0, DPI)
	horizontal_band = gray.crop((0, line_y - 3, width, line_y + 3))
	vertical_band = gray.crop((line_x - 3, 0, line_x + 3, height))
	assert _count_ink_ratio(horizontal_band, INK_THRESHOLD) > 0.05
	assert _count_ink_ratio(vertical_band, INK_THRESHOLD) > 0.05

	empty_cell = gray.crop((10, 10, line_x - 10, line_y - 10))
	assert _count_ink_ratio(empty_cell, INK_THRESHOLD) == 0.0


#============================================
def test_dashed_line_pattern() -> None:
	"""
	Dashes alternate ink and gaps along the line.
	"""
	line = visual.Line(x1=0, y1=10, x2=100, y2=10, stroke="#000000", stroke_width=2.0, dash=(10.0, 10.0))
	description = visual.VisualDescription(width=100, height=20, primitives=(line,))
	gray = render.rasterize(description, _system_fonts()).convert("L")
	band_on = gray.crop((2, 7, 8, 13))
	band_off = gray.crop((12, 0, 18, 20))
	assert min(band_on.getdata()) < 128
	assert min(band_off.getdata()) == 255


#============================================
def test_circle_stroke_centered_on_radius() -> None:
	circle = visual.Circle(center_x=50, center_y=50, radius=30, stroke="#000000", stroke_width=4)
	description = visual.VisualDescription(width=100, height=100, primitives=(circle,))
	image = render.rasterize(description, _system_fonts())
	assert image.getpixel((50, 20)) == (0, 0, 0)
	assert image.getpixel((50, 50)) == (255, 255, 255)
	assert image.getpixel((50, 5)) == (255, 255, 255)


#============================================
def test_circle_sheet_border_and_marks() -> None:
	"""
	Circle sheets carry a gray page border and one ring per number.
	"""
	config = config_module.GeneratorConfig()
	number_style = sheet.NumberStyle(circle=config.circle, text=config.stt, font_size=40.0)
	description = sheet.layout_grid(
		[1, 2],
		5,
		3,
		210.0,
		297.0,
		DPI,
		with_cut_lines=False,
		number_style=number_style,
	)
	image = render.rasterize(description, _system_fonts())
	assert image.getpixel((0, 50)) == (128, 128, 128)
	cell_w = config_module.mm_to_px(70.0, DPI)
	cell_h = config_module.mm_to_px(59.4, DPI)
	first_cell = image.crop((1, 1, cell_w, cell_h)).convert("L")
	third_cell = image.crop((2 * cell_w, 2, 3 * cell_w - 4, cell_h)).convert("L")
	assert _count_ink_ratio(first_cell, INK_THRESHOLD) > 0.0
	assert _count_ink_ratio(third_cell, INK_THRESHOLD) == 0.0


#============================================
def test_label_raster_matches_page_size(tmp_path: pathlib.Path) -> None:
	"""
	A label PNG carries the page size in pixels and the DPI metadata.
	"""
	config = config_module.GeneratorConfig()
	record = build_record()
	description = compose.compose_label(record, config)
	image = render.rasterize(description, _system_fonts())
	assert image.mode == "RGB"
	assert image.size == (1240, 1754)
	gray = image.convert("L")
	assert _count_ink_ratio(gray, INK_THRESHOLD) > 0.0

	output_path = tmp_path / "labels" / "label_007.png"
	render.write_png(image, output_path, 300)
	with PIL.Image.open(output_path) as reloaded:
		assert reloaded.size == (1240, 1754)
		dpi_x, dpi_y = reloaded.info["dpi"]
	assert dpi_x == pytest.approx(300, abs=0.1)
	assert dpi_y == pytest.approx(300, abs=0.1)


#============================================
def build_record() -> records_module.Record:
	"""
	Build one record for raster tests.
	"""
	return records_module.Record(
		identifier="7",
		name="AN NGUYEN",
		code="E7",
		department="IT",
		company="Acme",
		position=1,
		sequence=7,
		identifier_is_numeric=True,
	)


#============================================
def test_merge_pdfs_concatenates_pages(tmp_path: pathlib.Path) -> None:
	image = PIL.Image.new("RGB", (40, 60), "#FFFFFF")
	first = tmp_path / "a.pdf"
	second = tmp_path / "b.pdf"
	render.write_pdf(image, first, 40.0, 60.0)
	render.write_pdf(image, second, 40.0, 60.0)
	combined = tmp_path / "all" / "combined.pdf"
	pages = render.merge_pdfs([first, second], combined)
	assert pages == 2
	assert len(pypdf.PdfReader(str(combined)).pages) == 2


#============================================
def test_pdf_output_is_deterministic(tmp_path: pathlib.Path) -> None:
	image = PIL.Image.new("RGB", (40, 60), "#FFFFFF")
	first = tmp_path / "a" / "sheet.pdf"
	second = tmp_path / "b" / "sheet.pdf"
	render.write_pdf(image, first, 40.0, 60.0)
	render.write_pdf(image, second, 40.0, 60.0)
	assert render.compute_file_hash(first) == render.compute_file_hash(second)


#============================================
def test_font_warning_printed_once(capsys) -> None:
	fonts = _system_fonts()
	first = fonts.get(config_module.DEFAULT_FONT_FAMILY, 20, 400)
	second = fonts.get(config_module.DEFAULT_FONT_FAMILY, 20, 400)
	assert first is second
	fonts.get(config_module.DEFAULT_FONT_FAMILY, 20, 700)
	output = capsys.readouterr().out
	assert output.count("no font file configured") == 1
