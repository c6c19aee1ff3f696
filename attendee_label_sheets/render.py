"""
Rasterization, PNG and PDF writing, and the run manifest.
"""

# Standard Library
import hashlib
import io
import json
import math
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont
import pypdf
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.config
import attendee_label_sheets.visual


FontConfig = als.config.FontConfig
VisualDescription = als.visual.VisualDescription

mm_to_points = als.config.mm_to_points
round_half_up = als.config.round_half_up

DEFAULT_FONT_FAMILY = als.config.DEFAULT_FONT_FAMILY
FALLBACK_FONT_FAMILY = als.config.FALLBACK_FONT_FAMILY
BOLD_WEIGHT_MIN = als.config.BOLD_WEIGHT_MIN
BACKGROUND_COLOR = als.config.BACKGROUND_COLOR
PROGRESS_BAR_WIDTH = als.config.PROGRESS_BAR_WIDTH

# Pillow anchors: horizontal position, then vertical "middle".
PIL_ANCHORS = {
	als.visual.ANCHOR_START: "lm",
	als.visual.ANCHOR_MIDDLE: "mm",
	als.visual.ANCHOR_END: "rm",
}


#============================================
def read_font_asset(path: pathlib.Path | None) -> bytes | None:
	"""
	Read a font file into memory.

	Args:
		path: Font path or None.

	Returns:
		Font bytes, or None when the file is missing.
	"""
	if path is None:
		return None
	if not path.is_file():
		return None
	return path.read_bytes()


class FontRegistry:
	"""
	Pillow fonts keyed by family, size and weight.

	Asset bytes are embedded into each font so rendering does not depend on
	system-installed fonts. Other families are looked up on the system font
	path.
	"""

	def __init__(self, fonts: FontConfig, family: str = DEFAULT_FONT_FAMILY) -> None:
		self.family = family
		self.regular_data = read_font_asset(fonts.regular)
		self.bold_data = read_font_asset(fonts.bold)
		self.cache: dict[tuple[str, int, bool], tuple[PIL.ImageFont.FreeTypeFont, int]] = {}
		self.warned: set[str] = set()
		if fonts.regular is None:
			self.warn(f"no font file configured, using system font {FALLBACK_FONT_FAMILY}")
		elif self.regular_data is None:
			self.warn(
				f"font file not found: {fonts.regular}, using system font {FALLBACK_FONT_FAMILY}"
			)
		elif fonts.bold is not None and self.bold_data is None:
			self.warn(f"bold font file not found: {fonts.bold}, emboldening {fonts.regular}")

	def warn(self, message: str) -> None:
		if message in self.warned:
			return
		self.warned.add(message)
		print(f"Warning: {message}")

	@property
	def has_embedded(self) -> bool:
		return self.regular_data is not None

	def load_system(self, family: str, size: int) -> PIL.ImageFont.FreeTypeFont | None:
		"""
		Try a system font by family name.
		"""
		for name in (family, f"{family}.ttf"):
			try:
				return PIL.ImageFont.truetype(name, size)
			except OSError:
				continue
		return None

	def load(self, family: str, size: int, bold: bool) -> tuple[PIL.ImageFont.FreeTypeFont, int]:
		"""
		Load a font and the stroke width that emboldens it.

		Args:
			family: Font family name.
			size: Font size in pixels.
			bold: Whether a bold face is wanted.

		Returns:
			Tuple of (font, stroke width).
		"""
		if family == self.family and self.has_embedded:
			if bold and self.bold_data is not None:
				return (PIL.ImageFont.truetype(io.BytesIO(self.bold_data), size), 0)
			font = PIL.ImageFont.truetype(io.BytesIO(self.regular_data), size)
			return (font, embolden_width(size) if bold else 0)

		font = self.load_system(family, size)
		if font is None and family != self.family:
			self.warn(f"font family {family} not found on the system")
			if self.has_embedded:
				return self.load(self.family, size, bold)
		if font is None:
			font = self.load_system(FALLBACK_FONT_FAMILY, size)
		if font is None:
			self.warn("no TrueType font available, using the Pillow default font")
			font = PIL.ImageFont.load_default(size=size)
		return (font, embolden_width(size) if bold else 0)

	def get(self, family: str, size: float, weight: int) -> tuple[PIL.ImageFont.FreeTypeFont, int]:
		"""
		Return a cached font for a text primitive.
		"""
		pixel_size = max(1, round_half_up(size))
		bold = weight >= BOLD_WEIGHT_MIN
		key = (family, pixel_size, bold)
		if key not in self.cache:
			self.cache[key] = self.load(family, pixel_size, bold)
		return self.cache[key]


#============================================
def embolden_width(size: int) -> int:
	"""
	Stroke width that fakes a bold face from a regular one.
	"""
	return max(1, round_half_up(size / 40.0))


#============================================
def draw_rect(draw: PIL.ImageDraw.ImageDraw, rect: als.visual.Rect) -> None:
	"""
	Draw a filled and/or stroked rectangle.
	"""
	box = [rect.x, rect.y, rect.x + rect.width - 1, rect.y + rect.height - 1]
	if rect.stroke and rect.stroke_width > 0:
		width = max(1, round_half_up(rect.stroke_width))
		draw.rectangle(box, fill=rect.fill, outline=rect.stroke, width=width)
		return
	if rect.fill:
		draw.rectangle(box, fill=rect.fill)


#============================================
def draw_circle(draw: PIL.ImageDraw.ImageDraw, circle: als.visual.Circle) -> None:
	"""
	Draw a circle outline with the stroke centered on the radius.
	"""
	width = max(1, round_half_up(circle.stroke_width))
	outer = circle.radius + width / 2.0
	box = [
		circle.center_x - outer,
		circle.center_y - outer,
		circle.center_x + outer,
		circle.center_y + outer,
	]
	draw.ellipse(box, outline=circle.stroke, width=width)


#============================================
def draw_text(
	draw: PIL.ImageDraw.ImageDraw,
	text: als.visual.Text,
	fonts: FontRegistry,
) -> None:
	"""
	Draw a text primitive anchored on its vertical middle.
	"""
	if not text.content:
		return
	font, stroke_width = fonts.get(text.font_family, text.font_size, text.font_weight)
	draw.text(
		(text.x, text.y),
		text.content,
		fill=text.color,
		font=font,
		anchor=PIL_ANCHORS.get(text.anchor, "mm"),
		stroke_width=stroke_width,
		stroke_fill=text.color,
	)


#============================================
def draw_line(draw: PIL.ImageDraw.ImageDraw, line: als.visual.Line) -> None:
	"""
	Draw a solid or dashed line.
	"""
	width = max(1, round_half_up(line.stroke_width))
	if not line.dash:
		draw.line([(line.x1, line.y1), (line.x2, line.y2)], fill=line.stroke, width=width)
		return
	on_length, off_length = line.dash
	dx = line.x2 - line.x1
	dy = line.y2 - line.y1
	length = math.hypot(dx, dy)
	if length == 0 or on_length <= 0:
		return
	unit_x = dx / length
	unit_y = dy / length
	position = 0.0
	while position < length:
		end = min(position + on_length, length)
		start_point = (line.x1 + unit_x * position, line.y1 + unit_y * position)
		end_point = (line.x1 + unit_x * end, line.y1 + unit_y * end)
		draw.line([start_point, end_point], fill=line.stroke, width=width)
		position += on_length + off_length


#============================================
def render_layer(description: VisualDescription, fonts: FontRegistry) -> PIL.Image.Image:
	"""
	Rasterize a description onto a transparent RGBA canvas.

	Args:
		description: Visual description.
		fonts: Font registry.

	Returns:
		RGBA image sized to the description.
	"""
	image = PIL.Image.new("RGBA", (description.width, description.height), (255, 255, 255, 0))
	draw = PIL.ImageDraw.Draw(image)
	for primitive in description.primitives:
		if isinstance(primitive, als.visual.Rect):
			draw_rect(draw, primitive)
		elif isinstance(primitive, als.visual.Circle):
			draw_circle(draw, primitive)
		elif isinstance(primitive, als.visual.Text):
			draw_text(draw, primitive, fonts)
		elif isinstance(primitive, als.visual.MultilineText):
			for line_text in primitive.line_texts():
				draw_text(draw, line_text, fonts)
		elif isinstance(primitive, als.visual.Line):
			draw_line(draw, primitive)
		elif isinstance(primitive, als.visual.Placement):
			layer = render_layer(primitive.content, fonts)
			target = (primitive.width, primitive.height)
			if layer.size != target:
				layer = layer.resize(target, PIL.Image.Resampling.LANCZOS)
			image.alpha_composite(layer, dest=(primitive.x, primitive.y))
		else:
			raise TypeError(f"Unknown primitive: {type(primitive).__name__}")
	return image


#============================================
def rasterize(description: VisualDescription, fonts: FontRegistry) -> PIL.Image.Image:
	"""
	Rasterize a description to an RGB image on white.

	Args:
		description: Visual description.
		fonts: Font registry.

	Returns:
		RGB image.
	"""
	layer = render_layer(description, fonts)
	page = PIL.Image.new("RGBA", layer.size, BACKGROUND_COLOR)
	page.alpha_composite(layer)
	return page.convert("RGB")


#============================================
def write_png(image: PIL.Image.Image, output_path: pathlib.Path, dpi: int) -> None:
	"""
	Write a PNG with DPI metadata.
	"""
	output_path.parent.mkdir(parents=True, exist_ok=True)
	image.save(str(output_path), format="PNG", dpi=(dpi, dpi))


#============================================
def write_pdf(
	image: PIL.Image.Image,
	output_path: pathlib.Path,
	width_mm: float,
	height_mm: float,
) -> None:
	"""
	Write a single page PDF with the image filling the page.

	Args:
		image: Page raster.
		output_path: Output PDF path.
		width_mm: Page width in mm.
		height_mm: Page height in mm.
	"""
	output_path.parent.mkdir(parents=True, exist_ok=True)
	page_width = mm_to_points(width_mm)
	page_height = mm_to_points(height_mm)
	pdf = reportlab.pdfgen.canvas.Canvas(
		str(output_path),
		pagesize=(page_width, page_height),
		invariant=1,
	)
	pdf.drawImage(
		reportlab.lib.utils.ImageReader(image),
		0,
		0,
		width=page_width,
		height=page_height,
		mask=None,
		preserveAspectRatio=False,
		anchor="sw",
	)
	pdf.showPage()
	pdf.save()


#============================================
def merge_pdfs(pdf_paths: list[pathlib.Path], output_path: pathlib.Path) -> int:
	"""
	Concatenate PDFs into one document.

	Args:
		pdf_paths: Input PDFs in order.
		output_path: Output PDF path.

	Returns:
		Number of pages written.
	"""
	writer = pypdf.PdfWriter()
	for path in pdf_paths:
		reader = pypdf.PdfReader(str(path))
		for page in reader.pages:
			writer.add_page(page)
	output_path.parent.mkdir(parents=True, exist_ok=True)
	with output_path.open("wb") as handle:
		writer.write(handle)
	return len(writer.pages)


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def compute_file_hash(path: pathlib.Path) -> str:
	"""
	Compute SHA256 hash for a file.

	Args:
		path: File path.

	Returns:
		Hex digest.
	"""
	hasher = hashlib.sha256()
	with path.open("rb") as handle:
		for chunk in iter(lambda: handle.read(1024 * 1024), b""):
			hasher.update(chunk)
	return hasher.hexdigest()


#============================================
def write_manifest(manifest_path: pathlib.Path, data: dict) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		data: Manifest payload.
	"""
	manifest_path.parent.mkdir(parents=True, exist_ok=True)
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True, ensure_ascii=False)
