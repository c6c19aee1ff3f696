"""
Shared configuration, constants and errors.
"""

# Standard Library
import dataclasses
import json
import math
import pathlib

# PIP3 modules
import PIL.ImageColor


MM_PER_INCH = 25.4
POINTS_PER_MM = 2.83465
DEFAULT_DPI = 300

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0

DEFAULT_PAGE_WIDTH_MM = 105.0
DEFAULT_PAGE_HEIGHT_MM = 148.5

DEFAULT_FONT_FAMILY = "RobotoCondensed"
FALLBACK_FONT_FAMILY = "DejaVuSans"
DEFAULT_FONT_REGULAR = "fonts/static/RobotoCondensed-Regular.ttf"
DEFAULT_FONT_BOLD = "fonts/static/RobotoCondensed-Bold.ttf"
BOLD_WEIGHT_MIN = 600
DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_LINE_HEIGHT = 1.2
WRAP_WIDTH_RATIO = 0.9
GLYPH_WIDTH_RATIO = 0.6

DEFAULT_RADIUS_RATIO = 0.35
DEFAULT_STROKE_COLOR = "#000000"
DEFAULT_STROKE_WIDTH = 4.0
DEFAULT_NUMBER_FONT_SIZE = 250.0

BACKGROUND_COLOR = "#FFFFFF"
PAGE_BORDER_COLOR = "#808080"
PAGE_BORDER_WIDTH = 2.0
CUT_LINE_COLOR = "#CCCCCC"
CUT_LINE_WIDTH = 2.0
CUT_LINE_DASH = (10.0, 10.0)

GUEST_SENTINEL = "Khách mời"
IDENTIFIER_WIDTH = 3

PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

DEFAULT_CONFIG_NAME = "config.json"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_INPUT_CANDIDATES = (
	"resources/DataMain30-01.csv",
	"resources/DataTest.csv",
	"input.csv",
)

FONT_WEIGHTS = {
	"thin": 100,
	"extralight": 200,
	"light": 300,
	"normal": 400,
	"regular": 400,
	"medium": 500,
	"semibold": 600,
	"bold": 700,
	"extrabold": 800,
	"black": 900,
}

ORIENTATIONS = ("portrait", "landscape")


class LabelSheetError(Exception):
	"""Base error for fatal generator failures."""


class ConfigError(LabelSheetError):
	"""Raised when the configuration document is invalid."""


class ConfigNotFoundError(ConfigError, FileNotFoundError):
	"""Raised when the configuration document does not exist."""


class InputNotFoundError(LabelSheetError, FileNotFoundError):
	"""Raised when no candidate input CSV exists."""


class NoValidRecordsError(LabelSheetError):
	"""Raised when filtering leaves no record to render."""


@dataclasses.dataclass(frozen=True)
class PageConfig:
	width_mm: float = DEFAULT_PAGE_WIDTH_MM
	height_mm: float = DEFAULT_PAGE_HEIGHT_MM
	dpi: int = DEFAULT_DPI


@dataclasses.dataclass(frozen=True)
class FieldStyle:
	x: float | str = "center"
	y: float = 0.0
	align: str = "center"
	font_family: str = DEFAULT_FONT_FAMILY
	font_size: float = 20.0
	font_weight: int = 400
	color: str = DEFAULT_TEXT_COLOR
	line_height: float = DEFAULT_LINE_HEIGHT
	padding_left: float | None = None
	padding_right: float | None = None


@dataclasses.dataclass(frozen=True)
class CircleStyle:
	radius_ratio: float = DEFAULT_RADIUS_RATIO
	radius_px: float | None = None
	stroke_color: str = DEFAULT_STROKE_COLOR
	line_width: float = DEFAULT_STROKE_WIDTH


@dataclasses.dataclass(frozen=True)
class SheetConfig:
	orientation: str = "portrait"
	rows: int = 4
	columns: int = 2
	cut_lines: bool = True
	font_size: float = DEFAULT_NUMBER_FONT_SIZE

	@property
	def capacity(self) -> int:
		return self.rows * self.columns


@dataclasses.dataclass(frozen=True)
class FontConfig:
	regular: pathlib.Path | None = pathlib.Path(DEFAULT_FONT_REGULAR)
	bold: pathlib.Path | None = pathlib.Path(DEFAULT_FONT_BOLD)


DEFAULT_STT_STYLE = FieldStyle(y=50.0, font_size=80.0, font_weight=700)
DEFAULT_NAME_STYLE = FieldStyle(y=105.0, font_size=28.0)
DEFAULT_CODE_STYLE = FieldStyle(y=117.0, font_size=22.0)
DEFAULT_DEPARTMENT_STYLE = FieldStyle(y=130.0, font_size=20.0)
DEFAULT_LABEL_SHEET = SheetConfig(rows=4, columns=2)
DEFAULT_CIRCLE_SHEET = SheetConfig(rows=5, columns=3)


@dataclasses.dataclass(frozen=True)
class GeneratorConfig:
	page: PageConfig = PageConfig()
	stt: FieldStyle = DEFAULT_STT_STYLE
	name: FieldStyle = DEFAULT_NAME_STYLE
	code: FieldStyle = DEFAULT_CODE_STYLE
	department_company: FieldStyle = DEFAULT_DEPARTMENT_STYLE
	circle: CircleStyle = CircleStyle()
	label_sheet: SheetConfig = DEFAULT_LABEL_SHEET
	circle_sheet: SheetConfig = DEFAULT_CIRCLE_SHEET
	fonts: FontConfig = FontConfig()
	input_candidates: tuple[pathlib.Path, ...] = tuple(
		pathlib.Path(entry) for entry in DEFAULT_INPUT_CANDIDATES
	)
	output_dir: pathlib.Path = pathlib.Path(DEFAULT_OUTPUT_DIR)


@dataclasses.dataclass
class RunSummary:
	input_path: str
	mode: str
	rows_read: int = 0
	valid_records: int = 0
	rejected_rows: int = 0
	labels_written: int = 0
	label_sheets_written: int = 0
	circle_sheets_written: int = 0
	circle_records_skipped: int = 0
	outputs: list[str] = dataclasses.field(default_factory=list)
	timings: dict[str, float] = dataclasses.field(default_factory=dict)

	@property
	def sheets_written(self) -> int:
		return self.label_sheets_written + self.circle_sheets_written


#============================================
def round_half_up(value: float) -> int:
	"""
	Round to the nearest integer with ties away from zero.

	Args:
		value: Value to round.

	Returns:
		Rounded integer.
	"""
	return int(math.copysign(math.floor(abs(value) + 0.5), value))


#============================================
def mm_to_px(length_mm: float, dpi: float) -> int:
	"""
	Convert millimeters to pixels at a resolution.

	Args:
		length_mm: Length in millimeters.
		dpi: Dots per inch.

	Returns:
		Pixel count.
	"""
	return round_half_up(length_mm / MM_PER_INCH * dpi)


#============================================
def mm_to_points(length_mm: float) -> float:
	"""
	Convert millimeters to PDF points.

	Args:
		length_mm: Length in millimeters.

	Returns:
		Points value.
	"""
	return length_mm * POINTS_PER_MM


#============================================
def parse_font_weight(value: object, default_value: int) -> int:
	"""
	Map a CSS style font weight to its number.

	Args:
		value: Weight name like "bold", or a number.
		default_value: Fallback when value is missing.

	Returns:
		Numeric weight.
	"""
	if value is None or value == "":
		return default_value
	if isinstance(value, bool):
		raise ConfigError(f"Invalid font weight: {value!r}")
	if isinstance(value, (int, float)):
		return int(value)
	text = str(value).strip().lower()
	if text.isdigit():
		return int(text)
	# unknown names render as normal
	return FONT_WEIGHTS.get(text, 400)


#============================================
def parse_color(value: object, default_value: str) -> str:
	"""
	Validate a color string.

	Args:
		value: Color string like "#AABBCC".
		default_value: Fallback when value is missing.

	Returns:
		Color string.
	"""
	if value is None or value == "":
		return default_value
	text = str(value).strip()
	try:
		PIL.ImageColor.getrgb(text)
	except ValueError as error:
		raise ConfigError(f"Invalid color: {text!r}") from error
	return text


#============================================
def parse_number(value: object, default_value: float | None, key: str) -> float | None:
	"""
	Parse an optional number field.

	Args:
		value: Raw JSON value.
		default_value: Fallback when value is missing.
		key: Key name for error messages.

	Returns:
		Float value or the default.
	"""
	if value is None or value == "":
		return default_value
	if isinstance(value, bool):
		raise ConfigError(f"Invalid number for {key}: {value!r}")
	try:
		number = float(value)
	except (TypeError, ValueError, OverflowError) as error:
		raise ConfigError(f"Invalid number for {key}: {value!r}") from error
	if not math.isfinite(number):
		raise ConfigError(f"Number for {key} must be finite, got {value!r}")
	return number


#============================================
def parse_positive_int(value: object, default_value: int, key: str) -> int:
	"""
	Parse a positive integer field.
	"""
	if value is None:
		return default_value
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise ConfigError(f"Invalid integer for {key}: {value!r}")
	if isinstance(value, float) and not value.is_integer():
		raise ConfigError(f"Invalid integer for {key}: {value!r}")
	if value <= 0:
		raise ConfigError(f"{key} must be positive, got {value}")
	return int(value)


#============================================
def parse_x_value(value: object) -> float | str:
	"""
	Keep an x position as given when it is a number or a numeric string.

	Args:
		value: Raw JSON value.

	Returns:
		Number in mm, or a string token.
	"""
	if value is None:
		return "center"
	if isinstance(value, bool):
		return "center"
	if isinstance(value, (int, float)):
		try:
			number = float(value)
		except OverflowError:
			return "center"
		if not math.isfinite(number):
			return "center"
		return number
	return str(value)


#============================================
def parse_bool(value: object, default_value: bool, key: str) -> bool:
	"""
	Parse a JSON boolean field.
	"""
	if value is None:
		return default_value
	if not isinstance(value, bool):
		raise ConfigError(f"{key} must be true or false, got {value!r}")
	return value


#============================================
def get_section(data: dict, key: str) -> dict:
	"""
	Return a JSON object section, empty when missing.

	Args:
		data: Parent JSON object.
		key: Section name.

	Returns:
		Section dict.
	"""
	section = data.get(key)
	if section is None:
		return {}
	if not isinstance(section, dict):
		raise ConfigError(f"{key} must be a JSON object, got {type(section).__name__}")
	return section


#============================================
def parse_field_style(data: dict | None, defaults: FieldStyle) -> FieldStyle:
	"""
	Build a field style from a JSON section.

	Args:
		data: JSON section or None.
		defaults: Style used for missing keys.

	Returns:
		FieldStyle.
	"""
	data = data or {}
	align = str(data.get("align") or defaults.align).strip().lower()
	return FieldStyle(
		x=parse_x_value(data.get("x", defaults.x)),
		y=parse_number(data.get("y"), defaults.y, "y"),
		align=align,
		font_family=str(data.get("fontFamily") or defaults.font_family),
		font_size=parse_number(data.get("fontSize"), defaults.font_size, "fontSize"),
		font_weight=parse_font_weight(data.get("fontWeight"), defaults.font_weight),
		color=parse_color(data.get("color"), defaults.color),
		line_height=parse_number(data.get("lineHeight"), defaults.line_height, "lineHeight"),
		padding_left=parse_number(data.get("paddingLeft"), defaults.padding_left, "paddingLeft"),
		padding_right=parse_number(data.get("paddingRight"), defaults.padding_right, "paddingRight"),
	)


#============================================
def parse_circle_style(data: dict | None) -> CircleStyle:
	"""
	Build the circle style from a JSON section.
	"""
	data = data or {}
	defaults = CircleStyle()
	return CircleStyle(
		radius_ratio=parse_number(data.get("radiusRatio"), defaults.radius_ratio, "radiusRatio"),
		radius_px=parse_number(data.get("radiusPx"), defaults.radius_px, "radiusPx"),
		stroke_color=parse_color(data.get("strokeColor"), defaults.stroke_color),
		line_width=parse_number(data.get("lineWidth"), defaults.line_width, "lineWidth"),
	)


#============================================
def parse_sheet_config(data: dict | None, defaults: SheetConfig, key: str) -> SheetConfig:
	"""
	Build a sheet config from a JSON section.

	Args:
		data: JSON section or None.
		defaults: Sheet defaults.
		key: Section name for error messages.

	Returns:
		SheetConfig.
	"""
	data = data or {}
	orientation = str(data.get("orientation") or defaults.orientation).strip().lower()
	if orientation not in ORIENTATIONS:
		raise ConfigError(f"{key}.orientation must be one of {ORIENTATIONS}, got {orientation!r}")
	return SheetConfig(
		orientation=orientation,
		rows=parse_positive_int(data.get("rows"), defaults.rows, f"{key}.rows"),
		columns=parse_positive_int(data.get("columns"), defaults.columns, f"{key}.columns"),
		cut_lines=parse_bool(data.get("cutLines"), defaults.cut_lines, f"{key}.cutLines"),
		font_size=parse_number(data.get("fontSize"), defaults.font_size, f"{key}.fontSize"),
	)


#============================================
def resolve_path(value: object, base_dir: pathlib.Path) -> pathlib.Path:
	"""
	Resolve a config path relative to the config directory.
	"""
	path = pathlib.Path(str(value)).expanduser()
	if path.is_absolute():
		return path
	return base_dir / path


#============================================
def parse_config(data: dict, base_dir: pathlib.Path) -> GeneratorConfig:
	"""
	Build a GeneratorConfig from a parsed JSON document.

	Args:
		data: Parsed JSON document.
		base_dir: Directory that relative paths resolve against.

	Returns:
		GeneratorConfig.
	"""
	if not isinstance(data, dict):
		raise ConfigError("Configuration root must be a JSON object")

	page_data = get_section(data, "page")
	width_mm = parse_number(page_data.get("width_mm"), DEFAULT_PAGE_WIDTH_MM, "page.width_mm")
	height_mm = parse_number(page_data.get("height_mm"), DEFAULT_PAGE_HEIGHT_MM, "page.height_mm")
	if width_mm <= 0 or height_mm <= 0:
		raise ConfigError(f"Page size must be positive, got {width_mm} x {height_mm} mm")
	page = PageConfig(
		width_mm=width_mm,
		height_mm=height_mm,
		dpi=parse_positive_int(page_data.get("dpi"), DEFAULT_DPI, "page.dpi"),
	)

	fonts_data = get_section(data, "fonts")
	regular = fonts_data.get("regular", DEFAULT_FONT_REGULAR)
	bold = fonts_data.get("bold", DEFAULT_FONT_BOLD)
	fonts = FontConfig(
		regular=resolve_path(regular, base_dir) if regular else None,
		bold=resolve_path(bold, base_dir) if bold else None,
	)

	input_data = get_section(data, "input")
	candidates = input_data.get("candidates") or list(DEFAULT_INPUT_CANDIDATES)
	if isinstance(candidates, str):
		candidates = [candidates]
	if not isinstance(candidates, list) or not all(isinstance(entry, str) for entry in candidates):
		raise ConfigError("input.candidates must be a path or a list of paths")
	output_data = get_section(data, "output")
	output_dir = output_data.get("dir") or DEFAULT_OUTPUT_DIR

	config = GeneratorConfig(
		page=page,
		stt=parse_field_style(get_section(data, "stt"), DEFAULT_STT_STYLE),
		name=parse_field_style(get_section(data, "name"), DEFAULT_NAME_STYLE),
		code=parse_field_style(get_section(data, "code"), DEFAULT_CODE_STYLE),
		department_company=parse_field_style(get_section(data, "departmentCompany"), DEFAULT_DEPARTMENT_STYLE),
		circle=parse_circle_style(get_section(data, "circle")),
		label_sheet=parse_sheet_config(get_section(data, "labelSheet"), DEFAULT_LABEL_SHEET, "labelSheet"),
		circle_sheet=parse_sheet_config(get_section(data, "circleSheet"), DEFAULT_CIRCLE_SHEET, "circleSheet"),
		fonts=fonts,
		input_candidates=tuple(resolve_path(entry, base_dir) for entry in candidates),
		output_dir=resolve_path(output_dir, base_dir),
	)
	return config


#============================================
def load_config(path: pathlib.Path) -> GeneratorConfig:
	"""
	Load the generator configuration from a JSON file.

	Args:
		path: Config file path.

	Returns:
		GeneratorConfig.
	"""
	if not path.is_file():
		raise ConfigNotFoundError(f"Configuration file not found: {path}")
	text = path.read_text(encoding="utf-8")
	try:
		data = json.loads(text)
	except json.JSONDecodeError as error:
		raise ConfigError(f"Invalid JSON in {path}: {error}") from error
	return parse_config(data, path.resolve().parent)
