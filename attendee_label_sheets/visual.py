"""
Visual primitives shared by the composers and the rasterizer.

Coordinates are pixels with the origin at the top left. A description's
primitives are listed in paint order; later entries draw on top.
"""

# Standard Library
import dataclasses


ANCHOR_START = "start"
ANCHOR_MIDDLE = "middle"
ANCHOR_END = "end"


@dataclasses.dataclass(frozen=True)
class Rect:
	x: float
	y: float
	width: float
	height: float
	fill: str | None = "#FFFFFF"
	stroke: str | None = None
	stroke_width: float = 0.0


@dataclasses.dataclass(frozen=True)
class Circle:
	center_x: float
	center_y: float
	radius: float
	stroke: str
	stroke_width: float


@dataclasses.dataclass(frozen=True)
class Text:
	x: float
	y: float
	anchor: str
	content: str
	font_family: str
	font_size: float
	font_weight: int
	color: str


@dataclasses.dataclass(frozen=True)
class MultilineText:
	x: float
	y: float
	anchor: str
	lines: tuple[str, ...]
	line_offsets: tuple[float, ...]
	font_family: str
	font_size: float
	font_weight: int
	color: str

	def line_texts(self) -> list[Text]:
		"""
		Split the block into one Text per line.

		Returns:
			Text primitives in line order.
		"""
		return [
			Text(
				x=self.x,
				y=self.y + offset,
				anchor=self.anchor,
				content=line,
				font_family=self.font_family,
				font_size=self.font_size,
				font_weight=self.font_weight,
				color=self.color,
			)
			for line, offset in zip(self.lines, self.line_offsets)
		]


@dataclasses.dataclass(frozen=True)
class Line:
	x1: float
	y1: float
	x2: float
	y2: float
	stroke: str
	stroke_width: float
	dash: tuple[float, float] | None = None


@dataclasses.dataclass(frozen=True)
class Placement:
	x: int
	y: int
	width: int
	height: int
	content: "VisualDescription"


@dataclasses.dataclass(frozen=True)
class VisualDescription:
	width: int
	height: int
	primitives: tuple[Rect | Circle | Text | MultilineText | Line | Placement, ...]

	def of_type(self, kind: type) -> list:
		"""
		Return the primitives of one type in paint order.
		"""
		return [primitive for primitive in self.primitives if isinstance(primitive, kind)]
