"""
Heuristic text wrapping.

Line breaks are estimated from character counts with an average glyph width of
0.6 x font size. No font metrics are consulted, so wrap points are approximate
and can be off for condensed, wide or non-Latin glyphs.
"""

# Standard Library
import math

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.config


GLYPH_WIDTH_RATIO = als.config.GLYPH_WIDTH_RATIO


#============================================
def max_chars_per_line(max_width_px: float, font_size_px: float) -> int:
	"""
	Estimate how many characters fit on a line.

	Args:
		max_width_px: Available width in pixels.
		font_size_px: Font size in pixels.

	Returns:
		Character budget, at least 1.
	"""
	glyph_width = font_size_px * GLYPH_WIDTH_RATIO
	if glyph_width <= 0:
		return 1
	return max(1, math.floor(max_width_px / glyph_width))


#============================================
def wrap_text(text: str, max_width_px: float, font_size_px: float) -> list[str]:
	"""
	Wrap text into lines that fit an estimated character budget.

	Args:
		text: Input text.
		max_width_px: Available width in pixels.
		font_size_px: Font size in pixels.

	Returns:
		Lines in order. Empty input gives an empty list.
	"""
	if not text:
		return []
	limit = max_chars_per_line(max_width_px, font_size_px)
	if len(text) <= limit:
		return [text]

	lines: list[str] = []
	current = ""
	for word in text.split():
		candidate = f"{current} {word}" if current else word
		if len(candidate) <= limit:
			current = candidate
			continue
		if current:
			lines.append(current)
		remaining = word
		while len(remaining) > limit:
			lines.append(remaining[:limit])
			remaining = remaining[limit:]
		current = remaining
	if current:
		lines.append(current)
	return lines
