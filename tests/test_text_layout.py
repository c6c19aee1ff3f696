import pytest

import attendee_label_sheets.text_layout as text_layout


#============================================
def test_empty_text_has_no_lines() -> None:
	assert text_layout.wrap_text("", 500, 20) == []


#============================================
def test_short_text_is_one_line() -> None:
	assert text_layout.wrap_text("IT - Acme", 500, 20) == ["IT - Acme"]


#============================================
def test_greedy_word_packing() -> None:
	"""
	57 px at 10 px font fits nine characters per line.
	"""
	assert text_layout.max_chars_per_line(57, 10) == 9
	assert text_layout.wrap_text("AAAA BBBB CCCC", 57, 10) == ["AAAA BBBB", "CCCC"]


#============================================
def test_long_word_is_hard_split() -> None:
	"""
	Words longer than the budget are cut into budget sized chunks.
	"""
	lines = text_layout.wrap_text("ABCDEFGHIJKLMNOPQRSTU XY", 57, 10)
	assert lines == ["ABCDEFGHI", "JKLMNOPQR", "STU XY"]


#============================================
def test_budget_is_at_least_one() -> None:
	assert text_layout.max_chars_per_line(1, 100) == 1
	assert text_layout.max_chars_per_line(100, 0) == 1
	assert text_layout.wrap_text("ABC", 1, 100) == ["A", "B", "C"]


#============================================
@pytest.mark.parametrize("width", [30, 57, 120, 250])
def test_lines_respect_budget_and_keep_words(width: int) -> None:
	"""
	No line exceeds the budget and the words come back in order.
	"""
	text = "Phong Ke Toan Tong Hop - Cong Ty Co Phan Dau Tu Xay Dung"
	limit = text_layout.max_chars_per_line(width, 10)
	lines = text_layout.wrap_text(text, width, 10)
	assert lines
	for line in lines:
		assert len(line) <= limit
	assert "".join(" ".join(lines).split()) == "".join(text.split())
