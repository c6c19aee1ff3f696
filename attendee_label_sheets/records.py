"""
CSV reading, column alias resolution and record filtering.
"""

# Standard Library
import csv
import dataclasses
import pathlib
import unicodedata

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.config


InputNotFoundError = als.config.InputNotFoundError

GUEST_SENTINEL = als.config.GUEST_SENTINEL
IDENTIFIER_WIDTH = als.config.IDENTIFIER_WIDTH


@dataclasses.dataclass(frozen=True)
class FieldMatcher:
	field: str
	exact: tuple[str, ...]
	fragments: tuple[str, ...]


# Evaluated top to bottom; exact names first, then lowercase fragments.
FIELD_MATCHERS = (
	FieldMatcher("identifier", ("STT", "stt", "Stt"), ("stt", "số thứ tự")),
	FieldMatcher("name", ("Name", "NAME", "name", "Tên", "TÊN", "tên"), ("họ và tên", "họ tên", "name")),
	FieldMatcher("code", ("Code", "CODE", "code"), ("code", "mã", "ma nv")),
	FieldMatcher(
		"department",
		("Department", "department", "DEPARTMENT"),
		("department", "phòng ban", "bộ phận", "phòng"),
	),
	FieldMatcher("company", ("Company", "company", "COMPANY"), ("company", "công ty")),
)


@dataclasses.dataclass(frozen=True)
class Record:
	identifier: str
	name: str
	code: str
	department: str
	company: str
	position: int
	sequence: int
	identifier_is_numeric: bool

	@property
	def display_identifier(self) -> str:
		if not self.identifier:
			return ""
		return self.identifier.rjust(IDENTIFIER_WIDTH, "0")

	@property
	def department_company(self) -> str:
		if self.department and self.company:
			return f"{self.department} - {self.company}"
		return self.department or self.company


@dataclasses.dataclass(frozen=True)
class RejectedRow:
	position: int
	reason: str


#============================================
def fold_text(value: str) -> str:
	"""
	Fold text for case-insensitive comparison.

	Args:
		value: Input text.

	Returns:
		NFC normalized, casefolded text.
	"""
	return unicodedata.normalize("NFC", value).strip().casefold()


#============================================
def find_input_csv(candidates: list[pathlib.Path]) -> pathlib.Path:
	"""
	Return the first candidate CSV that exists.

	Args:
		candidates: Ordered candidate paths.

	Returns:
		Existing CSV path.
	"""
	for path in candidates:
		if path.is_file():
			return path
	tried = "\n".join(f"  - {path}" for path in candidates)
	raise InputNotFoundError(f"No input CSV found. Tried:\n{tried}")


#============================================
def read_rows(path: pathlib.Path) -> tuple[list[str], list[dict[str, str]]]:
	"""
	Read a CSV file with a header row.

	Args:
		path: CSV path.

	Returns:
		Tuple of (header names, rows). Blank rows are skipped.
	"""
	rows: list[dict[str, str]] = []
	with path.open("r", encoding="utf-8-sig", newline="") as handle:
		reader = csv.DictReader(handle)
		headers = list(reader.fieldnames or [])
		for row in reader:
			values = [value for key, value in row.items() if key is not None]
			if not any((value or "").strip() for value in values):
				continue
			rows.append(row)
	return headers, rows


#============================================
def match_column(headers: list[str], matcher: FieldMatcher) -> str | None:
	"""
	Find the column that holds a logical field.

	Args:
		headers: Header names in file order.
		matcher: Matcher rule for the field.

	Returns:
		Column name or None.
	"""
	for name in matcher.exact:
		if name in headers:
			return name
	folded_headers = [(header, fold_text(header)) for header in headers if header is not None]
	# fragments are ordered most specific first
	for fragment in matcher.fragments:
		for header, folded in folded_headers:
			if fragment in folded:
				return header
	return None


#============================================
def resolve_columns(headers: list[str]) -> dict[str, str | None]:
	"""
	Resolve every logical field to a column name.

	Args:
		headers: Header names in file order.

	Returns:
		Mapping of field name to column name or None.
	"""
	return {matcher.field: match_column(headers, matcher) for matcher in FIELD_MATCHERS}


#============================================
def resolve_field(row: dict[str, str], column: str | None) -> str:
	"""
	Read a trimmed field value, empty when the column is missing.
	"""
	if column is None:
		return ""
	value = row.get(column)
	if value is None:
		return ""
	return str(value).strip()


#============================================
def is_guest_code(code: str) -> bool:
	"""
	Check whether a code is the guest sentinel.
	"""
	return fold_text(code) == fold_text(GUEST_SENTINEL)


#============================================
def rejection_reason(name: str, code: str) -> str | None:
	"""
	Explain why a row cannot become a record.

	Args:
		name: Trimmed name.
		code: Trimmed code.

	Returns:
		Reason text, or None for a valid row.
	"""
	if not code:
		return "code is empty"
	if is_guest_code(code):
		return f"code is '{code}' (guest)"
	if not name:
		return "name is empty"
	return None


#============================================
def parse_identifier(identifier: str) -> int | None:
	"""
	Parse an identifier as an integer.
	"""
	try:
		return int(identifier)
	except ValueError:
		return None


#============================================
def normalize_rows(
	rows: list[dict[str, str]],
	headers: list[str] | None = None,
) -> tuple[list[Record], list[RejectedRow]]:
	"""
	Normalize raw CSV rows into records.

	Args:
		rows: Raw rows in file order.
		headers: Header names; taken from the first row when missing.

	Returns:
		Tuple of (records, rejected rows).
	"""
	if headers is None:
		headers = list(rows[0].keys()) if rows else []
	columns = resolve_columns(headers)

	records: list[Record] = []
	rejected: list[RejectedRow] = []
	for position, row in enumerate(rows, start=1):
		identifier = resolve_field(row, columns["identifier"])
		name = resolve_field(row, columns["name"])
		code = resolve_field(row, columns["code"])
		reason = rejection_reason(name, code)
		if reason is not None:
			rejected.append(RejectedRow(position=position, reason=reason))
			continue
		number = parse_identifier(identifier)
		# fallback numbering follows the filtered order
		sequence = number if number is not None else len(records) + 1
		records.append(
			Record(
				identifier=identifier,
				name=name.upper(),
				code=code.upper(),
				department=resolve_field(row, columns["department"]),
				company=resolve_field(row, columns["company"]),
				position=position,
				sequence=sequence,
				identifier_is_numeric=number is not None,
			)
		)
	return records, rejected
