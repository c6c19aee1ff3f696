"""
Batch driver: records in, labels and sheets out.
"""

# Standard Library
import dataclasses
import pathlib
import time

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.compose
import attendee_label_sheets.config
import attendee_label_sheets.records
import attendee_label_sheets.render
import attendee_label_sheets.sheet
import attendee_label_sheets.visual


GeneratorConfig = als.config.GeneratorConfig
RunSummary = als.config.RunSummary
NoValidRecordsError = als.config.NoValidRecordsError
Record = als.records.Record
RejectedRow = als.records.RejectedRow
FontRegistry = als.render.FontRegistry

PROGRESS_UPDATE_EVERY = als.config.PROGRESS_UPDATE_EVERY

MODE_LABELS = "labels"
MODE_CIRCLES = "circles"
MODE_ALL = "all"
MODES = (MODE_LABELS, MODE_CIRCLES, MODE_ALL)

LABELS_DIR = "labels"
LABEL_SHEETS_DIR = "label_sheets"
CIRCLE_SHEETS_DIR = "circle_sheets"
MANIFEST_NAME = "manifest.json"


#============================================
def load_records(
	input_path: pathlib.Path,
	max_records: int | None = None,
) -> tuple[int, list[Record], list[RejectedRow]]:
	"""
	Read, normalize and filter the input CSV.

	Args:
		input_path: CSV path.
		max_records: Optional limit on valid records kept.

	Returns:
		Tuple of (rows read, records, rejected rows).
	"""
	headers, rows = als.records.read_rows(input_path)
	print(f"Rows read: {len(rows)}")
	records, rejected = als.records.normalize_rows(rows, headers)
	for row in rejected:
		print(f"Warning: skipping row {row.position}: {row.reason}")
	if not records:
		raise NoValidRecordsError(f"No valid records in {input_path}")
	if max_records is not None:
		records = records[:max_records]
	return len(rows), records, rejected


#============================================
def label_file_name(record: Record) -> str:
	"""
	Build the per-record PNG name.
	"""
	return f"label_{record.sequence:03d}.png"


#============================================
def sheet_file_stem(prefix: str, sheet_index: int) -> str:
	"""
	Build a sheet file stem from a 1-based sheet index.
	"""
	return f"{prefix}_{sheet_index:03d}"


#============================================
def generate_labels(
	records: list[Record],
	config: GeneratorConfig,
	fonts: FontRegistry,
	output_dir: pathlib.Path,
	verbose: bool = False,
) -> list[pathlib.Path]:
	"""
	Write one PNG label per record.

	Args:
		records: Valid records in order.
		config: Generator configuration.
		fonts: Font registry.
		output_dir: Labels directory.
		verbose: Print one line per label instead of a progress bar.

	Returns:
		Written PNG paths.
	"""
	written: list[pathlib.Path] = []
	seen: set[str] = set()
	total = len(records)
	if total > 0 and not verbose:
		als.render.print_progress("Labels", 0, total)
	for index, record in enumerate(records, start=1):
		file_name = label_file_name(record)
		if file_name in seen:
			print(f"\nWarning: row {record.position} overwrites {file_name}")
		seen.add(file_name)
		description = als.compose.compose_label(record, config)
		image = als.render.rasterize(description, fonts)
		output_path = output_dir / file_name
		als.render.write_png(image, output_path, config.page.dpi)
		written.append(output_path)
		if verbose:
			print(f"Label written: {file_name}")
		elif index % PROGRESS_UPDATE_EVERY == 0 or index == total:
			als.render.print_progress("Labels", index, total)
	if total > 0 and not verbose:
		print()
	return written


#============================================
def write_sheet(
	description: als.visual.VisualDescription,
	layout: als.sheet.PageLayout,
	fonts: FontRegistry,
	png_path: pathlib.Path,
	pdf_path: pathlib.Path,
) -> None:
	"""
	Rasterize a sheet and write it as PNG and PDF.
	"""
	image = als.render.rasterize(description, fonts)
	als.render.write_png(image, png_path, layout.dpi)
	als.render.write_pdf(image, pdf_path, layout.width_mm, layout.height_mm)


#============================================
def generate_label_sheets(
	records: list[Record],
	config: GeneratorConfig,
	fonts: FontRegistry,
	output_dir: pathlib.Path,
) -> list[pathlib.Path]:
	"""
	Impose labels onto multi-up sheets.

	Args:
		records: Valid records in order.
		config: Generator configuration.
		fonts: Font registry.
		output_dir: Label sheets directory.

	Returns:
		Written sheet PDF paths.
	"""
	sheet_config = config.label_sheet
	layout = als.sheet.sheet_layout(sheet_config, config.page.dpi)
	chunks = als.sheet.chunk_items(records, layout.capacity)
	print(f"Label sheets: {len(chunks)} ({layout.rows} x {layout.columns} per {sheet_config.orientation} A4)")
	pdf_paths: list[pathlib.Path] = []
	for sheet_index, chunk in enumerate(chunks, start=1):
		items = [als.compose.compose_label(record, config) for record in chunk]
		description = als.sheet.layout_grid(
			items,
			layout.rows,
			layout.columns,
			layout.width_mm,
			layout.height_mm,
			layout.dpi,
			sheet_config.cut_lines,
		)
		stem = sheet_file_stem("sheet", sheet_index)
		png_path = output_dir / "png" / f"{stem}.png"
		pdf_path = output_dir / "pdf" / f"{stem}.pdf"
		write_sheet(description, layout, fonts, png_path, pdf_path)
		pdf_paths.append(pdf_path)
		first = chunk[0].display_identifier
		last = chunk[-1].display_identifier
		print(f"Sheet written: {png_path.name} and {pdf_path.name} ({len(chunk)} labels: {first} - {last})")
	return pdf_paths


#============================================
def circle_numbers(records: list[Record]) -> tuple[list[int], list[Record]]:
	"""
	Split records into circle numbers and records without a numeric identifier.

	Args:
		records: Valid records in order.

	Returns:
		Tuple of (numbers in record order, skipped records).
	"""
	numbers: list[int] = []
	skipped: list[Record] = []
	for record in records:
		if record.identifier_is_numeric:
			numbers.append(record.sequence)
		else:
			skipped.append(record)
	return numbers, skipped


#============================================
def generate_circle_sheets(
	numbers: list[int],
	config: GeneratorConfig,
	fonts: FontRegistry,
	output_dir: pathlib.Path,
) -> list[pathlib.Path]:
	"""
	Write numbered circle sheets.

	Args:
		numbers: Numbers in order.
		config: Generator configuration.
		fonts: Font registry.
		output_dir: Circle sheets directory.

	Returns:
		Written sheet PDF paths.
	"""
	sheet_config = config.circle_sheet
	layout = als.sheet.sheet_layout(sheet_config, config.page.dpi)
	number_style = als.sheet.NumberStyle(
		circle=config.circle,
		text=config.stt,
		font_size=sheet_config.font_size,
	)
	chunks = als.sheet.chunk_items(numbers, layout.capacity)
	print(f"Circle sheets: {len(chunks)} ({layout.capacity} circles per sheet)")
	pdf_paths: list[pathlib.Path] = []
	for sheet_index, chunk in enumerate(chunks, start=1):
		description = als.sheet.layout_grid(
			chunk,
			layout.rows,
			layout.columns,
			layout.width_mm,
			layout.height_mm,
			layout.dpi,
			sheet_config.cut_lines,
			number_style=number_style,
		)
		stem = sheet_file_stem("sheet_circle", sheet_index)
		png_path = output_dir / "png" / f"{stem}.png"
		pdf_path = output_dir / "pdf" / f"{stem}.pdf"
		write_sheet(description, layout, fonts, png_path, pdf_path)
		pdf_paths.append(pdf_path)
		print(f"Sheet written: {png_path.name} and {pdf_path.name} ({len(chunk)} numbers: {chunk[0]} - {chunk[-1]})")
	return pdf_paths


#============================================
def build_manifest(
	summary: RunSummary,
	config: GeneratorConfig,
	input_path: pathlib.Path,
	rejected: list[RejectedRow],
) -> dict:
	"""
	Build the manifest payload for a run.
	"""
	return {
		"input": str(input_path),
		"input_sha256": als.render.compute_file_hash(input_path),
		"mode": summary.mode,
		"rows_read": summary.rows_read,
		"valid_records": summary.valid_records,
		"rejected": [dataclasses.asdict(row) for row in rejected],
		"labels_written": summary.labels_written,
		"label_sheets_written": summary.label_sheets_written,
		"circle_sheets_written": summary.circle_sheets_written,
		"circle_records_skipped": summary.circle_records_skipped,
		"outputs": summary.outputs,
		"layout": {
			"page": dataclasses.asdict(config.page),
			"label_sheet": dataclasses.asdict(config.label_sheet),
			"circle_sheet": dataclasses.asdict(config.circle_sheet),
		},
	}


#============================================
def run_batch(
	config: GeneratorConfig,
	input_path: pathlib.Path,
	mode: str = MODE_ALL,
	max_records: int | None = None,
	stop_before_rendering: bool = False,
	verbose: bool = False,
) -> RunSummary:
	"""
	Run the whole pipeline for one input CSV.

	Args:
		config: Generator configuration.
		input_path: Input CSV path.
		mode: "labels", "circles" or "all".
		max_records: Optional limit on valid records.
		stop_before_rendering: Stop after filtering.
		verbose: Print one line per label.

	Returns:
		RunSummary.
	"""
	if mode not in MODES:
		raise ValueError(f"Unknown mode {mode!r}, expected one of {MODES}")
	if max_records is not None and max_records < 1:
		raise ValueError(f"max_records must be at least 1, got {max_records}")
	summary = RunSummary(input_path=str(input_path), mode=mode)

	collect_start = time.perf_counter()
	rows_read, records, rejected = load_records(input_path, max_records)
	summary.rows_read = rows_read
	summary.valid_records = len(records)
	summary.rejected_rows = len(rejected)
	print(f"Valid records: {len(records)} (rejected {len(rejected)})")

	numbers: list[int] = []
	if mode in (MODE_CIRCLES, MODE_ALL):
		numbers, skipped = circle_numbers(records)
		for record in skipped:
			print(f"Warning: row {record.position} has no numeric STT '{record.identifier}', no circle")
		summary.circle_records_skipped = len(skipped)
		if not numbers:
			if mode == MODE_CIRCLES:
				raise NoValidRecordsError("No record has a numeric STT for circle sheets")
			print("Warning: no record has a numeric STT, skipping circle sheets")
	summary.timings["collect"] = time.perf_counter() - collect_start

	if stop_before_rendering:
		print("Stopping before rendering.")
		return summary

	render_start = time.perf_counter()
	fonts = FontRegistry(config.fonts, config.stt.font_family)
	output_dir = config.output_dir
	if mode in (MODE_LABELS, MODE_ALL):
		labels_dir = output_dir / LABELS_DIR
		print(f"Labels directory: {labels_dir}")
		label_paths = generate_labels(records, config, fonts, labels_dir, verbose)
		summary.labels_written = len(label_paths)
		summary.outputs.extend(str(path) for path in label_paths)

		sheets_dir = output_dir / LABEL_SHEETS_DIR
		sheet_pdfs = generate_label_sheets(records, config, fonts, sheets_dir)
		summary.label_sheets_written = len(sheet_pdfs)
		summary.outputs.extend(str(path) for path in sheet_pdfs)
		combined = sheets_dir / "label_sheets_all.pdf"
		pages = als.render.merge_pdfs(sheet_pdfs, combined)
		summary.outputs.append(str(combined))
		print(f"Combined PDF written: {combined} ({pages} pages)")

	if numbers:
		circles_dir = output_dir / CIRCLE_SHEETS_DIR
		circle_pdfs = generate_circle_sheets(numbers, config, fonts, circles_dir)
		summary.circle_sheets_written = len(circle_pdfs)
		summary.outputs.extend(str(path) for path in circle_pdfs)
		combined = circles_dir / "circle_sheets_all.pdf"
		pages = als.render.merge_pdfs(circle_pdfs, combined)
		summary.outputs.append(str(combined))
		print(f"Combined PDF written: {combined} ({pages} pages)")
	summary.timings["render"] = time.perf_counter() - render_start

	manifest_path = output_dir / MANIFEST_NAME
	als.render.write_manifest(manifest_path, build_manifest(summary, config, input_path, rejected))
	print(f"Manifest written: {manifest_path}")
	return summary
