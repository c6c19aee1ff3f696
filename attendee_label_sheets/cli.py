"""
CLI entry points for CSV to label sheet generation.
"""

# Standard Library
import argparse
import dataclasses
import pathlib
import sys
import time

# local repo modules
import attendee_label_sheets as als
import attendee_label_sheets.batch
import attendee_label_sheets.config
import attendee_label_sheets.records


GeneratorConfig = als.config.GeneratorConfig
LabelSheetError = als.config.LabelSheetError

DEFAULT_CONFIG_NAME = als.config.DEFAULT_CONFIG_NAME
MODES = als.batch.MODES


#============================================
def build_config(args: argparse.Namespace) -> GeneratorConfig:
	"""
	Load the config file and apply CLI overrides.

	Args:
		args: Parsed argparse namespace.

	Returns:
		GeneratorConfig.
	"""
	config = als.config.load_config(pathlib.Path(args.config_path))
	if args.output_dir:
		config = dataclasses.replace(config, output_dir=pathlib.Path(args.output_dir))
	if args.cut_lines is not None:
		config = dataclasses.replace(
			config,
			label_sheet=dataclasses.replace(config.label_sheet, cut_lines=args.cut_lines),
			circle_sheet=dataclasses.replace(config.circle_sheet, cut_lines=args.cut_lines),
		)
	return config


#============================================
def resolve_input(args: argparse.Namespace, config: GeneratorConfig) -> pathlib.Path:
	"""
	Pick the input CSV from the CLI or the configured candidates.
	"""
	if args.input_path:
		return als.records.find_input_csv([pathlib.Path(args.input_path)])
	return als.records.find_input_csv(list(config.input_candidates))


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Generate attendee labels and print sheets from a CSV file.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-i", "--input", dest="input_path", default=None, help="Input CSV path (default: first configured candidate).")
	input_group.add_argument("-c", "--config", dest="config_path", default=DEFAULT_CONFIG_NAME, help="Config JSON path.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output-dir", dest="output_dir", default=None, help="Output directory.")
	output_group.add_argument("-m", "--mode", dest="mode", choices=MODES, default=als.batch.MODE_ALL, help="What to generate.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-k", "--cut-lines", dest="cut_lines", action="store_true", help="Draw dashed cut lines on sheets.")
	behavior_group.add_argument("-K", "--no-cut-lines", dest="cut_lines", action="store_false", help="Disable cut lines.")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Print one line per label.")
	behavior_group.add_argument(
		"--stop-before-rendering",
		dest="stop_before_rendering",
		action="store_true",
		help="Stop after reading and filtering records.",
	)

	limit_group = parser.add_argument_group("Limits")
	limit_group.add_argument("-l", "--max-records", dest="max_records", type=int, default=None, help="Limit number of records.")

	parser.set_defaults(
		cut_lines=None,
		verbose=False,
		stop_before_rendering=False,
	)

	args = parser.parse_args(argv)
	if args.max_records is not None and args.max_records < 1:
		parser.error(f"--max-records must be at least 1, got {args.max_records}")
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> als.config.RunSummary:
	"""
	Run the full pipeline from CSV input to labels and sheets.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RunSummary.
	"""
	start_time = time.perf_counter()
	print("CSV to label sheets pipeline")
	print(f"Config: {args.config_path}")
	config = build_config(args)
	input_path = resolve_input(args, config)
	print(f"Input CSV: {input_path}")
	print(f"Output directory: {config.output_dir}")
	print(f"Mode: {args.mode}")
	print(f"Cut lines: labels={config.label_sheet.cut_lines} circles={config.circle_sheet.cut_lines}")
	if args.max_records is not None:
		print(f"Max records: {args.max_records}")
	if args.stop_before_rendering:
		print("Stop before rendering: True")

	summary = als.batch.run_batch(
		config,
		input_path,
		mode=args.mode,
		max_records=args.max_records,
		stop_before_rendering=args.stop_before_rendering,
		verbose=args.verbose,
	)

	print("Summary")
	print(f"Rows read: {summary.rows_read}")
	print(f"Valid records: {summary.valid_records}")
	print(f"Rows skipped: {summary.rejected_rows}")
	print(f"Labels written: {summary.labels_written}")
	print(f"Label sheets written: {summary.label_sheets_written}")
	print(f"Circle sheets written: {summary.circle_sheets_written}")
	if summary.circle_records_skipped:
		print(f"Records without circle: {summary.circle_records_skipped}")

	total_time = time.perf_counter() - start_time
	print(
		"Timing: collect={:.2f}s render={:.2f}s total={:.2f}s".format(
			summary.timings.get("collect", 0.0),
			summary.timings.get("render", 0.0),
			total_time,
		)
	)
	return summary


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except LabelSheetError as error:
		print(f"Error: {error}", file=sys.stderr)
		sys.exit(1)
