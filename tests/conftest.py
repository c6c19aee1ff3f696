"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import csv
import dataclasses
import os
import pathlib
import sys

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# PIP3 modules
import pytest

# local repo modules
import attendee_label_sheets.config


SAMPLE_ROWS = [
	{"STT": "1", "Code": "E1", "Name": "an nguyen", "Department": "IT", "Company": "Acme"},
	{"STT": "2", "Code": "Khách mời", "Name": "bao tran", "Department": "", "Company": "Guest Co"},
	{"STT": "3", "Code": "E3", "Name": "chi le", "Department": "", "Company": ""},
]


#============================================
def write_csv(path: pathlib.Path, rows: list[dict[str, str]]) -> pathlib.Path:
	"""
	Write rows to a CSV file with a header.

	Args:
		path: Output path.
		rows: Rows sharing the same keys.

	Returns:
		The written path.
	"""
	with path.open("w", encoding="utf-8", newline="") as handle:
		writer = csv.DictWriter(handle, fieldnames=list(rows[0].keys()))
		writer.writeheader()
		writer.writerows(rows)
	return path


#============================================
@pytest.fixture
def sample_csv(tmp_path: pathlib.Path) -> pathlib.Path:
	"""
	Three row CSV with one guest row.
	"""
	return write_csv(tmp_path / "input.csv", SAMPLE_ROWS)


#============================================
@pytest.fixture
def small_config(tmp_path: pathlib.Path) -> attendee_label_sheets.config.GeneratorConfig:
	"""
	Default config at a low DPI, writing into tmp_path.
	"""
	config = attendee_label_sheets.config.GeneratorConfig()
	return dataclasses.replace(
		config,
		page=dataclasses.replace(config.page, dpi=50),
		fonts=attendee_label_sheets.config.FontConfig(regular=None, bold=None),
		label_sheet=dataclasses.replace(config.label_sheet, rows=1, columns=2),
		output_dir=tmp_path / "output",
	)
