"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import os
import pathlib
import sys
import time

# PIP3 modules
import pytest
import reportlab.lib.units
import reportlab.pdfgen.canvas

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


#============================================
@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
	"""
	Replace time.sleep with a recorder so pacing does not slow tests.
	"""
	calls: list[float] = []
	monkeypatch.setattr(time, "sleep", calls.append)
	return calls


#============================================
def write_pdf(
	path: pathlib.Path,
	page_size_mm: tuple[float, float],
	pages: list[list[tuple[float, float, float, float]]],
) -> pathlib.Path:
	"""
	Write a PDF with black rectangles, coordinates in mm from the top-left.

	Args:
		path: Output path.
		page_size_mm: Page (width, height) in mm.
		pages: Per page, a list of (left, top, width, height) rectangles.

	Returns:
		The output path.
	"""
	mm = reportlab.lib.units.mm
	page_width = page_size_mm[0] * mm
	page_height = page_size_mm[1] * mm
	pdf = reportlab.pdfgen.canvas.Canvas(str(path), pagesize=(page_width, page_height))
	for rects in pages:
		pdf.setFillColorRGB(0.0, 0.0, 0.0)
		for left, top, width, height in rects:
			y = page_height - (top + height) * mm
			pdf.rect(left * mm, y, width * mm, height * mm, stroke=0, fill=1)
		pdf.showPage()
	pdf.save()
	return path


#============================================
@pytest.fixture
def make_pdf(tmp_path: pathlib.Path):
	"""
	Factory fixture writing reportlab PDFs into tmp_path.
	"""
	def factory(
		name: str,
		page_size_mm: tuple[float, float],
		pages: list[list[tuple[float, float, float, float]]],
	) -> pathlib.Path:
		return write_pdf(tmp_path / name, page_size_mm, pages)
	return factory
