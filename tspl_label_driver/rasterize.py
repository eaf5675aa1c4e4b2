"""
PDF rasterization through PyMuPDF.
"""

# Standard Library
import pathlib
import collections.abc

# PIP3 modules
import fitz
import PIL.Image
import pypdf
import pypdf.errors

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.errors
import tspl_label_driver.log


InputError = tld.errors.InputError
log_info = tld.log.log_info

POINTS_PER_INCH = 72.0


#============================================
def count_pages(path: pathlib.Path) -> int:
	"""
	Validate a PDF and count its pages.

	Args:
		path: PDF path.

	Returns:
		Number of pages.
	"""
	try:
		reader = pypdf.PdfReader(str(path))
		return len(reader.pages)
	except (OSError, pypdf.errors.PyPdfError) as error:
		raise InputError(f"unreadable document {path}: {error}") from error


#============================================
def render_page(document: fitz.Document, index: int, dpi: int) -> PIL.Image.Image:
	"""
	Render one page to an RGB image.

	Args:
		document: Open PyMuPDF document.
		index: Zero-based page index.
		dpi: Target resolution.

	Returns:
		PIL image.
	"""
	page = document[index]
	scale = dpi / POINTS_PER_INCH
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	return image


#============================================
def iter_pages(path: pathlib.Path, dpi: int) -> collections.abc.Iterator[tuple[int, PIL.Image.Image]]:
	"""
	Rasterize every page of a PDF, one page at a time.

	Args:
		path: PDF path.
		dpi: Target resolution.

	Yields:
		Tuples of (1-based page number, RGB image).
	"""
	page_count = count_pages(path)
	log_info(f"Converting {page_count} page(s) of {path} at {dpi}dpi")
	try:
		document = fitz.open(str(path), filetype="pdf")
	except (RuntimeError, ValueError) as error:
		raise InputError(f"cannot open document {path}: {error}") from error
	try:
		for index in range(document.page_count):
			try:
				image = render_page(document, index, dpi)
			except (RuntimeError, ValueError) as error:
				raise InputError(f"render page {index + 1}: {error}") from error
			log_info(f"Page {index + 1}: {image.width}x{image.height} pixels")
			yield (index + 1, image)
	finally:
		document.close()
