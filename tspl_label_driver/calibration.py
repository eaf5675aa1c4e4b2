"""
Calibration sheet for tuning the slice grid against a real printer.
"""

# Standard Library
import pathlib

# PIP3 modules
import reportlab.lib.pagesizes
import reportlab.lib.units
import reportlab.pdfgen.canvas

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config


JobConfig = tld.config.JobConfig

GRID_MAX_ROWS = tld.config.GRID_MAX_ROWS
GRID_MAX_COLUMNS = tld.config.GRID_MAX_COLUMNS
CALIBRATION_FONT = "Helvetica"
CROSSHAIR_SIZE = 12.0
TARGET_SIZE_MM = 30.0
RULER_LENGTH_MM = 10.0


#============================================
def compute_cell_box(
	config: JobConfig,
	page_height: float,
	row: int,
	column: int,
) -> tuple[float, float, float, float]:
	"""
	Compute a label cell in PDF points, origin bottom-left.

	Args:
		config: Job configuration.
		page_height: Page height in points.
		row: Row index from the top.
		column: Column index from the left.

	Returns:
		Tuple of (x0, y0, x1, y1).
	"""
	label_width = config.label_width_mm * reportlab.lib.units.mm
	label_height = config.label_height_mm * reportlab.lib.units.mm
	cell_x = column * label_width
	cell_y = page_height - (row + 1) * label_height
	return (cell_x, cell_y, cell_x + label_width, cell_y + label_height)


#============================================
def draw_calibration_page(pdf: reportlab.pdfgen.canvas.Canvas, config: JobConfig) -> None:
	"""
	Draw label outlines, crosshairs, captions and a ruler.

	Args:
		pdf: ReportLab canvas.
		config: Job configuration.
	"""
	page_width, page_height = reportlab.lib.pagesizes.A4
	pdf.setLineWidth(2.0)
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	pdf.setFont(CALIBRATION_FONT, 14)

	index = 1
	for row in range(GRID_MAX_ROWS):
		for column in range(GRID_MAX_COLUMNS):
			x0, y0, x1, y1 = compute_cell_box(config, page_height, row, column)
			if x0 >= page_width or y1 <= 0:
				index += 1
				continue
			pdf.setFillColorRGB(0.0, 0.0, 0.0)
			pdf.rect(x0, y0, x1 - x0, y1 - y0, stroke=1, fill=0)
			center_x = (x0 + x1) / 2.0
			center_y = (y0 + y1) / 2.0

			# solid target keeps the cell above the blank threshold
			half = TARGET_SIZE_MM * reportlab.lib.units.mm / 2.0
			pdf.rect(center_x - half, center_y - half, 2 * half, 2 * half, stroke=0, fill=1)
			pdf.setStrokeColorRGB(1.0, 1.0, 1.0)
			pdf.line(center_x - CROSSHAIR_SIZE, center_y, center_x + CROSSHAIR_SIZE, center_y)
			pdf.line(center_x, center_y - CROSSHAIR_SIZE, center_x, center_y + CROSSHAIR_SIZE)
			pdf.setStrokeColorRGB(0.0, 0.0, 0.0)

			pdf.drawCentredString(center_x, center_y + half + 10.0, f"LABEL {index}")
			caption = f"{config.label_width_mm:.0f} x {config.label_height_mm:.0f} mm @ {config.dpi}dpi"
			pdf.drawCentredString(center_x, center_y - half - 20.0, caption)

			ruler_x = x0 + 10 * reportlab.lib.units.mm
			ruler_y = y1 - 10 * reportlab.lib.units.mm
			pdf.line(ruler_x, ruler_y, ruler_x + RULER_LENGTH_MM * reportlab.lib.units.mm, ruler_y)
			pdf.drawString(ruler_x, ruler_y + 4.0, f"{RULER_LENGTH_MM:.0f} mm")
			index += 1


#============================================
def build_calibration_pdf(output_path: pathlib.Path, config: JobConfig) -> pathlib.Path:
	"""
	Write a one page A4 calibration sheet.

	Args:
		output_path: Output PDF path.
		config: Job configuration.

	Returns:
		The output path.
	"""
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=reportlab.lib.pagesizes.A4)
	draw_calibration_page(pdf, config)
	pdf.showPage()
	pdf.save()
	return output_path
