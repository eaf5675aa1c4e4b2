"""
Label grid slicing: raster page to label-sized images.
"""

# Standard Library
import dataclasses
import math

# PIP3 modules
import PIL.Image
import PIL.ImageChops

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.log


JobConfig = tld.config.JobConfig
log_info = tld.log.log_info

GRID_MAX_ROWS = tld.config.GRID_MAX_ROWS
GRID_MAX_COLUMNS = tld.config.GRID_MAX_COLUMNS
BLANK_THRESHOLD = tld.config.BLANK_THRESHOLD
BLANK_RATIO = tld.config.BLANK_RATIO
PRINT_MODE_FULLPAGE = tld.config.PRINT_MODE_FULLPAGE

WHITE = (255, 255, 255)


@dataclasses.dataclass
class GridCell:
	index: int
	row: int
	column: int
	box: tuple[int, int, int, int] | None


@dataclasses.dataclass
class LabelImage:
	grid_index: int
	image: PIL.Image.Image


#============================================
def compute_grid_shape(page_width: int, page_height: int, config: JobConfig) -> tuple[int, int]:
	"""
	Compute how many label rows and columns to cut from a page.

	Args:
		page_width: Page width in pixels.
		page_height: Page height in pixels.
		config: Job configuration.

	Returns:
		Tuple of (rows, columns).
	"""
	max_rows = math.ceil(page_height / config.label_height_px)
	max_columns = math.ceil(page_width / config.label_width_px)
	rows = min(GRID_MAX_ROWS, max_rows)
	columns = min(GRID_MAX_COLUMNS, max_columns)
	return (rows, columns)


#============================================
def column_offset(column: int, config: JobConfig) -> int:
	"""
	Horizontal feed correction for a grid column.

	The left column shifts left of the safe margin and every other column
	shifts right of it.

	Args:
		column: Zero-based column.
		config: Job configuration.

	Returns:
		Offset in pixels.
	"""
	if column == 0:
		return config.safe_margin_right_px - config.column_correction_px
	return config.safe_margin_right_px + config.column_correction_px


#============================================
def compute_grid_cells(page_width: int, page_height: int, config: JobConfig) -> list[GridCell]:
	"""
	Compute the crop box of every grid cell, row by row.

	Cells whose origin falls outside the page keep their 1-based index but
	carry no box.

	Args:
		page_width: Page width in pixels.
		page_height: Page height in pixels.
		config: Job configuration.

	Returns:
		List of GridCell entries.
	"""
	label_width = config.label_width_px
	label_height = config.label_height_px
	rows, columns = compute_grid_shape(page_width, page_height, config)
	log_info(
		f"Grid: {rows} rows x {columns} cols for page {page_width}x{page_height}, "
		f"label {label_width}x{label_height}"
	)

	cells: list[GridCell] = []
	index = 1
	for row in range(rows):
		for column in range(columns):
			left = column * label_width + column_offset(column, config)
			top = row * label_height
			if left >= page_width or top >= page_height or left + label_width <= 0:
				cells.append(GridCell(index=index, row=row, column=column, box=None))
				index += 1
				continue
			right = min(left + label_width, page_width)
			left = max(0, left)
			bottom = min(top + label_height, page_height)
			cells.append(GridCell(index=index, row=row, column=column, box=(left, top, right, bottom)))
			index += 1
	return cells


#============================================
def white_ratio(image: PIL.Image.Image, threshold: int = BLANK_THRESHOLD) -> float:
	"""
	Fraction of fully opaque pixels whose R, G and B all exceed a threshold.

	Args:
		image: Image region.
		threshold: Channel brightness threshold.

	Returns:
		Ratio in the 0.0-1.0 range.
	"""
	total = image.width * image.height
	if total == 0:
		return 1.0
	red, green, blue, alpha = image.convert("RGBA").split()
	mask = alpha.point(lambda value: 255 if value == 255 else 0)
	for band in (red, green, blue):
		bright = band.point(lambda value: 255 if value > threshold else 0)
		mask = PIL.ImageChops.darker(mask, bright)
	white_pixels = mask.histogram()[255]
	return white_pixels / total


#============================================
def is_blank(image: PIL.Image.Image, threshold: int = BLANK_THRESHOLD, ratio: float = BLANK_RATIO) -> bool:
	"""
	Check whether a region is mostly white.

	Args:
		image: Image region.
		threshold: Channel brightness threshold.
		ratio: White fraction at or above which the region is blank.

	Returns:
		True if the region is blank.
	"""
	return white_ratio(image, threshold) >= ratio


#============================================
def fit_within(image: PIL.Image.Image, width: int, height: int) -> PIL.Image.Image:
	"""
	Scale an image down, keeping aspect ratio, to fit a box.

	Args:
		image: Source image.
		width: Box width.
		height: Box height.

	Returns:
		New image no larger than the box.
	"""
	fitted = image.copy()
	fitted.thumbnail((width, height), PIL.Image.Resampling.LANCZOS)
	return fitted


#============================================
def paste_center(image: PIL.Image.Image, width: int, height: int) -> PIL.Image.Image:
	"""
	Center an image on a white canvas.

	Args:
		image: Image to paste.
		width: Canvas width.
		height: Canvas height.

	Returns:
		White RGB canvas with the image centered.
	"""
	canvas = PIL.Image.new("RGB", (width, height), WHITE)
	left = (width - image.width) // 2
	top = (height - image.height) // 2
	canvas.paste(image.convert("RGB"), (left, top))
	return canvas


#============================================
def inner_size(config: JobConfig) -> tuple[int, int]:
	"""
	Label size minus the margin on every side.

	Args:
		config: Job configuration.

	Returns:
		Tuple of (width, height), non-positive when the margin eats the label.
	"""
	inner_width = config.label_width_px - 2 * config.margin_px
	inner_height = config.label_height_px - 2 * config.margin_px
	return (inner_width, inner_height)


#============================================
def build_label_canvas(region: PIL.Image.Image, config: JobConfig) -> PIL.Image.Image:
	"""
	Resize a cropped region to the label and inset it by the margin.

	Args:
		region: Cropped page region.
		config: Job configuration.

	Returns:
		Label-sized white canvas.
	"""
	label_width = config.label_width_px
	label_height = config.label_height_px
	resized = region.resize((label_width, label_height), PIL.Image.Resampling.LANCZOS)
	inner_width, inner_height = inner_size(config)
	if inner_width > 0 and inner_height > 0:
		resized = fit_within(resized, inner_width, inner_height)
	return paste_center(resized, label_width, label_height)


#============================================
def build_full_page_label(page: PIL.Image.Image, config: JobConfig) -> PIL.Image.Image:
	"""
	Fit a whole page, keeping aspect ratio, onto one label canvas.

	Args:
		page: Raster page.
		config: Job configuration.

	Returns:
		Label-sized white canvas.
	"""
	label_width = config.label_width_px
	label_height = config.label_height_px
	inner_width, inner_height = inner_size(config)
	if inner_width <= 0 or inner_height <= 0:
		inner_width, inner_height = label_width, label_height
	scale = min(inner_width / page.width, inner_height / page.height)
	target_width = max(1, min(inner_width, int(round(page.width * scale))))
	target_height = max(1, min(inner_height, int(round(page.height * scale))))
	fitted = page.resize((target_width, target_height), PIL.Image.Resampling.LANCZOS)
	return paste_center(fitted, label_width, label_height)


#============================================
def slice_page(page: PIL.Image.Image, config: JobConfig) -> list[LabelImage]:
	"""
	Cut a raster page into label images using the grid policy.

	Args:
		page: Raster page.
		config: Job configuration.

	Returns:
		Non-blank label images in grid order.
	"""
	labels: list[LabelImage] = []
	for cell in compute_grid_cells(page.width, page.height, config):
		if cell.box is None:
			log_info(f"Label position {cell.index} skipped: out of bounds")
			continue
		left, top, right, bottom = cell.box
		log_info(
			f"Cropping label {cell.index} at left={left} top={top} right={right} bottom={bottom} "
			f"(size: {right - left}x{bottom - top})"
		)
		region = page.crop(cell.box)
		if is_blank(region):
			log_info(f"Label {cell.index} is blank, skipping")
			continue
		labels.append(LabelImage(grid_index=cell.index, image=build_label_canvas(region, config)))
	log_info(f"Cropped into {len(labels)} non-blank labels from page")
	return labels


#============================================
def extract_labels(page: PIL.Image.Image, config: JobConfig) -> list[LabelImage]:
	"""
	Turn a raster page into label images according to the print mode.

	Args:
		page: Raster page.
		config: Job configuration.

	Returns:
		List of LabelImage entries, possibly empty.
	"""
	if config.print_mode == PRINT_MODE_FULLPAGE:
		return [LabelImage(grid_index=1, image=build_full_page_label(page, config))]
	return slice_page(page, config)
