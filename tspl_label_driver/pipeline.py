"""
Document to TSPL command pipeline.
"""

# Standard Library
import collections.abc
import pathlib

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.encoder
import tspl_label_driver.errors
import tspl_label_driver.log
import tspl_label_driver.rasterize
import tspl_label_driver.slicer


JobConfig = tld.config.JobConfig
LabelImage = tld.slicer.LabelImage
BitmapCommand = tld.encoder.BitmapCommand
InputError = tld.errors.InputError
log_info = tld.log.log_info
log_error = tld.log.log_error


#============================================
def save_label(label: LabelImage, page_number: int, save_dir: pathlib.Path) -> pathlib.Path:
	"""
	Save a label image for diagnostics.

	Args:
		label: Label image.
		page_number: 1-based page number.
		save_dir: Output directory.

	Returns:
		Saved path.
	"""
	save_dir.mkdir(parents=True, exist_ok=True)
	path = save_dir / f"page{page_number:02d}_label{label.grid_index:02d}.png"
	label.image.save(path)
	log_info(f"Saved label {label.grid_index}: {path}")
	return path


#============================================
def iter_label_commands(
	pdf_path: pathlib.Path,
	config: JobConfig,
	save_dir: pathlib.Path | None = None,
) -> collections.abc.Iterator[tuple[int, LabelImage, BitmapCommand]]:
	"""
	Rasterize, slice and encode a document one label at a time.

	A label that fails to encode is logged and skipped.

	Args:
		pdf_path: Document path.
		config: Job configuration.
		save_dir: Optional directory for label images.

	Yields:
		Tuples of (page number, label image, bitmap command).
	"""
	for page_number, page in tld.rasterize.iter_pages(pdf_path, config.dpi):
		labels = tld.slicer.extract_labels(page, config)
		log_info(f"Page {page_number} -> {len(labels)} labels")
		for label in labels:
			if save_dir is not None:
				save_label(label, page_number, save_dir)
			try:
				command = tld.encoder.encode_label(label.image, config)
			except InputError as error:
				log_error(f"encode page {page_number} label {label.grid_index}: {error}")
				continue
			yield (page_number, label, command)

