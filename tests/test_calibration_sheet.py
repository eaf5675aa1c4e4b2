import pathlib

import pypdf

import tspl_label_driver as tld
import tspl_label_driver.calibration
import tspl_label_driver.config
import tspl_label_driver.pipeline


#============================================
def test_calibration_sheet_is_one_a4_page(tmp_path: pathlib.Path) -> None:
	path = tld.calibration.build_calibration_pdf(tmp_path / "cal.pdf", tld.config.build_default_config())
	reader = pypdf.PdfReader(str(path))
	assert len(reader.pages) == 1
	box = reader.pages[0].mediabox
	assert round(float(box.width)) == 595
	assert round(float(box.height)) == 842
	text = reader.pages[0].extract_text()
	for index in range(1, 5):
		assert f"LABEL {index}" in text


#============================================
def test_calibration_sheet_slices_into_four_labels(tmp_path: pathlib.Path) -> None:
	config = tld.config.build_default_config()
	path = tld.calibration.build_calibration_pdf(tmp_path / "cal.pdf", config)
	results = list(tld.pipeline.iter_label_commands(path, config))
	assert [label.grid_index for _, label, _ in results] == [1, 2, 3, 4]


#============================================
def test_cell_box_origin_is_bottom_left() -> None:
	config = tld.config.build_default_config()
	x0, y0, x1, y1 = tld.calibration.compute_cell_box(config, 1000.0, 0, 1)
	mm = 72.0 / 25.4
	assert abs(x0 - 100.0 * mm) < 1e-6
	assert abs(x1 - 200.0 * mm) < 1e-6
	assert abs(y1 - 1000.0) < 1e-6
	assert abs(y0 - (1000.0 - 150.0 * mm)) < 1e-6
