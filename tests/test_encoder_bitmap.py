import io

import PIL.Image
import pytest

import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.encoder
import tspl_label_driver.errors


#============================================
def build_test_config() -> tld.config.JobConfig:
	"""
	20 x 10 mm at 100 dpi: 79 x 39 dots, padded to 80.
	"""
	return tld.config.JobConfig(dpi=100, label_width_mm=20.0, label_height_mm=10.0, gap_mm=3.0)


#============================================
def test_padded_width_is_byte_aligned() -> None:
	for width in range(1, 200):
		padded = tld.encoder.padded_width(width)
		assert padded % 8 == 0
		assert width <= padded < width + 8


#============================================
def test_white_canvas_packs_to_zero_bytes() -> None:
	config = build_test_config()
	image = PIL.Image.new("RGB", (config.label_width_px, config.label_height_px), (255, 255, 255))
	command = tld.encoder.encode_label(image, config)
	assert command.width_px == 80
	assert command.height_px == 39
	assert command.bytes_per_row == 10
	assert len(command.data) == command.bytes_per_row * command.height_px
	assert set(command.data) == {0}


#============================================
def test_black_canvas_packs_to_ff_rows() -> None:
	"""
	Dark pixels are ink bits; an 8-aligned black label is all 0xFF.
	"""
	config = tld.config.JobConfig(dpi=100, label_width_mm=20.32, label_height_mm=10.0)
	assert config.label_width_px == 80
	image = PIL.Image.new("L", (80, config.label_height_px), 0)
	command = tld.encoder.encode_label(image, config)
	assert command.data == b"\xff" * (10 * config.label_height_px)


#============================================
def test_padding_strip_is_white() -> None:
	config = build_test_config()
	image = PIL.Image.new("L", (config.label_width_px, config.label_height_px), 0)
	command = tld.encoder.encode_label(image, config)
	# 79 dark columns then one padding column per row
	for row in range(command.height_px):
		start = row * command.bytes_per_row
		row_bytes = command.data[start:start + command.bytes_per_row]
		assert row_bytes[:-1] == b"\xff" * 9
		assert row_bytes[-1] == 0xFE


#============================================
def test_bits_are_msb_first_row_major() -> None:
	config = build_test_config()
	image = PIL.Image.new("L", (config.label_width_px, config.label_height_px), 255)
	image.putpixel((0, 0), 0)
	image.putpixel((9, 0), 127)
	image.putpixel((2, 1), 128)
	image.putpixel((7, 2), 10)
	command = tld.encoder.encode_label(image, config)
	data = command.data
	assert data[0] == 0x80
	assert data[1] == 0x40
	# 128 is not dark
	assert data[command.bytes_per_row] == 0x00
	assert data[2 * command.bytes_per_row] == 0x01
	assert sum(1 for value in data if value) == 3


#============================================
def test_header_and_trailer() -> None:
	config = tld.config.build_default_config()
	image = PIL.Image.new("RGB", (config.label_width_px, config.label_height_px), (255, 255, 255))
	command = tld.encoder.encode_label(image, config)
	expected_header = "SIZE 100 mm,150 mm\nGAP 2 mm,0 mm\nCLS\nBITMAP 0,0,99,1181,1,"
	assert command.header == expected_header
	wire = command.to_bytes()
	assert wire.startswith(expected_header.encode("ascii"))
	assert wire.endswith(b"\nPRINT 1\n")
	assert len(wire) == len(expected_header) + 99 * 1181 + len(b"\nPRINT 1\n")


#============================================
def test_wrong_size_input_is_resized() -> None:
	config = build_test_config()
	image = PIL.Image.new("RGB", (300, 17), (255, 255, 255))
	command = tld.encoder.encode_label(image, config)
	assert command.width_px == 80
	assert command.height_px == config.label_height_px
	assert len(command.data) == 10 * config.label_height_px


#============================================
def test_gap_is_carried_in_header() -> None:
	config = build_test_config()
	image = PIL.Image.new("L", (config.label_width_px, config.label_height_px), 0)
	command = tld.encoder.encode_label(image, config)
	assert command.header.endswith(f"BITMAP 0,0,10,{config.label_height_px},1,")
	assert "GAP 3 mm,0 mm" in command.header


#============================================
def test_truncated_image_raises_decode_error() -> None:
	"""
	Image data that fails to load surfaces as a per-label decode error.
	"""
	config = build_test_config()
	source = PIL.Image.effect_noise((64, 64), 80)
	buffer = io.BytesIO()
	source.save(buffer, format="PNG")
	truncated = buffer.getvalue()[:len(buffer.getvalue()) // 2]
	image = PIL.Image.open(io.BytesIO(truncated))
	with pytest.raises(tld.errors.LabelDecodeError):
		tld.encoder.encode_label(image, config)
