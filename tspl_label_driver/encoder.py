"""
TSPL bitmap encoding.
"""

# Standard Library
import dataclasses

# PIP3 modules
import PIL.Image

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.errors
import tspl_label_driver.log


JobConfig = tld.config.JobConfig
LabelDecodeError = tld.errors.LabelDecodeError
log_debug = tld.log.log_debug

INK_THRESHOLD = tld.config.INK_THRESHOLD
PRINT_TRAILER = b"\nPRINT 1\n"


@dataclasses.dataclass
class BitmapCommand:
	width_px: int
	height_px: int
	bytes_per_row: int
	data: bytes
	header: str

	def to_bytes(self) -> bytes:
		return self.header.encode("ascii") + self.data + PRINT_TRAILER


#============================================
def padded_width(width: int) -> int:
	"""
	Round a width up to the next multiple of 8.

	Args:
		width: Width in pixels.

	Returns:
		Byte-aligned width in pixels.
	"""
	return (width + 7) // 8 * 8


#============================================
def build_header(config: JobConfig, bytes_per_row: int, height: int) -> str:
	"""
	Build the textual preamble that precedes the bitmap payload.

	Args:
		config: Job configuration.
		bytes_per_row: Bitmap row width in bytes.
		height: Bitmap height in rows.

	Returns:
		ASCII header ending right before the payload.
	"""
	return (
		f"SIZE {config.label_width_mm:.0f} mm,{config.label_height_mm:.0f} mm\n"
		f"GAP {config.gap_mm:.0f} mm,0 mm\n"
		"CLS\n"
		f"BITMAP 0,0,{bytes_per_row},{height},1,"
	)


#============================================
def pack_bitmap(gray: PIL.Image.Image) -> bytes:
	"""
	Threshold a byte-aligned grayscale image and pack it 8 pixels per byte.

	Dark pixels become 1 bits, most significant bit first, row-major.

	Args:
		gray: Mode "L" image whose width is a multiple of 8.

	Returns:
		Packed bitmap bytes.
	"""
	# mode "1" stores 255 as a set bit, so dark pixels map to 255
	mono = gray.point(lambda value: 255 if value < INK_THRESHOLD else 0, mode="1")
	return mono.tobytes()


#============================================
def encode_label(image: PIL.Image.Image, config: JobConfig) -> BitmapCommand:
	"""
	Encode one label image into a complete print command.

	Args:
		image: Label image, normally already label-sized.
		config: Job configuration.

	Returns:
		BitmapCommand.	"""
	label_width = config.label_width_px
	label_height = config.label_height_px
	try:
		gray = image.convert("L")
		if gray.size != (label_width, label_height):
			gray = gray.resize((label_width, label_height), PIL.Image.Resampling.LANCZOS)
	except (OSError, ValueError) as error:
		raise LabelDecodeError(f"decode label image: {error}") from error

	width = padded_width(gray.width)
	height = gray.height
	if width != gray.width:
		log_debug(f"Padding width from {gray.width} -> {width}")
		padded = PIL.Image.new("L", (width, height), 255)
		padded.paste(gray, (0, 0))
		gray = padded

	bytes_per_row = width // 8
	data = pack_bitmap(gray)
	return BitmapCommand(
		width_px=width,
		height_px=height,
		bytes_per_row=bytes_per_row,
		data=data,
		header=build_header(config, bytes_per_row, height),
	)
