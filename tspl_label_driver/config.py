"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses
import math


MM_TO_IN = 0.0393701

DEFAULT_DPI = 200
DEFAULT_LABEL_WIDTH_MM = 100.0
DEFAULT_LABEL_HEIGHT_MM = 150.0
DEFAULT_MARGIN_MM = 2.0
DEFAULT_GAP_MM = 2.0
DEFAULT_DELAY_MS = 200

# print head / feed alignment calibration
DEFAULT_SAFE_MARGIN_RIGHT_MM = 4.0
DEFAULT_COLUMN_CORRECTION_PX = 25

GRID_MAX_ROWS = 2
GRID_MAX_COLUMNS = 2

BLANK_THRESHOLD = 240
BLANK_RATIO = 0.95
INK_THRESHOLD = 128

CHUNK_SIZE = 4096
CHUNK_DELAY_MS = 20
SETTLE_DELAY_MS = 300

DEFAULT_DEVICE = "/dev/usb/lp5"
DEVICE_GLOB = "/dev/usb/lp*"
DEVICE_SCHEME = "tspl"
DEVICE_ENV = "TSPL_DEVICE"
SPOOLER_DEVICE_ENV = "DEVICE_URI"
DEVICE_MAKE_MODEL = "TSPL USB Printer"
DEVICE_INFO = "TSPL Thermal Label Printer"

STAGING_PREFIX = "tspl-input-"

PRINT_MODE_SLICE = "slice"
PRINT_MODE_FULLPAGE = "fullpage"
PRINT_MODES = (PRINT_MODE_SLICE, PRINT_MODE_FULLPAGE)

# label sizes that arrive several to a sheet and get sliced
SLICE_LABEL_SIZES = (
	(100.0, 150.0),
	(101.6, 152.4),
)
PAGE_SIZE_TOLERANCE_MM = 0.5


@dataclasses.dataclass(frozen=True)
class JobConfig:
	dpi: int = DEFAULT_DPI
	label_width_mm: float = DEFAULT_LABEL_WIDTH_MM
	label_height_mm: float = DEFAULT_LABEL_HEIGHT_MM
	margin_mm: float = DEFAULT_MARGIN_MM
	gap_mm: float = DEFAULT_GAP_MM
	delay_ms: int = DEFAULT_DELAY_MS
	safe_margin_right_mm: float = DEFAULT_SAFE_MARGIN_RIGHT_MM
	column_correction_px: int = DEFAULT_COLUMN_CORRECTION_PX
	print_mode: str = PRINT_MODE_SLICE

	@property
	def label_width_px(self) -> int:
		return mm_to_pixels(self.label_width_mm, self.dpi)

	@property
	def label_height_px(self) -> int:
		return mm_to_pixels(self.label_height_mm, self.dpi)

	@property
	def margin_px(self) -> int:
		return mm_to_pixels(self.margin_mm, self.dpi)

	@property
	def safe_margin_right_px(self) -> int:
		return mm_to_pixels(self.safe_margin_right_mm, self.dpi)


#============================================
def mm_to_pixels(value_mm: float, dpi: int) -> int:
	"""
	Convert millimetres to printer dots, rounding halves away from zero.

	Args:
		value_mm: Length in millimetres.
		dpi: Printer resolution.

	Returns:
		Length in pixels.
	"""
	pixels = value_mm * MM_TO_IN * dpi
	if pixels < 0:
		return -int(math.floor(-pixels + 0.5))
	return int(math.floor(pixels + 0.5))


#============================================
def build_default_config() -> JobConfig:
	"""
	Build the default job configuration.

	Returns:
		JobConfig with every default applied.
	"""
	return JobConfig()


#============================================
def resolve_print_mode(width_mm: float, height_mm: float) -> str:
	"""
	Pick slice or full-page mode from a nominal page size.

	Args:
		width_mm: Page width in millimetres.
		height_mm: Page height in millimetres.

	Returns:
		PRINT_MODE_SLICE for sheet-sourced label sizes, else PRINT_MODE_FULLPAGE.
	"""
	for nominal_width, nominal_height in SLICE_LABEL_SIZES:
		if (
			abs(width_mm - nominal_width) <= PAGE_SIZE_TOLERANCE_MM
			and abs(height_mm - nominal_height) <= PAGE_SIZE_TOLERANCE_MM
		):
			return PRINT_MODE_SLICE
	return PRINT_MODE_FULLPAGE


#============================================
def has_printable_size(config: JobConfig) -> bool:
	"""
	Check that a config derives a label of at least one dot each way.

	Args:
		config: Job configuration.

	Returns:
		True if the label pixel size is usable.
	"""
	return config.label_width_px >= 1 and config.label_height_px >= 1


#============================================
def apply_overrides(config: JobConfig, **values) -> JobConfig:
	"""
	Return a new config with the given overrides.

	None values are skipped. Sizes, resolution and delay must be positive;
	margin, gap and the calibration values accept zero. Non-finite numbers
	and overrides that shrink the label below one dot keep the prior value.

	Args:
		config: Base configuration.
		values: Field overrides.

	Returns:
		New JobConfig.
	"""
	allow_zero = ("margin_mm", "gap_mm", "delay_ms", "safe_margin_right_mm")
	for key, value in values.items():
		if value is None:
			continue
		if key == "print_mode":
			if value in PRINT_MODES:
				config = dataclasses.replace(config, print_mode=value)
			continue
		if key == "column_correction_px":
			config = dataclasses.replace(config, column_correction_px=int(value))
			continue
		if not math.isfinite(value):
			continue
		if key in allow_zero:
			if value < 0:
				continue
		elif value <= 0:
			continue
		updated = dataclasses.replace(config, **{key: value})
		if not has_printable_size(updated):
			continue
		config = updated
	return config


#============================================
def parse_page_size(value: str) -> tuple[float, float] | None:
	"""
	Parse a page size token like "100x150mm" or "Custom.60x40mm".

	Args:
		value: Page size value.

	Returns:
		Tuple of (width_mm, height_mm) or None if malformed.
	"""
	text = value.strip().lower()
	if text.startswith("custom."):
		text = text[len("custom."):]
	if text.endswith("mm"):
		text = text[:-2]
	if "x" not in text:
		return None
	width_text, _, height_text = text.partition("x")
	try:
		width = float(width_text)
		height = float(height_text)
	except ValueError:
		return None
	if not (math.isfinite(width) and math.isfinite(height)):
		return None
	if width <= 0 or height <= 0:
		return None
	return (width, height)


#============================================
def parse_option_string(options: str, config: JobConfig) -> JobConfig:
	"""
	Apply a spooler option string such as "PageSize=100x150mm dpi=203".

	Unknown keys and malformed values are ignored token by token. A page
	size is taken whole or not at all, and only a taken size picks the mode.

	Args:
		options: Space separated key=value tokens.
		config: Base configuration.

	Returns:
		New JobConfig.
	"""
	values: dict = {}
	page_size = None
	explicit_mode = None
	for token in options.split():
		if "=" not in token:
			continue
		key, _, value = token.partition("=")
		key = key.strip().lower()
		value = value.strip()
		try:
			if key in ("pagesize", "media"):
				size = parse_page_size(value)
				if size is not None:
					page_size = size
			elif key == "dpi":
				values["dpi"] = int(value)
			elif key == "margin":
				values["margin_mm"] = float(value)
			elif key == "gap":
				values["gap_mm"] = float(value)
			elif key == "delay":
				values["delay_ms"] = int(value)
			elif key == "safemargin":
				values["safe_margin_right_mm"] = float(value)
			elif key == "columncorrection":
				values["column_correction_px"] = int(value)
			elif key == "printmode":
				if value.lower() in PRINT_MODES:
					explicit_mode = value.lower()
		except ValueError:
			continue

	config = apply_overrides(config, **values)
	if page_size is not None:
		width_mm, height_mm = page_size
		sized = apply_overrides(config, label_width_mm=width_mm, label_height_mm=height_mm)
		if (sized.label_width_mm, sized.label_height_mm) == page_size:
			config = dataclasses.replace(sized, print_mode=resolve_print_mode(width_mm, height_mm))
	if explicit_mode is not None:
		config = dataclasses.replace(config, print_mode=explicit_mode)
	return config
