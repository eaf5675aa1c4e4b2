"""
Paced writes to the printer character device.
"""

# Standard Library
import glob
import os
import re
import time

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.errors
import tspl_label_driver.log


DeviceError = tld.errors.DeviceError
DeviceNotFoundError = tld.errors.DeviceNotFoundError
log_info = tld.log.log_info
log_error = tld.log.log_error

CHUNK_SIZE = tld.config.CHUNK_SIZE
CHUNK_DELAY_MS = tld.config.CHUNK_DELAY_MS
SETTLE_DELAY_MS = tld.config.SETTLE_DELAY_MS
DEVICE_GLOB = tld.config.DEVICE_GLOB
DEVICE_SCHEME = tld.config.DEVICE_SCHEME
DEFAULT_DEVICE = tld.config.DEFAULT_DEVICE
DEVICE_MAKE_MODEL = tld.config.DEVICE_MAKE_MODEL
DEVICE_INFO = tld.config.DEVICE_INFO

SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


#============================================
def has_scheme(identifier: str) -> bool:
	"""
	Check for a "scheme:" prefix such as "tspl:" or "file:".

	Args:
		identifier: Device identifier.

	Returns:
		True if scheme-qualified.
	"""
	return SCHEME_PATTERN.match(identifier) is not None


#============================================
def resolve_device_path(identifier: str) -> str:
	"""
	Turn a possibly scheme-qualified device identifier into a path.

	"tspl:/dev/usb/lp5" and "file:///dev/usb/lp5" both give "/dev/usb/lp5";
	a bare path is returned unchanged.

	Args:
		identifier: Device identifier.

	Returns:
		Filesystem path.
	"""
	path = SCHEME_PATTERN.sub("", identifier, count=1)
	if path.startswith("/"):
		path = "/" + path.lstrip("/")
	return path


#============================================
def write_to_device(
	data: bytes,
	identifier: str,
	chunk_size: int = CHUNK_SIZE,
	chunk_delay_ms: int = CHUNK_DELAY_MS,
	settle_delay_ms: int = SETTLE_DELAY_MS,
) -> int:
	"""
	Write a command buffer to the printer in paced chunks.

	The device has no flow control, so every chunk is followed by a short
	sleep and the final sync by a longer settle period for the label feed.

	Args:
		data: Complete command buffer.
		identifier: Device path or scheme-qualified identifier.
		chunk_size: Bytes per write.
		chunk_delay_ms: Sleep after each chunk.
		settle_delay_ms: Sleep after the last chunk.

	Returns:
		Number of bytes written.
	"""
	path = resolve_device_path(identifier)
	log_info(f"Writing {len(data)} bytes to printer {path}")
	try:
		info = os.stat(path)
	except OSError as error:
		raise DeviceNotFoundError(f"printer device not found: {path} ({error})") from error
	log_info(f"Device exists: {path} (mode={oct(info.st_mode)})")

	try:
		handle = open(path, "wb", buffering=0)
	except OSError as error:
		raise DeviceError(f"open device {path}: {error}") from error

	written = 0
	with handle:
		view = memoryview(data)
		while written < len(data):
			chunk = view[written:written + chunk_size]
			try:
				count = handle.write(chunk)
			except OSError as error:
				raise DeviceError(f"write error at {written}: {error}") from error
			if count is None:
				count = 0
			written += count
			time.sleep(chunk_delay_ms / 1000.0)
		try:
			os.fsync(handle.fileno())
		except OSError as error:
			log_error(f"sync failed: {error}")
	time.sleep(settle_delay_ms / 1000.0)
	log_info(f"Wrote {written} bytes")
	return written


#============================================
def list_devices(pattern: str = DEVICE_GLOB) -> list[str]:
	"""
	Build spooler discovery lines for every matching device node.

	Args:
		pattern: Device path glob.

	Returns:
		Descriptor lines, one synthetic default line if nothing matches.
	"""
	matches = sorted(glob.glob(pattern))
	if not matches:
		matches = [DEFAULT_DEVICE]
	lines = []
	for match in matches:
		lines.append(f'direct {DEVICE_SCHEME}:{match} "{DEVICE_MAKE_MODEL}" "{DEVICE_INFO}"')
	return lines
