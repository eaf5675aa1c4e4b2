"""
Print spooler filter and backend stages.

Filter:  filter job-id user title copies options [file]
Backend: device-uri job-id user title copies options [file]
"""

# Standard Library
import pathlib
import time
import typing

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.device
import tspl_label_driver.errors
import tspl_label_driver.log
import tspl_label_driver.pipeline
import tspl_label_driver.source


JobConfig = tld.config.JobConfig
InputError = tld.errors.InputError
RawWireBytes = tld.source.RawWireBytes
DocumentPath = tld.source.DocumentPath
log_info = tld.log.log_info

DEFAULT_DEVICE = tld.config.DEFAULT_DEVICE
DEVICE_ENV = tld.config.DEVICE_ENV
SPOOLER_DEVICE_ENV = tld.config.SPOOLER_DEVICE_ENV
STDIN_MARKER = "-"
LIST_COMMAND = "list"
OPTIONS_INDEX = 5
FILE_INDEX = 6


#============================================
def log_arguments(prefix: str, argv: list[str]) -> None:
	log_info(f"{prefix} mode started with {len(argv)} args")
	for index, arg in enumerate(argv):
		log_info(f"  argv[{index}] = {arg}")


#============================================
def file_argument(argv: list[str]) -> str | None:
	"""
	Return the trailing file argument, or None for standard input.

	Args:
		argv: Spooler argument vector.

	Returns:
		File name or None when absent, empty or "-".
	"""
	if len(argv) <= FILE_INDEX:
		return None
	value = argv[FILE_INDEX]
	if not value or value == STDIN_MARKER:
		return None
	return value


#============================================
def option_argument(argv: list[str]) -> str:
	if len(argv) <= OPTIONS_INDEX:
		return ""
	return argv[OPTIONS_INDEX]


#============================================
def run_filter(
	argv: list[str],
	stdin: typing.BinaryIO,
	stdout: typing.BinaryIO,
	config: JobConfig,
) -> int:
	"""
	Convert one spooler job into TSPL on standard output.

	Input that is already TSPL passes through unchanged.

	Args:
		argv: Spooler argument vector, program token first.
		stdin: Binary standard input.
		stdout: Binary standard output, reserved for wire bytes.
		config: Base job configuration.

	Returns:
		Number of labels written.
	"""
	log_arguments("Filter", argv)
	options = option_argument(argv)
	if options:
		log_info(f"Spooler options: {options}")
	config = tld.config.parse_option_string(options, config)

	staged = None
	filename = file_argument(argv)
	if filename is not None:
		path = pathlib.Path(filename)
		log_info(f"Input file: {path}")
		if not path.is_file():
			raise InputError(f"input file not found: {path}")
	else:
		log_info("Reading job from stdin...")
		staged = tld.source.stage_stream(stdin)
		path = staged
		log_info(f"Staged {path.stat().st_size} bytes to {path}")

	try:
		source = tld.source.classify_file(path)
		if isinstance(source, RawWireBytes):
			tld.source.check_wire_bytes(source.data, "filter input")
			log_info(f"Input is already TSPL, passing {len(source.data)} bytes through")
			stdout.write(source.data)
			stdout.flush()
			return 0

		count = 0
		pipeline = tld.pipeline.iter_label_commands(source.path, config)
		for page_number, label, command in pipeline:
			stdout.write(command.to_bytes())
			stdout.flush()
			time.sleep(config.delay_ms / 1000.0)
			count += 1
			log_info(f"Filter: wrote page {page_number} label {label.grid_index}")
		log_info(f"Filter: {count} labels written")
		return count
	finally:
		if staged is not None:
			staged.unlink(missing_ok=True)


#============================================
def resolve_backend_device(argv: list[str], environ: typing.Mapping[str, str]) -> str:
	"""
	Pick the device identifier for a backend job.

	Order: explicit environment override, scheme-qualified leading argument,
	spooler-provided device URI, built-in default.

	Args:
		argv: Backend argument vector.
		environ: Process environment.

	Returns:
		Device identifier, possibly scheme-qualified.
	"""
	override = environ.get(DEVICE_ENV, "")
	if override:
		return override
	if argv and tld.device.has_scheme(argv[0]):
		return argv[0]
	spooler_uri = environ.get(SPOOLER_DEVICE_ENV, "")
	if spooler_uri:
		return spooler_uri
	return DEFAULT_DEVICE


#============================================
def wants_device_list(argv: list[str]) -> bool:
	return len(argv) <= 1 or argv[-1] == LIST_COMMAND


#============================================
def run_backend(
	argv: list[str],
	stdin: typing.BinaryIO,
	stdout: typing.BinaryIO,
	environ: typing.Mapping[str, str],
	config: JobConfig,
) -> int:
	"""
	Deliver one spooler job to the printer device, or list devices.

	Wire bytes go to the device as they are; a document is run through the
	whole pipeline first.

	Args:
		argv: Backend argument vector, device URI or program token first.
		stdin: Binary standard input.
		stdout: Binary standard output, used only for device listing.
		environ: Process environment.
		config: Base job configuration.

	Returns:
		Number of bytes written to the device.
	"""
	log_arguments("Backend", argv)
	if wants_device_list(argv):
		for line in tld.device.list_devices():
			stdout.write(f"{line}\n".encode("utf-8"))
		stdout.flush()
		return 0

	if len(argv) < FILE_INDEX:
		raise InputError(f"backend: insufficient args (need at least {FILE_INDEX}, got {len(argv)})")

	device = resolve_backend_device(argv, environ)
	config = tld.config.parse_option_string(option_argument(argv), config)

	staged = None
	filename = file_argument(argv)
	if filename is not None:
		log_info(f"Backend: reading from file {filename}")
		source = tld.source.classify_file(pathlib.Path(filename))
	else:
		log_info("Backend: reading job from stdin...")
		source = tld.source.classify_bytes(stdin.read())
		if isinstance(source, DocumentPath):
			staged = source.path

	try:
		if isinstance(source, RawWireBytes):
			if not source.data:
				raise InputError("no data to write (got 0 bytes)")
			log_info(f"Backend: writing to device {device} (bytes={len(source.data)})")
			written = tld.device.write_to_device(source.data, device)
			log_info(f"Backend: successfully wrote {written} bytes to {device}")
			return written

		log_info(f"Backend: input is a document, rendering {source.path}")
		written = 0
		pipeline = tld.pipeline.iter_label_commands(source.path, config)
		for page_number, label, command in pipeline:
			written += tld.device.write_to_device(command.to_bytes(), device)
			time.sleep(config.delay_ms / 1000.0)
			log_info(f"Backend: printed page {page_number} label {label.grid_index}")
		log_info(f"Backend: successfully wrote {written} bytes to {device}")
		return written
	finally:
		if staged is not None:
			staged.unlink(missing_ok=True)
