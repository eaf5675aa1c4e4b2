"""
Entry point: interactive CLI, spooler filter or spooler backend.
"""

# Standard Library
import argparse
import os
import pathlib
import sys
import tempfile
import time

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.calibration
import tspl_label_driver.config
import tspl_label_driver.device
import tspl_label_driver.errors
import tspl_label_driver.log
import tspl_label_driver.modes
import tspl_label_driver.pipeline
import tspl_label_driver.source
import tspl_label_driver.spooler


JobConfig = tld.config.JobConfig
DriverError = tld.errors.DriverError
DeviceError = tld.errors.DeviceError
InputError = tld.errors.InputError
RawWireBytes = tld.source.RawWireBytes
log_info = tld.log.log_info
log_debug = tld.log.log_debug
log_error = tld.log.log_error

MODE_CLI = tld.modes.MODE_CLI
MODE_FILTER = tld.modes.MODE_FILTER
MODE_BACKEND = tld.modes.MODE_BACKEND
DEFAULT_DEVICE = tld.config.DEFAULT_DEVICE

EXIT_OK = 0
# spooler: retry the job later
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INPUT = 3
EXIT_DEVICE = 4


#============================================
def build_parser() -> argparse.ArgumentParser:
	"""
	Build the CLI argument parser.

	Returns:
		ArgumentParser.
	"""
	parser = argparse.ArgumentParser(
		prog="tspldriver",
		description="Print PDF label sheets on a TSPL thermal printer.",
	)
	parser.add_argument(
		"arguments",
		nargs="*",
		metavar="ARG",
		help="<pdf> [<device>] [<options>], or the spooler arguments with --mode.",
	)

	label_group = parser.add_argument_group("Label")
	label_group.add_argument("--dpi", dest="dpi", type=int, default=None, help="Printer resolution.")
	label_group.add_argument("--width", dest="width", type=float, default=None, help="Label width in mm.")
	label_group.add_argument("--height", dest="height", type=float, default=None, help="Label height in mm.")
	label_group.add_argument("--margin", dest="margin", type=float, default=None, help="Label margin in mm.")
	label_group.add_argument("--gap", dest="gap", type=float, default=None, help="Gap between labels in mm.")
	label_group.add_argument("--delay", dest="delay", type=int, default=None, help="Delay between labels in ms.")
	label_group.add_argument(
		"--print-mode",
		dest="print_mode",
		choices=tld.config.PRINT_MODES,
		default=None,
		help="Slice sheets into labels or print one label per page.",
	)

	calibration_group = parser.add_argument_group("Calibration")
	calibration_group.add_argument(
		"--safe-margin",
		dest="safe_margin",
		type=float,
		default=None,
		help="Right safe margin in mm applied to grid columns.",
	)
	calibration_group.add_argument(
		"--column-correction",
		dest="column_correction",
		type=int,
		default=None,
		help="Per-column horizontal correction in pixels.",
	)
	calibration_group.add_argument(
		"--calibration",
		dest="calibration",
		action="store_true",
		help="Print a generated calibration sheet instead of a PDF.",
	)

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument(
		"--mode",
		dest="mode",
		choices=tld.modes.MODES,
		default=None,
		help="Force cli, filter or backend instead of auto-detection.",
	)
	behavior_group.add_argument(
		"--save-labels",
		dest="save_labels",
		default=None,
		help="Directory to save the label images in.",
	)
	parser.set_defaults(calibration=False)
	return parser


#============================================
def build_config(args: argparse.Namespace) -> JobConfig:
	"""
	Build the job config from CLI flags.

	Args:
		args: Parsed argparse namespace.

	Returns:
		JobConfig.
	"""
	config = tld.config.build_default_config()
	return tld.config.apply_overrides(
		config,
		dpi=args.dpi,
		label_width_mm=args.width,
		label_height_mm=args.height,
		margin_mm=args.margin,
		gap_mm=args.gap,
		delay_ms=args.delay,
		safe_margin_right_mm=args.safe_margin,
		column_correction_px=args.column_correction,
		print_mode=args.print_mode,
	)


#============================================
def print_document(
	pdf_path: pathlib.Path,
	device: str,
	config: JobConfig,
	save_dir: pathlib.Path | None = None,
) -> int:
	"""
	Print a document, or a TSPL file, straight to the device.

	Args:
		pdf_path: Input path.
		device: Device identifier.
		config: Job configuration.
		save_dir: Optional directory for label images.

	Returns:
		Number of labels printed.
	"""
	source = tld.source.classify_file(pdf_path)
	if isinstance(source, RawWireBytes):
		tld.source.check_wire_bytes(source.data, str(pdf_path))
		log_info(f"{pdf_path} is already TSPL, sending as-is")
		tld.device.write_to_device(source.data, device)
		return 0

	total = 0
	pipeline = tld.pipeline.iter_label_commands(source.path, config, save_dir)
	for page_number, label, command in pipeline:
		tld.device.write_to_device(command.to_bytes(), device)
		total += 1
		time.sleep(config.delay_ms / 1000.0)
		log_info(f"Printed page {page_number} label {label.grid_index}")
	log_info(f"CLI done: printed {total} labels")
	return total


#============================================
def run_cli(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
	"""
	Run the interactive print path.

	Args:
		args: Parsed argparse namespace.
		parser: Parser, for usage errors.
	"""
	positional = list(args.arguments)
	if len(positional) > 3:
		parser.error("too many arguments")
	if not positional and not args.calibration:
		parser.error("a PDF path is required")

	config = build_config(args)
	if args.calibration:
		pdf_arg = None
		device = positional[0] if len(positional) >= 1 else DEFAULT_DEVICE
		options = positional[1] if len(positional) >= 2 else ""
	else:
		pdf_arg = positional[0]
		device = positional[1] if len(positional) >= 2 else DEFAULT_DEVICE
		options = positional[2] if len(positional) >= 3 else ""
	if options:
		config = tld.config.parse_option_string(options, config)
	log_info(
		f"Label {config.label_width_mm}x{config.label_height_mm}mm @ {config.dpi}dpi "
		f"= {config.label_width_px}x{config.label_height_px}px, mode {config.print_mode}"
	)

	save_dir = None
	if args.save_labels:
		save_dir = pathlib.Path(args.save_labels)

	if pdf_arg is not None:
		pdf_path = pathlib.Path(pdf_arg)
		if not pdf_path.is_file():
			raise InputError(f"pdf file not found: {pdf_path}")
		print_document(pdf_path, device, config, save_dir)
		return

	with tempfile.TemporaryDirectory() as temp_dir:
		pdf_path = pathlib.Path(temp_dir) / "calibration.pdf"
		tld.calibration.build_calibration_pdf(pdf_path, config)
		log_info(f"Calibration sheet written: {pdf_path}")
		print_document(pdf_path, device, config, save_dir)


#============================================
def run(argv: list[str], stdin=None, stdout=None, environ=None) -> int:
	"""
	Detect the mode, dispatch, and map failures to exit codes.

	Args:
		argv: Full argument vector including the program token.
		stdin: Binary standard input, defaults to the process stdin.
		stdout: Binary standard output, defaults to the process stdout.
		environ: Environment, defaults to os.environ.

	Returns:
		Process exit code.
	"""
	if stdin is None:
		stdin = sys.stdin.buffer
	if stdout is None:
		stdout = sys.stdout.buffer
	if environ is None:
		environ = os.environ

	mode = tld.modes.detect_mode(argv)
	log_debug(f"Detected mode: {mode}")
	config = tld.config.build_default_config()

	# spooler positions are fixed by the protocol, never parse them as flags
	if mode == MODE_FILTER:
		return run_spooler_stage(MODE_FILTER, argv, stdin, stdout, environ, config)
	if mode == MODE_BACKEND:
		return run_spooler_stage(MODE_BACKEND, argv, stdin, stdout, environ, config)

	parser = build_parser()
	args = parser.parse_intermixed_args(argv[1:])
	if args.mode is not None and args.mode != MODE_CLI:
		stage_argv = argv[:1] + list(args.arguments)
		return run_spooler_stage(args.mode, stage_argv, stdin, stdout, environ, build_config(args))

	try:
		run_cli(args, parser)
	except DeviceError as error:
		log_error(f"cli error: {error}")
		return EXIT_DEVICE
	except (InputError, OSError) as error:
		log_error(f"cli error: {error}")
		return EXIT_INPUT
	return EXIT_OK


#============================================
def run_spooler_stage(mode: str, argv: list[str], stdin, stdout, environ, config: JobConfig) -> int:
	"""
	Run a filter or backend stage with the spooler exit code contract.

	Args:
		mode: MODE_FILTER or MODE_BACKEND.
		argv: Spooler argument vector.
		stdin: Binary standard input.
		stdout: Binary standard output.
		environ: Environment.
		config: Base job configuration.

	Returns:
		EXIT_OK, or EXIT_FAILED so the spooler retries.
	"""
	try:
		if mode == MODE_FILTER:
			tld.spooler.run_filter(argv, stdin, stdout, config)
		else:
			tld.spooler.run_backend(argv, stdin, stdout, environ, config)
	except (DriverError, OSError) as error:
		log_error(f"{mode} error: {error}")
		return EXIT_FAILED
	return EXIT_OK


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	sys.exit(run(sys.argv))
