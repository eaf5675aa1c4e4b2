"""
Invocation mode detection.

The mode is picked once per process by running a priority-ordered list of
detectors over the argument vector; the first one that answers wins.
"""

# Standard Library
import os

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.device


MODE_CLI = "cli"
MODE_FILTER = "filter"
MODE_BACKEND = "backend"
MODES = (MODE_CLI, MODE_FILTER, MODE_BACKEND)

DEVICE_SCHEME = tld.config.DEVICE_SCHEME
BACKEND_ALIASES = ("tspl-backend", DEVICE_SCHEME)
FILTER_ALIASES = ("tspl-filter", "tspl-thermal")
SPOOLER_MIN_ARGS = 6


#============================================
def executable_name(argv: list[str]) -> str:
	"""
	Lowercase base name of the invoked program, without a .py suffix.

	Args:
		argv: Argument vector.

	Returns:
		Executable name, empty if argv is empty.
	"""
	if not argv:
		return ""
	name = os.path.basename(argv[0]).lower()
	if name.endswith(".py"):
		name = name[:-3]
	return name


#============================================
def detect_device_uri(argv: list[str]) -> str | None:
	"""
	Backend when the leading token is a scheme-qualified device URI.
	"""
	if argv and tld.device.has_scheme(argv[0]):
		return MODE_BACKEND
	return None


#============================================
def detect_alias(argv: list[str]) -> str | None:
	name = executable_name(argv)
	if name in BACKEND_ALIASES:
		return MODE_BACKEND
	if name in FILTER_ALIASES:
		return MODE_FILTER
	return None


#============================================
def detect_name_substring(argv: list[str]) -> str | None:
	name = executable_name(argv)
	if "backend" in name:
		return MODE_BACKEND
	if "filter" in name or "thermal" in name:
		return MODE_FILTER
	return None


#============================================
def detect_filter_arguments(argv: list[str]) -> str | None:
	"""
	Filter when the arguments look like a spooler filter call.

	The spooler passes job-id user title copies options [file], so at least
	six tokens including the program, with a numeric job id.
	"""
	if len(argv) < SPOOLER_MIN_ARGS or ":" in argv[0]:
		return None
	try:
		int(argv[1])
	except ValueError:
		return None
	return MODE_FILTER


DETECTORS = (
	detect_device_uri,
	detect_alias,
	detect_name_substring,
	detect_filter_arguments,
)


#============================================
def detect_mode(argv: list[str]) -> str:
	"""
	Detect the invocation mode.

	Args:
		argv: Full argument vector including the program token.

	Returns:
		One of MODE_BACKEND, MODE_FILTER or MODE_CLI.
	"""
	for detector in DETECTORS:
		mode = detector(argv)
		if mode is not None:
			return mode
	return MODE_CLI
