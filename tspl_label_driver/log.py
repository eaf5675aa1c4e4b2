"""
Diagnostic output on standard error.

Lines carry the spooler severity prefixes so they land in the spooler log
with the right level. Standard output is never used here since the filter
reserves it for wire bytes.
"""

# Standard Library
import sys


#============================================
def log_info(message: str) -> None:
	print(f"INFO: {message}", file=sys.stderr, flush=True)


#============================================
def log_debug(message: str) -> None:
	print(f"DEBUG: {message}", file=sys.stderr, flush=True)


#============================================
def log_error(message: str) -> None:
	print(f"ERROR: {message}", file=sys.stderr, flush=True)
