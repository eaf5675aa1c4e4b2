"""
Job input classification and staging.
"""

# Standard Library
import dataclasses
import pathlib
import shutil
import tempfile
import typing

# local repo modules
import tspl_label_driver as tld
import tspl_label_driver.config
import tspl_label_driver.errors


InputError = tld.errors.InputError

STAGING_PREFIX = tld.config.STAGING_PREFIX
PDF_MAGIC = b"%PDF-"
# leading commands that mark a job as already encoded TSPL
WIRE_DIRECTIVES = (
	b"SIZE",
	b"GAP",
	b"BLINE",
	b"CLS",
	b"BITMAP",
	b"TEXT",
	b"BAR",
	b"BARCODE",
	b"QRCODE",
	b"BOX",
	b"PRINT",
	b"DIRECTION",
	b"REFERENCE",
	b"OFFSET",
	b"DENSITY",
	b"SPEED",
	b"SET",
	b"CODEPAGE",
	b"HOME",
	b"FEED",
)


@dataclasses.dataclass
class RawWireBytes:
	data: bytes


@dataclasses.dataclass
class DocumentPath:
	path: pathlib.Path


InputSource = RawWireBytes | DocumentPath


#============================================
def is_document(head: bytes) -> bool:
	"""
	Check the leading bytes of an input for the PDF signature.

	Args:
		head: Leading bytes.

	Returns:
		True if the input is a PDF document.
	"""
	return head.lstrip()[:len(PDF_MAGIC)] == PDF_MAGIC


#============================================
def is_wire_bytes(data: bytes) -> bool:
	"""
	Check whether an input opens with a known TSPL command.

	Args:
		data: Input bytes, only the first line is inspected.

	Returns:
		True if the first non-blank line starts with a TSPL directive.
	"""
	first_line = data[:1024].lstrip().split(b"\n", 1)[0]
	words = first_line.replace(b",", b" ").split()
	if not words:
		return False
	return words[0].upper() in WIRE_DIRECTIVES


#============================================
def classify_file(path: pathlib.Path) -> InputSource:
	"""
	Decide once whether a file holds a document or raw wire bytes.

	Args:
		path: Input file.

	Returns:
		DocumentPath or RawWireBytes.
	"""
	try:
		with open(path, "rb") as handle:
			head = handle.read(1024)
			if is_document(head):
				return DocumentPath(path=pathlib.Path(path))
			data = head + handle.read()
	except OSError as error:
		raise InputError(f"cannot read {path}: {error}") from error
	return RawWireBytes(data=data)


#============================================
def stage_stream(stream: typing.BinaryIO, directory: str | None = None) -> pathlib.Path:
	"""
	Buffer a whole stream into a seekable staging file.

	Args:
		stream: Binary input stream.
		directory: Optional staging directory.

	Returns:
		Path of the staging file; the caller removes it.
	"""
	handle = tempfile.NamedTemporaryFile(prefix=STAGING_PREFIX, dir=directory, delete=False)
	with handle:
		shutil.copyfileobj(stream, handle)
	return pathlib.Path(handle.name)


#============================================
def classify_bytes(data: bytes, directory: str | None = None) -> InputSource:
	"""
	Decide once whether buffered input is a document or raw wire bytes.

	A document is staged to a file since the rasterizer needs a path.

	Args:
		data: Whole input.
		directory: Optional staging directory.

	Returns:
		DocumentPath (a staging file the caller removes) or RawWireBytes.
	"""
	if not is_document(data[:1024]):
		return RawWireBytes(data=data)
	handle = tempfile.NamedTemporaryFile(prefix=STAGING_PREFIX, suffix=".pdf", dir=directory, delete=False)
	with handle:
		handle.write(data)
	return DocumentPath(path=pathlib.Path(handle.name))


#============================================
def check_wire_bytes(data: bytes, name: str) -> None:
	"""
	Refuse input that is neither a document nor TSPL commands.

	Args:
		data: Non-document input bytes.
		name: Input name for the error message.
	"""
	if not data:
		raise InputError(f"{name} is empty (got 0 bytes)")
	if not is_wire_bytes(data):
		raise InputError(f"{name} is neither a PDF document nor TSPL commands")
