import io
import pathlib

import pytest

import tspl_label_driver as tld
import tspl_label_driver.cli
import tspl_label_driver.config
import tspl_label_driver.errors
import tspl_label_driver.spooler


RAW_JOB = b"SIZE 60 mm,40 mm\nGAP 2 mm,0 mm\nCLS\nBAR 10,10,100,4\nPRINT 1\n"


#============================================
def backend_argv(leading: str = "tspl-backend", filename: str | None = None) -> list[str]:
	argv = [leading, "31", "bob", "parcel", "1", ""]
	if filename is not None:
		argv.append(filename)
	return argv


#============================================
@pytest.fixture
def device(tmp_path: pathlib.Path) -> pathlib.Path:
	"""
	A regular file standing in for the printer node.
	"""
	path = tmp_path / "lp0"
	path.write_bytes(b"")
	return path


#============================================
def test_list_without_arguments() -> None:
	stdout = io.BytesIO()
	code = tld.cli.run(["tspl"], stdin=io.BytesIO(), stdout=stdout, environ={})
	assert code == 0
	lines = stdout.getvalue().decode("utf-8").splitlines()
	assert lines
	for line in lines:
		assert line.startswith("direct tspl:")
		assert line.endswith('"TSPL USB Printer" "TSPL Thermal Label Printer"')


#============================================
def test_list_keyword() -> None:
	stdout = io.BytesIO()
	tld.spooler.run_backend(["tspl-backend", "list"], io.BytesIO(), stdout, {}, tld.config.build_default_config())
	assert stdout.getvalue().startswith(b"direct tspl:")


#============================================
def test_device_resolution_order() -> None:
	argv = backend_argv("tspl:/dev/usb/lp2")
	resolve = tld.spooler.resolve_backend_device
	assert resolve(argv, {"TSPL_DEVICE": "/dev/usb/lp7", "DEVICE_URI": "tspl:/dev/usb/lp3"}) == "/dev/usb/lp7"
	assert resolve(argv, {"DEVICE_URI": "tspl:/dev/usb/lp3"}) == "tspl:/dev/usb/lp2"
	assert resolve(backend_argv(), {"DEVICE_URI": "tspl:/dev/usb/lp3"}) == "tspl:/dev/usb/lp3"
	assert resolve(backend_argv(), {}) == "/dev/usb/lp5"
	# empty override is ignored
	assert resolve(backend_argv(), {"TSPL_DEVICE": ""}) == "/dev/usb/lp5"


#============================================
def test_raw_file_goes_to_device(tmp_path: pathlib.Path, device: pathlib.Path, sleeps) -> None:
	job = tmp_path / "job.tspl"
	job.write_bytes(RAW_JOB)
	written = tld.spooler.run_backend(
		backend_argv(f"tspl:{device}", str(job)),
		io.BytesIO(),
		io.BytesIO(),
		{},
		tld.config.build_default_config(),
	)
	assert written == len(RAW_JOB)
	assert device.read_bytes() == RAW_JOB
	# one chunk pause then settle
	assert sleeps == [0.02, 0.3]


#============================================
def test_raw_stdin_goes_to_device(device: pathlib.Path, sleeps) -> None:
	stdout = io.BytesIO()
	code = tld.cli.run(
		backend_argv(filename="-"),
		stdin=io.BytesIO(RAW_JOB),
		stdout=stdout,
		environ={"TSPL_DEVICE": str(device)},
	)
	assert code == 0
	assert device.read_bytes() == RAW_JOB
	assert stdout.getvalue() == b""


#============================================
def test_document_is_rendered_before_delivery(make_pdf, device: pathlib.Path, sleeps) -> None:
	pdf = make_pdf("sheet.pdf", (100.0, 150.0), [[(10.0, 10.0, 70.0, 120.0)]])
	written = tld.spooler.run_backend(
		backend_argv(filename=str(pdf)),
		io.BytesIO(),
		io.BytesIO(),
		{"DEVICE_URI": f"tspl:{device}"},
		tld.config.build_default_config(),
	)
	wire = device.read_bytes()
	assert written == len(wire)
	assert wire.startswith(b"SIZE 100 mm,150 mm\nGAP 2 mm,0 mm\nCLS\nBITMAP 0,0,99,1181,1,")
	assert wire.endswith(b"\nPRINT 1\n")


#============================================
def test_too_few_arguments() -> None:
	with pytest.raises(tld.errors.InputError):
		tld.spooler.run_backend(
			["tspl-backend", "31", "bob"],
			io.BytesIO(),
			io.BytesIO(),
			{},
			tld.config.build_default_config(),
		)
	code = tld.cli.run(["tspl-backend", "31", "bob"], stdin=io.BytesIO(), stdout=io.BytesIO(), environ={})
	assert code == 1


#============================================
def test_empty_stdin_fails(device: pathlib.Path, sleeps) -> None:
	code = tld.cli.run(
		backend_argv(),
		stdin=io.BytesIO(b""),
		stdout=io.BytesIO(),
		environ={"TSPL_DEVICE": str(device)},
	)
	assert code == 1
	assert device.read_bytes() == b""


#============================================
def test_missing_device_fails(tmp_path: pathlib.Path, sleeps) -> None:
	code = tld.cli.run(
		backend_argv(filename="-"),
		stdin=io.BytesIO(RAW_JOB),
		stdout=io.BytesIO(),
		environ={"TSPL_DEVICE": str(tmp_path / "gone" / "lp0")},
	)
	assert code == 1
