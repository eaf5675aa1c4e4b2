"""
Exception types raised by the driver.
"""


class DriverError(Exception):
	pass


class InputError(DriverError):
	"""Missing, unreadable or malformed input document or payload."""


class LabelDecodeError(InputError):
	"""A single label image could not be decoded."""


class DeviceError(DriverError):
	"""The printer device could not be opened or written."""


class DeviceNotFoundError(DeviceError):
	pass
