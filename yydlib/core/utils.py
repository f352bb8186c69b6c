#!/usr/bin/env python3

import os
import re
from fractions import Fraction
from yydlib.core import errors

#============================================

QUIET_MODE = os.environ.get('YYD_QUIET', '') not in ('', '0')

# characters and device names Windows refuses in a file name
UNSAFE_NAME_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x1f]')
RESERVED_NAMES = re.compile(r'(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])(\..*)?', re.IGNORECASE)

#============================================

def set_quiet_mode(value: bool) -> None:
	global QUIET_MODE
	QUIET_MODE = bool(value)

#============================================

def is_quiet_mode() -> bool:
	return QUIET_MODE

#============================================

def status(message: str) -> None:
	if not QUIET_MODE:
		print(message)

#============================================

def warning(message: str) -> None:
	if not QUIET_MODE:
		print(f"WARNING: {message}")

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 > denominator:
		return whole + 1
	if remainder * 2 == denominator:
		return whole + 1
	return whole

#============================================

def parse_int(raw_value) -> int:
	if isinstance(raw_value, bool):
		raise errors.ParseIntError(str(raw_value))
	if isinstance(raw_value, int):
		return raw_value
	if isinstance(raw_value, str):
		try:
			return int(raw_value.strip())
		except ValueError:
			raise errors.ParseIntError(raw_value)
	raise errors.ParseIntError(str(raw_value))

#============================================

def parse_float(raw_value) -> float:
	if isinstance(raw_value, bool):
		raise errors.ParseFloatError(str(raw_value))
	if isinstance(raw_value, (int, float)):
		return float(raw_value)
	if isinstance(raw_value, str):
		try:
			return float(raw_value.strip())
		except ValueError:
			raise errors.ParseFloatError(raw_value)
	raise errors.ParseFloatError(str(raw_value))

#============================================

def check_resource_name(kind: str, name: str, file_name: bool = True) -> None:
	"""
	Resource names double as file names in the document set, so they must
	be valid on Windows as well as POSIX filesystems.
	"""
	if not isinstance(name, str) or name.strip() == '':
		raise errors.OtherError(f"{kind} has an empty name")
	if not file_name:
		return
	if UNSAFE_NAME_CHARS.search(name) or name[-1] in '. ' or RESERVED_NAMES.fullmatch(name):
		raise errors.OtherError(f"{kind} name {name!r} cannot be used as a file name")

#============================================

def name_keys(name: str) -> tuple:
	"""
	Case-folded file names a resource occupies in its kind folder: the
	payload folder and the document.
	"""
	folded = name.casefold()
	return (folded, folded + '.yaml')

#============================================

def find_name_clash(names: list):
	"""
	Return (name, other) for the first two names that would share a file
	on a case-insensitive filesystem, or None.
	"""
	taken = {}
	for name in names:
		keys = name_keys(name)
		for key in keys:
			if key in taken:
				return (name, taken[key])
		for key in keys:
			taken[key] = name
	return None

#============================================

def payload_suffix(extension: str) -> str:
	"""Pick a safe file suffix for an auxiliary binary payload."""
	if isinstance(extension, str) and re.fullmatch(r'\.[A-Za-z0-9]{1,8}', extension):
		return extension.lower()
	return '.bin'
