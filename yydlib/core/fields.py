#!/usr/bin/env python3

"""
Strict readers for document fields.
"""

from yydlib.core import errors
from yydlib.core import schema
from yydlib.core import utils

#============================================

def check_keys(path: str, data: dict, allowed) -> None:
	for key in data.keys():
		if not isinstance(key, str) or key not in allowed:
			raise errors.UnknownKey(path, str(key))

#============================================

def check_version(path: str, data: dict) -> None:
	if schema.VERSION_KEY not in data:
		raise errors.DocumentSyntaxError(path, f"missing '{schema.VERSION_KEY}' version tag")
	version = data[schema.VERSION_KEY]
	if isinstance(version, bool) or version != schema.FORMAT_VERSION:
		raise errors.InvalidVersion(str(version))

#============================================

def require_mapping(path: str, value, what: str) -> dict:
	if not isinstance(value, dict):
		raise errors.DocumentSyntaxError(path, f"{what} must be a mapping")
	return value

#============================================

def require_list(path: str, value, what: str) -> list:
	if value is None:
		return []
	if not isinstance(value, list):
		raise errors.DocumentSyntaxError(path, f"{what} must be a list")
	return value

#============================================

def read_bool(path: str, key: str, raw) -> bool:
	if not isinstance(raw, bool):
		raise errors.DocumentSyntaxError(path, f"{key} must be true or false")
	return raw

#============================================

def read_str(path: str, key: str, raw) -> str:
	if raw is None:
		return ''
	if isinstance(raw, bool):
		raise errors.DocumentSyntaxError(path, f"{key} must be text")
	if isinstance(raw, (str, int, float)):
		return str(raw)
	raise errors.DocumentSyntaxError(path, f"{key} must be text")

#============================================

def read_scalar(path: str, key: str, raw, value_type: str):
	if value_type == 'int':
		return utils.parse_int(raw)
	if value_type == 'float':
		return utils.parse_float(raw)
	if value_type == 'bool':
		return read_bool(path, key, raw)
	if value_type == 'str':
		return read_str(path, key, raw)
	raise errors.OtherError(f"unsupported field type {value_type}")

#============================================

def apply_fields(path: str, data: dict, record, fields: tuple, host,
	on_reference=None) -> None:
	"""
	Copy the fields present in data onto record. Missing keys keep the
	record default. Reference fields are handed to on_reference.
	"""
	for key, attr, value_type in fields:
		if key not in data:
			continue
		raw = data[key]
		reference = schema.ref_kind(value_type)
		if reference is not None:
			if on_reference is None:
				raise errors.OtherError(f"{path}: reference field {key} is not allowed here")
			(kind, nullable) = reference
			on_reference(path, kind, nullable, raw, record, attr)
			continue
		value = read_scalar(path, key, raw, value_type)
		if value_type == 'str':
			host.string_assign(record, attr, value)
		else:
			setattr(record, attr, value)
