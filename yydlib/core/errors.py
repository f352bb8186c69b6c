#!/usr/bin/env python3

"""
Error kinds raised by the yyd save/load engine.

Every class derives from RuntimeError so callers written against plain
RuntimeError keep working.
"""

#============================================

class ProjectError(RuntimeError):
	"""Base class for all save/load failures."""

#============================================

class IoError(ProjectError):
	def __init__(self, path: str, reason):
		self.path = path
		self.reason = reason
		super().__init__(f"io error: {path}: {reason}")

#============================================

class ImageError(ProjectError):
	def __init__(self, detail):
		self.detail = detail
		super().__init__(f"image error: {detail}")

#============================================

class TextEncodingError(ProjectError):
	"""Text that the host string type cannot hold."""
	def __init__(self, text: str):
		self.text = text
		super().__init__(f"couldn't encode {text!r}")

#============================================

class AssetNotFound(ProjectError):
	def __init__(self, name: str):
		self.name = name
		super().__init__(f"couldn't find asset {name}")

#============================================

class DocumentSyntaxError(ProjectError):
	def __init__(self, path: str, detail: str = None):
		self.path = path
		self.detail = detail
		message = f"syntax error in file {path}"
		if detail is not None:
			message += f": {detail}"
		super().__init__(message)

#============================================

class UnknownKey(ProjectError):
	def __init__(self, path: str, key: str):
		self.path = path
		self.key = key
		super().__init__(f"unknown key in {path}: {key}")

#============================================

class UnknownAction(ProjectError):
	def __init__(self, lib_id: int, act_id: int):
		self.lib_id = lib_id
		self.act_id = act_id
		super().__init__(f"unknown action {act_id} in lib with id {lib_id}")

#============================================

class ParseIntError(ProjectError):
	def __init__(self, text):
		self.text = text
		super().__init__(f"integer parse error: invalid digit in {text!r}")

#============================================

class ParseFloatError(ProjectError):
	def __init__(self, text):
		self.text = text
		super().__init__(f"float parse error: invalid float literal {text!r}")

#============================================

class InvalidVersion(ProjectError):
	def __init__(self, version):
		self.version = version
		super().__init__(f"invalid version {version}")

#============================================

class OtherError(ProjectError):
	def __init__(self, detail: str):
		self.detail = detail
		super().__init__(f"other error: {detail}")
