#!/usr/bin/env python3

"""
Frame pixel buffers to and from PNG images.

Frames hold BGRA8 rows top-down; PNG files hold RGBA.
"""

import io
import numpy
import PIL.Image
from yydlib.core import errors

#============================================

def frame_to_array(frame) -> numpy.ndarray:
	frame.validate()
	pixels = numpy.frombuffer(frame.data, dtype=numpy.uint8)
	return pixels.reshape((frame.height, frame.width, 4))

#============================================

def encode_png(frame) -> bytes:
	if frame.is_empty():
		raise errors.ImageError("cannot encode an empty frame")
	bgra = frame_to_array(frame)
	rgba = numpy.ascontiguousarray(bgra[:, :, [2, 1, 0, 3]])
	image = PIL.Image.fromarray(rgba)
	buffer = io.BytesIO()
	image.save(buffer, format='PNG', optimize=False)
	return buffer.getvalue()

#============================================

def decode_png(path: str, raw: bytes, frame) -> None:
	"""
	Fill frame width, height and data from encoded image bytes.
	"""
	try:
		with PIL.Image.open(io.BytesIO(raw)) as image:
			image.load()
			rgba = numpy.asarray(image.convert('RGBA'), dtype=numpy.uint8)
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as exc:
		raise errors.ImageError(f"{path}: {exc}")
	bgra = numpy.ascontiguousarray(rgba[:, :, [2, 1, 0, 3]])
	frame.height = int(bgra.shape[0])
	frame.width = int(bgra.shape[1])
	frame.data = bgra.tobytes()
	frame.validate()

#============================================

def encode_icon(thumbnail: bytes, size: int = 16) -> bytes:
	"""
	Encode a bottom-up BGRA thumbnail buffer as a PNG icon.
	"""
	if len(thumbnail) != size * size * 4:
		raise errors.ImageError(f"icon buffer must be {size * size * 4} bytes")
	image = PIL.Image.frombytes('RGBA', (size, size), thumbnail, 'raw', 'BGRA', 0, -1)
	buffer = io.BytesIO()
	image.save(buffer, format='PNG', optimize=False)
	return buffer.getvalue()
