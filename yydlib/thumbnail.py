#!/usr/bin/env python3

###
# 16x16 preview icons for sprite and background frames
###

import math
from fractions import Fraction
import numpy
from yydlib.core import errors
from yydlib.core import utils

ICON_SIZE = 16
ICON_BYTES = ICON_SIZE * ICON_SIZE * 4

#===============================
def box_size(width: int, height: int) -> tuple:
	"""Aspect-preserving size of the preview inside the icon."""
	if width > height:
		return (ICON_SIZE, utils.round_half_up_fraction(Fraction(height * ICON_SIZE, width)))
	return (utils.round_half_up_fraction(Fraction(width * ICON_SIZE, height)), ICON_SIZE)

#===============================
def make_thumbnail(frame) -> bytes:
	out = bytearray(ICON_BYTES)
	write_thumbnail(frame, out)
	return bytes(out)

#===============================
def write_thumbnail(frame, out: bytearray) -> None:
	"""
	Downsample a BGRA frame into out, a 16x16 BGRA buffer with bottom-up rows.

	Each output pixel averages a 2x2 set of source samples, skipping fully
	transparent ones. Partly transparent results are blended toward white
	and the output is always fully opaque or fully transparent.
	"""
	if len(out) != ICON_BYTES:
		raise errors.ImageError(f"thumbnail buffer must be {ICON_BYTES} bytes, got {len(out)}")
	canvas = numpy.zeros((ICON_SIZE, ICON_SIZE, 4), dtype=numpy.uint8)
	if not frame.is_empty():
		_compose(frame, canvas)
	# the icon container stores rows bottom-up
	out[:] = canvas[::-1].tobytes()

#===============================
def _compose(frame, canvas: numpy.ndarray) -> None:
	src_w = frame.width
	src_h = frame.height
	source = numpy.frombuffer(frame.data, dtype=numpy.uint8).reshape((src_h, src_w, 4))
	(box_w, box_h) = box_size(src_w, src_h)
	hoffset = ICON_SIZE // 2 - box_w // 2
	voffset = ICON_SIZE // 2 - box_h // 2
	for y in range(box_h):
		oy = y / box_h * src_h
		oy2 = oy + 0.5 / box_h * src_h
		rows = (math.floor(oy), math.floor(oy2))
		for x in range(box_w):
			ox = x / box_w * src_w
			ox2 = ox + 0.5 / box_w * src_w
			cols = (math.floor(ox), math.floor(ox2))
			canvas[voffset + y, hoffset + x] = _sample(source, cols, rows)

#===============================
def _sample(source: numpy.ndarray, cols: tuple, rows: tuple) -> tuple:
	count = 0
	sums = [0.0, 0.0, 0.0, 0.0]
	for sx in cols:
		for sy in rows:
			pixel = source[sy, sx]
			if pixel[3] == 0:
				continue
			count += 1
			for channel in range(4):
				sums[channel] += float(pixel[channel])
	if count == 0:
		return (0, 0, 0, 0)
	color = [math.floor(sums[channel] / count) for channel in range(3)]
	alpha = sums[3] / count / 255.0
	if alpha != 1.0:
		color = [c + int((255 - c) * (1.0 - alpha)) for c in color]
	return (color[0], color[1], color[2], 255)
