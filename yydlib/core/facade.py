#!/usr/bin/env python3

"""
Host Object Facade: the capability set the engine uses to create and
mutate objects owned by the host application.
"""

from tqdm import tqdm
from yydlib.core import errors
from yydlib.core import model
from yydlib.core import utils

#============================================

class HostFacade():
	encoding = 'utf-16-le'

	#============================
	def allocate(self, kind: str):
		raise NotImplementedError

	#============================
	def set_array_length(self, handle, field: str, length: int) -> None:
		raise NotImplementedError

	#============================
	def string_assign(self, handle, field: str, text: str, index: int = None) -> None:
		raise NotImplementedError

	#============================
	def stream_read(self, handle, field: str):
		raise NotImplementedError

	#============================
	def stream_write(self, handle, field: str, data: bytes) -> None:
		raise NotImplementedError

	#============================
	def finalize(self, kind: str, handle) -> None:
		return

	#============================
	def reset_project(self) -> None:
		return

	#============================
	def advance_progress(self, amount: int) -> None:
		return

	#============================
	def close_progress(self) -> None:
		return

#============================================

class MemoryHost(HostFacade):
	"""
	Host that keeps every native object as a plain model record.
	"""
	def __init__(self, show_progress: bool = True):
		self.show_progress = show_progress
		self.progress_bar = None
		self.progress_total = 0

	#============================
	def allocate(self, kind: str):
		record_type = model.RECORD_TYPES.get(kind)
		if record_type is None:
			raise errors.OtherError(f"host cannot allocate {kind}")
		return record_type()

	#============================
	def set_array_length(self, handle, field: str, length: int) -> None:
		if length < 0:
			raise errors.OtherError(f"negative length for {field}")
		current = getattr(handle, field)
		if current is not None and len(current) == length:
			return
		if current is None:
			current = []
		resized = list(current[:length])
		resized.extend([None] * (length - len(resized)))
		setattr(handle, field, resized)

	#============================
	def string_assign(self, handle, field: str, text: str, index: int = None) -> None:
		if text is None:
			text = ''
		try:
			text.encode(self.encoding)
		except UnicodeEncodeError:
			raise errors.TextEncodingError(text)
		if index is None:
			setattr(handle, field, text)
			return
		getattr(handle, field)[index] = text

	#============================
	def stream_read(self, handle, field: str):
		data = getattr(handle, field)
		if data is None:
			return None
		return bytes(data)

	#============================
	def stream_write(self, handle, field: str, data: bytes) -> None:
		setattr(handle, field, None if data is None else bytes(data))

	#============================
	def advance_progress(self, amount: int) -> None:
		self.progress_total += amount
		if not self.show_progress or utils.is_quiet_mode():
			return
		if self.progress_bar is None:
			self.progress_bar = tqdm(total=100, leave=False)
		self.progress_bar.update(amount)

	#============================
	def close_progress(self) -> None:
		if self.progress_bar is not None:
			self.progress_bar.close()
		self.progress_bar = None
		self.progress_total = 0

#============================================

class ProgressTicker():
	"""
	Spread `span` progress units over `total` steps of work.
	"""
	def __init__(self, host: HostFacade, total: int, span: int):
		self.host = host
		self.total = max(total, 1)
		self.span = span
		self.count = 0
		self.sent = 0

	#============================
	def tick(self) -> None:
		self.count += 1
		target = min(self.count, self.total) * self.span // self.total
		if target > self.sent:
			self.host.advance_progress(target - self.sent)
			self.sent = target

	#============================
	def finish(self) -> None:
		if self.sent < self.span:
			self.host.advance_progress(self.span - self.sent)
			self.sent = self.span
