#!/usr/bin/env python3

import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from yydlib.core import errors
from yydlib.core import facade
from yydlib.core import model

#============================================

class ResourceModelTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.host = facade.MemoryHost(show_progress=False)
		self.data = model.ProjectModel(self.host)

	#============================================
	def test_presized_array_accepts_exactly_n(self) -> None:
		sprite = self.data.create('sprite', 'spr_a')
		frames = self.data.set_array_field(sprite, 'frames', 3)
		for position in range(3):
			frames[position] = model.Frame()
		self.assertEqual(sprite.frame_count, 3)
		with self.assertRaises(IndexError):
			frames[3] = model.Frame()

	#============================================
	def test_presizing_twice_is_idempotent(self) -> None:
		room = self.data.create('room', 'rm_a')
		instances = self.data.set_array_field(room, 'instances', 2)
		instances[0] = model.Instance()
		instances[0].x = 12
		again = self.data.set_array_field(room, 'instances', 2)
		self.assertIs(again, instances)
		self.assertEqual(room.instances[0].x, 12)

	#============================================
	def test_negative_length_raises(self) -> None:
		script = self.data.create('script', 'scr_a')
		with self.assertRaises(errors.OtherError):
			self.host.set_array_length(script, 'source', -1)

	#============================================
	def test_indices_are_dense_and_stable(self) -> None:
		collection = self.data.collection('object')
		first = collection.create('obj_a')
		reserved = collection.reserve_slot()
		third = collection.create('obj_c')
		self.assertEqual((first.index, reserved, third.index), (0, 1, 2))
		self.assertFalse(collection.exists(1))
		self.assertEqual(collection.find('obj_c'), 2)
		with self.assertRaises(errors.AssetNotFound):
			collection.get(1)

	#============================================
	def test_string_assign_rejects_unencodable_text(self) -> None:
		script = self.data.create('script', 'scr_a')
		with self.assertRaises(errors.TextEncodingError) as context:
			self.host.string_assign(script, 'source', "bad \ud800 text")
		self.assertEqual(context.exception.text, "bad \ud800 text")
		self.host.string_assign(script, 'source', "café 漢字")
		self.assertEqual(script.source, "café 漢字")

	#============================================
	def test_volatile_room_fields_ignored_in_equality(self) -> None:
		first = model.Room()
		second = model.Room()
		second.tab = 3
		second.x_position_scroll = 400
		self.assertEqual(first, second)
		second.caption = "other"
		self.assertNotEqual(first, second)

	#============================================
	def test_get_event_creates_once(self) -> None:
		obj = self.data.create('object', 'obj_a')
		event = obj.get_event(3, 0, self.host)
		self.assertIs(obj.get_event(3, 0, self.host), event)
		with self.assertRaises(errors.OtherError):
			obj.get_event(12, 0)

	#============================================
	def test_allocate_unknown_kind_raises(self) -> None:
		with self.assertRaises(errors.OtherError):
			self.host.allocate('game_settings')

#============================================

def test_frame_validate_checks_buffer_length():
	frame = model.Frame()
	frame.width = 2
	frame.height = 2
	frame.data = bytes(15)
	try:
		frame.validate()
	except errors.ImageError as exc:
		assert "expected 16" in str(exc)
	else:
		raise AssertionError("short frame buffer was accepted")
