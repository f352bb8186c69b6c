#!/usr/bin/env python3

import os
import sys
import tempfile
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from yydlib.core import actions
from yydlib.core import errors
from yydlib.core import facade

#============================================

EXTRA_LIBRARY = "\n".join([
	"yyd: 1",
	"caption: extra",
	"id: 7",
	"actions:",
	"  - name: Jump",
	"    id: 3",
	"    kind: 0",
	"    relative: true",
	"    execution_type: 1",
	"    function_name: action_jump",
	"    arguments:",
	"      - {caption: 'x:', type: 0, default: '0'}",
	"      - {caption: 'y:', type: 0, default: '16'}",
	"",
])

#============================================

class ActionCatalogTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.host = facade.MemoryHost(show_progress=False)
		self.catalog = actions.ActionCatalog(self.host, [actions.load_core_library(self.host)])

	#============================================
	def test_instantiate_copies_definition(self) -> None:
		action = self.catalog.instantiate(1, 603)
		self.assertEqual((action.lib_id, action.id), (1, 603))
		self.assertEqual(action.action_kind, 7)
		self.assertTrue(action.applies_to_something)
		self.assertEqual(action.param_count, 1)
		self.assertEqual(action.param_types[0], 1)
		self.assertEqual(len(action.param_strings), 8)
		self.assertFalse(action.is_relative)
		self.assertEqual(action.applies_to, -1)

	#============================================
	def test_instantiate_fills_defaults_and_function(self) -> None:
		action = self.catalog.instantiate(1, 612)
		self.assertTrue(action.is_condition)
		self.assertEqual(action.fn_name, 'action_if_variable')
		self.assertEqual(action.param_strings[:3], ['', '0', '0'])

	#============================================
	def test_unknown_action_raises(self) -> None:
		with self.assertRaises(errors.UnknownAction) as context:
			self.catalog.instantiate(999, 1)
		self.assertEqual((context.exception.lib_id, context.exception.act_id), (999, 1))
		self.assertEqual(str(context.exception), "unknown action 1 in lib with id 999")

	#============================================
	def test_duplicate_library_id_raises(self) -> None:
		with self.assertRaises(errors.OtherError):
			self.catalog.add_library(actions.load_core_library(self.host))

	#============================================
	def test_extra_library_file(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			library_file = os.path.join(temp_dir, "extra.yaml")
			with open(library_file, 'w', encoding='utf-8') as handle:
				handle.write(EXTRA_LIBRARY)
			library = actions.load_library_file(self.host, library_file)
		self.catalog.add_library(library)
		action = self.catalog.instantiate(7, 3)
		self.assertTrue(action.can_be_relative)
		self.assertEqual(action.param_count, 2)
		self.assertEqual(action.param_strings[:2], ['0', '16'])
		self.assertEqual(library.max_id, 3)

	#============================================
	def test_library_unknown_key_raises(self) -> None:
		raw = (EXTRA_LIBRARY + "colour: red\n").encode('utf-8')
		with self.assertRaises(errors.UnknownKey) as context:
			actions.parse_library(self.host, "extra.yaml", raw)
		self.assertEqual(context.exception.key, 'colour')

	#============================================
	def test_library_duplicate_action_id_raises(self) -> None:
		raw = "\n".join([
			"yyd: 1",
			"id: 8",
			"actions:",
			"  - {name: A, id: 1}",
			"  - {name: B, id: 1}",
		]).encode('utf-8')
		with self.assertRaises(errors.OtherError):
			actions.parse_library(self.host, "dup.yaml", raw)

	#============================================
	def test_library_with_nine_arguments_raises(self) -> None:
		argument_lines = ["      - {type: 0}"] * 9
		raw = "\n".join([
			"yyd: 1",
			"id: 9",
			"actions:",
			"  - name: Big",
			"    id: 1",
			"    arguments:",
		] + argument_lines).encode('utf-8')
		with self.assertRaises(errors.DocumentSyntaxError):
			actions.parse_library(self.host, "big.yaml", raw)

	#============================================
	def test_missing_library_file_raises_io_error(self) -> None:
		with self.assertRaises(errors.IoError):
			actions.load_library_file(self.host, "/nonexistent/library.yaml")

#============================================

def test_init_code_joins_library_blocks():
	host = facade.MemoryHost(show_progress=False)
	first = host.allocate('action_library')
	first.id = 20
	first.init_code = "globalvar a;"
	second = host.allocate('action_library')
	second.id = 21
	third = host.allocate('action_library')
	third.id = 22
	third.init_code = "globalvar b;"
	catalog = actions.ActionCatalog(host, [first, second, third])
	assert catalog.init_code() == "globalvar a;\nglobalvar b;"
