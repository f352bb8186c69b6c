#!/usr/bin/env python3

import os
import sys
import tempfile
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from yydlib.core import documents
from yydlib.core import errors
from yydlib.core import facade
from yydlib.core import project as project_mod
from yydlib.core import tree as tree_mod
from yydlib.core.project import YydProject
from sample_project import build_sample_project
from sample_project import new_project
from sample_project import toplevel_ids

#============================================

class RecordingHost(facade.MemoryHost):
	def __init__(self):
		super().__init__(show_progress=False)
		self.resets = 0
		self.closes = 0
		self.advanced = 0
		self.finalized = []

	#============================
	def reset_project(self) -> None:
		self.resets += 1

	#============================
	def advance_progress(self, amount: int) -> None:
		self.advanced += amount
		super().advance_progress(amount)

	#============================
	def close_progress(self) -> None:
		self.closes += 1
		super().close_progress()

	#============================
	def finalize(self, kind: str, handle) -> None:
		self.finalized.append((kind, handle.name))

#============================================

def read_tree_files(root_dir: str) -> dict:
	result = {}
	for walk_root, _, files in os.walk(root_dir):
		for name in files:
			full_path = os.path.join(walk_root, name)
			with open(full_path, 'rb') as handle:
				result[os.path.relpath(full_path, root_dir)] = handle.read()
	return result

#============================================

class ProjectSessionTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.temp = tempfile.TemporaryDirectory()
		self.target = os.path.join(self.temp.name, "game.yyd")
		self.host = RecordingHost()
		self.project = build_sample_project(YydProject(host=self.host, quiet=True))

	#============================================
	def tearDown(self) -> None:
		self.temp.cleanup()

	#============================================
	def test_save_reports_full_progress_and_closes(self) -> None:
		written = self.project.save(self.target)
		self.assertEqual(written, self.target)
		self.assertEqual(self.host.advanced, 100)
		self.assertEqual(self.host.closes, 1)
		self.assertEqual(self.host.progress_total, 0)
		self.assertTrue(os.path.isfile(os.path.join(self.temp.name, "game", "tree.yaml")))

	#============================================
	def test_load_success_finalizes_every_resource(self) -> None:
		self.project.save(self.target)
		host = RecordingHost()
		loaded = YydProject(host=host, quiet=True)
		loaded.load(self.target)
		self.assertEqual(host.advanced, 100)
		self.assertEqual(host.closes, 1)
		self.assertEqual(host.resets, 0)
		self.assertIn(('room', 'rm_start'), host.finalized)
		self.assertIn(('path', 'pth_patrol'), host.finalized)
		self.assertEqual(len(host.finalized), 13)
		self.assertEqual(loaded.project_file, self.target)

	#============================================
	def test_load_failure_resets_project(self) -> None:
		self.project.save(self.target)
		script_file = os.path.join(self.temp.name, "game", "scripts", "scr_init.yaml")
		with open(script_file, 'w', encoding='utf-8') as handle:
			handle.write("yyd: 1\nbogus: 1\n")
		with self.assertRaises(errors.UnknownKey):
			self.project.load(self.target)
		self.assertEqual(self.host.resets, 1)
		self.assertEqual(self.host.progress_total, 0)
		self.assertIsNone(self.project.project_file)
		self.assertEqual(len(self.project.model.collection('script')), 0)
		self.assertEqual(self.project.tree.leaves(), [])
		self.assertEqual(len(self.project.tree.children_of(self.project.tree.ROOT)),
			len(tree_mod.DEFAULT_TOPLEVELS))

	#============================================
	def test_load_missing_manifest(self) -> None:
		closes = self.host.closes
		with self.assertRaises(errors.IoError):
			self.project.load(os.path.join(self.temp.name, "missing.yyd"))
		self.assertEqual(self.host.resets, 1)
		self.assertEqual(self.host.closes, closes + 1)

	#============================================
	def test_load_rejects_other_formats(self) -> None:
		with self.assertRaises(errors.OtherError):
			self.project.load(os.path.join(self.temp.name, "game.gm81"))
		self.assertEqual(self.host.resets, 1)

	#============================================
	def test_failed_save_leaves_prior_files(self) -> None:
		self.project.save(self.target)
		before = read_tree_files(self.temp.name)
		data = self.project.model
		duplicate = data.create('script', 'scr_init')
		tops = toplevel_ids(self.project.tree)
		self.project.tree.attach_leaf(tops['script'], 'script', duplicate.index)
		closes = self.host.closes
		with self.assertRaises(errors.OtherError):
			self.project.save(self.target)
		self.assertEqual(self.host.closes, closes + 1)
		self.assertEqual(read_tree_files(self.temp.name), before)

	#============================================
	def test_save_as_legacy_path_writes_yyd(self) -> None:
		written = self.project.save(os.path.join(self.temp.name, "game.gm81"))
		self.assertEqual(written, self.target)
		self.assertTrue(os.path.isfile(self.target))
		self.assertFalse(os.path.exists(os.path.join(self.temp.name, "game.gm81")))

	#============================================
	def test_resave_removes_stale_documents(self) -> None:
		self.project.save(self.target)
		stale = os.path.join(self.temp.name, "game", "scripts", "scr_init.yaml")
		self.assertTrue(os.path.isfile(stale))
		empty = YydProject(host=RecordingHost(), quiet=True)
		empty.save(self.target)
		self.assertFalse(os.path.exists(stale))
		self.assertFalse(os.path.exists(os.path.join(self.temp.name, "game", "sprites")))

	#============================================
	def test_resave_keeps_files_it_did_not_write(self) -> None:
		beside = os.path.join(self.temp.name, "scripts", "backup.sh")
		inside = os.path.join(self.temp.name, "game", "scripts", "backup.sh")
		for user_file in (beside, inside):
			os.makedirs(os.path.dirname(user_file), exist_ok=True)
			with open(user_file, 'w', encoding='utf-8') as handle:
				handle.write("#!/bin/sh\n")
		self.project.save(self.target)
		YydProject(host=RecordingHost(), quiet=True).save(self.target)
		self.assertTrue(os.path.isfile(beside))
		self.assertTrue(os.path.isfile(inside))
		self.assertFalse(os.path.exists(os.path.join(self.temp.name, "game", "scripts", "scr_init.yaml")))

	#============================================
	def test_two_projects_share_a_folder(self) -> None:
		self.project.save(os.path.join(self.temp.name, "a.yyd"))
		other = new_project()
		script = other.model.create('script', 'scr_only')
		other.tree.attach_leaf(toplevel_ids(other.tree)['script'], 'script', script.index)
		other.save(os.path.join(self.temp.name, "b.yyd"))
		first = new_project()
		first.load(os.path.join(self.temp.name, "a.yyd"))
		self.assertEqual(first.model, self.project.model)
		self.assertEqual(first.tree, self.project.tree)
		second = new_project()
		second.load(os.path.join(self.temp.name, "b.yyd"))
		self.assertEqual(second.model, other.model)

	#============================================
	def test_manifest_is_written_last(self) -> None:
		written = []
		original = documents._write_file_atomic
		def recording_write(target, data):
			written.append(target)
			original(target, data)
		documents._write_file_atomic = recording_write
		try:
			self.project.save(self.target)
		finally:
			documents._write_file_atomic = original
		self.assertEqual(written[-1], os.path.abspath(self.target))
		self.assertEqual(written.count(os.path.abspath(self.target)), 1)

#============================================

def test_is_yyd_path():
	assert project_mod.is_yyd_path("game.yyd")
	assert project_mod.is_yyd_path("/some/dir/GAME.YYD")
	assert project_mod.is_yyd_path("/some/dir/.yyd")
	assert not project_mod.is_yyd_path("game.gm81")
	assert not project_mod.is_yyd_path("game.yyd.bak")

#============================================

def test_sniff_format():
	assert project_mod.sniff_format("a.yyd") == 'yyd'
	assert project_mod.sniff_format("a.gm81") == 'gm81'
	assert project_mod.sniff_format("a.gmk") == 'gm81'
	assert project_mod.sniff_format("a.txt") is None

#============================================

def test_normalize_save_path():
	assert project_mod.normalize_save_path("x/game.gm81") == "x/game.yyd"
	assert project_mod.normalize_save_path("x/game.yyd") == "x/game.yyd"
	assert project_mod.normalize_save_path("x/game") == "x/game.yyd"

#============================================

def test_validate_reports_unsaveable_project():
	project = build_sample_project()
	project.validate()
	orphan_room = project.model.create('room', 'rm_orphan')
	project.model.get('path', 0).room = orphan_room.index
	try:
		project.validate()
	except errors.AssetNotFound as exc:
		assert exc.name == "room 1"
	else:
		raise AssertionError("reference to an unsaved room was accepted")

#============================================

def test_reentrant_save_is_rejected(tmp_path):
	project = build_sample_project()
	project.busy = True
	try:
		project.save(str(tmp_path / "game.yyd"))
	except errors.OtherError as exc:
		assert "already running" in str(exc)
	else:
		raise AssertionError("nested save was accepted")
	assert not os.path.exists(str(tmp_path / "game.yyd"))

#============================================

def test_bare_manifest_keeps_documents_beside_it(tmp_path):
	manifest = str(tmp_path / ".yyd")
	assert documents.project_dir(manifest) == str(tmp_path)
	assert documents.project_dir(str(tmp_path / "game.YYD")) == str(tmp_path / "game")

#============================================

def test_managed_paths():
	assert documents.is_managed_path("scripts/scr_a.yaml")
	assert documents.is_managed_path("sprites/spr_a/0.png")
	assert not documents.is_managed_path("tree.yaml")
	assert not documents.is_managed_path("scripts/../../etc/passwd")
	assert not documents.is_managed_path("notes/readme.txt")
	assert not documents.is_managed_path(7)

#============================================

def test_reentrant_validate_is_rejected():
	project = build_sample_project()
	project.validate()
	assert not project.busy
	project.busy = True
	try:
		project.validate()
	except errors.OtherError as exc:
		assert "already running" in str(exc)
	else:
		raise AssertionError("validate ran during a save")
