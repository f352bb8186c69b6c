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
from yydlib.core import tree as tree_mod

#============================================

def make_tree():
	data = model.ProjectModel(facade.MemoryHost(show_progress=False))
	return (data, tree_mod.ResourceTree.default(data))

#============================================

class ResourceTreeTest(unittest.TestCase):
	#============================================
	def test_default_toplevels_in_order(self) -> None:
		(_, tree) = make_tree()
		names = [tree.node(node_id).name for node_id in tree.children_of(tree.ROOT)]
		self.assertEqual(names[:3], ['Sprites', 'Sounds', 'Backgrounds'])
		self.assertEqual(len(names), len(tree_mod.DEFAULT_TOPLEVELS))

	#============================================
	def test_groups_inherit_kind_and_keep_order(self) -> None:
		(data, tree) = make_tree()
		sprites = tree.children_of(tree.ROOT)[0]
		first = data.create('sprite', 'spr_a')
		second = data.create('sprite', 'spr_b')
		group = tree.create_group(sprites, 'Enemies')
		tree.attach_leaf(group, 'sprite', second.index)
		tree.attach_leaf(sprites, 'sprite', first.index)
		self.assertEqual(tree.node(group).kind, 'sprite')
		self.assertEqual(tree.leaves(), [('sprite', second.index), ('sprite', first.index)])
		walked = [(depth, node.name) for depth, node in tree.walk(sprites)]
		self.assertEqual(walked, [(0, 'Enemies'), (1, 'spr_b'), (0, 'spr_a')])

	#============================================
	def test_attach_missing_resource_raises(self) -> None:
		(_, tree) = make_tree()
		sprites = tree.children_of(tree.ROOT)[0]
		with self.assertRaises(errors.AssetNotFound):
			tree.attach_leaf(sprites, 'sprite', 4)

	#============================================
	def test_leaf_cannot_hold_children(self) -> None:
		(data, tree) = make_tree()
		sprites = tree.children_of(tree.ROOT)[0]
		sprite = data.create('sprite', 'spr_a')
		leaf = tree.attach_leaf(sprites, 'sprite', sprite.index)
		with self.assertRaises(errors.OtherError):
			tree.create_group(leaf, 'nope')

	#============================================
	def test_equality_follows_structure(self) -> None:
		(_, tree_a) = make_tree()
		(_, tree_b) = make_tree()
		self.assertEqual(tree_a, tree_b)
		tree_a.create_group(tree_a.children_of(tree_a.ROOT)[4], 'Utilities')
		self.assertNotEqual(tree_a, tree_b)

	#============================================
	def test_leaf_kind_must_match_container(self) -> None:
		(data, tree) = make_tree()
		rooms = tree.children_of(tree.ROOT)[8]
		sprite = data.create('sprite', 'spr_a')
		with self.assertRaises(errors.OtherError):
			tree.attach_leaf(rooms, 'sprite', sprite.index)
		with self.assertRaises(errors.OtherError):
			tree.attach_leaf(tree.ROOT, 'sprite', sprite.index)
		self.assertEqual(tree.leaves(), [])

	#============================================
	def test_leaf_name_follows_resource_rename(self) -> None:
		(data, tree) = make_tree()
		sprites = tree.children_of(tree.ROOT)[0]
		sprite = data.create('sprite', 'spr_a')
		leaf = tree.attach_leaf(sprites, 'sprite', sprite.index)
		sprite.name = 'spr_player'
		self.assertEqual(tree.leaf_name(tree.node(leaf)), 'spr_player')
		self.assertEqual(tree.structure(sprites)[0][0], 'spr_player')
