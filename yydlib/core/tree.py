#!/usr/bin/env python3

"""
Resource tree: the ordered hierarchy of top-level containers, groups,
folders and resource leaves shown in the editor.
"""

from yydlib.core import errors
from yydlib.core import model

#============================================

NODE_ROOT = 'root'
NODE_TOPLEVEL = 'toplevel'
NODE_GROUP = 'group'
NODE_FOLDER = 'folder'
NODE_LEAF = 'leaf'

CONTAINER_TYPES = (NODE_ROOT, NODE_TOPLEVEL, NODE_GROUP, NODE_FOLDER)

# top-level entries that are not resource collections
SPECIAL_TOPLEVELS = ('game_information', 'game_settings', 'extension_packages')

DEFAULT_TOPLEVELS = (
	('Sprites', model.SPRITE),
	('Sounds', model.SOUND),
	('Backgrounds', model.BACKGROUND),
	('Paths', model.PATH),
	('Scripts', model.SCRIPT),
	('Fonts', model.FONT),
	('Time Lines', model.TIMELINE),
	('Objects', model.OBJECT),
	('Rooms', model.ROOM),
	('Game Information', 'game_information'),
	('Global Game Settings', 'game_settings'),
	('Extension Packages', 'extension_packages'),
)

#============================================

class TreeNode():
	def __init__(self, node_id: int, name: str, node_type: str, kind: str = None,
		index: int = None, parent: int = None):
		self.node_id = node_id
		self.name = name
		self.node_type = node_type
		self.kind = kind
		self.index = index
		self.parent = parent
		self.children = []

#============================================

class ResourceTree():
	ROOT = 0

	def __init__(self, model_data: model.ProjectModel):
		self.model = model_data
		self.nodes = {}
		self.next_id = 0
		self.clear()

	#============================
	@classmethod
	def default(cls, model_data: model.ProjectModel) -> 'ResourceTree':
		tree = cls(model_data)
		for name, kind in DEFAULT_TOPLEVELS:
			tree.create_toplevel(name, kind)
		return tree

	#============================
	def clear(self) -> None:
		self.nodes = {self.ROOT: TreeNode(self.ROOT, '', NODE_ROOT)}
		self.next_id = self.ROOT + 1

	#============================
	def node(self, node_id: int) -> TreeNode:
		node = self.nodes.get(node_id)
		if node is None:
			raise errors.OtherError(f"tree node {node_id} does not exist")
		return node

	#============================
	def _add(self, parent: int, name: str, node_type: str, kind: str = None,
		index: int = None) -> int:
		parent_node = self.node(parent)
		if parent_node.node_type not in CONTAINER_TYPES:
			raise errors.OtherError(f"tree node {parent_node.name!r} cannot hold children")
		node_id = self.next_id
		self.next_id += 1
		self.nodes[node_id] = TreeNode(node_id, name, node_type, kind, index, parent)
		parent_node.children.append(node_id)
		return node_id

	#============================
	def create_toplevel(self, name: str, kind: str) -> int:
		if kind not in model.TREE_KINDS and kind not in SPECIAL_TOPLEVELS:
			raise errors.OtherError(f"no top-level container for kind {kind}")
		return self._add(self.ROOT, name, NODE_TOPLEVEL, kind)

	#============================
	def create_group(self, parent: int, name: str, node_type: str = NODE_GROUP) -> int:
		if node_type not in (NODE_GROUP, NODE_FOLDER):
			raise errors.OtherError(f"invalid group node type {node_type}")
		parent_kind = self.node(parent).kind
		if parent_kind in SPECIAL_TOPLEVELS:
			raise errors.OtherError(f"{parent_kind} cannot hold groups")
		return self._add(parent, name, node_type, parent_kind)

	#============================
	def attach_leaf(self, parent: int, kind: str, index: int) -> int:
		if kind not in model.TREE_KINDS or not self.model.exists(kind, index):
			raise errors.AssetNotFound(f"{kind} {index}")
		parent_node = self.node(parent)
		if parent_node.kind != kind:
			raise errors.OtherError(f"tree node {parent_node.name!r} does not hold {kind} resources")
		return self._add(parent, self.model.get(kind, index).name, NODE_LEAF, kind, index)

	#============================
	def leaf_name(self, node: TreeNode) -> str:
		"""Leaves show the current name of the resource they point at."""
		if node.node_type != NODE_LEAF:
			return node.name
		return self.model.get(node.kind, node.index).name

	#============================
	def children_of(self, node_id: int) -> list:
		return list(self.node(node_id).children)

	#============================
	def walk(self, node_id: int = None):
		"""
		Yield (depth, node) pairs depth-first in child order, root excluded.
		"""
		if node_id is None:
			node_id = self.ROOT
		stack = [(0, child) for child in reversed(self.children_of(node_id))]
		while len(stack) > 0:
			depth, child_id = stack.pop()
			child = self.nodes[child_id]
			yield (depth, child)
			for grandchild in reversed(child.children):
				stack.append((depth + 1, grandchild))

	#============================
	def leaves(self) -> list:
		result = []
		for _, node in self.walk():
			if node.node_type == NODE_LEAF:
				result.append((node.kind, node.index))
		return result

	#============================
	def structure(self, node_id: int = None) -> list:
		if node_id is None:
			node_id = self.ROOT
		result = []
		for child_id in self.children_of(node_id):
			child = self.nodes[child_id]
			result.append((self.leaf_name(child), child.node_type, child.kind, child.index,
				self.structure(child_id)))
		return result

	#============================
	def __eq__(self, other):
		if not isinstance(other, ResourceTree):
			return NotImplemented
		return self.structure() == other.structure()
