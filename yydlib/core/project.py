#!/usr/bin/env python3

import os
from yydlib.core import actions
from yydlib.core import documents
from yydlib.core import errors
from yydlib.core import facade
from yydlib.core import loader
from yydlib.core import model
from yydlib.core import tree as tree_mod
from yydlib.core import utils
from yydlib.core import writer

#============================================

YYD_EXTENSION = '.yyd'
LEGACY_EXTENSIONS = ('.gm81', '.gmk', '.gm6')

#============================================

def is_yyd_path(path: str) -> bool:
	base_name = os.path.basename(path)
	if base_name.lower() == YYD_EXTENSION:
		return True
	return os.path.splitext(base_name)[1].lower() == YYD_EXTENSION

#============================================

def sniff_format(path: str) -> str:
	"""
	Return 'yyd', 'gm81' or None for a project file path.
	"""
	if is_yyd_path(path):
		return 'yyd'
	if os.path.splitext(path)[1].lower() in LEGACY_EXTENSIONS:
		return 'gm81'
	return None

#============================================

def normalize_save_path(path: str) -> str:
	if is_yyd_path(path):
		return path
	(stem, extension) = os.path.splitext(path)
	if extension.lower() in LEGACY_EXTENSIONS:
		return stem + YYD_EXTENSION
	return path + YYD_EXTENSION

#============================================

class YydProject():
	def __init__(self, host: facade.HostFacade = None, library_files: list = None,
		quiet: bool = False, write_icons: bool = True):
		if quiet:
			utils.set_quiet_mode(True)
		self.host = host if host is not None else facade.MemoryHost()
		self.write_icons = write_icons
		libraries = [actions.load_core_library(self.host)]
		for library_file in library_files or []:
			libraries.append(actions.load_library_file(self.host, library_file))
		self.catalog = actions.ActionCatalog(self.host, libraries)
		self.model = None
		self.tree = None
		self.project_file = None
		self.busy = False
		self.new_project()

	#============================
	def new_project(self) -> None:
		self.model = model.ProjectModel(self.host)
		self.tree = tree_mod.ResourceTree.default(self.model)
		self.project_file = None

	#============================
	def save(self, target_path: str) -> str:
		"""
		Write the project as a document set; returns the manifest path written.
		"""
		target_path = normalize_save_path(target_path)
		self._enter()
		try:
			project_writer = writer.ProjectWriter(self.tree, self.model, self.host,
				write_icons=self.write_icons)
			document_set = project_writer.serialize(os.path.basename(target_path))
			documents.write_document_set(document_set, target_path)
			self.host.advance_progress(50)
		finally:
			self.busy = False
			self.host.close_progress()
		self.project_file = target_path
		utils.status(f"saved {len(document_set)} documents to {target_path}")
		return target_path

	#============================
	def load(self, source_path: str) -> None:
		self._enter()
		try:
			if not is_yyd_path(source_path):
				raise errors.OtherError(f"{source_path} is not a yyd project")
			document_set = documents.read_document_set(source_path)
			self.host.advance_progress(10)
			project_loader = loader.ProjectLoader(self.host, self.catalog)
			(tree, model_data) = project_loader.load(document_set, os.path.basename(source_path))
		except Exception:
			self.new_project()
			self.host.reset_project()
			raise
		finally:
			self.busy = False
			self.host.close_progress()
		self.tree = tree
		self.model = model_data
		self.project_file = source_path
		utils.status(f"loaded {len(document_set)} documents from {source_path}")

	#============================
	def _enter(self) -> None:
		if self.busy:
			raise errors.OtherError("a save or load is already running")
		self.busy = True

	#============================
	def validate(self) -> None:
		"""
		Serialize in memory only, raising whatever a save would raise.
		"""
		self._enter()
		try:
			project_writer = writer.ProjectWriter(self.tree, self.model, self.host,
				write_icons=self.write_icons)
			project_writer.serialize()
		finally:
			self.busy = False
			self.host.close_progress()

	#============================
	def dump_tree(self) -> list:
		return self._dump_children(self.tree.ROOT)

	#============================
	def _dump_children(self, node_id: int) -> list:
		result = []
		for child_id in self.tree.children_of(node_id):
			node = self.tree.node(child_id)
			if node.node_type == tree_mod.NODE_LEAF:
				result.append(f"{node.kind}: {self.tree.leaf_name(node)}")
				continue
			result.append({node.name: self._dump_children(child_id)})
		return result
