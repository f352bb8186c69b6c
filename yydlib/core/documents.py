#!/usr/bin/env python3

"""
Portable document set: relative POSIX paths mapped to file contents,
plus the YAML dialect used for every document.
"""

import os
import tempfile
import yaml
from yydlib.core import errors
from yydlib.core import schema
from yydlib.core import utils

#============================================

# documents larger than this are refused before parsing
MAX_DOCUMENT_BYTES = 10 ** 7

#============================================

class DocumentDumper(yaml.SafeDumper):
	def ignore_aliases(self, data):
		return True

#============================================

def _represent_str(dumper, value: str):
	if '\n' in value:
		return dumper.represent_scalar('tag:yaml.org,2002:str', value, style='|')
	return dumper.represent_scalar('tag:yaml.org,2002:str', value)

DocumentDumper.add_representer(str, _represent_str)

#============================================

def dump_yaml(data: dict) -> bytes:
	text = yaml.dump(data, Dumper=DocumentDumper, sort_keys=False,
		allow_unicode=True, default_flow_style=False, width=100)
	return text.encode('utf-8')

#============================================

def parse_yaml(path: str, raw: bytes) -> dict:
	if len(raw) > MAX_DOCUMENT_BYTES:
		raise errors.DocumentSyntaxError(path, "document is larger than 10MB")
	try:
		text = raw.decode('utf-8')
	except UnicodeDecodeError:
		raise errors.DocumentSyntaxError(path, "document is not valid UTF-8")
	try:
		data = yaml.safe_load(text)
	except yaml.YAMLError as exc:
		raise errors.DocumentSyntaxError(path, str(exc).splitlines()[0])
	if not isinstance(data, dict):
		raise errors.DocumentSyntaxError(path, "document must be a mapping at the top level")
	return data

#============================================

class DocumentSet():
	def __init__(self):
		self.files = {}

	#============================
	def put_yaml(self, path: str, data: dict) -> None:
		self.put_bytes(path, dump_yaml(data))

	#============================
	def put_bytes(self, path: str, data: bytes) -> None:
		if path in self.files:
			raise errors.OtherError(f"document {path} written twice")
		self.files[path] = bytes(data)

	#============================
	def has(self, path: str) -> bool:
		return path in self.files

	#============================
	def get_bytes(self, path: str) -> bytes:
		data = self.files.get(path)
		if data is None:
			raise errors.IoError(path, "file not found in project")
		return data

	#============================
	def get_yaml(self, path: str) -> dict:
		return parse_yaml(path, self.get_bytes(path))

	#============================
	def paths(self) -> list:
		return sorted(self.files.keys())

	#============================
	def __len__(self) -> int:
		return len(self.files)

	#============================
	def __eq__(self, other):
		if not isinstance(other, DocumentSet):
			return NotImplemented
		return self.files == other.files

#============================================

def managed_dirs() -> list:
	return sorted(set(schema.KIND_DIRS.values()))

#============================================

def project_dir(manifest_file: str) -> str:
	"""
	Folder holding the documents of a manifest: `<stem>/` beside it, or the
	manifest's own folder when the manifest is a bare `.yyd` file.
	"""
	manifest_file = os.path.abspath(manifest_file)
	root_dir = os.path.dirname(manifest_file)
	base_name = os.path.basename(manifest_file)
	if base_name.lower().endswith('.yyd'):
		stem = base_name[:-len('.yyd')]
	else:
		stem = os.path.splitext(base_name)[0]
	if stem == '':
		return root_dir
	return os.path.join(root_dir, stem)

#============================================

def is_managed_path(rel_path) -> bool:
	if not isinstance(rel_path, str) or '\\' in rel_path:
		return False
	parts = rel_path.split('/')
	if len(parts) < 2 or parts[0] not in managed_dirs():
		return False
	return all(part not in ('', '.', '..') for part in parts)

#============================================

def read_document_set(manifest_file: str) -> DocumentSet:
	"""
	Read the manifest, the tree document and every file in the managed
	folders of its document folder.
	"""
	base_dir = project_dir(manifest_file)
	manifest_name = os.path.basename(manifest_file)
	documents = DocumentSet()
	documents.put_bytes(manifest_name, read_file(manifest_file))
	tree_file = os.path.join(base_dir, schema.TREE_DOCUMENT)
	if os.path.exists(tree_file):
		documents.put_bytes(schema.TREE_DOCUMENT, read_file(tree_file))
	for dir_name in managed_dirs():
		base = os.path.join(base_dir, dir_name)
		if not os.path.isdir(base):
			continue
		for walk_root, dirs, files in os.walk(base):
			dirs.sort()
			for name in sorted(files):
				full_path = os.path.join(walk_root, name)
				rel_path = os.path.relpath(full_path, base_dir).replace(os.sep, '/')
				documents.put_bytes(rel_path, read_file(full_path))
	return documents

#============================================

def read_file(path: str) -> bytes:
	try:
		with open(path, 'rb') as handle:
			return handle.read()
	except OSError as exc:
		raise errors.IoError(path, exc.strerror or str(exc))

#============================================

def previous_files(manifest_file: str) -> list:
	"""
	Managed paths named by the `files` list of the manifest already on disk.
	"""
	if not os.path.isfile(manifest_file):
		return []
	try:
		data = parse_yaml(manifest_file, read_file(manifest_file))
	except errors.ProjectError as exc:
		utils.warning(f"keeping old documents, previous manifest is unreadable: {exc}")
		return []
	listed = data.get('files')
	if not isinstance(listed, list):
		return []
	return [rel_path for rel_path in listed if is_managed_path(rel_path)]

#============================================

def write_document_set(documents: DocumentSet, manifest_file: str) -> None:
	"""
	Write every document into the manifest's document folder, then the
	manifest, then remove files the previous save listed and this one did
	not write. Each file is replaced atomically.
	"""
	manifest_file = os.path.abspath(manifest_file)
	manifest_name = os.path.basename(manifest_file)
	base_dir = project_dir(manifest_file)
	manifest_data = documents.get_bytes(manifest_name)
	stale = previous_files(manifest_file)
	try:
		for rel_path in documents.paths():
			if rel_path == manifest_name:
				continue
			target = os.path.join(base_dir, *rel_path.split('/'))
			_write_file_atomic(target, documents.get_bytes(rel_path))
		_write_file_atomic(manifest_file, manifest_data)
		_remove_stale(documents, base_dir, stale)
	except OSError as exc:
		raise errors.IoError(exc.filename or base_dir, exc.strerror or str(exc))

#============================================

def _write_file_atomic(target: str, data: bytes) -> None:
	target_dir = os.path.dirname(target)
	os.makedirs(target_dir, exist_ok=True)
	(handle, temp_path) = tempfile.mkstemp(prefix=".yyd-", dir=target_dir)
	try:
		with os.fdopen(handle, 'wb') as temp_file:
			temp_file.write(data)
		os.chmod(temp_path, 0o644)
		os.replace(temp_path, target)
	except OSError:
		if os.path.exists(temp_path):
			os.remove(temp_path)
		raise

#============================================

def _remove_stale(documents: DocumentSet, base_dir: str, stale: list) -> None:
	# case-insensitive filesystems see SCR_A.yaml and scr_a.yaml as one file
	written = set(path.casefold() for path in documents.paths())
	for rel_path in stale:
		if rel_path.casefold() in written:
			continue
		full_path = os.path.join(base_dir, *rel_path.split('/'))
		if not os.path.isfile(full_path):
			continue
		os.remove(full_path)
		_prune_empty_dirs(os.path.dirname(full_path), base_dir)

#============================================

def _prune_empty_dirs(dir_path: str, base_dir: str) -> None:
	base_dir = os.path.normpath(base_dir)
	dir_path = os.path.normpath(dir_path)
	while dir_path != base_dir and dir_path.startswith(base_dir + os.sep):
		if len(os.listdir(dir_path)) > 0:
			return
		os.rmdir(dir_path)
		dir_path = os.path.dirname(dir_path)
