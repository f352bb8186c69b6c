#!/usr/bin/env python3

"""
Serializer: resource tree + resource model -> portable document set.
"""

import os
from yydlib import thumbnail
from yydlib.core import errors
from yydlib.core import facade
from yydlib.core import model
from yydlib.core import schema
from yydlib.core import tree as tree_mod
from yydlib.core import utils
from yydlib.core.documents import DocumentSet
from yydlib.media import images

#============================================

class ProjectWriter():
	def __init__(self, tree: tree_mod.ResourceTree, model_data: model.ProjectModel,
		host: facade.HostFacade = None, write_icons: bool = True):
		self.tree = tree
		self.model = model_data
		self.host = host if host is not None else model_data.host
		self.write_icons = write_icons
		self.documents = None
		self.emitted = {}

	#============================
	def serialize(self, manifest_name: str = 'project.yyd') -> DocumentSet:
		self.documents = DocumentSet()
		self._collect_emitted()
		self._emit_tree()
		work = []
		for kind in schema.LOAD_ORDER:
			collection = self.model.collection(kind)
			for index in sorted(self.emitted[kind]):
				work.append((kind, collection.get(index)))
		ticker = facade.ProgressTicker(self.host, len(work), 50)
		for kind, handle in work:
			self._emit_resource(kind, handle)
			ticker.tick()
		ticker.finish()
		self._emit_manifest(manifest_name)
		return self.documents

	#============================
	def _collect_emitted(self) -> None:
		self.emitted = {kind: set() for kind in model.RESOURCE_KINDS}
		for kind, index in self.tree.leaves():
			# dangling leaves fail here rather than producing a broken tree
			self.model.get(kind, index)
			if index in self.emitted[kind]:
				name = self.model.get(kind, index).name
				raise errors.OtherError(f"{kind} {name!r} appears twice in the resource tree")
			self.emitted[kind].add(index)
		for kind in schema.UNTREED_KINDS + (model.EXTENSION,):
			for handle in self.model.collection(kind).live():
				self.emitted[kind].add(handle.index)
		for kind in model.RESOURCE_KINDS:
			names = []
			for index in sorted(self.emitted[kind]):
				name = self.model.get(kind, index).name
				utils.check_resource_name(kind, name, file_name=(kind != model.EXTENSION))
				names.append(name)
			clash = utils.find_name_clash(names)
			if clash is not None:
				raise errors.OtherError(f"{kind} name {clash[0]!r} clashes with {clash[1]!r}")

	#============================
	def _name_table(self, kind: str) -> list:
		collection = self.model.collection(kind)
		names = []
		for index in range(len(collection)):
			if index in self.emitted[kind]:
				names.append(collection.get(index).name)
			else:
				names.append(None)
		return names

	#============================
	def _emit_manifest(self, manifest_name: str) -> None:
		resources = {}
		for kind in schema.LOAD_ORDER:
			if len(self.model.collection(kind)) > 0:
				resources[kind] = self._name_table(kind)
		manifest = {
			schema.VERSION_KEY: schema.FORMAT_VERSION,
			'exe_version': schema.EXE_VERSION,
			'resources': resources,
			'extensions': self._name_table(model.EXTENSION),
			# the next save deletes only what this list names
			'files': self.documents.paths(),
		}
		self.documents.put_yaml(manifest_name, manifest)

	#============================
	def _emit_tree(self) -> None:
		data = {
			schema.VERSION_KEY: schema.FORMAT_VERSION,
			'tree': self._emit_tree_children(self.tree.ROOT),
		}
		self.documents.put_yaml(schema.TREE_DOCUMENT, data)

	#============================
	def _emit_tree_children(self, node_id: int) -> list:
		entries = []
		for child_id in self.tree.children_of(node_id):
			node = self.tree.node(child_id)
			if node.node_type == tree_mod.NODE_LEAF:
				entries.append({node.kind: self.model.get(node.kind, node.index).name})
				continue
			if node.node_type == tree_mod.NODE_TOPLEVEL:
				entry = {'toplevel': node.name, 'kind': node.kind}
			else:
				entry = {node.node_type: node.name}
			entry['children'] = self._emit_tree_children(child_id)
			entries.append(entry)
		return entries

	#============================
	def _ref(self, kind: str, index):
		if index is None:
			return None
		if index not in self.emitted[kind]:
			raise errors.AssetNotFound(f"{kind} {index}")
		return self.model.get(kind, index).name

	#============================
	def _emit_fields(self, record, fields: tuple) -> dict:
		data = {}
		for key, attr, value_type in fields:
			value = getattr(record, attr)
			reference = schema.ref_kind(value_type)
			if reference is not None:
				data[key] = self._ref(reference[0], value)
			else:
				data[key] = value
		return data

	#============================
	def _document(self, record, fields: tuple) -> dict:
		data = {schema.VERSION_KEY: schema.FORMAT_VERSION}
		data.update(self._emit_fields(record, fields))
		return data

	#============================
	def _emit_resource(self, kind: str, handle) -> None:
		emitters = {
			model.SPRITE: self._emit_sprite,
			model.SOUND: self._emit_sound,
			model.BACKGROUND: self._emit_background,
			model.PATH: self._emit_path,
			model.SCRIPT: self._emit_script,
			model.FONT: self._emit_font,
			model.TIMELINE: self._emit_timeline,
			model.OBJECT: self._emit_object,
			model.ROOM: self._emit_room,
			model.INCLUDED_FILE: self._emit_included_file,
			model.TRIGGER: self._emit_trigger,
		}
		data = emitters[kind](handle)
		self.documents.put_yaml(schema.document_path(kind, handle.name), data)

	#============================
	def _put_payload(self, kind: str, name: str, file_name: str, data: bytes) -> str:
		self.documents.put_bytes(f"{schema.payload_dir(kind, name)}/{file_name}", data)
		return file_name

	#============================
	def _put_icon(self, kind: str, name: str, frame: model.Frame) -> None:
		if not self.write_icons or frame.is_empty():
			return
		frame.validate()
		icon = images.encode_icon(thumbnail.make_thumbnail(frame))
		self._put_payload(kind, name, 'icon.png', icon)

	#============================
	def _emit_sprite(self, sprite: model.Sprite) -> dict:
		data = self._document(sprite, schema.SPRITE_FIELDS)
		frame_files = []
		for position, frame in enumerate(sprite.frames):
			if frame.is_empty():
				frame_files.append(None)
				continue
			frame_files.append(self._put_payload(model.SPRITE, sprite.name,
				f"{position}.png", images.encode_png(frame)))
		data['frames'] = frame_files
		if sprite.frame_count > 0:
			self._put_icon(model.SPRITE, sprite.name, sprite.frames[0])
		return data

	#============================
	def _emit_sound(self, sound: model.Sound) -> dict:
		data = self._document(sound, schema.SOUND_FIELDS)
		payload = self.host.stream_read(sound, 'data')
		data['data'] = None
		if payload is not None:
			file_name = f"data{utils.payload_suffix(sound.extension)}"
			data['data'] = self._put_payload(model.SOUND, sound.name, file_name, payload)
		return data

	#============================
	def _emit_background(self, background: model.Background) -> dict:
		data = self._document(background, schema.BACKGROUND_FIELDS)
		data['image'] = None
		frame = background.frame
		if frame is not None and not frame.is_empty():
			data['image'] = self._put_payload(model.BACKGROUND, background.name,
				'image.png', images.encode_png(frame))
			self._put_icon(model.BACKGROUND, background.name, frame)
		return data

	#============================
	def _emit_path(self, path: model.Path) -> dict:
		data = self._document(path, schema.PATH_FIELDS)
		data['points'] = [self._emit_fields(point, schema.PATH_POINT_FIELDS)
			for point in path.points]
		return data

	#============================
	def _emit_script(self, script: model.Script) -> dict:
		return self._document(script, schema.SCRIPT_FIELDS)

	#============================
	def _emit_font(self, font: model.Font) -> dict:
		return self._document(font, schema.FONT_FIELDS)

	#============================
	def _emit_actions(self, event: model.Event) -> list:
		entries = []
		for action in event.actions:
			entry = {
				'library': action.lib_id,
				'action': action.id,
			}
			entry.update(self._emit_fields(action, schema.ACTION_FIELDS))
			entry['arguments'] = list(action.param_strings[:action.param_count])
			entries.append(entry)
		return entries

	#============================
	def _emit_timeline(self, timeline: model.Timeline) -> dict:
		data = self._document(timeline, ())
		moments = []
		for moment in timeline.moments:
			moments.append({
				'time': moment.time,
				'actions': self._emit_actions(moment.event),
			})
		data['moments'] = moments
		return data

	#============================
	def _emit_object(self, obj: model.Object) -> dict:
		data = self._document(obj, schema.OBJECT_FIELDS)
		events = []
		for event_type, slot in enumerate(obj.events):
			for event_number in sorted(slot.keys()):
				entry = {'type': schema.EVENT_TYPES[event_type]}
				if event_type == schema.COLLISION_EVENT:
					entry['object'] = self._ref(model.OBJECT, event_number)
				else:
					entry['number'] = event_number
				entry['actions'] = self._emit_actions(slot[event_number])
				events.append(entry)
		data['events'] = events
		return data

	#============================
	def _emit_room(self, room: model.Room) -> dict:
		data = self._document(room, schema.ROOM_FIELDS)
		data['backgrounds'] = [self._emit_fields(layer, schema.ROOM_BACKGROUND_FIELDS)
			for layer in room.backgrounds]
		data['views'] = [self._emit_fields(view, schema.VIEW_FIELDS)
			for view in room.views]
		data['instances'] = [self._emit_fields(instance, schema.INSTANCE_FIELDS)
			for instance in room.instances]
		data['tiles'] = [self._emit_fields(tile, schema.TILE_FIELDS)
			for tile in room.tiles]
		return data

	#============================
	def _emit_included_file(self, included: model.IncludedFile) -> dict:
		data = self._document(included, schema.INCLUDED_FILE_FIELDS)
		payload = self.host.stream_read(included, 'data')
		data['data'] = None
		if payload is not None:
			suffix = utils.payload_suffix(os.path.splitext(included.file_name)[1])
			data['data'] = self._put_payload(model.INCLUDED_FILE, included.name,
				f"data{suffix}", payload)
		return data

	#============================
	def _emit_trigger(self, trigger: model.Trigger) -> dict:
		return self._document(trigger, schema.TRIGGER_FIELDS)

#============================================

def serialize(tree: tree_mod.ResourceTree, model_data: model.ProjectModel,
	manifest_name: str = 'project.yyd', write_icons: bool = True) -> DocumentSet:
	writer = ProjectWriter(tree, model_data, write_icons=write_icons)
	return writer.serialize(manifest_name)
