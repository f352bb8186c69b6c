#!/usr/bin/env python3

"""
Deserializer: portable document set -> resource tree + resource model.
"""

from yydlib.core import errors
from yydlib.core import facade
from yydlib.core import fields
from yydlib.core import model
from yydlib.core import schema
from yydlib.core import tree as tree_mod
from yydlib.core import utils
from yydlib.core.actions import ActionCatalog
from yydlib.core.documents import DocumentSet
from yydlib.media import images

#============================================

MANIFEST_KEYS = (schema.VERSION_KEY, 'exe_version', 'resources', 'extensions', 'files')
CONTAINER_KEYS = ('children',)

#============================================

class PendingReference():
	def __init__(self, path: str, kind: str, nullable: bool, raw, assign):
		self.path = path
		self.kind = kind
		self.nullable = nullable
		self.raw = raw
		self.assign = assign

#============================================

class ProjectLoader():
	def __init__(self, host: facade.HostFacade, catalog: ActionCatalog):
		self.host = host
		self.catalog = catalog
		self.documents = None
		self.model = None
		self.tree = None
		self.pending = []
		self.filed = set()

	#============================
	def load(self, documents: DocumentSet, manifest_name: str) -> tuple:
		self.documents = documents
		self.model = model.ProjectModel(self.host)
		self.tree = tree_mod.ResourceTree(self.model)
		self.pending = []
		self.filed = set()
		manifest = self._parse_manifest(manifest_name)
		work = []
		for kind in schema.LOAD_ORDER:
			for name in manifest['resources'].get(kind, []):
				work.append((kind, name))
		ticker = facade.ProgressTicker(self.host, len(work), 80)
		for kind, name in work:
			collection = self.model.collection(kind)
			if name is None:
				collection.reserve_slot()
			else:
				self._parse_resource(kind, name)
			ticker.tick()
		ticker.finish()
		self._parse_extensions(manifest['extensions'])
		self._parse_tree()
		self._resolve_references()
		self.host.advance_progress(10)
		for kind in schema.LOAD_ORDER:
			for handle in self.model.collection(kind).live():
				self.host.finalize(kind, handle)
		return (self.tree, self.model)

	#============================
	def _parse_manifest(self, manifest_name: str) -> dict:
		path = manifest_name
		data = self.documents.get_yaml(path)
		fields.check_version(path, data)
		fields.check_keys(path, data, MANIFEST_KEYS)
		exe_version = data.get('exe_version', schema.EXE_VERSION)
		if isinstance(exe_version, bool) or exe_version != schema.EXE_VERSION:
			raise errors.InvalidVersion(str(exe_version))
		resources = data.get('resources')
		if resources is None:
			resources = {}
		resources = fields.require_mapping(path, resources, 'resources')
		fields.check_keys(path, resources, schema.LOAD_ORDER)
		tables = {}
		for kind, names in resources.items():
			tables[kind] = self._parse_name_table(path, kind, names)
		extensions = self._parse_name_table(path, model.EXTENSION, data.get('extensions'))
		for listed in fields.require_list(path, data.get('files', []), 'files'):
			if not isinstance(listed, str):
				raise errors.DocumentSyntaxError(path, f"files must be text, got {listed!r}")
		return {'resources': tables, 'extensions': extensions}

	#============================
	def _parse_name_table(self, path: str, kind: str, names) -> list:
		names = fields.require_list(path, names, kind)
		present = []
		for name in names:
			if name is None:
				continue
			if not isinstance(name, str):
				raise errors.DocumentSyntaxError(path, f"{kind} names must be text, got {name!r}")
			utils.check_resource_name(kind, name, file_name=(kind != model.EXTENSION))
			present.append(name)
		clash = utils.find_name_clash(present)
		if clash is not None:
			raise errors.DocumentSyntaxError(path,
				f"{kind} name {clash[0]!r} clashes with {clash[1]!r}")
		return names

	#============================
	def _parse_resource(self, kind: str, name: str) -> None:
		path = schema.document_path(kind, name)
		if not self.documents.has(path):
			raise errors.AssetNotFound(name)
		data = self.documents.get_yaml(path)
		fields.check_version(path, data)
		handle = self.model.collection(kind).create(name)
		parsers = {
			model.SPRITE: self._parse_sprite,
			model.SOUND: self._parse_sound,
			model.BACKGROUND: self._parse_background,
			model.PATH: self._parse_path,
			model.SCRIPT: self._parse_script,
			model.FONT: self._parse_font,
			model.TIMELINE: self._parse_timeline,
			model.OBJECT: self._parse_object,
			model.ROOM: self._parse_room,
			model.INCLUDED_FILE: self._parse_included_file,
			model.TRIGGER: self._parse_trigger,
		}
		parsers[kind](path, data, handle)

	#============================
	def _defer(self, path: str, kind: str, nullable: bool, raw, record, attr: str) -> None:
		def assign(index):
			setattr(record, attr, index)
		self.pending.append(PendingReference(path, kind, nullable, raw, assign))

	#============================
	def _apply(self, path: str, data: dict, record, table: tuple, extra_keys: tuple = ()) -> None:
		fields.check_keys(path, data, (schema.VERSION_KEY,) + schema.field_keys(table) + extra_keys)
		fields.apply_fields(path, data, record, table, self.host, self._defer)

	#============================
	def _require_refs(self, path: str, data: dict, table: tuple, what: str) -> None:
		for key, _, value_type in table:
			reference = schema.ref_kind(value_type)
			if reference is not None and not reference[1] and key not in data:
				raise errors.DocumentSyntaxError(path, f"{what} is missing '{key}'")

	#============================
	def _payload(self, path: str, kind: str, name: str, entry) -> bytes:
		if not isinstance(entry, str):
			raise errors.DocumentSyntaxError(path, f"payload name must be text, got {entry!r}")
		if entry in ('', '.', '..') or '/' in entry or '\\' in entry:
			raise errors.DocumentSyntaxError(path, f"payload name {entry!r} is not a plain file name")
		return self.documents.get_bytes(f"{schema.payload_dir(kind, name)}/{entry}")

	#============================
	def _parse_frame(self, path: str, kind: str, name: str, entry) -> model.Frame:
		frame = self.host.allocate('frame')
		if entry is None:
			return frame
		payload_path = f"{schema.payload_dir(kind, name)}/{entry}"
		images.decode_png(payload_path, self._payload(path, kind, name, entry), frame)
		return frame

	#============================
	def _parse_sprite(self, path: str, data: dict, sprite: model.Sprite) -> None:
		self._apply(path, data, sprite, schema.SPRITE_FIELDS, ('frames',))
		entries = fields.require_list(path, data.get('frames'), 'frames')
		frames = self.model.set_array_field(sprite, 'frames', len(entries))
		for position, entry in enumerate(entries):
			frames[position] = self._parse_frame(path, model.SPRITE, sprite.name, entry)

	#============================
	def _parse_sound(self, path: str, data: dict, sound: model.Sound) -> None:
		self._apply(path, data, sound, schema.SOUND_FIELDS, ('data',))
		if data.get('data') is not None:
			payload = self._payload(path, model.SOUND, sound.name, data['data'])
			self.host.stream_write(sound, 'data', payload)

	#============================
	def _parse_background(self, path: str, data: dict, background: model.Background) -> None:
		self._apply(path, data, background, schema.BACKGROUND_FIELDS, ('image',))
		background.frame = self._parse_frame(path, model.BACKGROUND, background.name,
			data.get('image'))

	#============================
	def _parse_path(self, path: str, data: dict, path_res: model.Path) -> None:
		self._apply(path, data, path_res, schema.PATH_FIELDS, ('points',))
		entries = fields.require_list(path, data.get('points'), 'points')
		points = self.model.set_array_field(path_res, 'points', len(entries))
		keys = schema.field_keys(schema.PATH_POINT_FIELDS)
		for position, entry in enumerate(entries):
			entry = fields.require_mapping(path, entry, 'path point')
			fields.check_keys(path, entry, keys)
			point = self.host.allocate('path_point')
			fields.apply_fields(path, entry, point, schema.PATH_POINT_FIELDS, self.host)
			points[position] = point

	#============================
	def _parse_script(self, path: str, data: dict, script: model.Script) -> None:
		self._apply(path, data, script, schema.SCRIPT_FIELDS)

	#============================
	def _parse_font(self, path: str, data: dict, font: model.Font) -> None:
		self._apply(path, data, font, schema.FONT_FIELDS)
		if font.range_start > font.range_end:
			raise errors.OtherError(
				f"{path}: font range start {font.range_start} is after end {font.range_end}")

	#============================
	def _parse_actions(self, path: str, entries, event: model.Event) -> None:
		entries = fields.require_list(path, entries, 'actions')
		actions = self.model.set_array_field(event, 'actions', len(entries))
		allowed = ('library', 'action', 'arguments') + schema.field_keys(schema.ACTION_FIELDS)
		for position, entry in enumerate(entries):
			entry = fields.require_mapping(path, entry, 'action')
			fields.check_keys(path, entry, allowed)
			if 'library' not in entry or 'action' not in entry:
				raise errors.DocumentSyntaxError(path, "action needs 'library' and 'action'")
			lib_id = utils.parse_int(entry['library'])
			act_id = utils.parse_int(entry['action'])
			action = self.catalog.instantiate(lib_id, act_id)
			fields.apply_fields(path, entry, action, schema.ACTION_FIELDS, self.host)
			arguments = fields.require_list(path, entry.get('arguments'), 'arguments')
			if len(arguments) > action.param_count:
				raise errors.DocumentSyntaxError(path,
					f"action {act_id} takes {action.param_count} arguments, got {len(arguments)}")
			for slot, argument in enumerate(arguments):
				text = fields.read_str(path, 'argument', argument)
				self.host.string_assign(action, 'param_strings', text, slot)
			actions[position] = action

	#============================
	def _parse_timeline(self, path: str, data: dict, timeline: model.Timeline) -> None:
		self._apply(path, data, timeline, (), ('moments',))
		entries = fields.require_list(path, data.get('moments'), 'moments')
		moments = self.model.set_array_field(timeline, 'moments', len(entries))
		previous = None
		for position, entry in enumerate(entries):
			entry = fields.require_mapping(path, entry, 'moment')
			fields.check_keys(path, entry, ('time', 'actions'))
			if 'time' not in entry:
				raise errors.DocumentSyntaxError(path, "moment is missing 'time'")
			moment = self.host.allocate('moment')
			moment.time = utils.parse_int(entry['time'])
			if moment.time < 0:
				raise errors.OtherError(f"{path}: moment time {moment.time} is negative")
			if previous is not None and moment.time <= previous:
				utils.warning(f"{path}: moment {moment.time} follows moment {previous}")
			previous = moment.time
			moment.event = self.host.allocate('event')
			self._parse_actions(path, entry.get('actions'), moment.event)
			moments[position] = moment

	#============================
	def _parse_object(self, path: str, data: dict, obj: model.Object) -> None:
		self._apply(path, data, obj, schema.OBJECT_FIELDS, ('events',))
		entries = fields.require_list(path, data.get('events'), 'events')
		for entry in entries:
			entry = fields.require_mapping(path, entry, 'event')
			type_name = entry.get('type')
			if type_name not in schema.EVENT_TYPES:
				raise errors.DocumentSyntaxError(path, f"unknown event type {type_name!r}")
			event_type = schema.EVENT_TYPES.index(type_name)
			event = self.host.allocate('event')
			if event_type == schema.COLLISION_EVENT:
				fields.check_keys(path, entry, ('type', 'object', 'actions'))
				self._parse_actions(path, entry.get('actions'), event)
				self._defer_collision(path, obj, entry.get('object'), event)
				continue
			fields.check_keys(path, entry, ('type', 'number', 'actions'))
			event_number = utils.parse_int(entry.get('number', 0))
			self._parse_actions(path, entry.get('actions'), event)
			self._place_event(path, obj, event_type, event_number, event)

	#============================
	def _place_event(self, path: str, obj: model.Object, event_type: int,
		event_number: int, event: model.Event) -> None:
		slot = obj.events[event_type]
		if event_number in slot:
			raise errors.DocumentSyntaxError(path,
				f"event {schema.EVENT_TYPES[event_type]} {event_number} is defined twice")
		slot[event_number] = event

	#============================
	def _defer_collision(self, path: str, obj: model.Object, raw, event: model.Event) -> None:
		def assign(index):
			self._place_event(path, obj, schema.COLLISION_EVENT, index, event)
		self.pending.append(PendingReference(path, model.OBJECT, False, raw, assign))

	#============================
	def _parse_room(self, path: str, data: dict, room: model.Room) -> None:
		extra = ('backgrounds', 'views', 'instances', 'tiles')
		self._apply(path, data, room, schema.ROOM_FIELDS, extra)
		self._parse_fixed(path, data.get('backgrounds'), room.backgrounds,
			schema.ROOM_BACKGROUND_FIELDS, 'backgrounds')
		self._parse_fixed(path, data.get('views'), room.views, schema.VIEW_FIELDS, 'views')
		self._parse_placed(path, data.get('instances'), room, 'instances', 'instance',
			schema.INSTANCE_FIELDS)
		self._parse_placed(path, data.get('tiles'), room, 'tiles', 'tile', schema.TILE_FIELDS)

	#============================
	def _parse_fixed(self, path: str, entries, records: list, table: tuple, what: str) -> None:
		entries = fields.require_list(path, entries, what)
		if len(entries) > len(records):
			raise errors.DocumentSyntaxError(path,
				f"room has at most {len(records)} {what}, got {len(entries)}")
		keys = schema.field_keys(table)
		for position, entry in enumerate(entries):
			entry = fields.require_mapping(path, entry, what)
			fields.check_keys(path, entry, keys)
			fields.apply_fields(path, entry, records[position], table, self.host, self._defer)

	#============================
	def _parse_placed(self, path: str, entries, room: model.Room, field: str,
		record_kind: str, table: tuple) -> None:
		entries = fields.require_list(path, entries, field)
		records = self.model.set_array_field(room, field, len(entries))
		keys = schema.field_keys(table)
		for position, entry in enumerate(entries):
			entry = fields.require_mapping(path, entry, record_kind)
			fields.check_keys(path, entry, keys)
			self._require_refs(path, entry, table, record_kind)
			record = self.host.allocate(record_kind)
			fields.apply_fields(path, entry, record, table, self.host, self._defer)
			records[position] = record

	#============================
	def _parse_included_file(self, path: str, data: dict, included: model.IncludedFile) -> None:
		self._apply(path, data, included, schema.INCLUDED_FILE_FIELDS, ('data',))
		if data.get('data') is not None:
			payload = self._payload(path, model.INCLUDED_FILE, included.name, data['data'])
			self.host.stream_write(included, 'data', payload)

	#============================
	def _parse_trigger(self, path: str, data: dict, trigger: model.Trigger) -> None:
		self._apply(path, data, trigger, schema.TRIGGER_FIELDS)

	#============================
	def _parse_extensions(self, names: list) -> None:
		collection = self.model.collection(model.EXTENSION)
		for name in names:
			if name is None:
				collection.reserve_slot()
			else:
				collection.create(name)

	#============================
	def _parse_tree(self) -> None:
		path = schema.TREE_DOCUMENT
		data = self.documents.get_yaml(path)
		fields.check_version(path, data)
		fields.check_keys(path, data, (schema.VERSION_KEY, 'tree'))
		entries = fields.require_list(path, data.get('tree'), 'tree')
		for entry in entries:
			entry = fields.require_mapping(path, entry, 'tree entry')
			if 'toplevel' not in entry:
				raise errors.DocumentSyntaxError(path, "the tree root holds only top-level entries")
			fields.check_keys(path, entry, ('toplevel', 'kind') + CONTAINER_KEYS)
			kind = entry.get('kind')
			if kind not in model.TREE_KINDS and kind not in tree_mod.SPECIAL_TOPLEVELS:
				raise errors.DocumentSyntaxError(path, f"unknown top-level kind {kind!r}")
			name = fields.read_str(path, 'toplevel', entry['toplevel'])
			node_id = self.tree.create_toplevel(name, kind)
			self._parse_tree_children(path, node_id, kind, entry.get('children'))

	#============================
	def _parse_tree_children(self, path: str, parent: int, kind: str, entries) -> None:
		entries = fields.require_list(path, entries, 'children')
		for entry in entries:
			entry = fields.require_mapping(path, entry, 'tree entry')
			node_type = None
			for candidate in (tree_mod.NODE_GROUP, tree_mod.NODE_FOLDER):
				if candidate in entry:
					node_type = candidate
			if node_type is not None:
				fields.check_keys(path, entry, (node_type,) + CONTAINER_KEYS)
				name = fields.read_str(path, node_type, entry[node_type])
				node_id = self.tree.create_group(parent, name, node_type)
				self._parse_tree_children(path, node_id, kind, entry.get('children'))
				continue
			self._parse_tree_leaf(path, parent, kind, entry)

	#============================
	def _parse_tree_leaf(self, path: str, parent: int, kind: str, entry: dict) -> None:
		if len(entry) != 1:
			raise errors.DocumentSyntaxError(path, f"tree leaf must have exactly one key: {entry!r}")
		(leaf_kind, name) = next(iter(entry.items()))
		if leaf_kind not in model.TREE_KINDS:
			raise errors.UnknownKey(path, str(leaf_kind))
		if leaf_kind != kind:
			raise errors.DocumentSyntaxError(path,
				f"{leaf_kind} {name!r} is filed under a {kind} container")
		if not isinstance(name, str):
			raise errors.DocumentSyntaxError(path, f"{leaf_kind} leaf must name a resource")
		index = self.model.collection(leaf_kind).find(name)
		if (leaf_kind, index) in self.filed:
			raise errors.DocumentSyntaxError(path, f"{leaf_kind} {name!r} is listed twice in the tree")
		self.filed.add((leaf_kind, index))
		self.tree.attach_leaf(parent, leaf_kind, index)

	#============================
	def _resolve_references(self) -> None:
		for reference in self.pending:
			reference.assign(self._resolve(reference))
		self.pending = []

	#============================
	def _resolve(self, reference: PendingReference):
		raw = reference.raw
		if raw is None:
			if reference.nullable:
				return None
			raise errors.DocumentSyntaxError(reference.path,
				f"a {reference.kind} reference cannot be null")
		if isinstance(raw, bool):
			raise errors.DocumentSyntaxError(reference.path,
				f"{raw!r} is not a {reference.kind} reference")
		collection = self.model.collection(reference.kind)
		if isinstance(raw, int):
			if not collection.exists(raw):
				raise errors.AssetNotFound(f"{reference.kind} {raw}")
			return raw
		if isinstance(raw, str):
			return collection.find(raw)
		raise errors.DocumentSyntaxError(reference.path,
			f"{raw!r} is not a {reference.kind} reference")

#============================================

def deserialize(documents: DocumentSet, catalog: ActionCatalog,
	manifest_name: str = 'project.yyd') -> tuple:
	loader = ProjectLoader(catalog.host, catalog)
	return loader.load(documents, manifest_name)
