#!/usr/bin/env python3

"""
Field tables for the yyd document format.

Each table lists (document key, record attribute, value type). Value
types are 'int', 'float', 'bool', 'str', 'ref:<kind>' for a required
reference and 'optref:<kind>' for a reference that may be null.
The writer and the loader both walk these tables, so the key order here
is the key order in the written documents.
"""

from yydlib.core import model

#============================================

FORMAT_VERSION = 1
EXE_VERSION = 810
VERSION_KEY = 'yyd'
TREE_DOCUMENT = 'tree.yaml'

KIND_DIRS = {
	model.SPRITE: 'sprites',
	model.SOUND: 'sounds',
	model.BACKGROUND: 'backgrounds',
	model.PATH: 'paths',
	model.SCRIPT: 'scripts',
	model.FONT: 'fonts',
	model.TIMELINE: 'timelines',
	model.OBJECT: 'objects',
	model.ROOM: 'rooms',
	model.INCLUDED_FILE: 'included_files',
	model.TRIGGER: 'triggers',
}

# resources that get a document even without a tree leaf
UNTREED_KINDS = (model.INCLUDED_FILE, model.TRIGGER)

# documents are loaded in this order; references are resolved afterwards
LOAD_ORDER = (
	model.SPRITE, model.SOUND, model.BACKGROUND, model.PATH, model.SCRIPT,
	model.FONT, model.TIMELINE, model.OBJECT, model.ROOM,
	model.INCLUDED_FILE, model.TRIGGER,
)

EVENT_TYPES = (
	'create', 'destroy', 'alarm', 'step', 'collision', 'keyboard',
	'mouse', 'other', 'draw', 'key_press', 'key_release', 'trigger',
)
COLLISION_EVENT = EVENT_TYPES.index('collision')

#============================================

SPRITE_FIELDS = (
	('origin_x', 'origin_x', 'int'),
	('origin_y', 'origin_y', 'int'),
	('collision_shape', 'collision_shape', 'int'),
	('alpha_tolerance', 'alpha_tolerance', 'int'),
	('per_frame_colliders', 'per_frame_colliders', 'bool'),
	('bbox_type', 'bbox_type', 'int'),
	('bbox_left', 'bbox_left', 'int'),
	('bbox_top', 'bbox_top', 'int'),
	('bbox_right', 'bbox_right', 'int'),
	('bbox_bottom', 'bbox_bottom', 'int'),
)

SOUND_FIELDS = (
	('kind', 'kind', 'int'),
	('extension', 'extension', 'str'),
	('effects', 'effects', 'int'),
	('source', 'source', 'str'),
	('volume', 'volume', 'float'),
	('pan', 'pan', 'float'),
	('preload', 'preload', 'bool'),
)

BACKGROUND_FIELDS = (
	('is_tileset', 'is_tileset', 'bool'),
	('tile_width', 'tile_width', 'int'),
	('tile_height', 'tile_height', 'int'),
	('h_offset', 'h_offset', 'int'),
	('v_offset', 'v_offset', 'int'),
	('h_sep', 'h_sep', 'int'),
	('v_sep', 'v_sep', 'int'),
)

PATH_FIELDS = (
	('connection', 'connection', 'int'),
	('closed', 'closed', 'bool'),
	('precision', 'precision', 'int'),
	('room', 'room', 'optref:room'),
	('snap_x', 'snap_x', 'int'),
	('snap_y', 'snap_y', 'int'),
)

PATH_POINT_FIELDS = (
	('x', 'x', 'float'),
	('y', 'y', 'float'),
	('speed', 'speed', 'float'),
)

SCRIPT_FIELDS = (
	('source', 'source', 'str'),
)

FONT_FIELDS = (
	('sys_name', 'sys_name', 'str'),
	('size', 'size', 'int'),
	('bold', 'bold', 'bool'),
	('italic', 'italic', 'bool'),
	('range_start', 'range_start', 'int'),
	('range_end', 'range_end', 'int'),
	('charset', 'charset', 'int'),
	('aa_level', 'aa_level', 'int'),
)

ACTION_FIELDS = (
	('applies_to', 'applies_to', 'int'),
	('relative', 'is_relative', 'bool'),
	('invert', 'invert_condition', 'bool'),
)

OBJECT_FIELDS = (
	('sprite', 'sprite', 'optref:sprite'),
	('solid', 'solid', 'bool'),
	('visible', 'visible', 'bool'),
	('depth', 'depth', 'int'),
	('persistent', 'persistent', 'bool'),
	('parent', 'parent', 'optref:object'),
	('mask', 'mask', 'optref:sprite'),
)

ROOM_FIELDS = (
	('caption', 'caption', 'str'),
	('speed', 'speed', 'int'),
	('width', 'width', 'int'),
	('height', 'height', 'int'),
	('snap_x', 'snap_x', 'int'),
	('snap_y', 'snap_y', 'int'),
	('isometric', 'isometric', 'bool'),
	('persistent', 'persistent', 'bool'),
	('bg_colour', 'bg_colour', 'int'),
	('clear_screen', 'clear_screen', 'bool'),
	('views_enabled', 'views_enabled', 'bool'),
	('clear_view', 'clear_view', 'bool'),
	('creation_code', 'creation_code', 'str'),
	('remember_room_editor_info', 'remember_room_editor_info', 'bool'),
	('editor_width', 'editor_width', 'int'),
	('editor_height', 'editor_height', 'int'),
	('show_grid', 'show_grid', 'bool'),
	('show_objects', 'show_objects', 'bool'),
	('show_tiles', 'show_tiles', 'bool'),
	('show_backgrounds', 'show_backgrounds', 'bool'),
	('show_foregrounds', 'show_foregrounds', 'bool'),
	('show_views', 'show_views', 'bool'),
	('delete_underlying_objects', 'delete_underlying_objects', 'bool'),
	('delete_underlying_tiles', 'delete_underlying_tiles', 'bool'),
)

ROOM_BACKGROUND_FIELDS = (
	('visible_on_start', 'visible_on_start', 'bool'),
	('is_foreground', 'is_foreground', 'bool'),
	('background', 'source_bg', 'optref:background'),
	('xoffset', 'xoffset', 'int'),
	('yoffset', 'yoffset', 'int'),
	('tile_horz', 'tile_horz', 'bool'),
	('tile_vert', 'tile_vert', 'bool'),
	('hspeed', 'hspeed', 'int'),
	('vspeed', 'vspeed', 'int'),
	('stretch', 'stretch', 'bool'),
)

VIEW_FIELDS = (
	('visible', 'visible', 'bool'),
	('source_x', 'source_x', 'int'),
	('source_y', 'source_y', 'int'),
	('source_w', 'source_w', 'int'),
	('source_h', 'source_h', 'int'),
	('port_x', 'port_x', 'int'),
	('port_y', 'port_y', 'int'),
	('port_w', 'port_w', 'int'),
	('port_h', 'port_h', 'int'),
	('following_hborder', 'following_hborder', 'int'),
	('following_vborder', 'following_vborder', 'int'),
	('following_hspeed', 'following_hspeed', 'int'),
	('following_vspeed', 'following_vspeed', 'int'),
	('following_target', 'following_target', 'optref:object'),
)

INSTANCE_FIELDS = (
	('x', 'x', 'int'),
	('y', 'y', 'int'),
	('object', 'object', 'ref:object'),
	('id', 'id', 'int'),
	('locked', 'locked', 'bool'),
	('creation_code', 'creation_code', 'str'),
)

TILE_FIELDS = (
	('x', 'x', 'int'),
	('y', 'y', 'int'),
	('background', 'source_bg', 'ref:background'),
	('u', 'u', 'int'),
	('v', 'v', 'int'),
	('width', 'width', 'int'),
	('height', 'height', 'int'),
	('depth', 'depth', 'int'),
	('id', 'id', 'int'),
	('locked', 'locked', 'bool'),
)

INCLUDED_FILE_FIELDS = (
	('file_name', 'file_name', 'str'),
	('source_path', 'source_path', 'str'),
	('data_exists', 'data_exists', 'bool'),
	('source_length', 'source_length', 'int'),
	('stored_in_project', 'stored_in_project', 'bool'),
	('export_setting', 'export_setting', 'int'),
	('export_custom_folder', 'export_custom_folder', 'str'),
	('overwrite_file', 'overwrite_file', 'bool'),
	('free_memory', 'free_memory', 'bool'),
	('remove_at_end', 'remove_at_end', 'bool'),
)

TRIGGER_FIELDS = (
	('condition', 'condition', 'str'),
	('constant_name', 'constant_name', 'str'),
	('kind', 'kind', 'int'),
)

#============================================

ACTION_LIBRARY_FIELDS = (
	('caption', 'caption', 'str'),
	('id', 'id', 'int'),
	('author', 'author', 'str'),
	('version', 'version', 'int'),
	('last_changed', 'last_changed', 'float'),
	('information', 'information', 'str'),
	('init_code', 'init_code', 'str'),
	('advanced', 'advanced', 'bool'),
	('max_id', 'max_id', 'int'),
)

ACTION_DEFINITION_FIELDS = (
	('name', 'name', 'str'),
	('id', 'id', 'int'),
	('hidden', 'hidden', 'bool'),
	('advanced', 'advanced', 'bool'),
	('pro_only', 'pro_only', 'bool'),
	('short_desc', 'short_desc', 'str'),
	('list_text', 'list_text', 'str'),
	('hint_text', 'hint_text', 'str'),
	('kind', 'kind', 'int'),
	('interface', 'interface', 'int'),
	('question', 'question', 'bool'),
	('apply_to', 'apply_to', 'bool'),
	('relative', 'relative', 'bool'),
	('execution_type', 'execution_type', 'int'),
	('function_name', 'function_name', 'str'),
	('code_string', 'code_string', 'str'),
)

# per-argument lists on an action definition, up to eight entries each
ACTION_ARGUMENT_FIELDS = (
	('caption', 'arg_captions', 'str'),
	('type', 'arg_types', 'int'),
	('default', 'arg_defaults', 'str'),
	('menu', 'arg_menu_lens', 'str'),
)

#============================================

def field_keys(fields: tuple) -> tuple:
	return tuple(field[0] for field in fields)

#============================================

def ref_kind(value_type: str):
	"""Return (kind, nullable) for a reference value type, else None."""
	if value_type.startswith('ref:'):
		return (value_type[4:], False)
	if value_type.startswith('optref:'):
		return (value_type[7:], True)
	return None

#============================================

def document_path(kind: str, name: str) -> str:
	return f"{KIND_DIRS[kind]}/{name}.yaml"

#============================================

def payload_dir(kind: str, name: str) -> str:
	return f"{KIND_DIRS[kind]}/{name}"
