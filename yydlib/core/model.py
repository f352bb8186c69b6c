#!/usr/bin/env python3

"""
In-memory resource model of a Game Maker 8.1 project.

Records are plain objects with every field initialized in __init__.
Records compare by value; fields named in VOLATILE are editor state
that is neither persisted nor compared.
"""

from yydlib.core import errors

#============================================

SPRITE = 'sprite'
SOUND = 'sound'
BACKGROUND = 'background'
PATH = 'path'
SCRIPT = 'script'
FONT = 'font'
TIMELINE = 'timeline'
OBJECT = 'object'
ROOM = 'room'
INCLUDED_FILE = 'included_file'
EXTENSION = 'extension'
TRIGGER = 'trigger'

# kinds that live in the resource tree, in tree display order
TREE_KINDS = (SPRITE, SOUND, BACKGROUND, PATH, SCRIPT, FONT, TIMELINE, OBJECT, ROOM)
RESOURCE_KINDS = TREE_KINDS + (INCLUDED_FILE, EXTENSION, TRIGGER)

EVENT_TYPE_COUNT = 12
ROOM_BACKGROUND_COUNT = 8
ROOM_VIEW_COUNT = 8
ACTION_PARAM_COUNT = 8

#============================================

class Record():
	VOLATILE = ()

	#============================
	def _state(self) -> dict:
		state = {}
		for key, value in vars(self).items():
			if key not in self.VOLATILE:
				state[key] = value
		return state

	#============================
	def __eq__(self, other):
		if type(other) is not type(self):
			return NotImplemented
		return self._state() == other._state()

	#============================
	def __repr__(self):
		name = getattr(self, 'name', None)
		if name is not None:
			return f"<{type(self).__name__} {name!r}>"
		return f"<{type(self).__name__}>"

#============================================

class Resource(Record):
	KIND = None

	def __init__(self):
		self.name = ''
		self.index = None

#============================================

class Frame(Record):
	"""A BGRA8 pixel buffer, rows top-down."""
	def __init__(self):
		self.width = 0
		self.height = 0
		self.data = b''

	#============================
	def validate(self) -> None:
		expected = self.width * self.height * 4
		if len(self.data) != expected:
			raise errors.ImageError(
				f"frame buffer is {len(self.data)} bytes, expected {expected} "
				f"for {self.width}x{self.height}"
			)

	#============================
	def is_empty(self) -> bool:
		return self.width == 0 or self.height == 0

#============================================

class Sprite(Resource):
	KIND = SPRITE

	def __init__(self):
		super().__init__()
		self.frames = []
		self.origin_x = 0
		self.origin_y = 0
		self.collision_shape = 0
		self.alpha_tolerance = 0
		self.per_frame_colliders = False
		self.bbox_type = 0
		self.bbox_left = 0
		self.bbox_top = 0
		self.bbox_right = 0
		self.bbox_bottom = 0

	@property
	def frame_count(self) -> int:
		return len(self.frames)

#============================================

class Sound(Resource):
	KIND = SOUND

	def __init__(self):
		super().__init__()
		self.kind = 0
		self.extension = ''
		self.effects = 0
		self.source = ''
		self.volume = 1.0
		self.pan = 0.0
		self.preload = True
		self.data = None

#============================================

class Background(Resource):
	KIND = BACKGROUND

	def __init__(self):
		super().__init__()
		self.frame = Frame()
		self.is_tileset = False
		self.tile_width = 16
		self.tile_height = 16
		self.h_offset = 0
		self.v_offset = 0
		self.h_sep = 0
		self.v_sep = 0

#============================================

class PathPoint(Record):
	def __init__(self):
		self.x = 0.0
		self.y = 0.0
		self.speed = 100.0

#============================================

class Path(Resource):
	KIND = PATH

	def __init__(self):
		super().__init__()
		self.points = []
		self.connection = 0
		self.closed = True
		self.precision = 4
		self.room = None
		self.snap_x = 16
		self.snap_y = 16

#============================================

class Script(Resource):
	KIND = SCRIPT

	def __init__(self):
		super().__init__()
		self.source = ''

#============================================

class Font(Resource):
	KIND = FONT

	def __init__(self):
		super().__init__()
		self.sys_name = 'Arial'
		self.size = 12
		self.bold = False
		self.italic = False
		self.range_start = 32
		self.range_end = 127
		self.charset = 1
		# one less than the level shown in the editor
		self.aa_level = 2

#============================================

class Action(Record):
	def __init__(self):
		self.lib_id = 0
		self.id = 0
		self.action_kind = 0
		self.can_be_relative = False
		self.is_condition = False
		self.applies_to_something = False
		self.execution_type = 0
		self.fn_name = ''
		self.fn_code = ''
		self.param_count = 0
		self.param_types = [0] * ACTION_PARAM_COUNT
		self.applies_to = -1
		self.is_relative = False
		self.param_strings = [''] * ACTION_PARAM_COUNT
		self.invert_condition = False

#============================================

class Event(Record):
	def __init__(self):
		self.actions = []

#============================================

class Moment(Record):
	def __init__(self):
		self.time = 0
		self.event = None

#============================================

class Timeline(Resource):
	KIND = TIMELINE

	def __init__(self):
		super().__init__()
		self.moments = []

#============================================

class Object(Resource):
	KIND = OBJECT

	def __init__(self):
		super().__init__()
		self.sprite = None
		self.solid = False
		self.visible = True
		self.depth = 0
		self.persistent = False
		self.parent = None
		self.mask = None
		self.events = [{} for _ in range(EVENT_TYPE_COUNT)]

	#============================
	def get_event(self, event_type: int, event_number: int, host=None) -> Event:
		"""
		Return the event for (type, number), creating an empty one if needed.
		"""
		if event_type < 0 or event_type >= EVENT_TYPE_COUNT:
			raise errors.OtherError(f"event type {event_type} is out of range")
		slot = self.events[event_type]
		event = slot.get(event_number)
		if event is None:
			event = host.allocate('event') if host is not None else Event()
			slot[event_number] = event
		return event

#============================================

class RoomBackground(Record):
	def __init__(self):
		self.visible_on_start = False
		self.is_foreground = False
		self.source_bg = None
		self.xoffset = 0
		self.yoffset = 0
		self.tile_horz = True
		self.tile_vert = True
		self.hspeed = 0
		self.vspeed = 0
		self.stretch = False

#============================================

class View(Record):
	def __init__(self):
		self.visible = False
		self.source_x = 0
		self.source_y = 0
		self.source_w = 640
		self.source_h = 480
		self.port_x = 0
		self.port_y = 0
		self.port_w = 640
		self.port_h = 480
		self.following_hborder = 32
		self.following_vborder = 32
		self.following_hspeed = -1
		self.following_vspeed = -1
		self.following_target = None

#============================================

class Instance(Record):
	def __init__(self):
		self.x = 0
		self.y = 0
		self.object = 0
		self.id = 0
		self.creation_code = ''
		self.locked = False

#============================================

class Tile(Record):
	def __init__(self):
		self.x = 0
		self.y = 0
		self.source_bg = 0
		self.u = 0
		self.v = 0
		self.width = 0
		self.height = 0
		self.depth = 1000000
		self.id = 0
		self.locked = False

#============================================

class Room(Resource):
	KIND = ROOM
	VOLATILE = ('tab', 'x_position_scroll', 'y_position_scroll')

	def __init__(self):
		super().__init__()
		self.caption = ''
		self.speed = 30
		self.width = 640
		self.height = 480
		self.snap_x = 16
		self.snap_y = 16
		self.isometric = False
		self.persistent = False
		self.bg_colour = 0xC0C0C0
		self.clear_screen = True
		self.backgrounds = [RoomBackground() for _ in range(ROOM_BACKGROUND_COUNT)]
		self.views_enabled = False
		self.clear_view = True
		self.views = [View() for _ in range(ROOM_VIEW_COUNT)]
		self.creation_code = ''
		self.instances = []
		self.tiles = []
		self.remember_room_editor_info = True
		self.editor_width = 646
		self.editor_height = 488
		self.show_grid = True
		self.show_objects = True
		self.show_tiles = True
		self.show_backgrounds = True
		self.show_foregrounds = True
		self.show_views = False
		self.delete_underlying_objects = True
		self.delete_underlying_tiles = True
		self.tab = 0
		self.x_position_scroll = 0
		self.y_position_scroll = 0

#============================================

class IncludedFile(Resource):
	KIND = INCLUDED_FILE

	def __init__(self):
		super().__init__()
		self.file_name = ''
		self.source_path = ''
		self.data_exists = False
		self.source_length = 0
		self.stored_in_project = False
		self.data = None
		self.export_setting = 2
		self.export_custom_folder = ''
		self.overwrite_file = False
		self.free_memory = True
		self.remove_at_end = True

#============================================

class Extension(Resource):
	KIND = EXTENSION
	VOLATILE = ('runtime',)

	def __init__(self):
		super().__init__()
		# loaded package state, never written to the project
		self.runtime = None

#============================================

class Trigger(Resource):
	KIND = TRIGGER

	def __init__(self):
		super().__init__()
		self.condition = ''
		self.constant_name = ''
		self.kind = 0

#============================================

class ActionDefinition(Record):
	def __init__(self):
		self.name = ''
		self.id = 0
		self.hidden = False
		self.advanced = False
		self.pro_only = False
		self.short_desc = ''
		self.list_text = ''
		self.hint_text = ''
		self.kind = 0
		self.interface = 0
		self.question = False
		self.apply_to = False
		self.relative = False
		self.arg_count = 0
		self.arg_captions = [''] * ACTION_PARAM_COUNT
		self.arg_types = [0] * ACTION_PARAM_COUNT
		self.arg_defaults = [''] * ACTION_PARAM_COUNT
		self.arg_menu_lens = [''] * ACTION_PARAM_COUNT
		self.execution_type = 0
		self.function_name = ''
		self.code_string = ''

#============================================

class ActionLibrary(Record):
	def __init__(self):
		self.caption = ''
		self.id = 0
		self.author = ''
		self.version = 0
		self.last_changed = 0.0
		self.information = ''
		self.init_code = ''
		self.advanced = False
		self.actions = []
		self.max_id = 0

#============================================

RECORD_TYPES = {
	SPRITE: Sprite,
	SOUND: Sound,
	BACKGROUND: Background,
	PATH: Path,
	SCRIPT: Script,
	FONT: Font,
	TIMELINE: Timeline,
	OBJECT: Object,
	ROOM: Room,
	INCLUDED_FILE: IncludedFile,
	EXTENSION: Extension,
	TRIGGER: Trigger,
	'frame': Frame,
	'path_point': PathPoint,
	'action': Action,
	'event': Event,
	'moment': Moment,
	'room_background': RoomBackground,
	'view': View,
	'instance': Instance,
	'tile': Tile,
	'action_definition': ActionDefinition,
	'action_library': ActionLibrary,
}

#============================================

class ResourceCollection():
	"""
	Append-only collection of one resource kind.

	Indices are dense and never reused. A reserved slot holds None and
	stands for an index that has no resource in this session.
	"""
	def __init__(self, kind: str, host):
		self.kind = kind
		self.host = host
		self.entries = []

	#============================
	def create(self, name: str = '') -> Resource:
		handle = self.host.allocate(self.kind)
		self.host.string_assign(handle, 'name', name)
		handle.index = len(self.entries)
		self.entries.append(handle)
		return handle

	#============================
	def reserve_slot(self) -> int:
		self.entries.append(None)
		return len(self.entries) - 1

	#============================
	def exists(self, index) -> bool:
		if isinstance(index, bool) or not isinstance(index, int):
			return False
		if index < 0 or index >= len(self.entries):
			return False
		return self.entries[index] is not None

	#============================
	def get(self, index: int) -> Resource:
		if not self.exists(index):
			raise errors.AssetNotFound(f"{self.kind} {index}")
		return self.entries[index]

	#============================
	def find(self, name: str) -> int:
		for entry in self.entries:
			if entry is not None and entry.name == name:
				return entry.index
		raise errors.AssetNotFound(name)

	#============================
	def live(self) -> list:
		return [entry for entry in self.entries if entry is not None]

	#============================
	def __len__(self) -> int:
		return len(self.entries)

	#============================
	def __eq__(self, other):
		if not isinstance(other, ResourceCollection):
			return NotImplemented
		return self.kind == other.kind and self.entries == other.entries

#============================================

class ProjectModel():
	def __init__(self, host):
		self.host = host
		self.collections = {}
		for kind in RESOURCE_KINDS:
			self.collections[kind] = ResourceCollection(kind, host)

	#============================
	def collection(self, kind: str) -> ResourceCollection:
		collection = self.collections.get(kind)
		if collection is None:
			raise errors.OtherError(f"unknown resource kind {kind}")
		return collection

	#============================
	def create(self, kind: str, name: str = '') -> Resource:
		return self.collection(kind).create(name)

	#============================
	def get(self, kind: str, index: int) -> Resource:
		return self.collection(kind).get(index)

	#============================
	def exists(self, kind: str, index: int) -> bool:
		return self.collection(kind).exists(index)

	#============================
	def set_array_field(self, handle, field: str, length: int) -> list:
		"""
		Size a list field before it is populated; see HostFacade.set_array_length.
		"""
		self.host.set_array_length(handle, field, length)
		return getattr(handle, field)

	#============================
	def __eq__(self, other):
		if not isinstance(other, ProjectModel):
			return NotImplemented
		return self.collections == other.collections
