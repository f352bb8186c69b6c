#!/usr/bin/env python3

"""
Action libraries and the instantiation of actions from their definitions.
"""

import os
from yydlib.core import documents
from yydlib.core import errors
from yydlib.core import fields
from yydlib.core import model
from yydlib.core import schema

#============================================

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data')
CORE_LIBRARY_FILE = os.path.join(DATA_DIR, 'core_library.yaml')

#============================================

class ActionCatalog():
	def __init__(self, host, libraries: list = None):
		self.host = host
		self.libraries = []
		self.definitions = {}
		for library in libraries or []:
			self.add_library(library)

	#============================
	def add_library(self, library: model.ActionLibrary) -> None:
		for existing in self.libraries:
			if existing.id == library.id:
				raise errors.OtherError(f"action library id {library.id} is loaded twice")
		self.libraries.append(library)
		for definition in library.actions:
			self.definitions[(library.id, definition.id)] = definition

	#============================
	def lookup(self, lib_id: int, act_id: int) -> model.ActionDefinition:
		definition = self.definitions.get((lib_id, act_id))
		if definition is None:
			raise errors.UnknownAction(lib_id, act_id)
		return definition

	#============================
	def instantiate(self, lib_id: int, act_id: int) -> model.Action:
		"""
		Make a new action carrying the definition's argument layout and defaults.
		"""
		definition = self.lookup(lib_id, act_id)
		action = self.host.allocate('action')
		action.lib_id = lib_id
		action.id = act_id
		action.action_kind = definition.kind
		action.can_be_relative = definition.relative
		action.is_condition = definition.question
		action.applies_to_something = definition.apply_to
		action.execution_type = definition.execution_type
		self.host.string_assign(action, 'fn_name', definition.function_name)
		self.host.string_assign(action, 'fn_code', definition.code_string)
		action.param_count = definition.arg_count
		action.param_types = list(definition.arg_types)
		action.param_strings = list(definition.arg_defaults)
		return action

	#============================
	def init_code(self) -> str:
		blocks = [library.init_code for library in self.libraries if library.init_code != '']
		return "\n".join(blocks)

#============================================

def load_library_file(host, library_file: str) -> model.ActionLibrary:
	raw = documents.read_file(library_file)
	return parse_library(host, library_file, raw)

#============================================

def parse_library(host, path: str, raw: bytes) -> model.ActionLibrary:
	data = documents.parse_yaml(path, raw)
	fields.check_version(path, data)
	allowed = (schema.VERSION_KEY, 'actions') + schema.field_keys(schema.ACTION_LIBRARY_FIELDS)
	fields.check_keys(path, data, allowed)
	library = host.allocate('action_library')
	fields.apply_fields(path, data, library, schema.ACTION_LIBRARY_FIELDS, host)
	entries = fields.require_list(path, data.get('actions'), 'actions')
	host.set_array_length(library, 'actions', len(entries))
	seen = set()
	for position, entry in enumerate(entries):
		definition = _parse_definition(host, path, entry)
		if definition.id in seen:
			raise errors.OtherError(f"{path}: action id {definition.id} is defined twice")
		seen.add(definition.id)
		library.actions[position] = definition
	if len(seen) > 0:
		library.max_id = max(library.max_id, max(seen))
	return library

#============================================

def _parse_definition(host, path: str, entry) -> model.ActionDefinition:
	entry = fields.require_mapping(path, entry, 'action definition')
	allowed = ('arguments',) + schema.field_keys(schema.ACTION_DEFINITION_FIELDS)
	fields.check_keys(path, entry, allowed)
	definition = host.allocate('action_definition')
	fields.apply_fields(path, entry, definition, schema.ACTION_DEFINITION_FIELDS, host)
	arguments = fields.require_list(path, entry.get('arguments'), 'arguments')
	if len(arguments) > model.ACTION_PARAM_COUNT:
		raise errors.DocumentSyntaxError(path,
			f"action {definition.id} has more than {model.ACTION_PARAM_COUNT} arguments")
	definition.arg_count = len(arguments)
	argument_keys = schema.field_keys(schema.ACTION_ARGUMENT_FIELDS)
	for slot, argument in enumerate(arguments):
		argument = fields.require_mapping(path, argument, 'argument')
		fields.check_keys(path, argument, argument_keys)
		for key, attr, value_type in schema.ACTION_ARGUMENT_FIELDS:
			if key in argument:
				value = fields.read_scalar(path, key, argument[key], value_type)
				if value_type == 'str':
					host.string_assign(definition, attr, value, slot)
				else:
					getattr(definition, attr)[slot] = value
	return definition

#============================================

def load_core_library(host) -> model.ActionLibrary:
	return load_library_file(host, CORE_LIBRARY_FILE)
