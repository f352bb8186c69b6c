#!/usr/bin/env python3

import argparse
import sys
import yaml
from yydlib.core import errors
from yydlib.core import utils
from yydlib.core.project import YydProject

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Game Maker 8.1 yyd project tool")
	parser.add_argument('-i', '--input', dest='input_file', required=True,
		help='yyd project manifest to load')
	parser.add_argument('-o', '--output', dest='output_file',
		help='save the loaded project to this path')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='load and validate only, do not write')
	parser.add_argument('-l', '--library', dest='library_files', action='append',
		default=[], help='extra action library yaml file, may be repeated')
	parser.add_argument('-p', '--dump-tree', dest='dump_tree', action='store_true',
		help='print the resource tree after loading')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress status output')
	args = parser.parse_args(argv)
	return args

#============================================

def main(argv: list = None) -> int:
	args = parse_args(argv)
	try:
		project = YydProject(library_files=args.library_files, quiet=args.quiet)
	except errors.ProjectError as exc:
		print(f"Failed to load: {exc}", file=sys.stderr)
		return 1
	try:
		project.load(args.input_file)
	except errors.ProjectError as exc:
		print(f"Failed to load: {exc}", file=sys.stderr)
		return 1
	if args.dump_tree:
		print(yaml.safe_dump(project.dump_tree(), sort_keys=False))
	if args.output_file is None and not args.dry_run:
		return 0
	try:
		if args.dry_run:
			project.validate()
			if not utils.is_quiet_mode():
				print("dry run: validation complete")
			return 0
		project.save(args.output_file)
	except errors.ProjectError as exc:
		print(f"Failed to save: {exc}", file=sys.stderr)
		return 1
	return 0


if __name__ == '__main__':
	sys.exit(main())
