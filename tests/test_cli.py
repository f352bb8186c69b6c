#!/usr/bin/env python3

import os
import sys

import yaml

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import yyd_cli
from sample_project import build_sample_project

#============================================

def _saved_project(temp_dir: str) -> str:
	target = os.path.join(str(temp_dir), "game.yyd")
	build_sample_project().save(target)
	return target

#============================================

def test_cli_resave(tmp_path):
	source = _saved_project(tmp_path / "in")
	output = str(tmp_path / "out" / "copy.yyd")
	assert yyd_cli.main(['-i', source, '-o', output, '-q']) == 0
	assert os.path.isfile(output)
	assert os.path.isfile(str(tmp_path / "out" / "copy" / "scripts" / "scr_init.yaml"))

#============================================

def test_cli_dry_run_writes_nothing(tmp_path):
	source = _saved_project(tmp_path / "in")
	output = str(tmp_path / "out" / "copy.yyd")
	assert yyd_cli.main(['-i', source, '-o', output, '-n', '-q']) == 0
	assert not os.path.exists(output)

#============================================

def test_cli_dump_tree(tmp_path, capsys):
	source = _saved_project(tmp_path)
	capsys.readouterr()
	assert yyd_cli.main(['-i', source, '-p', '-q']) == 0
	dumped = yaml.safe_load(capsys.readouterr().out)
	sprites = dumped[0]['Sprites']
	assert sprites[0] == {'Characters': ['sprite: spr_player']}
	assert sprites[1] == 'sprite: spr_wall'

#============================================

def test_cli_reports_load_failure(tmp_path, capsys):
	missing = str(tmp_path / "missing.yyd")
	assert yyd_cli.main(['-i', missing, '-q']) == 1
	assert "Failed to load:" in capsys.readouterr().err

#============================================

def test_cli_missing_library_file(tmp_path, capsys):
	source = _saved_project(tmp_path)
	missing = str(tmp_path / "nolib.yaml")
	assert yyd_cli.main(['-i', source, '-l', missing, '-q']) == 1
	assert "Failed to load:" in capsys.readouterr().err
