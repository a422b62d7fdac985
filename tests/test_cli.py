#!/usr/bin/env python3

"""
Pytest coverage for the silentcut command line entry point.
"""

# Standard Library
import os
import sys

# PIP3 modules
import numpy
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# tests helpers
TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from wav_utils import make_buffer, write_wav

# local repo modules
import silentcut_cli
from silentcutlib.core import utils
from silentcutlib.core.session import NothingToExportError
from silentcutlib.media import analysis

#============================================

@pytest.fixture(autouse=True)
def _reset_quiet_mode():
	yield
	utils.set_quiet_mode(False)

#============================================

def _talk_wav(tmp_path) -> str:
	samples = make_buffer(8000, 10.0, quiet_ranges=[(5.0, 6.0)])
	return write_wav(str(tmp_path / "talk.wav"), samples, 8000)

#============================================

def test_main_writes_posix_script(tmp_path) -> None:
	"""
	Ensure the CLI writes an executable script and a default config.
	"""
	wav_path = _talk_wav(tmp_path)
	output_file = str(tmp_path / "cut.sh")
	result = silentcut_cli.main(["-i", wav_path, "-f", "mp3", "-o", output_file, "-q"])
	assert result == output_file
	assert os.path.isfile(wav_path + ".silentcut.yaml")
	assert os.access(output_file, os.X_OK)
	with open(output_file, 'r', encoding='utf-8') as handle:
		text = handle.read()
	assert text.startswith("#!/bin/bash\n")
	assert "-ss 0.0000 -t 5.0000 -vn -c:a libmp3lame" in text
	assert "-ss 6.0000 -t 4.0000 -vn -c:a libmp3lame" in text
	assert "talk_edited.mp3" in text

#============================================

def test_main_batch_with_trim_and_background(tmp_path) -> None:
	"""
	Ensure overrides reach the batch script.
	"""
	wav_path = _talk_wav(tmp_path)
	config_path = str(tmp_path / "settings.yaml")
	output_file = str(tmp_path / "cut.bat")
	silentcut_cli.main(["-i", wav_path, "-c", config_path, "-p", "batch",
		"-f", "wav", "--trim-start", "1", "--trim-end", "7", "-b", "bed.mp3",
		"-o", output_file, "-q"])
	assert os.path.isfile(config_path)
	with open(output_file, 'r', encoding='utf-8') as handle:
		text = handle.read()
	assert text.startswith("@echo off\n")
	assert "REM Trim window: 1.0000 - 7.0000" in text
	assert "-ss 1.0000 -t 4.0000" in text
	assert "-ss 6.0000 -t 1.0000" in text
	assert "amix=inputs=2:duration=first:weights=1 0.2" in text

#============================================

def test_dry_run_writes_no_script(tmp_path, capsys) -> None:
	"""
	Ensure a dry run only prints the summary.
	"""
	wav_path = _talk_wav(tmp_path)
	output_file = str(tmp_path / "cut.sh")
	result = silentcut_cli.main(["-i", wav_path, "-n", "-o", output_file])
	assert result is None
	assert not os.path.exists(output_file)
	captured = capsys.readouterr()
	assert "Silence Cut Summary" in captured.out
	assert "Estimated reduction: 10%" in captured.out
	assert "Silences removed: 1" in captured.out

#============================================

def test_silent_input_needs_allow_empty(tmp_path) -> None:
	"""
	Ensure a fully silent input refuses to export unless allowed.
	"""
	wav_path = write_wav(str(tmp_path / "quiet.wav"), numpy.zeros(8000), 8000)
	output_file = str(tmp_path / "cut.sh")
	with pytest.raises(NothingToExportError):
		silentcut_cli.main(["-i", wav_path, "-o", output_file, "-q"])
	assert not os.path.exists(output_file)
	silentcut_cli.main(["-i", wav_path, "-o", output_file, "-q", "-E"])
	assert os.path.isfile(output_file)

#============================================

def test_missing_input_raises(tmp_path) -> None:
	"""
	Ensure a missing input file stops before any config is written.
	"""
	missing = str(tmp_path / "none.mp4")
	with pytest.raises(RuntimeError):
		silentcut_cli.main(["-i", missing, "-q"])
	assert not os.path.exists(missing + ".silentcut.yaml")

#============================================

def test_analyze_falls_back_to_placeholder(tmp_path, capsys, monkeypatch) -> None:
	"""
	Ensure -A prints the placeholder analysis when gemini is unavailable.
	"""
	monkeypatch.setattr(analysis.shutil, "which", lambda name: None)
	wav_path = _talk_wav(tmp_path)
	silentcut_cli.main(["-i", wav_path, "-n", "-A", "-x", "demo reel"])
	captured = capsys.readouterr()
	assert "Title: Content Analysis Unavailable" in captured.out
	assert "Tags: error, offline" in captured.out
	assert "Viral score: 0" in captured.out
