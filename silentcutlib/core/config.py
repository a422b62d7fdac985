#!/usr/bin/env python3

"""
YAML settings for silentcut runs.
"""

import os

import yaml
from silentcutlib.core import segment
from silentcutlib.media import analysis

#============================================

CONFIG_VERSION = 1

#============================================

def default_config() -> dict:
	"""
	Build the default config dictionary.

	Returns:
		dict: Default configuration values.
	"""
	return {
		'silentcut': CONFIG_VERSION,
		'settings': {
			'detection': {
				'threshold_db': segment.DEFAULT_THRESHOLD_DB,
				'min_silence': segment.DEFAULT_MIN_SILENCE,
			},
			'export': {
				'format': 'mp4',
				'dialect': 'posix',
				'trim_start': 0.0,
				'trim_end': None,
				'background': None,
			},
			'analysis': {
				'enabled': False,
				'model': analysis.DEFAULT_MODEL,
				'context': None,
			},
		},
	}

#============================================

def default_config_path(input_file: str) -> str:
	return f"{input_file}.silentcut.yaml"

#============================================

def write_config_file(config_path: str, config: dict) -> None:
	os.makedirs(os.path.dirname(config_path) or '.', exist_ok=True)
	with open(config_path, 'w', encoding='utf-8') as handle:
		yaml.safe_dump(config, handle, sort_keys=False)
	return

#============================================

def load_config(config_path: str) -> dict:
	with open(config_path, 'r', encoding='utf-8') as handle:
		data = yaml.safe_load(handle)
	if not isinstance(data, dict):
		raise RuntimeError("config file must be a mapping")
	if data.get('silentcut') != CONFIG_VERSION:
		raise RuntimeError(f"config file must set silentcut: {CONFIG_VERSION}")
	return data

#============================================

def coerce_bool(value, config_path: str, key_path: str) -> bool:
	if isinstance(value, bool):
		return value
	if isinstance(value, int):
		return bool(value)
	if isinstance(value, str):
		normalized = value.strip().lower()
		if normalized in ("true", "yes", "1", "on"):
			return True
		if normalized in ("false", "no", "0", "off"):
			return False
	raise RuntimeError(f"config {config_path}: {key_path} must be a boolean")

#============================================

def coerce_float(value, config_path: str, key_path: str, allow_none: bool = False):
	if value is None and allow_none:
		return None
	if isinstance(value, bool):
		raise RuntimeError(f"config {config_path}: {key_path} must be a number")
	if isinstance(value, (int, float)):
		return float(value)
	if isinstance(value, str):
		try:
			return float(value)
		except ValueError:
			pass
	raise RuntimeError(f"config {config_path}: {key_path} must be a number")

#============================================

def coerce_str(value, config_path: str, key_path: str, allow_none: bool = False):
	if value is None and allow_none:
		return None
	if isinstance(value, str):
		return value
	raise RuntimeError(f"config {config_path}: {key_path} must be a string")

#============================================

def build_settings(config: dict, config_path: str) -> dict:
	"""
	Normalize settings with defaults into a flat dictionary.

	Args:
		config: Raw config dictionary.
		config_path: Config file path, used in error messages.

	Returns:
		dict: Normalized settings.
	"""
	defaults = default_config()['settings']
	overrides = {}
	if isinstance(config, dict):
		overrides = config.get('settings') or {}
	if not isinstance(overrides, dict):
		raise RuntimeError(f"config {config_path}: settings must be a mapping")
	detection = overrides.get('detection') or {}
	export = overrides.get('export') or {}
	analysis = overrides.get('analysis') or {}
	export_format = coerce_str(export.get('format', defaults['export']['format']),
		config_path, "settings.export.format").strip().lower()
	return {
		'threshold_db': coerce_float(detection.get('threshold_db',
			defaults['detection']['threshold_db']), config_path,
			"settings.detection.threshold_db"),
		'min_silence': coerce_float(detection.get('min_silence',
			defaults['detection']['min_silence']), config_path,
			"settings.detection.min_silence"),
		'format': export_format,
		'dialect': coerce_str(export.get('dialect', defaults['export']['dialect']),
			config_path, "settings.export.dialect"),
		'trim_start': coerce_float(export.get('trim_start',
			defaults['export']['trim_start']), config_path,
			"settings.export.trim_start", allow_none=True),
		'trim_end': coerce_float(export.get('trim_end',
			defaults['export']['trim_end']), config_path,
			"settings.export.trim_end", allow_none=True),
		'background': coerce_str(export.get('background',
			defaults['export']['background']), config_path,
			"settings.export.background", allow_none=True),
		'analysis_enabled': coerce_bool(analysis.get('enabled',
			defaults['analysis']['enabled']), config_path,
			"settings.analysis.enabled"),
		'analysis_model': coerce_str(analysis.get('model',
			defaults['analysis']['model']), config_path,
			"settings.analysis.model"),
		'analysis_context': coerce_str(analysis.get('context',
			defaults['analysis']['context']), config_path,
			"settings.analysis.context", allow_none=True),
	}
