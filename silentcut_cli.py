#!/usr/bin/env python3

"""
silentcut_cli.py

Detect silence in a recording and write an ffmpeg script that cuts it out.
"""

# Standard Library
import argparse
import os

# local repo modules
from silentcutlib.core import config as config_module
from silentcutlib.core import utils
from silentcutlib.core.segment import make_detection_config
from silentcutlib.core.session import EditSession
from silentcutlib.exporters import script
from silentcutlib.exporters.plan import ExportConfig

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Silence cut script generator")
	parser.add_argument('-i', '--input', dest='input_file', required=True,
		help='input video or audio file')
	parser.add_argument('-a', '--audio', dest='audio_file', default=None,
		help='optional wav file path to skip extraction')
	parser.add_argument('-c', '--config', dest='config_file', default=None,
		help='path to a silentcut config yaml')
	parser.add_argument('-t', '--threshold', dest='threshold_db', type=float,
		default=None, help='override silence threshold in dBFS')
	parser.add_argument('-s', '--min-silence', dest='min_silence', type=float,
		default=None, help='override minimum silence seconds')
	parser.add_argument('-f', '--format', dest='export_format', default=None,
		help='output format: mp4, mov, avi, mp3, wav, aac')
	parser.add_argument('-p', '--platform', dest='dialect', default=None,
		help='script dialect: posix or batch')
	parser.add_argument('--trim-start', dest='trim_start', type=float, default=None,
		help='trim window start seconds')
	parser.add_argument('--trim-end', dest='trim_end', type=float, default=None,
		help='trim window end seconds')
	parser.add_argument('-b', '--background', dest='background', default=None,
		help='background music file mixed in at 20%%')
	parser.add_argument('-o', '--output', dest='output_file', default=None,
		help='output script path')
	parser.add_argument('-A', '--analyze', dest='analyze', action='store_true',
		help='ask gemini for a title, summary, and tags')
	parser.add_argument('-x', '--context', dest='context', default=None,
		help='extra context or link for the analysis prompt')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='print statistics only, do not write a script')
	parser.add_argument('-E', '--allow-empty', dest='allow_empty', action='store_true',
		help='write a script even when nothing is left to export')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress progress output')
	parser.set_defaults(analyze=None)
	args = parser.parse_args(argv)
	return args

#============================================

def load_settings(args: argparse.Namespace) -> dict:
	"""
	Load config file settings and apply command-line overrides.

	A default config is written next to the input when none exists.
	"""
	config_path = args.config_file
	if config_path is None:
		config_path = config_module.default_config_path(args.input_file)
	if not os.path.exists(config_path):
		config_module.write_config_file(config_path, config_module.default_config())
		utils.log(f"Wrote default config: {config_path}")
	config = config_module.load_config(config_path)
	settings = config_module.build_settings(config, config_path)
	overrides = {
		'threshold_db': args.threshold_db,
		'min_silence': args.min_silence,
		'format': args.export_format,
		'dialect': args.dialect,
		'trim_start': args.trim_start,
		'trim_end': args.trim_end,
		'background': args.background,
		'analysis_enabled': args.analyze,
		'analysis_context': args.context,
	}
	for key, value in overrides.items():
		if value is not None:
			settings[key] = value
	return settings

#============================================

def print_summary(input_file: str, session: EditSession, settings: dict,
	output_file: str = None) -> None:
	stats = session.stats(settings['trim_start'], settings['trim_end'])
	trim = session.trim_range(settings['trim_start'], settings['trim_end'])
	active = session.active_segments(trim.start, trim.end)
	utils.log("")
	utils.log("Silence Cut Summary")
	utils.log(f"Input: {input_file}")
	utils.log(f"Source length: {utils.format_timestamp(stats.original_duration)} "
		f"({stats.original_duration:.3f}s)")
	utils.log(f"Trim window: {utils.format_timestamp(trim.start)} - "
		f"{utils.format_timestamp(trim.end)}")
	utils.log(f"Final length: {utils.format_timestamp(stats.final_duration)} "
		f"({stats.final_duration:.3f}s)")
	utils.log(f"Estimated reduction: {stats.reduction_percent}%")
	utils.log(f"Threshold: {stats.silence_threshold_db:.1f} dB")
	utils.log(f"Silences removed: {stats.segments_removed}")
	utils.log(f"Active segments: {len(active)}")
	if output_file is not None:
		utils.log(f"Script: {output_file}")
	if session.analysis is not None:
		result = session.analysis
		utils.log(f"Title: {result.title}")
		utils.log(f"Summary: {result.summary}")
		utils.log(f"Tags: {', '.join(result.tags)}")
		utils.log(f"Viral score: {utils.format_number(result.viral_score)}")
	utils.log("")

#============================================

def default_script_path(dialect: str) -> str:
	# the script refers to the input path as given, so it runs from the cwd
	return os.path.join(os.getcwd(), script.script_filename(dialect))

#============================================

def main(argv: list = None) -> str:
	args = parse_args(argv)
	utils.set_quiet_mode(args.quiet)
	utils.ensure_file_exists(args.input_file)
	settings = load_settings(args)
	detection = make_detection_config(settings['threshold_db'], settings['min_silence'])
	session = EditSession()
	session.load_file(args.input_file, audio_file=args.audio_file, config=detection)
	if settings['analysis_enabled']:
		session.analyze(context=settings['analysis_context'],
			model=settings['analysis_model'])
	if args.dry_run:
		print_summary(args.input_file, session, settings)
		return None
	export_config = ExportConfig(
		format=settings['format'],
		trim_start=settings['trim_start'],
		trim_end=settings['trim_end'],
		background_ref=settings['background'],
	)
	text = session.export_script(settings['dialect'], export_config,
		allow_empty=args.allow_empty)
	output_file = args.output_file
	if output_file is None:
		output_file = default_script_path(settings['dialect'])
	with open(output_file, 'w', encoding='utf-8', newline='\n') as handle:
		handle.write(text)
	if script.normalize_dialect(settings['dialect']) == 'posix':
		os.chmod(output_file, 0o755)
	print_summary(args.input_file, session, settings, output_file)
	return output_file

#============================================

if __name__ == '__main__':
	main()
