#!/usr/bin/env python3

"""
Tests for export planning, codec resolution, and script rendering.
"""

# Standard Library
import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from silentcutlib.core.segment import Segment
from silentcutlib.exporters import plan
from silentcutlib.exporters import script

#============================================

ACTIVE = (
	Segment(1.0, 2.0, False),
	Segment(3.0, 5.0, False),
)

#============================================

class CodecTableTest(unittest.TestCase):
	#============================================
	def test_every_format_resolves(self) -> None:
		"""Ensure the table covers every export format."""
		self.assertEqual(set(plan.EXPORT_FORMATS),
			{'mp4', 'mov', 'avi', 'mp3', 'wav', 'aac'})
		for export_format in plan.EXPORT_FORMATS:
			info = plan.resolve_codecs(export_format)
			self.assertIsNotNone(info.audio_codec)
			self.assertEqual(info.video_codec is None, info.is_audio_only)

	#============================================
	def test_codec_choices(self) -> None:
		"""Ensure codec pairs per container."""
		self.assertEqual(plan.resolve_codecs('avi').video_codec, 'mpeg4')
		self.assertEqual(plan.resolve_codecs('mov').video_codec, 'libx264')
		self.assertEqual(plan.resolve_codecs('mp3').audio_codec, 'libmp3lame')
		self.assertEqual(plan.resolve_codecs('wav').audio_codec, 'pcm_s16le')
		self.assertTrue(plan.resolve_codecs('aac').is_audio_only)
		self.assertEqual(plan.resolve_codecs('MP4'), plan.resolve_codecs('mp4'))

	#============================================
	def test_unsupported_format_raises(self) -> None:
		"""Ensure an unknown format is a configuration error with no script."""
		config = plan.ExportConfig(format='mkv', trim_start=0.0, trim_end=10.0)
		with self.assertRaises(plan.ExportConfigError):
			script.synthesize_script(ACTIVE, "clip.mp4", 'posix', config)
		with self.assertRaises(RuntimeError):
			plan.build_export_plan(ACTIVE, "clip.mp4", config)

	#============================================
	def test_unsupported_dialect_raises(self) -> None:
		"""Ensure an unknown dialect is a configuration error."""
		config = plan.ExportConfig(format='mp4')
		with self.assertRaises(plan.ExportConfigError):
			script.synthesize_script(ACTIVE, "clip.mp4", 'powershell', config)

#============================================

class ExportPlanTest(unittest.TestCase):
	#============================================
	def test_output_name(self) -> None:
		"""Ensure whitespace collapses and the extension is replaced."""
		self.assertEqual(plan.output_base_name("my  raw\tclip.MOV", "mp4"),
			"my_raw_clip_edited.mp4")
		self.assertEqual(plan.output_base_name("talk", "wav"), "talk_edited.wav")
		self.assertEqual(plan.output_base_name("dir/a.b.mp4", "mp3"), "a.b_edited.mp3")

	#============================================
	def test_plan_steps(self) -> None:
		"""Ensure one extract per segment then a concatenate step."""
		config = plan.ExportConfig(format='mp4', trim_start=1.0, trim_end=5.0)
		export_plan = plan.build_export_plan(ACTIVE, "clip.mp4", config)
		extracts = export_plan.extract_steps
		self.assertEqual([step.output_name for step in extracts],
			["part_0000.mp4", "part_0001.mp4"])
		self.assertEqual(extracts[1].start_time, 3.0)
		self.assertEqual(extracts[1].duration, 2.0)
		concat = export_plan.concatenate_step
		self.assertEqual(concat.ordered_names, ("part_0000.mp4", "part_0001.mp4"))
		self.assertEqual(concat.output_ref, "clip_edited.mp4")
		self.assertIsNone(export_plan.mix_step)

	#============================================
	def test_plan_with_background(self) -> None:
		"""Ensure a background track adds a trailing mix step."""
		config = plan.ExportConfig(format='mp3', background_ref="bed.mp3")
		export_plan = plan.build_export_plan(ACTIVE, "talk.wav", config)
		self.assertEqual(export_plan.extract_steps[0].output_name, "part_0000.mp3")
		self.assertEqual(export_plan.concatenate_step.output_ref, "temp_concat.mp3")
		mix = export_plan.steps[-1]
		self.assertIsInstance(mix, plan.MixBackgroundStep)
		self.assertEqual(mix.weights, (1.0, 0.2))
		self.assertEqual(mix.base_ref, "temp_concat.mp3")
		self.assertEqual(mix.output_ref, "talk_edited.mp3")

#============================================

class ScriptRenderTest(unittest.TestCase):
	#============================================
	def test_posix_script_text(self) -> None:
		"""Ensure the posix script matches the expected text."""
		config = plan.ExportConfig(format='mp4', trim_start=1.0, trim_end=5.0)
		text = script.synthesize_script(ACTIVE, "my clip.mp4", 'posix', config)
		expected = "\n".join([
			"#!/bin/bash",
			"",
			"# Process my clip.mp4 to my_clip_edited.mp4",
			"# Trim window: 1.0000 - 5.0000",
			"mkdir -p segments",
			"echo \"Extracting valid segments...\"",
			"",
			"ffmpeg -y -i \"my clip.mp4\" -ss 1.0000 -t 1.0000 -c:v libx264 "
			"-preset ultrafast -c:a aac \"segments/part_0000.mp4\"",
			"ffmpeg -y -i \"my clip.mp4\" -ss 3.0000 -t 2.0000 -c:v libx264 "
			"-preset ultrafast -c:a aac \"segments/part_0001.mp4\"",
			"",
			": > segments/list.txt",
			"echo \"file 'part_0000.mp4'\" >> segments/list.txt",
			"echo \"file 'part_0001.mp4'\" >> segments/list.txt",
			"",
			"echo \"Concatenating...\"",
			"ffmpeg -y -f concat -safe 0 -i segments/list.txt -c copy "
			"\"my_clip_edited.mp4\"",
			"",
			"rm -rf segments",
			"echo \"Done! Saved to my_clip_edited.mp4\"",
			"",
		])
		self.assertEqual(text, expected)

	#============================================
	def test_batch_script_with_background(self) -> None:
		"""Ensure batch output carries echo manifest, mix, and pause."""
		config = plan.ExportConfig(format='wav', trim_start=0.0, trim_end=10.0,
			background_ref="music.mp3")
		active = (Segment(0.0, 2.0, False),)
		text = script.synthesize_script(active, "talk.wav", 'batch', config)
		lines = text.splitlines()
		self.assertEqual(lines[0], "@echo off")
		self.assertEqual(lines[-1], "pause")
		self.assertIn("REM Process talk.wav to talk_edited.wav", lines)
		self.assertIn("mkdir segments", lines)
		self.assertIn(
			"ffmpeg -y -i \"talk.wav\" -ss 0.0000 -t 2.0000 -vn -c:a pcm_s16le "
			"\"segments\\part_0000.wav\"", lines)
		self.assertIn("type nul > segments\\list.txt", lines)
		self.assertIn("echo file 'part_0000.wav'>> segments\\list.txt", lines)
		self.assertIn(
			"ffmpeg -y -f concat -safe 0 -i segments\\list.txt -c copy "
			"\"segments\\temp_concat.wav\"", lines)
		self.assertIn("echo Adding background music (Main 100%%, BG 20%%)...", lines)
		self.assertIn(
			"ffmpeg -y -i \"segments\\temp_concat.wav\" -i \"music.mp3\" "
			"-filter_complex \"amix=inputs=2:duration=first:weights=1 0.2\" "
			"-c:a pcm_s16le \"talk_edited.wav\"", lines)
		self.assertIn("rmdir /s /q segments", lines)

	#============================================
	def test_video_mix_maps_streams(self) -> None:
		"""Ensure the video mix keeps the video stream and mixes audio."""
		config = plan.ExportConfig(format='mov', background_ref="bed.mp3")
		text = script.synthesize_script(ACTIVE, "clip.mov", 'posix', config)
		self.assertIn(
			"ffmpeg -y -i \"segments/temp_concat.mov\" -i \"bed.mp3\" "
			"-filter_complex \"[0:a][1:a]amix=inputs=2:duration=first:weights=1 0.2[a]\" "
			"-map 0:v -map \"[a]\" -c:v copy -c:a aac \"clip_edited.mov\"", text)
		self.assertIn("echo \"Adding background music (Main 100%, BG 20%)...\"", text)
		self.assertIn("# Trim window: 0.0000 - end", text)

	#============================================
	def test_posix_escapes_special_characters(self) -> None:
		"""Ensure quotes, backslashes, dollars and backticks are escaped."""
		self.assertEqual(script.escape_posix('a"b\\c$d`e'), 'a\\"b\\\\c\\$d\\`e')
		config = plan.ExportConfig(format='mp3')
		text = script.synthesize_script(ACTIVE, "$HOME `x`.wav", 'posix', config)
		self.assertIn("-i \"\\$HOME \\`x\\`.wav\"", text)
		self.assertIn("\"\\$HOME_\\`x\\`_edited.mp3\"", text)

	#============================================
	def test_batch_does_not_escape(self) -> None:
		"""Ensure batch output keeps names verbatim."""
		config = plan.ExportConfig(format='mp3')
		text = script.synthesize_script(ACTIVE, "$HOME.wav", 'batch', config)
		self.assertIn("-i \"$HOME.wav\"", text)

	#============================================
	def test_empty_plan_renders_complete_script(self) -> None:
		"""Ensure an empty active list still gives a full script."""
		config = plan.ExportConfig(format='mp4', trim_start=0.0, trim_end=0.0)
		text = script.synthesize_script((), "clip.mp4", 'posix', config)
		self.assertIn(": > segments/list.txt", text)
		self.assertNotIn("-ss", text)
		self.assertNotIn("file '", text)
		self.assertIn("ffmpeg -y -f concat -safe 0 -i segments/list.txt", text)
		self.assertTrue(text.rstrip().endswith("echo \"Done! Saved to clip_edited.mp4\""))

	#============================================
	def test_rendering_is_deterministic(self) -> None:
		"""Ensure repeated synthesis gives byte-identical text."""
		config = plan.ExportConfig(format='avi', trim_start=0.5, trim_end=9.0,
			background_ref="bed.mp3")
		for dialect in script.DIALECTS:
			first = script.synthesize_script(ACTIVE, "clip.mp4", dialect, config)
			second = script.synthesize_script(tuple(ACTIVE), "clip.mp4", dialect, config)
			self.assertEqual(first, second)

	#============================================
	def test_dialect_aliases(self) -> None:
		"""Ensure platform aliases map to a dialect and script name."""
		self.assertEqual(script.normalize_dialect('unix'), 'posix')
		self.assertEqual(script.normalize_dialect('win'), 'batch')
		self.assertEqual(script.script_filename('posix'), "process_media.sh")
		self.assertEqual(script.script_filename('batch'), "process_media.bat")

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
