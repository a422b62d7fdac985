#!/usr/bin/env python3

"""
Export planning: lowers active segments and export options into an ordered
list of extract, concatenate, and background-mix steps.
"""

import os
import re
from dataclasses import dataclass

#============================================

SEGMENT_DIR = "segments"
CONCAT_LIST_NAME = "list.txt"
TEMP_CONCAT_BASE = "temp_concat"
PART_PREFIX = "part_"
EDIT_MARKER = "_edited"
MIX_WEIGHTS = (1.0, 0.2)

#============================================

class ExportConfigError(RuntimeError):
	pass

#============================================

@dataclass(frozen=True)
class CodecInfo:
	video_codec: str
	audio_codec: str
	is_audio_only: bool
	segment_ext: str
	video_preset: str = None

#============================================

# every supported export format maps to exactly one entry
CODEC_TABLE = {
	'mp4': CodecInfo(video_codec='libx264', audio_codec='aac',
		is_audio_only=False, segment_ext='mp4', video_preset='ultrafast'),
	'mov': CodecInfo(video_codec='libx264', audio_codec='aac',
		is_audio_only=False, segment_ext='mp4', video_preset='ultrafast'),
	'avi': CodecInfo(video_codec='mpeg4', audio_codec='aac',
		is_audio_only=False, segment_ext='mp4'),
	'mp3': CodecInfo(video_codec=None, audio_codec='libmp3lame',
		is_audio_only=True, segment_ext='mp3'),
	'wav': CodecInfo(video_codec=None, audio_codec='pcm_s16le',
		is_audio_only=True, segment_ext='wav'),
	'aac': CodecInfo(video_codec=None, audio_codec='aac',
		is_audio_only=True, segment_ext='aac'),
}

EXPORT_FORMATS = tuple(CODEC_TABLE.keys())

#============================================

@dataclass(frozen=True)
class ExportConfig:
	format: str = 'mp4'
	trim_start: float = 0.0
	trim_end: float = None
	background_ref: str = None

#============================================

@dataclass(frozen=True)
class ExtractStep:
	source_ref: str
	start_time: float
	duration: float
	output_name: str

#============================================

@dataclass(frozen=True)
class ConcatenateStep:
	ordered_names: tuple
	output_ref: str

#============================================

@dataclass(frozen=True)
class MixBackgroundStep:
	base_ref: str
	background_ref: str
	weights: tuple
	output_ref: str

#============================================

@dataclass(frozen=True)
class ExportPlan:
	source_ref: str
	source_name: str
	output_name: str
	export_format: str
	codecs: CodecInfo
	trim_start: float
	trim_end: float
	steps: tuple

	#============================
	@property
	def extract_steps(self) -> tuple:
		return tuple(step for step in self.steps if isinstance(step, ExtractStep))

	#============================
	@property
	def concatenate_step(self) -> ConcatenateStep:
		for step in self.steps:
			if isinstance(step, ConcatenateStep):
				return step
		raise RuntimeError("export plan has no concatenate step")

	#============================
	@property
	def mix_step(self):
		for step in self.steps:
			if isinstance(step, MixBackgroundStep):
				return step
		return None

#============================================

def resolve_codecs(export_format: str) -> CodecInfo:
	"""
	Look up the codec pair for an output extension.

	Args:
		export_format: Output extension, e.g. mp4 or wav.

	Returns:
		CodecInfo: Codec and container settings.
	"""
	if export_format is None:
		raise ExportConfigError("export format is required")
	key = str(export_format).strip().lower().lstrip('.')
	info = CODEC_TABLE.get(key)
	if info is None:
		supported = ", ".join(EXPORT_FORMATS)
		raise ExportConfigError(
			f"unsupported export format: {export_format} (supported: {supported})"
		)
	return info

#============================================

def output_base_name(filename: str, export_format: str) -> str:
	"""
	Build the edited output name from a source filename.

	Whitespace runs become underscores and the extension is replaced.

	Args:
		filename: Source file name.
		export_format: Target extension.

	Returns:
		str: Output file name, e.g. "my_clip_edited.mp4".
	"""
	base = os.path.basename(filename)
	base = re.sub(r"\s+", "_", base)
	base = re.sub(r"\.[^/.]+$", "", base)
	return f"{base}{EDIT_MARKER}.{export_format}"

#============================================

def part_name(index: int, segment_ext: str) -> str:
	return f"{PART_PREFIX}{index:04d}.{segment_ext}"

#============================================

def build_export_plan(active: tuple, source_ref: str,
	export_config: ExportConfig) -> ExportPlan:
	"""
	Lower the active segment list into an ordered export plan.

	Args:
		active: Clipped active segments.
		source_ref: Source media path used by the extract commands.
		export_config: Export options.

	Returns:
		ExportPlan: Extract steps, one concatenate step, optional mix step.
	"""
	codecs = resolve_codecs(export_config.format)
	export_format = str(export_config.format).strip().lower().lstrip('.')
	if source_ref is None or str(source_ref) == "":
		raise ExportConfigError("source reference is required")
	output_name = output_base_name(source_ref, export_format)
	steps = []
	names = []
	for index, segment in enumerate(active):
		name = part_name(index, codecs.segment_ext)
		names.append(name)
		steps.append(ExtractStep(
			source_ref=source_ref,
			start_time=segment.start,
			duration=segment.end - segment.start,
			output_name=name,
		))
	background_ref = export_config.background_ref
	if background_ref:
		concat_output = f"{TEMP_CONCAT_BASE}.{export_format}"
		steps.append(ConcatenateStep(ordered_names=tuple(names),
			output_ref=concat_output))
		steps.append(MixBackgroundStep(base_ref=concat_output,
			background_ref=background_ref, weights=MIX_WEIGHTS,
			output_ref=output_name))
	else:
		steps.append(ConcatenateStep(ordered_names=tuple(names),
			output_ref=output_name))
	trim_start = export_config.trim_start if export_config.trim_start is not None else 0.0
	trim_end = export_config.trim_end
	return ExportPlan(
		source_ref=source_ref,
		source_name=os.path.basename(source_ref),
		output_name=output_name,
		export_format=export_format,
		codecs=codecs,
		trim_start=trim_start,
		trim_end=trim_end,
		steps=tuple(steps),
	)
