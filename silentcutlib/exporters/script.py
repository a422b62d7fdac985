#!/usr/bin/env python3

"""
Render an ExportPlan as a literal ffmpeg script for a target shell dialect.

Both dialects share the plan walk in ScriptRenderer; subclasses only supply
quoting, path joining, and the dialect-specific line templates.
"""

import re
from silentcutlib.core import utils
from silentcutlib.exporters import plan as plan_module
from silentcutlib.exporters.plan import ExportConfigError

#============================================

DIALECTS = ('posix', 'batch')

#============================================

def escape_posix(name: str) -> str:
	"""
	Escape a name for use inside a double-quoted POSIX shell word.

	Args:
		name: Raw file name.

	Returns:
		str: Name with double quote, backslash, dollar sign and backtick escaped.
	"""
	return re.sub(r'(["\\$`])', r'\\\1', name)

#============================================

def format_seconds(value: float) -> str:
	return f"{value:.4f}"

#============================================

class ScriptRenderer():
	separator = "/"

	def __init__(self, plan: plan_module.ExportPlan):
		self.plan = plan
		self.codecs = plan.codecs

	#============================
	def render(self) -> str:
		lines = []
		lines += self.header_lines()
		lines.append(self.make_dir_line())
		lines.append(self.echo_line("Extracting valid segments..."))
		lines.append("")
		for step in self.plan.extract_steps:
			lines.append(self.extract_line(step))
		lines.append("")
		concat_step = self.plan.concatenate_step
		lines += self.manifest_lines(concat_step.ordered_names)
		lines.append("")
		lines.append(self.echo_line("Concatenating..."))
		lines.append(self.concat_line(concat_step))
		mix_step = self.plan.mix_step
		if mix_step is not None:
			lines.append(self.echo_line(self.mix_message(mix_step)))
			lines.append(self.mix_line(mix_step))
		lines.append("")
		lines += self.footer_lines()
		return "\n".join(lines) + "\n"

	#============================
	def escape(self, name: str) -> str:
		return name

	#============================
	def quote(self, name: str) -> str:
		return f"\"{self.escape(name)}\""

	#============================
	def temp_path(self, name: str) -> str:
		return f"{plan_module.SEGMENT_DIR}{self.separator}{name}"

	#============================
	def ref_path(self, ref: str) -> str:
		if ref == self.plan.output_name:
			return ref
		return self.temp_path(ref)

	#============================
	def concat_list_path(self) -> str:
		return self.temp_path(plan_module.CONCAT_LIST_NAME)

	#============================
	def comment_text(self, text: str) -> str:
		return re.sub(r"[\r\n]+", " ", text)

	#============================
	def trim_text(self) -> str:
		start_text = format_seconds(self.plan.trim_start)
		if self.plan.trim_end is None:
			return f"{start_text} - end"
		return f"{start_text} - {format_seconds(self.plan.trim_end)}"

	#============================
	def video_args(self) -> str:
		if self.codecs.is_audio_only:
			return "-vn"
		args = f"-c:v {self.codecs.video_codec}"
		if self.codecs.video_preset is not None:
			args += f" -preset {self.codecs.video_preset}"
		return args

	#============================
	def extract_line(self, step: plan_module.ExtractStep) -> str:
		cmd = "ffmpeg -y"
		cmd += f" -i {self.quote(step.source_ref)}"
		cmd += f" -ss {format_seconds(step.start_time)}"
		cmd += f" -t {format_seconds(step.duration)}"
		cmd += f" {self.video_args()}"
		cmd += f" -c:a {self.codecs.audio_codec}"
		cmd += f" {self.quote(self.temp_path(step.output_name))}"
		return cmd

	#============================
	def concat_line(self, step: plan_module.ConcatenateStep) -> str:
		cmd = "ffmpeg -y -f concat -safe 0"
		cmd += f" -i {self.concat_list_path()}"
		cmd += " -c copy"
		cmd += f" {self.quote(self.ref_path(step.output_ref))}"
		return cmd

	#============================
	def mix_filter(self, step: plan_module.MixBackgroundStep) -> str:
		weights = " ".join(utils.format_number(weight) for weight in step.weights)
		mix = f"amix=inputs=2:duration=first:weights={weights}"
		if self.codecs.is_audio_only:
			return mix
		return f"[0:a][1:a]{mix}[a]"

	#============================
	def mix_line(self, step: plan_module.MixBackgroundStep) -> str:
		cmd = "ffmpeg -y"
		cmd += f" -i {self.quote(self.ref_path(step.base_ref))}"
		cmd += f" -i {self.quote(step.background_ref)}"
		cmd += f" -filter_complex \"{self.mix_filter(step)}\""
		if not self.codecs.is_audio_only:
			cmd += " -map 0:v -map \"[a]\" -c:v copy"
		cmd += f" -c:a {self.codecs.audio_codec}"
		cmd += f" {self.quote(self.ref_path(step.output_ref))}"
		return cmd

	#============================
	def mix_message(self, step: plan_module.MixBackgroundStep) -> str:
		main_pct = int(round(step.weights[0] * 100))
		bg_pct = int(round(step.weights[1] * 100))
		return f"Adding background music (Main {main_pct}%, BG {bg_pct}%)..."

	#============================
	def header_lines(self) -> list:
		raise NotImplementedError

	#============================
	def make_dir_line(self) -> str:
		raise NotImplementedError

	#============================
	def echo_line(self, message: str) -> str:
		raise NotImplementedError

	#============================
	def manifest_lines(self, names: tuple) -> list:
		raise NotImplementedError

	#============================
	def footer_lines(self) -> list:
		raise NotImplementedError

#============================================

class PosixScriptRenderer(ScriptRenderer):
	separator = "/"

	#============================
	def escape(self, name: str) -> str:
		return escape_posix(name)

	#============================
	def header_lines(self) -> list:
		source = self.comment_text(self.plan.source_name)
		return [
			"#!/bin/bash",
			"",
			f"# Process {source} to {self.comment_text(self.plan.output_name)}",
			f"# Trim window: {self.trim_text()}",
		]

	#============================
	def make_dir_line(self) -> str:
		return f"mkdir -p {plan_module.SEGMENT_DIR}"

	#============================
	def echo_line(self, message: str) -> str:
		return f"echo {self.quote(message)}"

	#============================
	def manifest_lines(self, names: tuple) -> list:
		list_path = self.concat_list_path()
		lines = [f": > {list_path}"]
		for name in names:
			lines.append(f"echo \"file '{name}'\" >> {list_path}")
		return lines

	#============================
	def footer_lines(self) -> list:
		return [
			f"rm -rf {plan_module.SEGMENT_DIR}",
			f"echo {self.quote('Done! Saved to ' + self.plan.output_name)}",
		]

#============================================

class BatchScriptRenderer(ScriptRenderer):
	"""
	Windows batch rendering.

	File names are interpolated as-is; names containing quotes or percent
	signs are not escaped for cmd.exe.
	"""
	separator = "\\"

	#============================
	def header_lines(self) -> list:
		source = self.comment_text(self.plan.source_name)
		return [
			"@echo off",
			f"REM Process {source} to {self.comment_text(self.plan.output_name)}",
			f"REM Trim window: {self.trim_text()}",
		]

	#============================
	def make_dir_line(self) -> str:
		return f"mkdir {plan_module.SEGMENT_DIR}"

	#============================
	def echo_line(self, message: str) -> str:
		return f"echo {message.replace('%', '%%')}"

	#============================
	def manifest_lines(self, names: tuple) -> list:
		list_path = self.concat_list_path()
		lines = [f"type nul > {list_path}"]
		for name in names:
			lines.append(f"echo file '{name}'>> {list_path}")
		return lines

	#============================
	def footer_lines(self) -> list:
		return [
			f"rmdir /s /q {plan_module.SEGMENT_DIR}",
			self.echo_line(f"Done! Saved to {self.plan.output_name}"),
			"pause",
		]

#============================================

RENDERERS = {
	'posix': PosixScriptRenderer,
	'batch': BatchScriptRenderer,
}

#============================================

def normalize_dialect(dialect: str) -> str:
	key = str(dialect).strip().lower() if dialect is not None else ""
	if key in ('unix', 'sh', 'bash'):
		key = 'posix'
	if key in ('win', 'windows', 'bat', 'cmd'):
		key = 'batch'
	if key not in RENDERERS:
		raise ExportConfigError(f"unsupported script dialect: {dialect}")
	return key

#============================================

def script_filename(dialect: str) -> str:
	if normalize_dialect(dialect) == 'batch':
		return "process_media.bat"
	return "process_media.sh"

#============================================

def render_script(export_plan: plan_module.ExportPlan, dialect: str) -> str:
	renderer_class = RENDERERS[normalize_dialect(dialect)]
	return renderer_class(export_plan).render()

#============================================

def synthesize_script(active: tuple, source_ref: str, dialect: str,
	export_config: plan_module.ExportConfig) -> str:
	"""
	Build the export plan and render it for one dialect.

	Args:
		active: Clipped active segments.
		source_ref: Source media path.
		dialect: posix or batch.
		export_config: Export options.

	Returns:
		str: Script text.
	"""
	key = normalize_dialect(dialect)
	export_plan = plan_module.build_export_plan(active, source_ref, export_config)
	return render_script(export_plan, key)
