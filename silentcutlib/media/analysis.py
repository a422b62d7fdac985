#!/usr/bin/env python3

"""
Title, summary, and tag suggestions from the gemini command line tool.

Any failure returns PLACEHOLDER_RESULT instead of raising.
"""

import json
import re
import shutil
from dataclasses import dataclass
from silentcutlib.core import utils

#============================================

DEFAULT_MODEL = "gemini-3-flash-preview"

#============================================

@dataclass(frozen=True)
class AnalysisResult:
	title: str
	summary: str
	tags: tuple
	viral_score: float

	#============================
	def to_dict(self) -> dict:
		return {
			'title': self.title,
			'summary': self.summary,
			'tags': list(self.tags),
			'viral_score': self.viral_score,
		}

#============================================

PLACEHOLDER_RESULT = AnalysisResult(
	title="Content Analysis Unavailable",
	summary="Could not connect to Gemini AI. Ensure API Key is configured.",
	tags=("error", "offline"),
	viral_score=0,
)

#============================================

def build_prompt(filename: str, context: str = None) -> str:
	lines = []
	lines.append(f"I have a video file named \"{filename}\".")
	if context:
		lines.append(f"Context/Link: {context}")
	lines.append("")
	lines.append(
		"Please generate a creative title, a short catchy summary, 3 hashtags, "
		"and a predicted viral score (0-100) for a video with this name/context."
	)
	lines.append("Assume it is a raw recording that needs editing (silence removal).")
	lines.append("")
	lines.append("Return ONLY valid JSON with this shape:")
	lines.append(
		'{"title": "...", "summary": "...", "tags": ["...", "...", "..."], '
		'"viralScore": 0}'
	)
	return "\n".join(lines)

#============================================

def extract_json(text: str) -> dict:
	"""
	Pull the first JSON object out of tool output.

	Args:
		text: Raw stdout text.

	Returns:
		dict: Parsed JSON object.
	"""
	try:
		payload = json.loads(text)
		if isinstance(payload, dict):
			return payload
	except json.JSONDecodeError:
		pass
	match = re.search(r"\{.*\}", text, re.S)
	if not match:
		raise RuntimeError("could not find JSON in analysis output")
	payload = json.loads(match.group(0))
	if not isinstance(payload, dict):
		raise RuntimeError("analysis JSON root must be an object")
	return payload

#============================================

def parse_result(payload: dict) -> AnalysisResult:
	# the gemini CLI wraps model text in a "response" field
	if 'title' not in payload and isinstance(payload.get('response'), str):
		payload = extract_json(payload['response'])
	title = payload.get('title')
	summary = payload.get('summary')
	tags = payload.get('tags')
	score = payload.get('viralScore', payload.get('viral_score'))
	if not isinstance(title, str) or not isinstance(summary, str):
		raise RuntimeError("analysis result requires title and summary strings")
	if not isinstance(tags, list):
		raise RuntimeError("analysis result requires a tags list")
	if not isinstance(score, (int, float)) or isinstance(score, bool):
		raise RuntimeError("analysis result requires a numeric viral score")
	return AnalysisResult(
		title=title,
		summary=summary,
		tags=tuple(str(tag) for tag in tags),
		viral_score=utils.clamp(float(score), 0.0, 100.0),
	)

#============================================

def analyze_content(filename: str, context: str = None,
	model: str = DEFAULT_MODEL, command: str = "gemini") -> AnalysisResult:
	"""
	Ask the gemini CLI for a title, summary, tags, and viral score.

	Args:
		filename: Source file name shown to the model.
		context: Optional link or free text.
		model: Gemini model name.
		command: Gemini CLI executable.

	Returns:
		AnalysisResult: Parsed result, or PLACEHOLDER_RESULT on failure.
	"""
	if shutil.which(command) is None:
		utils.log(f"analysis unavailable: missing dependency: {command}")
		return PLACEHOLDER_RESULT
	prompt = build_prompt(filename, context)
	try:
		proc = utils.run_process([command, "-m", model, "-o", "json", "-p", prompt])
		return parse_result(extract_json(proc.stdout.strip()))
	except (RuntimeError, ValueError, OSError) as exc:
		utils.log(f"analysis unavailable: {exc}")
		return PLACEHOLDER_RESULT
