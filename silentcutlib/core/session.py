#!/usr/bin/env python3

import dataclasses
import enum
import os
import threading

import numpy
from silentcutlib.core import detector
from silentcutlib.core import gating
from silentcutlib.core import timeline as timeline_module
from silentcutlib.core import utils
from silentcutlib.core.segment import DetectionConfig, clamp_detection_config, clamp_trim_range
from silentcutlib.exporters import plan
from silentcutlib.exporters import script
from silentcutlib.media import analysis
from silentcutlib.media import decoder

#============================================

class SessionState(enum.Enum):
	IDLE = "idle"
	DETECTING = "detecting"
	READY = "ready"
	ERROR = "error"

#============================================

class NothingToExportError(RuntimeError):
	pass

#============================================

@dataclasses.dataclass(frozen=True)
class DetectionRequest:
	token: int
	config: DetectionConfig
	samples: numpy.ndarray
	sample_rate: int

#============================================

class EditSession():
	"""
	Sequences detection and export planning for one source at a time.

	Every detection request carries a generation token. Only the result of the
	latest request is committed; results of superseded requests are dropped.
	"""
	def __init__(self):
		self._lock = threading.Lock()
		self._generation = 0
		self.state = SessionState.IDLE
		self.source_ref = None
		self.samples = None
		self.sample_rate = None
		self.config = None
		self.timeline = ()
		self.total_duration = 0.0
		self.error_text = None
		self.analysis = None

	#============================
	@property
	def generation(self) -> int:
		return self._generation

	#============================
	def is_current(self, token: int) -> bool:
		with self._lock:
			return token == self._generation

	#============================
	def load_file(self, input_file: str, audio_file: str = None,
		config: DetectionConfig = None, keep_wav: bool = False) -> tuple:
		"""
		Decode a media file and run detection on it.

		Decode failures put the session in the error state and re-raise.
		"""
		self._reset_source(input_file)
		try:
			samples, sample_rate = decoder.load_media(input_file,
				audio_file=audio_file, keep_wav=keep_wav)
		except Exception as exc:
			self._set_error(self._generation, exc)
			raise
		return self.load_source(samples, sample_rate, config=config,
			source_ref=input_file)

	#============================
	def load_source(self, samples, sample_rate: int,
		config: DetectionConfig = None, source_ref: str = None) -> tuple:
		self._reset_source(source_ref)
		snapshot = numpy.array(samples, dtype=numpy.float64, copy=True)
		snapshot.setflags(write=False)
		with self._lock:
			self.samples = snapshot
			self.sample_rate = sample_rate
		try:
			self.total_duration = detector.buffer_duration(snapshot, sample_rate)
		except RuntimeError as exc:
			self._set_error(self._generation, exc)
			raise
		request = self.request_detection(config)
		result = self.run_detection(request)
		self.commit_detection(request.token, result)
		return self.timeline

	#============================
	def _reset_source(self, source_ref: str) -> None:
		with self._lock:
			self._generation += 1
			self.state = SessionState.IDLE
			self.source_ref = source_ref
			self.samples = None
			self.sample_rate = None
			self.timeline = ()
			self.total_duration = 0.0
			self.error_text = None
			self.analysis = None

	#============================
	def request_detection(self, config: DetectionConfig) -> DetectionRequest:
		config = clamp_detection_config(config)
		with self._lock:
			if self.state == SessionState.ERROR:
				raise RuntimeError(
					f"session failed ({self.error_text}); load a new source first"
				)
			if self.samples is None:
				raise RuntimeError("no source loaded")
			self._generation += 1
			self.state = SessionState.DETECTING
			self.config = config
			return DetectionRequest(token=self._generation, config=config,
				samples=self.samples, sample_rate=self.sample_rate)

	#============================
	def run_detection(self, request: DetectionRequest):
		"""
		Compute the canonical timeline for a request.

		Returns:
			tuple or None: Timeline, or None once the request is superseded.
		"""
		try:
			raw = detector.detect_silence(request.samples, request.sample_rate,
				request.config)
			if not self.is_current(request.token):
				return None
			gated = gating.gate_short_silences(raw, request.config.min_silence)
			if not self.is_current(request.token):
				return None
			return gating.merge_runs(gated)
		except Exception as exc:
			self._set_error(request.token, exc)
			raise

	#============================
	def commit_detection(self, token: int, result) -> bool:
		with self._lock:
			if token != self._generation or result is None:
				return False
			if self.state != SessionState.DETECTING:
				return False
			self.timeline = result
			self.state = SessionState.READY
		silent = sum(1 for segment in result if segment.is_silent)
		utils.log(f"detection {token}: {len(result)} segments, {silent} silent")
		return True

	#============================
	def update_config(self, config: DetectionConfig) -> bool:
		request = self.request_detection(config)
		return self.commit_detection(request.token, self.run_detection(request))

	#============================
	def _set_error(self, token: int, exc: Exception) -> None:
		with self._lock:
			if token != self._generation:
				return
			self.state = SessionState.ERROR
			self.timeline = ()
			self.error_text = str(exc)

	#============================
	def _require_ready(self) -> None:
		if self.state != SessionState.READY:
			raise RuntimeError(f"session is not ready (state: {self.state.value})")

	#============================
	def trim_range(self, trim_start=None, trim_end=None):
		return clamp_trim_range(trim_start, trim_end, self.total_duration)

	#============================
	def active_segments(self, trim_start=None, trim_end=None) -> tuple:
		self._require_ready()
		trim = self.trim_range(trim_start, trim_end)
		return timeline_module.active_segments(self.timeline, trim.start, trim.end)

	#============================
	def stats(self, trim_start=None, trim_end=None) -> timeline_module.ProcessingStats:
		self._require_ready()
		trim = self.trim_range(trim_start, trim_end)
		return timeline_module.compute_stats(self.timeline, trim.start, trim.end,
			self.config.threshold_db)

	#============================
	def export_script(self, dialect: str, export_config: plan.ExportConfig,
		allow_empty: bool = False) -> str:
		"""
		Render the export script for the committed timeline.

		Args:
			dialect: posix or batch.
			export_config: Export options; its trim window is clamped first.
			allow_empty: Render even when nothing is left to export.

		Returns:
			str: Script text.
		"""
		self._require_ready()
		# configuration errors take precedence over an empty export
		plan.resolve_codecs(export_config.format)
		script.normalize_dialect(dialect)
		trim = self.trim_range(export_config.trim_start, export_config.trim_end)
		export_config = dataclasses.replace(export_config,
			trim_start=trim.start, trim_end=trim.end)
		active = timeline_module.active_segments(self.timeline, trim.start, trim.end)
		if len(active) == 0 and not allow_empty:
			raise NothingToExportError("nothing to export: no active segments in trim range")
		return script.synthesize_script(active, self.source_ref, dialect, export_config)

	#============================
	def analyze(self, context: str = None,
		model: str = analysis.DEFAULT_MODEL) -> analysis.AnalysisResult:
		name = "Linked Video"
		if self.source_ref is not None:
			name = os.path.basename(self.source_ref)
		self.analysis = analysis.analyze_content(name, context=context, model=model)
		return self.analysis
