#!/usr/bin/env python3

"""
Value types shared by the detection, trim, and export stages.
"""

from dataclasses import dataclass
from silentcutlib.core import utils

#============================================

THRESHOLD_DB_MIN = -60.0
THRESHOLD_DB_MAX = -10.0
MIN_SILENCE_MIN = 0.1
MIN_SILENCE_MAX = 2.0
DEFAULT_THRESHOLD_DB = -40.0
DEFAULT_MIN_SILENCE = 0.5

#============================================

@dataclass(frozen=True)
class Segment:
	"""Half-open interval [start, end) in seconds."""
	start: float
	end: float
	is_silent: bool

	@property
	def duration(self) -> float:
		return self.end - self.start

#============================================

@dataclass(frozen=True)
class DetectionConfig:
	threshold_db: float = DEFAULT_THRESHOLD_DB
	min_silence: float = DEFAULT_MIN_SILENCE

#============================================

@dataclass(frozen=True)
class TrimRange:
	start: float
	end: float

	@property
	def duration(self) -> float:
		return self.end - self.start

#============================================

def make_detection_config(threshold_db: float = DEFAULT_THRESHOLD_DB,
	min_silence: float = DEFAULT_MIN_SILENCE) -> DetectionConfig:
	"""
	Build a detection config, clamping values into their supported range.

	Args:
		threshold_db: Silence threshold in dBFS.
		min_silence: Minimum silence duration in seconds.

	Returns:
		DetectionConfig: Clamped config snapshot.
	"""
	clamped_db = utils.clamp(float(threshold_db), THRESHOLD_DB_MIN, THRESHOLD_DB_MAX)
	clamped_silence = utils.clamp(float(min_silence), MIN_SILENCE_MIN, MIN_SILENCE_MAX)
	if clamped_db != threshold_db:
		utils.log(f"threshold_db {threshold_db} clamped to {clamped_db}")
	if clamped_silence != min_silence:
		utils.log(f"min_silence {min_silence} clamped to {clamped_silence}")
	return DetectionConfig(threshold_db=clamped_db, min_silence=clamped_silence)

#============================================

def clamp_detection_config(config: DetectionConfig) -> DetectionConfig:
	"""
	Return a config whose values lie in the supported range.

	None gives the defaults; in-range configs are returned unchanged.
	"""
	if config is None:
		return DetectionConfig()
	return make_detection_config(config.threshold_db, config.min_silence)

#============================================

def clamp_trim_range(start, end, total_duration: float) -> TrimRange:
	"""
	Clamp a trim window so that 0 <= start <= end <= total_duration.

	Args:
		start: Requested trim start, None means 0.
		end: Requested trim end, None means total_duration.
		total_duration: Source duration in seconds.

	Returns:
		TrimRange: Clamped trim window.
	"""
	total = max(0.0, float(total_duration))
	if start is None:
		start = 0.0
	if end is None:
		end = total
	clamped_start = utils.clamp(float(start), 0.0, total)
	clamped_end = utils.clamp(float(end), clamped_start, total)
	return TrimRange(start=clamped_start, end=clamped_end)
