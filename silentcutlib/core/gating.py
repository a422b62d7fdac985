#!/usr/bin/env python3

from silentcutlib.core import detector
from silentcutlib.core.segment import DetectionConfig, Segment, clamp_detection_config

#============================================

def gate_short_silences(timeline: tuple, min_silence: float) -> tuple:
	"""
	Reclassify silent runs shorter than min_silence as active.

	Boundaries are kept; only the classification changes.

	Args:
		timeline: Raw timeline.
		min_silence: Minimum silence duration in seconds.

	Returns:
		tuple: Timeline with short silences flipped to active.
	"""
	gated = []
	for segment in timeline:
		if segment.is_silent and segment.duration < min_silence:
			segment = Segment(start=segment.start, end=segment.end, is_silent=False)
		gated.append(segment)
	return tuple(gated)

#============================================

def merge_runs(timeline: tuple) -> tuple:
	"""
	Merge adjacent segments that share a classification.

	Args:
		timeline: Gapless timeline.

	Returns:
		tuple: Alternating timeline.
	"""
	if len(timeline) == 0:
		return ()
	merged = []
	current = timeline[0]
	for segment in timeline[1:]:
		if segment.is_silent == current.is_silent:
			current = Segment(start=current.start, end=segment.end,
				is_silent=current.is_silent)
			continue
		merged.append(current)
		current = segment
	merged.append(current)
	return tuple(merged)

#============================================

def canonical_timeline(samples, sample_rate: int, config: DetectionConfig) -> tuple:
	config = clamp_detection_config(config)
	raw = detector.detect_silence(samples, sample_rate, config)
	return merge_runs(gate_short_silences(raw, config.min_silence))
