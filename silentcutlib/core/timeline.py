#!/usr/bin/env python3

from dataclasses import dataclass
from silentcutlib.core.segment import Segment, clamp_trim_range

#============================================

@dataclass(frozen=True)
class ProcessingStats:
	original_duration: float
	final_duration: float
	segments_removed: int
	silence_threshold_db: float
	reduction: float

	@property
	def reduction_percent(self) -> int:
		return int(round(self.reduction * 100.0))

#============================================

def timeline_duration(timeline: tuple) -> float:
	if len(timeline) == 0:
		return 0.0
	return timeline[-1].end

#============================================

def active_segments(timeline: tuple, trim_start: float, trim_end: float) -> tuple:
	"""
	Drop silent and out-of-range segments and clip the rest to the trim window.

	Args:
		timeline: Canonical timeline.
		trim_start: Trim window start in seconds.
		trim_end: Trim window end in seconds.

	Returns:
		tuple: Clipped active segments, in timeline order.
	"""
	trim = clamp_trim_range(trim_start, trim_end, timeline_duration(timeline))
	if trim.end <= trim.start:
		return ()
	active = []
	for segment in timeline:
		if segment.is_silent:
			continue
		if segment.end < trim.start or segment.start > trim.end:
			continue
		start = max(segment.start, trim.start)
		end = min(segment.end, trim.end)
		# touching the window edge leaves nothing to keep
		if end <= start:
			continue
		active.append(Segment(start=start, end=end, is_silent=False))
	return tuple(active)

#============================================

def final_duration(active: tuple) -> float:
	return sum((segment.end - segment.start for segment in active), 0.0)

#============================================

def reduction_ratio(trim_start: float, trim_end: float, final: float,
	original: float) -> float:
	if original <= 0:
		return 0.0
	saved = (trim_end - trim_start) - final
	return max(0.0, saved / original)

#============================================

def count_removed_silences(timeline: tuple, trim_start: float, trim_end: float) -> int:
	count = 0
	for segment in timeline:
		if not segment.is_silent:
			continue
		if segment.end <= trim_start or segment.start >= trim_end:
			continue
		count += 1
	return count

#============================================

def compute_stats(timeline: tuple, trim_start, trim_end,
	threshold_db: float) -> ProcessingStats:
	"""
	Reduce a timeline and trim window into duration statistics.

	Args:
		timeline: Canonical timeline.
		trim_start: Trim window start, None means 0.
		trim_end: Trim window end, None means the full duration.
		threshold_db: Threshold the timeline was detected with.

	Returns:
		ProcessingStats: Summary values for display.
	"""
	original = timeline_duration(timeline)
	trim = clamp_trim_range(trim_start, trim_end, original)
	final = final_duration(active_segments(timeline, trim.start, trim.end))
	return ProcessingStats(
		original_duration=original,
		final_duration=final,
		segments_removed=count_removed_silences(timeline, trim.start, trim.end),
		silence_threshold_db=threshold_db,
		reduction=reduction_ratio(trim.start, trim.end, final, original),
	)
