#!/usr/bin/env python3

"""
Windowed RMS silence classifier.

Splits the first channel of a sample buffer into 50 ms windows and emits the
raw alternating run list of silent and active segments.
"""

import decimal

import numpy
from silentcutlib.core.segment import DetectionConfig, Segment, clamp_detection_config

#============================================

WINDOW_SECONDS = 0.05

#============================================

def first_channel(samples) -> numpy.ndarray:
	"""
	Select the analyzed channel from a sample buffer.

	Args:
		samples: 1-D mono samples or 2-D planar (channels, frames) samples.

	Returns:
		numpy.ndarray: 1-D float64 samples of the first channel.
	"""
	data = numpy.asarray(samples, dtype=numpy.float64)
	if data.ndim == 0:
		raise RuntimeError("samples must be a sequence")
	if data.ndim > 1:
		if data.shape[0] == 0:
			return numpy.zeros(0, dtype=numpy.float64)
		data = data[0]
	return data.reshape(-1)

#============================================

def window_size_for(sample_rate: int) -> int:
	"""
	Samples per window: sample_rate * 0.05 rounded half up, at least 1.

	Half-up rounding gives 1103 at 22050 Hz where round() would give 1102.
	"""
	size = decimal.Decimal(str(sample_rate)) * decimal.Decimal(str(WINDOW_SECONDS))
	size = size.quantize(decimal.Decimal("1"), rounding=decimal.ROUND_HALF_UP)
	return max(1, int(size))

#============================================

def window_rms(data: numpy.ndarray, window_size: int) -> numpy.ndarray:
	"""
	Compute RMS energy per window; the final window may be short.

	Args:
		data: 1-D samples.
		window_size: Samples per window.

	Returns:
		numpy.ndarray: RMS value per window.
	"""
	sample_count = data.size
	if sample_count == 0:
		return numpy.zeros(0, dtype=numpy.float64)
	starts = numpy.arange(0, sample_count, window_size)
	sums = numpy.add.reduceat(data * data, starts)
	counts = numpy.minimum(starts + window_size, sample_count) - starts
	return numpy.sqrt(sums / counts)

#============================================

def db_to_amplitude(threshold_db: float) -> float:
	return 10.0 ** (threshold_db / 20.0)

#============================================

def detect_silence(samples, sample_rate: int, config: DetectionConfig) -> tuple:
	"""
	Classify windows and build the raw run list covering the whole buffer.

	Args:
		samples: Sample buffer, see first_channel().
		sample_rate: Samples per second.
		config: Detection settings.

	Returns:
		tuple: Raw timeline of Segment values.
	"""
	if sample_rate is None or sample_rate <= 0:
		raise RuntimeError("sample rate must be positive")
	data = first_channel(samples)
	sample_count = data.size
	if sample_count == 0:
		return ()
	window_size = window_size_for(sample_rate)
	threshold = db_to_amplitude(clamp_detection_config(config).threshold_db)
	mask = window_rms(data, window_size) < threshold
	# window indices where the classification flips
	flips = numpy.flatnonzero(mask[1:] != mask[:-1]) + 1
	run_starts = [0] + [int(index) for index in flips]
	total_duration = sample_count / float(sample_rate)
	segments = []
	for position, window_index in enumerate(run_starts):
		start = (window_index * window_size) / float(sample_rate)
		if position + 1 < len(run_starts):
			end = (run_starts[position + 1] * window_size) / float(sample_rate)
		else:
			end = total_duration
		segments.append(Segment(start=start, end=end,
			is_silent=bool(mask[window_index])))
	return tuple(segments)

#============================================

def buffer_duration(samples, sample_rate: int) -> float:
	if sample_rate is None or sample_rate <= 0:
		raise RuntimeError("sample rate must be positive")
	return first_channel(samples).size / float(sample_rate)
