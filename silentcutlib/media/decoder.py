#!/usr/bin/env python3

import os
import tempfile
import wave

import numpy
from silentcutlib.core import utils

#============================================

WAV_DTYPES = {
	1: numpy.dtype('u1'),
	2: numpy.dtype('<i2'),
	4: numpy.dtype('<i4'),
}

#============================================

def make_temp_wav() -> str:
	temp_handle, temp_path = tempfile.mkstemp(prefix="silentcut-", suffix=".wav")
	os.close(temp_handle)
	return temp_path

#============================================

def extract_audio(movfile: str, wavfile: str, samplerate: int = 48000) -> str:
	"""
	Extract the audio stream of a media file to 16-bit PCM wav with ffmpeg.

	Channels are kept so that the first channel can be analyzed on its own.

	Args:
		movfile: Media file path.
		wavfile: Output wav path.
		samplerate: Output sample rate in Hz.

	Returns:
		str: Output wav path.
	"""
	cmd = [
		"ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
		"-i", movfile,
		"-vn", "-sn",
		"-acodec", "pcm_s16le",
		"-ar", str(samplerate),
		wavfile,
	]
	utils.run_process(cmd, capture_output=True)
	if not os.path.isfile(wavfile):
		raise RuntimeError("audio extraction failed")
	return wavfile

#============================================

def read_wav(audio_path: str) -> tuple:
	"""
	Read a PCM wav file into planar float samples in [-1, 1].

	Args:
		audio_path: Wav file path.

	Returns:
		tuple: (samples with shape (channels, frames), sample_rate)
	"""
	with wave.open(audio_path, 'rb') as wav_handle:
		channels = wav_handle.getnchannels()
		sample_rate = wav_handle.getframerate()
		sample_width = wav_handle.getsampwidth()
		total_frames = wav_handle.getnframes()
		data = wav_handle.readframes(total_frames)
	if sample_rate <= 0:
		raise RuntimeError("audio sample rate must be positive")
	if channels <= 0:
		raise RuntimeError("audio channel count must be positive")
	if sample_width not in WAV_DTYPES:
		raise RuntimeError("unsupported wav sample width")
	max_amplitude = float(2 ** (8 * sample_width - 1))
	samples = numpy.frombuffer(data, dtype=WAV_DTYPES[sample_width])
	if sample_width == 1:
		samples = samples.astype(numpy.int16) - 128
	frame_count = samples.size // channels
	samples = samples[:frame_count * channels]
	samples = samples.reshape(frame_count, channels).T
	samples = samples.astype(numpy.float64) / max_amplitude
	return samples, sample_rate

#============================================

def load_media(input_file: str, audio_file: str = None,
	keep_wav: bool = False) -> tuple:
	"""
	Decode a media file into samples, extracting audio with ffmpeg when needed.

	Args:
		input_file: Media file path.
		audio_file: Optional wav path that skips extraction.
		keep_wav: Keep the temporary extracted wav.

	Returns:
		tuple: (samples, sample_rate)
	"""
	utils.ensure_file_exists(input_file)
	if audio_file is not None:
		utils.ensure_file_exists(audio_file)
		return read_wav(audio_file)
	if os.path.splitext(input_file)[1].lower() in ('.wav', '.wave'):
		return read_wav(input_file)
	utils.check_dependency("ffmpeg")
	temp_wav = make_temp_wav()
	try:
		extract_audio(input_file, temp_wav)
		return read_wav(temp_wav)
	finally:
		if not keep_wav and os.path.exists(temp_wav):
			os.remove(temp_wav)
