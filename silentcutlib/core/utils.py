#!/usr/bin/env python3

import decimal
import os
import shlex
import shutil
import subprocess

#============================================

_QUIET_MODE = False

#============================================

def set_quiet_mode(value: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(value)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def log(message: str) -> None:
	if _QUIET_MODE:
		return
	print(message)

#============================================

def run_process(cmd: list, capture_output: bool = True) -> subprocess.CompletedProcess:
	"""
	Run a subprocess command, raising on a non-zero exit.

	Args:
		cmd: Command list to execute.
		capture_output: Capture stdout and stderr when True.

	Returns:
		subprocess.CompletedProcess: The completed process.
	"""
	showcmd = shlex.join(cmd)
	log(f"CMD: '{showcmd}'")
	proc = subprocess.run(cmd, capture_output=capture_output, text=True)
	if proc.returncode != 0:
		stderr_text = (proc.stderr or "").strip()
		raise RuntimeError(f"command failed: {showcmd}\n{stderr_text}")
	return proc

#============================================

def check_dependency(cmd_name: str) -> None:
	if shutil.which(cmd_name) is None:
		raise RuntimeError(f"missing dependency: {cmd_name}")
	return

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.isfile(filepath):
		raise RuntimeError(f"file not found: {filepath}")
	return

#============================================

def clamp(value: float, low: float, high: float) -> float:
	if value < low:
		return low
	if value > high:
		return high
	return value

#============================================

def format_number(value: float) -> str:
	"""
	Format a number compactly, dropping trailing zeros.

	Args:
		value: Number to format.

	Returns:
		str: Formatted number, e.g. 1.0 -> "1", 0.2 -> "0.2".
	"""
	text = f"{value:.3f}"
	text = text.rstrip('0').rstrip('.')
	if text == "" or text == "-0":
		text = "0"
	return text

#============================================

def format_timestamp(seconds: float) -> str:
	"""
	Format seconds as HH:MM:SS.mmm using half-up millisecond rounding.

	Args:
		seconds: Time in seconds.

	Returns:
		str: Formatted timestamp.
	"""
	value = decimal.Decimal(str(seconds)) * decimal.Decimal(1000)
	value = value.quantize(decimal.Decimal("1"), rounding=decimal.ROUND_HALF_UP)
	total_millis = max(0, int(value))
	hours = total_millis // 3600000
	remainder = total_millis % 3600000
	minutes = remainder // 60000
	remainder = remainder % 60000
	seconds_part = remainder // 1000
	millis_part = remainder % 1000
	return f"{hours:02d}:{minutes:02d}:{seconds_part:02d}.{millis_part:03d}"
