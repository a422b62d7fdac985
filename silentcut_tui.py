#!/usr/bin/env python3

"""
Textual TUI for tuning silence detection before writing a cut script.
"""

# Standard Library
import argparse
import os
import sys
import threading
import time
import traceback

script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
	sys.path.insert(0, script_dir)

# PIP3 modules
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import RichLog, Static
from rich.text import Text

# local repo modules
from silentcutlib.core import config as config_module
from silentcutlib.core import utils
from silentcutlib.core.segment import make_detection_config
from silentcutlib.core.session import EditSession, NothingToExportError, SessionState
from silentcutlib.exporters import script
from silentcutlib.exporters.plan import ExportConfig

#============================================

NORD_COLORS = {
	'background': "#2E3440",
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'numbers': "#B48EAD",
	'paths': "#A3BE8C",
	'strings': "#EBCB8B",
	'error': "#BF616A",
}

THRESHOLD_STEP_DB = 1.0
MIN_SILENCE_STEP = 0.1

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="silentcut TUI")
	parser.add_argument('-i', '--input', dest='input_file', required=True,
		help='input video or audio file')
	parser.add_argument('-a', '--audio', dest='audio_file', default=None,
		help='optional wav file path to skip extraction')
	parser.add_argument('-c', '--config', dest='config_file', default=None,
		help='path to a silentcut config yaml')
	parser.add_argument('-d', '--debug', dest='debug_log', action='store_true',
		help='write debug log to silentcut_tui.log in the current directory')
	args = parser.parse_args()
	return args

#============================================

class SilentCutTuiApp(App):
	BINDINGS = [
		("q", "quit", "Quit"),
		("up", "threshold_up", "Threshold +1 dB"),
		("down", "threshold_down", "Threshold -1 dB"),
		("right", "silence_up", "Min silence +0.1 s"),
		("left", "silence_down", "Min silence -0.1 s"),
		("p", "write_posix", "Write .sh"),
		("b", "write_batch", "Write .bat"),
	]

	CSS = """
	#root {
		height: 1fr;
	}

	#top_row {
		height: 40%;
		min-height: 10;
	}

	#left_panel {
		width: 50%;
		height: 1fr;
		border: solid gray;
	}

	#right_panel {
		width: 50%;
		height: 1fr;
		border: solid gray;
	}

	#metrics_title, #segments_title {
		height: 1;
		color: #88C0D0;
	}

	#metrics, #segments {
		height: 1fr;
	}

	#footer_note {
		height: 1;
		color: #4C566A;
	}

	#log {
		height: 1fr;
		border: solid gray;
	}
	"""

	def __init__(self, input_file: str, settings: dict, audio_file: str = None,
		debug_log: bool = False):
		super().__init__()
		self.input_file = input_file
		self.audio_file = audio_file
		self.settings = settings
		self.session = EditSession()
		self.detection = make_detection_config(settings['threshold_db'],
			settings['min_silence'])
		self.detect_started = {}
		self.error_text = None
		self.metrics_widget = None
		self.segments_widget = None
		self.log_widget = None
		self.debug_mode = debug_log
		self.log_path = None
		self.log_lock = threading.Lock()
		self.was_quiet = False
		if self.debug_mode:
			self.log_path = os.path.join(os.getcwd(), "silentcut_tui.log")
			self._reset_log()
			self._write_log(f"debug log: {self.log_path}")

	#============================
	def compose(self) -> ComposeResult:
		yield Static("SILENTCUT TUI", id="header")
		with Vertical(id="root"):
			with Horizontal(id="top_row"):
				with Vertical(id="left_panel"):
					yield Static("Detection", id="metrics_title")
					yield Static("", id="metrics")
					yield Static("arrows tune, p/b write script, q quits", id="footer_note")
				with Vertical(id="right_panel"):
					yield Static("Active segments", id="segments_title")
					yield Static("", id="segments")
			yield RichLog(id="log", wrap=True, highlight=False)

	#============================
	def on_mount(self) -> None:
		self.metrics_widget = self.query_one("#metrics", Static)
		self.segments_widget = self.query_one("#segments", Static)
		self.log_widget = self.query_one(RichLog)
		self.was_quiet = utils.is_quiet_mode()
		utils.set_quiet_mode(True)
		self._log(f"loading {self.input_file}")
		thread = threading.Thread(target=self._load_source, daemon=True)
		thread.start()
		self._update_metrics()

	#============================
	def on_unmount(self) -> None:
		utils.set_quiet_mode(self.was_quiet)

	#============================
	def _load_source(self) -> None:
		start = time.time()
		try:
			self.session.load_file(self.input_file, audio_file=self.audio_file,
				config=self.detection)
		except Exception as exc:
			self.call_from_thread(self._set_error, str(exc), traceback.format_exc())
			return
		self.call_from_thread(self._detection_done, self.session.generation,
			time.time() - start)

	#============================
	def _start_detection(self) -> None:
		if self.session.state not in (SessionState.READY, SessionState.DETECTING):
			return
		request = self.session.request_detection(self.detection)
		self.detect_started[request.token] = time.time()
		self._write_log(f"detection {request.token} requested: "
			f"{self.detection.threshold_db:.1f} dB, {self.detection.min_silence:.1f} s")
		thread = threading.Thread(target=self._run_detection, args=(request,),
			daemon=True)
		thread.start()
		self._update_metrics()

	#============================
	def _run_detection(self, request) -> None:
		try:
			result = self.session.run_detection(request)
		except Exception as exc:
			self.call_from_thread(self._set_error, str(exc), traceback.format_exc())
			return
		self.call_from_thread(self._commit_detection, request.token, result)

	#============================
	def _commit_detection(self, token: int, result) -> None:
		started = self.detect_started.pop(token, time.time())
		if not self.session.commit_detection(token, result):
			self._write_log(f"detection {token} discarded (stale)")
			return
		self._detection_done(token, time.time() - started)

	#============================
	def _detection_done(self, token: int, seconds: float) -> None:
		if self.session.state != SessionState.READY:
			return
		self.error_text = None
		self._log(f"detection {token}: {len(self.session.timeline)} segments "
			f"in {self._format_duration(seconds)}")
		self._update_metrics()
		self._update_segments()

	#============================
	def _set_error(self, text: str, trace_text: str = None) -> None:
		self.error_text = text
		if trace_text:
			self._write_log(trace_text)
		if self.log_widget is not None:
			self.log_widget.write(
				Text(f"error: {text}", style=f"bold {NORD_COLORS['error']}")
			)
		self._update_metrics()

	#============================
	def _change_detection(self, threshold_delta: float, silence_delta: float) -> None:
		self.detection = make_detection_config(
			self.detection.threshold_db + threshold_delta,
			round(self.detection.min_silence + silence_delta, 3),
		)
		self._start_detection()

	#============================
	def action_threshold_up(self) -> None:
		self._change_detection(THRESHOLD_STEP_DB, 0.0)

	#============================
	def action_threshold_down(self) -> None:
		self._change_detection(-THRESHOLD_STEP_DB, 0.0)

	#============================
	def action_silence_up(self) -> None:
		self._change_detection(0.0, MIN_SILENCE_STEP)

	#============================
	def action_silence_down(self) -> None:
		self._change_detection(0.0, -MIN_SILENCE_STEP)

	#============================
	def action_write_posix(self) -> None:
		self._write_script('posix')

	#============================
	def action_write_batch(self) -> None:
		self._write_script('batch')

	#============================
	def _write_script(self, dialect: str) -> None:
		export_config = ExportConfig(
			format=self.settings['format'],
			trim_start=self.settings['trim_start'],
			trim_end=self.settings['trim_end'],
			background_ref=self.settings['background'],
		)
		try:
			text = self.session.export_script(dialect, export_config)
		except NothingToExportError as exc:
			self._log(str(exc))
			return
		except RuntimeError as exc:
			self._set_error(str(exc))
			return
		output_file = os.path.join(os.getcwd(), script.script_filename(dialect))
		with open(output_file, 'w', encoding='utf-8', newline='\n') as handle:
			handle.write(text)
		self._log(f"wrote {output_file}")

	#============================
	def _log(self, message: str) -> None:
		if self.log_widget is not None:
			self.log_widget.write(message)
		self._write_log(message)

	#============================
	def _write_log(self, message: str) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
		line = f"[{timestamp}] {message}\n"
		with self.log_lock:
			with open(self.log_path, "a", encoding="utf-8") as handle:
				handle.write(line)

	#============================
	def _reset_log(self) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		with self.log_lock:
			with open(self.log_path, "w", encoding="utf-8"):
				return

	#============================
	def _update_metrics(self) -> None:
		if self.metrics_widget is None:
			return
		state = self.session.state
		status_style = NORD_COLORS['foreground']
		if state == SessionState.ERROR:
			status_style = NORD_COLORS['error']
		elif state == SessionState.READY:
			status_style = NORD_COLORS['paths']
		metrics = Text()
		metrics.append("Status: ", style=NORD_COLORS['dim'])
		metrics.append(state.value, style=status_style)
		metrics.append("\n")
		metrics.append("Threshold: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.detection.threshold_db:.0f} dB", style=NORD_COLORS['numbers'])
		metrics.append(" | Min silence: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.detection.min_silence:.1f}s", style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Generation: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.session.generation}", style=NORD_COLORS['numbers'])
		if state == SessionState.READY:
			stats = self.session.stats(self.settings['trim_start'], self.settings['trim_end'])
			metrics.append("\n")
			metrics.append("Source: ", style=NORD_COLORS['dim'])
			metrics.append(self._format_duration(stats.original_duration),
				style=NORD_COLORS['numbers'])
			metrics.append(" | Final: ", style=NORD_COLORS['dim'])
			metrics.append(self._format_duration(stats.final_duration),
				style=NORD_COLORS['numbers'])
			metrics.append(" | Reduction: ", style=NORD_COLORS['dim'])
			metrics.append(f"{stats.reduction_percent}%", style=NORD_COLORS['numbers'])
		if self.error_text is not None:
			metrics.append("\n")
			metrics.append(self.error_text, style=NORD_COLORS['error'])
		self.metrics_widget.update(metrics)

	#============================
	def _update_segments(self) -> None:
		if self.segments_widget is None:
			return
		active = self.session.active_segments(self.settings['trim_start'],
			self.settings['trim_end'])
		lines = [self._format_segment(index, segment)
			for index, segment in enumerate(active)]
		if len(lines) == 0:
			lines = ["nothing to export"]
		self.segments_widget.update("\n".join(lines))

	#============================
	def _format_segment(self, index: int, segment) -> str:
		start = utils.format_timestamp(segment.start)
		end = utils.format_timestamp(segment.end)
		return f"{index:04d}  {start} - {end}  ({segment.end - segment.start:.2f}s)"

	#============================
	def _format_duration(self, seconds: float) -> str:
		if seconds < 60:
			return f"{seconds:.1f}s"
		minutes = int(seconds // 60)
		remaining = seconds - (minutes * 60)
		seconds_text = f"{remaining:04.1f}"
		if minutes < 60:
			return f"{minutes}m {seconds_text}s"
		hours = int(minutes // 60)
		minutes = minutes - (hours * 60)
		return f"{hours}h {minutes:02d}m {seconds_text}s"

#============================================

def main():
	args = parse_args()
	config_path = args.config_file
	if config_path is None:
		config_path = config_module.default_config_path(args.input_file)
	if os.path.exists(config_path):
		config = config_module.load_config(config_path)
	else:
		config = config_module.default_config()
	settings = config_module.build_settings(config, config_path)
	app = SilentCutTuiApp(args.input_file, settings,
		audio_file=args.audio_file, debug_log=args.debug_log)
	app.run()

#============================================

if __name__ == '__main__':
	main()
