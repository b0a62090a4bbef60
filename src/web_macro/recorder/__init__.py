"""
Recorder module - Capture user interactions as macros.
"""

from web_macro.recorder.recorder import MacroRecorder, action_from_event

__all__ = ["MacroRecorder", "action_from_event"]
