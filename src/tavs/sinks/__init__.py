"""Signal sinks - 信号投递出口"""

from .base import (
    NullSink,
    SignalSink,
    SinkError,
    SinkInvocationFailed,
    SinkResult,
    SinkUnavailable,
)
from .factory import create_sink
from .trigger import TriggerScriptSink, find_trigger_script, trigger_script_candidates

__all__ = [
    "NullSink",
    "SignalSink",
    "SinkError",
    "SinkInvocationFailed",
    "SinkResult",
    "SinkUnavailable",
    "TriggerScriptSink",
    "create_sink",
    "find_trigger_script",
    "trigger_script_candidates",
]
