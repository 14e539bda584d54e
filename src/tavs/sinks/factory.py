"""Sink factory for creating signal sinks."""

import logging
from collections.abc import Mapping

from tavs.config import SignalConfig
from tavs.sinks.base import NullSink, SignalSink
from tavs.sinks.trigger import TriggerScriptSink, find_trigger_script

logger = logging.getLogger(__name__)


def create_sink(
    signal_config: SignalConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> SignalSink:
    """Create the sink for a coordinator.

    Args:
        signal_config: Configuration (explicit trigger path, debug flag).
        environ: Environment used for script discovery.

    Returns:
        TriggerScriptSink when a trigger script is found, otherwise NullSink.
    """
    signal_config = signal_config or SignalConfig()
    script = find_trigger_script(signal_config.trigger_script, environ)

    if script is None:
        if signal_config.debug:
            logger.warning("[SinkFactory] Trigger script not found - signals disabled")
        return NullSink("trigger script not found")

    if signal_config.debug:
        logger.info(f"[SinkFactory] Using trigger script: {script}")
    return TriggerScriptSink(script, debug=signal_config.debug)
