"""Runtime: stream multiplexing and observability."""

from .multiplex import (
    HeadFuture,
    StreamHead,
    StreamMultiplexer,
    UnorderedTaskSet,
    collect,
    extend,
    join_streams,
    merge,
    merge_settled,
    merge_streams,
    next_head,
    settle_stream,
)
from .observability import configure_from_settings, configure_logging, get_logger, log_context

__all__ = [
    # Multiplexing
    "StreamMultiplexer", "UnorderedTaskSet", "HeadFuture", "StreamHead", "next_head",
    "merge", "merge_streams", "extend",
    # Adapters
    "join_streams", "settle_stream", "merge_settled", "collect",
    # Observability
    "configure_logging", "configure_from_settings", "get_logger", "log_context",
]
