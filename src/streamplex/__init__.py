"""streamplex - merge a dynamic set of async streams into one.

Items are yielded as soon as any member stream produces them. Members can be
added while the merged stream is being consumed, and leave it the moment
they end.

Quick Start:
    >>> from streamplex import merge, StreamMultiplexer
    >>>
    >>> async for item in merge([prices(), volumes()]):
    ...     print(item)

Dynamic membership:
    >>> mux = StreamMultiplexer()
    >>> mux.push(prices())
    >>> async with mux:
    ...     async for item in mux:
    ...         if item.symbol not in seen:
    ...             seen.add(item.symbol)
    ...             mux.push(order_book(item.symbol))

Failures as values:
    >>> from streamplex import merge_settled
    >>> async for result in merge_settled(feed_a(), feed_b()):
    ...     if result.is_ok():
    ...         handle(result.unwrap())
    ...     else:
    ...         log.warning("feed failed", error=str(result.unwrap_err()))

Configuration (environment):
    STREAMPLEX_MUX_ON_ERROR=skip
    STREAMPLEX_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

__version__ = "0.1.0"

from .foundation import (
    Err,
    ErrorCode,
    InvalidMemberError,
    MemberError,
    NotResolvedError,
    Ok,
    Result,
    StreamplexError,
    StreamplexSettings,
    clear_settings_cache,
    get_settings,
)
from .runtime import (
    HeadFuture,
    StreamHead,
    StreamMultiplexer,
    UnorderedTaskSet,
    collect,
    configure_from_settings,
    configure_logging,
    extend,
    get_logger,
    join_streams,
    log_context,
    merge,
    merge_settled,
    merge_streams,
    next_head,
    settle_stream,
)

__all__ = [
    "__version__",
    # Multiplexing
    "StreamMultiplexer", "UnorderedTaskSet", "HeadFuture", "StreamHead", "next_head",
    "merge", "merge_streams", "extend",
    # Adapters
    "join_streams", "settle_stream", "merge_settled", "collect",
    # Errors
    "ErrorCode", "StreamplexError", "InvalidMemberError", "NotResolvedError", "MemberError",
    "Result", "Ok", "Err",
    # Config
    "StreamplexSettings", "get_settings", "clear_settings_cache",
    # Observability
    "configure_logging", "configure_from_settings", "get_logger", "log_context",
]
