"""Dynamic stream multiplexing.

Merges a runtime-growable set of async iterators into one, yielding each
item as soon as any member produces it:
- StreamMultiplexer: the merged stream and its membership API
- UnorderedTaskSet: pending head-futures and the ready queue
- HeadFuture / StreamHead / next_head: one pending ``anext`` on a member
- merge, merge_streams, extend: construction helpers
- join_streams, settle_stream, merge_settled, collect: adapters
"""

from .adapters import collect, join_streams, merge_settled, settle_stream
from .head import HeadFuture, StreamHead, next_head
from .select import StreamMultiplexer, extend, merge, merge_streams
from .taskset import UnorderedTaskSet

__all__ = [
    "StreamMultiplexer",
    "UnorderedTaskSet",
    "HeadFuture",
    "StreamHead",
    "next_head",
    "merge",
    "merge_streams",
    "extend",
    "join_streams",
    "settle_stream",
    "merge_settled",
    "collect",
]
