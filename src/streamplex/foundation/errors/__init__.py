"""Error handling for streamplex.

- ErrorCode: Standard error codes
- StreamplexError and subclasses: misuse faults
- MemberError: structured description of a failed member stream
- Result/Ok/Err: failure encoded as an item value
"""

from .errors import ErrorCode, InvalidMemberError, MemberError, NotResolvedError, StreamplexError
from .result import Err, Ok, Result

__all__ = [
    "ErrorCode", "StreamplexError", "InvalidMemberError", "NotResolvedError", "MemberError",
    "Result", "Ok", "Err",
]
