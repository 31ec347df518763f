from __future__ import annotations
from typing import NewType, Literal

Address  = NewType("Address", str)   # 0x-prefixed, lowercase
Topic    = NewType("Topic", str)     # 66-char 0x-hash, lowercase
BlockTag = Literal["latest", "earliest", "pending", "safe", "finalized"]
