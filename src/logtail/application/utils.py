from typing import Sequence


def topics_fingerprint(topic0s: Sequence[str]) -> str:
    import hashlib as h
    base = ",".join(sorted([t.lower() for t in topic0s]))
    return h.sha1(base.encode()).hexdigest()[:10]
