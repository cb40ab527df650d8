"""Subscription id generation.

Ids combine a millisecond time seed, a process-wide counter and a random
suffix, so repeated calls within the same millisecond never collide.
"""

import itertools
import random
import time

# itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_subscription_id() -> str:
    seed = time.time_ns() // 1_000_000
    return f"{seed}-{next(_id_counter)}-{random.getrandbits(40):010x}"
