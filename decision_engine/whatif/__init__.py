"""What-if module - Isolated, debounced weight exploration."""

from decision_engine.whatif.cache import FIFOCache
from decision_engine.whatif.debounce import Debouncer, DebounceState
from decision_engine.whatif.session import WhatIfResult, WhatIfSession

__all__ = [
    "FIFOCache",
    "Debouncer",
    "DebounceState",
    "WhatIfResult",
    "WhatIfSession",
]
