# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: TextEmbedder
# -----------------------------------------------------------------------------
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class TextEmbedder(Protocol):
    def is_configured(self) -> bool:
        ...

    def embed(self, text: str) -> np.ndarray:
        ...
