from __future__ import annotations

from typing import List, Tuple


class PartitionError(RuntimeError):
    """A stripe's pixel view does not match its declared bounds."""


class RenderError(RuntimeError):
    """One or more stripe workers failed; the render was abandoned."""

    def __init__(self, failures: List[Tuple[int, BaseException]]):
        self.failures = list(failures)
        indices = ", ".join(str(i) for i, _ in self.failures)
        super().__init__(f"{len(self.failures)} stripe worker(s) failed (stripes: {indices})")
