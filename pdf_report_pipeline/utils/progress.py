"""Progress bar utilities for the PDF Report Pipeline.

This module provides a ProgressBar class that wraps tqdm for batch progress
display, with an ASCII fallback on terminals without unicode support.
"""

from tqdm import tqdm

from pdf_report_pipeline.utils.logging import _supports_unicode


class ProgressBar:
    """Progress bar wrapper around tqdm for consistent styling.

    Can be driven directly or used as a context manager; a disabled bar
    accepts every call and draws nothing.

    Example:
        >>> with ProgressBar(total=3, desc="Generating reports") as pbar:
        ...     for item in snapshot:
        ...         pbar.set_postfix({"doc": item.name})
        ...         pbar.update(1)
    """

    def __init__(
        self, total: int, desc: str, unit: str = "doc", enabled: bool = True
    ) -> None:
        self.total = total
        self.desc = desc
        self.unit = unit
        self.enabled = enabled
        self._pbar: tqdm | None = None

    def __enter__(self) -> "ProgressBar":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Create the underlying tqdm bar if enabled and not yet open."""
        if not self.enabled or self._pbar is not None:
            return
        self._pbar = tqdm(
            total=self.total,
            desc=self.desc,
            unit=self.unit,
            ncols=80,
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
            ascii=not _supports_unicode(),
        )

    def update(self, n: int = 1) -> None:
        if self._pbar is not None:
            self._pbar.update(n)

    def set_postfix(self, postfix: dict) -> None:
        """Set key=value pairs displayed after the bar."""
        if self._pbar is not None:
            self._pbar.set_postfix(postfix)

    def close(self) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None
