"""Rendering of cell outputs into markup and extracted assets."""

from nbpress.rendering.outputs import OUTPUT_RULES, OutputRenderer, fenced_block

__all__ = ["OUTPUT_RULES", "OutputRenderer", "fenced_block"]
