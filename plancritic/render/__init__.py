"""
Output formats for reviews
"""

from .json_output import render_json
from .markdown import render_markdown
from .patches import format_patches, write_patch_file

__all__ = ["format_patches", "render_json", "render_markdown", "write_patch_file"]
