"""Report rendering.

- report: table and JSON renderers for ``ProbeSummary``
"""

from tileprobe.reporting.report import render_json, render_table

__all__ = ["render_table", "render_json"]
