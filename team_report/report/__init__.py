"""Markdown report rendering and merging"""

from .markdown_builder import TeamReportBuilder, DailyReportBuilder, WindowReportBuilder
from .merger import CrossSourceMerger, extract_section, team_marker
