"""CodeGuard report rendering.

Jinja2 templates for the HTML reports live alongside this module and are
loaded with PackageLoader("codeguard", "templates").
"""

from codeguard.templates.renderer import RenderError, ReportRenderer

__all__ = ["RenderError", "ReportRenderer"]
