"""Template Definition Sets and their execution."""

from embedded_assets.template.core import TemplateSet
from embedded_assets.template.executor import Executor, Writer
from embedded_assets.utils.html import Markup

__all__ = ["Executor", "Markup", "TemplateSet", "Writer"]
