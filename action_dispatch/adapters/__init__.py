"""Infrastructure adapter exports."""

from .identity import IdentityAdapter
from .renderer import TemplateRenderer

__all__ = ["IdentityAdapter", "TemplateRenderer"]
