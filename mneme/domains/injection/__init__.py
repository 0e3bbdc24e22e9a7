"""
Injection Domain - Automatic, threshold-gated context injection.
"""

from .models import ApprovedMatch, InjectionPolicy
from .policy import ContextInjector, render_approved, render_context

__all__ = [
    "ApprovedMatch",
    "InjectionPolicy",
    "ContextInjector",
    "render_approved",
    "render_context",
]
