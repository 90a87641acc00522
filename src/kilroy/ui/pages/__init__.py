"""Kilroy pages: landing, view and drop."""

from .drop import render_drop_page
from .home import render_home_page
from .view import render_view_page

__all__ = ["render_drop_page", "render_home_page", "render_view_page"]
