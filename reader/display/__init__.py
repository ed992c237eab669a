from .text_display import TextDisplay, render_pages

__all__ = ["TextDisplay", "render_pages"]
