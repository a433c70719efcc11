"""Unofficial JSON API for the MC百科 (mcmod.cn) wiki."""
from .app import create_app
from .markdown import PopoverLinks, html_to_markdown


__all__ = ['create_app', 'html_to_markdown', 'PopoverLinks']
__version__ = '1.0.0'
