"""Quire static site assembler.

Quire reads page templates, layouts, partials, front matter, global data
files, collections and locale strings from a project folder, merges them in a
fixed priority order, and renders every page through a pluggable templating
engine. One page failing to render never stops the rest of the build.

The main entry point for library use is ``quire.site.Site``; the ``quire``
command wraps it for the terminal.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
