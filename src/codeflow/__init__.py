"""CodeFlow - snippet persistence and autosave core.

Stores code snippets and their folder hierarchy in a document store and
coordinates debounced autosaves for the editor.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
