"""Family Tree - relationship graph layout and interaction engine.

Loads a family tree snapshot from a remote store, lays it out as a layered
diagram and tracks the editing state of an interactive viewer.
"""

__version__ = "0.1.0"
