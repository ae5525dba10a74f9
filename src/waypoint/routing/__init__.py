"""Routing — route pattern tree, path matching, and redirect resolution.

Patterns are registered during setup and frozen into an immutable tree
when the router freezes.  Every navigation runs a fresh resolution pass
over that tree.
"""
