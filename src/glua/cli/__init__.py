"""
GLUA Command-Line Interface
===========================

- **gluaparse**: check, dump or re-format GLUA source files

The tool is a Click-based CLI application.
"""

__all__ = ["gluaparse"]
