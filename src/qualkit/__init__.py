"""
qualkit - qualitative data coding.

This package provides the domain model of a qualitative coding tool (code
books, themes, applied codes, source files and their text blocks) together
with project persistence, file loading, settings and a command-line interface.
"""

__version__ = "0.1.0"
