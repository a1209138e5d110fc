"""
Search tools and utilities for the PDF Scanner.

This module contains the building blocks of a search: directory walking,
document text extraction, phrase matching and archive creation.
"""
