"""
Example-Checker: static verifier for code examples in documentation pages.
"""

__version__ = "0.1.0"
