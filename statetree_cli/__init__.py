"""
statetree CLI - module tree inspection

Commands:
- statetree inspect TARGET - Module tree, namespaces and qualified types
- statetree state TARGET - Root state and its fingerprint
- statetree version
"""

__version__ = "0.1.0"
