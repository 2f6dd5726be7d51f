"""
Utility modules for the ptaflow analysis framework.

- Canonical object management and interning tables (canonical.py)
- Type-based dispatch for statement visitors (typedispatch.py)
- Work queues and lazy dictionaries (xcollections.py)
- Timed phase reporting (console.py)
"""
