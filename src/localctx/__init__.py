"""
localctx: file selection and result shaping for a local code-context index.
"""

__version__ = "0.1.0"
