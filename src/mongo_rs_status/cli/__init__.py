"""CLI layer — argument parsing, one-shot and serve entry points, error boundary.

This package is the outermost layer of the application.  It may import
from ``core``, ``infra`` and the package root, but no other layer may
import from ``cli``.
"""
