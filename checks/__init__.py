"""Tidy checks.

Every module in this package registers its check in :mod:`checks.registry`
on import; the runner discovers them by walking the package.
"""
