# site_press/__init__.py
"""
SitePress package initializer.
Defines package version; the CLI lives in :mod:`site_press.cli`.
"""
__version__ = "0.1.0"
