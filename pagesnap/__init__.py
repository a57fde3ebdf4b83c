"""
PageSnap
========

A small render worker that turns raw HTML, a page URL or a PDF-source URL
into a base64-encoded PNG or PDF using a headless Chromium driven by Playwright.

This package provides:
- FastAPI endpoint for the render contract
- Request dispatching across the three render modes
- Browser acquisition against a remote CDP endpoint or a local Chromium
"""

__version__ = "1.0.0"
__author__ = "PageSnap Team"
