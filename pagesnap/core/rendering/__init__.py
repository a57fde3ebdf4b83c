"""
Rendering Module
===============

Browser automation for PNG screenshots and PDF output.

Components:
- browser_launcher: Per-request browser acquisition (remote CDP or local launch)
- page_renderer: Page setup, navigation and capture for each render mode
"""
