"""
Core Business Logic
==================

Request dispatching and browser-driven rendering.

Modules:
- dispatch: Render mode selection and response envelope shaping
- rendering: Browser acquisition and page capture
"""
