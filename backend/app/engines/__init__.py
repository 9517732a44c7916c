"""
Engines: Script (Python, RestrictedPython) for choice-list scripts.
"""
