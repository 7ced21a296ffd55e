"""
RSML CLI Commands
=================
"""
