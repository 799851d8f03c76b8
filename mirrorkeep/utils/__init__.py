"""
Utilities

Logging setup and filesystem helpers.

Author: mirrorkeep Project
License: MIT
"""
