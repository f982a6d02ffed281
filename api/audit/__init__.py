"""
Audit log: best-effort action entries written by every mutation.
"""
