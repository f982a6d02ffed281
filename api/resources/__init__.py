"""
Uploaded resources: a `resources` row plus a file in the configured storage backend.
"""
