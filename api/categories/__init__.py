"""
Category CRUD.
"""
