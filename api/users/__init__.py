"""
User CRUD with bcrypt-hashed passwords.
"""
