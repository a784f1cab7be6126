# pawpal/api/users/__init__.py
