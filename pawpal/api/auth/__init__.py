# pawpal/api/auth/__init__.py
