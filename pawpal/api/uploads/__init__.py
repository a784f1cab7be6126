# pawpal/api/uploads/__init__.py
