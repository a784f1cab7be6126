# pawpal/api/posts/__init__.py
