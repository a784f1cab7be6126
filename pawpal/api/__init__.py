# pawpal/api/__init__.py
