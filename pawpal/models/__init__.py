# pawpal/models/__init__.py
