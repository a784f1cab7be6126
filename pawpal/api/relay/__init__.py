# pawpal/api/relay/__init__.py
