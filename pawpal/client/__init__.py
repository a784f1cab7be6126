# pawpal/client/__init__.py
