# pawpal/core/__init__.py
