# pawpal/api/assistant/__init__.py
