# pawpal/services/__init__.py
