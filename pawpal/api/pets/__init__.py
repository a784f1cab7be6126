# pawpal/api/pets/__init__.py
