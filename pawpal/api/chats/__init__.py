# pawpal/api/chats/__init__.py
