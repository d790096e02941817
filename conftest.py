import os

# Tests never touch a real database or Redis server
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("MENU_PARSER_URL", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")
