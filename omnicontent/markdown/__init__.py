# omnicontent/markdown/__init__.py
