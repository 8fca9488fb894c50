# pyrlsfiltering/_utils/__init__.py
