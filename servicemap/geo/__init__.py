"""
Geo core: distance, address catalog, division index and address formatting.
These modules are free of I/O apart from the bundled catalog file.
"""
