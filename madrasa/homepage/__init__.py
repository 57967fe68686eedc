"""Homepage content selection.

Decides which news items and gallery images the public homepage shows:
the admin's curated list when one is active, otherwise the freshest
items of each collection.
"""
