"""
Assessment wizard rules.

Pure Python lookups over plain dicts. No database, no HTTP.
The wizard collects an Assessment in five steps; this package knows which
fields each step collects, which of them are required, and how far along a
partner is.
"""
