"""House generators.

- box: rectangular multi-level house with consistently stacked slabs
- reference: the two-level reference house with a flat and a hip roof
"""
