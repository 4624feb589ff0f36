"""Geometry derivation: walls, slabs, openings, facade panels and roofs.

`derive.house.derive_house` runs validation and every deriver in one call.
"""
