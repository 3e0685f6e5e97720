"""
Chemistry utilities for mzformula: the monoisotopic-mass table, atoms and
atom collections, and exact-mass / adduct calculations.
"""
