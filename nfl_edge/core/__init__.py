"""Core data types and mathematics for the NFL Edge modeling pipeline.

This package contains pure, side-effect-free building blocks:

- ``errors``      error taxonomy shared by every pipeline stage
- ``games``       the immutable ``GameRecord`` and chronological ordering
- ``features``    feature selection, vectorization and datasets
- ``splits``      chronological and seeded-shuffle train/test splits
- ``metrics``     Brier score, accuracy and cross-entropy
- ``calibration`` probability binning and calibration grade
- ``odds_math``   odds conversion, vig removal, expected value
- ``kelly``       Kelly criterion stake sizing

Nothing in this package imports from ``nfl_edge.services``.
"""
