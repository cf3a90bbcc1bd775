"""NFL Edge: win-probability modeling and market edge detection.

Train a regularized logistic regression on historical games, measure its
calibration, find the training games that matter most, and price the model's
probability against live moneylines.
"""

__version__ = "0.1.0"
