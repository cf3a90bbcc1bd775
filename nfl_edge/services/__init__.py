"""Orchestration on top of :mod:`nfl_edge.core`.

- ``training``          split, fit and evaluate with stage-tagged failures
- ``loo``               leave-one-out influence analysis
- ``edge_finder``       price a model probability against a moneyline
- ``matchup_features``  map an upcoming matchup onto the feature schema
- ``team_data``         NFL divisions and stadium coordinates
- ``game_loader``       pandas DataFrame to GameRecord adapter
"""
