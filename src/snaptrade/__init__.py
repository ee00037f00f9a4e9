"""
SnapTrade chart analysis: model response normalization, analysis pipeline and persistence.
"""
