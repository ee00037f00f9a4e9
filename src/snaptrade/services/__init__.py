"""
Model analyzers, the response normalizer, the news client and the analysis pipeline.
"""
