"""
Command-line interface for the forecasting engine.
"""
