"""
Application layer: run context, errors and the analysis driver.
"""
