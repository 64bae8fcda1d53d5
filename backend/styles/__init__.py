"""
Style configuration package: structural/narrative options and prompt building.
"""
