"""
Combat log ingestion: format detection, line/document parsers, player
inference and the per-format orchestrators that persist matches.
"""
