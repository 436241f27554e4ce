"""
Core Audit Engine.

This package contains the components of the cryptographic usage audit:
- constants: statuses, root symbols, noise prefixes
- policy: policy table and classification
- records: usage, call path, summary and result types
- scanner: finds tracked calls in a call graph
- paths: shortest root-to-caller path reconstruction
- aggregator: filters, ordering and summary
- config: audit options
- analyzer: the end-to-end pipeline
"""
