"""Program analyses feeding the audit engine."""
