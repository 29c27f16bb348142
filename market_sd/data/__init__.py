"""
Schedule source loading module.

Loads the market allowlist, the aggregated token dataset and raw schedule
definition files into plain mappings for the resolution policy.
"""
