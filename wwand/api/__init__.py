"""
HTTP surfaces: health API and Prometheus metrics
"""
