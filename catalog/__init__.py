"""
Product catalog service.
"""
