"""
Application package for the document submission service.
"""
