"""
Core functionality for VideoTube: errors, dependencies and middleware
"""
