"""
Package: config
Description: Environment-driven settings and per-queue configuration.
"""
