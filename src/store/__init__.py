"""Collection storage layer.

This module persists typed record collections as JSON files.
It powers loading, mutation, and file lifecycle for the SDK.
"""
