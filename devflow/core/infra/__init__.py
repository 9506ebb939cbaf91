"""Adapters for external system tools (container engines, host processes)"""
