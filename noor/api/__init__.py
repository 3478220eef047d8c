"""
HTTP API for the noor content gateway
"""
