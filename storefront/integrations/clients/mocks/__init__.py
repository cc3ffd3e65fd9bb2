"""
Mock integration clients.

These clients return realistic collections without calling any external API.
They follow the SAME interface as the real HTTP clients.
"""
