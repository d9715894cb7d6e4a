"""Routing — ordered route table with first-match-wins lookup.

Masks are normalized into RoutePattern variants when they are registered,
so a malformed route fails at startup rather than on the first request.
"""
