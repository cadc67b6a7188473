"""
Trading use cases.

Quote ticks, dashboard assembly, leaderboards, position lifecycle
and funded account bookkeeping. Only domain imports here.
"""
