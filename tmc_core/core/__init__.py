"""
Core engine for dispatching commands.

The `TmcCore` facade validates each request and schedules one command on a
shared worker pool. Commands use the update detector, the merge downloader
and the root locator as needed.
"""
