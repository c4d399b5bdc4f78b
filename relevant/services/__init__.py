"""Services layer for the Relevant dashboard.

Services hold client-side state and orchestrate API calls.
Organized by feature:
- session: authentication state and credential lifecycle
- navigation: routes, guards and history
- query: server-state cache, invalidation and paging
- normalizer: content payload decoding
- content, profile, youtube_oauth, processing: feature services
- interests: built-in interest catalogue
"""
