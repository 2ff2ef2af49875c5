"""
Scoring proxy API.

FastAPI app forwarding task pane scoring requests to the scoring service.
"""
