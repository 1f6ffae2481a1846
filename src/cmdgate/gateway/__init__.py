"""Execution Gateway module for cmdgate.

HTTP-facing orchestration of one command per request: parse the body,
screen the command against the denylist, execute it under a hard timeout
and shape a structured response.
"""
