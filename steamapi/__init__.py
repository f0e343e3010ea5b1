"""Thin Steam Web API client used by Steam Lookout."""
