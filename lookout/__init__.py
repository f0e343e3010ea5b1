"""Steam Lookout package for watch-list polling and play-state alerts.

This module group keeps a persisted list of watched Steam profiles, polls
their presence through the Steam Web API on a fixed cadence, diffs each poll
against the previous one, and raises a Windows toast/audio alert when a
watched profile is seen playing the target game. Entry points live in
`lookout.lookout` and `lookout.cli`.
"""
