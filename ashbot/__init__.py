"""Markov chain XMPP group chat bot."""
