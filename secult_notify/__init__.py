"""Secult notification service and real-time delivery client.

The server side lives under ``interfaces``/``application``/``infrastructure``;
the push client that keeps a logged-in user's unread state in sync lives in
``secult_notify.client``.
"""
